"""Tests for the DOM helpers shared by the field parsers."""

from app.parsers.html_utils import country_code_from_flag, find_popover, load_html, sanitize_fragment


NESTED = (
    '<div class="x"><script>evil</script>'
    '<p class="y">Hi <a href="/a" target="_blank">link</a></p></div>'
)


def test_sanitize_strips_attributes_and_scripts():
    assert sanitize_fragment(NESTED, "div") == '<p>Hi <a href="/a">link</a></p>'


def test_sanitize_is_idempotent():
    once = sanitize_fragment(NESTED, "div")
    twice = sanitize_fragment(f"<div>{once}</div>", "div")
    assert twice == once


def test_sanitize_unwraps_tags_outside_whitelist():
    html = '<section><div><span>Plain <em>text</em></span></div><img src="a.png" alt="A" width="10"></section>'
    assert sanitize_fragment(html, "section") == 'Plain <em>text</em><img src="a.png" alt="A"/>'


def test_sanitize_missing_container_returns_empty():
    assert sanitize_fragment("<p>Hi</p>", ".missing") == ""


def test_flag_code_last_match_wins():
    tag = load_html('<i class="flag-icon flag-icon-gb flag-icon-squared flag-icon-de"></i>').i
    assert country_code_from_flag(tag) == "de"


def test_flag_code_without_flag_class():
    tag = load_html('<i class="flag-icon flag-icon-squared"></i>').i
    assert country_code_from_flag(tag) == ""
    assert country_code_from_flag(None) == ""


def test_find_popover_by_reference():
    soup = load_html('<div id="popover-x">content</div>')
    assert find_popover(soup, "#popover-x").get_text() == "content"
    assert find_popover(soup, "#nope") is None
    assert find_popover(soup, None) is None
