import copy
import logging
import re

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

ALLOWED_TAGS = frozenset({
    "h1", "h2", "h3", "h4", "a", "img", "p", "ul", "ol", "li",
    "strong", "em", "b", "i", "br",
})

# Attributes kept per tag; everything else is stripped
_ALLOWED_ATTRS = {
    "a": ("href",),
    "img": ("src", "alt"),
}

# Dropped with their content instead of being unwrapped
_DROPPED_TAGS = ("script", "style", "noscript", "template")

_WS_RE = re.compile(r"\s+")
_FLAG_RE = re.compile(r"^flag-icon-([a-z]{2})$", re.IGNORECASE)


def load_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def text_of(tag: Tag | None) -> str:
    """Stripped text of a tag, "" when the tag is missing."""
    if tag is None:
        return ""
    return tag.get_text().strip()


def collapse_ws(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def country_code_from_flag(tag: Tag | None) -> str:
    """Two-letter code of the last ``flag-icon-XX`` class on a flag element.

    Flags may carry stale codes from earlier renders, so the last one wins.
    """
    if tag is None:
        return ""
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    for cls in reversed(classes):
        match = _FLAG_RE.match(cls)
        if match:
            return match.group(1).lower()
    return ""


def sanitize_fragment(html: str, selector: str) -> str:
    """Return the inner HTML of the first `selector` match, reduced to basic tags.

    Attributes are stripped except ``href`` on links and ``src``/``alt`` on
    images. Tags outside the whitelist are unwrapped (replaced by their
    children); script-like tags are dropped with their content. Returns ""
    when nothing matches.
    """
    soup = load_html(html)
    container = soup.select_one(selector)
    if container is None:
        return ""

    content = copy.copy(container)

    for tag in content.find_all(_DROPPED_TAGS):
        tag.decompose()

    for tag in content.find_all(True):
        keep = _ALLOWED_ATTRS.get(tag.name, ())
        tag.attrs = {k: v for k, v in tag.attrs.items() if k in keep}

    for tag in content.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()

    return content.decode_contents()


def find_popover(soup: BeautifulSoup, reference: str | None) -> Tag | None:
    """Resolve a ``#id`` popover reference inside the same fragment."""
    if not reference:
        return None
    target = reference.strip().lstrip("#")
    if not target:
        return None
    return soup.find(id=target)
