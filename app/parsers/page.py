"""Full-page casino parser.

Runs a single pass over one review page: validates the page shape, reads the
scalar facts directly, and hands each scoped fragment to its field parser.
Every optional step degrades to an empty value; only a page without a usable
name fails.
"""

import logging
import re

from bs4 import BeautifulSoup

from app.exceptions.custom import (
    InvalidPageStructureError,
    MissingRequiredFieldError,
    PageParseError,
)
from app.parsers.bonuses import parse_deposit_bonus, parse_no_deposit_bonus
from app.parsers.html_utils import (
    country_code_from_flag,
    load_html,
    sanitize_fragment,
    text_of,
)
from app.parsers.languages import parse_languages
from app.parsers.logos import parse_game_providers, parse_payment_methods
from app.parsers.profiles import SelectorProfile, resolve_profile
from app.parsers.screenshots import parse_screenshots
from app.parsers.withdrawal_limits import parse_withdrawal_limits
from app.schemas.casino import Bonuses, Features, License, ParsedCasino

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"\s*([+-]?\d+(?:\.\d+)?)")
_INT_RE = re.compile(r"\s*([+-]?\d+)")


def parse_page(html: str, url: str) -> ParsedCasino:
    """Parse one casino review page.

    Raises InvalidPageStructureError when the page has neither a logo nor an
    ``h1``, MissingRequiredFieldError when no name can be derived, and
    PageParseError for anything else that goes wrong inside the pipeline.
    """
    try:
        return _parse(html, url, resolve_profile(url))
    except PageParseError:
        raise
    except Exception as exc:
        logger.exception("Unexpected error parsing %s", url)
        raise PageParseError(f"Error parsing casino page: {exc}", url=url) from exc


def _parse(html: str, url: str, profile: SelectorProfile) -> ParsedCasino:
    soup = load_html(html)

    if soup.select_one(profile.logo) is None and soup.find("h1") is None:
        raise InvalidPageStructureError(
            "Page doesn't appear to be a valid casino page", url=url
        )

    name = extract_name(soup, profile)
    if not name:
        raise MissingRequiredFieldError("name", url=url)

    logo = soup.select_one(profile.logo)
    logo_url = (logo.get("src") or logo.get("data-src")) if logo is not None else None

    description = " ".join(
        t for t in (el.get_text(" ", strip=True) for el in soup.select(profile.description)) if t
    )

    info = extract_info(soup, profile)

    casino = ParsedCasino(
        name=name,
        logo_url=logo_url or None,
        rating=parse_rating(text_of(soup.select_one(profile.rating))),
        description=description or None,
        description_html=sanitize_fragment(html, profile.description_html) or None,
        owner=info["owner"],
        operator=info["operator"],
        established=info["established"],
        estimated_revenue=info["revenue"],
        withdrawal_limits=extract_withdrawal_text(soup, profile),
        withdrawal_limits_structured=parse_withdrawal_limits(
            _fragment(soup, profile.withdrawal_limits)
        ),
        features=extract_features(soup, profile),
        payment_methods=parse_payment_methods(_fragment(soup, profile.payment_methods)),
        licenses=extract_licenses(soup, profile),
        game_types=[t for t in (text_of(li) for li in soup.select(profile.game_types)) if t],
        game_providers=parse_game_providers(_fragment(soup, profile.game_providers)),
        bonuses=extract_bonuses(soup, profile),
        screenshots=parse_screenshots(_fragment(soup, profile.screenshots)),
        languages=parse_languages(_languages_fragment(soup, profile)),
        data_casino_id=extract_casino_id(soup, profile),
    )
    logger.info(
        "Parsed %s from %s (%d payment methods, %d providers, %d languages)",
        casino.name, url, len(casino.payment_methods),
        len(casino.game_providers), len(casino.languages),
    )
    return casino


def _fragment(soup: BeautifulSoup, selector: str) -> str:
    """Outer HTML of the first match, "" when the container is absent."""
    el = soup.select_one(selector)
    return str(el) if el is not None else ""


def _languages_fragment(soup: BeautifulSoup, profile: SelectorProfile) -> str:
    fragment = _fragment(soup, profile.languages)
    if fragment:
        return fragment
    options = soup.select(profile.language_option)
    if not options:
        return ""
    logger.debug("No languages box, wrapping %d loose language options", len(options))
    return "<div>" + "".join(str(o) for o in options) + "</div>"


def extract_name(soup: BeautifulSoup, profile: SelectorProfile) -> str:
    """Logo alt text, then the first heading, then the page title."""
    logo = soup.select_one(profile.logo)
    alt = (logo.get("alt") or "").strip() if logo is not None else ""
    if alt:
        return alt.removesuffix(" Logo").strip()

    heading = text_of(soup.select_one(profile.heading) or soup.find("h1"))
    if heading:
        return heading

    title = text_of(soup.find("title"))
    return title.split(" - ")[0].strip()


def parse_rating(text: str) -> float | None:
    """Leading number of a rating text; decimal commas are accepted."""
    if not text:
        return None
    match = _NUMBER_RE.match(text.replace(",", ".", 1))
    if not match:
        return None
    return float(match.group(1))


def parse_year(text: str) -> int | None:
    match = _INT_RE.match(text or "")
    if not match:
        return None
    return int(match.group(1)) or None


def extract_info(soup: BeautifulSoup, profile: SelectorProfile) -> dict:
    """Owner, operator, established year and revenue from the info box.

    The labeled-pair layout is tried first; the legacy table is read only
    when that yields none of owner/operator/established.
    """
    info: dict = {"owner": None, "operator": None, "established": None, "revenue": None}
    sel = profile.info

    for row in soup.select(sel.rows):
        _assign_info(info, text_of(row.select_one(sel.label)), text_of(row.select_one(sel.value)))

    if not (info["owner"] or info["operator"] or info["established"]):
        for row in soup.select(sel.legacy_rows):
            _assign_info(info, text_of(row.find("th")), text_of(row.find("td")))

    return info


def _assign_info(info: dict, label: str, value: str) -> None:
    label = label.lower()
    if "owner" in label:
        info["owner"] = value or None
    elif "operator" in label:
        info["operator"] = value or None
    elif "established" in label or "founded" in label:
        info["established"] = parse_year(value)
    elif "revenue" in label:
        info["revenue"] = value or None


def extract_withdrawal_text(soup: BeautifulSoup, profile: SelectorProfile) -> str | None:
    sel = profile.info
    for section in soup.select(sel.sections):
        header = text_of(section.select_one(sel.section_header))
        if "withdrawal limits" in header.lower():
            parts = [text_of(el) for el in section.select(sel.withdrawal_text)]
            return " ".join(p for p in parts if p) or None
    return None


def extract_features(soup: BeautifulSoup, profile: SelectorProfile) -> Features:
    sel = profile.features
    headings = soup.select(sel.heading)

    def items_after(label: str) -> list[str]:
        for heading in headings:
            if label in heading.get_text():
                container = heading.find_next_sibling()
                if container is None:
                    return []
                return [t for t in (text_of(li) for li in container.select(sel.item)) if t]
        return []

    return Features(
        positive=items_after(sel.positive_label),
        negative=items_after(sel.negative_label),
        interesting=items_after(sel.interesting_label),
    )


def extract_licenses(soup: BeautifulSoup, profile: SelectorProfile) -> list[License]:
    sel = profile.licenses
    licenses: list[License] = []
    for item in soup.select(sel.item):
        name = text_of(item.select_one(sel.name))
        if not name:
            continue
        code = country_code_from_flag(item.select_one(sel.flag))
        licenses.append(License(name=name, country_code=code or None))
    return licenses


def extract_bonuses(soup: BeautifulSoup, profile: SelectorProfile) -> Bonuses:
    bonuses = Bonuses()

    no_deposit = parse_no_deposit_bonus(_fragment(soup, profile.no_deposit_bonus))
    if no_deposit.name:
        bonuses.no_deposit = no_deposit

    deposit = parse_deposit_bonus(_fragment(soup, profile.deposit_bonus))
    if deposit.name:
        bonuses.deposit = deposit

    return bonuses


def extract_casino_id(soup: BeautifulSoup, profile: SelectorProfile) -> str | None:
    root = soup.select_one(profile.casino_id_root)
    if root is None:
        return None
    return root.get(profile.casino_id_attr) or None
