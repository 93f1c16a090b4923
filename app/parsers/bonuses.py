"""Bonus card parsers.

A bonus card holds a name, an optional secondary name and a reference
(``data-popover-content="#popover-..."``) to a hidden popover listing the
bonus conditions. Each condition line carries an SVG ``<use>`` icon whose
href tells what the line describes.
"""

import logging

from bs4 import BeautifulSoup, Tag

from app.parsers.html_utils import collapse_ws, find_popover, load_html, text_of
from app.schemas.casino import DepositBonus, NoDepositBonus

logger = logging.getLogger(__name__)

POPOVER_ATTR = "data-popover-content"
CONDITION_LINE = ".bonus-conditions-line"

ICON_SUBTYPE = "#base_category_ico_bonuses"
ICON_WAGERING = "#bonus_ico_wagering_requirements"
ICON_CASHOUT = "#bonus_ico_maximum_cashout"
ICON_MAX_BET = "#bonus_ico_maximal_bet"
ICON_EXPIRATION = "#bonus_ico_spins_per_day"
ICON_STOP_WATCH = "#bonus_ico_stop_watch"
ICON_FREE_SPINS = "#bonus_ico_freespins"
ICON_FREE_SPINS_CONDITIONS = "#bonus_ico_expiration_freespins_1"
ICON_INFO = "#base_ui_ico_info"

FAST_MARKER = "FAST"


def parse_no_deposit_bonus(html: str) -> NoDepositBonus:
    bonus = NoDepositBonus()
    _parse_card(load_html(html), bonus)
    return bonus


def parse_deposit_bonus(html: str) -> DepositBonus:
    bonus = DepositBonus()
    _parse_card(load_html(html), bonus)
    return bonus


def icon_of(line: Tag) -> str | None:
    use = line.find("use")
    if use is None:
        return None
    return use.get("xlink:href") or use.get("href")


def _parse_card(soup: BeautifulSoup, bonus: NoDepositBonus) -> None:
    bonus.name = text_of(soup.select_one(".bonus-name-1"))
    bonus.name_2 = text_of(soup.select_one(".bonus-name-2"))

    trigger = soup.select_one(f"[{POPOVER_ATTR}]")
    popover = find_popover(soup, trigger.get(POPOVER_ATTR) if trigger else None)
    if popover is None:
        logger.debug("Bonus %r has no popover content", bonus.name)
        return

    for line in popover.select(CONDITION_LINE):
        icon = icon_of(line)
        content = line.find("div")
        if icon is None or content is None or not content.get_text().strip():
            continue
        _apply_line(bonus, icon, content)


def _labeled_value(span: Tag, label: str) -> str:
    """Value of a "Label: <strong>value</strong>" span."""
    strong = span.find("strong")
    if strong is not None:
        return text_of(strong)
    return span.get_text().replace(label, "", 1).strip()


def _find_span(content: Tag, label: str) -> Tag | None:
    for span in content.find_all("span"):
        if label in span.get_text():
            return span
    return None


def _apply_line(bonus: NoDepositBonus, icon: str, content: Tag) -> None:
    if icon == ICON_SUBTYPE:
        bonus.subtype = text_of(content)

    elif icon == ICON_WAGERING:
        span = _find_span(content, "Wagering requirements:")
        if span is not None:
            bonus.wagering_requirements = _labeled_value(span, "Wagering requirements:")
        else:
            bonus.wagering_requirements = (
                text_of(content).replace("Wagering requirements:", "", 1).strip()
            )

    elif icon == ICON_CASHOUT:
        for span in content.find_all("span"):
            text = span.get_text()
            if "Minimum deposit:" in text and isinstance(bonus, DepositBonus):
                bonus.min_deposit = _labeled_value(span, "Minimum deposit:")
            elif "Maximum cashout:" in text:
                bonus.max_cashout = _labeled_value(span, "Maximum cashout:")
            elif "Maximum bet:" in text:
                bonus.max_bet = _labeled_value(span, "Maximum bet:")

    elif icon == ICON_MAX_BET:
        span = _find_span(content, "Maximum bet:")
        if span is not None:
            bonus.max_bet = _labeled_value(span, "Maximum bet:")

    elif icon == ICON_EXPIRATION:
        span = _find_span(content, "Bonus expiration:")
        if span is not None:
            bonus.bonus_expiration = _labeled_value(span, "Bonus expiration:")

    elif icon == ICON_STOP_WATCH:
        if FAST_MARKER in content.get_text():
            bonus.process_speed = "Fast"
        span = _find_span(content, "Bonus expiration:")
        if span is not None:
            bonus.bonus_expiration = _labeled_value(span, "Bonus expiration:")

    elif icon == ICON_FREE_SPINS:
        span = _find_span(content, "Free spins:")
        if span is not None:
            bonus.free_spins_value = span.get_text().replace("Free spins:", "", 1).strip()

    elif icon == ICON_FREE_SPINS_CONDITIONS:
        span = _find_span(content, "Free spins conditions:")
        if span is not None:
            parts = [text_of(s) for s in span.find_all("strong")]
            bonus.free_spins_conditions = ", ".join(p for p in parts if p)

    elif icon == ICON_INFO:
        bonus.other_info = collapse_ws(content.get_text())

    else:
        logger.debug("Ignoring bonus line with unknown icon %s", icon)
