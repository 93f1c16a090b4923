"""Languages parser.

The languages box has one "language option" per channel (website, support,
live chat). Each option shows its primary flag and points to a popover that
lists every language as a flag plus a name.
"""

import logging

from bs4 import Tag

from app.parsers.html_utils import country_code_from_flag, find_popover, load_html, text_of
from app.schemas.casino import CasinoLanguage, LanguageType

logger = logging.getLogger(__name__)

LANGUAGE_OPTION = ".language-option"
POPOVER_ATTR = "data-popover-content"
LANGUAGE_ROW = ".flex.items-center"
FLAG = '[class*="flag-icon-"]'
PRIMARY_FLAG = ".flag-icon-circle-medium " + FLAG

# Used only when an option has no popover to read names from
PRIMARY_LANGUAGE_NAMES = {
    "gb": "English",
    "fr": "French",
    "de": "German",
    "es": "Spanish",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "cn": "Chinese",
    "jp": "Japanese",
}


def classify_option(middle_text: str) -> LanguageType | None:
    text = middle_text.lower()
    if "website" in text:
        return "website"
    if "support" in text:
        return "support"
    if "live chat" in text:
        return "livechat"
    return None


def parse_languages(html: str) -> list[CasinoLanguage]:
    soup = load_html(html)
    languages: list[CasinoLanguage] = []

    options = soup.select(LANGUAGE_OPTION)
    if not options:
        logger.debug("No language options found")
        return languages

    for option in options:
        middle = text_of(option.select_one(".middle"))
        lang_type = classify_option(middle)
        if lang_type is None:
            continue

        trigger = option.select_one(f"[{POPOVER_ATTR}]")
        popover = find_popover(soup, trigger.get(POPOVER_ATTR) if trigger else None)
        if popover is None:
            primary = _primary_language(option, middle, lang_type)
            if primary is not None:
                languages.append(primary)
            continue

        for row in popover.select(LANGUAGE_ROW):
            code = country_code_from_flag(row.select_one(FLAG))
            if not code:
                continue
            name = text_of(row.select_one('span:not([class*="flag-icon-"])'))
            if not name:
                logger.debug("Skipping %s language row without a name (%s)", lang_type, code)
                continue
            languages.append(CasinoLanguage(name=name, country_code=code, type=lang_type))

    logger.debug("Parsed %d languages", len(languages))
    return languages


def _primary_language(option: Tag, middle: str, lang_type: LanguageType) -> CasinoLanguage | None:
    code = country_code_from_flag(option.select_one(PRIMARY_FLAG))
    if not code:
        return None
    if "english" in middle.lower():
        name = "English"
    else:
        name = PRIMARY_LANGUAGE_NAMES.get(code, "Unknown")
    return CasinoLanguage(name=name, country_code=code, type=lang_type)
