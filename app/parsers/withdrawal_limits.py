import logging

from app.parsers.html_utils import load_html, text_of
from app.schemas.casino import WithdrawalLimits

logger = logging.getLogger(__name__)

SECTION = "info-col-section"
SECTION_HEADER = ".info-col-section-header"
LIMIT_BLOCK = ".mr-m"
PERIOD = ".fs-xs"
VALUE = ".neo-fs-20"


def parse_withdrawal_limits(html: str) -> WithdrawalLimits:
    """Per-day/week/month limits from the "Withdrawal limits" section."""
    result = WithdrawalLimits()
    soup = load_html(html)

    header = next(
        (h for h in soup.select(SECTION_HEADER) if "withdrawal limits" in h.get_text().lower()),
        None,
    )
    if header is None:
        return result

    section = header.find_parent(class_=SECTION)
    if section is None:
        return result

    for block in section.select(LIMIT_BLOCK):
        if not block.get_text().strip():
            continue
        period_el = block.select_one(PERIOD)
        value_el = block.select_one(VALUE)
        if period_el is None or value_el is None:
            continue

        period = text_of(period_el).lower()
        value = text_of(value_el)
        if "per day" in period:
            result.per_day = value
        elif "per week" in period:
            result.per_week = value
        elif "per month" in period:
            result.per_month = value

    logger.debug("Parsed withdrawal limits: %s", result.model_dump())
    return result
