import logging

from app.parsers.html_utils import load_html
from app.schemas.casino import GameProvider, PaymentMethod

logger = logging.getLogger(__name__)

LOGO_ITEM = ".casino-detail-logos-item"

# Lazy-loaded logos keep the real URL here; "src" is often a placeholder
_LAZY_ATTR = "data-src"


def _logo_items(html: str) -> list[tuple[str, str | None]]:
    """(name, logo_url) for every logo item that has an image and a name."""
    soup = load_html(html)
    items: list[tuple[str, str | None]] = []
    for item in soup.select(LOGO_ITEM):
        img = item.find("img")
        if img is None:
            continue
        link = item.find("a")
        name = ((link.get("title") if link else None) or img.get("alt") or "").strip()
        if not name:
            continue
        items.append((name, img.get(_LAZY_ATTR) or None))
    return items


def parse_payment_methods(html: str) -> list[PaymentMethod]:
    methods = [PaymentMethod(name=n, logo_url=u) for n, u in _logo_items(html)]
    logger.debug("Parsed %d payment methods", len(methods))
    return methods


def parse_game_providers(html: str) -> list[GameProvider]:
    providers = [GameProvider(name=n, logo_url=u) for n, u in _logo_items(html)]
    logger.debug("Parsed %d game providers", len(providers))
    return providers
