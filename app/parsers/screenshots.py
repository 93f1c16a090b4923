import logging

from app.parsers.html_utils import load_html
from app.schemas.casino import Screenshot

logger = logging.getLogger(__name__)

SCREENSHOT_IMAGES = ".gallery-image-figure img, .casino-detail-box-screenshots img"


def parse_screenshots(html: str) -> list[Screenshot]:
    """Every gallery image, preferring the lazy-load URL over ``src``."""
    soup = load_html(html)
    screenshots: list[Screenshot] = []
    for img in soup.select(SCREENSHOT_IMAGES):
        url = img.get("data-src") or img.get("src")
        if not url:
            continue
        screenshots.append(Screenshot(url=url, alt_text=img.get("alt") or ""))
    logger.debug("Parsed %d screenshots", len(screenshots))
    return screenshots
