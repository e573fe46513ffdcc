import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from playwright.sync_api import sync_playwright

from ..dom.annotate import annotate_page
from ..utils.timing import wait_for_load
from .types import LabeledElement

logger = logging.getLogger(__name__)


class BrowserSession:
    """Live Playwright handles for a single run."""

    def __init__(self, playwright: Any, browser: Any, page: Any):
        self.playwright = playwright
        self.browser = browser
        self.page = page

    def close(self) -> None:
        if self.browser is not None:
            try:
                self.browser.close()
            finally:
                self.browser = None
        if self.playwright is not None:
            try:
                self.playwright.stop()
            finally:
                self.playwright = None
        self.page = None


def launch_browser(headless: bool, viewport: Dict[str, int]) -> BrowserSession:
    logger.info("Launching Chromium (headless=%s, viewport=%s)", headless, viewport)
    p = sync_playwright().start()
    try:
        browser = p.chromium.launch(headless=headless)
        page = browser.new_page(viewport=viewport, device_scale_factor=1)
    except Exception:
        p.stop()
        raise
    logger.info("Agent initialized successfully")
    return BrowserSession(p, browser, page)


def browse_url(page, url: str, timeout_ms: int) -> None:
    logger.info("Browsing URL: %s", url)
    page.goto(url, wait_until="domcontentloaded")
    wait_for_load(page, timeout_ms)


def capture(page, path: Union[str, Path]) -> List[LabeledElement]:
    """Annotate interactive elements, then screenshot the viewport to ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    elements = annotate_page(page)
    page.screenshot(path=str(path))
    logger.info("Screenshot saved to %s", path)
    return elements
