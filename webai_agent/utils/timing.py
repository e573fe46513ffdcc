import logging
import time

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

logger = logging.getLogger(__name__)


def sleep(ms: int) -> None:
    time.sleep(max(ms, 0) / 1000)


def wait_for_load(page, timeout_ms: int) -> bool:
    """Race the page load state against a timer. Never raises on timeout."""
    try:
        page.wait_for_load_state("load", timeout=timeout_ms)
        return True
    except PlaywrightTimeoutError:
        logger.info("Page did not finish loading within %dms; continuing.", timeout_ms)
        return False
