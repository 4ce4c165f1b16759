"""
Navigator module: get from the old-reddit home page to the target subreddit.

Searches for the subreddit the way a user would, opens the first subreddit
result and verifies the URL.  Falls back to the direct /r/<name>/ URL when
the search results don't render.
"""

import logging
from urllib.parse import urlparse
from playwright.sync_api import Page, TimeoutError as PlaywrightTimeout

from reddit_vote.utils import capture_diagnostics, step_screenshot

logger = logging.getLogger("reddit_vote")

WAIT_STRATEGY = "domcontentloaded"
NAV_TIMEOUT = 60_000
SEARCH_TIMEOUT = 10_000

_SEARCH_INPUT = "#search input[name='q']"
_SEARCH_SUBMIT = "#search input[type='submit']"
# First subreddit card on the search results page
_SUBREDDIT_RESULT = "div.search-result-subreddit header a.search-title, div.search-result-subreddit header a"
_LISTING_READY = "div.content div.thing"


def subreddit_url(base_url: str, subreddit: str) -> str:
    return f"{base_url.rstrip('/')}/r/{subreddit.strip('/')}/"


def is_on_subreddit(url: str, subreddit: str) -> bool:
    """True when `url` points at /r/<subreddit>/ (case-insensitive)."""
    path = urlparse(url).path.lower()
    return path.startswith(f"/r/{subreddit.strip('/').lower()}/") or \
        path.rstrip("/") == f"/r/{subreddit.strip('/').lower()}"


def _wait_for_listing(page: Page, timeout: int = NAV_TIMEOUT) -> None:
    page.wait_for_selector(_LISTING_READY, state="attached", timeout=timeout)
    logger.debug("  Listing things attached")


def search_subreddit(page: Page, subreddit: str) -> bool:
    """Type the subreddit into the header search and open the first subreddit hit."""
    try:
        page.wait_for_selector(_SEARCH_INPUT, state="visible", timeout=SEARCH_TIMEOUT)
    except PlaywrightTimeout:
        logger.warning("Search bar not found.")
        return False
    page.locator(_SEARCH_INPUT).first.fill(subreddit)
    page.locator(_SEARCH_SUBMIT).first.click()
    logger.info(f"Step 4.1: Searched for '{subreddit}'")

    result = page.locator(_SUBREDDIT_RESULT).first
    try:
        result.wait_for(state="visible", timeout=SEARCH_TIMEOUT)
    except PlaywrightTimeout:
        logger.warning(f"No subreddit result for '{subreddit}'.")
        capture_diagnostics(page, "subreddit_search_no_result")
        return False
    result.click()
    page.wait_for_load_state(WAIT_STRATEGY, timeout=NAV_TIMEOUT)
    logger.info("Step 4.2: Opened first subreddit result")
    return True


def open_subreddit(page: Page, config: dict) -> None:
    """Navigate to the configured subreddit and wait for its listing."""
    subreddit = config["subreddit"]

    if not search_subreddit(page, subreddit) or not is_on_subreddit(page.url, subreddit):
        target = subreddit_url(config["base_url"], subreddit)
        logger.info(f"Falling back to direct navigation: {target}")
        page.goto(target, wait_until=WAIT_STRATEGY, timeout=NAV_TIMEOUT)

    _wait_for_listing(page)

    if not is_on_subreddit(page.url, subreddit):
        capture_diagnostics(page, "subreddit_url_mismatch")
        raise RuntimeError(
            f"URL verification failed: expected /r/{subreddit}/, got {page.url}"
        )
    logger.info(f"Step 4.3: URL verified as {page.url}")
    step_screenshot(page, f"4_subreddit_{subreddit}", config)
