"""
Authentication module: cookie banner, login/logout and session persistence.
"""

import os
import logging
from playwright.sync_api import Page, BrowserContext, TimeoutError as PlaywrightTimeout

from reddit_vote.utils import get_session_path, capture_diagnostics, step_screenshot

logger = logging.getLogger("reddit_vote")

WAIT_STRATEGY = "domcontentloaded"
NAV_TIMEOUT = 60_000
LOGIN_TIMEOUT = 30_000

_COOKIE_BANNER = "#eu-cookie-policy"
_COOKIE_ACCEPT = "#eu-cookie-policy .infobar-btn-container > button"
_LOGIN_LINK = "#header-bottom-right a.login-required.login-link"
_LOGOUT_LINK = "#header-bottom-right form.logout a"
_USER_LINK = "#header-bottom-right span.user > a"
# The login page is a web-component form; Playwright CSS pierces its shadow roots.
_USERNAME_INPUT = "#login-username input"
_PASSWORD_INPUT = "#login-password input"
_LOGIN_SUBMIT = "#login button.login"


def dismiss_cookie_banner(page: Page, timeout: int = 5_000) -> bool:
    """Accept the EU cookie bar if it shows up.  Returns True if it was clicked."""
    try:
        page.wait_for_selector(_COOKIE_BANNER, state="visible", timeout=timeout)
    except PlaywrightTimeout:
        logger.debug("  No cookie banner shown")
        return False
    page.locator(_COOKIE_ACCEPT).first.click()
    logger.info("Step 2: Cookies Policy Accepted")
    return True


def _wait_for_user_link(page: Page) -> bool:
    try:
        page.wait_for_selector(_USER_LINK, state="visible", timeout=LOGIN_TIMEOUT)
        return True
    except PlaywrightTimeout:
        return False


def logged_in_user(page: Page) -> str | None:
    """Username shown in the old-reddit header, or None when logged out."""
    user_link = page.locator(_USER_LINK).first
    try:
        if user_link.count() == 0 or page.locator(_LOGIN_LINK).count() > 0:
            return None
        return user_link.inner_text().strip() or None
    except Exception as e:
        logger.debug(f"  Could not read header user: {e}")
        return None


def is_session_valid(context: BrowserContext, base_url: str, username: str) -> bool:
    """Check whether the saved session still shows `username` in the header."""
    if not os.path.exists(get_session_path()):
        logger.info("No saved session found.")
        return False

    page = context.pages[0] if context.pages else context.new_page()
    logger.info("Checking if saved session is still valid...")
    try:
        page.goto(base_url, wait_until=WAIT_STRATEGY, timeout=NAV_TIMEOUT)
        current = logged_in_user(page)
    except Exception as e:
        logger.warning(f"Session check failed: {e}")
        return False

    if current and current.lower() == username.lower():
        logger.info(f"Session is valid — logged in as {current}")
        return True
    logger.info(f"Session expired (header user: {current!r})")
    return False


def login(page: Page, config: dict) -> None:
    """Log in through the header login link and wait for the header to show the user."""
    base_url = config["base_url"]
    username = config["username"]

    logger.info(f"Step 1: Opening {base_url}")
    page.goto(base_url, wait_until=WAIT_STRATEGY, timeout=NAV_TIMEOUT)
    step_screenshot(page, "1_opened_homepage", config)
    dismiss_cookie_banner(page)

    page.wait_for_selector(_LOGIN_LINK, state="visible", timeout=LOGIN_TIMEOUT)
    page.locator(_LOGIN_LINK).first.click()
    logger.info("Step 3.1: Clicked Login link")

    user_input = page.locator(_USERNAME_INPUT).first
    user_input.wait_for(state="visible", timeout=LOGIN_TIMEOUT)
    user_input.fill(config["email"])
    logger.info("Step 3.2: Entered email/username")

    pass_input = page.locator(_PASSWORD_INPUT).first
    pass_input.wait_for(state="visible", timeout=LOGIN_TIMEOUT)
    pass_input.fill(config["password"])
    logger.info("Step 3.3: Entered password")
    step_screenshot(page, "3_credentials_entered", config)

    submit = page.locator(_LOGIN_SUBMIT).first
    submit.wait_for(state="visible", timeout=LOGIN_TIMEOUT)
    page.wait_for_timeout(1000)  # the button enables only after both fields validate
    submit.click()
    logger.info("Step 3.4: Submitted login form")

    # The login form lives under base_url/login too, so only the header user
    # link proves the login went through.
    if not _wait_for_user_link(page):
        logger.debug("  Header user not shown after login, reopening the home page")
        page.goto(base_url, wait_until=WAIT_STRATEGY, timeout=NAV_TIMEOUT)
        _wait_for_user_link(page)

    current = logged_in_user(page)
    if not current or current.lower() != username.lower():
        capture_diagnostics(page, "login_failed")
        raise RuntimeError(
            f"Login failed — header shows {current!r}, expected {username!r}."
        )
    logger.info(f"Step 3.5: Logged in as {current}")
    step_screenshot(page, "3_logged_in", config)


def save_session(context: BrowserContext, username: str) -> str:
    """Persist the logged-in reddit cookies so the next run skips the login form."""
    session_path = get_session_path()
    context.storage_state(path=session_path)
    logger.info(f"Session for u/{username} saved to: {session_path}")
    return session_path


def authenticate(context: BrowserContext, config: dict) -> Page:
    """
    Full auth flow:
    - Try to restore saved session
    - If expired, perform a fresh login
    - Save session for future runs
    Returns the authenticated page.
    """
    if is_session_valid(context, config["base_url"], config["username"]):
        page = context.pages[0]
        dismiss_cookie_banner(page, timeout=2_000)
        return page

    for p in context.pages:
        p.close()
    page = context.new_page()
    login(page, config)
    save_session(context, config["username"])
    return page


def logout(page: Page, config: dict) -> None:
    """Click the header logout link and wait for the login link to come back."""
    page.wait_for_selector(_LOGOUT_LINK, state="visible", timeout=LOGIN_TIMEOUT)
    page.locator(_LOGOUT_LINK).first.click()
    logger.info("Step 6.1: Logout clicked")
    page.wait_for_selector(_LOGIN_LINK, state="visible", timeout=LOGIN_TIMEOUT)
    logger.info("Step 6.2: Logout completed (login link detected)")
    step_screenshot(page, "6_logout_completed", config)

    # The saved session is dead after a logout.
    session_path = get_session_path()
    if os.path.exists(session_path):
        os.remove(session_path)
        logger.debug(f"  Removed stale session file: {session_path}")
