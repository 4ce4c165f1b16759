"""
Utility functions: config loading, logging setup, and diagnostics.
"""

import os
import re
import logging
import yaml
from datetime import datetime
from dotenv import load_dotenv


ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
LOG_DIR = os.path.join(ROOT_DIR, "logs")
SCREENSHOT_DIR = os.path.join(LOG_DIR, "screenshots")
HTMLDUMP_DIR   = os.path.join(LOG_DIR, "htmldumps")

# Credentials are read from the environment (.env) and win over config.yaml.
CREDENTIAL_ENV = {"email": "EMAIL", "password": "PASSWORD", "username": "USERNAME"}


def setup_logging(log_dir: str = None) -> logging.Logger:
    """
    Configure the "reddit_vote" logger: INFO to the console, DEBUG to
    logs/vote_<timestamp>.log.  Safe to call twice; handlers are added once.
    """
    logger = logging.getLogger("reddit_vote")
    logger.setLevel(logging.DEBUG)
    if logger.handlers:
        return logger

    log_dir = log_dir or LOG_DIR
    os.makedirs(log_dir, exist_ok=True)
    started = datetime.now()
    log_file = os.path.join(log_dir, f"vote_{started.strftime('%Y%m%d_%H%M%S')}.log")

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)-8s %(message)s", datefmt="%H:%M:%S"))

    run_file = logging.FileHandler(log_file, encoding="utf-8")
    run_file.setLevel(logging.DEBUG)
    run_file.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)-8s %(module)s: %(message)s"))

    logger.addHandler(console)
    logger.addHandler(run_file)

    logger.info(f"reddit-vote run started {started:%Y-%m-%d %H:%M:%S}, log file: {log_file}")
    return logger



def load_config(config_path: str = None, env_file: str = None) -> dict:
    """
    Load config.yaml, merge credentials from the environment, apply defaults.

    A missing config.yaml is fine as long as the credentials come from the
    environment; an explicitly passed path must exist.
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = os.path.join(ROOT_DIR, "config.yaml")

    config = {}
    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    elif explicit:
        raise FileNotFoundError(f"Config file not found: {config_path}")

    if not isinstance(config, dict):
        raise ValueError(f"Config file must hold a mapping, got: {type(config).__name__}")

    load_dotenv(env_file)
    for key, env_name in CREDENTIAL_ENV.items():
        value = os.environ.get(env_name)
        if value:
            config[key] = value

    missing = [k for k in CREDENTIAL_ENV if not config.get(k)]
    if missing:
        raise ValueError(
            f"Missing credentials: {', '.join(missing)}. "
            f"Set {', '.join(CREDENTIAL_ENV[k] for k in missing)} in .env or config.yaml"
        )

    config.setdefault("base_url", "https://old.reddit.com")
    config.setdefault("subreddit", "gaming")

    # Which eligible post to act on
    idx = config.setdefault("target_index", 2)
    if isinstance(idx, bool) or not isinstance(idx, int) or idx < 1:
        raise ValueError(f"target_index must be int >= 1, got: {idx!r}")

    keywords = config.setdefault("keywords", ["nintendo"])
    if isinstance(keywords, str):
        keywords = config["keywords"] = [keywords]
    if (not isinstance(keywords, list) or not keywords
            or not all(isinstance(k, str) and k.strip() for k in keywords)):
        raise ValueError(f"keywords must be a non-empty list of strings, got: {keywords!r}")

    rescans = config.setdefault("max_rescans", 1)
    if isinstance(rescans, bool) or not isinstance(rescans, int) or rescans < 0:
        raise ValueError(f"max_rescans must be int >= 0, got: {rescans!r}")

    # Browser
    config.setdefault("headless", False)
    config.setdefault("slow_mo", 250)
    config.setdefault("step_screenshots", True)
    config.setdefault("logout_after", True)

    return config


# ── Diagnostics ──────────────────────────────────────────────────────────

def capture_diagnostics(page, label: str = "error") -> str | None:
    """
    Capture maximum diagnostic data even when the page is broken.

    Chain:
      1. Always log page.url and page.title()
      2. page.screenshot() with a hard 5s timeout
      3. On failure → page.content() → save as .html dump

    Returns the file path of the saved screenshot or HTML dump, or None.
    """
    logger = logging.getLogger("reddit_vote")
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    safe_label = re.sub(r"[^\w\-]", "_", label)[:80]

    try:
        current_url = page.url
    except Exception:
        current_url = "<unavailable>"
    try:
        current_title = page.title()
    except Exception:
        current_title = "<unavailable>"
    logger.debug(f"[diag] url={current_url}  title={current_title}")

    try:
        os.makedirs(SCREENSHOT_DIR, exist_ok=True)
        filepath = os.path.join(SCREENSHOT_DIR, f"{timestamp}_{safe_label}.png")
        page.screenshot(path=filepath, full_page=False, timeout=5_000)
        logger.info(f"📸 Screenshot saved: {filepath}")
        return filepath
    except Exception as ss_err:
        logger.debug(f"Screenshot failed ({ss_err}) — falling back to HTML dump")

    try:
        os.makedirs(HTMLDUMP_DIR, exist_ok=True)
        html_filepath = os.path.join(HTMLDUMP_DIR, f"{timestamp}_{safe_label}.html")
        html_content = page.content()
        with open(html_filepath, "w", encoding="utf-8") as f:
            f.write(html_content)
        logger.info(f"📄 HTML dump saved: {html_filepath}")
        return html_filepath
    except Exception as html_err:
        logger.warning(f"HTML dump also failed: {html_err}")
        return None


def step_screenshot(page, label: str, config: dict) -> str | None:
    """Screenshot after a flow step, when step_screenshots is enabled."""
    if not config.get("step_screenshots", True):
        return None
    return capture_diagnostics(page, label)


def get_session_path() -> str:
    """Return the path to the session storage file."""
    return os.path.join(ROOT_DIR, "session.json")
