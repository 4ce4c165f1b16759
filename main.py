"""
Old Reddit Vote Automation: Entry Point

Logs in, opens the configured subreddit, picks the Nth non-pinned,
non-promoted post, and upvotes it if its title contains a keyword
(downvotes it otherwise).  Re-running is safe: an existing vote in the
right direction is left alone.

Usage:
    python main.py
    python main.py --config path/to/config.yaml --target-index 3
    python main.py --dry-run
"""

import argparse
import logging
import os
import sys

from playwright.sync_api import sync_playwright

from reddit_vote.auth import authenticate, logout
from reddit_vote.errors import VoteError
from reddit_vote.listing import ListingPage
from reddit_vote.models import OutcomeStatus
from reddit_vote.navigator import open_subreddit
from reddit_vote.pipeline import VoteSettings, confirm_state, run_with_rescans
from reddit_vote.utils import setup_logging, load_config, get_session_path, capture_diagnostics, step_screenshot


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Vote on the Nth eligible post of an old-reddit subreddit"
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to config.yaml (default: ./config.yaml)"
    )
    parser.add_argument(
        "--target-index", "-n",
        type=int,
        default=None,
        help="Which eligible post to act on (overrides target_index)"
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run the browser headless (overrides headless)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Pick and classify the post, but do not click any arrow"
    )
    return parser.parse_args(argv)


def apply_overrides(config: dict, args: argparse.Namespace) -> dict:
    """Fold command-line overrides into the loaded config."""
    if args.target_index is not None:
        if args.target_index < 1:
            raise ValueError(f"--target-index must be >= 1, got: {args.target_index}")
        config["target_index"] = args.target_index
    if args.headless:
        config["headless"] = True
    return config


def vote_on_page(page, config: dict, *, dry_run: bool = False) -> bool:
    """Run the vote pipeline on an open listing page.  Returns True on success."""
    logger = logging.getLogger("reddit_vote")
    board = ListingPage(page)
    settings = VoteSettings.from_config(config)

    run = run_with_rescans(board, settings, max_rescans=config["max_rescans"], dry_run=dry_run)
    if run.outcome is None:
        return True

    step_screenshot(page, f"5_vote_result_{run.outcome.status.value}", config)

    if run.outcome.status is OutcomeStatus.CLICKED:
        page.wait_for_timeout(1000)  # arrow animation
        after = confirm_state(board, run.candidate.stable_id)
        expected = run.decision.target_state
        if after is expected:
            logger.info(f"Step 5.4: Confirmed post is now {after.value}")
        else:
            logger.warning(
                f"Step 5.4: Post shows {after.value if after else 'nothing'} after the click, "
                f"expected {expected.value}"
            )
        step_screenshot(page, f"5_vote_{run.decision.value}", config)

    if run.outcome.succeeded:
        return True
    try:
        run.outcome.raise_for_failure()
    except VoteError as e:
        logger.error(f"Failed to perform vote: {e}")
        capture_diagnostics(page, "error_vote_failed")
    return False


def main(argv=None) -> int:
    args = parse_args(argv)

    # ── Setup ────────────────────────────────────────────────────────
    logger = setup_logging()
    try:
        config = apply_overrides(load_config(args.config), args)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 1

    logger.info("Configuration loaded:")
    logger.info(f"  User:             {config['username']}")
    logger.info(f"  Site:             {config['base_url']}")
    logger.info(f"  Subreddit:        r/{config['subreddit']}")
    logger.info(f"  Target index:     {config['target_index']}")
    logger.info(f"  Keywords:         {config['keywords']}")
    logger.info(f"  Headless:         {config['headless']}")
    if args.dry_run:
        logger.info("  Mode:             dry run")

    # ── Launch browser ───────────────────────────────────────────────
    session_path = get_session_path()
    is_headless = config["headless"]
    ok = False

    with sync_playwright() as p:
        browser = p.chromium.launch(
            headless=is_headless,
            slow_mo=0 if is_headless else config["slow_mo"],
            args=None if is_headless else ["--start-maximized"],
        )
        page = None
        try:
            ctx_opts: dict = {}
            if os.path.exists(session_path):
                logger.info("Loading saved session...")
                ctx_opts["storage_state"] = session_path
            if is_headless:
                ctx_opts["viewport"] = {"width": 1920, "height": 1080}
            else:
                ctx_opts["no_viewport"] = True

            context = browser.new_context(**ctx_opts)

            page = authenticate(context, config)
            open_subreddit(page, config)
            ok = vote_on_page(page, config, dry_run=args.dry_run)

            if config["logout_after"]:
                logout(page, config)

            logger.info("Step 7: Script completed")
        except Exception as e:
            logger.error(f"Run failed: {e}")
            if page is not None:
                capture_diagnostics(page, "run_failed")
            ok = False
        finally:
            logger.info("Closing browser...")
            try:
                browser.close()
            except Exception:
                pass

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
