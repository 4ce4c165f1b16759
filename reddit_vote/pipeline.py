"""
Vote pipeline: scanner → classifier → reconciler against one listing.

`board` is the page collaborator (listing.ListingPage in production, a fake
in tests) and must provide snapshot(), inspect() and activate().
"""

import logging
from dataclasses import dataclass

from reddit_vote.classifier import DEFAULT_KEYWORDS, ActionClassifier
from reddit_vote.errors import InvalidArgument
from reddit_vote.models import (
    CandidateItem,
    DesiredAction,
    ExternalVoteState,
    OutcomeStatus,
    ReconciliationOutcome,
)
from reddit_vote.reconciler import read_state, reconcile
from reddit_vote.scanner import require_nth_eligible

logger = logging.getLogger("reddit_vote")


@dataclass(frozen=True)
class VoteSettings:
    """
    target_index: which eligible post to act on (1 = first real post)
    keywords:     title terms that trigger an upvote
    """

    target_index: int = 2
    keywords: tuple = DEFAULT_KEYWORDS

    @classmethod
    def from_config(cls, config: dict) -> "VoteSettings":
        return cls(
            target_index=config.get("target_index", 2),
            keywords=tuple(config.get("keywords") or DEFAULT_KEYWORDS),
        )


@dataclass(frozen=True)
class VoteRun:
    candidate: CandidateItem
    decision: DesiredAction
    outcome: ReconciliationOutcome | None  # None on a dry run


def run_vote(board, settings: VoteSettings, *, dry_run: bool = False) -> VoteRun:
    """
    Pick the target post, decide, and reconcile its vote once.

    Raises InvalidArgument for a bad index/keyword set and CandidateNotFound
    when the listing has too few eligible posts.  Reconciliation failures are
    returned in `VoteRun.outcome`, not raised.
    """
    classifier = ActionClassifier(settings.keywords)

    candidate = require_nth_eligible(board.snapshot(), settings.target_index)
    decision = classifier.classify(candidate.title)

    logger.info(f"Step 5.1: Target eligible post (#{settings.target_index}):")
    logger.info(f"  - Title: {candidate.title}")
    if candidate.permalink:
        logger.info(f"  - Link:  {candidate.permalink}")
    hits = classifier.matched_keywords(candidate.title)
    logger.info(f"  Decision: {decision.value}" + (f" (matched {hits})" if hits else ""))

    if dry_run:
        logger.info("Dry run — not touching the vote arrows.")
        return VoteRun(candidate, decision, None)

    outcome = reconcile(board, candidate.stable_id, decision)
    _log_outcome(outcome, decision)
    return VoteRun(candidate, decision, outcome)


def run_with_rescans(board, settings: VoteSettings, *, max_rescans: int = 1,
                     dry_run: bool = False) -> VoteRun:
    """
    run_vote(), repeated with a fresh scan while the post vanishes (NOT_FOUND).

    Missing arrows are a layout problem, so CONTROL_NOT_FOUND is returned
    straight away.  Repeats are safe: an already-applied vote comes back as
    ALREADY_SELECTED.
    """
    run = run_vote(board, settings, dry_run=dry_run)
    attempt = 0
    while (run.outcome is not None
           and run.outcome.status is OutcomeStatus.NOT_FOUND
           and attempt < max_rescans):
        attempt += 1
        logger.warning(f"Post vanished before voting — rescanning ({attempt}/{max_rescans})...")
        run = run_vote(board, settings, dry_run=dry_run)
    return run


def _log_outcome(outcome: ReconciliationOutcome, decision: DesiredAction) -> None:
    sid = outcome.stable_id
    status = outcome.status
    logger.info(f"Step 5.2: Voting result for {sid}: {status.value}")
    if status is OutcomeStatus.ALREADY_SELECTED:
        logger.info(f"Step 5.3: {decision.value} already selected for post {sid}")
    elif status is OutcomeStatus.CLICKED:
        logger.info(
            f"Step 5.3: Performed {decision.value} on post {sid} "
            f"(previously {outcome.state.value})"
        )
    elif status is OutcomeStatus.NOT_FOUND:
        logger.error(f"Step 5.3: Post {sid} no longer found on the page.")
    else:
        logger.error(
            f"Step 5.3: Vote arrows missing on {sid}: "
            f"Up={outcome.positive_found}, Down={outcome.negative_found}"
        )
        if outcome.html:
            logger.debug(f"  Debug HTML snippet: {outcome.html}")


def confirm_state(board, stable_id: str) -> ExternalVoteState | None:
    """Re-read a post's vote state after a click.  None if the post is gone."""
    if not stable_id:
        raise InvalidArgument("stable_id is required to confirm a vote")
    probe = board.inspect(stable_id)
    if not probe.found:
        return None
    state, _ = read_state(probe)
    return state
