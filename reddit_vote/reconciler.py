"""
State Reconciler: bring one post's vote in line with the desired action.

The `target` is any object with two methods (see listing.ListingPage):

    inspect(stable_id)            -> VoteProbe
    activate(stable_id, action)   -> None   (clicks the arrow for `action`)

State machine over the post's *external* vote state, read fresh per call:

    not found              → NOT_FOUND
    arrow(s) missing       → CONTROL_NOT_FOUND (+ which arrows were found)
    current == desired     → ALREADY_SELECTED  (no click)
    otherwise              → CLICKED           (exactly one click, prior state kept)

No retries, no post-click verification.  Confirming the new state is up to
the caller (pipeline.confirm_state).
"""

import logging

from reddit_vote.models import (
    DesiredAction,
    ExternalVoteState,
    ReconciliationOutcome,
    VoteProbe,
)

logger = logging.getLogger("reddit_vote")


def read_state(probe: VoteProbe) -> tuple[ExternalVoteState, bool]:
    """
    Derive the vote state from the arrows' active markers.

    Returns (state, conflicting).  Both arrows active is not a state old
    reddit should ever render; the upvote wins and `conflicting` is True.
    """
    if probe.positive_active and probe.negative_active:
        return ExternalVoteState.POSITIVE, True
    if probe.positive_active:
        return ExternalVoteState.POSITIVE, False
    if probe.negative_active:
        return ExternalVoteState.NEGATIVE, False
    return ExternalVoteState.NONE, False


def reconcile(target, stable_id: str | None, desired: DesiredAction) -> ReconciliationOutcome:
    if not stable_id:
        logger.warning("Post has no fullname — cannot locate it for voting")
        return ReconciliationOutcome.not_found(stable_id)

    probe = target.inspect(stable_id)
    if not probe.found:
        return ReconciliationOutcome.not_found(stable_id)

    if not (probe.positive_found and probe.negative_found):
        return ReconciliationOutcome.control_not_found(
            stable_id, probe.positive_found, probe.negative_found, html=probe.html
        )

    current, conflicting = read_state(probe)
    if conflicting:
        logger.warning(
            f"Post {stable_id} shows both upmod and downmod — treating as upvoted"
        )

    if current is desired.target_state:
        return ReconciliationOutcome.already_selected(stable_id, current, conflicting=conflicting)

    target.activate(stable_id, desired)
    return ReconciliationOutcome.clicked(stable_id, current, conflicting=conflicting)
