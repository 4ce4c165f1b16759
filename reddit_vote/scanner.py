"""
Candidate Scanner: pick the Nth real post from a listing snapshot.

Stickied and promoted posts are skipped, as are entries whose title is
blank once trimmed.  Counting follows rendering order and stops as soon as
the requested post is reached; the rest of the snapshot is never read.
"""

import logging
from typing import Iterable

from reddit_vote.errors import CandidateNotFound, InvalidArgument
from reddit_vote.models import CandidateItem, RawItemDescriptor

logger = logging.getLogger("reddit_vote")


def _check_index(n) -> None:
    # bool is an int subclass; True must not mean "first post"
    if isinstance(n, bool) or not isinstance(n, int) or n < 1:
        raise InvalidArgument(f"target index must be an integer >= 1, got: {n!r}")


def _collect_eligible(items: Iterable[RawItemDescriptor], n: int) -> list[CandidateItem]:
    eligible: list[CandidateItem] = []
    for raw in items:
        if not raw.flags.eligible:
            logger.debug(f"  Skipping pinned/promoted post: {raw.stable_id}")
            continue
        candidate = CandidateItem.from_descriptor(raw)
        if not candidate.title:
            continue
        eligible.append(candidate)
        if len(eligible) >= n:
            break
    return eligible


def select_nth_eligible(items: Iterable[RawItemDescriptor], n: int) -> CandidateItem | None:
    """
    Return the n-th (1-indexed) eligible post, or None when there are fewer.

    Raises InvalidArgument for n < 1.  Duplicate titles or ids are each
    counted; nothing is deduplicated.
    """
    _check_index(n)
    eligible = _collect_eligible(items, n)
    return eligible[n - 1] if len(eligible) >= n else None


def require_nth_eligible(items: Iterable[RawItemDescriptor], n: int) -> CandidateItem:
    """Like select_nth_eligible(), but raise CandidateNotFound instead of returning None."""
    _check_index(n)
    eligible = _collect_eligible(items, n)
    if len(eligible) < n:
        raise CandidateNotFound(n, len(eligible))
    return eligible[n - 1]
