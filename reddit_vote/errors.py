"""
Error taxonomy for the vote pipeline.

Every failure the core can report has its own class so callers can tell a
bad argument from a vanished post or a changed page layout.  None of these
are retried inside the core.
"""


class VoteError(Exception):
    """Base class for every vote-pipeline failure."""


class InvalidArgument(VoteError, ValueError):
    """Caller contract violation (e.g. target index < 1, empty keyword)."""


class CandidateNotFound(VoteError):
    """Fewer eligible posts on the listing than the requested index."""

    def __init__(self, target_index: int, eligible_seen: int):
        self.target_index = target_index
        self.eligible_seen = eligible_seen
        super().__init__(
            f"Could not find eligible post #{target_index} "
            f"(only {eligible_seen} after filtering stickied/promoted)."
        )


class TargetNotFound(VoteError):
    """The chosen post vanished between the scan and the vote."""

    def __init__(self, stable_id):
        self.stable_id = stable_id
        super().__init__(f"Post {stable_id} no longer found on the page.")


class ControlNotFound(VoteError):
    """The post is present but one or both vote arrows are missing."""

    def __init__(self, stable_id, positive_found: bool, negative_found: bool):
        self.stable_id = stable_id
        self.positive_found = positive_found
        self.negative_found = negative_found
        super().__init__(
            f"Vote arrows missing on post {stable_id}: "
            f"up={positive_found}, down={negative_found}"
        )
