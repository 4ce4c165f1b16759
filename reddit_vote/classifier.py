"""
Action Classifier: decide upvote vs. downvote from a post title.
"""

from typing import Iterable

from reddit_vote.errors import InvalidArgument
from reddit_vote.models import DesiredAction

DEFAULT_KEYWORDS = ("nintendo",)


class ActionClassifier:
    """
    Case-insensitive substring match against a fixed keyword set.

    Any keyword found in the title → ASSERT_POSITIVE, otherwise
    ASSERT_NEGATIVE.  Every title gets exactly one action.
    """

    def __init__(self, keywords: Iterable[str] = DEFAULT_KEYWORDS):
        cleaned = []
        for kw in keywords:
            if not isinstance(kw, str) or not kw.strip():
                raise InvalidArgument(f"keywords must be non-blank strings, got: {kw!r}")
            cleaned.append(kw.strip().casefold())
        if not cleaned:
            raise InvalidArgument("at least one keyword is required")
        self.keywords = tuple(cleaned)

    def matched_keywords(self, title: str) -> list[str]:
        folded = (title or "").casefold()
        return [kw for kw in self.keywords if kw in folded]

    def classify(self, title: str) -> DesiredAction:
        if self.matched_keywords(title):
            return DesiredAction.ASSERT_POSITIVE
        return DesiredAction.ASSERT_NEGATIVE


_default = ActionClassifier()


def classify(title: str) -> DesiredAction:
    """Classify with the default keyword set."""
    return _default.classify(title)
