"""
Data types shared by the scanner, classifier and reconciler.

Flow:
  RawItemDescriptor  (one rendered listing entry, as read from the page)
    → CandidateItem  (an eligible entry picked by the scanner)
    → DesiredAction  (derived once from the candidate's title)
    → ReconciliationOutcome (what the reconciler did about it)
"""

from dataclasses import dataclass
from enum import Enum

from reddit_vote.errors import ControlNotFound, TargetNotFound


class DesiredAction(Enum):
    ASSERT_POSITIVE = "upvote"
    ASSERT_NEGATIVE = "downvote"

    @property
    def target_state(self) -> "ExternalVoteState":
        """The vote state this action asks for."""
        if self is DesiredAction.ASSERT_POSITIVE:
            return ExternalVoteState.POSITIVE
        return ExternalVoteState.NEGATIVE


class ExternalVoteState(Enum):
    NONE = "none"
    POSITIVE = "upvoted"
    NEGATIVE = "downvoted"


class OutcomeStatus(Enum):
    ALREADY_SELECTED = "ALREADY_SELECTED"
    CLICKED = "CLICKED"
    NOT_FOUND = "NOT_FOUND"
    CONTROL_NOT_FOUND = "CONTROL_NOT_FOUND"


@dataclass(frozen=True)
class EligibilityFlags:
    pinned: bool = False
    promoted: bool = False

    @property
    def eligible(self) -> bool:
        return not (self.pinned or self.promoted)


@dataclass(frozen=True)
class RawItemDescriptor:
    """One `div.thing` as the listing collaborator saw it."""

    title: str
    stable_id: str | None = None
    permalink: str | None = None
    pinned: bool = False
    promoted: bool = False

    @property
    def flags(self) -> EligibilityFlags:
        return EligibilityFlags(pinned=bool(self.pinned), promoted=bool(self.promoted))


@dataclass(frozen=True)
class CandidateItem:
    title: str
    stable_id: str | None
    permalink: str | None
    flags: EligibilityFlags

    @classmethod
    def from_descriptor(cls, raw: RawItemDescriptor) -> "CandidateItem":
        return cls(
            title=(raw.title or "").strip(),
            stable_id=raw.stable_id or None,
            permalink=raw.permalink or None,
            flags=raw.flags,
        )


@dataclass(frozen=True)
class VoteProbe:
    """
    Low-level observation of one post's vote arrows.

    Produced by the page collaborator's inspect(); the reconciler turns it
    into a ReconciliationOutcome.  `html` is a short excerpt of the post's
    markup, only filled in when an arrow is missing.
    """

    found: bool
    positive_found: bool = False
    negative_found: bool = False
    positive_active: bool = False
    negative_active: bool = False
    html: str = ""

    @classmethod
    def missing(cls) -> "VoteProbe":
        return cls(found=False)

    @classmethod
    def from_dict(cls, payload: dict) -> "VoteProbe":
        return cls(
            found=bool(payload.get("found")),
            positive_found=bool(payload.get("upFound")),
            negative_found=bool(payload.get("downFound")),
            positive_active=bool(payload.get("upActive")),
            negative_active=bool(payload.get("downActive")),
            html=payload.get("html") or "",
        )


@dataclass(frozen=True)
class ReconciliationOutcome:
    """
    Tagged result of one reconcile() call.

    `state` means different things per status:
      ALREADY_SELECTED → the current vote state (left untouched)
      CLICKED          → the state *before* the click
      NOT_FOUND / CONTROL_NOT_FOUND → None
    """

    status: OutcomeStatus
    stable_id: str | None = None
    state: ExternalVoteState | None = None
    positive_found: bool = True
    negative_found: bool = True
    conflicting_markers: bool = False
    html: str = ""

    @classmethod
    def already_selected(cls, stable_id, current, *, conflicting=False) -> "ReconciliationOutcome":
        return cls(OutcomeStatus.ALREADY_SELECTED, stable_id, current,
                   conflicting_markers=conflicting)

    @classmethod
    def clicked(cls, stable_id, previous, *, conflicting=False) -> "ReconciliationOutcome":
        return cls(OutcomeStatus.CLICKED, stable_id, previous,
                   conflicting_markers=conflicting)

    @classmethod
    def not_found(cls, stable_id) -> "ReconciliationOutcome":
        return cls(OutcomeStatus.NOT_FOUND, stable_id,
                   positive_found=False, negative_found=False)

    @classmethod
    def control_not_found(cls, stable_id, positive_found, negative_found, html="") -> "ReconciliationOutcome":
        return cls(OutcomeStatus.CONTROL_NOT_FOUND, stable_id,
                   positive_found=positive_found, negative_found=negative_found, html=html)

    @property
    def succeeded(self) -> bool:
        return self.status in (OutcomeStatus.ALREADY_SELECTED, OutcomeStatus.CLICKED)

    def raise_for_failure(self) -> None:
        """Raise TargetNotFound / ControlNotFound for the failure statuses."""
        if self.status is OutcomeStatus.NOT_FOUND:
            raise TargetNotFound(self.stable_id)
        if self.status is OutcomeStatus.CONTROL_NOT_FOUND:
            raise ControlNotFound(self.stable_id, self.positive_found, self.negative_found)
