"""Data models and errors for synonym/antonym feedback."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class SignalKind(str, Enum):
    """Whether a header should become a synonym or an antonym of a target."""

    POSITIVE = "positive"
    NEGATIVE = "negative"


class FeedbackSignal(BaseModel):
    """A learned (target, source header) pair."""

    kind: SignalKind
    target: str
    source_header: str


class FeedbackOutcome(BaseModel):
    """Result of applying one signal."""

    signal: FeedbackSignal
    changed: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FeedbackWriteError(Exception):
    """Raised when a target's synonym/antonym record cannot be updated."""

    def __init__(self, target: str, reason: str):
        self.target = target
        self.reason = reason
        super().__init__(f"Feedback for '{target}' not written: {reason}")
