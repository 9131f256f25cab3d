"""Synonym/antonym learning from manual corrections."""

from .models import SignalKind, FeedbackSignal, FeedbackOutcome, FeedbackWriteError
from .learner import FeedbackLearner, derive_signals, merge_signal, feedback_triplets

__all__ = [
    "SignalKind",
    "FeedbackSignal",
    "FeedbackOutcome",
    "FeedbackWriteError",
    "FeedbackLearner",
    "derive_signals",
    "merge_signal",
    "feedback_triplets",
]
