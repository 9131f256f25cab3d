"""Learns synonyms and antonyms from manual mapping corrections."""

import asyncio
import logging
from typing import Iterable, Optional

import httpx

from ..mapping import MappingRow, is_definite
from ..schema import KnowledgeIndex, SchemaCache, SchemaServiceClient, TripletFact, contains_term
from .models import FeedbackOutcome, FeedbackSignal, FeedbackWriteError, SignalKind

logger = logging.getLogger(__name__)


def derive_signals(
    previous: MappingRow, new_target: str, schema: SchemaCache
) -> list[FeedbackSignal]:
    """
    Signals implied by a manual change of ``previous.selected_target`` to ``new_target``.

    - positive ``(new_target, header)`` when the new selection is a catalog
      target whose name differs from the header
    - negative ``(previous suggestion, header)`` when an earlier suggestion
      named a different target

    Re-selecting the current value is not a change and yields nothing.
    """
    if (new_target or "") == (previous.selected_target or ""):
        return []

    header = previous.source_header
    signals = []

    if is_definite(new_target) and schema.get(new_target) is not None:
        if new_target.lower() != header.lower():
            signals.append(
                FeedbackSignal(kind=SignalKind.POSITIVE, target=new_target, source_header=header)
            )

    prior = previous.suggested_target
    if is_definite(prior) and prior.lower() != (new_target or "").lower():
        signals.append(FeedbackSignal(kind=SignalKind.NEGATIVE, target=prior, source_header=header))

    return signals


def merge_signal(
    synonyms: list[str], antonyms: list[str], signal: FeedbackSignal
) -> tuple[list[str], list[str]]:
    """Apply one signal to copies of a target's term lists."""
    header = signal.source_header
    lowered = header.lower()
    if signal.kind == SignalKind.POSITIVE:
        keep, drop = list(synonyms), antonyms
    else:
        keep, drop = list(antonyms), synonyms

    drop = [term for term in drop if term.lower() != lowered]
    if not contains_term(keep, header):
        keep.append(header)

    if signal.kind == SignalKind.POSITIVE:
        return keep, drop
    return drop, keep


def feedback_triplets(rows: Iterable[MappingRow]) -> list[TripletFact]:
    """
    Knowledge facts implied by the final mapping of suggested rows.

    Each row that received a suggestion yields a positive fact for its
    final selection and, if the user overrode the suggestion, a negative
    fact for the rejected target.
    """
    facts = []
    for row in rows:
        if not row.suggested_target:
            continue
        final = row.selected_target
        if final and final != row.suggested_target:
            facts.append(TripletFact(anchor=final, positive=row.source_header))
            if is_definite(row.suggested_target):
                facts.append(TripletFact(anchor=row.suggested_target, negative=row.source_header))
        else:
            facts.append(TripletFact(anchor=row.suggested_target, positive=row.source_header))
    return facts


class FeedbackLearner:
    """Merges feedback signals into the remote synonym/antonym records.

    Updates to the same target are serialized so a read-then-write pair is
    never interleaved with another one.
    """

    def __init__(
        self,
        schema: SchemaCache,
        client: Optional[SchemaServiceClient] = None,
        knowledge: Optional[KnowledgeIndex] = None,
    ):
        self.schema = schema
        self.client = client or schema.client
        self.knowledge = knowledge
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, target: str) -> asyncio.Lock:
        key = target.lower()
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    async def apply_signal(self, signal: FeedbackSignal) -> FeedbackOutcome:
        """
        Fetch, merge and (if changed) write back one target's terms.

        Raises:
            FeedbackWriteError: If the target has no remote id or the service fails
        """
        async with self._lock_for(signal.target):
            prop = self.schema.get(signal.target)
            if prop is None:
                raise FeedbackWriteError(signal.target, "unknown target")
            if not prop.is_writable:
                raise FeedbackWriteError(signal.target, "no remote identifier")

            try:
                current = await self.client.get_terms(prop.remote_id)
            except (httpx.HTTPError, ValueError) as e:
                raise FeedbackWriteError(signal.target, f"read failed: {e}") from e

            synonyms, antonyms = merge_signal(current["synonyms"], current["antonyms"], signal)

            patch = {}
            if synonyms != current["synonyms"]:
                patch["synonyms"] = synonyms
            if antonyms != current["antonyms"]:
                patch["antonyms"] = antonyms
            if not patch:
                logger.debug(f"No change for {signal.kind.value} signal on '{signal.target}'")
                return FeedbackOutcome(signal=signal, changed=False)

            try:
                await self.client.patch_terms(prop.remote_id, patch)
            except httpx.HTTPError as e:
                raise FeedbackWriteError(signal.target, f"write failed: {e}") from e

            self.schema.update_terms(signal.target, synonyms, antonyms)
            if self.knowledge is not None:
                self.knowledge.invalidate()

        logger.info(
            f"Learned {signal.kind.value} '{signal.source_header}' for '{signal.target}'"
        )
        return FeedbackOutcome(signal=signal, changed=True)

    async def learn(self, signals: list[FeedbackSignal]) -> list[FeedbackOutcome]:
        """Apply signals in order; failures are logged and reported, not raised."""
        outcomes = []
        for signal in signals:
            try:
                outcomes.append(await self.apply_signal(signal))
            except FeedbackWriteError as e:
                logger.warning(str(e))
                outcomes.append(FeedbackOutcome(signal=signal, error=e.reason))
        return outcomes
