"""Anchor/positive/negative knowledge facts used by the knowledge phase."""

import logging
from typing import Iterable, Optional

from ..tabular import ParsedTable
from .models import TargetProperty, TripletFact

logger = logging.getLogger(__name__)


def derive_triplets(properties: Iterable[TargetProperty]) -> list[TripletFact]:
    """One fact per synonym and one per antonym, in catalog order."""
    facts = []
    for prop in properties:
        for synonym in prop.synonyms:
            facts.append(TripletFact(anchor=prop.display_name, positive=synonym))
        for antonym in prop.antonyms:
            facts.append(TripletFact(anchor=prop.display_name, negative=antonym))
    return facts


def triplets_from_table(table: ParsedTable) -> list[TripletFact]:
    """Convert a parsed knowledge-base table into facts, skipping empty anchors."""
    anchor_idx = table.column_index("anchor", case_sensitive=False)
    positive_idx = table.column_index("positive", case_sensitive=False)
    negative_idx = table.column_index("negative", case_sensitive=False)

    facts = []
    for row in table.rows:
        anchor = row[anchor_idx]
        if not anchor:
            continue
        facts.append(
            TripletFact(anchor=anchor, positive=row[positive_idx], negative=row[negative_idx])
        )
    return facts


def merge_triplets(*groups: Iterable[TripletFact]) -> list[TripletFact]:
    """Concatenate fact groups, dropping only exact duplicates."""
    merged: list[TripletFact] = []
    seen: set[tuple[str, str, str]] = set()
    for group in groups:
        for fact in group:
            key = (fact.anchor, fact.positive, fact.negative)
            if key not in seen:
                seen.add(key)
                merged.append(fact)
    return merged


class KnowledgeIndex:
    """
    Working set of facts for one session.

    An uploaded fact list always takes precedence and is never replaced by
    the derived one; the derived list is only built when nothing was uploaded.
    """

    def __init__(self):
        self._external: Optional[list[TripletFact]] = None
        self._derived: Optional[list[TripletFact]] = None

    @property
    def has_external(self) -> bool:
        return self._external is not None

    def load_external(self, facts: list[TripletFact]):
        self._external = list(facts)
        logger.info(f"Knowledge base loaded: {len(facts)} entries")

    def clear_external(self):
        self._external = None

    def invalidate(self):
        """Forget the derived facts so the next read rebuilds them."""
        self._derived = None

    def facts(self, properties: Iterable[TargetProperty]) -> list[TripletFact]:
        """Facts for the knowledge phase."""
        if self._external is not None:
            return self._external
        if self._derived is None:
            self._derived = derive_triplets(properties)
            logger.debug(f"Derived {len(self._derived)} facts from the schema")
        return self._derived
