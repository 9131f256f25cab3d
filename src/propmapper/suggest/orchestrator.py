"""Runs the knowledge and provider suggestion phases in order."""

import logging
from typing import Callable, Optional

from ..mapping import (
    NOT_APPLICABLE,
    AssignmentResolver,
    NoSourceLoadedError,
    SuggestionAccepted,
    SuggestionOrigin,
    UnknownSourceHeaderError,
    is_not_applicable,
)
from ..schema import KnowledgeIndex, SchemaCache, SchemaUnavailableError, TripletFact
from .models import (
    ProviderUnavailableError,
    SuggestedAssignment,
    SuggestionProviderError,
    SuggestionReport,
)
from .provider import SuggestionProvider

logger = logging.getLogger(__name__)


class SuggestionOrchestrator:
    """
    Fills unresolved mapping rows with suggestions.

    Phase K consults the knowledge facts, phase P asks the suggestion
    provider. Both phases share one claim ledger so a target is never
    assigned to two rows in the same run; the first claim wins.
    """

    def __init__(
        self,
        resolver: AssignmentResolver,
        schema: SchemaCache,
        knowledge: KnowledgeIndex,
        provider: Optional[SuggestionProvider] = None,
        on_assigned: Optional[Callable[[str], None]] = None,
    ):
        self.resolver = resolver
        self.schema = schema
        self.knowledge = knowledge
        self.provider = provider
        self.on_assigned = on_assigned

    async def run(self) -> SuggestionReport:
        """
        Run phase K (when facts exist) and then phase P.

        Raises:
            NoSourceLoadedError: If no source file has been parsed
            SchemaUnavailableError: If the target schema is not loaded
            SuggestionProviderError: If phase P fails; ``report`` holds phase K results
        """
        if len(self.resolver) == 0:
            raise NoSourceLoadedError("Source CSV must be uploaded first")
        if not self.schema.is_loaded:
            raise SchemaUnavailableError("Target schema must be loaded first")

        report = SuggestionReport()
        claimed = self.resolver.claimed_targets()

        facts = self.knowledge.facts(self.schema.properties)
        if facts:
            report.knowledge_phase_ran = True
            self._run_knowledge_phase(facts, claimed, report)

        try:
            await self._run_provider_phase(claimed, report)
        except SuggestionProviderError as e:
            report.provider_error = str(e)
            report.unresolved = self.resolver.unresolved_headers()
            logger.error(f"Provider phase failed: {e}")
            e.report = report
            raise

        report.unresolved = self.resolver.unresolved_headers()
        logger.info(
            f"Suggestions complete: {len(report.assignments)} assigned, "
            f"{len(report.unresolved)} unresolved"
        )
        return report

    def _assign(
        self,
        header: str,
        target: str,
        origin: SuggestionOrigin,
        report: SuggestionReport,
    ):
        self.resolver.apply(SuggestionAccepted(source_header=header, target=target, origin=origin))
        report.assignments.append(
            SuggestedAssignment(source_header=header, target=target, origin=origin)
        )
        if self.on_assigned is not None:
            self.on_assigned(header)

    def _is_unchanged(self, header: str, selected: str) -> bool:
        try:
            return self.resolver.get(header).selected_target == selected
        except UnknownSourceHeaderError:
            return False

    def _match_fact(self, header: str, facts: list[TripletFact], claimed: set[str]) -> Optional[str]:
        """First usable fact for ``header``: a target name, the N/A sentinel, or None."""
        lowered = header.lower()
        for fact in facts:
            # Older files store the header as anchor with an N/A positive
            if fact.anchor.lower() == lowered and is_not_applicable(fact.positive):
                return NOT_APPLICABLE
            if fact.positive.lower() != lowered:
                continue
            if is_not_applicable(fact.anchor):
                return NOT_APPLICABLE
            target = self.schema.resolve(fact.anchor)
            if target is not None and target not in claimed:
                return target
        return None

    def _run_knowledge_phase(
        self, facts: list[TripletFact], claimed: set[str], report: SuggestionReport
    ):
        logger.info(f"Phase K: matching against {len(facts)} knowledge facts")
        for row in self.resolver.rows:
            if not row.is_unresolved:
                continue
            value = self._match_fact(row.source_header, facts, claimed)
            if value is None:
                continue
            if value != NOT_APPLICABLE:
                claimed.add(value)
            self._assign(row.source_header, value, SuggestionOrigin.KNOWLEDGE, report)

    async def _run_provider_phase(self, claimed: set[str], report: SuggestionReport):
        headers = self.resolver.unresolved_headers()
        available = [name for name in self.schema.names() if name not in claimed]

        if not headers or not available:
            logger.info("Phase P skipped: nothing left to map")
            return
        if self.provider is None:
            raise ProviderUnavailableError("Suggestion provider is not configured")

        report.provider_phase_ran = True
        logger.info(f"Phase P: {len(headers)} headers, {len(available)} available targets")
        sent = {header: self.resolver.get(header).selected_target for header in headers}
        suggestions = await self.provider.suggest(headers, available)

        # Rows may have been edited or replaced while the provider was answering
        claimed = self.resolver.claimed_targets()
        available_set = set(available)
        for header in headers:
            proposed = suggestions.get(header)
            if not proposed:
                continue
            if not self._is_unchanged(header, sent[header]):
                logger.debug(f"Dropping proposal for {header!r}: row changed during the request")
                continue
            if proposed in available_set and proposed not in claimed:
                claimed.add(proposed)
                self._assign(header, proposed, SuggestionOrigin.PROVIDER, report)
            elif proposed.strip().upper() == NOT_APPLICABLE:
                self._assign(header, NOT_APPLICABLE, SuggestionOrigin.PROVIDER, report)
            else:
                logger.debug(f"Ignoring proposal {proposed!r} for {header!r}")
