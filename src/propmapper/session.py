"""Mapping session: wires parser, schema, suggestions, feedback and export together."""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from .config import settings
from .export import ExportBundle, ExportFormatter, ExportTable
from .feedback import FeedbackLearner, FeedbackOutcome, derive_signals, feedback_triplets
from .ingest import IngestionResult, IngestionService
from .llm import AnthropicClient, LLMClient, OpenRouterClient
from .mapping import (
    NOT_APPLICABLE,
    AssignmentResolver,
    HighlightExpired,
    HighlightScheduler,
    NoSourceLoadedError,
    TargetSelected,
    UnknownSourceHeaderError,
    UnknownTargetError,
    is_not_applicable,
)
from .schema import KnowledgeIndex, SchemaCache, merge_triplets, triplets_from_table
from .suggest import SuggestionOrchestrator, SuggestionProvider, SuggestionReport
from .tabular import KNOWLEDGE_BASE_COLUMNS, InputFormatError, ParsedTable, TableRole, parse_table

logger = logging.getLogger(__name__)


def create_llm_client() -> Optional[LLMClient]:
    """Create the configured LLM client, or None when its key is missing."""
    if settings.llm_provider == "openrouter":
        if not settings.openrouter_api_key:
            logger.warning("OPENROUTER_API_KEY is not set; provider suggestions disabled")
            return None
        return OpenRouterClient(
            api_key=settings.openrouter_api_key, timeout=settings.http_timeout_seconds
        )

    # Default to Anthropic
    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY is not set; provider suggestions disabled")
        return None
    return AnthropicClient(
        api_key=settings.anthropic_api_key, timeout=settings.http_timeout_seconds
    )


def create_suggestion_provider() -> Optional[SuggestionProvider]:
    client = create_llm_client()
    if client is None:
        return None
    return SuggestionProvider(
        client, model=settings.active_model, max_tokens=settings.suggestion_max_tokens
    )


class ExportOutcome(BaseModel):
    """Tables produced by an export and the result of forwarding each one."""

    bundle: ExportBundle
    uploads: list[IngestionResult] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(result.success for result in self.uploads)


class MappingSession:
    """
    One mapping session.

    Loading a new source file resets the mapping table. Manual selections go
    through ``select_target`` so the feedback learner sees them; automated
    assignments come from ``suggest``.
    """

    def __init__(
        self,
        schema: Optional[SchemaCache] = None,
        provider: Optional[SuggestionProvider] = None,
        formatter: Optional[ExportFormatter] = None,
        ingestion: Optional[IngestionService] = None,
        highlight_seconds: Optional[float] = None,
    ):
        self.schema = schema or SchemaCache()
        self.knowledge = KnowledgeIndex()
        self.resolver = AssignmentResolver()
        self.highlights = HighlightScheduler(
            highlight_seconds if highlight_seconds is not None else settings.highlight_seconds
        )
        self.provider = provider if provider is not None else create_suggestion_provider()
        self.learner = FeedbackLearner(self.schema, knowledge=self.knowledge)
        self.formatter = formatter or ExportFormatter()
        self.ingestion = ingestion or IngestionService()
        self.source: Optional[ParsedTable] = None

    @property
    def is_source_loaded(self) -> bool:
        return self.source is not None

    @property
    def is_ready(self) -> bool:
        """Suggestions need both a source file and the target schema."""
        return self.is_source_loaded and self.schema.is_loaded

    # Inputs

    async def load_schema(self, force: bool = False) -> int:
        count = await self.schema.load(force=force)
        self.knowledge.invalidate()
        return count

    def load_source(self, text: str) -> ParsedTable:
        """
        Parse a source file and rebuild the mapping table.

        On failure the previous source and all mapping rows are discarded.
        """
        try:
            table = parse_table(text, TableRole.SOURCE, max_rows=settings.sample_row_limit)
        except InputFormatError:
            self._reset_source()
            raise

        self.highlights.cancel_all()
        self.source = table
        self.resolver.rebuild(table.headers)
        logger.info(
            f"Source CSV: Loaded {len(table.headers)} columns and "
            f"{len(table.rows)} sample data rows"
        )
        return table

    def load_knowledge_base(self, text: str) -> int:
        """Parse an uploaded knowledge-base file; it takes precedence over the schema."""
        try:
            table = parse_table(text, TableRole.KNOWLEDGE_BASE)
        except InputFormatError:
            self.knowledge.clear_external()
            raise
        facts = triplets_from_table(table)
        self.knowledge.load_external(facts)
        return len(facts)

    def _reset_source(self):
        self.highlights.cancel_all()
        self.source = None
        self.resolver.clear()

    # Mapping

    def _normalize_target(self, target: str) -> str:
        target = (target or "").strip()
        if not target:
            return ""
        if is_not_applicable(target):
            return NOT_APPLICABLE
        resolved = self.schema.resolve(target)
        if resolved is None:
            raise UnknownTargetError(f"'{target}' is not a target schema property")
        return resolved

    async def select_target(self, source_header: str, target: str) -> list[FeedbackOutcome]:
        """
        Apply a manual selection and learn from it.

        Returns:
            One outcome per feedback signal the change produced
        """
        if not self.is_source_loaded:
            raise NoSourceLoadedError("Source CSV must be uploaded first")
        previous = self.resolver.get(source_header).model_copy()
        value = self._normalize_target(target)

        self.highlights.cancel(source_header)
        self.resolver.apply(TargetSelected(source_header=source_header, target=value))

        signals = derive_signals(previous, value, self.schema)
        if not signals:
            return []
        return await self.learner.learn(signals)

    def restore_selections(self, selections: dict[str, str]) -> int:
        """
        Apply saved selections without producing feedback.

        Entries naming an unknown column or a target outside the catalog are skipped.
        """
        applied = 0
        for header, target in selections.items():
            try:
                value = self._normalize_target(str(target or ""))
                self.resolver.apply(TargetSelected(source_header=header, target=value))
            except UnknownSourceHeaderError:
                logger.warning(f"Ignoring saved selection for unknown column '{header}'")
                continue
            except UnknownTargetError as e:
                logger.warning(f"Ignoring saved selection for '{header}': {e}")
                continue
            applied += 1
        return applied

    def _expire_highlight(self, source_header: str):
        try:
            self.resolver.apply(HighlightExpired(source_header=source_header))
        except UnknownSourceHeaderError:
            pass

    def _on_assigned(self, source_header: str):
        self.highlights.schedule(source_header, self._expire_highlight)

    async def suggest(self) -> SuggestionReport:
        """Run the knowledge phase and then the provider phase."""
        orchestrator = SuggestionOrchestrator(
            self.resolver,
            self.schema,
            self.knowledge,
            provider=self.provider,
            on_assigned=self._on_assigned,
        )
        return await orchestrator.run()

    async def create_property(self, display_name: str) -> bool:
        created = await self.schema.add_property(display_name)
        if created:
            self.knowledge.invalidate()
        return created

    # Outputs

    def build_export(self) -> ExportBundle:
        if self.source is None:
            raise NoSourceLoadedError("Source CSV not uploaded. Cannot export.")
        return self.formatter.build(self.resolver.rows, self.source, self.schema)

    async def generate_export(self, upload: bool = True) -> ExportOutcome:
        """
        Build both tables and forward them, narrow table first.

        Each table is uploaded independently; a failure of one does not stop
        the other.
        """
        bundle = self.build_export()
        outcome = ExportOutcome(bundle=bundle)
        if not upload:
            return outcome

        for table in bundle.tables():
            result = await self.ingestion.upload(table.filename, table.to_csv())
            if not result.success:
                logger.error(f"Upload of {table.filename} failed: {result.reason}")
            outcome.uploads.append(result)
        return outcome

    def feedback_triplet_table(self) -> ExportTable:
        """The session's suggestion feedback in knowledge-base layout."""
        facts = merge_triplets(feedback_triplets(self.resolver.rows))
        return ExportTable(
            filename="triplet_loss.csv",
            headers=list(KNOWLEDGE_BASE_COLUMNS),
            rows=[[f.anchor, f.positive, f.negative] for f in facts],
        )

    async def close(self):
        """Tear down the session; pending highlight timers are discarded."""
        self.highlights.cancel_all()
