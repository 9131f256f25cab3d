"""Remote ingestion pipeline for exported tables."""

from .models import PipelineContext, IngestionResult, PipelineStepError
from .pipeline import PipelineStep, PipelineRunner
from .client import LoaderServiceClient, IngestionService

__all__ = [
    "PipelineContext",
    "IngestionResult",
    "PipelineStepError",
    "PipelineStep",
    "PipelineRunner",
    "LoaderServiceClient",
    "IngestionService",
]
