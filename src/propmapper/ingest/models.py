"""Data models and errors for the ingestion pipeline."""

from typing import Optional

from pydantic import BaseModel, Field


class PipelineContext(BaseModel):
    """Values carried from one pipeline step to the next."""

    filename: str
    content: str
    upload_id: Optional[str] = None
    classification_obid: Optional[str] = None
    loader_obid: Optional[str] = None


class IngestionResult(BaseModel):
    """Outcome of sending one file through the pipeline."""

    filename: str
    success: bool
    reason: Optional[str] = None
    completed_steps: list[str] = Field(default_factory=list)
    loader_obid: Optional[str] = None


class PipelineStepError(Exception):
    """Raised when a step fails; the remaining steps of that file are skipped."""

    def __init__(self, step: str, reason: str, completed_steps: Optional[list[str]] = None):
        self.step = step
        self.reason = reason
        self.completed_steps = completed_steps or []
        super().__init__(f"Pipeline step '{step}' failed: {reason}")
