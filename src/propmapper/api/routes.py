"""API routes for PropMapper."""

from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..export import NothingToExportError
from ..feedback import FeedbackOutcome
from ..ingest import IngestionResult
from ..mapping import (
    MappingRow,
    NoSourceLoadedError,
    UnknownSourceHeaderError,
    UnknownTargetError,
)
from ..schema import SchemaUnavailableError
from ..suggest import ProviderUnavailableError, SuggestionProviderError, SuggestionReport
from ..tabular import InputFormatError

router = APIRouter()


def get_session():
    """Get the global mapping session."""
    from .app import get_session as _get_session

    return _get_session()


class UploadRequest(BaseModel):
    """Raw text of an uploaded CSV file."""

    content: str


class UploadResponse(BaseModel):
    headers: list[str]
    sample_rows: int


class KnowledgeBaseResponse(BaseModel):
    entries: int


class PropertyCreateRequest(BaseModel):
    display_name: str


class SelectRequest(BaseModel):
    """Manual selection for one source column."""

    source_header: str
    target: str


class MappingResponse(BaseModel):
    rows: list[MappingRow]
    duplicate_message: Optional[str] = None


class SelectResponse(MappingResponse):
    feedback: list[FeedbackOutcome]


class ExportRequest(BaseModel):
    upload: bool = False


class ExportResponse(BaseModel):
    narrow_csv: str
    long_csv: str
    uploads: list[IngestionResult]


def _mapping_response(session) -> dict:
    return {
        "rows": session.resolver.rows,
        "duplicate_message": session.resolver.duplicate_message(),
    }


@router.get("/health")
async def health_check():
    """Health check endpoint with diagnostics."""
    from ..config import settings

    session = get_session()

    # Gather non-secret diagnostics
    config = {
        "llm_provider": settings.llm_provider,
        "model_name": settings.active_model,
        "anthropic_key_present": bool(settings.anthropic_api_key),
        "openrouter_key_present": bool(settings.openrouter_api_key),
    }

    return {
        "status": "ok",
        "service": "propmapper",
        "config": config,
        "schema_loaded": session.schema.is_loaded,
        "source_loaded": session.is_source_loaded,
        "provider_available": session.provider is not None,
    }


# Schema endpoints


@router.post("/schema/refresh")
async def refresh_schema():
    """Re-fetch the target schema."""
    session = get_session()
    try:
        count = await session.load_schema(force=True)
    except SchemaUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"properties": count}


@router.get("/schema")
async def list_schema():
    """List the target properties."""
    session = get_session()
    return {"properties": session.schema.properties}


@router.post("/schema/properties")
async def create_property(request: PropertyCreateRequest):
    """Create a new target property."""
    session = get_session()
    created = await session.create_property(request.display_name)
    if not created:
        raise HTTPException(
            status_code=400, detail=f"Property '{request.display_name}' was not created"
        )
    return {"status": "ok", "display_name": request.display_name.strip()}


# Upload endpoints


@router.post("/source", response_model=UploadResponse)
async def upload_source(request: UploadRequest):
    """Load a source CSV and reset the mapping table."""
    session = get_session()
    try:
        table = session.load_source(request.content)
    except InputFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return UploadResponse(headers=table.headers, sample_rows=len(table.rows))


@router.post("/knowledge-base", response_model=KnowledgeBaseResponse)
async def upload_knowledge_base(request: UploadRequest):
    """Load an anchor/positive/negative knowledge file."""
    session = get_session()
    try:
        entries = session.load_knowledge_base(request.content)
    except InputFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return KnowledgeBaseResponse(entries=entries)


# Mapping endpoints


@router.get("/mapping", response_model=MappingResponse)
async def get_mapping():
    """Current mapping rows."""
    return _mapping_response(get_session())


@router.post("/mapping/select", response_model=SelectResponse)
async def select_target(request: SelectRequest):
    """Manually select a target for one source column."""
    session = get_session()
    try:
        feedback = await session.select_target(request.source_header, request.target)
    except NoSourceLoadedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except UnknownSourceHeaderError:
        raise HTTPException(
            status_code=404, detail=f"Unknown source column '{request.source_header}'"
        )
    except UnknownTargetError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {**_mapping_response(session), "feedback": feedback}


@router.post("/suggest", response_model=SuggestionReport)
async def suggest_mappings():
    """Run knowledge-based and provider-based suggestions."""
    session = get_session()
    try:
        return await session.suggest()
    except NoSourceLoadedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (SchemaUnavailableError, ProviderUnavailableError) as e:
        raise HTTPException(status_code=503, detail=str(e))
    except SuggestionProviderError as e:
        detail = {"message": str(e)}
        if e.report is not None:
            detail["report"] = e.report.model_dump(mode="json")
        raise HTTPException(status_code=502, detail=detail)


# Export endpoints


@router.post("/export", response_model=ExportResponse)
async def export_mapping(request: ExportRequest):
    """Build the narrow and long tables and optionally upload them."""
    session = get_session()
    try:
        outcome = await session.generate_export(upload=request.upload)
    except NoSourceLoadedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except NothingToExportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ExportResponse(
        narrow_csv=outcome.bundle.narrow.to_csv(),
        long_csv=outcome.bundle.long.to_csv(),
        uploads=outcome.uploads,
    )


@router.get("/triplets")
async def download_triplets():
    """Feedback from the current mapping as an anchor/positive/negative CSV."""
    session = get_session()
    table = session.feedback_triplet_table()
    return {"filename": table.filename, "csv": table.to_csv(), "entries": len(table.rows)}
