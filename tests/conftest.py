"""Pytest configuration and shared fixtures."""

import json
from typing import Callable
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from propmapper.llm import LLMClient, LLMResponse
from propmapper.schema import SchemaCache, SchemaServiceClient, split_terms
from propmapper.session import MappingSession
from propmapper.suggest import SuggestionProvider

SCHEMA_URL = "http://schema.test/api/v1"

SOURCE_CSV = (
    "Line No,Tag,Description,Qty,Material,Rating\r\n"
    '1,P-101,"Pump, centrifugal",2,CS,150#\r\n'
    "2,V-201,Gate valve,4,SS,\r\n"
)


def schema_records() -> list[dict]:
    """Raw records as the schema service returns them."""
    return [
        {"id": "1", "displayName": "Line Number", "localId": "LineNumber", "synonyms": "", "antonyms": ""},
        {"id": "2", "displayName": "Tag Number", "localId": "TagNumber", "synonyms": "Tag;Tag No", "antonyms": ""},
        {"id": "3", "displayName": "Description", "localId": "Description", "synonyms": "", "antonyms": ""},
        {"id": "4", "displayName": "Quantity", "localId": "Quantity", "synonyms": "Qty", "antonyms": ""},
        {"id": "5", "displayName": "Unit of Measure", "localId": "UoM", "synonyms": "UOM", "antonyms": ""},
        {"id": "6", "displayName": "Material", "localId": "MAT_01", "synonyms": "", "antonyms": ""},
        {"id": "7", "displayName": "Pressure Rating", "synonyms": "", "antonyms": ""},
    ]


class FakeSchemaService:
    """In-memory stand-in for the schema service, served through httpx.MockTransport."""

    def __init__(self, records: list[dict]):
        self.records = {str(r["id"]): dict(r) for r in records}
        self.requests: list[httpx.Request] = []
        self.fail_with: int = 0

    def writes(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method in ("PUT", "POST")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with:
            return httpx.Response(self.fail_with, json={"error": "unavailable"})

        parts = request.url.path.rstrip("/").split("/")
        collection = parts[-1] == "LineItemProperties"

        if collection and request.method == "GET":
            return httpx.Response(200, json=list(self.records.values()))
        if collection and request.method == "POST":
            body = json.loads(request.content)
            new_id = str(len(self.records) + 1)
            self.records[new_id] = {"id": new_id, **body}
            return httpx.Response(201, json=self.records[new_id])

        record = self.records.get(parts[-1])
        if record is None:
            return httpx.Response(404, json={"error": "not found"})
        if request.method == "GET":
            return httpx.Response(200, json=record)
        if request.method == "PUT":
            record.update(json.loads(request.content))
            return httpx.Response(200, json=record)
        return httpx.Response(405)

    def terms(self, record_id: str, field: str) -> list[str]:
        return split_terms(self.records[record_id].get(field))


@pytest.fixture
def source_csv() -> str:
    return SOURCE_CSV


@pytest.fixture
def raw_records() -> list[dict]:
    return schema_records()


@pytest.fixture
def client_factory() -> Callable:
    """Schema client served by an arbitrary request handler."""

    def _factory(handler) -> SchemaServiceClient:
        return SchemaServiceClient(
            base_url=SCHEMA_URL,
            properties_path="LineItemProperties",
            transport=httpx.MockTransport(handler),
        )

    return _factory


@pytest.fixture
def schema_service() -> FakeSchemaService:
    """Schema service pre-populated with the standard catalog."""
    return FakeSchemaService(schema_records())


@pytest.fixture
def schema_client(schema_service) -> SchemaServiceClient:
    return SchemaServiceClient(
        base_url=SCHEMA_URL,
        properties_path="LineItemProperties",
        timeout=5,
        transport=httpx.MockTransport(schema_service.handler),
    )


@pytest.fixture
def schema_cache(schema_client) -> SchemaCache:
    """Catalog loaded from the fake service's records."""
    cache = SchemaCache(schema_client)
    cache.load_records(schema_records())
    return cache


def make_llm_client(text: str = "{}") -> Mock:
    """LLM client whose every response is ``text``."""
    client = Mock(spec=LLMClient)
    client.create_message = AsyncMock(
        return_value=LLMResponse(
            content=[{"type": "text", "text": text}],
            stop_reason="end_turn",
            usage={"input_tokens": 100, "output_tokens": 50},
        )
    )
    return client


@pytest.fixture
def llm_factory() -> Callable[[str], Mock]:
    return make_llm_client


@pytest.fixture
def mock_ingestion() -> Mock:
    """Ingestion service that accepts every file."""
    from propmapper.ingest import IngestionResult

    service = Mock()
    service.upload = AsyncMock(
        side_effect=lambda filename, content: IngestionResult(
            filename=filename, success=True, loader_obid="L-1"
        )
    )
    return service


@pytest.fixture
def session_factory(schema_cache, mock_ingestion):
    """Build a mapping session around the loaded catalog and an optional provider reply."""

    def _factory(reply: str = None, highlight_seconds: float = 3.0) -> MappingSession:
        provider = None
        if reply is not None:
            provider = SuggestionProvider(make_llm_client(reply), model="test-model")
        session = MappingSession(
            schema=schema_cache,
            provider=provider,
            ingestion=mock_ingestion,
            highlight_seconds=highlight_seconds,
        )
        # No key-based provider creation in tests
        session.provider = provider
        return session

    return _factory
