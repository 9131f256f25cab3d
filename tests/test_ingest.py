"""Tests for the loader ingestion pipeline."""

import httpx
import pytest

from propmapper.ingest import (
    IngestionService,
    LoaderServiceClient,
    PipelineContext,
    PipelineRunner,
    PipelineStep,
    PipelineStepError,
)

LOADER_URL = "http://loader.test/api/v2"

ALL_STEPS = [
    "resume-upload",
    "commit-upload",
    "publish",
    "fetch-classification",
    "create-job",
    "attach-file",
    "attach-workflow",
]


class FakeLoader:
    """Minimal loader service; ``classifications`` controls the lookup result."""

    def __init__(self, classifications=None):
        self.classifications = [{"OBID": "CLS-1"}] if classifications is None else classifications
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.endswith("/FileMgmt/UploadFile"):
            if request.url.params["type"] == "resume":
                return httpx.Response(200, json={"UploadId": "UP-1"})
            return httpx.Response(200, json={})
        if path.endswith("/FileMgmt/MakeUploadAvailable"):
            return httpx.Response(200, json={})
        if path.endswith("/SDA/Objects") and request.method == "GET":
            return httpx.Response(200, json={"value": self.classifications})
        if path.endswith("/SDA/Objects") and request.method == "POST":
            return httpx.Response(201, json={"OBID": "LDR-1"})
        if "Attach" in path and "FileMgmt" in path:
            return httpx.Response(200, json={})
        if path.endswith("/SDA/AttachToDefaultWorkflow"):
            return httpx.Response(200, json={})
        return httpx.Response(404)


def _service(loader: FakeLoader) -> IngestionService:
    client = LoaderServiceClient(
        base_url=LOADER_URL,
        classification_uid="LDRC_Test",
        workflow_name="Test Workflow",
        transport=httpx.MockTransport(loader.handler),
    )
    return IngestionService(client)


class TestIngestionService:
    """Test the full upload workflow."""

    async def test_all_steps_complete(self):
        loader = FakeLoader()

        result = await _service(loader).upload("narrow_table.csv", "a,b\r\n1,2")

        assert result.success
        assert result.completed_steps == ALL_STEPS
        assert result.loader_obid == "LDR-1"
        assert len(loader.requests) == 7

    async def test_ids_flow_between_steps(self):
        loader = FakeLoader()

        await _service(loader).upload("narrow_table.csv", "a,b")

        commit = loader.requests[1]
        assert commit.url.params["UploadId"] == "UP-1"
        assert b"UP-1" in loader.requests[2].content
        assert b"CLS-1" in loader.requests[4].content
        assert b"LDR-1" in loader.requests[6].content
        assert b"Test Workflow" in loader.requests[6].content

    async def test_classification_lookup_uses_configured_uid(self):
        loader = FakeLoader()

        await _service(loader).upload("long_table.csv", "a")

        query = loader.requests[3].url.params["$filter"]
        assert "LDRC_Test" in query

    async def test_missing_classification_stops_the_pipeline(self):
        loader = FakeLoader(classifications=[])

        result = await _service(loader).upload("narrow_table.csv", "a,b")

        assert not result.success
        assert "fetch-classification" in result.reason
        assert result.completed_steps == ALL_STEPS[:3]
        assert len(loader.requests) == 4

    async def test_http_error_is_returned_not_raised(self):
        def handler(request):
            return httpx.Response(500, json={"error": "down"})

        client = LoaderServiceClient(base_url=LOADER_URL, transport=httpx.MockTransport(handler))
        result = await IngestionService(client).upload("narrow_table.csv", "a")

        assert not result.success
        assert result.completed_steps == []
        assert "resume-upload" in result.reason


class TestPipelineRunner:
    """Test step ordering and prerequisites."""

    async def test_missing_prerequisite_raises(self):
        async def noop(ctx):
            pass

        runner = PipelineRunner(
            [PipelineStep("first", noop), PipelineStep("second", noop, ("upload_id",))]
        )

        with pytest.raises(PipelineStepError) as exc_info:
            await runner.run(PipelineContext(filename="f.csv", content=""))

        assert exc_info.value.step == "second"
        assert exc_info.value.completed_steps == ["first"]

    async def test_steps_run_in_order(self):
        calls = []

        def step(name):
            async def handler(ctx):
                calls.append(name)

            return handler

        runner = PipelineRunner([PipelineStep(n, step(n)) for n in ("a", "b", "c")])

        assert await runner.run(PipelineContext(filename="f.csv", content="")) == ["a", "b", "c"]
        assert calls == ["a", "b", "c"]
