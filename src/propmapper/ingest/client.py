"""Loader service client: uploads an exported file and starts its load job."""

import logging
import uuid
from typing import Optional

import httpx

from ..config import settings
from .models import IngestionResult, PipelineContext, PipelineStepError
from .pipeline import PipelineRunner, PipelineStep

logger = logging.getLogger(__name__)

DATA_ACCEPT_HEADER = "application/vnd.intergraph.data+json"


class LoaderServiceClient:
    """
    HTTP calls for each step of the ingestion workflow.

    resume-upload -> commit-upload -> publish -> fetch-classification ->
    create-job -> attach-file -> attach-workflow
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        classification_uid: Optional[str] = None,
        workflow_name: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.loader_service_url).rstrip("/")
        self.classification_uid = classification_uid or settings.loader_classification_uid
        self.workflow_name = workflow_name or settings.loader_workflow_name
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        headers = {"X-Ingr-TenantId": settings.loader_tenant_id}
        if settings.loader_org_id:
            headers["X-Ingr-OrgId"] = settings.loader_org_id
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=headers,
            transport=self._transport,
        )

    def _file_part(self, ctx: PipelineContext) -> dict:
        return {"file": (ctx.filename, ctx.content.encode("utf-8"), "text/csv")}

    async def resume_upload(self, ctx: PipelineContext):
        async with self._client() as client:
            response = await client.post(
                "/FileMgmt/UploadFile",
                params={"type": "resume", "part": "1"},
                files=self._file_part(ctx),
            )
            response.raise_for_status()
            ctx.upload_id = response.json()["UploadId"]

    async def commit_upload(self, ctx: PipelineContext):
        async with self._client() as client:
            response = await client.post(
                "/FileMgmt/UploadFile",
                params={"type": "commit", "UploadId": ctx.upload_id},
                files=self._file_part(ctx),
            )
            response.raise_for_status()

    async def publish(self, ctx: PipelineContext):
        async with self._client() as client:
            response = await client.post(
                "/FileMgmt/MakeUploadAvailable", json={"Filename": ctx.upload_id}
            )
            response.raise_for_status()

    async def fetch_classification(self, ctx: PipelineContext):
        query = (
            f"contains(Interfaces,'ISDALoaderClass') and "
            f"contains(UID, '{self.classification_uid}')"
        )
        async with self._client() as client:
            response = await client.get(
                "/SDA/Objects",
                params={"$filter": query, "$select": "OBID"},
                headers={"Accept": DATA_ACCEPT_HEADER},
            )
            response.raise_for_status()
            ctx.classification_obid = response.json()["value"][0]["OBID"]

    async def create_job(self, ctx: PipelineContext):
        body = {
            "Class": "SDALoader",
            "Name": f"job-{uuid.uuid4()}",
            "Description": "PropMapper export",
            "SDVLoaderSuppressENS": "False",
            "SPFPrimaryClassification_21@odata.bind": [
                f"{self.base_url}/SDA/Objects('{ctx.classification_obid}')"
            ],
        }
        async with self._client() as client:
            response = await client.post(
                "/SDA/Objects", json=body, headers={"Accept": DATA_ACCEPT_HEADER}
            )
            response.raise_for_status()
            ctx.loader_obid = response.json()["OBID"]

    async def attach_file(self, ctx: PipelineContext):
        body = {
            "ClientFilePath": ctx.filename,
            "TargetObjectOBID": ctx.loader_obid,
            "DeleteScannedFile": False,
            "FileClass": "SPFDesignFile",
        }
        async with self._client() as client:
            response = await client.post(
                f"/FileMgmt/Upload('{ctx.upload_id}')/Intergraph.SPF.Server.API.Model.Attach",
                json=body,
            )
            response.raise_for_status()

    async def attach_workflow(self, ctx: PipelineContext):
        body = {"ObjectOBID": ctx.loader_obid, "WorkflowNameOrUID": self.workflow_name}
        async with self._client() as client:
            response = await client.post("/SDA/AttachToDefaultWorkflow", json=body)
            response.raise_for_status()

    def steps(self) -> list[PipelineStep]:
        """The workflow in execution order."""
        return [
            PipelineStep("resume-upload", self.resume_upload),
            PipelineStep("commit-upload", self.commit_upload, ("upload_id",)),
            PipelineStep("publish", self.publish, ("upload_id",)),
            PipelineStep("fetch-classification", self.fetch_classification),
            PipelineStep("create-job", self.create_job, ("classification_obid",)),
            PipelineStep("attach-file", self.attach_file, ("upload_id", "loader_obid")),
            PipelineStep("attach-workflow", self.attach_workflow, ("loader_obid",)),
        ]


class IngestionService:
    """Sends exported files through the loader workflow, one at a time."""

    def __init__(self, client: Optional[LoaderServiceClient] = None):
        self.client = client or LoaderServiceClient()

    async def upload(self, filename: str, content: str) -> IngestionResult:
        """Run the full workflow for one file; failures are returned, not raised."""
        ctx = PipelineContext(filename=filename, content=content)
        runner = PipelineRunner(self.client.steps())
        try:
            completed = await runner.run(ctx)
        except PipelineStepError as e:
            return IngestionResult(
                filename=filename,
                success=False,
                reason=str(e),
                completed_steps=e.completed_steps,
            )
        logger.info(f"Uploaded {filename} to loader job {ctx.loader_obid}")
        return IngestionResult(
            filename=filename,
            success=True,
            completed_steps=completed,
            loader_obid=ctx.loader_obid,
        )
