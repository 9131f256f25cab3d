"""HTTP client for the schema / feedback service."""

import logging
from typing import Any, Optional

import httpx

from ..config import settings
from .models import SchemaUnavailableError, join_terms, split_terms

logger = logging.getLogger(__name__)


class SchemaServiceClient:
    """
    Talks to the service that owns the target property catalog.

    The same collection endpoint serves three purposes: listing the catalog,
    reading/writing one property's synonyms and antonyms, and creating new
    properties.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        properties_path: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.schema_service_url).rstrip("/")
        self.properties_path = (properties_path or settings.schema_properties_path).strip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    def _property_url(self, remote_id: str) -> str:
        return f"/{self.properties_path}/{remote_id}"

    async def fetch_properties(self) -> list[dict[str, Any]]:
        """
        Fetch the raw property records.

        Raises:
            SchemaUnavailableError: On transport failure or a non-list payload
        """
        try:
            async with self._client() as client:
                response = await client.get(f"/{self.properties_path}")
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SchemaUnavailableError(f"Error fetching target schema: {e}") from e

        if not isinstance(data, list):
            raise SchemaUnavailableError("Invalid response structure for target schema")
        return [item for item in data if isinstance(item, dict)]

    async def get_terms(self, remote_id: str) -> dict[str, list[str]]:
        """
        Read the current synonyms and antonyms of one property.

        Raises:
            httpx.HTTPError: On transport failure
            ValueError: If the body is not a JSON object
        """
        async with self._client() as client:
            response = await client.get(self._property_url(remote_id))
            response.raise_for_status()
            data = response.json()

        if not isinstance(data, dict):
            raise ValueError(f"Invalid response structure for property {remote_id}")

        return {
            "synonyms": split_terms(data.get("synonyms")),
            "antonyms": split_terms(data.get("antonyms")),
        }

    async def patch_terms(self, remote_id: str, patch: dict[str, list[str]]) -> None:
        """Write a partial ``{synonyms?, antonyms?}`` update."""
        body = {key: join_terms(terms) for key, terms in patch.items()}
        async with self._client() as client:
            response = await client.put(self._property_url(remote_id), json=body)
            response.raise_for_status()
        logger.info(f"Updated {', '.join(sorted(body))} of property {remote_id}")

    async def create_property(self, display_name: str) -> bool:
        """Create a new property; returns whether the service accepted it."""
        try:
            async with self._client() as client:
                response = await client.post(
                    f"/{self.properties_path}", json={"displayName": display_name}
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to create property '{display_name}': {e}")
            return False
        return True
