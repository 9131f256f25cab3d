"""In-memory cache of the target property catalog."""

import asyncio
import logging
from typing import Optional

from pydantic import ValidationError

from .client import SchemaServiceClient
from .models import SchemaUnavailableError, TargetProperty

logger = logging.getLogger(__name__)


class SchemaCache:
    """Holds the target catalog, fetched once per session.

    Lookups by display name are exact; ``resolve`` also accepts other casings.
    """

    def __init__(self, client: Optional[SchemaServiceClient] = None):
        self.client = client or SchemaServiceClient()
        self._properties: dict[str, TargetProperty] = {}
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def properties(self) -> list[TargetProperty]:
        return list(self._properties.values())

    def names(self) -> list[str]:
        """Display names in catalog order."""
        return list(self._properties)

    def get(self, display_name: str) -> Optional[TargetProperty]:
        return self._properties.get(display_name)

    def resolve(self, name: str) -> Optional[str]:
        """Return the canonical display name matching ``name`` case-insensitively."""
        if name in self._properties:
            return name
        lowered = name.strip().lower()
        for display_name in self._properties:
            if display_name.lower() == lowered:
                return display_name
        return None

    def load_records(self, records: list[dict]) -> int:
        """
        Replace the catalog with parsed provider records.

        Records without a display name, or that fail validation, are skipped.
        Duplicate display names keep the first record.

        Raises:
            SchemaUnavailableError: If no usable record remains
        """
        properties: dict[str, TargetProperty] = {}
        for record in records:
            try:
                prop = TargetProperty.model_validate(record)
            except ValidationError as e:
                logger.warning(f"Skipping invalid schema record: {e.errors()[0]['msg']}")
                continue
            if prop.display_name and prop.display_name not in properties:
                properties[prop.display_name] = prop

        if not properties:
            self._loaded = False
            raise SchemaUnavailableError("Target schema loaded, but no display names found")

        self._properties = properties
        self._loaded = True
        logger.info(f"Target schema loaded: {len(properties)} properties")
        return len(properties)

    async def load(self, force: bool = False) -> int:
        """Fetch the catalog from the schema service unless already loaded."""
        async with self._lock:
            if self._loaded and not force:
                return len(self._properties)
            try:
                records = await self.client.fetch_properties()
            except SchemaUnavailableError:
                self._loaded = False
                raise
            return self.load_records(records)

    def update_terms(self, display_name: str, synonyms: list[str], antonyms: list[str]):
        """Refresh the cached term lists of one property after a feedback write."""
        prop = self._properties.get(display_name)
        if prop is not None:
            prop.synonyms = list(synonyms)
            prop.antonyms = list(antonyms)

    async def add_property(self, display_name: str) -> bool:
        """
        Create a property remotely and append it to the catalog.

        The new entry has no identifiers until the next full refresh.
        """
        display_name = display_name.strip()
        if not display_name:
            return False
        if self.resolve(display_name) is not None:
            logger.info(f"Property '{display_name}' already exists")
            return False

        created = await self.client.create_property(display_name)
        if created:
            self._properties[display_name] = TargetProperty(display_name=display_name)
            self._loaded = True
            logger.info(f"Added property '{display_name}' to the catalog")
        return created
