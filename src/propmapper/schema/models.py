"""Data models for the target property catalog."""

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

TERM_DELIMITER = ";"


def split_terms(value: Any) -> list[str]:
    """
    Parse a ``;``-delimited term string into an ordered, case-insensitive set.

    The first spelling of a term wins; later case variants are dropped.
    Lists are accepted as-is and deduplicated the same way.
    """
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(TERM_DELIMITER)
    else:
        items = [str(v) for v in value]

    terms: list[str] = []
    seen: set[str] = set()
    for item in items:
        term = item.strip()
        if term and term.lower() not in seen:
            seen.add(term.lower())
            terms.append(term)
    return terms


def join_terms(terms: list[str]) -> str:
    """Inverse of split_terms."""
    return TERM_DELIMITER.join(terms)


def contains_term(terms: list[str], term: str) -> bool:
    """Case-insensitive membership test."""
    lowered = term.lower()
    return any(t.lower() == lowered for t in terms)


class TargetProperty(BaseModel):
    """A property of the target schema a source column may be mapped onto."""

    display_name: str = Field(validation_alias=AliasChoices("displayName", "DisplayName", "display_name"))
    synonyms: list[str] = Field(default_factory=list)
    antonyms: list[str] = Field(default_factory=list)
    local_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("localId", "LocalId", "local_id")
    )
    remote_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("remoteId", "RemoteId", "id", "remote_id")
    )

    @field_validator("synonyms", "antonyms", mode="before")
    @classmethod
    def _parse_terms(cls, value: Any) -> list[str]:
        return split_terms(value)

    @field_validator("display_name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> str:
        return str(value).strip() if value is not None else ""

    @field_validator("local_id", "remote_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @property
    def is_writable(self) -> bool:
        """Feedback can only be written for properties with a remote id."""
        return bool(self.remote_id)


class TripletFact(BaseModel):
    """An anchor/positive/negative record used for knowledge-based suggestions."""

    anchor: str
    positive: str = ""
    negative: str = ""


class SchemaUnavailableError(Exception):
    """Raised when the target schema cannot be fetched or has no usable rows."""

    pass
