"""Target property catalog, its service client and the knowledge index."""

from .models import (
    TargetProperty,
    TripletFact,
    SchemaUnavailableError,
    split_terms,
    join_terms,
    contains_term,
)
from .client import SchemaServiceClient
from .cache import SchemaCache
from .knowledge import (
    KnowledgeIndex,
    derive_triplets,
    triplets_from_table,
    merge_triplets,
)

__all__ = [
    "TargetProperty",
    "TripletFact",
    "SchemaUnavailableError",
    "split_terms",
    "join_terms",
    "contains_term",
    "SchemaServiceClient",
    "SchemaCache",
    "KnowledgeIndex",
    "derive_triplets",
    "triplets_from_table",
    "merge_triplets",
]
