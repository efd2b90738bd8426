from .database import Database, DEFAULT_OPTIONS
from .errors import (
    CollectionNotFoundError,
    DocStoreError,
    InvalidSignatureError,
    IOCorruptionError,
    PersistenceError,
    ValidationError,
)
from .query import match_all, match_document
from .response import Response
from .signature import update_signature, validate_update_signature

__all__ = [
    "Database",
    "DEFAULT_OPTIONS",
    "Response",
    "DocStoreError",
    "ValidationError",
    "InvalidSignatureError",
    "CollectionNotFoundError",
    "PersistenceError",
    "IOCorruptionError",
    "match_all",
    "match_document",
    "update_signature",
    "validate_update_signature",
]
