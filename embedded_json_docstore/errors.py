from __future__ import annotations


class DocStoreError(Exception):
    """Base class for document store errors."""


class ValidationError(DocStoreError):
    """Document, filter or update request rejected before touching storage."""


class InvalidSignatureError(ValidationError):
    pass


class CollectionNotFoundError(DocStoreError, FileNotFoundError):
    def __init__(self, name: str) -> None:
        super().__init__(f"There is no {name} collection available, Try creating one first.")
        self.name = name


class PersistenceError(DocStoreError):
    """Writing a collection file failed. The OSError is chained as __cause__."""


class IOCorruptionError(DocStoreError):
    """Collection file is not a JSON array."""
