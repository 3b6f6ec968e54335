"""
Base in-memory repository with common keyed-storage operations.
"""

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel

ModelType = TypeVar("ModelType", bound=BaseModel)


class InMemoryRepository(Generic[ModelType]):
    """Keyed storage for records that carry an ``id`` attribute."""

    def __init__(self):
        """Initialize an empty repository."""
        self._records: Dict[str, ModelType] = {}

    def get(self, id: str) -> Optional[ModelType]:
        """
        Get a single record by ID.

        Args:
            id: Record ID

        Returns:
            Record if found, None otherwise
        """
        return self._records.get(id)

    def get_multi(self, **filters: Any) -> List[ModelType]:
        """
        Get all records matching exact-value filters, in insertion order.

        Args:
            **filters: Attribute name to expected value; None values are ignored

        Returns:
            List of matching records
        """
        records = list(self._records.values())

        for key, value in filters.items():
            if value is not None:
                records = [r for r in records if getattr(r, key, None) == value]

        return records

    def list_all(self) -> List[ModelType]:
        """Return every record in insertion order."""
        return list(self._records.values())

    def put(self, obj: ModelType) -> ModelType:
        """
        Insert or replace a record under its ID.

        Args:
            obj: Record to store

        Returns:
            Stored record
        """
        self._records[obj.id] = obj
        return obj

    def exists(self, id: str) -> bool:
        """Check if a record exists by ID."""
        return id in self._records

    def count(self) -> int:
        """Number of stored records."""
        return len(self._records)

    def clear(self) -> None:
        """Remove every record."""
        self._records.clear()
