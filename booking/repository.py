"""Interface contract for the document store behind `BookingStore`."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, NamedTuple


class Document(NamedTuple):
    id: str
    data: dict[str, Any]


# (field, operator, value), e.g. ("date", "==", "2025-05-07")
Filter = tuple[str, str, Any]


class Repository(ABC):
    """Typed document operations; implementations raise `booking.exceptions.StoreError`."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Return the document's fields, or None if it does not exist."""
        raise NotImplementedError

    @abstractmethod
    async def put(
        self, collection: str, doc_id: str, data: dict[str, Any], overwrite: bool = True
    ) -> bool:
        """Write a document. With `overwrite=False` an existing document is left
        untouched and False is returned; the existence check is atomic."""
        raise NotImplementedError

    @abstractmethod
    async def add(self, collection: str, data: dict[str, Any]) -> str:
        """Insert a document under a store-assigned id and return that id."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Merge top-level fields into an existing document (NotFoundError otherwise)."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def increment(
        self, collection: str, doc_id: str, field_path: Sequence[str], amount: int
    ) -> None:
        """Atomically add `amount` to a numeric field of an existing document."""
        raise NotImplementedError

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Document]:
        raise NotImplementedError
