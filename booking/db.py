"""
Firestore implementation of `booking.repository.Repository`.

Functions
---------
get_client(settings)
    Build an async Firestore client with Application Default Credentials
    (ADC).  Works both locally and on Cloud Run.

Classes
-------
FirestoreRepository
    Document operations over that client.  SDK errors are re-raised as
    `booking.exceptions.StoreError` subclasses.
"""
import functools
import logging
from collections.abc import Sequence
from typing import Any

from google.api_core import exceptions as gexc
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.cloud.firestore_v1.field_path import FieldPath

from booking.config import Settings
from booking.exceptions import NotFoundError, PermissionDeniedError, StoreError
from booking.repository import Document, Filter, Repository

logger = logging.getLogger(__name__)


def get_client(settings: Settings) -> firestore.AsyncClient:
    # project ID inferred from ADC unless configured
    return firestore.AsyncClient(
        project=settings.gcp_project, database=settings.firestore_database
    )


def _translate_errors(method):
    @functools.wraps(method)
    async def wrapper(self, collection: str, *args, **kwargs):
        try:
            return await method(self, collection, *args, **kwargs)
        except gexc.NotFound as err:
            raise NotFoundError(f"{collection}: {err.message}") from err
        except (gexc.Forbidden, gexc.PermissionDenied, gexc.Unauthenticated) as err:
            raise PermissionDeniedError(f"{collection}: {err.message}") from err
        except gexc.GoogleAPICallError as err:  # network / quota / internal
            raise StoreError(f"Firestore error: {err}") from err

    return wrapper


class FirestoreRepository(Repository):
    def __init__(self, client: firestore.AsyncClient):
        self.client = client

    def _doc(self, collection: str, doc_id: str):
        return self.client.collection(collection).document(doc_id)

    @_translate_errors
    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        snapshot = await self._doc(collection, doc_id).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    @_translate_errors
    async def put(
        self, collection: str, doc_id: str, data: dict[str, Any], overwrite: bool = True
    ) -> bool:
        if overwrite:
            await self._doc(collection, doc_id).set(data)
            return True
        try:
            await self._doc(collection, doc_id).create(data)
        except gexc.AlreadyExists:
            return False
        return True

    @_translate_errors
    async def add(self, collection: str, data: dict[str, Any]) -> str:
        _, ref = await self.client.collection(collection).add(data)
        return ref.id

    @_translate_errors
    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        await self._doc(collection, doc_id).update(fields)

    @_translate_errors
    async def delete(self, collection: str, doc_id: str) -> None:
        await self._doc(collection, doc_id).delete()

    @_translate_errors
    async def increment(
        self, collection: str, doc_id: str, field_path: Sequence[str], amount: int
    ) -> None:
        # slot keys like "09:00" need quoting, FieldPath takes care of it
        path = FieldPath(*field_path).to_api_repr()
        await self._doc(collection, doc_id).update({path: firestore.Increment(amount)})

    @_translate_errors
    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Document]:
        query = self.client.collection(collection)
        for field, op, value in filters:
            query = query.where(filter=FieldFilter(field, op, value))
        if order_by is not None:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        return [Document(snapshot.id, snapshot.to_dict() or {}) async for snapshot in query.stream()]
