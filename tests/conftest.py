import asyncio
import copy
import datetime
import itertools

import pytest

from booking.auth import IdentityProvider, User
from booking.config import Settings
from booking.exceptions import AuthenticationError, NotFoundError, StoreError
from booking.repository import Document, Repository
from booking.store import BookingStore

_OPS = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a < b,
    "<=": lambda a, b: a <= b,
    ">": lambda a, b: a > b,
    ">=": lambda a, b: a >= b,
}


class MemoryRepository(Repository):
    """In-process document store with the same semantics the store relies on."""

    def __init__(self):
        self.collections: dict[str, dict[str, dict]] = {}
        self._ids = itertools.count(1)
        self.fail_on: set[str] = set()  # method names that raise StoreError

    def _check(self, method):
        if method in self.fail_on:
            raise StoreError(f"{method} unavailable")

    def _collection(self, name):
        return self.collections.setdefault(name, {})

    async def get(self, collection, doc_id):
        self._check("get")
        await asyncio.sleep(0)
        doc = self._collection(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def put(self, collection, doc_id, data, overwrite=True):
        self._check("put")
        await asyncio.sleep(0)
        docs = self._collection(collection)
        if not overwrite and doc_id in docs:
            return False
        docs[doc_id] = copy.deepcopy(data)
        return True

    async def add(self, collection, data):
        self._check("add")
        doc_id = f"doc{next(self._ids)}"
        self._collection(collection)[doc_id] = copy.deepcopy(data)
        return doc_id

    async def update(self, collection, doc_id, fields):
        self._check("update")
        docs = self._collection(collection)
        if doc_id not in docs:
            raise NotFoundError(f"{collection}: no document {doc_id}")
        docs[doc_id].update(copy.deepcopy(fields))

    async def delete(self, collection, doc_id):
        self._check("delete")
        self._collection(collection).pop(doc_id, None)

    async def increment(self, collection, doc_id, field_path, amount):
        self._check("increment")
        await asyncio.sleep(0)
        docs = self._collection(collection)
        if doc_id not in docs:
            raise NotFoundError(f"{collection}: no document {doc_id}")
        node = docs[doc_id]
        *parents, leaf = field_path
        for key in parents:
            node = node.setdefault(key, {})
        node[leaf] = node.get(leaf, 0) + amount

    async def query(self, collection, filters=(), order_by=None, descending=False):
        self._check("query")
        docs = [
            Document(doc_id, copy.deepcopy(data))
            for doc_id, data in self._collection(collection).items()
            if all(field in data and _OPS[op](data[field], value) for field, op, value in filters)
        ]
        if order_by is not None:
            docs = [doc for doc in docs if order_by in doc.data]
            docs.sort(key=lambda doc: doc.data[order_by], reverse=descending)
        return docs


class FakeIdentity(IdentityProvider):
    def __init__(self, accounts: dict[str, str] | None = None):
        self.accounts = accounts or {}
        self.current_user = None

    async def sign_in(self, email, password):
        if self.accounts.get(email) != password:
            raise AuthenticationError("Invalid email or password.")
        self.current_user = User(uid=f"uid-{email}", email=email, id_token="token")
        return self.current_user

    async def sign_out(self):
        self.current_user = None


@pytest.fixture
def settings():
    return Settings(_env_file=None, firebase_api_key="test-key")


@pytest.fixture
def repository():
    return MemoryRepository()


@pytest.fixture
def identity():
    return FakeIdentity(
        {"admin@happyville.test": "admin-pw", "visitor@happyville.test": "visitor-pw"}
    )


@pytest.fixture
def store(repository, identity, settings):
    repository.collections["admins"] = {"a1": {"email": "admin@happyville.test"}}
    return BookingStore(repository, identity, settings)


@pytest.fixture
def booking_date():
    return datetime.date(2025, 5, 7).isoformat()
