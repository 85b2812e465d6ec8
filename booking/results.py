"""
Uniform outcome envelope returned by every `BookingStore` operation.

    >>> Result.ok(id="abc").id
    'abc'
    >>> Result.fail("Not an admin user", ErrorKind.NOT_ADMIN).success
    False
"""
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    UNAUTHENTICATED = "unauthenticated"
    NOT_ADMIN = "not_admin"
    INVALID = "invalid"
    STORE = "store"
    UNKNOWN = "unknown"


class Result(BaseModel):
    """Success flag plus either payload fields (as extras) or an error."""

    model_config = ConfigDict(extra="allow", frozen=True, arbitrary_types_allowed=True)

    success: bool
    error: str | None = None
    kind: ErrorKind | None = None

    @classmethod
    def ok(cls, **payload: Any) -> "Result":
        return cls(success=True, **payload)

    @classmethod
    def fail(cls, message: str, kind: ErrorKind = ErrorKind.UNKNOWN) -> "Result":
        return cls(success=False, error=message, kind=kind)

    def __bool__(self) -> bool:
        return self.success
