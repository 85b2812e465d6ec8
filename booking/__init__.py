"""
Data-access layer for the HappyVille booking site.

Exposes the `BookingStore` and its wiring so callers can do:

    from booking import build_store
    store = build_store()
    result = await store.get_availability("2025-05-07")
"""
from .results import ErrorKind, Result
from .store import BookingStore, build_store   # re-export for convenience

__all__ = ["BookingStore", "ErrorKind", "Result", "build_store"]
