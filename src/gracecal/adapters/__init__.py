"""Adapters - I/O implementations of ports."""

from .errors import DataStoreError, NotFoundError
from .json_store import JsonDataStore
from .supabase_rest import SupabaseAdapter

__all__ = [
    "DataStoreError",
    "NotFoundError",
    "JsonDataStore",
    "SupabaseAdapter",
]
