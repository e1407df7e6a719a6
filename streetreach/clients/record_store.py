"""Dependency provider for the record store."""

from functools import lru_cache

from streetreach.services.record_store import RecordStore, create_record_store


@lru_cache(maxsize=1)
def get_record_store() -> RecordStore:
    """Get singleton RecordStore instance."""
    return create_record_store()
