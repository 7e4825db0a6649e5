"""Generic record store over SQLAlchemy models."""

from academy.kernel.store.record_store import RecordStore

__all__ = ["RecordStore"]
