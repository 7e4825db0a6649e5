"""
Append-only audit logging for training progression.
"""

from academy.kernel.events.event_store import EventStore

__all__ = ["EventStore"]
