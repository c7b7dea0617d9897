"""
Audit log - append-only record of account and forum mutations.
"""

from parley.kernel.events.event_store import EventStore

__all__ = ["EventStore"]
