"""
Event Store service for append-only audit logging.

Mutating services write their audit row in the same session as the
change, so both commit or roll back together.
"""

import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import select, and_, desc
from sqlalchemy.ext.asyncio import AsyncSession

from parley.kernel.models.event_log import EventLog, EventType


class EventStore:
    """
    Service for managing the immutable event log.

    Usage:
        event_store = EventStore(session)
        await event_store.log(
            event_type=EventType.TOPIC_CREATED,
            entity_type="topic",
            entity_id=topic.id,
            site_id=site.id,
            actor_id=member.id,
            payload={"slug": topic.slug},
        )
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log(
        self,
        event_type: EventType,
        entity_type: str,
        entity_id: uuid.UUID,
        site_id: Optional[uuid.UUID] = None,
        actor_id: Optional[uuid.UUID] = None,
        payload: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> EventLog:
        """
        Add an event to the audit log.

        Args:
            event_type: The type of event
            entity_type: The type of entity (topic, reply, user, member)
            entity_id: The ID of the entity
            site_id: Tenant the event happened in, if any
            actor_id: Member (or user, for account events) that triggered it
            payload: Additional event data
            ip_address: Client IP address

        Returns:
            The created EventLog record
        """
        event = EventLog(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            site_id=site_id,
            actor_id=actor_id,
            payload=self._serialize_payload(payload or {}),
            ip_address=ip_address,
        )

        self.session.add(event)
        # Caller commits with the rest of the unit of work
        return event

    async def get_entity_history(
        self,
        entity_type: str,
        entity_id: uuid.UUID,
        event_types: Optional[List[EventType]] = None,
        limit: int = 100,
    ) -> List[EventLog]:
        """Get the event history for an entity, newest first."""
        query = select(EventLog).where(
            and_(
                EventLog.entity_type == entity_type,
                EventLog.entity_id == entity_id,
            )
        )

        if event_types:
            query = query.where(EventLog.event_type.in_(event_types))

        query = query.order_by(desc(EventLog.created_at)).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    @staticmethod
    def _serialize_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
        """Convert UUIDs and enums to JSON-friendly values."""
        serialized: Dict[str, Any] = {}
        for key, value in payload.items():
            if isinstance(value, uuid.UUID):
                serialized[key] = str(value)
            elif hasattr(value, "value"):
                serialized[key] = value.value
            else:
                serialized[key] = value
        return serialized
