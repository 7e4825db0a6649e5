"""
Event Store service for append-only training audit logging.

Progression steps are logged here before the request commits.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import select, and_, desc
from sqlalchemy.ext.asyncio import AsyncSession

from academy.kernel.models.event_log import EventLog, EventType


class EventStore:
    """
    Service for managing the immutable event log.

    Usage:
        event_store = EventStore(session)
        await event_store.log(
            event_type=EventType.COURSE_COMPLETED,
            entity_type="course",
            entity_id=course.id,
            staff_id=staff_id,
            payload={"tier": course.tier},
        )
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log(
        self,
        event_type: EventType,
        entity_type: str,
        entity_id: uuid.UUID,
        staff_id: uuid.UUID,
        payload: Optional[Dict[str, Any]] = None,
        actor_id: Optional[uuid.UUID] = None,
    ) -> EventLog:
        """
        Append an event to the audit log.

        Args:
            event_type: The type of event
            entity_type: course, certificate, journey, ...
            entity_id: The ID of the entity
            staff_id: Staff member whose training the event concerns
            payload: Additional event data
            actor_id: Who acted, when not the staff member themself

        Returns:
            The created EventLog record
        """
        if payload:
            payload = self._serialize_payload(payload)

        event = EventLog(
            event_type=event_type.value,
            entity_type=entity_type,
            entity_id=entity_id,
            staff_id=staff_id,
            actor_id=actor_id,
            payload=payload or {},
        )

        self.session.add(event)
        # Caller flushes/commits with the rest of the request
        return event

    async def get_staff_activity(
        self,
        staff_id: uuid.UUID,
        event_types: Optional[List[EventType]] = None,
        limit: int = 100,
    ) -> List[EventLog]:
        """
        Get all events concerning a staff member, newest first.
        """
        query = select(EventLog).where(EventLog.staff_id == staff_id)
        if event_types:
            query = query.where(EventLog.event_type.in_([e.value for e in event_types]))
        query = query.order_by(desc(EventLog.created_at)).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_entity_history(
        self,
        entity_type: str,
        entity_id: uuid.UUID,
        limit: int = 100,
    ) -> List[EventLog]:
        """Get the event history for a specific entity, newest first."""
        query = (
            select(EventLog)
            .where(
                and_(
                    EventLog.entity_type == entity_type,
                    EventLog.entity_id == entity_id,
                )
            )
            .order_by(desc(EventLog.created_at))
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    def _serialize_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Make payload values JSON-serializable."""
        serialized: Dict[str, Any] = {}
        for key, value in payload.items():
            if isinstance(value, uuid.UUID):
                serialized[key] = str(value)
            elif isinstance(value, datetime):
                serialized[key] = value.isoformat()
            elif isinstance(value, Enum):
                serialized[key] = value.value
            elif isinstance(value, dict):
                serialized[key] = self._serialize_payload(value)
            elif isinstance(value, list):
                serialized[key] = [
                    str(v) if isinstance(v, uuid.UUID) else v
                    for v in value
                ]
            else:
                serialized[key] = value
        return serialized
