"""
Journey Progress Aggregator - cross-module onboarding milestones.

values -> hygiene -> certification. The journey is a historical ratchet:
milestones stay reached and current_step never moves backwards, even when
a certificate later expires.
"""

import uuid
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from academy.engines.training.tiers import HYGIENE_TIERS, Tier
from academy.kernel.events.event_store import EventStore
from academy.kernel.models.base import utcnow
from academy.kernel.models.event_log import EventType
from academy.kernel.models.journey import JOURNEY_STEP_ORDER, JourneyProgress, JourneyStep
from academy.kernel.store import RecordStore
from academy.logging_config import get_logger

logger = get_logger(__name__)


def compute_step(values_completed: bool, hygiene_completed: bool, certified: bool) -> JourneyStep:
    """First milestone not yet reached."""
    if not values_completed:
        return JourneyStep.VALUES
    if not hygiene_completed:
        return JourneyStep.HYGIENE
    if not certified:
        return JourneyStep.CERTIFICATION
    return JourneyStep.COMPLETE


def advance_step(current: JourneyStep, candidate: JourneyStep) -> JourneyStep:
    """The later of two steps."""
    if JOURNEY_STEP_ORDER.index(candidate) > JOURNEY_STEP_ORDER.index(current):
        return candidate
    return current


class JourneyAggregator:
    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.journeys = RecordStore(session, JourneyProgress)
        self.events = EventStore(session)
        self.clock = clock

    async def get_journey(self, staff_id: uuid.UUID) -> JourneyProgress:
        """Fetch the staff member's journey, creating it on first use."""
        journey, _ = await self.journeys.create_if_absent(
            {"staff_id": staff_id},
            values_completed=False,
            hygiene_completed=False,
            certified=False,
            current_step=JourneyStep.VALUES.value,
            last_updated=self.clock(),
        )
        return journey

    async def on_culture_acknowledged(self, staff_id: uuid.UUID) -> JourneyProgress:
        journey = await self.get_journey(staff_id)
        if journey.values_completed:
            return journey
        await self.events.log(
            event_type=EventType.CULTURE_ACKNOWLEDGED,
            entity_type="journey",
            entity_id=journey.id,
            staff_id=staff_id,
        )
        return await self._update(journey, values_completed=True)

    async def on_tier_completed(self, staff_id: uuid.UUID, tier: Tier) -> JourneyProgress:
        """Any hygiene tier completing marks the hygiene milestone."""
        journey = await self.get_journey(staff_id)
        if tier not in HYGIENE_TIERS or journey.hygiene_completed:
            return journey
        return await self._update(journey, hygiene_completed=True)

    async def on_certificate_issued(
        self,
        staff_id: uuid.UUID,
        tier: Tier,
        issued_at: Optional[datetime] = None,
    ) -> JourneyProgress:
        journey = await self.get_journey(staff_id)
        if tier not in HYGIENE_TIERS or journey.certified:
            return journey
        return await self._update(
            journey,
            certified=True,
            certificate_issued_at=issued_at or self.clock(),
        )

    async def _update(self, journey: JourneyProgress, **fields) -> JourneyProgress:
        current = JourneyStep(journey.current_step)
        candidate = compute_step(
            fields.get("values_completed", journey.values_completed),
            fields.get("hygiene_completed", journey.hygiene_completed),
            fields.get("certified", journey.certified),
        )
        step = advance_step(current, candidate)
        fields["current_step"] = step.value
        fields["last_updated"] = self.clock()
        journey = await self.journeys.update(journey.id, **fields)

        if step != current:
            await self.events.log(
                event_type=EventType.JOURNEY_ADVANCED,
                entity_type="journey",
                entity_id=journey.id,
                staff_id=journey.staff_id,
                payload={"from": current, "to": step},
            )
            logger.info(
                "Journey advanced",
                extra={"staff_id": str(journey.staff_id), "from_step": current.value, "to_step": step.value},
            )
        return journey
