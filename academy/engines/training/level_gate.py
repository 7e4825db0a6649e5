"""
Level Gate Resolver - derives tier lock/completion from progress records.

Nothing is cached: every call re-reads the catalog and progress rows, so
a retroactively corrected record changes the answer on the next call.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession

from academy.engines.training.catalog import CourseCatalog
from academy.engines.training.exceptions import TierLocked
from academy.engines.training.tiers import TIER_NAMES, TIER_ORDER, Tier, previous_tier, round_half_up
from academy.kernel.models.progress import ProgressRecord, ProgressStatus
from academy.kernel.store import RecordStore
from academy.logging_config import get_logger

logger = get_logger(__name__)


class TierStatus(str, Enum):
    LOCKED = "locked"
    UNLOCKED_INCOMPLETE = "unlocked_incomplete"
    COMPLETE = "complete"


@dataclass
class TierSnapshot:
    """Point-in-time view of one tier for one staff member."""

    tier: Tier
    name: str
    status: TierStatus
    unlocked: bool
    total_courses: int
    completed_courses: int
    progress_percent: int


def tier_progress_percent(completed: int, total: int) -> int:
    """100 * completed / total, halves rounded up; 0 for an empty tier."""
    if total == 0:
        return 0
    return round_half_up(100 * completed / total)


def resolve_status(complete: bool, unlocked: bool) -> TierStatus:
    """A locked tier is locked even when all of its courses are done."""
    if not unlocked:
        return TierStatus.LOCKED
    return TierStatus.COMPLETE if complete else TierStatus.UNLOCKED_INCOMPLETE


class LevelGateResolver:
    """
    Tier gating rules:

    - Foundation is always unlocked.
    - Tier n unlocks when tier n-1 is complete.
    - A tier is complete when it is unlocked and every course in it has a
      completed record (an unlocked tier without courses is vacuously
      complete).
    """

    def __init__(self, session: AsyncSession, catalog: CourseCatalog):
        self.catalog = catalog
        self.progress = RecordStore(session, ProgressRecord)

    async def completed_course_ids(
        self,
        staff_id: uuid.UUID,
        course_ids: Iterable[uuid.UUID],
    ) -> Set[uuid.UUID]:
        ids = list(course_ids)
        if not ids:
            return set()
        rows = await self.progress.list({
            "staff_id": staff_id,
            "course_id": ids,
            "status": ProgressStatus.COMPLETED.value,
        })
        return {r.course_id for r in rows}

    async def _completion(self, staff_id: uuid.UUID, tier: Tier) -> tuple[int, int]:
        courses = await self.catalog.courses_in_tier(tier)
        done = await self.completed_course_ids(staff_id, [c.id for c in courses])
        return len(done), len(courses)

    async def is_complete(self, staff_id: uuid.UUID, tier: Tier) -> bool:
        completed, total = await self._completion(staff_id, tier)
        if completed != total:
            return False
        return await self.is_unlocked(staff_id, tier)

    async def is_unlocked(self, staff_id: uuid.UUID, tier: Tier) -> bool:
        prev = previous_tier(tier)
        if prev is None:
            return True
        return await self.is_complete(staff_id, prev)

    async def tier_status(self, staff_id: uuid.UUID, tier: Tier) -> TierStatus:
        unlocked = await self.is_unlocked(staff_id, tier)
        if not unlocked:
            return TierStatus.LOCKED
        completed, total = await self._completion(staff_id, tier)
        return resolve_status(completed == total, unlocked)

    async def tier_progress(self, staff_id: uuid.UUID, tier: Tier) -> int:
        completed, total = await self._completion(staff_id, tier)
        return tier_progress_percent(completed, total)

    async def snapshot(
        self,
        staff_id: uuid.UUID,
        tier: Tier,
        previous_complete: Optional[bool] = None,
    ) -> TierSnapshot:
        completed, total = await self._completion(staff_id, tier)
        if previous_complete is None:
            unlocked = await self.is_unlocked(staff_id, tier)
        else:
            unlocked = previous_complete
        complete = completed == total
        return TierSnapshot(
            tier=tier,
            name=TIER_NAMES[tier],
            status=resolve_status(complete, unlocked),
            unlocked=unlocked,
            total_courses=total,
            completed_courses=completed,
            progress_percent=tier_progress_percent(completed, total),
        )

    async def overview(self, staff_id: uuid.UUID) -> List[TierSnapshot]:
        """Snapshots for every tier in progression order."""
        snapshots: List[TierSnapshot] = []
        previous_complete = True  # Foundation has no prerequisite
        for tier in TIER_ORDER:
            snap = await self.snapshot(staff_id, tier, previous_complete=previous_complete)
            snapshots.append(snap)
            previous_complete = snap.status == TierStatus.COMPLETE
        return snapshots

    async def ensure_unlocked(
        self,
        staff_id: uuid.UUID,
        tier: Tier,
        course_id: Optional[uuid.UUID] = None,
    ) -> None:
        """Guard for course interaction. Raises TierLocked."""
        if await self.is_unlocked(staff_id, tier):
            return
        logger.warning(
            "Rejected interaction with locked tier",
            extra={"staff_id": str(staff_id), "tier": tier.value, "course_id": str(course_id)},
        )
        raise TierLocked(tier.value, course_id)
