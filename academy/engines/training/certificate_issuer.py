"""
Certificate Issuer - one certificate per (staff, tier), with expiry.

Issuance is idempotent: the existence check and the insert are a single
conditional insert against the (staff_id, tier) unique constraint, so
racing completion events end with exactly one certificate number.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta
from sqlalchemy.ext.asyncio import AsyncSession

from academy.config import Settings, get_settings
from academy.engines.training.catalog import CourseCatalog
from academy.engines.training.level_gate import LevelGateResolver, TierStatus
from academy.engines.training.tiers import (
    FALLBACK_SCORES,
    HYGIENE_TIERS,
    TIER_NAMES,
    TIER_ORDER,
    Tier,
    round_half_up,
)
from academy.kernel.events.event_store import EventStore
from academy.kernel.models.base import as_utc, utcnow
from academy.kernel.models.certificate import Certificate
from academy.kernel.models.event_log import EventType
from academy.kernel.models.progress import ProgressRecord
from academy.kernel.store import RecordStore
from academy.logging_config import get_logger

logger = get_logger(__name__)


class ExpiryStatus(str, Enum):
    VALID = "valid"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"


def compute_expiry(issued_at: datetime, months: int = 12) -> datetime:
    """Calendar-month expiry (29 Feb issues expire 28 Feb)."""
    return issued_at + relativedelta(months=months)


def classify_expiry(
    expires_at: datetime,
    now: datetime,
    soon_window: timedelta = timedelta(days=30),
) -> ExpiryStatus:
    """
    expired       now > expires_at
    expiring_soon 0 <= expires_at - now <= soon_window
    valid         otherwise

    The exact expiry instant counts as expiring_soon, so moving now
    forward only ever goes valid -> expiring_soon -> expired.
    """
    remaining = as_utc(expires_at) - as_utc(now)
    if remaining < timedelta(0):
        return ExpiryStatus.EXPIRED
    if remaining <= soon_window:
        return ExpiryStatus.EXPIRING_SOON
    return ExpiryStatus.VALID


def days_until_expiry(expires_at: datetime, now: datetime) -> int:
    """Whole days left; negative once expired."""
    return (as_utc(expires_at) - as_utc(now)).days


def generate_certificate_number(tier: Tier, staff_id: uuid.UUID, prefix: str) -> str:
    """
    <PREFIX>-<TIER>-<first 8 hex of staff id>-<random uuid4 hex>.

    The uuid4 part is drawn per call, so a retried call never reuses a
    number; the tier and staff parts keep numbers readable on paper.
    """
    return f"{prefix}-{tier.value.upper()}-{staff_id.hex[:8].upper()}-{uuid.uuid4().hex.upper()}"


def representative_score(scores: Iterable[Optional[int]], tier: Tier) -> int:
    """Mean of the non-zero quiz scores, or the tier fallback when there are none."""
    recorded = [s for s in scores if s]
    if not recorded:
        return FALLBACK_SCORES[tier]
    return round_half_up(sum(recorded) / len(recorded))


@dataclass
class CertificateView:
    """A certificate with its expiry classified at read time."""

    certificate: Certificate
    status: ExpiryStatus
    days_until_expiry: int

    @property
    def retrain_required(self) -> bool:
        return self.status == ExpiryStatus.EXPIRED and Tier(self.certificate.tier) in HYGIENE_TIERS


class CertificateIssuer:
    def __init__(
        self,
        session: AsyncSession,
        catalog: CourseCatalog,
        level_gate: LevelGateResolver,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.catalog = catalog
        self.level_gate = level_gate
        self.settings = settings or get_settings()
        self.certificates = RecordStore(session, Certificate)
        self.progress = RecordStore(session, ProgressRecord)
        self.events = EventStore(session)
        self.clock = clock

    async def get_certificate(self, staff_id: uuid.UUID, tier: Tier) -> Optional[Certificate]:
        return await self.certificates.first(staff_id=staff_id, tier=tier.value)

    async def issue_if_eligible(
        self,
        staff_id: uuid.UUID,
        tier: Tier,
        staff_name: Optional[str] = None,
    ) -> Optional[Certificate]:
        """
        Issue the tier certificate when the tier is complete.

        Returns the existing certificate when one was already issued, the
        new certificate when this call issued it, or None when the tier is
        not complete.
        """
        certificate, _ = await self.issue(staff_id, tier, staff_name)
        return certificate

    async def issue(
        self,
        staff_id: uuid.UUID,
        tier: Tier,
        staff_name: Optional[str] = None,
    ) -> Tuple[Optional[Certificate], bool]:
        """Same as issue_if_eligible, also reporting whether this call created it."""
        existing = await self.get_certificate(staff_id, tier)
        if existing is not None:
            return existing, False
        if await self.level_gate.tier_status(staff_id, tier) != TierStatus.COMPLETE:
            return None, False

        issued_at = self.clock()
        certificate, created = await self.certificates.create_if_absent(
            {"staff_id": staff_id, "tier": tier.value},
            staff_name=staff_name,
            tier_name=TIER_NAMES[tier],
            certificate_number=generate_certificate_number(
                tier, staff_id, self.settings.certificate_number_prefix
            ),
            quiz_score=await self._score_snapshot(staff_id, tier),
            issued_at=issued_at,
            expires_at=compute_expiry(issued_at, self.settings.certificate_validity_months),
        )
        if created:
            await self.events.log(
                event_type=EventType.CERTIFICATE_ISSUED,
                entity_type="certificate",
                entity_id=certificate.id,
                staff_id=staff_id,
                payload={
                    "tier": tier,
                    "certificate_number": certificate.certificate_number,
                    "quiz_score": certificate.quiz_score,
                    "expires_at": certificate.expires_at,
                },
            )
            logger.info(
                "Certificate issued",
                extra={"staff_id": str(staff_id), "tier": tier.value,
                       "certificate_number": certificate.certificate_number},
            )
        return certificate, created

    async def _score_snapshot(self, staff_id: uuid.UUID, tier: Tier) -> int:
        courses = await self.catalog.courses_in_tier(tier)
        if not courses:
            return FALLBACK_SCORES[tier]
        rows = await self.progress.list({"staff_id": staff_id, "course_id": [c.id for c in courses]})
        return representative_score((r.last_quiz_score for r in rows), tier)

    def describe(self, certificate: Certificate, now: Optional[datetime] = None) -> CertificateView:
        now = now or self.clock()
        return CertificateView(
            certificate=certificate,
            status=classify_expiry(
                certificate.expires_at,
                now,
                timedelta(days=self.settings.expiring_soon_days),
            ),
            days_until_expiry=days_until_expiry(certificate.expires_at, now),
        )

    async def list_certificates(
        self,
        staff_id: uuid.UUID,
        now: Optional[datetime] = None,
    ) -> List[CertificateView]:
        """All certificates for a staff member in tier order, classified at `now`."""
        rows = await self.certificates.list({"staff_id": staff_id})
        rank = {t.value: i for i, t in enumerate(TIER_ORDER)}
        rows.sort(key=lambda c: rank.get(c.tier, len(rank)))
        return [self.describe(c, now) for c in rows]
