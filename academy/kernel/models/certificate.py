"""
Tier certificates. At most one per (staff, tier).
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from academy.kernel.models.base import Base, generate_uuid


class Certificate(Base):
    """
    Issued once when a tier becomes complete. Expired certificates are
    kept as-is; expiry is classified at read time.
    """

    __tablename__ = "training_certificates"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    staff_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    staff_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    tier: Mapped[str] = mapped_column(String(20), nullable=False)
    tier_name: Mapped[str] = mapped_column(String(100), nullable=False)
    certificate_number: Mapped[str] = mapped_column(String(100), nullable=False)
    quiz_score: Mapped[int] = mapped_column(Integer, nullable=False)

    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("staff_id", "tier", name="uq_training_certificates_staff_tier"),
        UniqueConstraint("certificate_number", name="uq_training_certificates_number"),
    )

    def __repr__(self) -> str:
        return f"<Certificate {self.certificate_number} {self.tier}>"
