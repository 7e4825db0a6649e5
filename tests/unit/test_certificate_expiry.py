"""Unit tests for certificate expiry classification and numbering."""

import re
import uuid
from datetime import datetime, timedelta, timezone

from academy.engines.training.certificate_issuer import (
    ExpiryStatus,
    classify_expiry,
    compute_expiry,
    days_until_expiry,
    generate_certificate_number,
    representative_score,
)
from academy.engines.training.tiers import Tier

ISSUED = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


class TestComputeExpiry:
    def test_twelve_calendar_months(self):
        assert compute_expiry(ISSUED) == datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

    def test_leap_day_clamps(self):
        leap = datetime(2024, 2, 29, tzinfo=timezone.utc)
        assert compute_expiry(leap) == datetime(2025, 2, 28, tzinfo=timezone.utc)

    def test_custom_validity(self):
        assert compute_expiry(ISSUED, months=6) == datetime(2025, 7, 15, 12, 0, tzinfo=timezone.utc)


class TestClassifyExpiry:
    def test_issued_400_days_ago_is_expired(self):
        now = ISSUED + timedelta(days=400)
        assert classify_expiry(compute_expiry(ISSUED), now) == ExpiryStatus.EXPIRED

    def test_twenty_days_left_is_expiring_soon(self):
        expires = compute_expiry(ISSUED)
        assert classify_expiry(expires, expires - timedelta(days=20)) == ExpiryStatus.EXPIRING_SOON

    def test_window_boundary(self):
        expires = compute_expiry(ISSUED)
        assert classify_expiry(expires, expires - timedelta(days=30)) == ExpiryStatus.EXPIRING_SOON
        assert classify_expiry(expires, expires - timedelta(days=30, seconds=1)) == ExpiryStatus.VALID

    def test_expiry_instant_is_expiring_soon(self):
        expires = compute_expiry(ISSUED)
        assert classify_expiry(expires, expires) == ExpiryStatus.EXPIRING_SOON
        assert classify_expiry(expires, expires + timedelta(seconds=1)) == ExpiryStatus.EXPIRED

    def test_fresh_certificate_is_valid(self):
        assert classify_expiry(compute_expiry(ISSUED), ISSUED) == ExpiryStatus.VALID

    def test_monotonic_as_time_moves_forward(self):
        expires = compute_expiry(ISSUED)
        order = [ExpiryStatus.VALID, ExpiryStatus.EXPIRING_SOON, ExpiryStatus.EXPIRED]
        seen = [
            classify_expiry(expires, ISSUED + timedelta(days=d))
            for d in range(0, 800, 7)
        ]
        ranks = [order.index(s) for s in seen]
        assert ranks == sorted(ranks)
        assert set(seen) == set(order)

    def test_naive_datetimes_are_treated_as_utc(self):
        expires = compute_expiry(ISSUED).replace(tzinfo=None)
        assert classify_expiry(expires, ISSUED + timedelta(days=400)) == ExpiryStatus.EXPIRED

    def test_days_until_expiry(self):
        expires = compute_expiry(ISSUED)
        assert days_until_expiry(expires, expires - timedelta(days=20)) == 20
        assert days_until_expiry(expires, expires + timedelta(days=3)) == -3


class TestCertificateNumber:
    def test_format(self):
        staff_id = uuid.UUID("12345678-9abc-def0-1234-56789abcdef0")
        number = generate_certificate_number(Tier.L2, staff_id, "AURA")
        assert re.fullmatch(r"AURA-L2-12345678-[0-9A-F]{32}", number)

    def test_foundation_label(self):
        number = generate_certificate_number(Tier.FOUNDATION, uuid.uuid4(), "AURA")
        assert number.startswith("AURA-FOUNDATION-")

    def test_retry_never_reuses_a_number(self):
        staff_id = uuid.uuid4()
        numbers = {generate_certificate_number(Tier.L1, staff_id, "AURA") for _ in range(50)}
        assert len(numbers) == 50


class TestRepresentativeScore:
    def test_mean_of_recorded_scores(self):
        assert representative_score([90, 100], Tier.L1) == 95

    def test_zero_and_missing_scores_ignored(self):
        assert representative_score([None, 0, 85], Tier.L2) == 85

    def test_halves_round_up(self):
        assert representative_score([90, 95], Tier.L3) == 93

    def test_fallback_to_tier_pass_mark(self):
        assert representative_score([], Tier.FOUNDATION) == 80
        assert representative_score([None, None], Tier.L3) == 90
