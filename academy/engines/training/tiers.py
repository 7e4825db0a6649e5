"""
Tier definitions and per-tier policies.

Tiers progress in a fixed order: Foundation -> L1 -> L2 -> L3.
L1-L3 are the food hygiene tiers.
"""

from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, List, Optional


class Tier(str, Enum):
    """The four training tiers, declared in progression order."""
    FOUNDATION = "foundation"
    L1 = "L1"
    L2 = "L2"
    L3 = "L3"


TIER_ORDER: List[Tier] = [Tier.FOUNDATION, Tier.L1, Tier.L2, Tier.L3]

TIER_NAMES: Dict[Tier, str] = {
    Tier.FOUNDATION: "Foundation: Culture & Values",
    Tier.L1: "Level 1 Food Hygiene",
    Tier.L2: "Level 2 Food Hygiene",
    Tier.L3: "Level 3 Food Hygiene",
}

# Default pass marks; a course may override its tier's value
PASS_MARKS: Dict[Tier, int] = {
    Tier.FOUNDATION: 80,
    Tier.L1: 80,
    Tier.L2: 85,
    Tier.L3: 90,
}

# Score snapshotted on a certificate when the tier has no recorded quiz scores
FALLBACK_SCORES: Dict[Tier, int] = dict(PASS_MARKS)

HYGIENE_TIERS = frozenset({Tier.L1, Tier.L2, Tier.L3})


def tier_index(tier: Tier) -> int:
    """Position of a tier in the progression (Foundation is 0)."""
    return TIER_ORDER.index(tier)


def previous_tier(tier: Tier) -> Optional[Tier]:
    """The tier that must be complete before this one unlocks."""
    idx = tier_index(tier)
    return TIER_ORDER[idx - 1] if idx > 0 else None


def pass_mark_for(tier: Tier, override: Optional[int] = None) -> int:
    """Effective pass mark: the course override when set, else the tier default."""
    return override if override is not None else PASS_MARKS[tier]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (72.5 -> 73)."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
