from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from .models import Tier


DEFAULT_MULTIPLIER = 2
DEFAULT_FLOOR = 0


@dataclass(frozen=True)
class TierPolicy:
    """
    How rating deltas are scaled for one account tier.

    - Basic: deltas are applied as-is.
    - Premium: losses are divided by `multiplier`, gains are untouched.
    - PremiumPlus: losses are divided and gains multiplied by `multiplier`.

    The resulting rating never drops below `floor`.
    """

    tier: Tier = Tier.BASIC
    multiplier: int = DEFAULT_MULTIPLIER
    floor: int = DEFAULT_FLOOR

    def __post_init__(self) -> None:
        if self.multiplier <= 0:
            raise ValueError("Tier multiplier must be greater than zero.")
        if self.floor < 0:
            raise ValueError("Rating floor cannot be negative.")


def apply_delta(policy: TierPolicy, base_rating: int, delta: int) -> int:
    """Return the rating after applying `delta` under `policy`."""

    if delta < 0 and policy.tier in (Tier.PREMIUM, Tier.PREMIUM_PLUS):
        delta = -(-delta // policy.multiplier)
    elif delta > 0 and policy.tier is Tier.PREMIUM_PLUS:
        delta = delta * policy.multiplier

    return max(policy.floor, base_rating + delta)


def build_rules(
    multiplier: int = DEFAULT_MULTIPLIER,
    floor: int = DEFAULT_FLOOR,
) -> Dict[Tier, TierPolicy]:
    """One policy per tier, sharing the same multiplier and floor."""

    return {tier: TierPolicy(tier=tier, multiplier=multiplier, floor=floor) for tier in Tier}
