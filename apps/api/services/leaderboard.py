"""
Leaderboard ranking and achievement tiers.

Users are ordered by green points, highest first. Python's sort is stable, so
users with equal points keep the order they were supplied in (the store
returns them oldest-profile first).
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol
from uuid import UUID


@dataclass(frozen=True)
class BadgeTier:
    name: str
    threshold: int
    icon: str


# Highest first. The final 0-point tier guarantees every score gets a tier.
BADGE_TIERS: List[BadgeTier] = [
    BadgeTier("Carbon Saver", 1000, "🏆"),
    BadgeTier("Eco Messenger", 750, "🥈"),
    BadgeTier("Digital Minimalist", 500, "🏅"),
    BadgeTier("Getting Started", 250, "🌿"),
    BadgeTier("Newbie", 0, "🌱"),
]


class ScoredUser(Protocol):
    id: UUID
    username: str
    green_points: int


@dataclass(frozen=True)
class RankedUser:
    rank: int
    user_id: Optional[UUID]
    username: str
    green_points: int
    badge: BadgeTier
    total_data_used_mb: float = 0.0


def badge_for_points(points: int, tiers: List[BadgeTier] = BADGE_TIERS) -> BadgeTier:
    for tier in tiers:
        if points >= tier.threshold:
            return tier
    return tiers[-1]


def rank_users(users: Iterable[ScoredUser], tiers: List[BadgeTier] = BADGE_TIERS) -> List[RankedUser]:
    ordered = sorted(users, key=lambda u: u.green_points, reverse=True)
    return [
        RankedUser(
            rank=position,
            user_id=getattr(user, "id", None),
            username=user.username,
            green_points=user.green_points,
            badge=badge_for_points(user.green_points, tiers),
            total_data_used_mb=getattr(user, "total_data_used_mb", 0.0) or 0.0,
        )
        for position, user in enumerate(ordered, start=1)
    ]


def newly_earned_tiers(
    points_before: int,
    points_after: int,
    tiers: List[BadgeTier] = BADGE_TIERS,
) -> List[BadgeTier]:
    """Tiers whose threshold was crossed by going from points_before to points_after.

    The zero-point tier is everyone's starting tier and is never "earned".
    """
    return [
        tier for tier in reversed(tiers)
        if tier.threshold > 0 and points_before < tier.threshold <= points_after
    ]
