"""
Achievement detector — badge threshold crossings on the best streak.

detect(previous_best, new_best) returns the first badge, in ascending
threshold order, with previous_best < threshold <= new_best. At most one
badge per recompute: a jump from 5 to 35 (a backfilled log) reports the
7-day badge only, and 14/30 are never reported for that jump.

previous_best is always supplied by the caller. This module keeps no memory
of what was already celebrated.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Sequence


class IconKind(str, enum.Enum):
    FLAME = "flame"
    TROPHY = "trophy"
    CROWN = "crown"


@dataclass(frozen=True)
class Badge:
    threshold_days: int
    label: str
    icon_kind: IconKind


@dataclass(frozen=True)
class AchievementEvent:
    badge: Badge


# Ascending by threshold_days.
BADGE_CATALOG: tuple[Badge, ...] = (
    Badge(3, "First flame", IconKind.FLAME),
    Badge(7, "Strong week", IconKind.TROPHY),
    Badge(14, "Two weeks", IconKind.FLAME),
    Badge(30, "Full month", IconKind.CROWN),
    Badge(60, "Two months", IconKind.TROPHY),
    Badge(100, "Centennial", IconKind.CROWN),
)


def detect(
    previous_best: int,
    new_best: int,
    catalog: Sequence[Badge] = BADGE_CATALOG,
) -> Optional[Badge]:
    for badge in catalog:
        if new_best >= badge.threshold_days and previous_best < badge.threshold_days:
            return badge
    return None


def detect_event(
    previous_best: int,
    new_best: int,
    catalog: Sequence[Badge] = BADGE_CATALOG,
) -> Optional[AchievementEvent]:
    badge = detect(previous_best, new_best, catalog)
    return AchievementEvent(badge=badge) if badge is not None else None


def unlocked_badges(best_streak: int, catalog: Sequence[Badge] = BADGE_CATALOG) -> list[Badge]:
    return [b for b in catalog if best_streak >= b.threshold_days]


def find_badge(threshold_days: int, catalog: Sequence[Badge] = BADGE_CATALOG) -> Optional[Badge]:
    return next((b for b in catalog if b.threshold_days == threshold_days), None)
