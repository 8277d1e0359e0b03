"""
Achievements router.

GET /achievements/badges   — badge catalog with unlocked flags for a user
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from cadence.db.base import get_db
from cadence.schemas.consistency import BadgeShelfItem, BadgeShelfResponse
from cadence.services.consistency import badge_shelf

router = APIRouter(prefix="/achievements", tags=["achievements"])


@router.get("/badges", response_model=BadgeShelfResponse, summary="Badge shelf")
def list_badges(
    user_id: str = Query(min_length=1, max_length=64),
    db: Session = Depends(get_db),
):
    """Badges unlock from the best streak recorded by the last recompute."""
    shelf = badge_shelf(db, user_id)
    return BadgeShelfResponse(
        user_id=user_id,
        badges=[
            BadgeShelfItem(
                threshold_days=s.badge.threshold_days,
                label=s.badge.label,
                icon_kind=s.badge.icon_kind.value,
                unlocked=s.unlocked,
            )
            for s in shelf
        ],
    )
