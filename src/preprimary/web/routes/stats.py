"""Dashboard endpoints: counts and recent activity."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from preprimary.core.dashboard import get_recent_activity, get_stats
from preprimary.db.users_repository import UserRecord
from preprimary.web.deps import get_current_user
from preprimary.web.schemas import ActivityListResponse, ActivityResponse, StatsResponse

router = APIRouter(prefix="/api", tags=["dashboard"])


@router.get("/stats", response_model=StatsResponse)
async def dashboard_stats(user: UserRecord = Depends(get_current_user)) -> StatsResponse:
    """Headline counts. Teachers only count their own records."""
    return StatsResponse(**asdict(get_stats(user)))


@router.get("/activities", response_model=ActivityListResponse)
async def recent_activities(
    limit: int = Query(default=10, ge=1, le=50),
    user: UserRecord = Depends(get_current_user),
) -> ActivityListResponse:
    """Newest students, progress entries and plans, newest first."""
    items = get_recent_activity(user, limit)
    return ActivityListResponse(
        activities=[ActivityResponse.model_validate(item) for item in items],
        count=len(items),
    )
