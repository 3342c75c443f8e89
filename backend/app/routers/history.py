from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.db import get_db
from app.repositories.set_repo import SetRepository
from app.services.history import exercise_badges, recent_days
from app.deps.auth import get_current_user_id
from app.deps.timezone import get_viewer_timezone
from app.utils.days import local_day_bounds

router = APIRouter(prefix="/history", tags=["history"])

@router.get("/days", response_model=list[date])
def list_recent_days(
    limit: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_viewer_timezone),
):
    return recent_days(SetRepository(db).iter_recent_times(user_id), tz, limit=limit)

@router.get("/badges", response_model=dict[str, list[str]])
def list_badges(
    days: list[date] = Query(default=[]),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_viewer_timezone),
):
    if not days:
        return {}
    # one query for the whole window
    start, _ = local_day_bounds(min(days), tz)
    _, end = local_day_bounds(max(days), tz)
    rows = SetRepository(db).labels_between(user_id, start, end)
    return exercise_badges(rows, tz, days)
