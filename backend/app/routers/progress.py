from datetime import datetime, timezone
from typing import Literal
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from app.db import get_db
from app.schemas.personal_record import ProgressPoint
from app.repositories.exercise_repo import ExerciseRepository
from app.repositories.set_repo import SetRepository, to_record
from app.services.progress import daily_points, day_iso, timeframe_start, with_trend
from app.deps.auth import get_current_user_id
from app.deps.timezone import get_viewer_timezone

router = APIRouter(prefix="/progress", tags=["progress"])

@router.get("/{exercise_id}", response_model=list[ProgressPoint])
def exercise_progress(
    exercise_id: int,
    timeframe: Literal["all", "6m", "3m", "1m"] = Query("6m"),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_viewer_timezone),
):
    if not ExerciseRepository(db).get_visible(exercise_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exercise not found")

    since = timeframe_start(timeframe, datetime.now(timezone.utc))
    records = [to_record(s) for s in SetRepository(db).list_by_user(user_id, exercise_id=exercise_id)]
    points = with_trend(daily_points(records, tz, since=since))
    return [
        ProgressPoint(
            date_iso=day_iso(p.day, tz),
            heaviest=p.heaviest,
            one_rm=p.one_rm,
            volume=p.volume,
            trend=p.trend,
        )
        for p in points
    ]
