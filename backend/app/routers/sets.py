from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session
from app.db import get_db
from app.schemas.exercise_set import SetCreate, SetEdited, SetLogged, SetPRFlags, SetRead, SetUpdate
from app.repositories.exercise_repo import ExerciseRepository
from app.repositories.set_repo import SetRepository
from app.repositories.workout_repo import WorkoutRepository
from app.services.recompute import PRService
from app.deps.auth import get_current_user_id
from app.deps.timezone import get_viewer_timezone
from app.utils.days import as_utc, local_day_bounds
from app.utils.units import to_kg

router = APIRouter(prefix="/sets", tags=["sets"])

NOT_NULL_FIELDS = ("exercise_id", "weight", "reps", "failed")

def _check_exercise(db: Session, exercise_id: int, user_id: str) -> None:
    if not ExerciseRepository(db).get_visible(exercise_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exercise not found")

def _owned_set_or_404(repo: SetRepository, set_id: int, user_id: str):
    s = repo.get_owned(set_id, user_id)
    if not s:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Set not found")
    return s

@router.post("", response_model=SetLogged, status_code=status.HTTP_201_CREATED)
def log_set(
    payload: SetCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_viewer_timezone),
):
    _check_exercise(db, payload.exercise_id, user_id)
    if payload.workout_id is not None and not WorkoutRepository(db).get_owned(payload.workout_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")

    repo = SetRepository(db)
    s = repo.create(
        user_id,
        exercise_id=payload.exercise_id,
        workout_id=payload.workout_id,
        weight=to_kg(payload.weight, payload.unit),
        reps=payload.reps,
        rpe=payload.rpe,
        failed=payload.failed,
        performed_at=as_utc(payload.performed_at) if payload.performed_at else None,
    )
    flags = PRService(db, user_id, tz).after_insert(s.id)
    db.commit()
    db.refresh(s)
    return SetLogged(
        set=SetRead.model_validate(s),
        prs=SetPRFlags(
            new_weight=flags.new_weight,
            new_1rm=flags.new_1rm,
            new_volume=flags.new_volume,
            club_total_kg=flags.club_total_kg,
            club_just_reached=flags.club_just_reached,
        ),
    )

@router.get("", response_model=list[SetRead])
def list_sets_for_day(
    day: date = Query(..., description="Local day, YYYY-MM-DD"),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_viewer_timezone),
):
    start, end = local_day_bounds(day, tz)
    return SetRepository(db).list_between(user_id, start, end)

@router.patch("/{set_id}", response_model=SetEdited)
def edit_set(
    set_id: int,
    payload: SetUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_viewer_timezone),
):
    repo = SetRepository(db)
    s = _owned_set_or_404(repo, set_id, user_id)

    fields = payload.model_dump(exclude_unset=True)
    unit = fields.pop("unit", "kg")
    for key in NOT_NULL_FIELDS:
        if key in fields and fields[key] is None:
            del fields[key]
    if "exercise_id" in fields:
        _check_exercise(db, fields["exercise_id"], user_id)
    if "weight" in fields:
        fields["weight"] = to_kg(fields["weight"], unit)
    if fields.get("performed_at") is not None:
        fields["performed_at"] = as_utc(fields["performed_at"])

    repo.update(s, **fields)
    # edits can lower a record, so only the full recompute is trustworthy
    result = PRService(db, user_id, tz).commit_with_recompute()
    db.refresh(s)
    improved = result.improved.get(s.exercise_id, set())
    return SetEdited(
        set=SetRead.model_validate(s),
        improved=sorted(m.value for m in improved),
        club_just_reached=result.club_just_reached,
    )

@router.delete("/{set_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_set(
    set_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_viewer_timezone),
):
    repo = SetRepository(db)
    s = _owned_set_or_404(repo, set_id, user_id)
    repo.delete(s)
    PRService(db, user_id, tz).commit_with_recompute()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
