from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from app.db import get_db
from app.schemas.workout import WorkoutCreate, WorkoutRead, WorkoutUpdate
from app.schemas.exercise_set import SetRead
from app.repositories.workout_repo import WorkoutRepository
from app.repositories.set_repo import SetRepository
from app.deps.auth import get_current_user_id
from app.utils.days import as_utc

router = APIRouter(prefix="/workouts", tags=["workouts"])

def _owned_or_404(repo: WorkoutRepository, workout_id: int, user_id: str):
    w = repo.get_owned(workout_id, user_id)
    if not w:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")
    return w

@router.post("", response_model=WorkoutRead, status_code=status.HTTP_201_CREATED)
def create_workout(payload: WorkoutCreate, db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    date = as_utc(payload.date) if payload.date else None
    return WorkoutRepository(db).create(user_id, date=date, mood=payload.mood, notes=payload.notes)

@router.get("", response_model=list[WorkoutRead])
def list_my_workouts(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    return WorkoutRepository(db).list_by_user(user_id, limit=limit, offset=offset)

@router.patch("/{workout_id}", response_model=WorkoutRead)
def update_workout(
    workout_id: int,
    payload: WorkoutUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    repo = WorkoutRepository(db)
    w = _owned_or_404(repo, workout_id, user_id)
    fields = payload.model_dump(exclude_unset=True)
    if fields.get("date") is not None:
        fields["date"] = as_utc(fields["date"])
    elif "date" in fields:
        del fields["date"]  # a workout always has a date
    return repo.update(w, **fields)

@router.get("/{workout_id}/sets", response_model=list[SetRead])
def list_workout_sets(workout_id: int, db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    _owned_or_404(WorkoutRepository(db), workout_id, user_id)
    return SetRepository(db).list_by_workout(workout_id)
