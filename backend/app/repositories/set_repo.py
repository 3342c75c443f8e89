from __future__ import annotations
from datetime import datetime
from typing import Iterator
from sqlalchemy import select, func
from app.models import Exercise, WorkoutSet
from app.repositories.base import BaseRepository
from app.services.prs import SetRecord

# performed_at falls back to the insert time
effective_at = func.coalesce(WorkoutSet.performed_at, WorkoutSet.created_at)

def to_record(s: WorkoutSet) -> SetRecord:
    return SetRecord(
        id=s.id,
        exercise_id=s.exercise_id,
        weight=s.weight,
        reps=s.reps,
        failed=s.failed,
        performed_at=s.performed_at,
        created_at=s.created_at,
    )

class SetRepository(BaseRepository[WorkoutSet]):
    """Writes flush only; callers own the transaction so PR updates commit with the set."""
    model = WorkoutSet

    def list_by_user(self, user_id: str, *, exercise_id: int | None = None) -> list[WorkoutSet]:
        stmt = select(WorkoutSet).where(WorkoutSet.user_id == user_id)
        if exercise_id is not None:
            stmt = stmt.where(WorkoutSet.exercise_id == exercise_id)
        stmt = stmt.order_by(effective_at.asc(), WorkoutSet.id.asc())
        return list(self.db.execute(stmt).scalars().all())

    def list_by_workout(self, workout_id: int) -> list[WorkoutSet]:
        stmt = select(WorkoutSet).where(WorkoutSet.workout_id == workout_id)\
                                 .order_by(effective_at.asc(), WorkoutSet.id.asc())
        return list(self.db.execute(stmt).scalars().all())

    def list_between(self, user_id: str, start: datetime, end: datetime, *, exercise_id: int | None = None) -> list[WorkoutSet]:
        """Sets whose effective time falls in [start, end)."""
        stmt = select(WorkoutSet).where(
            WorkoutSet.user_id == user_id,
            effective_at >= start,
            effective_at < end,
        )
        if exercise_id is not None:
            stmt = stmt.where(WorkoutSet.exercise_id == exercise_id)
        stmt = stmt.order_by(effective_at.asc(), WorkoutSet.id.asc())
        return list(self.db.execute(stmt).scalars().all())

    def iter_recent_times(self, user_id: str) -> Iterator[datetime]:
        stmt = select(WorkoutSet.performed_at, WorkoutSet.created_at)\
            .where(WorkoutSet.user_id == user_id)\
            .order_by(effective_at.desc())
        for performed_at, created_at in self.db.execute(stmt):
            yield performed_at or created_at

    def labels_between(self, user_id: str, start: datetime, end: datetime) -> list[tuple[datetime, str]]:
        """(effective time, short_name or name) for every set in [start, end)."""
        stmt = select(WorkoutSet.performed_at, WorkoutSet.created_at, Exercise.name, Exercise.short_name)\
            .join(Exercise, Exercise.id == WorkoutSet.exercise_id)\
            .where(WorkoutSet.user_id == user_id, effective_at >= start, effective_at < end)
        return [
            (performed_at or created_at, short_name or name)
            for performed_at, created_at, name, short_name in self.db.execute(stmt)
        ]

    def create(self, user_id: str, *, exercise_id: int, workout_id: int | None, weight: float, reps: int,
               rpe: float | None, failed: bool, performed_at: datetime | None) -> WorkoutSet:
        s = WorkoutSet(
            user_id=user_id,
            exercise_id=exercise_id,
            workout_id=workout_id,
            weight=weight,
            reps=reps,
            rpe=rpe,
            failed=failed,
            performed_at=performed_at,
        )
        return self.add_and_flush(s)

    def update(self, s: WorkoutSet, **fields) -> WorkoutSet:
        for key, value in fields.items():
            setattr(s, key, value)
        self.db.flush()
        return s

    def delete(self, s: WorkoutSet) -> None:
        self.db.delete(s)
        self.db.flush()
