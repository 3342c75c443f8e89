from __future__ import annotations
from datetime import datetime
from sqlalchemy import select
from app.models import Workout
from app.repositories.base import BaseRepository

class WorkoutRepository(BaseRepository[Workout]):
    model = Workout

    def list_by_user(self, user_id: str, *, limit: int = 50, offset: int = 0) -> list[Workout]:
        stmt = select(Workout).where(Workout.user_id == user_id)\
                              .order_by(Workout.date.desc(), Workout.id.desc())\
                              .limit(limit).offset(offset)
        return list(self.db.execute(stmt).scalars().all())

    def create(self, user_id: str, *, date: datetime | None, mood: str | None, notes: str | None) -> Workout:
        w = Workout(user_id=user_id, mood=mood, notes=notes)
        if date is not None:
            w.date = date
        self.db.add(w)
        self.db.commit()
        self.db.refresh(w)
        return w

    def update(self, workout: Workout, **fields) -> Workout:
        for key, value in fields.items():
            setattr(workout, key, value)
        self.db.commit()
        self.db.refresh(workout)
        return workout
