from __future__ import annotations
from typing import Iterable, Optional
from sqlalchemy import select, or_, func
from app.models import Exercise
from app.repositories.base import BaseRepository

class ExerciseRepository(BaseRepository[Exercise]):
    model = Exercise

    def _visible(self, user_id: str):
        return or_(Exercise.user_id.is_(None), Exercise.user_id == user_id)

    def get_visible(self, exercise_id: int, user_id: str) -> Optional[Exercise]:
        ex = self.db.get(Exercise, exercise_id)
        if ex is None or ex.user_id not in (None, user_id):
            return None
        return ex

    def list_visible(self, user_id: str) -> list[Exercise]:
        stmt = select(Exercise).where(self._visible(user_id)).order_by(func.lower(Exercise.name), Exercise.id)
        return list(self.db.execute(stmt).scalars().all())

    def names_by_id(self, exercise_ids: Iterable[int]) -> dict[int, str]:
        ids = set(exercise_ids)
        if not ids:
            return {}
        rows = self.db.execute(select(Exercise.id, Exercise.name).where(Exercise.id.in_(ids))).all()
        return {row.id: row.name for row in rows}

    def create(self, user_id: str | None, *, name: str, short_name: str | None) -> Exercise:
        ex = Exercise(user_id=user_id, name=name, short_name=short_name)
        self.db.add(ex)
        self.db.commit()
        self.db.refresh(ex)
        return ex
