# app/repositories/base.py
from __future__ import annotations
from typing import Generic, Optional, TypeVar

from sqlalchemy.orm import Session

T = TypeVar("T")  # SQLAlchemy model type

class BaseRepository(Generic[T]):
    """Lightweight base for user-scoped repositories using SQLAlchemy 2.0 style."""
    model: type

    def __init__(self, db: Session):
        self.db = db

    def get_owned(self, entity_id: int, user_id: str) -> Optional[T]:
        # Rows of other users look exactly like missing rows
        entity = self.db.get(self.model, entity_id)
        if entity is None or entity.user_id != user_id:
            return None
        return entity

    def add_and_flush(self, entity: T) -> T:
        self.db.add(entity)
        self.db.flush()
        self.db.refresh(entity)
        return entity
