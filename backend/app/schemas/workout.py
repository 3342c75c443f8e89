from typing import Annotated
from datetime import datetime
from pydantic import BaseModel, Field

# Notes: trimmed, up to 500 chars
NotesStr = Annotated[str, Field(strip_whitespace=True, max_length=500)]
MoodStr = Annotated[str, Field(strip_whitespace=True, max_length=40)]

class WorkoutCreate(BaseModel):
    date: datetime | None = None
    mood: MoodStr | None = None
    notes: NotesStr | None = None

class WorkoutUpdate(BaseModel):
    date: datetime | None = None
    mood: MoodStr | None = None
    notes: NotesStr | None = None

class WorkoutRead(BaseModel):
    id: int
    user_id: str
    date: datetime
    mood: str | None = None
    notes: str | None = None

    model_config = {"from_attributes": True}
