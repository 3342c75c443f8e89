from typing import Annotated, Literal
from datetime import datetime
from pydantic import BaseModel, Field

PosInt = Annotated[int, Field(ge=1, le=1000)]
PosFloat = Annotated[float, Field(gt=0, le=2000, allow_inf_nan=False)]
Rpe = Annotated[float, Field(ge=1, le=10)]
Unit = Literal["kg", "lb"]

class SetCreate(BaseModel):
    exercise_id: int
    workout_id: int | None = None
    weight: PosFloat
    reps: PosInt
    rpe: Rpe | None = None
    failed: bool = False
    performed_at: datetime | None = None
    unit: Unit = "kg"   # stored weights are always kg

class SetUpdate(BaseModel):
    exercise_id: int | None = None
    weight: PosFloat | None = None
    reps: PosInt | None = None
    rpe: Rpe | None = None
    failed: bool | None = None
    performed_at: datetime | None = None
    unit: Unit = "kg"

class SetRead(BaseModel):
    id: int
    exercise_id: int
    workout_id: int | None = None
    weight: float
    reps: int
    rpe: float | None = None
    failed: bool
    created_at: datetime
    performed_at: datetime | None = None

    model_config = {"from_attributes": True}

class SetPRFlags(BaseModel):
    new_weight: bool = False
    new_1rm: bool = False
    new_volume: bool = False
    club_total_kg: float | None = None
    club_just_reached: bool = False

class SetLogged(BaseModel):
    set: SetRead
    prs: SetPRFlags

class SetEdited(BaseModel):
    set: SetRead
    improved: list[str] = []
    club_just_reached: bool = False
