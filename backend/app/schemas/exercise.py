from typing import Annotated
from pydantic import BaseModel, Field, field_validator

NameStr = Annotated[str, Field(max_length=120)]
ShortNameStr = Annotated[str, Field(max_length=40)]

class ExerciseCreate(BaseModel):
    name: NameStr
    short_name: ShortNameStr | None = None

    @field_validator("name")
    @classmethod
    def name_non_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("name cannot be blank")
        return v2

    @field_validator("short_name")
    @classmethod
    def blank_short_name_is_none(cls, v: str | None) -> str | None:
        return (v or "").strip() or None

class ExerciseRead(BaseModel):
    id: int
    user_id: str | None = None
    name: str
    short_name: str | None = None

    model_config = {"from_attributes": True}
