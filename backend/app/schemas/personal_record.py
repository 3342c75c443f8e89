from pydantic import BaseModel

class MetricStatRead(BaseModel):
    value: float
    date_iso: str
    set_id: int | None = None

    model_config = {"from_attributes": True}

class ExercisePRRead(BaseModel):
    exercise_id: int
    exercise_name: str
    weight_pr: MetricStatRead | None = None
    one_rm_pr: MetricStatRead | None = None
    volume_pr: MetricStatRead | None = None

    model_config = {"from_attributes": True}

class ClubProgressRead(BaseModel):
    bench_kg: float | None = None
    deadlift_kg: float | None = None
    squat_kg: float | None = None
    total_kg: float
    percent: float
    reached_target: bool
    target_kg: float

class RecomputeRead(BaseModel):
    summaries: list[ExercisePRRead]
    improved: dict[int, list[str]]   # exercise_id -> metrics
    club_before: ClubProgressRead
    club_after: ClubProgressRead
    club_just_reached: bool
    discarded: bool = False   # a newer recompute already completed

class ProgressPoint(BaseModel):
    date_iso: str
    heaviest: float | None = None
    one_rm: float | None = None
    volume: float
    trend: float | None = None
