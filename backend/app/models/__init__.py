from app.models.exercise import Exercise
from app.models.workout import Workout
from app.models.workout_set import WorkoutSet
from app.models.personal_record import PersonalRecord

__all__ = ["Exercise", "Workout", "WorkoutSet", "PersonalRecord"]
