from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, ForeignKey, Float, DateTime, UniqueConstraint
from app.db import Base

class PersonalRecord(Base):
    """One row per (user, exercise, metric); a missing row means no record yet."""
    __tablename__ = "personal_records"
    __table_args__ = (UniqueConstraint("user_id", "exercise_id", "metric", name="uq_pr_user_exercise_metric"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    exercise_id: Mapped[int] = mapped_column(ForeignKey("exercises.id", ondelete="CASCADE"), index=True)
    metric: Mapped[str] = mapped_column(String(16), nullable=False)  # weight | 1rm | volume
    value: Mapped[float] = mapped_column(Float, nullable=False)
    performed_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), nullable=False)
    set_id: Mapped[int | None] = mapped_column(ForeignKey("sets.id", ondelete="SET NULL"), nullable=True)

    exercise = relationship("Exercise")
