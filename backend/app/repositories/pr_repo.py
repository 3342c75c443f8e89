from __future__ import annotations
from datetime import datetime
from typing import Optional
from sqlalchemy import select, delete
from app.models import Exercise, PersonalRecord
from app.repositories.base import BaseRepository
from app.services.prs import ExercisePRSummary, MetricStat, PRMetric
from app.utils.days import as_utc

def _stat(row: PersonalRecord) -> MetricStat:
    return MetricStat(value=row.value, date_iso=as_utc(row.performed_at).isoformat(), set_id=row.set_id)

class PRRepository(BaseRepository[PersonalRecord]):
    model = PersonalRecord

    # READS
    def read_summaries(self, user_id: str, *, exercise_id: int | None = None) -> list[ExercisePRSummary]:
        """Pivot the per-metric rows into one summary per exercise, ordered by name."""
        stmt = select(PersonalRecord, Exercise.name)\
            .join(Exercise, Exercise.id == PersonalRecord.exercise_id)\
            .where(PersonalRecord.user_id == user_id)
        if exercise_id is not None:
            stmt = stmt.where(PersonalRecord.exercise_id == exercise_id)

        by_exercise: dict[int, dict] = {}
        for row, name in self.db.execute(stmt):
            entry = by_exercise.setdefault(row.exercise_id, {"exercise_id": row.exercise_id, "exercise_name": name})
            if row.metric == PRMetric.WEIGHT.value:
                entry["weight_pr"] = _stat(row)
            elif row.metric == PRMetric.ONE_RM.value:
                entry["one_rm_pr"] = _stat(row)
            elif row.metric == PRMetric.VOLUME.value:
                entry["volume_pr"] = _stat(row)

        summaries = [ExercisePRSummary(**entry) for entry in by_exercise.values()]
        return sorted(summaries, key=lambda p: (p.exercise_name.lower(), p.exercise_id))

    def read_summary(self, user_id: str, exercise_id: int) -> Optional[ExercisePRSummary]:
        found = self.read_summaries(user_id, exercise_id=exercise_id)
        return found[0] if found else None

    def rows_for_update(self, user_id: str, exercise_id: int) -> dict[str, PersonalRecord]:
        """Current rows for one exercise, locked until the transaction ends (where supported)."""
        stmt = select(PersonalRecord).where(
            PersonalRecord.user_id == user_id,
            PersonalRecord.exercise_id == exercise_id,
        ).with_for_update()
        return {row.metric: row for row in self.db.execute(stmt).scalars()}

    # WRITES (flush only)
    def put(self, user_id: str, exercise_id: int, metric: PRMetric, stat: MetricStat,
            existing: PersonalRecord | None = None) -> PersonalRecord:
        row = existing or PersonalRecord(user_id=user_id, exercise_id=exercise_id, metric=metric.value)
        row.value = stat.value
        row.performed_at = as_utc(datetime.fromisoformat(stat.date_iso))
        row.set_id = stat.set_id
        self.db.add(row)
        self.db.flush()
        return row

    def replace_summaries(self, user_id: str, summaries: list[ExercisePRSummary]) -> None:
        self.db.execute(delete(PersonalRecord).where(PersonalRecord.user_id == user_id))
        for summary in summaries:
            for metric in PRMetric:
                stat = summary.stat(metric)
                if stat is not None:
                    self.db.add(PersonalRecord(
                        user_id=user_id,
                        exercise_id=summary.exercise_id,
                        metric=metric.value,
                        value=stat.value,
                        performed_at=as_utc(datetime.fromisoformat(stat.date_iso)),
                        set_id=stat.set_id,
                    ))
        self.db.flush()
