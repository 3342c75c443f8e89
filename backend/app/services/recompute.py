"""
Keeps the stored personal records in step with the set history.

Two paths produce the same records: `PRService.recompute` rebuilds everything
from the full history and is authoritative; `PRService.upsert_for_set` only
looks at one freshly inserted set and exists to tell the user about a new PR
right away. The incremental path only flushes and leaves the commit to the
caller; the full recompute commits inside its write slot so the sequencer
never counts an uncommitted result.
"""
from __future__ import annotations
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterator, Sequence

from sqlalchemy.orm import Session

from app.models import PersonalRecord
from app.repositories.exercise_repo import ExerciseRepository
from app.repositories.pr_repo import PRRepository
from app.repositories.set_repo import SetRepository, to_record
from app.services.one_rm import estimate_one_rep_max
from app.services.prs import (
    DEFAULT_CLUB_CATEGORIES,
    ClubCategory,
    ClubProgress,
    ExercisePRSummary,
    MetricStat,
    PRMetric,
    aggregate_prs,
    club_just_reached,
    compute_club_progress,
    day_volume,
    detect_improved_metrics,
)
from app.settings import get_settings
from app.utils.days import as_utc, local_day, local_day_bounds, local_day_start
from app.utils.units import lb_to_kg

log = logging.getLogger(__name__)


class RecomputeSequencer:
    """
    Last-write-wins by completion order for full recomputes of one user.

    Every recompute takes a ticket when it starts reading; its write-back is
    skipped once a recompute with a newer ticket has already committed. A
    ticket only counts as completed when the body of `write_slot` finishes,
    so a failed commit never blocks older results. Process-local.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._user_locks: dict[str, threading.Lock] = {}
        self._issued: dict[str, int] = {}
        self._completed: dict[str, int] = {}

    def start(self, user_id: str) -> int:
        with self._lock:
            ticket = self._issued.get(user_id, 0) + 1
            self._issued[user_id] = ticket
            return ticket

    def _user_lock(self, user_id: str) -> threading.Lock:
        with self._lock:
            return self._user_locks.setdefault(user_id, threading.Lock())

    @contextmanager
    def write_slot(self, user_id: str, ticket: int) -> Iterator[bool]:
        # held through write and commit so an older result cannot land in between
        with self._user_lock(user_id):
            allowed = ticket > self._completed.get(user_id, 0)
            yield allowed
            if allowed:
                self._completed[user_id] = ticket


default_sequencer = RecomputeSequencer()


def _ties_earlier(stat: MetricStat, row: PersonalRecord) -> bool:
    return stat.value == row.value and as_utc(datetime.fromisoformat(stat.date_iso)) < as_utc(row.performed_at)


@dataclass
class RecomputeResult:
    summaries: list[ExercisePRSummary]
    improved: dict[int, set[PRMetric]]
    club_before: ClubProgress
    club_after: ClubProgress
    discarded: bool = False

    @property
    def club_just_reached(self) -> bool:
        return club_just_reached(self.club_before, self.club_after)


@dataclass
class IncrementalResult:
    new_weight: bool = False
    new_1rm: bool = False
    new_volume: bool = False
    club_total_kg: float | None = None
    club_just_reached: bool = False
    improved: set[PRMetric] = field(default_factory=set)


class PRService:
    def __init__(
        self,
        db: Session,
        user_id: str,
        tz=timezone.utc,
        *,
        sequencer: RecomputeSequencer = default_sequencer,
        categories: Sequence[ClubCategory] = DEFAULT_CLUB_CATEGORIES,
        target_kg: float | None = None,
    ):
        self.db = db
        self.user_id = user_id
        self.tz = tz
        self.sequencer = sequencer
        self.categories = categories
        self.target_kg = target_kg if target_kg is not None else lb_to_kg(get_settings().CLUB_TARGET_LB)
        self.sets = SetRepository(db)
        self.prs = PRRepository(db)
        self.exercises = ExerciseRepository(db)

    def club(self, summaries: Sequence[ExercisePRSummary] | None = None) -> ClubProgress:
        if summaries is None:
            summaries = self.prs.read_summaries(self.user_id)
        return compute_club_progress(summaries, self.categories, self.target_kg)

    def recompute(self) -> RecomputeResult:
        """
        Rebuild every record from the full history, replace the stored ones and
        commit, together with whatever the session already holds. A discarded
        result writes and commits nothing.
        """
        ticket = self.sequencer.start(self.user_id)
        previous = {p.exercise_id: p for p in self.prs.read_summaries(self.user_id)}

        records = [to_record(s) for s in self.sets.list_by_user(self.user_id)]
        names = self.exercises.names_by_id(r.exercise_id for r in records)
        summaries = aggregate_prs(records, names, self.tz)

        improved = {}
        for summary in summaries:
            metrics = detect_improved_metrics(previous.get(summary.exercise_id), summary)
            if metrics:
                improved[summary.exercise_id] = metrics

        result = RecomputeResult(
            summaries=summaries,
            improved=improved,
            club_before=self.club(list(previous.values())),
            club_after=self.club(summaries),
        )
        with self.sequencer.write_slot(self.user_id, ticket) as allowed:
            if not allowed:
                log.info("discarding stale PR recompute for user=%s ticket=%s", self.user_id, ticket)
                result.discarded = True
                return result
            self.prs.replace_summaries(self.user_id, summaries)
            self.db.commit()

        log.debug("recomputed PRs for user=%s: %d exercises, %d improved",
                  self.user_id, len(summaries), len(improved))
        return result

    def commit_with_recompute(self) -> RecomputeResult:
        """
        Commit a pending set change together with a full recompute.

        A newer recompute that completed first may have read the history
        without this session's change. In that case the change is committed
        on its own and the recompute runs again; its ticket is taken after the
        commit, so whatever beats it has seen the change too.
        """
        result = self.recompute()
        if result.discarded:
            self.db.commit()
            log.info("re-running PR recompute for user=%s after a newer result won", self.user_id)
            result = self.recompute()
        return result

    def upsert_for_set(self, set_id: int) -> IncrementalResult:
        """
        Fold one inserted set into the stored records. A record moves when the
        new value is strictly greater, or equal but achieved earlier (a backdated
        set), so a tie always ends up on the earliest set.
        """
        s = self.sets.get_owned(set_id, self.user_id)
        if s is None:
            raise LookupError(f"set {set_id} not found")
        record = to_record(s)
        if record.failed:
            return IncrementalResult()

        club_before = self.club()
        stamp = record.effective_at.isoformat()
        day = local_day(record.effective_at, self.tz)
        start, end = local_day_bounds(day, self.tz)
        same_day = [to_record(x) for x in self.sets.list_between(self.user_id, start, end, exercise_id=record.exercise_id)]
        top_set = None
        for x in same_day:
            if not x.failed and (top_set is None or x.volume > top_set.volume):
                top_set = x

        candidates = {
            PRMetric.WEIGHT: MetricStat(float(record.weight), stamp, record.id),
            PRMetric.ONE_RM: MetricStat(estimate_one_rep_max(record.weight, record.reps), stamp, record.id),
            PRMetric.VOLUME: MetricStat(
                day_volume(same_day, record.exercise_id, day, self.tz),
                as_utc(local_day_start(day, self.tz)).isoformat(),
                top_set.id if top_set else record.id,
            ),
        }

        rows = self.prs.rows_for_update(self.user_id, record.exercise_id)
        improved: set[PRMetric] = set()
        for metric, stat in candidates.items():
            row = rows.get(metric.value)
            if row is None or stat.value > row.value:
                self.prs.put(self.user_id, record.exercise_id, metric, stat, existing=row)
                improved.add(metric)
            elif _ties_earlier(stat, row):
                # backdated tie: the record moves to the earlier set, no notification
                self.prs.put(self.user_id, record.exercise_id, metric, stat, existing=row)

        club_after = self.club()
        return IncrementalResult(
            new_weight=PRMetric.WEIGHT in improved,
            new_1rm=PRMetric.ONE_RM in improved,
            new_volume=PRMetric.VOLUME in improved,
            club_total_kg=club_after.total_kg,
            club_just_reached=club_just_reached(club_before, club_after),
            improved=improved,
        )

    def after_insert(self, set_id: int) -> IncrementalResult:
        """
        Incremental update with the full recompute as fallback. A failing
        incremental path only costs the notification: the result then reports
        no new records.
        """
        try:
            with self.db.begin_nested():
                return self.upsert_for_set(set_id)
        except Exception:
            log.warning("incremental PR update failed for set=%s, falling back to full recompute",
                        set_id, exc_info=True)
        self.commit_with_recompute()
        return IncrementalResult()
