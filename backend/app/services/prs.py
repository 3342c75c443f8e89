"""
Personal records engine.

Pure functions over plain dataclasses: no database access happens here, the
repositories and `app.services.recompute` feed sets in and persist the output.
"""
from __future__ import annotations
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Iterable, Mapping, Sequence

from app.services.one_rm import estimate_one_rep_max
from app.utils.days import as_utc, local_day, local_day_start
from app.utils.units import lb_to_kg

THOUSAND_LB_TARGET_KG = lb_to_kg(1000)


class PRMetric(str, Enum):
    WEIGHT = "weight"
    ONE_RM = "1rm"
    VOLUME = "volume"


@dataclass(frozen=True, slots=True)
class MetricStat:
    value: float
    date_iso: str
    set_id: int | None = None


@dataclass(frozen=True, slots=True)
class ExercisePRSummary:
    exercise_id: int
    exercise_name: str
    weight_pr: MetricStat | None = None
    one_rm_pr: MetricStat | None = None
    volume_pr: MetricStat | None = None

    def stat(self, metric: PRMetric) -> MetricStat | None:
        if metric is PRMetric.WEIGHT:
            return self.weight_pr
        if metric is PRMetric.ONE_RM:
            return self.one_rm_pr
        return self.volume_pr


@dataclass(frozen=True, slots=True)
class SetRecord:
    """The engine's view of a logged set."""
    id: int
    exercise_id: int
    weight: float
    reps: int
    failed: bool = False
    performed_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def effective_at(self) -> datetime:
        at = self.performed_at or self.created_at
        if at is None:
            raise ValueError(f"set {self.id} has no timestamp")
        return as_utc(at)

    @property
    def volume(self) -> float:
        return self.weight * self.reps


def _finite(*values) -> bool:
    return all(v is not None and math.isfinite(v) for v in values)


def _chronological(sets: Iterable[SetRecord]) -> list[SetRecord]:
    return sorted(sets, key=lambda s: (s.effective_at, s.id))


def _keep_max(best: dict[int, MetricStat], key: int, candidate: MetricStat) -> None:
    # strictly greater: the earliest set keeps a tied record
    current = best.get(key)
    if current is None or candidate.value > current.value:
        best[key] = candidate


def aggregate_prs(
    sets: Iterable[SetRecord],
    exercise_names: Mapping[int, str],
    tz=timezone.utc,
) -> list[ExercisePRSummary]:
    """
    Full recompute of every exercise's records from the complete set history.

    Failed sets and non-finite weight/reps never contribute. Weight and 1RM ties
    keep the first set in chronological order; volume is the best single local
    day (in `tz`), dated at that day's local midnight (as UTC), earliest day
    winning ties.
    Output is independent of input order.
    """
    weight_best: dict[int, MetricStat] = {}
    one_rm_best: dict[int, MetricStat] = {}
    day_totals: dict[int, dict[date, float]] = {}
    day_top_set: dict[int, dict[date, tuple[float, int]]] = {}

    for s in _chronological(x for x in sets if not x.failed):
        if not _finite(s.weight, s.reps):
            continue
        stamp = s.effective_at.isoformat()
        _keep_max(weight_best, s.exercise_id, MetricStat(float(s.weight), stamp, s.id))
        _keep_max(one_rm_best, s.exercise_id, MetricStat(estimate_one_rep_max(s.weight, s.reps), stamp, s.id))

        day = local_day(s.effective_at, tz)
        totals = day_totals.setdefault(s.exercise_id, {})
        totals[day] = totals.get(day, 0.0) + s.volume
        tops = day_top_set.setdefault(s.exercise_id, {})
        if day not in tops or s.volume > tops[day][0]:
            tops[day] = (s.volume, s.id)

    volume_best: dict[int, MetricStat] = {}
    for exercise_id, totals in day_totals.items():
        # dicts keep insertion order, which is chronological here
        for day, total in totals.items():
            stat = MetricStat(total, as_utc(local_day_start(day, tz)).isoformat(), day_top_set[exercise_id][day][1])
            _keep_max(volume_best, exercise_id, stat)

    exercise_ids = set(weight_best) | set(one_rm_best) | set(volume_best)
    summaries = [
        ExercisePRSummary(
            exercise_id=ex_id,
            exercise_name=exercise_names.get(ex_id, "Unknown exercise"),
            weight_pr=weight_best.get(ex_id),
            one_rm_pr=one_rm_best.get(ex_id),
            volume_pr=volume_best.get(ex_id),
        )
        for ex_id in exercise_ids
    ]
    return sorted(summaries, key=lambda p: (p.exercise_name.lower(), p.exercise_id))


def day_volume(sets: Iterable[SetRecord], exercise_id: int, day: date, tz=timezone.utc) -> float:
    """Sum of weight x reps for one exercise's successful sets on a local day."""
    return sum(
        s.volume
        for s in sets
        if s.exercise_id == exercise_id
        and not s.failed
        and _finite(s.weight, s.reps)
        and local_day(s.effective_at, tz) == day
    )


def _stat_value(stat: MetricStat | None) -> float:
    if stat is None:
        return -math.inf
    try:
        return float(stat.value)
    except (TypeError, ValueError):
        return math.nan


def detect_improved_metrics(
    previous: ExercisePRSummary | None,
    current: ExercisePRSummary | None,
) -> set[PRMetric]:
    """Metrics where `current` holds a finite value that beats `previous` (missing counts as -inf)."""
    if current is None:
        return set()
    improved: set[PRMetric] = set()
    for metric in PRMetric:
        new_value = _stat_value(current.stat(metric))
        old_value = _stat_value(previous.stat(metric)) if previous is not None else -math.inf
        if math.isfinite(new_value) and (not math.isfinite(old_value) or new_value > old_value):
            improved.add(metric)
    return improved


# --- club progress ---

@dataclass(frozen=True, slots=True)
class NameMatcher:
    """Case-insensitive substring predicate over exercise names."""
    include_any: tuple[str, ...]
    require_all: tuple[str, ...] = ()
    exclude_any: tuple[str, ...] = ()

    def matches(self, name: str) -> bool:
        n = name.lower()
        return (
            any(term in n for term in self.include_any)
            and all(term in n for term in self.require_all)
            and not any(term in n for term in self.exclude_any)
        )


@dataclass(frozen=True, slots=True)
class ClubCategory:
    key: str  # bench | deadlift | squat
    matchers: tuple[NameMatcher, ...]  # tried in order, first one with a hit wins


DEFAULT_CLUB_CATEGORIES: tuple[ClubCategory, ...] = (
    ClubCategory("bench", (NameMatcher(("bench",)),)),
    ClubCategory("deadlift", (NameMatcher(("deadlift", "dead lift")),)),
    ClubCategory("squat", (
        NameMatcher(("squat",), require_all=("back",)),
        NameMatcher(("squat",), exclude_any=("front", "overhead", "zercher")),
    )),
)


@dataclass(frozen=True, slots=True)
class ClubProgress:
    bench_kg: float | None
    deadlift_kg: float | None
    squat_kg: float | None
    total_kg: float
    percent: float
    reached_target: bool


def best_one_rm(summaries: Sequence[ExercisePRSummary], matcher: NameMatcher) -> float | None:
    best: float | None = None
    for summary in summaries:
        stat = summary.one_rm_pr
        if stat is None or not _finite(stat.value) or not matcher.matches(summary.exercise_name):
            continue
        if best is None or stat.value > best:
            best = stat.value
    return best


def _category_value(summaries: Sequence[ExercisePRSummary], category: ClubCategory) -> float | None:
    for matcher in category.matchers:
        value = best_one_rm(summaries, matcher)
        if value is not None:
            return value
    return None


def compute_club_progress(
    summaries: Sequence[ExercisePRSummary],
    categories: Sequence[ClubCategory] = DEFAULT_CLUB_CATEGORIES,
    target_kg: float = THOUSAND_LB_TARGET_KG,
) -> ClubProgress:
    values = {category.key: _category_value(summaries, category) for category in categories}
    matched = [v for v in values.values() if v is not None]
    total = float(sum(matched))
    percent = max(0.0, min(100.0, total / target_kg * 100)) if matched else 0.0
    return ClubProgress(
        bench_kg=values.get("bench"),
        deadlift_kg=values.get("deadlift"),
        squat_kg=values.get("squat"),
        total_kg=total,
        percent=percent,
        reached_target=total >= target_kg,
    )


def club_just_reached(before: ClubProgress, after: ClubProgress) -> bool:
    return after.reached_target and not before.reached_target
