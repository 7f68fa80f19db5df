"""
Ranking engine.

Turns raw per-employee, per-criterion measurements for one period into a
ranked, annotated result set:

1. min-max normalization of every criterion to 0–100
2. weighted aggregation into a total score
3. stable descending sort into dense rank positions 1..N
4. rank movement against the previous month
5. strengths / weaknesses / suggestions per employee

Everything here is pure. Reading the inputs and persisting the outputs
(including the normalized scores in ``RankingComputation.updated_scores``)
is the caller's job, see ``app.services.ranking``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, asdict
from datetime import date
from enum import Enum
from typing import Hashable, Iterable, Optional

from app.services.periods import Period, is_consolidated, period_label
from app.services.suggestions import POSITIVE_FEEDBACK, suggestion_for

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 50.0
STRENGTH_THRESHOLD = 80.0
WEAKNESS_THRESHOLD = 50.0
WEIGHT_TOTAL = 100.0
WEIGHT_TOLERANCE = 0.01


class Direction(str, Enum):
    HIGHER_IS_BETTER = "higher_is_better"
    LOWER_IS_BETTER = "lower_is_better"


# =============================================================================
# INPUTS
# =============================================================================

@dataclass
class Criterion:
    id: Hashable
    name: str
    weight: float
    direction: Direction = Direction.HIGHER_IS_BETTER
    active: bool = True
    display_order: int = 0
    key: Optional[str] = None

    def __post_init__(self):
        self.direction = Direction(self.direction)


@dataclass
class RawScore:
    employee_id: Hashable
    criterion_id: Hashable
    raw_value: float
    period: Optional[date] = None
    id: Optional[Hashable] = None
    normalized_score: Optional[float] = None


@dataclass
class EmployeeRecord:
    id: Hashable
    name: str
    department: str = ""
    position: str = ""
    active: bool = True


@dataclass
class PreviousRank:
    employee_id: Hashable
    rank_position: int


# =============================================================================
# OUTPUTS
# =============================================================================

@dataclass
class CriterionScore:
    criterion_id: Hashable
    criterion_name: str
    raw_value: float
    normalized_score: float
    weight: float
    weighted_score: float


@dataclass
class RankingResult:
    employee_id: Hashable
    employee_name: str
    department: str
    position: str
    total_score: float
    rank_position: int = 0
    previous_rank: Optional[int] = None
    rank_variation: Optional[int] = None
    criterion_scores: list[CriterionScore] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ScoreUpdate:
    """Normalized score to write back onto a stored raw score."""
    score_id: Hashable
    normalized_score: float


@dataclass
class RankingComputation:
    results: list[RankingResult] = field(default_factory=list)
    updated_scores: list[ScoreUpdate] = field(default_factory=list)


# =============================================================================
# NORMALIZATION
# =============================================================================

def normalize_value(raw: float, minimum: float, maximum: float, direction: Direction) -> float:
    """
    Scale ``raw`` into 0–100 within [minimum, maximum].

    A criterion without spread has no discriminating power: every value maps
    to the neutral midpoint.
    """
    spread = maximum - minimum
    if spread == 0:
        return NEUTRAL_SCORE
    if direction == Direction.LOWER_IS_BETTER:
        value = (maximum - raw) / spread * 100
    else:
        value = (raw - minimum) / spread * 100
    return round(min(100.0, max(0.0, value)), 2)


def normalize_scores(
    criteria: list[Criterion],
    raw_scores: Iterable[RawScore],
) -> tuple[dict, list[ScoreUpdate]]:
    """
    Normalize every submitted value per criterion.

    Returns a mapping ``(employee_id, criterion_id) -> (raw, normalized)`` and
    the write-back list for scores that carry a storage id.
    """
    by_criterion: dict = {c.id: [] for c in criteria}
    for score in raw_scores:
        if score.criterion_id in by_criterion:
            by_criterion[score.criterion_id].append(score)

    normalized: dict = {}
    updates: list[ScoreUpdate] = []
    for criterion in criteria:
        submitted = by_criterion[criterion.id]
        if not submitted:
            logger.debug("No values submitted for criterion %r", criterion.name)
            continue

        values = [s.raw_value for s in submitted]
        minimum, maximum = min(values), max(values)
        for score in submitted:
            value = normalize_value(score.raw_value, minimum, maximum, criterion.direction)
            normalized[(score.employee_id, criterion.id)] = (score.raw_value, value)
            if score.id is not None:
                updates.append(ScoreUpdate(score_id=score.id, normalized_score=value))

    return normalized, updates


def consolidate_scores(raw_scores: Iterable[RawScore]) -> list[RawScore]:
    """Sum raw values across periods per (employee, criterion)."""
    totals: dict = {}
    for score in raw_scores:
        pair = (score.employee_id, score.criterion_id)
        totals[pair] = totals.get(pair, 0.0) + score.raw_value
    return [
        RawScore(employee_id=employee_id, criterion_id=criterion_id, raw_value=total)
        for (employee_id, criterion_id), total in totals.items()
    ]


def check_weights(criteria: list[Criterion]) -> float:
    total = sum(c.weight for c in criteria)
    if abs(total - WEIGHT_TOTAL) > WEIGHT_TOLERANCE:
        logger.warning("Active criteria weights sum to %.2f%% (expected 100%%)", total)
    return total


# =============================================================================
# AGGREGATION & ANNOTATION
# =============================================================================

def score_employee(
    employee: EmployeeRecord,
    criteria: list[Criterion],
    normalized: dict,
) -> RankingResult:
    total = 0.0
    criterion_scores = []
    for criterion in criteria:
        raw, value = normalized.get((employee.id, criterion.id), (0.0, 0.0))
        weighted = value * criterion.weight / 100
        total += weighted
        criterion_scores.append(CriterionScore(
            criterion_id=criterion.id,
            criterion_name=criterion.name,
            raw_value=raw,
            normalized_score=value,
            weight=criterion.weight,
            weighted_score=round(weighted, 2),
        ))

    result = RankingResult(
        employee_id=employee.id,
        employee_name=employee.name,
        department=employee.department,
        position=employee.position,
        total_score=round(total, 2),
        criterion_scores=criterion_scores,
    )
    annotate(result, {c.id: c for c in criteria})
    return result


def annotate(result: RankingResult, criteria_by_id: dict) -> None:
    strengths, weaknesses, suggestions = [], [], []
    for score in result.criterion_scores:
        if score.normalized_score >= STRENGTH_THRESHOLD:
            strengths.append(score.criterion_name)
        elif score.normalized_score < WEAKNESS_THRESHOLD:
            weaknesses.append(score.criterion_name)
            criterion = criteria_by_id[score.criterion_id]
            suggestions.append(suggestion_for(criterion.name, criterion.key).text)

    if not suggestions:
        suggestions.append(POSITIVE_FEEDBACK.text)

    result.strengths = strengths
    result.weaknesses = weaknesses
    result.suggestions = suggestions


# =============================================================================
# ENTRY POINT
# =============================================================================

def compute_ranking(
    period: Period,
    criteria: Iterable[Criterion],
    raw_scores: Iterable[RawScore],
    employees: Iterable[EmployeeRecord],
    previous_ranking: Iterable[PreviousRank] = (),
) -> RankingComputation:
    """
    Rank active employees for ``period``.

    ``raw_scores`` holds the period's scores, or every stored score when
    ``period`` is the consolidated sentinel (they are summed per employee and
    criterion first). ``previous_ranking`` is the prior month's persisted
    ranking and is ignored for the consolidated view.
    """
    consolidated = is_consolidated(period)
    label = period_label(period)

    active_criteria = sorted((c for c in criteria if c.active), key=lambda c: c.display_order)
    if not active_criteria:
        logger.warning("No active criteria configured; ranking for %s is empty", label)
        return RankingComputation()

    active_employees = [e for e in employees if e.active]
    if not active_employees:
        logger.warning("No active employees; ranking for %s is empty", label)
        return RankingComputation()

    check_weights(active_criteria)

    if consolidated:
        scope = consolidate_scores(raw_scores)
    else:
        scope = [s for s in raw_scores if s.period is None or s.period == period]

    normalized, updates = normalize_scores(active_criteria, scope)

    results = [score_employee(e, active_criteria, normalized) for e in active_employees]
    # list.sort is stable: equal totals keep the employees' input order
    results.sort(key=lambda r: r.total_score, reverse=True)

    previous = {} if consolidated else {p.employee_id: p.rank_position for p in previous_ranking}
    for position, result in enumerate(results, start=1):
        result.rank_position = position
        if result.employee_id in previous:
            result.previous_rank = previous[result.employee_id]
            result.rank_variation = result.previous_rank - position

    logger.info("Ranked %d employees over %d criteria for %s", len(results), len(active_criteria), label)
    return RankingComputation(results=results, updated_scores=[] if consolidated else updates)
