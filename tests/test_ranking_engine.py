"""
Tests for the ranking engine.

These tests verify:
1. Min-max normalization (range, neutral midpoint, direction)
2. Weighted aggregation
3. Dense, stable rank positions
4. Rank movement against the previous month
5. Strengths / weaknesses / suggestions
6. Empty-input safety and the consolidated view
"""

import logging
from datetime import date

import pytest

from app.services.periods import CONSOLIDATED
from app.services.ranking_engine import (
    Criterion,
    Direction,
    EmployeeRecord,
    PreviousRank,
    RawScore,
    compute_ranking,
    consolidate_scores,
    normalize_value,
)
from app.services.suggestions import POSITIVE_FEEDBACK, SUGGESTIONS, CriterionKey


OCTOBER = date(2025, 10, 1)
SEPTEMBER = date(2025, 9, 1)


# =============================================================================
# TEST FIXTURES
# =============================================================================

def make_employees(*names: str) -> list[EmployeeRecord]:
    return [
        EmployeeRecord(id=index, name=name, department="Operations", position="Analyst")
        for index, name in enumerate(names, start=1)
    ]


def make_scores(criterion_id, values: dict, period: date = OCTOBER) -> list[RawScore]:
    """values maps employee id -> raw value."""
    return [
        RawScore(
            id=f"s-{employee_id}-{criterion_id}-{period}",
            employee_id=employee_id,
            criterion_id=criterion_id,
            period=period,
            raw_value=value,
        )
        for employee_id, value in values.items()
    ]


ATTENDANCE = Criterion(id="att", name="Attendance", weight=100, key="attendance")


def by_employee(results):
    return {r.employee_id: r for r in results}


# =============================================================================
# NORMALIZATION
# =============================================================================

class TestNormalization:
    """Per-criterion min-max scaling."""

    def test_higher_is_better_extremes(self):
        assert normalize_value(90, 70, 90, Direction.HIGHER_IS_BETTER) == 100
        assert normalize_value(70, 70, 90, Direction.HIGHER_IS_BETTER) == 0

    def test_lower_is_better_is_inverted(self):
        assert normalize_value(90, 70, 90, Direction.LOWER_IS_BETTER) == 0
        assert normalize_value(70, 70, 90, Direction.LOWER_IS_BETTER) == 100

    def test_zero_spread_is_neutral(self):
        assert normalize_value(85, 85, 85, Direction.HIGHER_IS_BETTER) == 50
        assert normalize_value(85, 85, 85, Direction.LOWER_IS_BETTER) == 50

    def test_rounded_to_two_decimals(self):
        assert normalize_value(1, 0, 3, Direction.HIGHER_IS_BETTER) == 33.33

    def test_every_value_within_range(self):
        values = [-5.5, 0, 3.2, 17, 17, 42.75, 100, 1000]
        employees = make_employees(*[f"E{i}" for i in range(len(values))])
        scores = make_scores("att", {e.id: v for e, v in zip(employees, values)})

        for direction in Direction:
            criterion = Criterion(id="att", name="Attendance", weight=100, direction=direction)
            computation = compute_ranking(OCTOBER, [criterion], scores, employees)
            for result in computation.results:
                normalized = result.criterion_scores[0].normalized_score
                assert 0 <= normalized <= 100

    def test_direction_accepts_plain_strings(self):
        criterion = Criterion(id="late", name="Late arrivals", weight=100, direction="lower_is_better")
        assert criterion.direction is Direction.LOWER_IS_BETTER

    def test_unknown_direction_rejected(self):
        with pytest.raises(ValueError):
            Criterion(id="x", name="X", weight=10, direction="sideways")


# =============================================================================
# EXAMPLE SCENARIOS
# =============================================================================

class TestExampleScenarios:

    def test_two_employees_single_criterion(self):
        employees = make_employees("Ana", "Bruno")
        scores = make_scores("att", {1: 90, 2: 70})

        results = compute_ranking(OCTOBER, [ATTENDANCE], scores, employees).results

        first, second = results
        assert (first.employee_name, first.total_score, first.rank_position) == ("Ana", 100, 1)
        assert (second.employee_name, second.total_score, second.rank_position) == ("Bruno", 0, 2)
        assert first.criterion_scores[0].normalized_score == 100
        assert second.criterion_scores[0].normalized_score == 0

    def test_equal_values_tie_in_input_order(self):
        employees = make_employees("Ana", "Bruno")
        scores = make_scores("att", {1: 85, 2: 85})

        results = compute_ranking(OCTOBER, [ATTENDANCE], scores, employees).results

        assert [r.total_score for r in results] == [50, 50]
        assert [r.employee_name for r in results] == ["Ana", "Bruno"]
        assert [r.rank_position for r in results] == [1, 2]


# =============================================================================
# AGGREGATION & RANKING
# =============================================================================

class TestAggregation:

    def setup_method(self):
        self.criteria = [
            Criterion(id="att", name="Attendance", weight=40, display_order=1),
            Criterion(id="late", name="Late arrivals", weight=35, direction="lower_is_better", display_order=2),
            Criterion(id="hrs", name="Hours worked", weight=25, display_order=3),
        ]
        self.employees = make_employees("Ana", "Bruno", "Carla", "Davi")
        self.scores = (
            make_scores("att", {1: 98, 2: 91, 3: 75, 4: 88})
            + make_scores("late", {1: 4, 2: 0, 3: 7, 4: 2})
            + make_scores("hrs", {1: 160, 2: 172, 3: 151, 4: 166})
        )

    def test_total_is_weighted_sum(self):
        results = compute_ranking(OCTOBER, self.criteria, self.scores, self.employees).results
        weights = {c.id: c.weight for c in self.criteria}

        for result in results:
            expected = sum(s.normalized_score * weights[s.criterion_id] / 100 for s in result.criterion_scores)
            assert result.total_score == pytest.approx(expected, abs=0.01)

    def test_contributions_follow_display_order(self):
        shuffled = list(reversed(self.criteria))
        result = compute_ranking(OCTOBER, shuffled, self.scores, self.employees).results[0]
        assert [s.criterion_id for s in result.criterion_scores] == ["att", "late", "hrs"]

    def test_sorted_by_total_descending(self):
        results = compute_ranking(OCTOBER, self.criteria, self.scores, self.employees).results
        totals = [r.total_score for r in results]
        assert totals == sorted(totals, reverse=True)

    def test_rank_positions_are_dense(self):
        results = compute_ranking(OCTOBER, self.criteria, self.scores, self.employees).results
        assert sorted(r.rank_position for r in results) == [1, 2, 3, 4]

    def test_idempotent(self):
        first = compute_ranking(OCTOBER, self.criteria, self.scores, self.employees)
        second = compute_ranking(OCTOBER, self.criteria, self.scores, self.employees)
        assert [r.to_dict() for r in first.results] == [r.to_dict() for r in second.results]

    def test_weight_sum_mismatch_warns_but_proceeds(self, caplog):
        criteria = [
            Criterion(id="att", name="Attendance", weight=30),
            Criterion(id="hrs", name="Hours worked", weight=30),
        ]
        with caplog.at_level(logging.WARNING, logger="app.services.ranking_engine"):
            results = compute_ranking(OCTOBER, criteria, self.scores, self.employees).results

        assert "60.00%" in caplog.text
        # Not renormalized: the best possible total is 60
        assert max(r.total_score for r in results) <= 60

    def test_inactive_criteria_and_employees_ignored(self):
        criteria = self.criteria + [Criterion(id="old", name="Legacy", weight=50, active=False)]
        employees = self.employees + [EmployeeRecord(id=99, name="Former", active=False)]
        scores = self.scores + make_scores("att", {99: 100}) + make_scores("old", {1: 1, 2: 2})

        results = compute_ranking(OCTOBER, criteria, scores, employees).results

        assert 99 not in by_employee(results)
        assert all(len(r.criterion_scores) == 3 for r in results)


# =============================================================================
# MISSING DATA
# =============================================================================

class TestMissingData:

    def test_employee_without_value_scores_zero(self):
        employees = make_employees("Ana", "Bruno", "Carla")
        scores = make_scores("att", {1: 80, 2: 90})

        results = by_employee(compute_ranking(OCTOBER, [ATTENDANCE], scores, employees).results)

        carla = results[3].criterion_scores[0]
        assert (carla.raw_value, carla.normalized_score) == (0, 0)
        assert results[3].rank_position == 3

    def test_missing_employee_not_part_of_min_max(self):
        employees = make_employees("Ana", "Bruno", "Carla")
        scores = make_scores("att", {1: 80, 2: 90})

        results = by_employee(compute_ranking(OCTOBER, [ATTENDANCE], scores, employees).results)

        assert results[1].criterion_scores[0].normalized_score == 0
        assert results[2].criterion_scores[0].normalized_score == 100

    def test_criterion_without_submissions_contributes_nothing(self):
        criteria = [
            Criterion(id="att", name="Attendance", weight=50),
            Criterion(id="trn", name="Training", weight=50),
        ]
        employees = make_employees("Ana", "Bruno")
        scores = make_scores("att", {1: 10, 2: 20})

        results = compute_ranking(OCTOBER, criteria, scores, employees).results

        for result in results:
            training = result.criterion_scores[1]
            assert (training.raw_value, training.normalized_score, training.weighted_score) == (0, 0, 0)

    def test_scores_from_other_periods_ignored(self):
        employees = make_employees("Ana", "Bruno")
        scores = make_scores("att", {1: 90, 2: 70}) + make_scores("att", {1: 0, 2: 500}, period=SEPTEMBER)

        results = compute_ranking(OCTOBER, [ATTENDANCE], scores, employees).results

        assert results[0].employee_name == "Ana"
        assert results[0].criterion_scores[0].raw_value == 90


# =============================================================================
# PERIOD COMPARISON
# =============================================================================

class TestPeriodComparison:

    def test_rank_variation_sign(self):
        employees = make_employees("Ana", "Bruno", "Carla")
        scores = make_scores("att", {1: 90, 2: 80, 3: 70})
        previous = [PreviousRank(1, 3), PreviousRank(2, 2), PreviousRank(3, 1)]

        results = by_employee(compute_ranking(OCTOBER, [ATTENDANCE], scores, employees, previous).results)

        assert (results[1].previous_rank, results[1].rank_variation) == (3, 2)
        assert (results[2].previous_rank, results[2].rank_variation) == (2, 0)
        assert (results[3].previous_rank, results[3].rank_variation) == (1, -2)

    def test_new_employee_has_no_previous_rank(self):
        employees = make_employees("Ana", "Bruno")
        scores = make_scores("att", {1: 90, 2: 80})

        results = by_employee(compute_ranking(OCTOBER, [ATTENDANCE], scores, employees, [PreviousRank(1, 1)]).results)

        assert results[2].previous_rank is None
        assert results[2].rank_variation is None


# =============================================================================
# ANNOTATION
# =============================================================================

class TestAnnotation:

    def setup_method(self):
        self.criteria = [
            Criterion(id="att", name="Attendance", weight=50, key=CriterionKey.ATTENDANCE.value),
            Criterion(id="sales", name="Closed deals", weight=50),
        ]
        self.employees = make_employees("Ana", "Bruno", "Carla")

    def test_strengths_and_weaknesses(self):
        scores = make_scores("att", {1: 100, 2: 60, 3: 0}) + make_scores("sales", {1: 0, 2: 10, 3: 6})

        results = by_employee(compute_ranking(OCTOBER, self.criteria, scores, self.employees).results)

        assert results[1].strengths == ["Attendance"]
        assert results[1].weaknesses == ["Closed deals"]
        assert results[2].strengths == ["Closed deals"]
        assert results[2].weaknesses == []
        # 60% on attendance is neither strength nor weakness
        assert results[3].strengths == []
        assert results[3].weaknesses == ["Attendance"]

    def test_targeted_and_generic_suggestions(self):
        scores = make_scores("att", {1: 0, 2: 100, 3: 50}) + make_scores("sales", {1: 0, 2: 10, 3: 5})

        ana = by_employee(compute_ranking(OCTOBER, self.criteria, scores, self.employees).results)[1]

        assert ana.suggestions == [
            SUGGESTIONS[CriterionKey.ATTENDANCE],
            "Improve your performance in Closed deals",
        ]

    def test_positive_feedback_without_weaknesses(self):
        scores = make_scores("att", {1: 100, 2: 100, 3: 100}) + make_scores("sales", {1: 7, 2: 7, 3: 7})

        results = compute_ranking(OCTOBER, self.criteria, scores, self.employees).results

        for result in results:
            assert result.weaknesses == []
            assert result.suggestions == [POSITIVE_FEEDBACK.text]


# =============================================================================
# EMPTY INPUTS & WRITE-BACK
# =============================================================================

class TestEmptyInputs:

    def test_no_active_criteria(self, caplog):
        inactive = Criterion(id="att", name="Attendance", weight=100, active=False)
        with caplog.at_level(logging.WARNING):
            computation = compute_ranking(OCTOBER, [inactive], make_scores("att", {1: 1}), make_employees("Ana"))

        assert computation.results == []
        assert computation.updated_scores == []
        assert "No active criteria" in caplog.text

    def test_no_employees(self):
        computation = compute_ranking(OCTOBER, [ATTENDANCE], make_scores("att", {1: 1}), [])
        assert computation.results == []
        assert computation.updated_scores == []

    def test_no_scores_at_all(self):
        results = compute_ranking(OCTOBER, [ATTENDANCE], [], make_employees("Ana", "Bruno")).results
        assert [r.total_score for r in results] == [0, 0]


class TestWriteBack:

    def test_updated_scores_cover_every_stored_score(self):
        employees = make_employees("Ana", "Bruno")
        scores = make_scores("att", {1: 90, 2: 70})

        updates = compute_ranking(OCTOBER, [ATTENDANCE], scores, employees).updated_scores

        assert {u.score_id: u.normalized_score for u in updates} == {
            scores[0].id: 100,
            scores[1].id: 0,
        }

    def test_inputs_are_not_mutated(self):
        scores = make_scores("att", {1: 90, 2: 70})
        compute_ranking(OCTOBER, [ATTENDANCE], scores, make_employees("Ana", "Bruno"))
        assert all(s.normalized_score is None for s in scores)


# =============================================================================
# CONSOLIDATED VIEW
# =============================================================================

class TestConsolidated:

    def test_raw_values_summed_across_periods(self):
        scores = make_scores("att", {1: 10, 2: 30}, SEPTEMBER) + make_scores("att", {1: 40, 2: 5}, OCTOBER)
        consolidated = {(s.employee_id, s.criterion_id): s.raw_value for s in consolidate_scores(scores)}
        assert consolidated == {(1, "att"): 50, (2, "att"): 35}

    def test_consolidated_ranking(self):
        employees = make_employees("Ana", "Bruno")
        scores = make_scores("att", {1: 10, 2: 30}, SEPTEMBER) + make_scores("att", {1: 40, 2: 5}, OCTOBER)

        computation = compute_ranking(CONSOLIDATED, [ATTENDANCE], scores, employees, [PreviousRank(1, 2)])

        first, second = computation.results
        assert (first.employee_name, first.criterion_scores[0].raw_value, first.total_score) == ("Ana", 50, 100)
        assert (second.employee_name, second.total_score) == ("Bruno", 0)
        assert first.previous_rank is None
        assert computation.updated_scores == []
