"""Tests for sponsor objective evaluation."""

import pytest

from universe_engine.core.sponsors import (
    NO_VALUE_LABEL,
    OBJECTIVE_TYPES,
    UNRANKED_POSITION,
    EvaluationContext,
    EvaluationResult,
    SponsorObjective,
    evaluate_objective,
    evaluate_objectives,
    team_win_circuits,
)
from universe_engine.core.standings import Standing

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

_DRIVER_TEAMS = {"d1": "t1", "d2": "t1", "d3": "t2", "d4": "t3"}


def _ctx() -> EvaluationContext:
    return EvaluationContext(
        driver_standings=[
            Standing("d1", 1, 290, 2, 3, 2),
            Standing("d3", 2, 210, 1, 2, 1),
            Standing("d2", 4, 90, 0, 1, 0),
            Standing("d4", 6, 12, 0, 0, 0),
        ],
        constructor_standings=[
            Standing("t1", 1, 380, 2, 4, 2),
            Standing("t2", 2, 210, 1, 2, 1),
            Standing("t3", 3, 12, 0, 0, 0),
        ],
        driver_teams=_DRIVER_TEAMS,
        team_win_circuits=team_win_circuits(
            [("d1", "monza"), ("d1", "spa"), ("d3", "suzuka")], _DRIVER_TEAMS
        ),
    )


def _objective(kind: str, team_id: str = "t1", target=None, entity=None, **extra) -> SponsorObjective:
    return SponsorObjective(
        id=f"{team_id}-{kind}",
        team_id=team_id,
        objective_type=kind,
        target_value=target,
        target_entity_id=entity,
        **extra,
    )


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------


def test_constructor_position() -> None:
    assert evaluate_objective(_objective("constructor_position", target=1), _ctx()) == EvaluationResult(
        True, 1, "P1"
    )
    result = evaluate_objective(_objective("constructor_position", "t3", target=2), _ctx())
    assert (result.is_met, result.evaluated_value, result.label) == (False, 3, "P3")


def test_constructor_position_unranked_team() -> None:
    result = evaluate_objective(_objective("constructor_position", "t9", target=10), _ctx())
    assert result == EvaluationResult(False, None, NO_VALUE_LABEL)


def test_driver_position() -> None:
    met = evaluate_objective(_objective("driver_position", target=4, entity="d2"), _ctx())
    assert (met.is_met, met.label) == (True, "P4")
    missed = evaluate_objective(_objective("driver_position", target=3, entity="d2"), _ctx())
    assert not missed.is_met
    assert missed.evaluated_value == 4


def test_position_without_target_is_not_met() -> None:
    assert not evaluate_objective(_objective("constructor_position"), _ctx()).is_met


# ---------------------------------------------------------------------------
# Counts and points
# ---------------------------------------------------------------------------


def test_wins_sum_team_drivers() -> None:
    result = evaluate_objective(_objective("wins", target=2), _ctx())
    assert result == EvaluationResult(True, 2, "2 wins")
    single = evaluate_objective(_objective("wins", "t2", target=2), _ctx())
    assert (single.is_met, single.label) == (False, "1 win")


def test_podiums_sum_team_drivers() -> None:
    result = evaluate_objective(_objective("podiums", target=5), _ctx())
    assert (result.is_met, result.evaluated_value, result.label) == (False, 4, "4 podiums")
    assert evaluate_objective(_objective("podiums", "t2", target=2), _ctx()).is_met


def test_points_minimum() -> None:
    result = evaluate_objective(_objective("points_minimum", target=380), _ctx())
    assert result == EvaluationResult(True, 380, "380 pts")
    assert not evaluate_objective(_objective("points_minimum", "t3", target=50), _ctx()).is_met


def test_points_minimum_missing_team_scores_zero() -> None:
    result = evaluate_objective(_objective("points_minimum", "t9", target=1), _ctx())
    assert (result.is_met, result.evaluated_value, result.label) == (False, 0, "0 pts")


# ---------------------------------------------------------------------------
# Rivalries
# ---------------------------------------------------------------------------


def test_beat_team() -> None:
    ahead = evaluate_objective(_objective("beat_team", entity="t2"), _ctx())
    assert ahead == EvaluationResult(True, 1, "Ahead")
    behind = evaluate_objective(_objective("beat_team", "t3", entity="t2"), _ctx())
    assert behind == EvaluationResult(False, 3, "Behind")


def test_beat_team_against_unranked_rival() -> None:
    assert evaluate_objective(_objective("beat_team", "t3", entity="t9"), _ctx()).is_met
    both_missing = evaluate_objective(_objective("beat_team", "t8", entity="t9"), _ctx())
    assert both_missing == EvaluationResult(False, UNRANKED_POSITION, "Behind")


def test_beat_driver_uses_best_team_driver() -> None:
    result = evaluate_objective(_objective("beat_driver", entity="d3"), _ctx())
    assert result == EvaluationResult(True, 1, "Ahead")
    assert not evaluate_objective(_objective("beat_driver", "t3", entity="d2"), _ctx()).is_met


def test_beat_driver_team_without_drivers() -> None:
    result = evaluate_objective(_objective("beat_driver", "t9", entity="d4"), _ctx())
    assert result == EvaluationResult(False, UNRANKED_POSITION, "Behind")


# ---------------------------------------------------------------------------
# Race wins
# ---------------------------------------------------------------------------


def test_race_win_at_circuit() -> None:
    assert evaluate_objective(_objective("race_win_at_circuit", entity="spa"), _ctx()) == EvaluationResult(
        True, 1, "Won"
    )
    assert evaluate_objective(
        _objective("race_win_at_circuit", entity="suzuka"), _ctx()
    ) == EvaluationResult(False, 0, "No")


def test_race_win_without_circuit() -> None:
    result = evaluate_objective(_objective("race_win_at_circuit"), _ctx())
    assert result == EvaluationResult(False, None, NO_VALUE_LABEL)


def test_team_win_circuits_skips_unknown_entries() -> None:
    circuits = team_win_circuits(
        [("d1", "monza"), ("d2", "monza"), ("ghost", "spa"), ("d3", None)], _DRIVER_TEAMS
    )
    assert circuits == {"t1": {"monza"}}


# ---------------------------------------------------------------------------
# Manual and unknown
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("verdict, expected", [(True, True), (False, False), (None, False)])
def test_custom_keeps_player_verdict(verdict, expected) -> None:
    result = evaluate_objective(_objective("custom", is_met=verdict), _ctx())
    assert result == EvaluationResult(expected, None, "Manual")


def test_unknown_type_is_never_met() -> None:
    result = evaluate_objective(_objective("most_overtakes", target=1), _ctx())
    assert result == EvaluationResult(False, None, NO_VALUE_LABEL)


def test_every_known_type_evaluates() -> None:
    objectives = [_objective(kind, target=1, entity="t2") for kind in OBJECTIVE_TYPES]
    results = evaluate_objectives(objectives, _ctx())
    assert list(results) == [o.id for o in objectives]
    assert all(isinstance(r, EvaluationResult) for r in results.values())


def test_from_row() -> None:
    objective = SponsorObjective.from_row(
        {
            "id": "o1",
            "season_id": "s1",
            "team_id": "t1",
            "objective_type": "wins",
            "target_value": 3,
            "description": "Win three races",
        }
    )
    assert objective == SponsorObjective(
        id="o1", team_id="t1", objective_type="wins", target_value=3, description="Win three races"
    )
    assert objective.target_entity_id is None
