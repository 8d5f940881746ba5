"""Tests for the season-end evolution rules."""

from universe_engine.core.evolution import (
    DriverEvolution,
    DriverProfile,
    build_driver_evolutions,
    build_team_budget_changes,
    describe_evolution,
    is_declining,
    is_progressing,
    propose_rookie_reveals,
)
from universe_engine.core.surperformance import (
    DriverSurperformance,
    TeamSurperformance,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _surp(did: str, delta: int, potential_change: int = 0) -> DriverSurperformance:
    return DriverSurperformance(
        driver_id=did,
        name=did,
        team="T",
        age=None,
        predicted_position=None,
        final_position=None,
        delta=delta,
        effect="neutral",
        potential_change=potential_change,
    )


def _team_surp(tid: str, budget_change: int) -> TeamSurperformance:
    return TeamSurperformance(
        team_id=tid,
        name=tid,
        predicted_position=1,
        final_position=1,
        delta=2 * budget_change,
        effect="neutral",
        budget_change=budget_change,
    )


# ---------------------------------------------------------------------------
# Eligibility
# ---------------------------------------------------------------------------


def test_decline_from_35() -> None:
    assert is_declining(DriverProfile(id="a", age=35))
    assert not is_declining(DriverProfile(id="b", age=34))
    assert not is_declining(DriverProfile(id="c", age=None))


def test_progression_needs_youth_and_headroom() -> None:
    assert is_progressing(DriverProfile(id="a", age=26, note=6, potential_final=8))
    assert not is_progressing(DriverProfile(id="b", age=27, note=6, potential_final=8))
    assert not is_progressing(DriverProfile(id="c", age=22, note=8, potential_final=8))
    assert not is_progressing(DriverProfile(id="d", age=22, note=6, potential_final=None))


# ---------------------------------------------------------------------------
# Evolutions
# ---------------------------------------------------------------------------


def test_total_change_and_effect() -> None:
    evo = DriverEvolution(driver_id="a", potential_change=1, decline=-1, progression=1, champion_bonus=1)
    assert evo.total_change == 2
    assert evo.has_effect
    assert not DriverEvolution(driver_id="b").has_effect
    assert DriverEvolution(driver_id="c", rookie_reveal=7).has_effect


def test_build_combines_rules() -> None:
    drivers = [
        DriverProfile(id="champ", age=24, note=8, potential_final=9, world_titles=0),
        DriverProfile(id="veteran", age=36, note=7, potential_final=8),
        DriverProfile(id="quiet", age=30, note=6, potential_final=7),
    ]
    surps = [_surp("champ", 3, potential_change=1), _surp("veteran", -4), _surp("quiet", 0)]
    evolutions = build_driver_evolutions(drivers, surps, champion_driver_id="champ")

    by_id = {e.driver_id: e for e in evolutions}
    assert set(by_id) == {"champ", "veteran"}
    assert by_id["champ"] == DriverEvolution(
        driver_id="champ", potential_change=1, progression=1, champion_bonus=1
    )
    assert by_id["veteran"].decline == -1
    assert by_id["veteran"].total_change == -1


def test_champion_bonus_capped_at_three_titles() -> None:
    drivers = [DriverProfile(id="champ", age=30, note=9, potential_final=10, world_titles=3)]
    evolutions = build_driver_evolutions(drivers, [], champion_driver_id="champ")
    assert evolutions == []


def test_champion_bonus_can_be_disabled() -> None:
    drivers = [DriverProfile(id="champ", age=30, note=9, potential_final=10, world_titles=1)]
    assert build_driver_evolutions(drivers, [], "champ", champion_bonus_enabled=False) == []
    assert build_driver_evolutions(drivers, [], "champ")[0].champion_bonus == 1


def test_switches_turn_off_decline_and_progression() -> None:
    drivers = [
        DriverProfile(id="old", age=38, note=7),
        DriverProfile(id="young", age=21, note=5, potential_final=8),
    ]
    evolutions = build_driver_evolutions(
        drivers,
        [],
        decline_enabled={"old": False},
        progression_enabled={"young": False},
    )
    assert evolutions == []


def test_rookie_reveal_alone_is_kept() -> None:
    drivers = [DriverProfile(id="rookie", age=30, note=6, is_rookie=True)]
    evolutions = build_driver_evolutions(drivers, [], rookie_reveals={"rookie": 8})
    assert evolutions == [DriverEvolution(driver_id="rookie", rookie_reveal=8)]


# ---------------------------------------------------------------------------
# Rookie proposals
# ---------------------------------------------------------------------------


def test_propose_rookie_reveals() -> None:
    drivers = [
        DriverProfile(id="r1", is_rookie=True, potential_min=4, potential_max=9),
        DriverProfile(id="r2", is_rookie=True, potential_min=4, potential_max=9),
        DriverProfile(id="r3", is_rookie=True, potential_revealed=True),
        DriverProfile(id="vet"),
        DriverProfile(id="r4", is_rookie=True),
    ]
    reveals = propose_rookie_reveals(drivers, [_surp("r1", 3), _surp("r2", -1)])
    assert set(reveals) == {"r1", "r2", "r4"}
    assert reveals["r1"].auto_value == 9
    assert reveals["r2"].case == "draw"
    assert reveals["r4"].case == "draw"  # no surperformance data
    assert "between 1 and 10" in reveals["r4"].explanation


# ---------------------------------------------------------------------------
# Budgets and descriptions
# ---------------------------------------------------------------------------


def test_budget_changes_skip_zero_and_disabled() -> None:
    surps = [_team_surp("a", 1), _team_surp("b", 0), _team_surp("c", -1), _team_surp("d", 1)]
    changes = build_team_budget_changes(surps, enabled={"d": False})
    assert [(c.team_id, c.surperformance_delta) for c in changes] == [("a", 1), ("c", -1)]


def test_describe_evolution() -> None:
    evo = DriverEvolution(driver_id="a", potential_change=-1, decline=-1, champion_bonus=1, rookie_reveal=7)
    assert describe_evolution(evo) == (
        "champion +1, surperformance -1, decline -1, potential revealed: 7"
    )
    assert describe_evolution(DriverEvolution(driver_id="b")) == "no change"
