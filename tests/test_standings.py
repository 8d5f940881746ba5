"""Tests for championship points and standings aggregation."""

from universe_engine.core.standings import (
    RaceEntry,
    build_points_map,
    compute_constructor_standings,
    compute_driver_standings,
    driver_race_points,
)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

_POINTS = build_points_map(
    [{"position": p, "points": pts} for p, pts in enumerate([25, 18, 15, 12, 10, 8, 6, 4, 2, 1], start=1)]
)


def _race(
    race_id: str,
    order: list[tuple[str, str]],
    dnf: tuple[tuple[str, str], ...] | list[tuple[str, str]] = (),
    pole: str = "",
    fl: str = "",
) -> list[RaceEntry]:
    entries = [
        RaceEntry(race_id, did, tid, pos, is_pole=did == pole, is_fastest_lap=did == fl)
        for pos, (did, tid) in enumerate(order, start=1)
    ]
    entries += [RaceEntry(race_id, did, tid, None) for did, tid in dnf]
    return entries


# ---------------------------------------------------------------------------
# Points
# ---------------------------------------------------------------------------


def test_points_lookup() -> None:
    assert driver_race_points(1, False, _POINTS) == 25
    assert driver_race_points(10, False, _POINTS) == 1
    assert driver_race_points(11, False, _POINTS) == 0


def test_dnf_scores_nothing() -> None:
    assert driver_race_points(None, True, _POINTS) == 0


def test_fastest_lap_bonus_top_ten_only() -> None:
    assert driver_race_points(3, True, _POINTS) == 16
    assert driver_race_points(10, True, _POINTS) == 2
    assert driver_race_points(12, True, _POINTS) == 0


# ---------------------------------------------------------------------------
# Standings
# ---------------------------------------------------------------------------


def test_driver_standings_order_and_totals() -> None:
    results = (
        _race("r1", [("a", "t1"), ("b", "t2"), ("c", "t1")], pole="a", fl="b")
        + _race("r2", [("b", "t2"), ("c", "t1")], dnf=[("a", "t1")], pole="b")
    )
    standings = compute_driver_standings(results, _POINTS)

    assert [s.subject_id for s in standings] == ["b", "c", "a"]
    assert [s.position for s in standings] == [1, 2, 3]
    b, c, a = standings
    assert b.points == 18 + 1 + 25
    assert (b.wins, b.podiums, b.poles) == (1, 2, 1)
    assert c.points == 15 + 18
    assert a.points == 25
    assert (a.wins, a.poles) == (1, 1)


def test_tie_broken_by_wins() -> None:
    # x: 25 + 0 ; y: 15 + 10 -> equal points, x has a win
    results = (
        _race("r1", [("x", "t1"), ("z", "t2"), ("y", "t2")])
        + _race("r2", [("z", "t2"), ("w", "t3"), ("q", "t3"), ("v", "t3"), ("y", "t2")], dnf=[("x", "t1")])
    )
    standings = compute_driver_standings(results, _POINTS)
    order = [s.subject_id for s in standings]
    assert order.index("x") < order.index("y")


def test_full_tie_keeps_first_appearance() -> None:
    results = _race("r1", [("a", "t1"), ("b", "t2")]) + _race("r2", [("b", "t2"), ("a", "t1")])
    standings = compute_driver_standings(results, _POINTS)
    assert [s.subject_id for s in standings] == ["a", "b"]


def test_constructor_standings_sum_drivers() -> None:
    results = _race("r1", [("a", "t1"), ("b", "t2"), ("c", "t1"), ("d", "t2")])
    standings = compute_constructor_standings(results, _POINTS)
    assert [(s.subject_id, s.points) for s in standings] == [("t1", 40), ("t2", 30)]
    assert standings[0].wins == 1
    assert standings[0].podiums == 2


def test_empty_results() -> None:
    assert compute_driver_standings([], _POINTS) == []
    assert compute_constructor_standings([], _POINTS) == []
