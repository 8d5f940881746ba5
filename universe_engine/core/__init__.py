"""Pure scoring and progression rules of the universe engine."""

from universe_engine.core.car import CarRating, CarStats
from universe_engine.core.driver import DriverRating
from universe_engine.core.evolution import (
    DECLINE_AGE,
    MAX_CHAMPION_BONUS_TITLES,
    DriverEvolution,
    DriverProfile,
    TeamBudgetChange,
    build_driver_evolutions,
    build_team_budget_changes,
    describe_evolution,
    propose_rookie_reveals,
)
from universe_engine.core.predictions import (
    ConstructorPrediction,
    DriverPrediction,
    predict_constructors,
    predict_drivers,
    predictions_frame,
)
from universe_engine.core.rain import (
    RAIN_SCALE,
    rain_label,
    roll_race_weather,
    roll_rain,
    snap_to_scale,
)
from universe_engine.core.rookie import RookieReveal, resolve_rookie_reveal
from universe_engine.core.sponsors import (
    OBJECTIVE_TYPES,
    EvaluationContext,
    EvaluationResult,
    SponsorEvaluation,
    SponsorObjective,
    evaluate_objective,
    evaluate_objectives,
    team_win_circuits,
)
from universe_engine.core.standings import (
    RaceEntry,
    Standing,
    build_points_map,
    compute_constructor_standings,
    compute_driver_standings,
    driver_race_points,
)
from universe_engine.core.surperformance import (
    SURPERFORMANCE_THRESHOLD,
    DriverSurperformance,
    DriverSurperformanceInput,
    TeamSurperformance,
    TeamSurperformanceInput,
    compute_delta,
    driver_potential_change,
    evaluate_drivers,
    evaluate_teams,
    surperformance_effect,
    team_budget_change,
)

__all__ = [
    "CarRating",
    "CarStats",
    "ConstructorPrediction",
    "DECLINE_AGE",
    "DriverEvolution",
    "DriverPrediction",
    "DriverProfile",
    "DriverRating",
    "DriverSurperformance",
    "DriverSurperformanceInput",
    "EvaluationContext",
    "EvaluationResult",
    "MAX_CHAMPION_BONUS_TITLES",
    "OBJECTIVE_TYPES",
    "RAIN_SCALE",
    "RaceEntry",
    "RookieReveal",
    "SURPERFORMANCE_THRESHOLD",
    "SponsorEvaluation",
    "SponsorObjective",
    "Standing",
    "TeamBudgetChange",
    "TeamSurperformance",
    "TeamSurperformanceInput",
    "build_driver_evolutions",
    "build_points_map",
    "build_team_budget_changes",
    "compute_constructor_standings",
    "compute_delta",
    "compute_driver_standings",
    "describe_evolution",
    "driver_potential_change",
    "driver_race_points",
    "evaluate_drivers",
    "evaluate_objective",
    "evaluate_objectives",
    "evaluate_teams",
    "predict_constructors",
    "predict_drivers",
    "predictions_frame",
    "propose_rookie_reveals",
    "rain_label",
    "resolve_rookie_reveal",
    "roll_race_weather",
    "roll_rain",
    "snap_to_scale",
    "surperformance_effect",
    "team_budget_change",
    "team_win_circuits",
]
