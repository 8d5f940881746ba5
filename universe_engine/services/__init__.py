"""Side-effecting workflows of the universe engine."""

from universe_engine.services.archive import (
    ArchiveInput,
    ArchiveReport,
    SeasonArchiver,
    archive_season,
)
from universe_engine.services.predictions import (
    PredictionsLockedError,
    generate_predictions,
    lock_predictions,
)
from universe_engine.services.season_end import SeasonEndReview, prepare_season_end
from universe_engine.services.surperformance import load_season_surperformance

__all__ = [
    "ArchiveInput",
    "ArchiveReport",
    "PredictionsLockedError",
    "SeasonArchiver",
    "SeasonEndReview",
    "archive_season",
    "generate_predictions",
    "load_season_surperformance",
    "lock_predictions",
    "prepare_season_end",
]
