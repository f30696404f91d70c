# file: nba_prop_predictor/utils.py
from __future__ import annotations

from typing import Dict, List, Optional

import pandas as pd

from .data_models import MetricSpec

# Stats-provider export names → our schema
COLUMN_ALIASES: Dict[str, str] = {
    "namePlayer": "player_name",
    "dateGame": "date",
    "game_date": "date",
    "plus_minus": "plusminus",
    "min": "minutes",
    "reb": "treb",
    "fantasy_points": "fpts",
}


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename known aliases; columns already in our schema win over their alias."""
    renames: Dict[str, str] = {}
    for src, dst in COLUMN_ALIASES.items():
        if src in df.columns and dst not in df.columns and dst not in renames.values():
            renames[src] = dst
    return df.rename(columns=renames)


def normalize_player(name) -> Optional[str]:
    """Collapse whitespace; returns None for missing."""
    if name is None or (isinstance(name, float) and pd.isna(name)):
        return None
    return " ".join(str(name).split())


def parse_date(df: pd.DataFrame, col: str = "date") -> pd.DataFrame:
    """
    Parse a column as datetime and keep only the calendar date.
    (Avoids tz headaches by dropping timezone info.)
    """
    df[col] = pd.to_datetime(df[col], errors="coerce").dt.date
    return df


def ensure_columns(df: pd.DataFrame, cols: List[str], name: str) -> None:
    """Raise with a clear message if required columns are missing."""
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f"{name} missing columns: {missing}")


# Fantasy scoring weights (points, rebounds, assists, steals, blocks, turnovers)
FANTASY_WEIGHTS: Dict[str, float] = {
    "pts": 1.0,
    "treb": 1.2,
    "ast": 1.5,
    "stl": 3.0,
    "blk": 3.0,
    "tov": -1.0,
}

# Metrics supported by the project; order breaks ties in best-model selection
METRICS: List[MetricSpec] = [
    MetricSpec(
        name="points",
        target="pts",
        predictors=["fgm", "fg3m", "ftm", "minutes", "pctFG", "pctFT"],
        algorithm="nearest-neighbor",
    ),
    MetricSpec(
        name="rebounds",
        target="treb",
        predictors=["oreb", "dreb", "minutes"],
        algorithm="nearest-neighbor",
    ),
    MetricSpec(
        name="assists",
        target="ast",
        predictors=["minutes", "pts", "plusminus", "fga"],
        algorithm="ensemble-tree",
    ),
    MetricSpec(
        name="total_pra",
        target="total_pra",
        predictors=["pts", "treb", "ast", "minutes", "plusminus"],
        algorithm="nearest-neighbor",
    ),
    MetricSpec(
        name="three_pointers",
        target="fg3m",
        predictors=["fg3a", "minutes", "pctFG3"],
        algorithm="nearest-neighbor",
    ),
    MetricSpec(
        name="steals_blocks",
        target="stl_blk",
        predictors=["minutes", "plusminus"],
        algorithm="nearest-neighbor",
    ),
    MetricSpec(
        name="turnovers",
        target="tov",
        predictors=["minutes", "fga", "ast"],
        algorithm="nearest-neighbor",
    ),
    MetricSpec(
        name="fantasy_score",
        target="fpts",
        predictors=["pts", "treb", "ast", "stl", "blk", "tov", "minutes", "plusminus"],
        algorithm="ensemble-tree",
    ),
]

METRICS_BY_NAME: Dict[str, MetricSpec] = {m.name: m for m in METRICS}

# Targets + every predictor any model reads, in first-seen order
REQUIRED_FIELDS: List[str] = list(
    dict.fromkeys([m.target for m in METRICS] + [p for m in METRICS for p in m.predictors])
)

# Raw box-score columns needed to derive the composite targets
BOX_SCORE_COLS: List[str] = list(
    dict.fromkeys([c for c in REQUIRED_FIELDS if c not in {"total_pra", "stl_blk", "fpts"}] + ["stl", "blk"])
)
