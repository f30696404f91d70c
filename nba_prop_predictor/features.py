# file: nba_prop_predictor/features.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

import numpy as np
import pandas as pd

from .data_models import TrainConfig
from .utils import (
    BOX_SCORE_COLS,
    FANTASY_WEIGHTS,
    METRICS,
    REQUIRED_FIELDS,
    ensure_columns,
    normalize_columns,
    normalize_player,
    parse_date,
)

logger = logging.getLogger(__name__)

# Games averaged for the recent-form threshold input
RECENT_FORM_WINDOW = 5

# Column the train/test split is stratified on
STRATIFY_COL = "fpts"


@dataclass(frozen=True)
class PreparedSplit:
    """Seeded train/test partition of the prepared game log."""
    train: pd.DataFrame
    test: pd.DataFrame


def _numericify_cols(df: pd.DataFrame, cols: List[str]) -> None:
    """In-place numeric conversion for optional columns; non-numeric → NaN."""
    for c in cols:
        if c in df.columns:
            df[c] = pd.to_numeric(df[c], errors="coerce")


def clean_games(df: pd.DataFrame, name: str = "game log") -> pd.DataFrame:
    """Normalize an in-memory game log; the input frame is left untouched."""
    df = normalize_columns(df.copy())
    ensure_columns(df, ["player_name"], name)
    if "date" in df.columns:
        df = parse_date(df, "date")
    df["player_name"] = df["player_name"].map(normalize_player)
    _numericify_cols(df, BOX_SCORE_COLS + ["fpts"])
    return df


def load_games(path: str) -> pd.DataFrame:
    """Read an exported per-game player log and normalize."""
    df = pd.read_csv(path)
    ensure_columns(normalize_columns(df), ["player_name", "date"], str(path))
    return clean_games(df, str(path))


def add_derived_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Add total_pra, stl_blk and the fantasy score (kept where the log already has one)."""
    ensure_columns(df, BOX_SCORE_COLS, "game log")
    out = df.copy()
    out["total_pra"] = out["pts"] + out["treb"] + out["ast"]
    out["stl_blk"] = out["stl"] + out["blk"]
    fantasy = sum(out[col] * weight for col, weight in FANTASY_WEIGHTS.items())
    if "fpts" in out.columns:
        out["fpts"] = out["fpts"].fillna(fantasy)
    else:
        out["fpts"] = fantasy
    return out


def filter_players(df: pd.DataFrame, player_names: Iterable[str]) -> pd.DataFrame:
    """Keep rows for the requested players, logging anyone with no games."""
    wanted = {normalize_player(n) for n in player_names} - {None}
    out = df[df["player_name"].isin(wanted)]
    absent = sorted(wanted - set(out["player_name"]))
    if absent:
        logger.warning("No games found for players: %s", ", ".join(absent))
    return out


def stratified_split(
    df: pd.DataFrame,
    target: str = STRATIFY_COL,
    test_size: float = 0.2,
    n_strata: int = 5,
    random_state: int = 42,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Split rows so train and test follow the same distribution of `target`.

    The target is cut into quantile bins, capped so a bin holds about
    1 / test_size rows. Each bin is shuffled with a seeded generator and
    round(test_size * n) of its rows go to test, at least one and never the
    whole bin once it has two rows. Row order inside each split follows the
    input, and both indexes are reset.
    """
    if df.empty:
        return df.iloc[0:0].reset_index(drop=True), df.iloc[0:0].reset_index(drop=True)

    rng = np.random.default_rng(random_state)
    n_bins = max(1, min(n_strata, int(df[target].nunique()), math.floor(len(df) * test_size)))
    if n_bins > 1:
        bins = pd.qcut(df[target], q=n_bins, labels=False, duplicates="drop").to_numpy()
    else:
        bins = np.zeros(len(df), dtype=int)

    test_mask = np.zeros(len(df), dtype=bool)
    for b in np.unique(bins):
        positions = rng.permutation(np.flatnonzero(bins == b))
        n_test = math.floor(len(positions) * test_size + 0.5)
        if len(positions) >= 2:
            n_test = min(max(1, n_test), len(positions) - 1)
        test_mask[positions[:n_test]] = True
    train_mask = ~test_mask

    train = df.iloc[np.flatnonzero(train_mask)].reset_index(drop=True)
    test = df.iloc[np.flatnonzero(test_mask)].reset_index(drop=True)
    return train, test


def prepare_dataset(
    games: pd.DataFrame,
    player_names: Iterable[str],
    config: TrainConfig = TrainConfig(),
) -> PreparedSplit:
    """Filter, derive, drop incomplete rows and split the game log for training."""
    df = filter_players(clean_games(games), player_names)
    df = add_derived_columns(df)

    before = len(df)
    df = df.dropna(subset=REQUIRED_FIELDS)
    if before - len(df):
        logger.info("Dropped %d rows with missing required fields", before - len(df))

    train, test = stratified_split(
        df,
        target=STRATIFY_COL,
        test_size=config.test_size,
        n_strata=config.n_strata,
        random_state=config.random_state,
    )
    if train.empty or test.empty:
        logger.warning("Degenerate split: %d train rows, %d test rows", len(train), len(test))
    else:
        logger.info("Prepared %d train rows and %d test rows", len(train), len(test))
    return PreparedSplit(train=train, test=test)


def recent_form_averages(
    games: pd.DataFrame,
    player_names: Iterable[str],
    window: int = RECENT_FORM_WINDOW,
) -> Dict[str, Dict[str, float]]:
    """Mean of each metric's target over every player's last `window` games."""
    df = filter_players(clean_games(games), player_names)
    ensure_columns(df, ["date"], "game log")
    df = add_derived_columns(df).sort_values(["player_name", "date"])

    targets = {m.target: m.name for m in METRICS}
    out: Dict[str, Dict[str, float]] = {}
    for player, g in df.groupby("player_name", sort=True):
        means = g.tail(window)[list(targets)].mean()
        averages = {targets[t]: float(v) for t, v in means.items() if pd.notna(v)}
        if averages:
            out[player] = averages
    return out
