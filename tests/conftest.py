"""
Pytest Configuration and Shared Fixtures
=========================================
"""

import numpy as np
import pandas as pd
import pytest

from nba_prop_predictor.data_models import TrainConfig
from nba_prop_predictor.train import train

PLAYERS = ["LeBron James", "Jayson Tatum", "Nikola Jokic"]


def make_game_log(players=PLAYERS, n_games=40, seed=7):
    """Synthetic but internally consistent box scores, one row per player-game."""
    rng = np.random.default_rng(seed)
    rows = []
    for p_idx, name in enumerate(players):
        dates = pd.date_range("2024-10-22", periods=n_games, freq="2D")
        for g in range(n_games):
            minutes = float(rng.uniform(18, 38))
            fga = int(rng.integers(6, 24))
            fgm = int(rng.integers(2, fga + 1))
            fg3a = int(rng.integers(1, 10))
            fg3m = int(min(rng.integers(0, fg3a + 1), fgm))
            fta = int(rng.integers(1, 10))
            ftm = int(rng.integers(0, fta + 1))
            oreb = int(rng.integers(0, 5))
            dreb = int(rng.integers(1, 11)) + p_idx
            rows.append(
                {
                    "player_name": name,
                    "date": dates[g].strftime("%Y-%m-%d"),
                    "pts": 2 * (fgm - fg3m) + 3 * fg3m + ftm,
                    "oreb": oreb,
                    "dreb": dreb,
                    "treb": oreb + dreb,
                    "ast": int(rng.integers(1, 12)),
                    "stl": int(rng.integers(0, 4)),
                    "blk": int(rng.integers(0, 4)),
                    "tov": int(rng.integers(0, 6)),
                    "fgm": fgm,
                    "fga": fga,
                    "fg3m": fg3m,
                    "fg3a": fg3a,
                    "ftm": ftm,
                    "fta": fta,
                    "minutes": minutes,
                    "plusminus": int(rng.integers(-20, 21)),
                    "pctFG": fgm / fga,
                    "pctFG3": fg3m / fg3a,
                    "pctFT": ftm / fta,
                }
            )
    return pd.DataFrame(rows)


@pytest.fixture
def game_log():
    return make_game_log()


@pytest.fixture(scope="session")
def fast_config():
    """Smaller grid so the suite stays quick; same CV harness."""
    return TrainConfig(k_grid=[3, 5, 7, 9], random_state=11)


@pytest.fixture(scope="session")
def trained(fast_config):
    """Models fitted once for the whole session."""
    return train(make_game_log(), PLAYERS, fast_config)


@pytest.fixture
def games_csv(tmp_path):
    path = tmp_path / "games.csv"
    make_game_log(n_games=25).to_csv(path, index=False)
    return str(path)
