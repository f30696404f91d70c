"""End-to-end tests for train -> evaluate -> decide."""

from nba_prop_predictor.data_models import TrainConfig
from nba_prop_predictor.decision import decisions_frame
from nba_prop_predictor.pipeline import run_pipeline

from conftest import PLAYERS, make_game_log

FAST = TrainConfig(k_grid=[3, 5], random_state=11)


class TestRunPipeline:

    def test_single_game_player_comes_back_empty(self):
        result = run_pipeline(make_game_log(players=["Solo"], n_games=1), ["Solo"], train_config=FAST)
        assert result.train.models == {}
        assert result.evaluation.predictions == {}
        assert result.evaluation.summary().empty
        assert result.decisions == {}
        assert decisions_frame(result.decisions).empty

    def test_unknown_player_comes_back_empty(self):
        result = run_pipeline(make_game_log(n_games=10), ["Nobody Here"], train_config=FAST)
        assert result.train.models == {}
        assert result.decisions == {}

    def test_small_log_reaches_decisions(self):
        result = run_pipeline(make_game_log(players=PLAYERS[:1], n_games=10), PLAYERS[:1], train_config=FAST)
        assert len(result.train.test_data) > 0
        assert list(result.decisions) == [PLAYERS[0]]
        assert len(result.decisions[PLAYERS[0]].details) == 8
