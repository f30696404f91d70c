"""Smoke tests for the command line front end."""

import json
import logging

import pandas as pd
from typer.testing import CliRunner

from nba_prop_predictor.cli import app

from conftest import PLAYERS, make_game_log

runner = CliRunner()


def test_run_writes_decision_table(games_csv, tmp_path):
    out = tmp_path / "out" / "decisions.csv"
    projections = tmp_path / "projections.json"
    projections.write_text(json.dumps({PLAYERS[0]: {"points": 18.5}}))

    args = ["run", "--games", games_csv, "--projections", str(projections), "--recent-form-window", "5", "--out", str(out)]
    for p in PLAYERS:
        args += ["--player", p]
    result = runner.invoke(app, args)

    assert result.exit_code == 0, result.output
    assert "rmse" in result.output
    table = pd.read_csv(out)
    assert set(table["player_name"]) <= set(PLAYERS)
    assert set(table["decision"]) <= {"More", "Less"}


def test_summary_prints_model_cards(games_csv):
    result = runner.invoke(app, ["summary", "--games", games_csv, "-p", PLAYERS[1], "-p", PLAYERS[2]])
    assert result.exit_code == 0, result.output
    assert "fantasy_score" in result.output
    assert "nearest-neighbor" in result.output


def test_invalid_keying_is_a_usage_error(games_csv):
    result = runner.invoke(app, ["run", "--games", games_csv, "-p", PLAYERS[0], "--keying", "per_team"])
    assert result.exit_code == 2


def test_player_game_keying(games_csv):
    result = runner.invoke(app, ["run", "--games", games_csv, "-p", PLAYERS[0], "--keying", "player_game"])
    assert result.exit_code == 0, result.output


def test_log_file_receives_records(games_csv, tmp_path):
    log_file = tmp_path / "run.log"
    try:
        result = runner.invoke(
            app, ["summary", "--games", games_csv, "-p", PLAYERS[0], "--log-file", str(log_file)]
        )
        assert result.exit_code == 0, result.output
        assert "nba_prop_predictor" in log_file.read_text()
    finally:
        root = logging.getLogger()
        for handler in list(root.handlers):
            if isinstance(handler, logging.FileHandler) and handler.baseFilename == str(log_file):
                root.removeHandler(handler)
                handler.close()


def test_single_game_player_is_reported_not_raised(tmp_path):
    path = tmp_path / "one.csv"
    make_game_log(players=["Solo"], n_games=1).to_csv(path, index=False)
    result = runner.invoke(app, ["run", "--games", str(path), "-p", "Solo"])
    assert result.exit_code == 0, result.output
    assert "No test rows to decide on" in result.output
