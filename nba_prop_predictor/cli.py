# file: nba_prop_predictor/cli.py
from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer

from .data_models import DecisionConfig, TrainConfig
from .decision import decisions_frame
from .features import load_games, recent_form_averages
from .logging_config import setup_logging
from .pipeline import run_pipeline
from .train import train, training_summary

app = typer.Typer(add_completion=False, help="NBA Prop Predictor CLI")


class Keying(str, Enum):
    player = "player"
    player_game = "player_game"


def _read_table(path: Optional[str]):
    """Player → metric → value JSON file, or None."""
    if not path:
        return None
    return json.loads(Path(path).read_text())


@app.command()
def run(
    games: str = typer.Option(..., help="Game-log CSV exported from the stats provider"),
    player: List[str] = typer.Option(..., "--player", "-p", help="Player name; repeat for several"),
    projections: Optional[str] = typer.Option(None, help="JSON of sportsbook projections per player and metric"),
    recent_form: Optional[str] = typer.Option(None, help="JSON of recent-form averages per player and metric"),
    recent_form_window: Optional[int] = typer.Option(None, help="Compute recent form from the last N games instead"),
    confidence_margin: float = 0.10,
    weight_model: float = 0.5,
    weight_recent_form: float = 0.2,
    keying: Keying = typer.Option(Keying.player, help="'player' (latest game wins) or 'player_game'"),
    test_size: float = 0.2,
    random_state: int = 42,
    n_jobs: int = 1,
    out: Optional[str] = typer.Option(None, help="Write the decision table to this CSV"),
    log_level: str = "INFO",
    log_file: Optional[str] = typer.Option(None, help="Also write log records to this file"),
):
    """Train, evaluate and print More/Less decisions for the given players."""
    setup_logging(log_level, log_file)
    df = load_games(games)

    form = _read_table(recent_form)
    if form is None and recent_form_window:
        form = recent_form_averages(df, player, window=recent_form_window)

    result = run_pipeline(
        df,
        player,
        train_config=TrainConfig(test_size=test_size, random_state=random_state, n_jobs=n_jobs),
        decision_config=DecisionConfig(
            confidence_margin=confidence_margin,
            weight_model=weight_model,
            weight_recent_form=weight_recent_form,
            keying=keying.value,
        ),
        projections=_read_table(projections),
        recent_form=form,
    )

    typer.echo(result.evaluation.summary().to_string(index=False))
    table = decisions_frame(result.decisions)
    best = table[table["is_best"]] if not table.empty else table
    typer.echo(best.to_string(index=False) if not best.empty else "No test rows to decide on")

    if out:
        Path(out).parent.mkdir(parents=True, exist_ok=True)
        table.to_csv(out, index=False)
        typer.echo(f"Wrote {len(table)} rows to {out}")


@app.command()
def summary(
    games: str = typer.Option(..., help="Game-log CSV exported from the stats provider"),
    player: List[str] = typer.Option(..., "--player", "-p"),
    random_state: int = 42,
    n_jobs: int = 1,
    log_level: str = "INFO",
    log_file: Optional[str] = typer.Option(None, help="Also write log records to this file"),
):
    """Train only and print each model's card."""
    setup_logging(log_level, log_file)
    result = train(load_games(games), player, TrainConfig(random_state=random_state, n_jobs=n_jobs))
    typer.echo(training_summary(result.models).to_string(index=False))


if __name__ == "__main__":
    app()
