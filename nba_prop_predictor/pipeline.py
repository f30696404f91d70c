# file: nba_prop_predictor/pipeline.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

import pandas as pd

from .data_models import DecisionConfig, PlayerDecision, TrainConfig
from .decision import PlayerMetricTable, decide
from .evaluate import EvaluationResult, evaluate
from .train import TrainResult, train


@dataclass(frozen=True)
class PipelineResult:
    train: TrainResult
    evaluation: EvaluationResult
    decisions: Dict[str, PlayerDecision]


def run_pipeline(
    games: pd.DataFrame,
    player_names: Iterable[str],
    train_config: TrainConfig = TrainConfig(),
    decision_config: DecisionConfig = DecisionConfig(),
    projections: Optional[PlayerMetricTable] = None,
    recent_form: Optional[PlayerMetricTable] = None,
) -> PipelineResult:
    """Train, evaluate on the held-out split, then make the More/Less calls."""
    trained = train(games, list(player_names), train_config)
    evaluation = evaluate(trained.models, trained.test_data)
    decisions = decide(
        evaluation.predictions,
        trained.test_data,
        projections=projections,
        recent_form_averages=recent_form,
        config=decision_config,
        sigmas={name: model.cv_rmse for name, model in trained.models.items()},
    )
    return PipelineResult(train=trained, evaluation=evaluation, decisions=decisions)
