# file: nba_prop_predictor/data_models.py
from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Algorithm = Literal["nearest-neighbor", "ensemble-tree"]
Decision = Literal["More", "Less"]


class MetricSpec(BaseModel):
    """One row of the metric registry: what to predict and from which columns."""
    model_config = ConfigDict(frozen=True)

    name: str
    target: str
    predictors: List[str]
    algorithm: Algorithm


class TrainConfig(BaseModel):
    """Training hyperparameters."""
    test_size: float = Field(0.2, gt=0.0, lt=1.0)
    random_state: int = 42
    cv_folds: int = Field(5, ge=2)
    cv_repeats: int = Field(2, ge=1)
    k_grid: List[int] = Field(default_factory=lambda: list(range(3, 22)))
    n_strata: int = Field(5, ge=1)
    n_jobs: int = 1


class DecisionConfig(BaseModel):
    """Threshold blending weights for the More/Less call."""
    confidence_margin: float = Field(0.10, ge=0.0)
    weight_model: float = Field(0.5, ge=0.0, le=1.0)
    weight_recent_form: float = Field(0.2, ge=0.0, le=1.0)
    # "player": one decision per player, later test rows overwrite earlier ones.
    # "player_game": one decision per test row, keyed "<player> <date>".
    keying: Literal["player", "player_game"] = "player"


class ModelCard(BaseModel):
    """Metadata describing each trained model."""
    metric: str
    target: str
    algorithm: Algorithm
    features: List[str]
    hyperparameters: Dict[str, float] = Field(default_factory=dict)
    cv_rmse: float
    train_rows: int
    notes: Optional[str] = None


class MetricDecision(BaseModel):
    """Threshold trail for one metric of one player-game."""
    model_config = ConfigDict(frozen=True)

    prediction: float
    projection: float
    weighted_threshold: float
    final_threshold: float
    adjusted_threshold: float
    recent_form_avg: Optional[float] = None
    decision: Decision
    prob_over: Optional[float] = None


class PlayerDecision(BaseModel):
    """Best signal for a player-game plus the per-metric detail behind it."""
    model_config = ConfigDict(frozen=True)

    player_name: str
    game_date: Optional[str] = None
    best_model: str
    best_prediction: float
    best_decision: Decision
    details: Dict[str, MetricDecision]
