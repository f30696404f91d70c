# file: nba_prop_predictor/decision.py
from __future__ import annotations

import math
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd
from scipy.stats import norm

from .data_models import DecisionConfig, MetricDecision, PlayerDecision
from .utils import METRICS, ensure_columns

# Per-player, per-metric optional values (sportsbook projections, recent-form averages)
PlayerMetricTable = Mapping[str, Mapping[str, Optional[float]]]

FRAME_COLUMNS = [
    "player_name",
    "game_date",
    "metric",
    "prediction",
    "projection",
    "recent_form_avg",
    "weighted_threshold",
    "final_threshold",
    "adjusted_threshold",
    "decision",
    "prob_over",
    "is_best",
]


def _lookup(table: Optional[PlayerMetricTable], player: str, metric: str) -> Optional[float]:
    """Value for (player, metric), or None when absent or NaN."""
    if not table:
        return None
    value = (table.get(player) or {}).get(metric)
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    return float(value)


def _metric_order(predictions: Mapping[str, Sequence[float]]) -> List[str]:
    """Registry order first so ties go to the first-declared metric."""
    declared = [m.name for m in METRICS if m.name in predictions]
    return declared + [name for name in predictions if name not in declared]


def threshold_decision(
    prediction: float,
    projection: float,
    recent_form_avg: Optional[float] = None,
    config: DecisionConfig = DecisionConfig(),
    sigma: Optional[float] = None,
) -> MetricDecision:
    """
    Blend projection and recent form into a threshold and make the More/Less call.

    weighted = w_rf * recent + (1 - w_rf) * projection (projection alone without recent form)
    final    = projection + w_model * (weighted - projection)
    adjusted = final * (1 + margin)
    More only when the prediction is strictly above the adjusted threshold.
    """
    if recent_form_avg is None:
        weighted = projection
    else:
        weighted = config.weight_recent_form * recent_form_avg + (1 - config.weight_recent_form) * projection
    final = projection + config.weight_model * (weighted - projection)
    adjusted = final * (1 + config.confidence_margin)

    prob_over = None
    if sigma is not None and np.isfinite(sigma) and sigma > 1e-6:
        prob_over = float(1 - norm.cdf((adjusted - prediction) / sigma))

    return MetricDecision(
        prediction=float(prediction),
        projection=float(projection),
        weighted_threshold=float(weighted),
        final_threshold=float(final),
        adjusted_threshold=float(adjusted),
        recent_form_avg=recent_form_avg,
        decision="More" if prediction > adjusted else "Less",
        prob_over=prob_over,
    )


def decide(
    predictions: Mapping[str, Sequence[float]],
    test_data: pd.DataFrame,
    projections: Optional[PlayerMetricTable] = None,
    recent_form_averages: Optional[PlayerMetricTable] = None,
    confidence_margin: Optional[float] = None,
    weight_model: Optional[float] = None,
    weight_recent_form: Optional[float] = None,
    config: DecisionConfig = DecisionConfig(),
    sigmas: Optional[Mapping[str, float]] = None,
) -> Dict[str, PlayerDecision]:
    """
    Turn per-metric predictions into one More/Less signal per test row.

    Missing projections fall back to the mean prediction for that metric over
    the whole test set. With the default "player" keying a player's later rows
    replace earlier ones; "player_game" keeps every row. Keys come back sorted.
    `confidence_margin`, `weight_model` and `weight_recent_form` override the
    matching `config` fields when given.
    """
    overrides = {
        "confidence_margin": confidence_margin,
        "weight_model": weight_model,
        "weight_recent_form": weight_recent_form,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        config = DecisionConfig(**{**config.model_dump(), **overrides})

    ensure_columns(test_data, ["player_name"], "test set")
    metrics = _metric_order(predictions)
    preds = {m: np.asarray(predictions[m], dtype=float) for m in metrics}
    for m, arr in preds.items():
        if len(arr) != len(test_data):
            raise ValueError(f"{m} has {len(arr)} predictions for {len(test_data)} test rows")

    population_mean = {m: float(arr.mean()) for m, arr in preds.items() if len(arr)}
    sigmas = sigmas or {}
    has_dates = "date" in test_data.columns

    results: Dict[str, PlayerDecision] = {}
    for i, player in enumerate(test_data["player_name"].tolist()):
        game_date = None
        if has_dates and pd.notna(test_data["date"].iloc[i]):
            game_date = str(test_data["date"].iloc[i])

        details: Dict[str, MetricDecision] = {}
        best_model = None
        for m in metrics:
            projection = _lookup(projections, player, m)
            details[m] = threshold_decision(
                prediction=preds[m][i],
                projection=population_mean[m] if projection is None else projection,
                recent_form_avg=_lookup(recent_form_averages, player, m),
                config=config,
                sigma=sigmas.get(m),
            )
            if best_model is None or details[m].prediction > details[best_model].prediction:
                best_model = m

        if best_model is None:
            continue
        if config.keying == "player":
            key = player
        else:
            key = f"{player} {game_date if game_date is not None else f'#{i}'}"
        results[key] = PlayerDecision(
            player_name=player,
            game_date=game_date,
            best_model=best_model,
            best_prediction=details[best_model].prediction,
            best_decision=details[best_model].decision,
            details=details,
        )

    return dict(sorted(results.items()))


def decisions_frame(decisions: Mapping[str, PlayerDecision]) -> pd.DataFrame:
    """Long table (one row per player-game and metric) for report collaborators."""
    rows = []
    for decision in decisions.values():
        for metric, d in decision.details.items():
            rows.append(
                {
                    "player_name": decision.player_name,
                    "game_date": decision.game_date,
                    "metric": metric,
                    **d.model_dump(),
                    "is_best": metric == decision.best_model,
                }
            )
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)
