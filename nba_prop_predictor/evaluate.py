# file: nba_prop_predictor/evaluate.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

import numpy as np
import pandas as pd
from sklearn.metrics import root_mean_squared_error

from .models import MetricModel
from .utils import METRICS_BY_NAME, ensure_columns

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationResult:
    """Test-set predictions (index-aligned with the test rows) and RMSE per metric."""
    predictions: Dict[str, np.ndarray]
    rmse: Dict[str, float]

    def summary(self) -> pd.DataFrame:
        rows = [
            (metric, METRICS_BY_NAME[metric].algorithm, self.rmse[metric], len(preds))
            for metric, preds in self.predictions.items()
        ]
        return pd.DataFrame(rows, columns=["metric", "algorithm", "rmse", "test_rows"])


def rmse(predicted, actual) -> float:
    """Root-mean-squared error over pairs where both values are present; NaN if none are."""
    p = np.asarray(predicted, dtype=float)
    a = np.asarray(actual, dtype=float)
    keep = ~(np.isnan(p) | np.isnan(a))
    if not keep.any():
        return float("nan")
    return float(root_mean_squared_error(a[keep], p[keep]))


def validate_features(models: Dict[str, MetricModel], test_data: pd.DataFrame) -> None:
    """Every model's training-time predictors must be present in the evaluation set."""
    for name, model in models.items():
        ensure_columns(test_data, model.predictors, f"test set for {name}")


def evaluate(models: Dict[str, MetricModel], test_data: pd.DataFrame) -> EvaluationResult:
    """Predict every metric on the test split and score it against its target column."""
    validate_features(models, test_data)

    predictions: Dict[str, np.ndarray] = {}
    scores: Dict[str, float] = {}
    for name, model in models.items():
        y_hat = model.predict(test_data)
        target = METRICS_BY_NAME[name].target
        if target in test_data.columns:
            actual = pd.to_numeric(test_data[target], errors="coerce").to_numpy(dtype=float)
        else:
            logger.warning("Test set has no %s column; RMSE for %s is undefined", target, name)
            actual = np.full(len(y_hat), np.nan)
        predictions[name] = y_hat
        scores[name] = rmse(y_hat, actual)
        logger.info("%s: test RMSE=%.3f over %d rows", name, scores[name], len(y_hat))

    return EvaluationResult(predictions=predictions, rmse=scores)
