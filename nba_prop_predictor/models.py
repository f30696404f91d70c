# file: nba_prop_predictor/models.py
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Dict, List, Union

import numpy as np
import pandas as pd
from sklearn.pipeline import Pipeline

from .data_models import MetricSpec, ModelCard


def _scaler_stats(pipeline: Pipeline, predictors: List[str]) -> Dict[str, Dict[str, float]]:
    scaler = pipeline.named_steps["scale"]
    return {
        p: {"mean": float(mu), "sd": float(sd)}
        for p, mu, sd in zip(predictors, scaler.mean_, scaler.scale_)
    }


@dataclass(frozen=True)
class NearestNeighborModel:
    """k-NN regressor over standardized predictors, k picked by repeated CV."""
    algorithm: ClassVar[str] = "nearest-neighbor"

    spec: MetricSpec
    pipeline: Pipeline
    k: int
    cv_rmse: float
    train_rows: int

    @property
    def predictors(self) -> List[str]:
        return list(self.spec.predictors)

    @property
    def standardization(self) -> Dict[str, Dict[str, float]]:
        return _scaler_stats(self.pipeline, self.predictors)

    def predict(self, frame: pd.DataFrame) -> np.ndarray:
        if frame.empty:
            return np.empty(0, dtype=float)
        return self.pipeline.predict(frame[self.predictors].astype(float)).astype(float)

    def card(self) -> ModelCard:
        return ModelCard(
            metric=self.spec.name,
            target=self.spec.target,
            algorithm=self.algorithm,
            features=self.predictors,
            hyperparameters={"k": self.k},
            cv_rmse=self.cv_rmse,
            train_rows=self.train_rows,
            notes=f"k={self.k}, CV RMSE={self.cv_rmse:.3f}",
        )


@dataclass(frozen=True)
class EnsembleTreeModel:
    """Random forest at library defaults, scored with the same repeated CV."""
    algorithm: ClassVar[str] = "ensemble-tree"

    spec: MetricSpec
    pipeline: Pipeline
    cv_rmse: float
    train_rows: int

    @property
    def predictors(self) -> List[str]:
        return list(self.spec.predictors)

    @property
    def standardization(self) -> Dict[str, Dict[str, float]]:
        return _scaler_stats(self.pipeline, self.predictors)

    @property
    def n_estimators(self) -> int:
        return int(self.pipeline.named_steps["model"].n_estimators)

    def predict(self, frame: pd.DataFrame) -> np.ndarray:
        if frame.empty:
            return np.empty(0, dtype=float)
        return self.pipeline.predict(frame[self.predictors].astype(float)).astype(float)

    def card(self) -> ModelCard:
        return ModelCard(
            metric=self.spec.name,
            target=self.spec.target,
            algorithm=self.algorithm,
            features=self.predictors,
            hyperparameters={"n_estimators": self.n_estimators},
            cv_rmse=self.cv_rmse,
            train_rows=self.train_rows,
            notes=f"trees={self.n_estimators}, CV RMSE={self.cv_rmse:.3f}",
        )


MetricModel = Union[NearestNeighborModel, EnsembleTreeModel]
