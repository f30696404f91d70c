# file: nba_prop_predictor/train.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List

import pandas as pd
from joblib import Parallel, delayed
from sklearn.ensemble import RandomForestRegressor
from sklearn.model_selection import GridSearchCV, RepeatedKFold, cross_validate
from sklearn.neighbors import KNeighborsRegressor
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from .data_models import MetricSpec, TrainConfig
from .features import prepare_dataset
from .models import EnsembleTreeModel, MetricModel, NearestNeighborModel
from .utils import METRICS, ensure_columns

logger = logging.getLogger(__name__)

SCORING = "neg_root_mean_squared_error"

SUMMARY_COLUMNS = ["metric", "target", "algorithm", "hyperparameters", "cv_rmse", "train_rows"]


@dataclass(frozen=True)
class TrainResult:
    """Fitted models keyed by metric name, plus the split they came from."""
    models: Dict[str, MetricModel]
    train_data: pd.DataFrame
    test_data: pd.DataFrame


def _splitter(n_rows: int, config: TrainConfig) -> RepeatedKFold:
    """Repeated K-fold; fold count shrinks to the row count on tiny training sets."""
    n_splits = min(config.cv_folds, n_rows)
    return RepeatedKFold(n_splits=n_splits, n_repeats=config.cv_repeats, random_state=config.random_state)


def _k_candidates(n_rows: int, config: TrainConfig) -> List[int]:
    """Grid values a k-NN can use given the smallest CV training fold."""
    n_splits = min(config.cv_folds, n_rows)
    smallest_fold = n_rows - math.ceil(n_rows / n_splits)
    grid = [k for k in config.k_grid if k <= smallest_fold]
    if not grid:
        logger.warning("k grid %s exceeds training fold size %d", config.k_grid, smallest_fold)
        grid = [max(1, smallest_fold)]
    return grid


def _fit_nearest_neighbor(spec: MetricSpec, X: pd.DataFrame, y: pd.Series, config: TrainConfig) -> NearestNeighborModel:
    search = GridSearchCV(
        Pipeline([("scale", StandardScaler()), ("model", KNeighborsRegressor())]),
        param_grid={"model__n_neighbors": _k_candidates(len(X), config)},
        scoring=SCORING,
        cv=_splitter(len(X), config),
        refit=True,
    )
    search.fit(X, y)
    k = int(search.best_params_["model__n_neighbors"])
    cv_rmse = float(-search.best_score_)
    logger.info("%s: k=%d selected, CV RMSE=%.3f", spec.name, k, cv_rmse)
    return NearestNeighborModel(
        spec=spec,
        pipeline=search.best_estimator_,
        k=k,
        cv_rmse=cv_rmse,
        train_rows=int(len(X)),
    )


def _fit_ensemble_tree(spec: MetricSpec, X: pd.DataFrame, y: pd.Series, config: TrainConfig) -> EnsembleTreeModel:
    pipeline = Pipeline(
        [
            ("scale", StandardScaler()),
            ("model", RandomForestRegressor(random_state=config.random_state)),
        ]
    )
    scores = cross_validate(pipeline, X, y, scoring=SCORING, cv=_splitter(len(X), config))
    cv_rmse = float(-scores["test_score"].mean())
    pipeline.fit(X, y)
    logger.info("%s: random forest CV RMSE=%.3f", spec.name, cv_rmse)
    return EnsembleTreeModel(spec=spec, pipeline=pipeline, cv_rmse=cv_rmse, train_rows=int(len(X)))


def fit_metric_model(spec: MetricSpec, train_data: pd.DataFrame, config: TrainConfig = TrainConfig()) -> MetricModel:
    """Fit the registry's algorithm for one metric on the training split."""
    ensure_columns(train_data, spec.predictors + [spec.target], f"training set for {spec.name}")
    X = train_data[spec.predictors].astype(float)
    y = train_data[spec.target].astype(float)
    if spec.algorithm == "nearest-neighbor":
        return _fit_nearest_neighbor(spec, X, y, config)
    return _fit_ensemble_tree(spec, X, y, config)


def fit_models(train_data: pd.DataFrame, config: TrainConfig = TrainConfig()) -> Dict[str, MetricModel]:
    """Train one model per metric; metrics are independent so they may run in parallel."""
    if len(train_data) < 2:
        raise ValueError(f"Need at least 2 training rows to fit models, got {len(train_data)}")
    fitted = Parallel(n_jobs=config.n_jobs)(
        delayed(fit_metric_model)(spec, train_data, config) for spec in METRICS
    )
    return {model.spec.name: model for model in fitted}


def train(
    dataset: pd.DataFrame,
    player_names: Iterable[str],
    config: TrainConfig = TrainConfig(),
) -> TrainResult:
    """
    Prepare the game log for `player_names` and fit every metric model.

    A training split too small to fit on yields no models rather than an
    error, so evaluation and decisions come back empty.
    """
    split = prepare_dataset(dataset, player_names, config)
    if len(split.train) < 2:
        logger.warning("Skipping training: %d training rows, need at least 2", len(split.train))
        return TrainResult(models={}, train_data=split.train, test_data=split.test)
    models = fit_models(split.train, config)
    return TrainResult(models=models, train_data=split.train, test_data=split.test)


def training_summary(models: Dict[str, MetricModel]) -> pd.DataFrame:
    """One row per model card, in registry order."""
    rows = []
    for model in models.values():
        card = model.card()
        rows.append(
            (
                card.metric,
                card.target,
                card.algorithm,
                ", ".join(f"{k}={v:g}" for k, v in card.hyperparameters.items()),
                card.cv_rmse,
                card.train_rows,
            )
        )
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
