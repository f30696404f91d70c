# file: nba_prop_predictor/__init__.py
from .decision import decide
from .evaluate import evaluate
from .features import prepare_dataset
from .pipeline import run_pipeline
from .train import train

__all__ = ["decide", "evaluate", "prepare_dataset", "run_pipeline", "train"]
