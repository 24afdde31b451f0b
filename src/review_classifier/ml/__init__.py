"""Machine learning module for review sentiment classification."""

from __future__ import annotations

from .context import ModelContext
from .lifecycle import build_and_train, load, predict, save, training_schema
from .pipeline import build_pipeline
from .predictor import SentimentModel, SentimentPredictor

__all__ = [
    "ModelContext",
    "SentimentModel",
    "SentimentPredictor",
    "build_and_train",
    "build_pipeline",
    "load",
    "predict",
    "save",
    "training_schema",
]
