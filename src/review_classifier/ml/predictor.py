"""Sentiment model interface and its scikit-learn implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import numpy as np
import pandas as pd
from sklearn.base import clone
from sklearn.pipeline import Pipeline

from ..domain import ReviewRecord
from ..exceptions import ModelTrainingError
from .context import ModelContext


class SentimentModel(ABC):
    """A binary sentiment classifier the session code can drive."""

    @abstractmethod
    def predict(self, text: str) -> bool:
        """Return True for positive, False for negative."""

    @abstractmethod
    def retrain(self, records: Sequence[ReviewRecord]) -> None:
        """Refit from scratch on the given labeled records."""


class SentimentPredictor(SentimentModel):
    """Wrapper for a fitted sklearn text classification pipeline."""

    def __init__(
        self,
        pipeline: Pipeline,
        metadata: dict[str, Any] | None = None,
        schema: dict[str, str] | None = None,
    ):
        """Initialize predictor.

        Args:
            pipeline: sklearn pipeline (fitted, or about to be retrained)
            metadata: Training metadata dict
            schema: Input schema the pipeline was trained with
        """
        self.pipeline = pipeline
        self.metadata = metadata or {}
        self.schema = schema or {}

    @classmethod
    def untrained(cls, context: ModelContext) -> SentimentPredictor:
        return cls(pipeline=context.create_pipeline())

    def predict(self, text: str) -> bool:
        return bool(self.pipeline.predict([text])[0])

    def retrain(self, records: Sequence[ReviewRecord]) -> None:
        """Fit a fresh copy of the pipeline on all records.

        Raises:
            ModelTrainingError: If the records are unlabeled, empty,
                single-class, or yield no features
        """
        if any(record.label is None for record in records):
            raise ModelTrainingError("Cannot train on unlabeled reviews")

        texts = [record.text for record in records]
        labels = np.array([record.label for record in records], dtype=bool)

        if len(texts) == 0:
            raise ModelTrainingError("Training dataset is empty")
        if len(np.unique(labels)) < 2:
            raise ModelTrainingError(
                "Training dataset needs both positive and negative reviews"
            )

        pipeline = clone(self.pipeline)
        try:
            pipeline.fit(texts, labels)
        except ValueError as e:
            raise ModelTrainingError(f"Could not fit model: {e}") from e

        self.pipeline = pipeline
        self.metadata = {
            "training_date": pd.Timestamp.now().isoformat(),
            "training_samples": len(texts),
            "positive_samples": int(labels.sum()),
            "negative_samples": int((~labels).sum()),
            "model_type": type(pipeline.named_steps["classifier"]).__name__,
        }
