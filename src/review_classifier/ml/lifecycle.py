"""Build, persist and reload the sentiment model artifact."""

from __future__ import annotations

import logging
import pickle  # noqa: S403
from pathlib import Path
from typing import Any

import pandas as pd

from ..exceptions import ModelArtifactError, ModelNotFoundError
from ..io import load_training_dataset
from ..models import TRAINING_COLUMNS, TrainingColumns
from .context import ModelContext
from .predictor import SentimentModel, SentimentPredictor

logger = logging.getLogger(__name__)

ARTIFACT_FORMAT_VERSION = 1
_ARTIFACT_KEYS = ("format_version", "pipeline", "schema", "metadata")


def training_schema(columns: TrainingColumns = TRAINING_COLUMNS) -> dict[str, str]:
    """Input schema stored alongside the pipeline."""
    return {columns.text: "str", columns.label: "bool"}


def build_and_train(
    context: ModelContext,
    training_path: str | Path,
    model_path: str | Path,
    columns: TrainingColumns = TRAINING_COLUMNS,
) -> SentimentPredictor:
    """Fit a new model on the whole training dataset and save it.

    Args:
        context: Model context supplying the unfitted pipeline
        training_path: Tab-separated training dataset
        model_path: Destination of the model artifact
        columns: Training dataset column names

    Returns:
        The fitted SentimentPredictor

    Raises:
        MalformedRecordError: If the training dataset is corrupt
        ModelTrainingError: If the dataset cannot be fitted
    """
    records = load_training_dataset(training_path, columns)
    logger.info("Training sentiment model on %d reviews", len(records))

    predictor = SentimentPredictor.untrained(context)
    predictor.retrain(records)
    predictor.schema = training_schema(columns)
    save(predictor, model_path, predictor.schema)
    return predictor


def save(
    predictor: SentimentPredictor, model_path: str | Path, schema: dict[str, str]
) -> None:
    """Write the pipeline, its input schema and metadata, replacing any old file."""
    model_path = Path(model_path)
    model_path.parent.mkdir(parents=True, exist_ok=True)

    artifact = {
        "format_version": ARTIFACT_FORMAT_VERSION,
        "pipeline": predictor.pipeline,
        "schema": dict(schema),
        "metadata": predictor.metadata,
    }
    pd.to_pickle(artifact, model_path)
    logger.info("Model saved to %s", model_path)


def _read_artifact(model_path: Path) -> dict[str, Any]:
    try:
        artifact = pd.read_pickle(model_path)  # noqa: S301
    except (
        pickle.UnpicklingError,
        EOFError,
        AttributeError,
        ImportError,
        TypeError,
        ValueError,
    ) as e:
        raise ModelArtifactError(f"Unreadable model artifact {model_path}: {e}") from e

    if not isinstance(artifact, dict) or any(
        key not in artifact for key in _ARTIFACT_KEYS
    ):
        raise ModelArtifactError(
            "Unsupported model artifact format. "
            f"Expected keys: {list(_ARTIFACT_KEYS)}."
        )
    if artifact["format_version"] != ARTIFACT_FORMAT_VERSION:
        raise ModelArtifactError(
            f"Unsupported model artifact version {artifact['format_version']} "
            f"(expected {ARTIFACT_FORMAT_VERSION})"
        )
    return artifact


def load(model_path: str | Path) -> SentimentPredictor:
    """Load a previously saved model artifact.

    Raises:
        ModelNotFoundError: If no file exists at ``model_path``
        ModelArtifactError: If the file is not a supported artifact
    """
    model_path = Path(model_path)
    if not model_path.exists():
        raise ModelNotFoundError(f"Model file not found: {model_path}")

    artifact = _read_artifact(model_path)
    logger.debug("Loaded model from %s", model_path)
    return SentimentPredictor(
        pipeline=artifact["pipeline"],
        metadata=artifact["metadata"],
        schema=artifact["schema"],
    )


def predict(model: SentimentModel, text: str) -> bool:
    """Predict the label of a single review text."""
    return model.predict(text)
