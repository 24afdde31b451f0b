"""Review Classifier - review sentiment classification with operator feedback."""

from .cli import main
from .domain import ReviewRecord, Sentiment
from .exceptions import (
    InvalidInputError,
    MalformedRecordError,
    ModelArtifactError,
    ModelNotFoundError,
    ModelTrainingError,
    ReviewClassifierError,
)
from .ml import ModelContext, SentimentModel, SentimentPredictor
from .models import ReviewPaths, TrainingColumns
from .session import ClassificationSummary, ReviewSession

__version__ = "0.1.0"
__all__ = [
    "ClassificationSummary",
    "InvalidInputError",
    "MalformedRecordError",
    "ModelArtifactError",
    "ModelContext",
    "ModelNotFoundError",
    "ModelTrainingError",
    "ReviewClassifierError",
    "ReviewPaths",
    "ReviewRecord",
    "ReviewSession",
    "Sentiment",
    "SentimentModel",
    "SentimentPredictor",
    "TrainingColumns",
    "main",
]
