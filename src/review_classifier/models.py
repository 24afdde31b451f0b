"""Configuration models and constants for the review classifier."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_DATA_DIR = Path("training_data")
DEFAULT_MODEL_DIR = Path("ml_models")

TRAINING_FILE_NAME = "Reviews.tsv"
STAGING_FILE_NAME = "NewReviews.tsv"
MODEL_FILE_NAME = "sentiment_model.pkl"

# Typed by the operator to leave the review entry loop (case-insensitive)
EXIT_KEYWORD = "exit"

RANDOM_SEED = 42


@dataclass(frozen=True)
class TrainingColumns:
    """Column names of the tab-separated training dataset."""

    text: str = "ReviewText"
    label: str = "Label"

    @property
    def header(self) -> list[str]:
        return [self.text, self.label]


@dataclass(frozen=True)
class ReviewPaths:
    """Fixed file locations used by a review session."""

    training_data: Path
    staging: Path
    model: Path

    @classmethod
    def default(cls, root: Path | None = None) -> ReviewPaths:
        """Resolve the standard layout below ``root`` (default: cwd).

        Args:
            root: Directory holding ``training_data/`` and ``ml_models/``

        Returns:
            ReviewPaths for the training dataset, staging file and model
        """
        root = Path.cwd() if root is None else Path(root)
        data_dir = root / DEFAULT_DATA_DIR
        return cls(
            training_data=data_dir / TRAINING_FILE_NAME,
            staging=data_dir / STAGING_FILE_NAME,
            model=root / DEFAULT_MODEL_DIR / MODEL_FILE_NAME,
        )


@dataclass(frozen=True)
class PipelineSettings:
    """Hyper-parameters for the text classification pipeline."""

    word_ngram_range: tuple[int, int] = (1, 2)
    char_ngram_range: tuple[int, int] = (3, 5)
    max_word_features: int = 20000
    max_char_features: int = 20000
    max_iter: int = 1000
    regularization: float = 1.0


TRAINING_COLUMNS = TrainingColumns()
