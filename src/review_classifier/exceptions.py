"""Custom exceptions for the review classifier."""

from __future__ import annotations


class ReviewClassifierError(Exception):
    """Base exception for review classifier errors."""

    pass


class MalformedRecordError(ReviewClassifierError):
    """Raised when a training or staging file cannot be parsed."""

    def __init__(self, message: str, line_number: int | None = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class ModelNotFoundError(ReviewClassifierError, FileNotFoundError):
    """Raised when no model artifact exists at the requested path."""

    pass


class ModelArtifactError(ReviewClassifierError):
    """Raised when a model file is not a supported artifact."""

    pass


class ModelTrainingError(ReviewClassifierError):
    """Raised when the training dataset cannot be fitted."""

    pass


class InvalidInputError(ReviewClassifierError):
    """Raised when operator input cannot be parsed."""

    pass
