"""Domain models for review records and sentiment labels."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Characters that would break the one-record-per-line TSV layout
_FORBIDDEN_TEXT_CHARS = ("\t", "\n", "\r")


class Sentiment(StrEnum):
    """Human-readable rendering of a binary sentiment label."""

    POSITIVE = "Positive"
    NEGATIVE = "Negative"

    @classmethod
    def from_label(cls, label: bool) -> Sentiment:
        return cls.POSITIVE if label else cls.NEGATIVE

    @property
    def label(self) -> bool:
        return self is Sentiment.POSITIVE


class ReviewRecord(BaseModel):
    """A review text with an optional sentiment label."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Single-line review text")
    label: bool | None = Field(
        default=None, description="True for positive, False for negative"
    )

    @field_validator("text")
    @classmethod
    def validate_single_line(cls, v: str) -> str:
        """Reject text that cannot be stored as one TSV field."""
        for char in _FORBIDDEN_TEXT_CHARS:
            if char in v:
                raise ValueError(
                    f"Review text must be a single line without tabs: {v!r}"
                )
        return v

    @property
    def is_labeled(self) -> bool:
        return self.label is not None

    @property
    def sentiment(self) -> Sentiment | None:
        """Sentiment for labeled records, None otherwise."""
        if self.label is None:
            return None
        return Sentiment.from_label(self.label)
