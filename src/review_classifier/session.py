"""Interactive review entry and classification sessions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from .domain import ReviewRecord, Sentiment
from .exceptions import InvalidInputError, ModelNotFoundError, ReviewClassifierError
from .io import (
    append_training_record,
    existing_texts,
    load_staging_reviews,
    overwrite_staging_reviews,
)
from .ml import ModelContext, SentimentModel, build_and_train, load, predict
from .models import EXIT_KEYWORD, TRAINING_COLUMNS, ReviewPaths, TrainingColumns

logger = logging.getLogger(__name__)

REVIEW_PROMPT = f"Please enter a review (or '{EXIT_KEYWORD}' to exit)"
CONFIRM_PROMPT = "Is the classification correct? (y/n)"
CORRECTION_PROMPT = (
    "Please enter the correct classification (0 for negative, 1 for positive)"
)

_YES = frozenset({"y", "yes"})
_NO = frozenset({"n", "no"})


class Prompter(Protocol):
    """Source of operator answers."""

    def ask(self, prompt: str) -> str: ...


class ConsolePrompter:
    """Reads answers from the terminal with rich prompts."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def ask(self, prompt: str) -> str:
        return Prompt.ask(escape(prompt), console=self.console)


class ReviewState(StrEnum):
    """Steps a staged review goes through."""

    PREDICTING = "predicting"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    AWAITING_CORRECTION = "awaiting_correction"
    DONE = "done"


class ReviewOutcome(StrEnum):
    """How a staged review left the classification flow."""

    ACCEPTED = "accepted"
    CORRECTED = "corrected"
    INVALID = "invalid"


def parse_confirmation(answer: str) -> bool:
    """Parse a yes/no answer.

    Raises:
        InvalidInputError: If the answer is neither yes nor no
    """
    token = answer.strip().lower()
    if token in _YES:
        return True
    if token in _NO:
        return False
    raise InvalidInputError(f"Unrecognized answer {answer!r}")


def parse_correction(answer: str) -> bool:
    """Parse a replacement label, which must be ``0`` or ``1``.

    Raises:
        InvalidInputError: If the answer is not 0 or 1
    """
    try:
        value = int(answer.strip())
    except ValueError as e:
        raise InvalidInputError(f"Not a number: {answer!r}") from e
    if value not in (0, 1):
        raise InvalidInputError(f"Label must be 0 or 1, got {value}")
    return bool(value)


class StagedReviewFlow:
    """Predict, confirm and optionally correct the label of one review.

    The flow only talks to a ``Prompter`` and a ``Console``, so it runs the
    same way against the terminal or a scripted list of answers.
    """

    def __init__(
        self,
        text: str,
        model: SentimentModel,
        prompter: Prompter,
        console: Console,
    ):
        self.text = text
        self.model = model
        self.prompter = prompter
        self.console = console
        self.state = ReviewState.PREDICTING
        self.predicted: bool | None = None
        self.label: bool | None = None
        self.outcome: ReviewOutcome | None = None

    def step(self) -> ReviewState:
        """Run the current state and move to the next one."""
        if self.state is ReviewState.PREDICTING:
            self._predict()
        elif self.state is ReviewState.AWAITING_CONFIRMATION:
            self._confirm()
        elif self.state is ReviewState.AWAITING_CORRECTION:
            self._correct()
        return self.state

    def run(self) -> ReviewOutcome:
        while self.state is not ReviewState.DONE:
            self.step()
        if self.outcome is None:
            raise ReviewClassifierError(
                f"Review flow for {self.text!r} finished without an outcome"
            )
        return self.outcome

    def _predict(self) -> None:
        self.predicted = predict(self.model, self.text)
        sentiment = Sentiment.from_label(self.predicted)
        self.console.print(
            f"The classification for the review '{escape(self.text)}' is: "
            f"[bold]{sentiment}[/bold]"
        )
        self.state = ReviewState.AWAITING_CONFIRMATION

    def _confirm(self) -> None:
        answer = self.prompter.ask(CONFIRM_PROMPT)
        try:
            confirmed = parse_confirmation(answer)
        except InvalidInputError as e:
            self.console.print(
                f"[yellow]{escape(str(e))}, treating it as 'no'.[/yellow]"
            )
            confirmed = False

        if confirmed:
            self.label = self.predicted
            self.outcome = ReviewOutcome.ACCEPTED
            self.state = ReviewState.DONE
        else:
            self.state = ReviewState.AWAITING_CORRECTION

    def _correct(self) -> None:
        answer = self.prompter.ask(CORRECTION_PROMPT)
        try:
            self.label = parse_correction(answer)
            self.outcome = ReviewOutcome.CORRECTED
        except InvalidInputError as e:
            logger.debug("Dropping review %r: %s", self.text, e)
            self.console.print(
                "[yellow]Invalid input. "
                "The classification has not been updated.[/yellow]"
            )
            self.outcome = ReviewOutcome.INVALID
        self.state = ReviewState.DONE


@dataclass
class ClassificationSummary:
    """Per-outcome counts for one classification session."""

    accepted: int = 0
    corrected: int = 0
    skipped: int = 0
    invalid: int = 0
    failed: int = 0

    @property
    def appended(self) -> int:
        return self.accepted + self.corrected

    def record(self, outcome: ReviewOutcome) -> None:
        if outcome is ReviewOutcome.ACCEPTED:
            self.accepted += 1
        elif outcome is ReviewOutcome.CORRECTED:
            self.corrected += 1
        else:
            self.invalid += 1


class ReviewSession:
    """Operator session over the training dataset, staging file and model."""

    def __init__(
        self,
        context: ModelContext,
        paths: ReviewPaths,
        prompter: Prompter | None = None,
        console: Console | None = None,
        columns: TrainingColumns = TRAINING_COLUMNS,
    ):
        self.context = context
        self.paths = paths
        self.console = console or Console()
        self.prompter = prompter or ConsolePrompter(self.console)
        self.columns = columns
        self.model: SentimentModel | None = None

    def _load_model(self, unavailable_message: str) -> SentimentModel | None:
        try:
            self.model = load(self.paths.model)
        except ModelNotFoundError as e:
            logger.warning("%s", e)
            self.console.print(f"[red]{unavailable_message}[/red]")
            return None
        return self.model

    def enter_new_reviews(self) -> list[ReviewRecord]:
        """Collect reviews from the operator, classifying each as it arrives.

        The collected texts replace the staging file when the operator exits.

        Returns:
            The reviews entered during this session
        """
        model = self._load_model(
            "The model was not found. No classification can be performed."
        )
        if model is None:
            return []

        reviews: list[ReviewRecord] = []
        while True:
            try:
                text = self.prompter.ask(REVIEW_PROMPT)
            except EOFError:
                break
            if text.strip().lower() == EXIT_KEYWORD:
                break
            if not text.strip():
                self.console.print(
                    "[yellow]Empty reviews are ignored. "
                    "The review was not saved.[/yellow]"
                )
                continue

            try:
                record = ReviewRecord(text=text)
            except ValidationError:
                self.console.print(
                    "[yellow]Reviews must be a single line without tabs. "
                    "The review was not saved.[/yellow]"
                )
                continue

            reviews.append(record)
            sentiment = Sentiment.from_label(predict(model, record.text))
            self.console.print(
                f"The classification for the review '{escape(record.text)}' is: "
                f"[bold]{sentiment}[/bold]"
            )

        try:
            overwrite_staging_reviews(
                self.paths.staging, [review.text for review in reviews]
            )
        except OSError as e:
            self.console.print(f"[red]Error saving new reviews: {escape(str(e))}[/red]")
            return reviews

        self.console.print("[green]All new reviews have been saved.[/green]")
        return reviews

    def classify_new_reviews(self) -> ClassificationSummary | None:
        """Confirm or correct staged reviews, then retrain on the result.

        Every staged review is consumed exactly once: the staging file is
        emptied afterwards whatever happened to each review, and the model is
        rebuilt even when nothing was added.

        Returns:
            Outcome counts, or None when no model was available
        """
        model = self._load_model("The model was not found. Please train a model first.")
        if model is None:
            return None

        staged = load_staging_reviews(self.paths.staging)
        known = existing_texts(self.paths.training_data, self.columns)
        summary = ClassificationSummary()

        for text in staged:
            if text in known:
                self.console.print(
                    f"[yellow]The review '{escape(text)}' already exists in the "
                    "training data and will be ignored.[/yellow]"
                )
                summary.skipped += 1
                continue

            try:
                ReviewRecord(text=text)
            except ValidationError:
                self.console.print(
                    f"[yellow]The review '{escape(text)}' contains a tab "
                    "and cannot be stored.[/yellow]"
                )
                summary.invalid += 1
                continue

            flow = StagedReviewFlow(text, model, self.prompter, self.console)
            outcome = flow.run()
            if flow.label is None:
                summary.record(outcome)
                continue

            try:
                append_training_record(
                    self.paths.training_data, text, flow.label, self.columns
                )
            except OSError as e:
                self.console.print(
                    f"[red]Error updating training data: {escape(str(e))}[/red]"
                )
                summary.failed += 1
                continue

            known.add(text)
            summary.record(outcome)

        overwrite_staging_reviews(self.paths.staging, [])

        # Rebuilt even when nothing was appended
        self.model = build_and_train(
            self.context, self.paths.training_data, self.paths.model, self.columns
        )
        self.console.print(f"[green]Model saved to {self.paths.model}[/green]")
        self.print_summary(summary)
        return summary

    def print_summary(self, summary: ClassificationSummary) -> None:
        table = Table(title="Classification Summary")
        table.add_column("Outcome", style="cyan")
        table.add_column("Reviews", justify="right")
        table.add_row("Accepted", str(summary.accepted))
        table.add_row("Corrected", str(summary.corrected))
        table.add_row("Already in training data", str(summary.skipped))
        table.add_row("Invalid input", str(summary.invalid))
        table.add_row("Write errors", str(summary.failed))
        self.console.print(table)
