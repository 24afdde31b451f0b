"""I/O operations for the training dataset and the staging file."""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable
from pathlib import Path

import pandas as pd
from pandas import DataFrame

from .domain import ReviewRecord
from .exceptions import MalformedRecordError
from .models import TRAINING_COLUMNS, TrainingColumns

logger = logging.getLogger(__name__)

_TRUE_TOKENS = frozenset({"true", "1"})
_FALSE_TOKENS = frozenset({"false", "0"})


def parse_label(value: object) -> bool:
    """Parse a textual boolean label.

    Both ``True``/``False`` (any case) and ``1``/``0`` are accepted, since
    hand-written rows and appended rows use different encodings.

    Raises:
        ValueError: If the value is not a boolean token
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        token = value.strip().lower()
        if token in _TRUE_TOKENS:
            return True
        if token in _FALSE_TOKENS:
            return False
    raise ValueError(f"Not a boolean label: {value!r}")


def format_label(label: bool) -> str:
    """Encode a label the way appended training rows store it."""
    return "1" if label else "0"


def format_record(record: ReviewRecord) -> str:
    """Serialize a labeled record as a ``text<TAB>label`` line (no newline)."""
    if record.label is None:
        raise ValueError("Only labeled records can be written to training data")
    return f"{record.text}\t{format_label(record.label)}"


def _is_blank(value: object) -> bool:
    return not isinstance(value, str) or not value.strip()


def _read_rows(path: Path) -> DataFrame:
    # Blank lines are kept so row offsets map to file line numbers
    try:
        return pd.read_csv(
            path,
            sep="\t",
            header=None,
            dtype=str,
            keep_default_na=False,
            quoting=csv.QUOTE_NONE,
            encoding="utf-8",
            skip_blank_lines=False,
        )
    except UnicodeDecodeError as e:
        raise MalformedRecordError(
            f"training dataset is not valid UTF-8 ({e.reason} at byte {e.start})"
        ) from e
    except pd.errors.EmptyDataError as e:
        raise MalformedRecordError("training dataset has no header row") from e
    except pd.errors.ParserError as e:
        raise MalformedRecordError(f"unexpected column count ({e})") from e


def load_training_frame(
    file_path: str | Path, columns: TrainingColumns = TRAINING_COLUMNS
) -> DataFrame:
    """Read the training dataset into a text/label DataFrame.

    Args:
        file_path: Path to the tab-separated training dataset
        columns: Expected header names

    Returns:
        DataFrame with a string text column and a boolean label column

    Raises:
        FileNotFoundError: If the file does not exist
        MalformedRecordError: If the header or any row cannot be parsed
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Training dataset not found: {file_path}")

    logger.debug("Reading training dataset: %s", file_path)
    raw = _read_rows(file_path)

    if raw.shape[1] != len(columns.header):
        raise MalformedRecordError(
            f"expected {len(columns.header)} columns, found {raw.shape[1]}",
            line_number=1,
        )

    header = [str(value).strip() for value in raw.iloc[0]]
    if header != columns.header:
        raise MalformedRecordError(
            f"expected header {columns.header}, found {header}", line_number=1
        )

    texts: list[str] = []
    labels: list[bool] = []
    for offset, (text, label) in enumerate(raw.iloc[1:].itertuples(index=False)):
        line_number = offset + 2
        if _is_blank(text) and _is_blank(label):
            continue
        if not isinstance(label, str) or label == "":
            raise MalformedRecordError("missing label column", line_number)
        try:
            labels.append(parse_label(label))
        except ValueError as e:
            raise MalformedRecordError(str(e), line_number) from e
        texts.append(text if isinstance(text, str) else "")

    logger.info("Loaded %d training records from %s", len(texts), file_path)
    return DataFrame(
        {columns.text: pd.Series(texts, dtype=str), columns.label: labels},
        columns=columns.header,
    ).astype({columns.label: bool})


def load_training_dataset(
    file_path: str | Path, columns: TrainingColumns = TRAINING_COLUMNS
) -> list[ReviewRecord]:
    """Read the training dataset as labeled review records."""
    df = load_training_frame(file_path, columns)
    return [
        ReviewRecord(text=text, label=bool(label))
        for text, label in zip(df[columns.text], df[columns.label], strict=True)
    ]


def existing_texts(
    training_path: str | Path, columns: TrainingColumns = TRAINING_COLUMNS
) -> set[str]:
    """Return the review texts already present in the training dataset."""
    training_path = Path(training_path)
    if not training_path.exists():
        return set()
    return set(load_training_frame(training_path, columns)[columns.text])


def _needs_leading_newline(file_path: Path) -> bool:
    with file_path.open("rb") as handle:
        handle.seek(-1, 2)
        return handle.read(1) != b"\n"


def append_training_record(
    file_path: str | Path,
    text: str,
    label: bool,
    columns: TrainingColumns = TRAINING_COLUMNS,
) -> None:
    """Append one labeled line to the training dataset.

    The header row is written first when the file is missing or empty.

    Raises:
        ValueError: If the text is not a single tab-free line
        OSError: If the file cannot be written
    """
    file_path = Path(file_path)
    record = ReviewRecord(text=text, label=label)
    line = format_record(record) + "\n"

    try:
        is_empty = not file_path.exists() or file_path.stat().st_size == 0
        if is_empty:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            line = "\t".join(columns.header) + "\n" + line
        elif _needs_leading_newline(file_path):
            line = "\n" + line

        with file_path.open("a", encoding="utf-8", newline="") as handle:
            handle.write(line)
        logger.debug("Appended training record to %s: %r", file_path, record.text)
    except OSError as e:
        logger.error("Error appending to training dataset %s: %s", file_path, e)
        raise


def load_staging_reviews(file_path: str | Path) -> list[str]:
    """Read staged review texts, one per line.

    A missing staging file reads as empty and blank lines are dropped. A
    leading byte-order mark is not part of the first review.

    Raises:
        MalformedRecordError: If the file is not valid UTF-8
    """
    file_path = Path(file_path)
    if not file_path.exists():
        logger.info("No staging file at %s", file_path)
        return []

    try:
        content = file_path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        logger.error("Staging file %s is not valid UTF-8: %s", file_path, e)
        raise MalformedRecordError(
            f"staging file {file_path} is not valid UTF-8 "
            f"({e.reason} at byte {e.start})"
        ) from e

    reviews = [line.rstrip("\r") for line in content.split("\n")]
    reviews = [review for review in reviews if review.strip()]
    logger.info("Read %d staged reviews from %s", len(reviews), file_path)
    return reviews


def overwrite_staging_reviews(file_path: str | Path, reviews: Iterable[str]) -> None:
    """Replace the staging file contents; no reviews truncates it."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    content = "".join(f"{review}\n" for review in reviews)
    try:
        file_path.write_text(content, encoding="utf-8")
    except OSError as e:
        logger.error("Error writing staging file %s: %s", file_path, e)
        raise
    logger.info("Wrote %d staged reviews to %s", content.count("\n"), file_path)
