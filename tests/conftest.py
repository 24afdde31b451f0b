"""Shared fixtures for review classifier tests."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console

from review_classifier.ml import ModelContext, build_and_train
from review_classifier.models import ReviewPaths

TRAINING_ROWS = [
    ("great product, works perfectly", "True"),
    ("love it, excellent quality", "True"),
    ("fantastic value and fast delivery", "True"),
    ("very happy with this purchase", "True"),
    ("terrible, broke after a day", "False"),
    ("awful quality and waste of money", "False"),
    ("does not work, very disappointed", "False"),
    ("worst purchase ever", "False"),
]


class ScriptedPrompter:
    """Answers prompts from a fixed list and remembers what was asked."""

    def __init__(self, answers: list[str]):
        self.answers = list(answers)
        self.prompts: list[str] = []

    def ask(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError(f"No scripted answer for prompt: {prompt}")
        return self.answers.pop(0)


def write_training_file(path: Path, rows: list[tuple[str, str]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = ["ReviewText\tLabel", *(f"{text}\t{label}" for text, label in rows)]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def console_text(console: Console) -> str:
    return console.file.getvalue()


@pytest.fixture
def paths(tmp_path):
    """Review paths below a temporary project root."""
    return ReviewPaths.default(tmp_path)


@pytest.fixture
def training_file(paths):
    """A small training dataset with both labels."""
    return write_training_file(paths.training_data, TRAINING_ROWS)


@pytest.fixture
def context():
    with ModelContext() as ctx:
        yield ctx


@pytest.fixture
def trained_paths(paths, training_file, context):
    """Review paths with a model already trained on the training dataset."""
    build_and_train(context, paths.training_data, paths.model)
    return paths


@pytest.fixture
def console():
    """A console that writes plain text into a buffer."""
    return Console(file=io.StringIO(), width=300, color_system=None)
