"""Command line interface for the review classifier."""

from __future__ import annotations

import argparse
import logging
import sys
import traceback
from enum import IntEnum

from rich.console import Console
from rich.markup import escape

from .exceptions import InvalidInputError, ReviewClassifierError
from .logging_config import setup_logging
from .ml import ModelContext, build_and_train
from .models import ReviewPaths
from .session import ConsolePrompter, Prompter, ReviewSession

logger = logging.getLogger(__name__)

MENU_PROMPT = (
    "Would you like to enter new reviews (1) or classify existing reviews (2)?"
)


class MenuChoice(IntEnum):
    """Top-level menu entries."""

    ENTER_REVIEWS = 1
    CLASSIFY_REVIEWS = 2


def build_arg_parser() -> argparse.ArgumentParser:
    """Build command line argument parser."""
    parser = argparse.ArgumentParser(
        description="Classify review sentiment and curate the training data.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Menu:
  1  enter new reviews, classify them and stage them for labeling
  2  confirm or correct staged reviews, add them to the training data, retrain
        """,
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging level (default: WARNING)",
    )
    return parser


def parse_menu_choice(answer: str) -> MenuChoice:
    """Parse the top-level menu answer.

    Raises:
        InvalidInputError: If the answer is not 1 or 2
    """
    try:
        return MenuChoice(int(answer.strip()))
    except ValueError as e:
        raise InvalidInputError(f"Invalid menu choice: {answer!r}") from e


def run(
    paths: ReviewPaths,
    context: ModelContext,
    prompter: Prompter | None = None,
    console: Console | None = None,
) -> None:
    """Ensure a model exists, ask for a mode and run it."""
    console = console or Console()
    prompter = prompter or ConsolePrompter(console)

    if not paths.model.exists():
        console.print("[cyan]No model found, training one...[/cyan]")
        build_and_train(context, paths.training_data, paths.model)
        console.print(f"[green]Model saved to {paths.model}[/green]")

    try:
        choice = parse_menu_choice(prompter.ask(MENU_PROMPT))
    except InvalidInputError as e:
        logger.info("%s", e)
        console.print("Invalid input. The program is terminated.")
        return

    session = ReviewSession(context, paths, prompter=prompter, console=console)
    if choice is MenuChoice.ENTER_REVIEWS:
        session.enter_new_reviews()
    else:
        session.classify_new_reviews()


def main() -> None:
    """Main entry point."""
    args = build_arg_parser().parse_args()
    setup_logging(level=args.log_level, verbose=args.verbose)
    console = Console()

    try:
        with ModelContext() as context:
            run(ReviewPaths.default(), context, console=console)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)
    except ReviewClassifierError as e:
        console.print(f"[red]Processing error:[/red] {escape(str(e))}")
        sys.exit(1)
    except PermissionError as e:
        console.print(f"[red]Permission error:[/red] {escape(str(e))}")
        sys.exit(1)
    except (EOFError, KeyboardInterrupt):
        console.print("\nAborted.")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        if args.verbose:
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
