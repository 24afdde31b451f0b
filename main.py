#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = [
#   "review-classifier",
# ]
# ///
"""Main entry point for the review classifier application."""

from review_classifier.cli import main

if __name__ == "__main__":
    main()
