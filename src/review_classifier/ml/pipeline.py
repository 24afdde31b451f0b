"""Text classification pipeline construction."""

from __future__ import annotations

from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.linear_model import LogisticRegression
from sklearn.pipeline import FeatureUnion, Pipeline

from ..models import RANDOM_SEED, PipelineSettings


def build_features(settings: PipelineSettings) -> FeatureUnion:
    """Combine word- and character-level TF-IDF features.

    Character n-grams keep misspellings and short reviews informative
    when the word vocabulary is small.
    """
    return FeatureUnion(
        [
            (
                "word",
                TfidfVectorizer(
                    ngram_range=settings.word_ngram_range,
                    max_features=settings.max_word_features,
                    sublinear_tf=True,
                    strip_accents="unicode",
                ),
            ),
            (
                "char",
                TfidfVectorizer(
                    analyzer="char_wb",
                    ngram_range=settings.char_ngram_range,
                    max_features=settings.max_char_features,
                    sublinear_tf=True,
                ),
            ),
        ]
    )


def build_pipeline(
    settings: PipelineSettings | None = None, seed: int = RANDOM_SEED
) -> Pipeline:
    """Build the unfitted feature extraction + logistic regression pipeline.

    Args:
        settings: Hyper-parameters (default: PipelineSettings())
        seed: Random state for the classifier

    Returns:
        Unfitted sklearn Pipeline with ``features`` and ``classifier`` steps
    """
    settings = settings or PipelineSettings()
    return Pipeline(
        steps=[
            ("features", build_features(settings)),
            (
                "classifier",
                LogisticRegression(
                    C=settings.regularization,
                    max_iter=settings.max_iter,
                    random_state=seed,
                ),
            ),
        ]
    )
