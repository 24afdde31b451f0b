"""Explicit runtime context for model construction."""

from __future__ import annotations

import logging
from types import TracebackType

from sklearn.pipeline import Pipeline

from ..exceptions import ReviewClassifierError
from ..models import RANDOM_SEED, PipelineSettings
from .pipeline import build_pipeline

logger = logging.getLogger(__name__)


class ModelContext:
    """Holds the settings every pipeline built during one run shares.

    Create one per program run and pass it to the lifecycle functions;
    use it as a context manager so it is closed when the run ends.
    """

    def __init__(
        self,
        seed: int = RANDOM_SEED,
        settings: PipelineSettings | None = None,
    ):
        self.seed = seed
        self.settings = settings or PipelineSettings()
        self._closed = False
        logger.debug("Created model context (seed=%d)", seed)

    @property
    def closed(self) -> bool:
        return self._closed

    def create_pipeline(self) -> Pipeline:
        """Build a fresh, unfitted pipeline.

        Raises:
            ReviewClassifierError: If the context has been closed
        """
        if self._closed:
            raise ReviewClassifierError("Model context is closed")
        return build_pipeline(self.settings, self.seed)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            logger.debug("Closed model context")

    def __enter__(self) -> ModelContext:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
