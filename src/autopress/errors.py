"""Error taxonomy shared by the pipeline stages."""

from __future__ import annotations


class AutopressError(Exception):
    """Base class for pipeline errors."""


class SourceError(AutopressError):
    """A trending source was unreachable or returned something unparsable."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class BackendError(AutopressError):
    """A generation backend call failed."""


class BackendUnavailable(BackendError):
    """The generation backend is not configured."""


class GenerationError(AutopressError):
    """An article could not be assembled from a topic."""


class PersistenceError(AutopressError):
    """A store operation failed."""


class RecordValidationError(PersistenceError):
    """A record was rejected before it reached the store."""
