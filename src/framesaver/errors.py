"""Error taxonomy for the frame saver extension.

Graph API misuse raises :class:`GraphError` subclasses. The frame extraction
pass itself never raises for expected failures; it hands a
:class:`FrameSaverError` to an :data:`ErrorReporter` and returns.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class FrameSaverError(Exception):
    """Base class for all frame saver errors."""


class ConfigurationInitError(FrameSaverError):
    """Raised when an option cannot be registered (e.g. duplicate id)."""


class MissingUpstreamNodeError(FrameSaverError):
    """No node of the required upstream kind exists in the graph."""

    def __init__(self, node_class: str):
        self.node_class = node_class
        super().__init__(
            f"No {node_class} nodes found to extract frames from"
        )


class GraphError(FrameSaverError):
    """Base class for structural errors raised by the graph API."""


class DuplicateNodeIdError(GraphError):
    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Duplicate node ID: '{node_id}'")


class DanglingReferenceError(GraphError):
    def __init__(self, node_id: str, input_name: str | None = None):
        self.node_id = node_id
        self.input_name = input_name
        where = f" (input '{input_name}')" if input_name else ""
        super().__init__(f"Reference to non-existent node '{node_id}'{where}")


ErrorReporter = Callable[[FrameSaverError], None]


def log_error_reporter(error: FrameSaverError) -> None:
    """Default reporter: write the error to the logging channel."""
    logger.error(f"FrameSaver: {error}")
