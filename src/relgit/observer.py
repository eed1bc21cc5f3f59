"""Observation hooks for the git façade.

The façade reports each operation at three points: when it is called, when it
produces a result, and when it fails. Warnings cover conditions that are not
errors but deserve attention (no tags reachable, for instance). Observers never
influence control flow.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable


@runtime_checkable
class GitObserver(Protocol):
    """Receives call/result/error/warning events from ``GitClient``."""

    def on_call(self, operation: str, detail: object = None) -> None: ...

    def on_result(self, operation: str, result: object) -> None: ...

    def on_error(self, operation: str, error: Exception) -> None: ...

    def on_warning(self, code: str, message: str) -> None: ...


class LoggingObserver:
    """Default observer: forwards events to the standard ``logging`` module."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("relgit.git")

    def on_call(self, operation: str, detail: object = None) -> None:
        if detail is None:
            self.logger.debug("%s", operation)
        else:
            self.logger.debug("%s %r", operation, detail)

    def on_result(self, operation: str, result: object) -> None:
        self.logger.debug("%s -> %r", operation, result)

    def on_error(self, operation: str, error: Exception) -> None:
        self.logger.debug("%s failed: %s", operation, error)

    def on_warning(self, code: str, message: str) -> None:
        self.logger.warning("%s: %s", code, message)
