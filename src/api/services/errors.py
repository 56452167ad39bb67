# This file defines the error taxonomy raised by the entity store.
# It exists so client faults (bad input, bad references) stay distinct from system faults.
# Each error carries the HTTP status and error code the API layer reports.
# Persistence failures always use a fixed message so database detail never leaks to callers.

from __future__ import annotations

from typing import Any


class StoreError(Exception):
    """Base error for entity store operations."""

    status_code: int = 500
    error_code: str = "DP-500"

    def __init__(self, message: str, *, details: Any | None = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(StoreError):
    """Missing or malformed mandatory input."""

    status_code = 422
    error_code = "DP-422"


class NotFoundError(StoreError):
    """Referenced entity or tag does not exist."""

    status_code = 404
    error_code = "DP-404"


class PersistenceError(StoreError):
    """A transactional write failed and was rolled back."""

    status_code = 500
    error_code = "DP-500"

    DEFAULT_MESSAGE = "A technical exception has occurred, please contact your system administrator."

    def __init__(self, message: str = DEFAULT_MESSAGE) -> None:
        super().__init__(message)
