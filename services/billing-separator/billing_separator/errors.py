"""Exception hierarchy for the billing separator."""

from __future__ import annotations

from typing import Any, Sequence

from .actions import LogAction


class BillingSeparatorError(Exception):
    """Base error for quarantine and release failures."""


class ConfigurationError(BillingSeparatorError):
    """Required settings are missing at start-up."""

    def __init__(self, message: str, missing: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.missing = list(missing)


class EventParseError(BillingSeparatorError):
    """An inbound batch is empty, oversized, or holds a malformed record.

    ``details`` carries counts, message ids and failing field paths only; raw
    field values never end up here.
    """

    def __init__(
        self,
        message: str,
        action: LogAction = LogAction.PARSE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.action = action
        self.details = details or {}


class PayloadValidationError(BillingSeparatorError):
    """A scheduler payload failed validation; retrying the same payload cannot succeed."""

    def __init__(self, message: str, paths: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.paths = list(paths)


class DependencyError(BillingSeparatorError):
    """An OU move or schedule-store call failed during a mutating action."""

    def __init__(self, message: str, account_id: str | None = None) -> None:
        super().__init__(message)
        self.account_id = account_id


class ScheduleNotFoundError(BillingSeparatorError):
    """The schedule store has no schedule under the requested name."""
