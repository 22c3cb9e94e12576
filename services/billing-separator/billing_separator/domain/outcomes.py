"""Result values returned by the quarantine and release controllers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class QuarantineAction(str, Enum):
    QUARANTINED = "QUARANTINED"
    SKIPPED = "SKIPPED"
    ERROR = "ERROR"


class ReleaseAction(str, Enum):
    RELEASED = "RELEASED"
    SKIPPED = "SKIPPED"
    ERROR = "ERROR"


@dataclass(frozen=True, slots=True)
class QuarantineOutcome:
    success: bool
    action: QuarantineAction
    account_id: str
    message: str
    scheduler_name: str | None = None

    @classmethod
    def skipped(cls, account_id: str, message: str) -> "QuarantineOutcome":
        return cls(True, QuarantineAction.SKIPPED, account_id, message)


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    success: bool
    action: ReleaseAction
    account_id: str
    message: str
    scheduler_deleted: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form with camelCase keys, omitting unset optionals."""
        body: dict[str, Any] = {
            "success": self.success,
            "action": self.action.value,
            "accountId": self.account_id,
            "message": self.message,
        }
        if self.scheduler_deleted is not None:
            body["schedulerDeleted"] = self.scheduler_deleted
        return body


@dataclass(frozen=True, slots=True)
class BatchItemFailure:
    item_identifier: str

    def to_dict(self) -> dict[str, str]:
        return {"itemIdentifier": self.item_identifier}
