"""Domain-level inputs and the collaborator contracts the controllers depend on."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from sandbox_schemas import format_timestamp

from .account import AccountRecord, AccountStatus, OuRef, Tag

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class QueueRecord:
    """One entry of an inbound batch: the queue message id and its raw body."""

    item_identifier: str
    body: str


@dataclass(frozen=True, slots=True)
class MoveEvent:
    """Validated ``MoveAccount`` notification."""

    account_id: str
    source_parent_id: str
    destination_parent_id: str
    event_time: datetime
    event_id: str


@dataclass(frozen=True, slots=True)
class SchedulerPayload:
    """Input handed to the release path when a quarantine schedule fires."""

    account_id: str
    quarantined_at: datetime
    scheduler_name: str

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form with camelCase keys."""
        return {
            "accountId": self.account_id,
            "quarantinedAt": format_timestamp(self.quarantined_at),
            "schedulerName": self.scheduler_name,
        }


class AccountStore(Protocol):
    def get(self, account_id: str) -> AccountRecord | None:
        """Return the tracked account or ``None`` when it is unknown."""


class OuLookup(Protocol):
    def resolve(self, name: AccountStatus) -> OuRef:
        """Look up the OU for a lifecycle state. Implementations must not cache."""


class Transaction(Protocol):
    def begin(self) -> None:
        """Apply the move; raises when it cannot be applied."""

    def rollback(self) -> None:
        """Undo a begun move; raises when it cannot be undone."""


class Mover(Protocol):
    def begin_transactional_move(
        self,
        account: AccountRecord,
        from_ou: AccountStatus,
        to_ou: AccountStatus,
    ) -> Transaction:
        """Prepare a move of ``account`` between lifecycle OUs."""


class TagStore(Protocol):
    def list_tags(self, account_id: str) -> list[Tag]:
        ...

    def remove_tag(self, account_id: str, key: str) -> None:
        ...


class ScheduleStore(Protocol):
    def create(self, name: str, group: str, fire_at: datetime, payload: SchedulerPayload) -> None:
        """Create a one-shot schedule that delivers ``payload`` at ``fire_at``."""

    def delete(self, name: str, group: str) -> None:
        """Delete a schedule; raises ``ScheduleNotFoundError`` when it does not exist."""
