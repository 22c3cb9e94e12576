from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AccountStatus(str, Enum):
    """Lifecycle states of a sandbox account; each maps to an OU of the same name."""

    AVAILABLE = "Available"
    ACTIVE = "Active"
    CLEAN_UP = "CleanUp"
    QUARANTINE = "Quarantine"
    FROZEN = "Frozen"
    ENTRY = "Entry"
    EXIT = "Exit"


@dataclass(frozen=True, slots=True)
class AccountRecord:
    """Read-only view of a sandbox account owned by the external account store."""

    account_id: str
    status: AccountStatus
    email: str | None = None


@dataclass(frozen=True, slots=True)
class OuRef:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Tag:
    key: str
    value: str = ""
