"""Payload exchanged between the quarantine and release paths via EventBridge Scheduler."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .identifiers import is_valid_account_id

_ISO_DATETIME = re.compile(
    r"^[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}(\.[0-9]+)?(Z|[+-][0-9]{2}:[0-9]{2})$"
)


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


class SchedulerPayloadModel(BaseModel):
    """Input delivered to the release path when a quarantine schedule fires."""

    model_config = ConfigDict(populate_by_name=True)

    account_id: str = Field(..., alias="accountId")
    quarantined_at: datetime = Field(..., alias="quarantinedAt")
    scheduler_name: str = Field(..., alias="schedulerName")

    @field_validator("account_id")
    @classmethod
    def _check_account_id(cls, value: str) -> str:
        if not is_valid_account_id(value):
            raise ValueError("accountId must be 12 digits")
        return value

    @field_validator("quarantined_at", mode="before")
    @classmethod
    def _check_quarantined_at(cls, value: object) -> object:
        if not isinstance(value, str) or not _ISO_DATETIME.fullmatch(value):
            raise ValueError("quarantinedAt must be ISO 8601 datetime")
        return value

    @field_validator("scheduler_name")
    @classmethod
    def _check_scheduler_name(cls, value: str) -> str:
        if not value:
            raise ValueError("schedulerName is required")
        return value

    @field_serializer("quarantined_at")
    def _serialize_quarantined_at(self, value: datetime) -> str:
        return format_timestamp(value)
