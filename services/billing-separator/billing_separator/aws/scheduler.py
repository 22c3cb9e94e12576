"""EventBridge Scheduler-backed schedule store for delayed releases."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from botocore.exceptions import ClientError

from ..config import QUARANTINE_DURATION_HOURS
from ..domain.contracts import SchedulerPayload
from ..errors import ScheduleNotFoundError


def at_expression(fire_at: datetime) -> str:
    """Return a one-time ``at(yyyy-mm-ddThh:mm:ss)`` expression in UTC."""
    return f"at({fire_at.astimezone(timezone.utc):%Y-%m-%dT%H:%M:%S})"


class EventBridgeScheduleStore:
    """Creates one-shot schedules that invoke the release target with the payload as input.

    The schedule name is also the client token for create and delete.
    """

    def __init__(self, client: Any, *, target_arn: str, role_arn: str) -> None:
        self._client = client
        self._target_arn = target_arn
        self._role_arn = role_arn

    def create(self, name: str, group: str, fire_at: datetime, payload: SchedulerPayload) -> None:
        self._client.create_schedule(
            Name=name,
            GroupName=group,
            ScheduleExpression=at_expression(fire_at),
            FlexibleTimeWindow={"Mode": "OFF"},
            Target={
                "Arn": self._target_arn,
                "RoleArn": self._role_arn,
                "Input": json.dumps(payload.to_dict()),
            },
            Description=(
                f"Release account {payload.account_id} from quarantine after "
                f"{QUARANTINE_DURATION_HOURS} hours"
            ),
            ClientToken=name,
        )

    def delete(self, name: str, group: str) -> None:
        try:
            self._client.delete_schedule(Name=name, GroupName=group, ClientToken=name)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "ResourceNotFoundException":
                raise ScheduleNotFoundError(f"Schedule {group}/{name} not found") from exc
            raise
