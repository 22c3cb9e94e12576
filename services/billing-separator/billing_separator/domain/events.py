"""Parsing and validation of ``MoveAccount`` notifications arriving in queue batches.

A CloudTrail event travels CloudTrail -> EventBridge -> queue, and each queue
message body holds the JSON-encoded event. Validation failures never include
field values, only the paths of the fields that failed, because the payload
carries account and caller identity data.
"""

from __future__ import annotations

import json
from typing import Any, Sequence

from pydantic import ValidationError

from sandbox_schemas import (
    CloudTrailMoveAccountEvent,
    is_valid_account_id,
    is_valid_ou_id,
    is_valid_parent_id,
)

from ..config import MAX_BATCH_SIZE
from ..errors import EventParseError
from .contracts import MoveEvent, QueueRecord

__all__ = [
    "is_valid_account_id",
    "is_valid_ou_id",
    "is_valid_parent_id",
    "parse_move_events",
    "parse_raw_move_event",
]


def parse_move_events(records: Sequence[QueueRecord]) -> list[MoveEvent]:
    """Validate a whole batch and return its events in arrival order.

    Raises
    ------
    EventParseError
        When the batch is empty, holds more than ``MAX_BATCH_SIZE`` records, or
        any record fails to decode or validate. The batch is all-or-nothing.
    """
    if not records:
        raise EventParseError("Queue batch contains no records", details={"recordCount": 0})

    if len(records) > MAX_BATCH_SIZE:
        raise EventParseError(
            f"Queue batch size {len(records)} exceeds maximum {MAX_BATCH_SIZE}",
            details={"recordCount": len(records), "maxAllowed": MAX_BATCH_SIZE},
        )

    return [_parse_record(record) for record in records]


def parse_raw_move_event(event: Any) -> MoveEvent:
    """Validate an already-decoded CloudTrail event, e.g. one delivered straight from EventBridge."""
    return _validate(event, {})


def _parse_record(record: QueueRecord) -> MoveEvent:
    try:
        raw_event = json.loads(record.body)
    except (TypeError, ValueError) as exc:
        raise EventParseError(
            f"Failed to parse queue message body as JSON: {exc}",
            details={"messageId": record.item_identifier},
        ) from exc
    return _validate(raw_event, {"messageId": record.item_identifier})


def _validate(raw_event: Any, context: dict[str, Any]) -> MoveEvent:
    try:
        event = CloudTrailMoveAccountEvent.model_validate(raw_event)
    except ValidationError as exc:
        issues = [(_path(error["loc"]), error["msg"]) for error in exc.errors()]
        summary = "; ".join(f"{path}: {msg}" for path, msg in issues)
        raise EventParseError(
            f"CloudTrail event validation failed: {summary}",
            details={**context, "validationPaths": [path for path, _ in issues]},
        ) from None

    params = event.detail.request_parameters
    return MoveEvent(
        account_id=params.account_id,
        source_parent_id=params.source_parent_id,
        destination_parent_id=params.destination_parent_id,
        event_time=event.detail.event_time,
        event_id=event.detail.event_id,
    )


def _path(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc)
