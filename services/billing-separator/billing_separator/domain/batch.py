"""Partial-batch processing of inbound move notifications."""

from __future__ import annotations

import logging
from typing import Sequence

from ..actions import LogAction
from ..errors import EventParseError
from ..metrics import record_batch
from ..observability import ActionRecorder
from .contracts import QueueRecord
from .events import parse_move_events
from .outcomes import BatchItemFailure, QuarantineAction
from .quarantine import QuarantineService


class BatchProcessor:
    """Feeds a validated batch through :class:`QuarantineService` one record at a time."""

    def __init__(self, quarantine: QuarantineService, recorder: ActionRecorder) -> None:
        self._quarantine = quarantine
        self._recorder = recorder

    def process(self, records: Sequence[QueueRecord]) -> list[BatchItemFailure]:
        """Return the records that must be redelivered; an empty list means every record succeeded.

        A batch that fails validation is reported back in full. Otherwise
        records run sequentially in arrival order, so a later record for the
        same account sees whatever the earlier one changed, and a failure on
        one record does not stop the rest.
        """
        try:
            events = parse_move_events(records)
        except EventParseError as exc:
            self._recorder.record(
                exc.action,
                "BATCH",
                level=logging.ERROR,
                error=str(exc),
                messageCount=len(records),
                **exc.details,
            )
            record_batch(status="rejected", failed_items=len(records))
            return [BatchItemFailure(record.item_identifier) for record in records]

        failures: list[BatchItemFailure] = []
        for record, event in zip(records, events):
            try:
                self._quarantine.quarantine(event)
            except Exception as exc:
                self._recorder.record(
                    LogAction.HANDLER_ERROR,
                    event.account_id,
                    level=logging.ERROR,
                    exc_info=True,
                    error=str(exc),
                    result=QuarantineAction.ERROR.value,
                    messageId=record.item_identifier,
                    eventId=event.event_id,
                )
                failures.append(BatchItemFailure(record.item_identifier))

        record_batch(status="partial" if failures else "success", failed_items=len(failures))
        return failures
