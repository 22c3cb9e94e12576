"""Release state machine: returns quarantined accounts to Available when their hold expires."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from sandbox_schemas import SchedulerPayloadModel, format_timestamp

from ..actions import LogAction
from ..config import SCHEDULER_GROUP
from ..errors import DependencyError, PayloadValidationError, ScheduleNotFoundError
from ..observability import ActionRecorder
from .account import AccountStatus
from .contracts import AccountStore, Clock, Mover, OuLookup, ScheduleStore, SchedulerPayload, utcnow
from .outcomes import ReleaseAction, ReleaseOutcome


def parse_scheduler_payload(raw: Any) -> SchedulerPayload:
    """Validate the payload a schedule delivered.

    Raises
    ------
    PayloadValidationError
        Listing the failing field paths; values are never echoed back.
    """
    try:
        model = SchedulerPayloadModel.model_validate(raw)
    except ValidationError as exc:
        issues = [(".".join(str(part) for part in error["loc"]), error["msg"]) for error in exc.errors()]
        summary = ", ".join(f"{path}: {msg}" for path, msg in issues)
        raise PayloadValidationError(
            f"Invalid scheduler payload: {summary}", [path for path, _ in issues]
        ) from None
    return SchedulerPayload(
        account_id=model.account_id,
        quarantined_at=model.quarantined_at,
        scheduler_name=model.scheduler_name,
    )


class ReleaseService:
    """Moves an account Quarantine -> Available and deletes the schedule that fired.

    Every path that gets past payload validation deletes the schedule, including
    the skips, so a schedule never fires twice for the same cycle. A schedule
    that is already gone counts as deleted.
    """

    def __init__(
        self,
        *,
        accounts: AccountStore,
        ous: OuLookup,
        mover: Mover,
        schedules: ScheduleStore,
        recorder: ActionRecorder,
        scheduler_group: str = SCHEDULER_GROUP,
        clock: Clock = utcnow,
    ) -> None:
        self._accounts = accounts
        self._ous = ous
        self._mover = mover
        self._schedules = schedules
        self._recorder = recorder
        self._scheduler_group = scheduler_group
        self._clock = clock

    def release(self, raw_payload: Any) -> ReleaseOutcome:
        payload = parse_scheduler_payload(raw_payload)
        self._recorder.record(
            LogAction.UNQUARANTINE_START,
            payload.account_id,
            quarantinedAt=format_timestamp(payload.quarantined_at),
            schedulerName=payload.scheduler_name,
        )
        try:
            return self._release(payload)
        except Exception as exc:
            self._recorder.record(
                LogAction.HANDLER_ERROR,
                payload.account_id,
                level=logging.ERROR,
                exc_info=True,
                error=str(exc),
                schedulerName=payload.scheduler_name,
            )
            raise

    def _release(self, payload: SchedulerPayload) -> ReleaseOutcome:
        account_id = payload.account_id
        try:
            account = self._accounts.get(account_id)
        except Exception as exc:
            raise DependencyError(f"Account lookup failed for {account_id}: {exc}", account_id) from exc

        if account is None:
            return self._skip(payload, "Account not found in ISB tracking")

        if account.status is AccountStatus.AVAILABLE:
            return self._skip(
                payload,
                "Account already in Available status",
                currentStatus=account.status.value,
            )

        if account.status is not AccountStatus.QUARANTINE:
            return self._skip(
                payload,
                f"Account not in expected state: status is {account.status.value}, expected Quarantine",
                currentStatus=account.status.value,
                expectedStatus=AccountStatus.QUARANTINE.value,
            )

        try:
            available_ou = self._ous.resolve(AccountStatus.AVAILABLE)
            transaction = self._mover.begin_transactional_move(
                account, AccountStatus.QUARANTINE, AccountStatus.AVAILABLE
            )
            transaction.begin()
        except Exception as exc:
            raise DependencyError(
                f"Failed to move account {account_id} from Quarantine to Available: {exc}",
                account_id,
            ) from exc

        self._recorder.record(
            LogAction.UNQUARANTINE_COMPLETE,
            account_id,
            fromOu=AccountStatus.QUARANTINE.value,
            toOu=AccountStatus.AVAILABLE.value,
            availableOuId=available_ou.id,
            quarantinedAt=format_timestamp(payload.quarantined_at),
            quarantineDuration=self._held_for(payload.quarantined_at),
        )

        self._delete_schedule(payload)
        return ReleaseOutcome(
            success=True,
            action=ReleaseAction.RELEASED,
            account_id=account_id,
            message="Account released from quarantine to Available OU",
            scheduler_deleted=True,
        )

    def _skip(self, payload: SchedulerPayload, reason: str, **details: object) -> ReleaseOutcome:
        self._recorder.record(LogAction.UNQUARANTINE_SKIP, payload.account_id, reason=reason, **details)
        self._delete_schedule(payload)
        return ReleaseOutcome(
            success=True,
            action=ReleaseAction.SKIPPED,
            account_id=payload.account_id,
            message=reason,
            scheduler_deleted=True,
        )

    def _delete_schedule(self, payload: SchedulerPayload) -> None:
        name = payload.scheduler_name
        try:
            self._schedules.delete(name, self._scheduler_group)
        except ScheduleNotFoundError:
            self._recorder.record(
                LogAction.SCHEDULER_DELETED,
                payload.account_id,
                schedulerName=name,
                schedulerGroup=self._scheduler_group,
                note="Scheduler already deleted (idempotent)",
            )
            return
        except Exception as exc:
            self._recorder.record(
                LogAction.SCHEDULER_DELETE_FAILED,
                payload.account_id,
                level=logging.ERROR,
                error=str(exc),
                schedulerName=name,
            )
            raise DependencyError(f"Scheduler deletion failed for {name}: {exc}", payload.account_id) from exc

        self._recorder.record(
            LogAction.SCHEDULER_DELETED,
            payload.account_id,
            schedulerName=name,
            schedulerGroup=self._scheduler_group,
        )

    def _held_for(self, quarantined_at: datetime) -> str:
        hours = (self._clock() - quarantined_at).total_seconds() / 3600
        return f"{hours:.2f} hours"
