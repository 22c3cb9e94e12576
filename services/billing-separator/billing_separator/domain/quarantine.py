"""Quarantine state machine: holds reclaimed accounts before they re-enter Available."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sandbox_schemas import format_timestamp

from ..actions import LogAction
from ..config import QUARANTINE_DURATION_HOURS, SCHEDULER_GROUP, SCHEDULER_NAME_PREFIX
from ..errors import DependencyError
from ..observability import ActionRecorder
from .account import AccountStatus
from .bypass import BypassTagChecker
from .contracts import (
    AccountStore,
    Clock,
    MoveEvent,
    Mover,
    OuLookup,
    ScheduleStore,
    SchedulerPayload,
    utcnow,
)
from .outcomes import QuarantineAction, QuarantineOutcome


def scheduler_name_for(account_id: str, created_at: datetime) -> str:
    """Return ``<prefix>-<accountId>-<epochMillis>``, unique per quarantine action."""
    epoch_ms = int(created_at.timestamp() * 1000)
    return f"{SCHEDULER_NAME_PREFIX}-{account_id}-{epoch_ms}"


class QuarantineService:
    """Intercepts CleanUp -> Available moves and redirects the account to Quarantine.

    Guards are evaluated in order and each one ends the flow with a successful
    ``SKIPPED`` outcome:

    1. the account is not tracked by the account store;
    2. the account is already in Quarantine (redelivered event);
    3. the move did not come from the CleanUp OU;
    4. the account carries the bypass tag.

    Otherwise the account is moved Available -> Quarantine and a one-shot
    schedule is created to release it after the hold. Both steps raise
    :class:`DependencyError` on failure so the queue redelivers the message.
    """

    def __init__(
        self,
        *,
        accounts: AccountStore,
        ous: OuLookup,
        mover: Mover,
        bypass: BypassTagChecker,
        schedules: ScheduleStore,
        recorder: ActionRecorder,
        scheduler_group: str = SCHEDULER_GROUP,
        hold: timedelta = timedelta(hours=QUARANTINE_DURATION_HOURS),
        clock: Clock = utcnow,
    ) -> None:
        self._accounts = accounts
        self._ous = ous
        self._mover = mover
        self._bypass = bypass
        self._schedules = schedules
        self._recorder = recorder
        self._scheduler_group = scheduler_group
        self._hold = hold
        self._clock = clock

    def quarantine(self, event: MoveEvent) -> QuarantineOutcome:
        account_id = event.account_id
        self._recorder.record(
            LogAction.QUARANTINE_START,
            account_id,
            sourceParentId=event.source_parent_id,
            eventId=event.event_id,
            eventTime=event.event_time,
        )

        account = self._accounts.get(account_id)
        if account is None:
            return self._skip(account_id, "Account not found in ISB tracking")

        if account.status is AccountStatus.QUARANTINE:
            return self._skip(
                account_id,
                "Account already in Quarantine status",
                currentStatus=account.status.value,
            )

        # resolved on every event so a recreated CleanUp OU is honoured
        clean_up_ou = self._ous.resolve(AccountStatus.CLEAN_UP)
        if event.source_parent_id != clean_up_ou.id:
            return self._skip(
                account_id,
                f"Skipping non-CleanUp move: source {event.source_parent_id} is not CleanUp OU",
                sourceParentId=event.source_parent_id,
                cleanUpOuId=clean_up_ou.id,
            )

        if self._bypass.has_bypass_tag(account_id):
            tag_removed = self._bypass.remove_bypass_tag(account_id)
            self._recorder.record(
                LogAction.QUARANTINE_BYPASS_TAG,
                account_id,
                tagKey=self._bypass.tag_key,
                tagRemoved=tag_removed,
            )
            return QuarantineOutcome.skipped(
                account_id, f"Quarantine bypassed: {self._bypass.tag_key} tag present"
            )

        quarantine_ou = self._ous.resolve(AccountStatus.QUARANTINE)
        try:
            transaction = self._mover.begin_transactional_move(
                account, AccountStatus.AVAILABLE, AccountStatus.QUARANTINE
            )
            transaction.begin()
        except Exception as exc:
            raise DependencyError(
                f"Failed to move account {account_id} from Available to Quarantine: {exc}",
                account_id,
            ) from exc

        self._recorder.record(
            LogAction.QUARANTINE_COMPLETE,
            account_id,
            fromOu=AccountStatus.AVAILABLE.value,
            toOu=AccountStatus.QUARANTINE.value,
            quarantineOuId=quarantine_ou.id,
        )
        return self._schedule_release(account_id)

    def _schedule_release(self, account_id: str) -> QuarantineOutcome:
        now = self._clock()
        scheduler_name = scheduler_name_for(account_id, now)
        fire_at = now + self._hold
        payload = SchedulerPayload(account_id=account_id, quarantined_at=now, scheduler_name=scheduler_name)

        try:
            self._schedules.create(scheduler_name, self._scheduler_group, fire_at, payload)
        except Exception as exc:
            # the account is already quarantined; surface the failure so redelivery retries
            self._recorder.record(
                LogAction.SCHEDULER_CREATE_FAILED,
                account_id,
                level=logging.ERROR,
                error=str(exc),
                schedulerName=scheduler_name,
                scheduleTime=format_timestamp(fire_at),
            )
            raise DependencyError(
                f"Scheduler creation failed for account {account_id}: {exc}", account_id
            ) from exc

        self._recorder.record(
            LogAction.SCHEDULER_CREATED,
            account_id,
            schedulerName=scheduler_name,
            scheduleTime=format_timestamp(fire_at),
            quarantineDurationHours=self._hold.total_seconds() / 3600,
        )
        return QuarantineOutcome(
            success=True,
            action=QuarantineAction.QUARANTINED,
            account_id=account_id,
            message=f"Account quarantined, release scheduled for {format_timestamp(fire_at)}",
            scheduler_name=scheduler_name,
        )

    def _skip(self, account_id: str, reason: str, **details: object) -> QuarantineOutcome:
        self._recorder.record(LogAction.QUARANTINE_SKIP, account_id, reason=reason, **details)
        return QuarantineOutcome.skipped(account_id, reason)
