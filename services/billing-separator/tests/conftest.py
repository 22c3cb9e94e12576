from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

import pytest
import structlog

from billing_separator.config import Settings
from billing_separator.domain.account import AccountRecord, AccountStatus, OuRef, Tag
from billing_separator.domain.batch import BatchProcessor
from billing_separator.domain.bypass import BypassTagChecker
from billing_separator.domain.contracts import QueueRecord, SchedulerPayload
from billing_separator.domain.quarantine import QuarantineService
from billing_separator.domain.release import ReleaseService
from billing_separator.errors import ScheduleNotFoundError
from billing_separator.observability import LOGGER_NAME, ActionRecorder

ACCOUNT_ID = "417845783913"
CLEANUP_OU_ID = "ou-2laj-x3o8lbk8"
AVAILABLE_OU_ID = "ou-2laj-oihxgbtr"
QUARANTINE_OU_ID = "ou-2laj-quarantine"
NOW = datetime(2026, 1, 28, 14, 45, tzinfo=timezone.utc)

CLOUDTRAIL_EVENT: dict[str, Any] = {
    "version": "0",
    "id": "12345678-1234-1234-1234-123456789012",
    "detail-type": "AWS API Call via CloudTrail",
    "source": "aws.organizations",
    "account": "999999999999",
    "time": "2026-01-28T14:44:00Z",
    "region": "us-east-1",
    "resources": [],
    "detail": {
        "eventVersion": "1.09",
        "userIdentity": {
            "type": "AssumedRole",
            "principalId": "AROAEXAMPLE:isb-cleanup",
            "arn": "arn:aws:sts::999999999999:assumed-role/IsbOrgMgtRole/isb-cleanup",
            "accountId": "999999999999",
        },
        "eventTime": "2026-01-28T14:44:00Z",
        "eventSource": "organizations.amazonaws.com",
        "eventName": "MoveAccount",
        "awsRegion": "us-east-1",
        "sourceIPAddress": "10.0.0.1",
        "userAgent": "aws-sdk-js/3.0.0",
        "requestParameters": {
            "accountId": ACCOUNT_ID,
            "sourceParentId": CLEANUP_OU_ID,
            "destinationParentId": AVAILABLE_OU_ID,
        },
        "responseElements": None,
        "requestID": "req-12345678",
        "eventID": "abcdef12-3456-7890-abcd-ef1234567890",
        "readOnly": False,
        "eventType": "AwsApiCall",
        "managementEvent": True,
        "recipientAccountId": "999999999999",
        "eventCategory": "Management",
    },
}


def make_move_event(
    *,
    account_id: str = ACCOUNT_ID,
    source_parent_id: str = CLEANUP_OU_ID,
    destination_parent_id: str = AVAILABLE_OU_ID,
    event_id: str | None = None,
) -> dict[str, Any]:
    event = copy.deepcopy(CLOUDTRAIL_EVENT)
    event["detail"]["requestParameters"] = {
        "accountId": account_id,
        "sourceParentId": source_parent_id,
        "destinationParentId": destination_parent_id,
    }
    if event_id is not None:
        event["detail"]["eventID"] = event_id
    return event


def make_records(*events: Any) -> list[QueueRecord]:
    return [
        QueueRecord(item_identifier=f"msg-{index}", body=event if isinstance(event, str) else json.dumps(event))
        for index, event in enumerate(events)
    ]


class FakeAccountStore:
    """In-memory account table."""

    def __init__(self) -> None:
        self.accounts: dict[str, AccountRecord] = {}
        self.calls: list[str] = []
        self.get_error: Exception | None = None

    def add(self, account_id: str, status: AccountStatus) -> None:
        self.accounts[account_id] = AccountRecord(account_id=account_id, status=status, email="test@example.com")

    def get(self, account_id: str) -> AccountRecord | None:
        self.calls.append(account_id)
        if self.get_error is not None:
            raise self.get_error
        return self.accounts.get(account_id)


class FakeOuLookup:
    def __init__(self) -> None:
        self.ous = {
            AccountStatus.CLEAN_UP: OuRef(id=CLEANUP_OU_ID, name="CleanUp"),
            AccountStatus.QUARANTINE: OuRef(id=QUARANTINE_OU_ID, name="Quarantine"),
            AccountStatus.AVAILABLE: OuRef(id=AVAILABLE_OU_ID, name="Available"),
        }
        self.calls: list[AccountStatus] = []
        self.resolve_error: Exception | None = None

    def resolve(self, name: AccountStatus) -> OuRef:
        self.calls.append(name)
        if self.resolve_error is not None:
            raise self.resolve_error
        return self.ous[name]


@dataclass
class FakeTransaction:
    mover: "FakeMover"
    account: AccountRecord
    from_ou: AccountStatus
    to_ou: AccountStatus

    def begin(self) -> None:
        if self.mover.fail_with is not None:
            raise self.mover.fail_with
        if self.account.account_id in self.mover.failing_accounts:
            raise RuntimeError(f"move rejected for {self.account.account_id}")
        self.mover.moves.append((self.account.account_id, self.from_ou, self.to_ou))
        self.mover.accounts.accounts[self.account.account_id] = replace(self.account, status=self.to_ou)

    def rollback(self) -> None:
        self.mover.accounts.accounts[self.account.account_id] = self.account


class FakeMover:
    """Moves accounts between OUs by updating the fake account store."""

    def __init__(self, accounts: FakeAccountStore) -> None:
        self.accounts = accounts
        self.moves: list[tuple[str, AccountStatus, AccountStatus]] = []
        self.requested: list[tuple[str, AccountStatus, AccountStatus]] = []
        self.fail_with: Exception | None = None
        self.failing_accounts: set[str] = set()

    def begin_transactional_move(
        self, account: AccountRecord, from_ou: AccountStatus, to_ou: AccountStatus
    ) -> FakeTransaction:
        self.requested.append((account.account_id, from_ou, to_ou))
        return FakeTransaction(self, account, from_ou, to_ou)


class FakeTagStore:
    def __init__(self) -> None:
        self.tags: dict[str, list[Tag]] = {}
        self.list_error: Exception | None = None
        self.remove_error: Exception | None = None
        self.list_calls: list[str] = []
        self.remove_calls: list[tuple[str, str]] = []

    def list_tags(self, account_id: str) -> list[Tag]:
        self.list_calls.append(account_id)
        if self.list_error is not None:
            raise self.list_error
        return list(self.tags.get(account_id, []))

    def remove_tag(self, account_id: str, key: str) -> None:
        self.remove_calls.append((account_id, key))
        if self.remove_error is not None:
            raise self.remove_error
        self.tags[account_id] = [tag for tag in self.tags.get(account_id, []) if tag.key != key]


class FakeScheduleStore:
    def __init__(self) -> None:
        self.schedules: dict[tuple[str, str], tuple[datetime, SchedulerPayload]] = {}
        self.create_calls: list[str] = []
        self.delete_calls: list[str] = []
        self.create_error: Exception | None = None
        self.delete_error: Exception | None = None

    def create(self, name: str, group: str, fire_at: datetime, payload: SchedulerPayload) -> None:
        self.create_calls.append(name)
        if self.create_error is not None:
            raise self.create_error
        self.schedules[(group, name)] = (fire_at, payload)

    def delete(self, name: str, group: str) -> None:
        self.delete_calls.append(name)
        if self.delete_error is not None:
            raise self.delete_error
        if (group, name) not in self.schedules:
            raise ScheduleNotFoundError(name)
        del self.schedules[(group, name)]


class FakeAudit:
    """Collects recorded actions in place of the Postgres audit trail."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def write_audit_event(self, *, account_id: str, action: str, metadata: dict[str, Any]) -> None:
        self.events.append((action, account_id, metadata))

    def actions(self) -> list[str]:
        return [action for action, _, _ in self.events]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        account_table_name="isb-accounts",
        sandbox_ou_id="ou-2laj-sandbox1",
        intermediate_role_arn="arn:aws:iam::123456789012:role/IntermediateRole",
        org_mgt_role_arn="arn:aws:iam::999999999999:role/OrgMgtRole",
        scheduler_role_arn="arn:aws:iam::123456789012:role/SchedulerRole",
        release_target_arn="arn:aws:lambda:us-west-2:123456789012:function:Release",
        aws_region="us-west-2",
    )


@pytest.fixture
def accounts() -> FakeAccountStore:
    store = FakeAccountStore()
    store.add(ACCOUNT_ID, AccountStatus.CLEAN_UP)
    return store


@pytest.fixture
def ous() -> FakeOuLookup:
    return FakeOuLookup()


@pytest.fixture
def mover(accounts: FakeAccountStore) -> FakeMover:
    return FakeMover(accounts)


@pytest.fixture
def tags() -> FakeTagStore:
    return FakeTagStore()


@pytest.fixture
def schedules() -> FakeScheduleStore:
    return FakeScheduleStore()


@pytest.fixture
def audit() -> FakeAudit:
    return FakeAudit()


@pytest.fixture
def recorder(audit: FakeAudit) -> ActionRecorder:
    return ActionRecorder(audit)


@pytest.fixture
def quarantine_service(accounts, ous, mover, tags, schedules, recorder) -> QuarantineService:
    return QuarantineService(
        accounts=accounts,
        ous=ous,
        mover=mover,
        bypass=BypassTagChecker(tags, recorder),
        schedules=schedules,
        recorder=recorder,
        clock=lambda: NOW,
    )


@pytest.fixture
def release_service(accounts, ous, mover, schedules, recorder) -> ReleaseService:
    return ReleaseService(
        accounts=accounts,
        ous=ous,
        mover=mover,
        schedules=schedules,
        recorder=recorder,
        clock=lambda: NOW,
    )


@pytest.fixture
def batch_processor(quarantine_service, recorder) -> BatchProcessor:
    return BatchProcessor(quarantine_service, recorder)


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any logging configuration an app lifespan installed."""
    yield
    structlog.reset_defaults()
    service_logger = logging.getLogger(LOGGER_NAME)
    service_logger.handlers = []
    service_logger.propagate = True
