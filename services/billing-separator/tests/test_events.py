from __future__ import annotations

import copy
from datetime import datetime, timezone

import pytest

from billing_separator.actions import LogAction
from billing_separator.domain.events import (
    is_valid_account_id,
    is_valid_ou_id,
    is_valid_parent_id,
    parse_move_events,
    parse_raw_move_event,
)
from billing_separator.errors import EventParseError
from conftest import ACCOUNT_ID, AVAILABLE_OU_ID, CLEANUP_OU_ID, CLOUDTRAIL_EVENT, make_move_event, make_records


def test_parse_move_events_returns_events_in_order():
    records = make_records(
        make_move_event(event_id="event-1"),
        make_move_event(account_id="111122223333", event_id="event-2"),
    )

    events = parse_move_events(records)

    assert [event.event_id for event in events] == ["event-1", "event-2"]
    first = events[0]
    assert first.account_id == ACCOUNT_ID
    assert first.source_parent_id == CLEANUP_OU_ID
    assert first.destination_parent_id == AVAILABLE_OU_ID
    assert first.event_time == datetime(2026, 1, 28, 14, 44, tzinfo=timezone.utc)


def test_parse_move_events_rejects_empty_batch():
    with pytest.raises(EventParseError) as excinfo:
        parse_move_events([])

    assert str(excinfo.value) == "Queue batch contains no records"
    assert excinfo.value.action is LogAction.PARSE_ERROR
    assert excinfo.value.details == {"recordCount": 0}


def test_parse_move_events_rejects_oversized_batch():
    records = make_records(*[make_move_event() for _ in range(11)])

    with pytest.raises(EventParseError) as excinfo:
        parse_move_events(records)

    assert "11" in str(excinfo.value)
    assert "10" in str(excinfo.value)
    assert excinfo.value.details == {"recordCount": 11, "maxAllowed": 10}


def test_parse_move_events_accepts_full_batch():
    records = make_records(*[make_move_event() for _ in range(10)])

    assert len(parse_move_events(records)) == 10


def test_parse_move_events_accepts_root_source():
    records = make_records(make_move_event(source_parent_id="r-ab12"))

    (event,) = parse_move_events(records)

    assert event.source_parent_id == "r-ab12"


def test_parse_move_events_rejects_invalid_json():
    records = make_records(make_move_event(), "{not json")

    with pytest.raises(EventParseError) as excinfo:
        parse_move_events(records)

    assert str(excinfo.value).startswith("Failed to parse queue message body as JSON")
    assert excinfo.value.details == {"messageId": "msg-1"}


def test_parse_move_events_is_all_or_nothing():
    records = make_records(make_move_event(), make_move_event(account_id="12345"))

    with pytest.raises(EventParseError):
        parse_move_events(records)


def test_validation_errors_name_paths_without_values():
    bad_account = "abc123def456"
    records = make_records(make_move_event(account_id=bad_account))

    with pytest.raises(EventParseError) as excinfo:
        parse_move_events(records)

    message = str(excinfo.value)
    assert message.startswith("CloudTrail event validation failed")
    assert "detail.requestParameters.accountId" in message
    assert "Account ID must be exactly 12 digits" in message
    assert bad_account not in message
    assert excinfo.value.details["messageId"] == "msg-0"
    assert excinfo.value.details["validationPaths"] == ["detail.requestParameters.accountId"]


def test_rejects_invalid_parent_id():
    records = make_records(make_move_event(destination_parent_id="ou-bad"))

    with pytest.raises(EventParseError) as excinfo:
        parse_move_events(records)

    assert "Parent ID must be a valid OU ID" in str(excinfo.value)


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("eventName", "CreateAccount"),
        ("eventSource", "ec2.amazonaws.com"),
    ],
)
def test_rejects_other_api_calls(field, value):
    event = make_move_event()
    event["detail"][field] = value

    with pytest.raises(EventParseError):
        parse_move_events(make_records(event))


def test_rejects_other_event_sources():
    event = make_move_event()
    event["source"] = "aws.ec2"

    with pytest.raises(EventParseError) as excinfo:
        parse_move_events(make_records(event))

    assert excinfo.value.details["validationPaths"] == ["source"]


def test_parse_raw_move_event_ignores_unknown_fields():
    event = copy.deepcopy(CLOUDTRAIL_EVENT)
    event["detail"]["additionalEventData"] = {"something": "new"}

    parsed = parse_raw_move_event(event)

    assert parsed.event_id == "abcdef12-3456-7890-abcd-ef1234567890"


def test_parse_raw_move_event_rejects_missing_detail():
    event = copy.deepcopy(CLOUDTRAIL_EVENT)
    del event["detail"]

    with pytest.raises(EventParseError) as excinfo:
        parse_raw_move_event(event)

    assert "messageId" not in excinfo.value.details
    assert excinfo.value.details["validationPaths"] == ["detail"]


def test_identifier_predicates():
    assert is_valid_account_id("123456789012")
    assert not is_valid_account_id("12345678901")
    assert not is_valid_account_id("1234567890123")
    assert not is_valid_account_id("12345678901a")

    assert is_valid_ou_id("ou-2laj-x3o8lbk8")
    assert not is_valid_ou_id("ou-2laj")
    assert not is_valid_ou_id("r-2laj")

    assert is_valid_parent_id("ou-2laj-x3o8lbk8")
    assert is_valid_parent_id("r-2laj")
    assert not is_valid_parent_id("r-ab")
    assert not is_valid_parent_id("OU-2LAJ-X3O8LBK8")
