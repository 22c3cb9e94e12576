from __future__ import annotations

from enum import Enum


class LogAction(str, Enum):
    """Action tags stamped on every structured log record.

    Log metric filters match on these values, so members are never renamed.
    """

    QUARANTINE_START = "QUARANTINE_START"
    QUARANTINE_SKIP = "QUARANTINE_SKIP"
    QUARANTINE_COMPLETE = "QUARANTINE_COMPLETE"
    QUARANTINE_BYPASS_TAG = "QUARANTINE_BYPASS_TAG"
    UNQUARANTINE_START = "UNQUARANTINE_START"
    UNQUARANTINE_SKIP = "UNQUARANTINE_SKIP"
    UNQUARANTINE_COMPLETE = "UNQUARANTINE_COMPLETE"
    HANDLER_ERROR = "HANDLER_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    SCHEDULER_CREATED = "SCHEDULER_CREATED"
    SCHEDULER_CREATE_FAILED = "SCHEDULER_CREATE_FAILED"
    SCHEDULER_DELETED = "SCHEDULER_DELETED"
    SCHEDULER_DELETE_FAILED = "SCHEDULER_DELETE_FAILED"
    TAG_CHECK_FAILED = "TAG_CHECK_FAILED"
    TAG_REMOVAL_FAILED = "TAG_REMOVAL_FAILED"
