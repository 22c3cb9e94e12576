"""Shared schema exports."""

from .cloudtrail import (
    CloudTrailMoveAccountDetail,
    CloudTrailMoveAccountEvent,
    MoveAccountRequestParameters,
)
from .identifiers import is_valid_account_id, is_valid_ou_id, is_valid_parent_id
from .scheduler import SchedulerPayloadModel, format_timestamp

__all__ = [
    "CloudTrailMoveAccountDetail",
    "CloudTrailMoveAccountEvent",
    "MoveAccountRequestParameters",
    "SchedulerPayloadModel",
    "format_timestamp",
    "is_valid_account_id",
    "is_valid_ou_id",
    "is_valid_parent_id",
]
