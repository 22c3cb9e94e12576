"""Pydantic contracts for CloudTrail ``MoveAccount`` events forwarded through EventBridge."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .identifiers import is_valid_account_id, is_valid_parent_id


class MoveAccountRequestParameters(BaseModel):
    """Request parameters of the ``organizations:MoveAccount`` API call."""

    model_config = ConfigDict(populate_by_name=True)

    account_id: str = Field(..., alias="accountId")
    source_parent_id: str = Field(..., alias="sourceParentId")
    destination_parent_id: str = Field(..., alias="destinationParentId")

    @field_validator("account_id")
    @classmethod
    def _check_account_id(cls, value: str) -> str:
        if not is_valid_account_id(value):
            raise ValueError("Account ID must be exactly 12 digits")
        return value

    @field_validator("source_parent_id", "destination_parent_id")
    @classmethod
    def _check_parent_id(cls, value: str) -> str:
        if not is_valid_parent_id(value):
            raise ValueError("Parent ID must be a valid OU ID (ou-xxx-xxx) or root ID (r-xxx)")
        return value


class CloudTrailMoveAccountDetail(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_source: Literal["organizations.amazonaws.com"] = Field(..., alias="eventSource")
    event_name: Literal["MoveAccount"] = Field(..., alias="eventName")
    event_time: datetime = Field(..., alias="eventTime")
    event_id: str = Field(..., alias="eventID")
    request_parameters: MoveAccountRequestParameters = Field(..., alias="requestParameters")


class CloudTrailMoveAccountEvent(BaseModel):
    """Envelope of an ``AWS API Call via CloudTrail`` event for ``MoveAccount``.

    Unknown fields (``userIdentity``, ``resources`` and friends) are ignored.
    """

    model_config = ConfigDict(populate_by_name=True)

    version: str
    id: str
    detail_type: Literal["AWS API Call via CloudTrail"] = Field(..., alias="detail-type")
    source: Literal["aws.organizations"]
    account: str
    time: str
    region: str
    detail: CloudTrailMoveAccountDetail
