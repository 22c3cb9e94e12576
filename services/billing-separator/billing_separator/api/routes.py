"""HTTP route definitions for the quarantine and release paths."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from pydantic import BaseModel, ConfigDict, Field

from ..domain.batch import BatchProcessor
from ..domain.contracts import QueueRecord
from ..domain.outcomes import ReleaseAction, ReleaseOutcome
from ..domain.release import ReleaseService
from ..errors import DependencyError, PayloadValidationError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/v1")


class QueueMessage(BaseModel):
    """One queue message as delivered by the event source mapping."""

    model_config = ConfigDict(populate_by_name=True)

    message_id: str = Field(..., alias="messageId")
    body: str


class QueueBatchRequest(BaseModel):
    """Batch of queue messages carrying CloudTrail ``MoveAccount`` events."""

    model_config = ConfigDict(populate_by_name=True)

    records: list[QueueMessage] = Field(default_factory=list, alias="Records")


class BatchItemFailureResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    item_identifier: str = Field(..., alias="itemIdentifier")


class BatchResponse(BaseModel):
    """Partial batch response: only the listed messages are redelivered."""

    model_config = ConfigDict(populate_by_name=True)

    batch_item_failures: list[BatchItemFailureResponse] = Field(
        default_factory=list, alias="batchItemFailures"
    )


class ReleaseResponse(BaseModel):
    """Serialised representation of a `ReleaseOutcome`."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    action: ReleaseAction
    account_id: str = Field(..., alias="accountId")
    message: str
    scheduler_deleted: bool | None = Field(default=None, alias="schedulerDeleted")

    @classmethod
    def from_domain(cls, outcome: ReleaseOutcome) -> "ReleaseResponse":
        """Build a response model from the domain outcome."""
        return cls(
            success=outcome.success,
            action=outcome.action,
            account_id=outcome.account_id,
            message=outcome.message,
            scheduler_deleted=outcome.scheduler_deleted,
        )


def get_batch_processor(request: Request) -> BatchProcessor:
    """Resolve the `BatchProcessor` stored on the FastAPI application state."""
    processor: BatchProcessor = request.app.state.batch_processor
    return processor


def get_release_service(request: Request) -> ReleaseService:
    service: ReleaseService = request.app.state.release_service
    return service


@router.post("/quarantine/batches", response_model=BatchResponse)
def process_move_events(
    payload: QueueBatchRequest,
    processor: BatchProcessor = Depends(get_batch_processor),
) -> BatchResponse:
    """Quarantine accounts named in a batch of move events and report the messages to redeliver."""
    records = [QueueRecord(item_identifier=message.message_id, body=message.body) for message in payload.records]
    failures = processor.process(records)
    return BatchResponse(
        batch_item_failures=[BatchItemFailureResponse(item_identifier=f.item_identifier) for f in failures]
    )


@router.post("/releases", response_model=ReleaseResponse, response_model_exclude_none=True)
def release_account(
    payload: Any = Body(...),
    service: ReleaseService = Depends(get_release_service),
) -> ReleaseResponse:
    """Release an account whose quarantine schedule fired."""
    try:
        outcome = service.release(payload)
    except PayloadValidationError as exc:
        # retrying an invalid payload cannot succeed
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except DependencyError as exc:
        logger.warning("release failed, leaving it to the caller to retry", error=str(exc))
        failed = ReleaseOutcome(
            success=False,
            action=ReleaseAction.ERROR,
            account_id=exc.account_id or "",
            message=str(exc),
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=failed.to_dict()
        ) from exc
    return ReleaseResponse.from_domain(outcome)
