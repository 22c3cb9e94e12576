"""Prometheus metrics for quarantine and release processing."""

from __future__ import annotations

from typing import Literal

from prometheus_client import Counter

from .actions import LogAction

_action_counter = Counter(
    "billing_separator_actions_total",
    "Structured actions recorded, by action tag.",
    ["action"],
)
_batch_counter = Counter(
    "billing_separator_batches_total",
    "Inbound move-event batches processed, by status.",
    ["status"],
)
_batch_item_failures = Counter(
    "billing_separator_batch_item_failures_total",
    "Queue records reported back for redelivery.",
)


def record_action(action: LogAction) -> None:
    """Increment the per-action counter."""
    _action_counter.labels(action=action.value).inc()


def record_batch(*, status: Literal["success", "partial", "rejected"], failed_items: int) -> None:
    """Capture the outcome of one inbound batch."""
    _batch_counter.labels(status=status).inc()
    if failed_items:
        _batch_item_failures.inc(failed_items)
