"""Structured action logging for the quarantine and release paths."""

from __future__ import annotations

import logging
import sys
from typing import Any, Protocol

import structlog

from .actions import LogAction
from .metrics import record_action

LOGGER_NAME = "billing_separator"


class AuditSink(Protocol):
    def write_audit_event(self, *, account_id: str, action: str, metadata: dict[str, Any]) -> None:
        ...


def configure_logging(level: str = "INFO") -> None:
    """Emit the service loggers to stdout as one JSON object per line.

    Action records carry ``action``, ``accountId`` and their details at the top
    level so log metric filters can match on them.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    service_logger = logging.getLogger(LOGGER_NAME)
    service_logger.handlers = [handler]
    service_logger.setLevel(level)
    service_logger.propagate = False

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(default=str),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


class ActionRecorder:
    """Record an action tag against an account in logs, metrics and the audit trail."""

    def __init__(self, audit: AuditSink | None = None, logger: Any = None) -> None:
        self._audit = audit
        self._logger = logger or structlog.get_logger(f"{LOGGER_NAME}.actions")

    def record(
        self,
        action: LogAction,
        account_id: str,
        *,
        level: int = logging.INFO,
        exc_info: bool = False,
        **details: Any,
    ) -> None:
        log = self._logger.bind(action=action.value, accountId=account_id)
        if exc_info:
            log.log(level, action.value, exc_info=True, **details)
        else:
            log.log(level, action.value, **details)
        record_action(action)
        if self._audit is None:
            return
        try:
            self._audit.write_audit_event(account_id=account_id, action=action.value, metadata=details)
        except Exception as exc:
            # the audit trail never changes an outcome
            log.warning("audit_write_failed", error=str(exc))
