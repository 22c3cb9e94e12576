"""FastAPI application wiring for the billing separator.

The account store and the OU mover belong to the sandbox platform and are
always injected. The tag store, OU lookup and schedule store default to the
AWS-backed adapters.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import boto3
from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.routes import router as v1_router
from .aws.organizations import OrganizationsOuLookup, OrganizationsTagStore
from .aws.scheduler import EventBridgeScheduleStore
from .aws.session import OrganizationsClientProvider, client_config
from .config import Settings, get_settings
from .domain.batch import BatchProcessor
from .domain.bypass import BypassTagChecker
from .domain.contracts import AccountStore, Mover, OuLookup, ScheduleStore, TagStore
from .domain.quarantine import QuarantineService
from .domain.release import ReleaseService
from .observability import ActionRecorder, AuditSink, configure_logging
from .repository import AuditLogRepository


def create_app(
    *,
    account_store: AccountStore,
    mover: Mover,
    settings: Settings | None = None,
    tags: TagStore | None = None,
    ous: OuLookup | None = None,
    schedules: ScheduleStore | None = None,
    audit: AuditSink | None = None,
) -> FastAPI:
    """Build the application; raises ``ConfigurationError`` when required settings are missing."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build collaborators and services for the app lifecycle."""
        configure_logging(settings.log_level)

        pool: ConnectionPool | None = None
        audit_sink = audit
        if audit_sink is None and settings.database_url:
            pool = ConnectionPool(settings.database_url, open=False)
            pool.open()
            audit_sink = AuditLogRepository(pool)
        recorder = ActionRecorder(audit_sink)

        org_clients = OrganizationsClientProvider(settings)
        tag_store = tags or OrganizationsTagStore(org_clients)
        ou_lookup = ous or OrganizationsOuLookup(org_clients, settings.sandbox_ou_id)
        schedule_store = schedules or EventBridgeScheduleStore(
            boto3.client("scheduler", region_name=settings.aws_region or None, config=client_config(settings)),
            target_arn=settings.release_target_arn,
            role_arn=settings.scheduler_role_arn,
        )

        quarantine = QuarantineService(
            accounts=account_store,
            ous=ou_lookup,
            mover=mover,
            bypass=BypassTagChecker(tag_store, recorder),
            schedules=schedule_store,
            recorder=recorder,
            scheduler_group=settings.scheduler_group,
        )
        app.state.batch_processor = BatchProcessor(quarantine, recorder)
        app.state.release_service = ReleaseService(
            accounts=account_store,
            ous=ou_lookup,
            mover=mover,
            schedules=schedule_store,
            recorder=recorder,
            scheduler_group=settings.scheduler_group,
        )
        try:
            yield
        finally:
            if pool is not None:
                pool.close()

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

    @app.get("/healthz", tags=["health"])
    def healthz() -> dict[str, str]:
        """Return a minimal readiness indicator used by orchestration systems."""
        return {"status": "ok"}

    @app.get("/metrics")
    def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(v1_router)
    return app
