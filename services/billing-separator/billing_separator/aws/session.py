"""Role-chained credentials for calling AWS Organizations in the management account."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Callable

import boto3
import structlog
from botocore.config import Config

from ..config import Settings
from ..domain.contracts import Clock, utcnow

logger = structlog.get_logger(__name__)

SESSION_NAME = "isb-billing-sep"
ORGANIZATIONS_REGION = "us-east-1"
REFRESH_MARGIN = timedelta(minutes=5)


def client_config(settings: Settings) -> Config:
    return Config(user_agent_extra=settings.user_agent_extra, retries={"mode": "standard"})


class OrganizationsClientProvider:
    """Hands out an Organizations client on credentials assumed through the intermediate role.

    The hub account assumes ``INTERMEDIATE_ROLE_ARN``, which in turn assumes
    ``ORG_MGT_ROLE_ARN`` in the organization management account. The client is
    rebuilt shortly before the chained credentials expire.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        session_factory: Callable[..., Any] = boto3.session.Session,
        clock: Clock = utcnow,
    ) -> None:
        self._settings = settings
        self._session_factory = session_factory
        self._clock = clock
        self._client: Any = None
        self._expires_at: datetime | None = None

    def __call__(self) -> Any:
        if self._client is None or self._expires_at is None or self._clock() >= self._expires_at - REFRESH_MARGIN:
            self._client = self._build_client()
        return self._client

    def _build_client(self) -> Any:
        config = client_config(self._settings)
        session = self._session_factory(region_name=self._settings.aws_region or None)
        for role_arn in (self._settings.intermediate_role_arn, self._settings.org_mgt_role_arn):
            credentials = session.client("sts", config=config).assume_role(
                RoleArn=role_arn,
                RoleSessionName=SESSION_NAME,
            )["Credentials"]
            session = self._session_factory(
                aws_access_key_id=credentials["AccessKeyId"],
                aws_secret_access_key=credentials["SecretAccessKey"],
                aws_session_token=credentials["SessionToken"],
                region_name=self._settings.aws_region or None,
            )
            self._expires_at = credentials["Expiration"]
        logger.info("assumed organization management role", role_arn=self._settings.org_mgt_role_arn)
        return session.client("organizations", region_name=ORGANIZATIONS_REGION, config=config)
