from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Iterable, Mapping

from .errors import ConfigurationError

QUARANTINE_DURATION_HOURS = 72
MAX_BATCH_SIZE = 10
BYPASS_QUARANTINE_TAG_KEY = "do-not-separate"
SCHEDULER_GROUP = "isb-billing-separator"
SCHEDULER_NAME_PREFIX = "isb-billing-sep-unquarantine"
USER_AGENT_SUFFIX = "isb-billing-separator/1.0.0"


class EnvKey(str, Enum):
    """Environment variables read by the service."""

    ACCOUNT_TABLE_NAME = "ACCOUNT_TABLE_NAME"
    SANDBOX_OU_ID = "SANDBOX_OU_ID"
    INTERMEDIATE_ROLE_ARN = "INTERMEDIATE_ROLE_ARN"
    ORG_MGT_ROLE_ARN = "ORG_MGT_ROLE_ARN"
    SCHEDULER_ROLE_ARN = "SCHEDULER_ROLE_ARN"
    RELEASE_TARGET_ARN = "RELEASE_TARGET_ARN"
    SCHEDULER_GROUP = "SCHEDULER_GROUP"
    USER_AGENT_EXTRA = "USER_AGENT_EXTRA"
    POSTGRES_URL = "POSTGRES_URL"
    AWS_REGION = "AWS_REGION"
    LOG_LEVEL = "LOG_LEVEL"


RELEASE_REQUIRED_KEYS: tuple[EnvKey, ...] = (
    EnvKey.ACCOUNT_TABLE_NAME,
    EnvKey.SANDBOX_OU_ID,
    EnvKey.INTERMEDIATE_ROLE_ARN,
    EnvKey.ORG_MGT_ROLE_ARN,
)

QUARANTINE_REQUIRED_KEYS: tuple[EnvKey, ...] = RELEASE_REQUIRED_KEYS + (
    EnvKey.SCHEDULER_ROLE_ARN,
    EnvKey.RELEASE_TARGET_ARN,
)


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the quarantine and release paths."""

    account_table_name: str
    sandbox_ou_id: str
    intermediate_role_arn: str
    org_mgt_role_arn: str
    scheduler_role_arn: str = ""
    release_target_arn: str = ""
    scheduler_group: str = SCHEDULER_GROUP
    user_agent_extra: str = USER_AGENT_SUFFIX
    database_url: str = ""
    aws_region: str = ""
    log_level: str = "INFO"
    app_name: str = "billing-separator"
    version: str = "0.1.0"

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        required: Iterable[EnvKey] = QUARANTINE_REQUIRED_KEYS,
    ) -> "Settings":
        """Build settings from ``environ`` (defaults to ``os.environ``).

        Raises
        ------
        ConfigurationError
            When any of the ``required`` keys is unset or empty. Every missing
            key is named so a single deploy fixes them all.
        """
        env = os.environ if environ is None else environ
        missing = [key.value for key in required if not env.get(key.value)]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}",
                missing=missing,
            )

        def read(key: EnvKey, default: str = "") -> str:
            return env.get(key.value) or default

        return cls(
            account_table_name=read(EnvKey.ACCOUNT_TABLE_NAME),
            sandbox_ou_id=read(EnvKey.SANDBOX_OU_ID),
            intermediate_role_arn=read(EnvKey.INTERMEDIATE_ROLE_ARN),
            org_mgt_role_arn=read(EnvKey.ORG_MGT_ROLE_ARN),
            scheduler_role_arn=read(EnvKey.SCHEDULER_ROLE_ARN),
            release_target_arn=read(EnvKey.RELEASE_TARGET_ARN),
            scheduler_group=read(EnvKey.SCHEDULER_GROUP, SCHEDULER_GROUP),
            user_agent_extra=read(EnvKey.USER_AGENT_EXTRA, USER_AGENT_SUFFIX),
            database_url=read(EnvKey.POSTGRES_URL),
            aws_region=read(EnvKey.AWS_REGION),
            log_level=read(EnvKey.LOG_LEVEL, "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached Settings instance for the running process."""
    return Settings.from_env()
