"""Identifier formats used by AWS Organizations."""

from __future__ import annotations

import re

ACCOUNT_ID_PATTERN = re.compile(r"^[0-9]{12}$")
OU_ID_PATTERN = re.compile(r"^ou-[a-z0-9]{4,32}-[a-z0-9]{8,32}$")
ROOT_ID_PATTERN = re.compile(r"^r-[a-z0-9]{4,32}$")


def is_valid_account_id(account_id: str) -> bool:
    return bool(ACCOUNT_ID_PATTERN.fullmatch(account_id))


def is_valid_ou_id(ou_id: str) -> bool:
    return bool(OU_ID_PATTERN.fullmatch(ou_id))


def is_valid_parent_id(parent_id: str) -> bool:
    """Return ``True`` for an OU id (``ou-xxxx-xxxxxxxx``) or a root id (``r-xxxx``)."""
    return bool(OU_ID_PATTERN.fullmatch(parent_id) or ROOT_ID_PATTERN.fullmatch(parent_id))
