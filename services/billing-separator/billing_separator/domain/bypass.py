"""Operator opt-out from the quarantine hold via an account tag."""

from __future__ import annotations

import logging

from ..actions import LogAction
from ..config import BYPASS_QUARANTINE_TAG_KEY
from ..observability import ActionRecorder
from .contracts import TagStore


class BypassTagChecker:
    """Detects and clears the ``do-not-separate`` tag.

    Both operations swallow tag-store failures: an unreadable tag counts as
    absent so the hold still applies, and a tag that cannot be removed still
    lets the current skip go ahead.
    """

    def __init__(
        self,
        tags: TagStore,
        recorder: ActionRecorder,
        tag_key: str = BYPASS_QUARANTINE_TAG_KEY,
    ) -> None:
        self._tags = tags
        self._recorder = recorder
        self._tag_key = tag_key

    @property
    def tag_key(self) -> str:
        return self._tag_key

    def has_bypass_tag(self, account_id: str) -> bool:
        """Return ``True`` when the tag is present; ``False`` when absent or unreadable."""
        try:
            tags = self._tags.list_tags(account_id)
        except Exception as exc:
            self._recorder.record(
                LogAction.TAG_CHECK_FAILED,
                account_id,
                level=logging.WARNING,
                error=str(exc),
                tagKey=self._tag_key,
                note="Proceeding with quarantine",
            )
            return False
        return any(tag.key == self._tag_key for tag in tags)

    def remove_bypass_tag(self, account_id: str) -> bool:
        """Remove the tag so the next cycle is held again; return whether removal succeeded."""
        try:
            self._tags.remove_tag(account_id, self._tag_key)
        except Exception as exc:
            self._recorder.record(
                LogAction.TAG_REMOVAL_FAILED,
                account_id,
                level=logging.WARNING,
                error=str(exc),
                tagKey=self._tag_key,
            )
            return False
        return True
