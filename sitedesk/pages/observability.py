"""Structured log events for registry mutations.

Usage
-----
>>> events = RegistryEventLogger()
>>> events.log_page_created(page_id="nav", actor="alice")

"""

from __future__ import annotations

import enum

from sitedesk.logging import get_logger, log_error, log_info, log_warning

logger = get_logger(__name__)


class RegistryEventType(enum.StrEnum):
    """Structured log event types for the page registry."""

    PAGE_CREATED = "registry.page.created"
    PAGE_UPDATED = "registry.page.updated"
    PAGE_DELETED = "registry.page.deleted"
    SAVE_CONFLICT = "registry.save.conflict"
    SAVE_EXHAUSTED = "registry.save.exhausted"


class RegistryEventLogger:
    """Emit registry events via femtologging."""

    def log_page_created(self, *, page_id: str, actor: str) -> None:
        """Log a committed page creation."""
        log_info(
            logger,
            "[%s] page_id=%s actor=%s",
            RegistryEventType.PAGE_CREATED,
            page_id,
            actor,
        )

    def log_page_updated(self, *, page_id: str, actor: str) -> None:
        """Log a committed page update."""
        log_info(
            logger,
            "[%s] page_id=%s actor=%s",
            RegistryEventType.PAGE_UPDATED,
            page_id,
            actor,
        )

    def log_page_deleted(self, *, page_id: str, actor: str) -> None:
        """Log a committed page deletion."""
        log_info(
            logger,
            "[%s] page_id=%s actor=%s",
            RegistryEventType.PAGE_DELETED,
            page_id,
            actor,
        )

    def log_save_conflict(self, *, path: str, attempt: int, max_attempts: int) -> None:
        """Log a save rejected because another writer committed first."""
        log_warning(
            logger,
            "[%s] path=%s attempt=%d max_attempts=%d",
            RegistryEventType.SAVE_CONFLICT,
            path,
            attempt,
            max_attempts,
        )

    def log_save_exhausted(self, *, path: str, attempts: int) -> None:
        """Log that the save loop gave up."""
        log_error(
            logger,
            "[%s] path=%s attempts=%d",
            RegistryEventType.SAVE_EXHAUSTED,
            path,
            attempts,
        )


__all__ = ["RegistryEventLogger", "RegistryEventType"]
