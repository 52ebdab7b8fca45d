"""Notification ledger writes: deduplicated inserts and status reports."""

from __future__ import annotations

from typing import Any, Optional

from ..domain.models import Notification
from ..storage.interfaces import NotificationRepository

STATUS_REPORT_KIND = "status_report"


class NotificationLedger:
    """Write side of the notification ledger.

    :meth:`create_if_absent` is the only dedup mechanism in the system: the
    repository performs the unread-duplicate check and the insert under one
    lock, so two concurrent runs cannot both insert the same event.
    """

    def __init__(self, repo: NotificationRepository) -> None:
        """Initialize the NotificationLedger.

        Args:
            repo (NotificationRepository): Backing ledger storage.
        """
        self._repo = repo

    def create_if_absent(
        self,
        recipient_id: str,
        event_kind: str,
        message: str,
        metadata: dict[str, Any],
        *,
        domain: Optional[str] = None,
    ) -> tuple[Notification, bool]:
        """Insert an unread entry unless one with the same dedup identity is pending.

        Args:
            recipient_id (str): User the entry is addressed to.
            event_kind (str): Event kind, for example ``invoice_nudge``.
            message (str): Human-readable summary.
            metadata (dict[str, Any]): Action parameters; must carry ``uniqueKey``.
            domain (Optional[str]): Originating agent domain.

        Returns:
            tuple[Notification, bool]: The pending entry and whether it was created now.

        Raises:
            ValueError: If ``metadata`` has no ``uniqueKey``.
        """
        if not metadata.get("uniqueKey"):
            raise ValueError("metadata.uniqueKey is required for deduplicated notifications")
        candidate = Notification(
            recipient_id=recipient_id,
            domain=domain,
            event_kind=event_kind,
            message=message,
            metadata=dict(metadata),
        )
        return self._repo.insert_if_absent(candidate)

    def append(
        self,
        recipient_id: str,
        event_kind: str,
        message: str,
        metadata: Optional[dict[str, Any]] = None,
        *,
        domain: Optional[str] = None,
    ) -> Notification:
        """Insert an entry unconditionally."""
        return self._repo.append(
            Notification(
                recipient_id=recipient_id,
                domain=domain,
                event_kind=event_kind,
                message=message,
                metadata=dict(metadata or {}),
            )
        )

    def mark_read(self, notification_id: str, recipient_id: Optional[str] = None) -> Optional[Notification]:
        return self._repo.mark_read(notification_id, recipient_id)


class StatusReporter:
    """Record a low-priority "nothing to do" entry for a domain."""

    def __init__(self, ledger: NotificationLedger) -> None:
        self._ledger = ledger

    def report(self, recipient_id: str, domain: str, message: str) -> Notification:
        # Status reports are never deduplicated.
        return self._ledger.append(
            recipient_id,
            STATUS_REPORT_KIND,
            message,
            {"priority": "low"},
            domain=domain,
        )
