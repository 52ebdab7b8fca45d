"""Read side of the ledger: the user's pending actions feed."""

from __future__ import annotations

from typing import Any, Optional

from ..domain.models import Notification
from ..storage.interfaces import NotificationRepository

DOMAIN_BY_EVENT_KIND: dict[str, str] = {
    "job_match": "Hunter",
    "invoice_nudge": "Collections",
    "smart_split": "CFO",
    "schedule_alert": "Productivity",
    "tax_review": "Tax",
}


def resolve_domain(domain: Optional[str], event_kind: str) -> str:
    """Return the explicit domain, else the one implied by ``event_kind``."""
    if domain:
        return domain
    return DOMAIN_BY_EVENT_KIND.get(event_kind, "System")


def _to_pending_item(item: Notification) -> dict[str, Any]:
    priority = str(item.metadata.get("priority") or "normal")
    return {
        "id": item.id,
        "domain": resolve_domain(item.domain, item.event_kind),
        "eventKind": item.event_kind,
        "message": item.message,
        "timestamp": item.created_at,
        "payload": item.metadata,
        "priority": priority,
        "status": "warning" if priority == "high" else "success",
    }


class PendingActionsReader:
    """List unread ledger entries in the shape the dashboard feed expects."""

    def __init__(self, repo: NotificationRepository) -> None:
        self._repo = repo

    def list(self, recipient_id: str) -> list[dict[str, Any]]:
        """Return unread entries for ``recipient_id``, newest first.

        Args:
            recipient_id (str): User whose feed is requested.

        Returns:
            list[dict[str, Any]]: Feed items with ``id``, ``domain``,
            ``eventKind``, ``message``, ``timestamp``, ``payload``,
            ``priority`` and ``status`` keys.
        """
        return [_to_pending_item(item) for item in self._repo.for_recipient(recipient_id, unread_only=True)]
