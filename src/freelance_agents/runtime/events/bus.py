"""Audit events for agent runs, confirmed actions and profile updates."""

from __future__ import annotations

import logging
from typing import Any

from ..storage.interfaces import EventRepository

logger = logging.getLogger(__name__)

# agents: run summaries; actions: executed actions; notifications: dismissals;
# users: profile changes.
CHANNELS = frozenset({"agents", "actions", "notifications", "users"})


class EventBus:
    """Append audit events to the project's event stream and log them.

    There is no live fan-out; clients poll the pending feed instead.
    """

    def __init__(self, repo: EventRepository, project_id: str) -> None:
        self._repo = repo
        self._project_id = project_id

    def emit(self, *, channel: str, event_type: str, entity_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Record one audit event.

        Args:
            channel (str): One of :data:`CHANNELS`.
            event_type (str): Dotted event name, for example ``action.executed``.
            entity_id (str): Notification, user or ``domain:kind`` the event is about.
            payload (dict[str, Any]): JSON-serializable details.

        Returns:
            dict[str, Any]: Persisted event envelope.

        Raises:
            ValueError: If ``channel`` is not a known audit channel.
        """
        if channel not in CHANNELS:
            raise ValueError(f"Unknown event channel: {channel}")
        event = self._repo.append(
            channel=channel,
            event_type=event_type,
            entity_id=entity_id,
            payload=payload,
            project_id=self._project_id,
        )
        logger.debug("%s %s entity=%s", channel, event_type, entity_id)
        return event
