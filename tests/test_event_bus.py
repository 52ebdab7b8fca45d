from __future__ import annotations

import logging
from pathlib import Path

import pytest

from freelance_agents.runtime.events import EventBus
from freelance_agents.runtime.storage.container import Container


def test_emit_appends_envelope_and_logs(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    container = Container(tmp_path)
    bus = EventBus(container.events, container.project_id)

    with caplog.at_level(logging.DEBUG, logger="freelance_agents.runtime.events.bus"):
        event = bus.emit(channel="actions", event_type="action.executed", entity_id="ntf-1", payload={"user_id": "u1"})

    stored = container.events.list_recent(1)[0]
    assert stored["id"] == event["id"]
    assert (stored["channel"], stored["type"], stored["entity_id"]) == ("actions", "action.executed", "ntf-1")
    assert stored["project_id"] == tmp_path.name
    assert "actions action.executed entity=ntf-1" in caplog.text


def test_unknown_channel_is_rejected(tmp_path: Path) -> None:
    container = Container(tmp_path)
    bus = EventBus(container.events, container.project_id)

    with pytest.raises(ValueError):
        bus.emit(channel="tasks", event_type="task.created", entity_id="t1", payload={})
    assert container.events.list_recent() == []
