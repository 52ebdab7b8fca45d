"""Event bus exports."""

from .bus import CHANNELS, EventBus

__all__ = ["CHANNELS", "EventBus"]
