"""Agent run orchestration and action execution."""

from .executor import ActionExecutor, NotificationNotFoundError, UnknownActionError
from .service import AgentRunService, DomainOutcome, RunResult

__all__ = [
    "ActionExecutor",
    "AgentRunService",
    "DomainOutcome",
    "NotificationNotFoundError",
    "RunResult",
    "UnknownActionError",
]
