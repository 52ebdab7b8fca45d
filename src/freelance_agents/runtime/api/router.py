"""FastAPI routes for agent runs, the pending feed and action confirmation."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse

from ...config import get_text_generation_config
from ...resume.ai_client import TextGenerationClient, TextGenerationError
from ...resume.analyzer import TextGenerator
from ...resume.service import ResumeService
from ..events.bus import EventBus
from ..notifications.pending import PendingActionsReader
from ..orchestrator.executor import ActionExecutor, NotificationNotFoundError, UnknownActionError
from ..orchestrator.service import AgentRunService
from ..storage.container import Container
from .schemas import ExecuteActionRequest, ResumeTextRequest

logger = logging.getLogger(__name__)


def _default_text_client(container: Container) -> TextGenerator:
    cfg = get_text_generation_config(config=container.config.load())
    return TextGenerationClient.from_config(cfg)


def create_router(
    resolve_container: Callable[[Optional[str]], Container],
    *,
    clock: Optional[Callable[[], datetime]] = None,
    text_client_factory: Optional[Callable[[Container], TextGenerator]] = None,
) -> APIRouter:
    """Create the agent API router.

    Args:
        resolve_container (Callable[[Optional[str]], Container]): Resolves the
            project-scoped ``Container`` for an optional ``project_dir`` value.
        clock (Optional[Callable[[], datetime]]): Clock forwarded to agent runs.
        text_client_factory (Optional[Callable[[Container], TextGenerator]]):
            Builds the text-generation client used by the resume route.

    Returns:
        APIRouter: Router exposing the ``/api`` endpoints.
    """
    router = APIRouter(prefix="/api", tags=["api"])
    make_text_client = text_client_factory or _default_text_client

    def _ctx(project_dir: Optional[str]) -> tuple[Container, EventBus]:
        container = resolve_container(project_dir)
        return container, EventBus(container.events, container.project_id)

    @router.get("/agents/run")
    async def run_agents(user_id: str = Query(...), project_dir: Optional[str] = Query(None)) -> dict[str, Any]:
        """Scan every agent domain for the user, then return the pending feed."""
        container, bus = _ctx(project_dir)
        result = AgentRunService(container, bus, clock=clock).run_all_agents(user_id)
        actions = PendingActionsReader(container.notifications).list(user_id)
        return {
            "success": True,
            "count": len(actions),
            "actions": actions,
            "logs": result.logs,
            "action_count": result.action_count,
        }

    @router.get("/agents/pending")
    async def pending_actions(user_id: str = Query(...), project_dir: Optional[str] = Query(None)) -> dict[str, Any]:
        container, _ = _ctx(project_dir)
        return {"actions": PendingActionsReader(container.notifications).list(user_id)}

    @router.post("/agents/execute", response_model=None)
    async def execute_action(
        body: ExecuteActionRequest,
        user_id: str = Query(...),
        project_dir: Optional[str] = Query(None),
    ) -> dict[str, Any] | JSONResponse:
        """Apply a confirmed action and resolve its notification.

        Unknown ``(domain, event_kind)`` pairs are rejected with 400 and a
        notification id that is not the user's with 404, both before any
        write. Any other failure returns 500 and leaves the notification unread.
        """
        container, bus = _ctx(project_dir)
        executor = ActionExecutor(container, bus)
        try:
            result = executor.execute(user_id, body.domain, body.event_kind, body.payload, body.notification_id)
        except UnknownActionError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except NotificationNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except Exception as exc:
            logger.exception("Execute action failed for %s/%s", body.domain, body.event_kind)
            return JSONResponse(status_code=500, content={"success": False, "message": str(exc)})
        return {"success": True, **result}

    @router.post("/notifications/{notification_id}/dismiss")
    async def dismiss_notification(
        notification_id: str,
        user_id: str = Query(...),
        project_dir: Optional[str] = Query(None),
    ) -> dict[str, Any]:
        container, bus = _ctx(project_dir)
        updated = container.notifications.mark_read(notification_id, user_id)
        if updated is None:
            raise HTTPException(status_code=404, detail="Notification not found")
        bus.emit(
            channel="notifications",
            event_type="notification.dismissed",
            entity_id=notification_id,
            payload={"recipient_id": updated.recipient_id},
        )
        return {"success": True, "notification": updated.to_dict()}

    @router.post("/user/resume")
    def upload_resume(
        body: ResumeTextRequest,
        user_id: str = Query(...),
        project_dir: Optional[str] = Query(None),
    ) -> dict[str, Any]:
        """Analyze resume text and update the profile's skills and credibility score."""
        if not body.text.strip():
            raise HTTPException(status_code=400, detail="Resume text is empty")
        container, bus = _ctx(project_dir)
        cfg = get_text_generation_config(config=container.config.load())
        client = make_text_client(container)
        service = ResumeService(container, bus, client, max_tokens=cfg.max_output_tokens)
        try:
            result = service.process(user_id, body.text)
        except TextGenerationError as exc:
            logger.exception("Resume analysis failed for %s", user_id)
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        finally:
            client.close()
        return {
            "success": True,
            **result.to_dict(),
            "message": "Resume processed and profile updated successfully",
        }

    return router
