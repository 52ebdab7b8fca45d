"""Pydantic request schemas for the agent API routes."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class ExecuteActionRequest(BaseModel):
    """Confirmation of a suggested action from the pending feed."""

    domain: str
    event_kind: str
    payload: dict[str, Any] = Field(default_factory=dict)
    notification_id: Optional[str] = None


class ResumeTextRequest(BaseModel):
    """Plain resume text extracted client-side."""

    text: str = ""
