"""Resume processing: analyze, score and update the freelancer profile."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..runtime.domain.models import UserProfile, now_iso
from ..runtime.events.bus import EventBus
from ..runtime.storage.container import Container
from .analyzer import ANALYSIS_MAX_TOKENS, ResumeAnalysis, TextGenerator, analyze_resume_text
from .scoring import CredibilityScore, calculate_credibility_score

logger = logging.getLogger(__name__)


@dataclass
class ResumeResult:
    profile: UserProfile
    analysis: ResumeAnalysis
    credibility: CredibilityScore

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.credibility.score,
            "breakdown": dict(self.credibility.breakdown),
            "skills": list(self.analysis.skills),
            "experience_years": self.analysis.experience_years,
            "summary": self.analysis.summary,
        }


class ResumeService:
    def __init__(
        self,
        container: Container,
        bus: EventBus,
        client: TextGenerator,
        *,
        max_tokens: int = ANALYSIS_MAX_TOKENS,
    ) -> None:
        self._container = container
        self._bus = bus
        self._client = client
        self._max_tokens = max_tokens

    def process(self, user_id: str, text: str) -> ResumeResult:
        """Analyze ``text`` and store the extracted signals on the user's profile.

        A missing profile is created. The stored credibility score is the
        computed formula score, not the model's own rating.
        """
        analysis = analyze_resume_text(text, self._client, self._max_tokens)
        invoices = [item for item in self._container.invoices.list() if item.freelancer_id == user_id]
        credibility = calculate_credibility_score(len(analysis.skills), analysis.experience_years, invoices)

        profile = self._container.users.get(user_id) or UserProfile(id=user_id)
        profile.skills = list(analysis.skills)
        profile.experience_years = analysis.experience_years
        profile.credibility_score = credibility.score
        profile.resume_uploaded_at = now_iso()
        self._container.users.upsert(profile)
        logger.info("Resume processed for %s: score=%s skills=%s", user_id, credibility.score, len(analysis.skills))

        self._bus.emit(
            channel="users",
            event_type="resume.processed",
            entity_id=user_id,
            payload={"score": credibility.score, "breakdown": dict(credibility.breakdown)},
        )
        return ResumeResult(profile=profile, analysis=analysis, credibility=credibility)
