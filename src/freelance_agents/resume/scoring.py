"""Credibility score: base + financial + skills + experience."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..runtime.domain.models import Invoice

BASE_SCORE = 40
MAX_FINANCIAL_POINTS = 20
POINTS_PER_SKILL = 2
MAX_SKILL_POINTS = 20
POINTS_PER_EXPERIENCE_YEAR = 4
MAX_EXPERIENCE_POINTS = 20

_PAID_STATUSES = {"PAID", "Paid"}


@dataclass(frozen=True)
class CredibilityScore:
    score: int
    breakdown: dict[str, int] = field(default_factory=dict)


def financial_points(invoices: list[Invoice]) -> int:
    """Points for the share of invoices that were paid; no history earns none."""
    if not invoices:
        return 0
    paid = sum(1 for invoice in invoices if invoice.status in _PAID_STATUSES)
    return round(MAX_FINANCIAL_POINTS * paid / len(invoices))


def calculate_credibility_score(skills_count: int, experience_years: int, invoices: list[Invoice]) -> CredibilityScore:
    breakdown = {
        "base": BASE_SCORE,
        "financial": financial_points(invoices),
        "skills": min(MAX_SKILL_POINTS, max(0, skills_count) * POINTS_PER_SKILL),
        "experience": min(MAX_EXPERIENCE_POINTS, max(0, experience_years) * POINTS_PER_EXPERIENCE_YEAR),
    }
    score = max(0, min(100, sum(breakdown.values())))
    return CredibilityScore(score=score, breakdown=breakdown)
