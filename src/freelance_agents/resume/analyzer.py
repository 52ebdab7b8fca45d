"""Extract skills and experience from resume text with a text-generation model."""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)

MAX_RESUME_CHARS = 10000
ANALYSIS_MAX_TOKENS = 1200
FALLBACK_SCORE = 40
DEFAULT_MODEL_SCORE = 50

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)

_PROMPT_TEMPLATE = """\
You are an expert HR and Technical Recruiter. Analyze the following resume text and extract key information.

Resume Text:
\"\"\"
{text}
\"\"\"

To compute experience, find the employment date ranges (for example "Jan 2020 - Present" or "2018-2022"),
use the current date for open-ended ranges, sum the non-overlapping periods and round to whole years.
If no dates are present, estimate from seniority (Junior 0-2, Mid 2-5, Senior 5+).

Return a JSON object with these fields:
- "skills": array of every technical and soft skill mentioned.
- "experienceYears": number, total years of professional experience.
- "credibilityScore": number from 0 to 100 rating the resume quality.
- "summary": two-sentence professional summary.

Return only valid JSON without markdown formatting.
"""


class TextGenerator(Protocol):
    def generate(self, prompt: str, max_tokens: int = 400) -> str: ...

    def close(self) -> None: ...


@dataclass
class ResumeAnalysis:
    skills: list[str] = field(default_factory=list)
    experience_years: int = 0
    credibility_score: int = FALLBACK_SCORE
    summary: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def fallback_analysis() -> ResumeAnalysis:
    return ResumeAnalysis(skills=[], experience_years=0, credibility_score=FALLBACK_SCORE, summary="Could not analyze resume.")


def _finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def build_prompt(text: str) -> str:
    return _PROMPT_TEMPLATE.format(text=text[:MAX_RESUME_CHARS])


def parse_analysis(raw: str) -> ResumeAnalysis:
    """Parse model output into a :class:`ResumeAnalysis`, clamping values.

    Raises:
        ValueError: If ``raw`` is not a JSON object.
    """
    cleaned = _FENCE.sub("", raw).strip()
    data = json.loads(cleaned)
    if not isinstance(data, dict):
        raise ValueError("model output is not a JSON object")

    skills_raw = data.get("skills")
    skills = [str(item).strip() for item in skills_raw if str(item).strip()] if isinstance(skills_raw, list) else []

    years_raw = data.get("experienceYears")
    experience = max(0, round(years_raw)) if _finite_number(years_raw) else 0

    score_raw = data.get("credibilityScore")
    if _finite_number(score_raw):
        score = int(round(min(100, max(0, score_raw))))
    else:
        score = DEFAULT_MODEL_SCORE

    return ResumeAnalysis(
        skills=skills,
        experience_years=int(experience),
        credibility_score=score,
        summary=str(data.get("summary") or "No summary available."),
    )


def analyze_resume_text(text: str, client: TextGenerator, max_tokens: int = ANALYSIS_MAX_TOKENS) -> ResumeAnalysis:
    """Analyze resume text.

    Unparseable model output yields the fallback analysis. Remote failures,
    including credential exhaustion, propagate as
    :class:`~freelance_agents.resume.ai_client.TextGenerationError`.
    """
    raw = client.generate(build_prompt(text), max_tokens)
    try:
        return parse_analysis(raw)
    except ValueError:
        # json.JSONDecodeError is a ValueError subclass.
        logger.warning("Resume analysis returned unparseable output")
        return fallback_analysis()
