"""Hunter agent: match open job postings against a freelancer's skills."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from ..domain.actions import JobBidAction
from ..domain.models import Job, UserProfile

MIN_MATCH_SCORE = 0.5
BID_RATIO = 0.95


def _normalize(skills: Iterable[str]) -> set[str]:
    return {skill.strip().lower() for skill in skills if skill and skill.strip()}


def match_score(job: Job, profile: UserProfile) -> float:
    """Fraction of the job's required skills the freelancer has."""
    required = _normalize(job.skills)
    if not required:
        return 0.0
    return len(required & _normalize(profile.skills)) / len(required)


def should_act_on_job(job: Job, profile: UserProfile, bid_job_ids: set[str]) -> bool:
    """Return whether ``job`` is open, not posted by the user and not already bid on."""
    if job.status != "Open":
        return False
    if job.client_id and job.client_id == profile.id:
        return False
    return job.job_id not in bid_job_ids and job.id not in bid_job_ids


def _proposal(job: Job, profile: UserProfile, matched: list[str]) -> str:
    opener = f"Hi, {profile.name} here." if profile.name else "Hi there."
    skills = ", ".join(matched) if matched else "the required stack"
    experience = f" with {profile.experience_years} years of experience" if profile.experience_years else ""
    return (
        f"{opener} I'd love to help with \"{job.title}\". "
        f"I work with {skills}{experience} and can start right away."
    )


def evaluate_job(job: Job, profile: UserProfile) -> Optional[JobBidAction]:
    score = match_score(job, profile)
    if score < MIN_MATCH_SCORE:
        return None
    profile_skills = _normalize(profile.skills)
    matched = [skill for skill in job.skills if skill.strip().lower() in profile_skills]
    return JobBidAction(
        job_id=job.job_id,
        job_title=job.title,
        match_score=round(score, 2),
        bid_amount=round(job.budget * BID_RATIO, 2),
        proposal_draft=_proposal(job, profile, matched),
    )


def process_job_matches(jobs: list[Job], profile: Optional[UserProfile], bid_job_ids: set[str]) -> list[JobBidAction]:
    """Return a bid suggestion for every open job the freelancer matches.

    No matches are produced for a missing profile or one that paused new work.
    """
    if profile is None or not profile.accepting_new_jobs:
        return []
    matches: list[JobBidAction] = []
    for job in jobs:
        if not should_act_on_job(job, profile, bid_job_ids):
            continue
        action = evaluate_job(job, profile)
        if action is not None:
            matches.append(action)
    return matches
