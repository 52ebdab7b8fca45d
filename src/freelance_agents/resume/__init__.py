"""Resume analysis and credibility scoring."""

from .ai_client import CredentialsExhaustedError, TextGenerationClient, TextGenerationError
from .analyzer import ResumeAnalysis, analyze_resume_text
from .scoring import CredibilityScore, calculate_credibility_score
from .service import ResumeResult, ResumeService

__all__ = [
    "CredentialsExhaustedError",
    "CredibilityScore",
    "ResumeAnalysis",
    "ResumeResult",
    "ResumeService",
    "TextGenerationClient",
    "TextGenerationError",
    "analyze_resume_text",
    "calculate_credibility_score",
]
