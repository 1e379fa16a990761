"""Schemas for the JSON analyses built on top of a resume.

Each model is the shape one analysis prompt asks for. Only the headline
field of each document is required; lists default to empty.
"""

from __future__ import annotations

from typing import Annotated, Any, TypeVar

from pydantic import BeforeValidator, Field, ValidationError

from resumeai.schemas.resume import LenientModel, SchemaViolation

T = TypeVar("T", bound=LenientModel)


def _round_score(value: Any) -> Any:
    if isinstance(value, float):
        return round(value)
    return value


# 0-100; models sometimes answer 72.5
Score = Annotated[int, BeforeValidator(_round_score)]


class ParameterScore(LenientModel):
    name: str = ""
    score: Score = 0
    analysis: str = ""


class CategoryScore(LenientModel):
    category: str = ""
    score: Score = 0
    parameters: list[ParameterScore] = Field(default_factory=list)


class CompanyCompatibility(LenientModel):
    overall_score: Score = Field(alias="overallScore")
    classification: str = ""  # Strong Fit / Good Fit / Risky / Poor Fit
    verdict: str = ""
    categories: list[CategoryScore] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class ComparisonParameter(LenientModel):
    name: str = ""
    category: str = ""
    score_a: Score = Field(default=0, alias="scoreA")
    score_b: Score = Field(default=0, alias="scoreB")
    winner: str = "TIE"
    analysis: str = ""


class ResumeComparison(LenientModel):
    overall_score_a: Score = Field(alias="overallScoreA")
    overall_score_b: Score = Field(alias="overallScoreB")
    winner: str = "TIE"  # A / B / TIE
    verdict: str = ""
    parameters: list[ComparisonParameter] = Field(default_factory=list)


class InterviewQuestion(LenientModel):
    question: str
    type: str = "technical"
    difficulty: str = "Medium"
    intent: str = ""


class InterviewPrep(LenientModel):
    total_questions: int = Field(default=0, alias="totalQuestions")
    questions: list[InterviewQuestion]
    weakness_areas: list[str] = Field(default_factory=list, alias="weaknessAreas")
    overall_preparedness: Score = Field(default=0, alias="overallPreparedness")
    tips: list[str] = Field(default_factory=list)


class CompanyTailoring(LenientModel):
    tailored_summary: str = Field(alias="tailoredSummary")
    suggestions: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    score: Score | None = None


def parse_insight(model: type[T], value: Any) -> T:
    """Validate a recovered JSON object against ``model``."""
    if not isinstance(value, dict):
        raise SchemaViolation(f"{model.__name__} must be a JSON object, got {type(value).__name__}")
    try:
        return model.model_validate(value)
    except ValidationError as e:
        raise SchemaViolation(f"{model.__name__} does not match schema: {e.error_count()} error(s)") from e
