"""Normalized resume schema — the consumer of recovered structured output.

The gateway only guarantees syntactically valid JSON; this module enforces
the document shape (required ``header`` and ``sections``) and fills list
defaults the model left out.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

REQUIRED_TOP_LEVEL = ("header", "sections")


class SchemaViolation(ValueError):
    """Recovered JSON does not match the resume schema."""


class LenientModel(BaseModel):
    """Base for model-produced documents: unknown keys and nulls are tolerated."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # Models emit null for unknown fields; treat it as "not given"
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class NormalizedHeader(LenientModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: str | None = None
    website: str | None = None


class EducationItem(LenientModel):
    institution: str = ""
    degree: str = ""
    field_of_study: str | None = Field(default=None, alias="fieldOfStudy")
    start_date: str | None = Field(default=None, alias="startDate")
    end_date: str | None = Field(default=None, alias="endDate")
    gpa: str | None = None
    achievements: list[str] = Field(default_factory=list)


class ExperienceItem(LenientModel):
    company: str = ""
    role: str = ""
    location: str | None = None
    start_date: str | None = Field(default=None, alias="startDate")
    end_date: str | None = Field(default=None, alias="endDate")  # "Present" if current
    description: list[str] = Field(default_factory=list)


class ProjectItem(LenientModel):
    name: str = ""
    technologies: list[str] = Field(default_factory=list)
    description: list[str] = Field(default_factory=list)
    link: str | None = None


class SkillsSection(LenientModel):
    languages: list[str] = Field(default_factory=list)
    frontend: list[str] = Field(default_factory=list)
    backend: list[str] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)
    frameworks: list[str] = Field(default_factory=list)
    other: list[str] = Field(default_factory=list)


class ProfileLink(LenientModel):
    network: str
    url: str


class NormalizedSections(LenientModel):
    summary: str = ""
    education: list[EducationItem] = Field(default_factory=list)
    experience: list[ExperienceItem] = Field(default_factory=list)
    projects: list[ProjectItem] = Field(default_factory=list)
    skills: SkillsSection = Field(default_factory=SkillsSection)
    coursework: list[str] = Field(default_factory=list)
    profiles: list[ProfileLink] = Field(default_factory=list)


class NormalizedResume(LenientModel):
    header: NormalizedHeader
    sections: NormalizedSections

    def to_response_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


def normalize_resume(value: Any) -> NormalizedResume:
    """Validate a recovered value against the resume schema."""
    if not isinstance(value, dict):
        raise SchemaViolation(f"Resume must be a JSON object, got {type(value).__name__}")
    missing = [key for key in REQUIRED_TOP_LEVEL if not isinstance(value.get(key), dict)]
    if missing:
        raise SchemaViolation(f"Resume is missing required section(s): {', '.join(missing)}")
    try:
        return NormalizedResume.model_validate(value)
    except ValidationError as e:
        raise SchemaViolation(f"Resume does not match schema: {e.error_count()} error(s)") from e
