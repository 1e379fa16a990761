"""Pydantic request/response models for the AI endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GenerateResumeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_resume: dict[str, Any] | None = Field(default=None, alias="currentResume")
    target_role: str = Field(default="Software Engineer", alias="targetRole")
    profile: str = "Job Change"


class GenerateResumeResponse(BaseModel):
    success: bool = True
    data: dict[str, Any]
    provider: str


class EnhanceRequest(BaseModel):
    text: str = ""


class EnhanceResponse(BaseModel):
    enhanced: str
    provider: str
    remaining: int | None = None


class ProviderInfo(BaseModel):
    provider_id: str
    family: str
    model: str
    auth_placement: str
    supports_structured_output: bool
    timeout_seconds: float | None = None
    max_retries: int = 0


class ProvidersResponse(BaseModel):
    providers: list[ProviderInfo]
    per_attempt_timeout: float
    overall_deadline: float
    continue_on_unparsable: bool


class CompanyFitRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resume_text: str = Field(default="", alias="resumeText")
    company: str = ""
    target_role: str = Field(default="Software Engineer", alias="targetRole")


class CompareRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resume_a: str = Field(default="", alias="resumeA")
    resume_b: str = Field(default="", alias="resumeB")
    target_role: str = Field(default="Software Engineer", alias="targetRole")


class InterviewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resume_text: str = Field(default="", alias="resumeText")
    target_role: str = Field(default="Software Engineer", alias="targetRole")
    question_count: int = Field(default=10, alias="questionCount")


class TailorRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resume_text: str = Field(default="", alias="resumeText")
    target_company: str = Field(default="", alias="targetCompany")


class InsightResponse(BaseModel):
    success: bool = True
    result: dict[str, Any]
    provider: str
    remaining: int | None = None


class CompaniesResponse(BaseModel):
    companies: list[str]
