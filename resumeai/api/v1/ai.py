"""AI helper endpoints.

  - POST /ai/enhance — rewrite a short resume fragment (plain text)
  - POST /ai/company — score a resume against one company and role
  - POST /ai/compare — score two resumes side by side
  - POST /ai/interview — interview questions that test a resume's claims
  - POST /ai/target — keywords and a tailored summary for one company
  - GET /ai/target — companies offered for tailoring
  - GET /ai/providers — configured provider chain, without credentials
"""

from __future__ import annotations

import logging
from contextlib import contextmanager

from fastapi import APIRouter, Depends, Request

from resumeai.api.v1.resume import UNAVAILABLE_MESSAGE
from resumeai.core.config import settings
from resumeai.core.dependencies import get_gateway, get_user_id
from resumeai.core.exceptions import BadRequestError, ProviderUnavailableError, UpstreamOutputError
from resumeai.core.quota import QuotaChecker, QuotaStatus, get_quota_checker, require_quota
from resumeai.core.rate_limit import limiter
from resumeai.gateway.errors import AggregateFailure, ConfigurationError, OutputUnparsable
from resumeai.gateway.gateway import LlmGateway
from resumeai.schemas.ai import (
    CompaniesResponse,
    CompanyFitRequest,
    CompareRequest,
    EnhanceRequest,
    EnhanceResponse,
    InsightResponse,
    InterviewRequest,
    ProvidersResponse,
    TailorRequest,
)
from resumeai.schemas.resume import SchemaViolation
from resumeai.services.resume_analyst import TOP_COMPANIES, Insight, ResumeAnalyst
from resumeai.services.resume_generator import ResumeGenerator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])


def _remaining(quota: QuotaStatus | None) -> int | None:
    if quota is None or quota.remaining is None:
        return None
    return quota.remaining - 1


@contextmanager
def _analysis_errors(name: str):
    """Map gateway and schema errors of one analysis onto HTTP errors."""
    try:
        yield
    except ConfigurationError as e:
        logger.error("Cannot run %s: %s", name, e)
        raise ProviderUnavailableError({"success": False, "error": "not_configured", "message": UNAVAILABLE_MESSAGE})
    except AggregateFailure as e:
        logger.warning("All providers failed for %s: %s", name, e.summary())
        raise ProviderUnavailableError({"success": False, "error": "unavailable", "message": UNAVAILABLE_MESSAGE})
    except OutputUnparsable as e:
        logger.error("Unparsable %s from %s: %s | raw[:500]=%r", name, e.provider_id, e.reason, e.raw_text[:500])
        raise UpstreamOutputError({"success": False, "error": "invalid_ai_output", "message": "Failed to parse AI response"})
    except SchemaViolation as e:
        logger.error("Schema violation in %s: %s", name, e)
        raise UpstreamOutputError({"success": False, "error": "invalid_ai_output", "message": str(e)})


def _insight_response(insight: Insight, quota: QuotaStatus | None = None) -> InsightResponse:
    return InsightResponse(result=insight.result, provider=insight.provider_id, remaining=_remaining(quota))


@router.post("/enhance", response_model=EnhanceResponse)
@limiter.limit(settings.generate_rate_limit)
async def enhance_text(
    request: Request,
    body: EnhanceRequest,
    gateway: LlmGateway = Depends(get_gateway),
    user_id: str = Depends(get_user_id),
    quota_checker: QuotaChecker = Depends(get_quota_checker),
):
    if not body.text.strip():
        raise BadRequestError({"error": "Text is required"})

    quota = await require_quota(quota_checker, user_id, "aiEnhancements")

    try:
        enhanced = await ResumeGenerator(gateway).enhance(body.text)
    except (ConfigurationError, AggregateFailure) as e:
        logger.warning("Enhancement failed: %s", e)
        raise ProviderUnavailableError({"error": "Failed to enhance text"})

    return EnhanceResponse(enhanced=enhanced.text, provider=enhanced.provider_id, remaining=_remaining(quota))


@router.post("/company", response_model=InsightResponse)
@limiter.limit(settings.generate_rate_limit)
async def company_fit(
    request: Request,
    body: CompanyFitRequest,
    gateway: LlmGateway = Depends(get_gateway),
    user_id: str = Depends(get_user_id),
    quota_checker: QuotaChecker = Depends(get_quota_checker),
):
    if not body.company.strip():
        raise BadRequestError({"success": False, "error": "Company name is required"})
    if not body.resume_text.strip():
        raise BadRequestError({"success": False, "error": "Resume content is required"})

    quota = await require_quota(quota_checker, user_id, "companyCompatibility")

    with _analysis_errors("company compatibility"):
        insight = await ResumeAnalyst(gateway).company_fit(body.resume_text, body.company, body.target_role)
    return _insight_response(insight, quota)


@router.post("/compare", response_model=InsightResponse)
@limiter.limit(settings.generate_rate_limit)
async def compare_resumes(
    request: Request,
    body: CompareRequest,
    gateway: LlmGateway = Depends(get_gateway),
    user_id: str = Depends(get_user_id),
    quota_checker: QuotaChecker = Depends(get_quota_checker),
):
    if not body.resume_a.strip() or not body.resume_b.strip():
        raise BadRequestError({"success": False, "error": "Both resumes are required"})

    quota = await require_quota(quota_checker, user_id, "resumeComparison")

    with _analysis_errors("resume comparison"):
        insight = await ResumeAnalyst(gateway).compare(body.resume_a, body.resume_b, body.target_role)
    return _insight_response(insight, quota)


@router.post("/interview", response_model=InsightResponse)
@limiter.limit(settings.generate_rate_limit)
async def interview_questions(
    request: Request,
    body: InterviewRequest,
    gateway: LlmGateway = Depends(get_gateway),
    user_id: str = Depends(get_user_id),
    quota_checker: QuotaChecker = Depends(get_quota_checker),
):
    if not body.resume_text.strip():
        raise BadRequestError({"success": False, "error": "Resume content is required"})

    quota = await require_quota(quota_checker, user_id, "interviewQuestions")

    with _analysis_errors("interview questions"):
        insight = await ResumeAnalyst(gateway).interview_questions(
            body.resume_text, body.target_role, body.question_count
        )
    return _insight_response(insight, quota)


@router.post("/target", response_model=InsightResponse)
@limiter.limit(settings.generate_rate_limit)
async def tailor_for_company(
    request: Request,
    body: TailorRequest,
    gateway: LlmGateway = Depends(get_gateway),
):
    """Tailoring suggestions; not metered."""
    if not body.resume_text.strip() or not body.target_company.strip():
        raise BadRequestError({"success": False, "error": "Resume text and target company are required"})

    with _analysis_errors("company tailoring"):
        insight = await ResumeAnalyst(gateway).tailor(body.resume_text, body.target_company)
    return _insight_response(insight)


@router.get("/target", response_model=CompaniesResponse)
async def list_target_companies():
    return CompaniesResponse(companies=list(TOP_COMPANIES))


@router.get("/providers", response_model=ProvidersResponse)
async def list_providers(gateway: LlmGateway = Depends(get_gateway)):
    return gateway.get_status()
