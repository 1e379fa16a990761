"""Resume generation endpoint.

  - POST /resume/generate — rewrite a parsed resume into the normalized,
    ATS-optimized schema using the provider fallback chain
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from resumeai.core.config import settings
from resumeai.core.dependencies import get_gateway, get_user_id
from resumeai.core.exceptions import BadRequestError, ProviderUnavailableError, UpstreamOutputError
from resumeai.core.quota import QuotaChecker, get_quota_checker, require_quota
from resumeai.core.rate_limit import limiter
from resumeai.gateway.errors import AggregateFailure, ConfigurationError, OutputUnparsable
from resumeai.gateway.gateway import LlmGateway
from resumeai.schemas.ai import GenerateResumeRequest, GenerateResumeResponse
from resumeai.schemas.resume import SchemaViolation
from resumeai.services.resume_generator import ResumeGenerator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resume", tags=["resume"])

UNAVAILABLE_MESSAGE = "AI service is temporarily unavailable. Please try again in a few minutes."


@router.post("/generate", response_model=GenerateResumeResponse)
@limiter.limit(settings.generate_rate_limit)
async def generate_resume(
    request: Request,
    body: GenerateResumeRequest,
    gateway: LlmGateway = Depends(get_gateway),
    user_id: str = Depends(get_user_id),
    quota_checker: QuotaChecker = Depends(get_quota_checker),
):
    """Generate a normalized resume.

    Quota is checked before any provider is called. Provider diagnostics are
    logged, never returned.
    """
    if not body.current_resume:
        raise BadRequestError({"success": False, "error": "No resume provided"})

    await require_quota(quota_checker, user_id, "atsResumeGenerator")

    generator = ResumeGenerator(gateway)
    try:
        generated = await generator.generate(body.current_resume, body.target_role, body.profile)
    except ConfigurationError as e:
        logger.error("Resume generation not possible: %s", e)
        raise ProviderUnavailableError({"success": False, "error": "not_configured", "message": UNAVAILABLE_MESSAGE})
    except AggregateFailure as e:
        logger.warning("Resume generation failed on all providers: %s", e.summary())
        raise ProviderUnavailableError({"success": False, "error": "unavailable", "message": UNAVAILABLE_MESSAGE})
    except OutputUnparsable as e:
        logger.error("Unparsable resume from %s: %s | raw[:500]=%r", e.provider_id, e.reason, e.raw_text[:500])
        raise UpstreamOutputError({"success": False, "error": "invalid_ai_output", "message": "Failed to parse AI response"})
    except SchemaViolation as e:
        logger.error("Resume schema violation: %s", e)
        raise UpstreamOutputError({"success": False, "error": "invalid_ai_output", "message": str(e)})

    return GenerateResumeResponse(data=generated.resume.to_response_dict(), provider=generated.provider_id)
