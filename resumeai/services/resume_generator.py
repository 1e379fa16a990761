"""Resume rewriting and text enhancement on top of the LLM gateway."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from resumeai.gateway.errors import AggregateFailure
from resumeai.gateway.gateway import LlmGateway
from resumeai.schemas.resume import NormalizedResume, normalize_resume
from resumeai.services.prompts import build_enhance_prompt, build_resume_prompt

logger = logging.getLogger(__name__)


@dataclass
class GeneratedResume:
    resume: NormalizedResume
    provider_id: str


@dataclass
class EnhancedText:
    text: str
    provider_id: str


class ResumeGenerator:
    """Caller of the gateway: builds prompts and normalizes results."""

    def __init__(self, gateway: LlmGateway):
        self.gateway = gateway

    async def generate(
        self,
        current_resume: dict[str, Any],
        target_role: str,
        profile: str,
    ) -> GeneratedResume:
        """Rewrite a parsed resume into the normalized schema.

        Propagates ConfigurationError, AggregateFailure, OutputUnparsable and
        SchemaViolation unchanged.
        """
        prompt = build_resume_prompt(current_resume, target_role, profile)
        document = await self.gateway.generate_structured(prompt)
        resume = normalize_resume(document.value)
        logger.info(
            "Resume generated for role %r via %s (%d attempt(s))",
            target_role,
            document.provider_id,
            len(document.attempts),
        )
        return GeneratedResume(resume=resume, provider_id=document.provider_id)

    async def enhance(self, text: str) -> EnhancedText:
        """Rewrite a short text fragment; plain text, no JSON mode."""
        result = await self.gateway.invoke(build_enhance_prompt(text), json_mode=False, temperature=0.7, max_tokens=500)
        if result.aggregate_failed:
            raise AggregateFailure(result.attempts)
        return EnhancedText(text=result.text.strip(), provider_id=result.provider_id)
