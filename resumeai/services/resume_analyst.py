"""Resume analyses on top of the LLM gateway.

Every analysis is one ``generate_structured`` call followed by schema
validation; gateway errors and SchemaViolation propagate to the route.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from resumeai.gateway.gateway import LlmGateway
from resumeai.schemas.insights import (
    CompanyCompatibility,
    CompanyTailoring,
    InterviewPrep,
    ResumeComparison,
    parse_insight,
)
from resumeai.services.prompts import (
    build_company_prompt,
    build_compare_prompt,
    build_interview_prompt,
    build_tailor_prompt,
)

logger = logging.getLogger(__name__)

MAX_INTERVIEW_QUESTIONS = 20

TOP_COMPANIES = (
    "Google", "Microsoft", "Amazon", "Apple", "Meta", "Netflix", "Tesla", "Adobe",
    "Salesforce", "Oracle", "IBM", "Intel", "Cisco", "VMware", "Nvidia", "AMD",
    "TCS", "Infosys", "Wipro", "HCL", "Tech Mahindra", "Cognizant", "Accenture",
    "Deloitte", "PwC", "EY", "KPMG", "McKinsey", "BCG", "Bain",
    "Goldman Sachs", "Morgan Stanley", "JPMorgan", "Citibank", "HSBC", "Barclays",
    "Flipkart", "Paytm", "Razorpay", "Swiggy", "Zomato", "Ola", "PhonePe", "CRED",
    "Uber", "Airbnb", "Stripe", "Shopify", "Zoom", "Slack", "Atlassian", "GitHub",
)


@dataclass
class Insight:
    """A validated analysis plus the provider that produced it."""

    result: dict[str, Any]
    provider_id: str


def interview_token_budget(question_count: int) -> int:
    # ~150 tokens per question plus JSON overhead
    return 2500 if question_count <= 10 else 4500


class ResumeAnalyst:
    def __init__(self, gateway: LlmGateway):
        self.gateway = gateway

    async def company_fit(self, resume_text: str, company: str, target_role: str) -> Insight:
        """Score how well a resume fits one company and role."""
        prompt = build_company_prompt(resume_text, company, target_role)
        return await self._analyse("company_fit", prompt, CompanyCompatibility, max_tokens=1500)

    async def compare(self, resume_a: str, resume_b: str, target_role: str) -> Insight:
        """Score two resumes side by side for the same role."""
        prompt = build_compare_prompt(resume_a, resume_b, target_role)
        return await self._analyse("compare", prompt, ResumeComparison, max_tokens=1500)

    async def interview_questions(self, resume_text: str, target_role: str, question_count: int = 10) -> Insight:
        """Generate interview questions that test the claims in a resume.

        ``question_count`` is clamped to 1..MAX_INTERVIEW_QUESTIONS.
        """
        count = max(1, min(question_count, MAX_INTERVIEW_QUESTIONS))
        prompt = build_interview_prompt(resume_text, target_role, count)
        insight = await self._analyse(
            "interview_questions",
            prompt,
            InterviewPrep,
            max_tokens=interview_token_budget(count),
        )
        if not insight.result["totalQuestions"]:
            insight.result["totalQuestions"] = len(insight.result["questions"])
        return insight

    async def tailor(self, resume_text: str, target_company: str) -> Insight:
        """Suggest keywords and a rewritten summary for one company."""
        prompt = build_tailor_prompt(resume_text, target_company)
        return await self._analyse("tailor", prompt, CompanyTailoring, temperature=0.7, max_tokens=1000)

    async def _analyse(
        self,
        name: str,
        prompt: str,
        model: type,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> Insight:
        document = await self.gateway.generate_structured(prompt, temperature=temperature, max_tokens=max_tokens)
        parsed = parse_insight(model, document.value)
        logger.info(
            "Analysis %s done via %s (%d attempt(s))",
            name,
            document.provider_id,
            len(document.attempts),
        )
        return Insight(result=parsed.model_dump(by_alias=True, exclude_none=True), provider_id=document.provider_id)
