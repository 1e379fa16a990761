"""Tests for the resume schema and the generator service."""

from __future__ import annotations

import pytest

from resumeai.gateway.errors import AggregateFailure
from resumeai.gateway.gateway import LlmGateway
from resumeai.gateway.types import AttemptOutcome
from resumeai.schemas.resume import SchemaViolation, normalize_resume
from resumeai.services.prompts import build_enhance_prompt, build_resume_prompt
from resumeai.services.resume_generator import ResumeGenerator


def _gateway(adapters) -> LlmGateway:
    return LlmGateway([a.config for a in adapters], adapters=adapters)


class TestNormalizeResume:
    def test_fills_defaults(self):
        resume = normalize_resume({"header": {"name": "Ada"}, "sections": {}})
        assert resume.header.name == "Ada"
        assert resume.sections.experience == []
        assert resume.sections.skills.languages == []

    def test_aliases_round_trip(self):
        resume = normalize_resume(
            {
                "header": {},
                "sections": {"education": [{"institution": "X", "fieldOfStudy": "Math", "startDate": "2010"}]},
            }
        )
        data = resume.to_response_dict()
        education = data["sections"]["education"][0]
        assert education["fieldOfStudy"] == "Math"
        assert education["startDate"] == "2010"
        assert "endDate" not in education

    def test_null_fields_take_defaults(self):
        resume = normalize_resume(
            {
                "header": {"name": "Ada", "email": None, "phone": None, "linkedin": None},
                "sections": {
                    "summary": "x",
                    "skills": None,
                    "experience": [{"company": "Acme", "role": None, "endDate": None, "description": None}],
                },
            }
        )
        assert resume.header.email == ""
        assert resume.header.phone == ""
        assert resume.sections.skills.tools == []
        experience = resume.sections.experience[0]
        assert experience.role == ""
        assert experience.description == []
        assert "endDate" not in resume.to_response_dict()["sections"]["experience"][0]

    def test_unknown_keys_ignored(self):
        resume = normalize_resume({"header": {"name": "Ada", "nickname": "A"}, "sections": {"hobbies": ["chess"]}})
        assert "nickname" not in resume.to_response_dict()["header"]

    @pytest.mark.parametrize(
        "value",
        [
            [],
            "resume",
            {"header": {}},
            {"sections": {}},
            {"header": "Ada", "sections": {}},
        ],
    )
    def test_rejects_wrong_shape(self, value):
        with pytest.raises(SchemaViolation):
            normalize_resume(value)

    def test_rejects_wrong_field_types(self):
        with pytest.raises(SchemaViolation):
            normalize_resume({"header": {}, "sections": {"experience": "lots"}})


class TestPrompts:
    def test_resume_prompt_embeds_input(self):
        prompt = build_resume_prompt({"name": "Ada"}, "Data Engineer", "Senior")
        assert "Data Engineer" in prompt
        assert "Senior" in prompt
        assert '"name": "Ada"' in prompt

    def test_enhance_prompt_embeds_text(self):
        assert "managed people" in build_enhance_prompt("managed people")


class TestResumeGenerator:
    @pytest.mark.asyncio
    async def test_generate(self, fake_adapter):
        adapter = fake_adapter("groq", ['Here you go:\n{"header": {"name": "Ada",}, "sections": {"summary": "Hi"}}'])

        generated = await ResumeGenerator(_gateway([adapter])).generate({"name": "Ada"}, "Engineer", "Job Change")

        assert generated.provider_id == "groq"
        assert generated.resume.header.name == "Ada"
        assert generated.resume.sections.summary == "Hi"

    @pytest.mark.asyncio
    async def test_generate_propagates_schema_violation(self, fake_adapter):
        adapter = fake_adapter("groq", ['{"header": {}}'])

        with pytest.raises(SchemaViolation):
            await ResumeGenerator(_gateway([adapter])).generate({"name": "Ada"}, "Engineer", "Job Change")

    @pytest.mark.asyncio
    async def test_enhance_strips_text(self, fake_adapter):
        adapter = fake_adapter("groq", ["\n  Delivered results.\n"])

        enhanced = await ResumeGenerator(_gateway([adapter])).enhance("did stuff")

        assert enhanced.text == "Delivered results."
        assert enhanced.provider_id == "groq"

    @pytest.mark.asyncio
    async def test_enhance_raises_on_aggregate_failure(self, fake_adapter):
        adapter = fake_adapter("groq", [AttemptOutcome.CONTENT_BLOCKED])

        with pytest.raises(AggregateFailure):
            await ResumeGenerator(_gateway([adapter])).enhance("did stuff")
