"""Tests for the HTTP routes with a scripted provider chain."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from resumeai.core.dependencies import get_gateway
from resumeai.core.quota import QuotaStatus, get_quota_checker
from resumeai.gateway.gateway import LlmGateway
from resumeai.gateway.registry import ProviderRegistry
from resumeai.gateway.types import AttemptOutcome
from resumeai.main import create_app

RESUME_JSON = json.dumps(
    {
        "header": {"name": "Ada Lovelace", "email": "ada@example.com"},
        "sections": {
            "summary": "Engineer.",
            "experience": [
                {"company": "Analytical Engines", "role": "Engineer", "startDate": "2020", "description": ["Built it"]}
            ],
            "skills": {"languages": ["Python"]},
        },
    }
)

CURRENT_RESUME = {"name": "Ada", "experience": [{"company": "Analytical Engines"}]}


class RecordingQuota:
    def __init__(self, allowed: bool = True, remaining: int | None = None, limit: int | None = None):
        self.status = QuotaStatus(allowed=allowed, remaining=remaining, limit=limit)
        self.checks: list[tuple[str, str]] = []

    async def check(self, user_id: str, feature: str) -> QuotaStatus:
        self.checks.append((user_id, feature))
        return self.status


@pytest.fixture
def make_client(test_settings):
    def _build(adapters=None, quota=None, **settings_overrides) -> TestClient:
        app = create_app(test_settings(**settings_overrides), ProviderRegistry())
        if adapters is not None:
            gateway = LlmGateway([a.config for a in adapters], adapters=adapters)
            app.dependency_overrides[get_gateway] = lambda: gateway
        if quota is not None:
            app.dependency_overrides[get_quota_checker] = lambda: quota
        return TestClient(app)

    return _build


class TestGenerateResume:
    def test_success(self, make_client, fake_adapter):
        adapters = [fake_adapter("groq", [AttemptOutcome.RATE_LIMITED]), fake_adapter("gemini", [f"```json\n{RESUME_JSON}\n```"])]
        quota = RecordingQuota()
        client = make_client(adapters, quota)

        resp = client.post(
            "/api/v1/resume/generate",
            json={"currentResume": CURRENT_RESUME, "targetRole": "Data Engineer"},
            headers={"X-User-Id": "user-1"},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["provider"] == "gemini"
        assert body["data"]["header"]["name"] == "Ada Lovelace"
        assert body["data"]["sections"]["experience"][0]["startDate"] == "2020"
        assert body["data"]["sections"]["projects"] == []
        assert quota.checks == [("user-1", "atsResumeGenerator")]
        assert "Data Engineer" in adapters[1].calls[0].prompt
        assert adapters[1].calls[0].json_mode is True

    def test_missing_resume(self, make_client, fake_adapter):
        adapter = fake_adapter("groq", [RESUME_JSON])
        resp = make_client([adapter]).post("/api/v1/resume/generate", json={"targetRole": "Engineer"})

        assert resp.status_code == 400
        assert resp.json()["detail"]["error"] == "No resume provided"
        assert adapter.calls == []

    def test_quota_checked_before_providers(self, make_client, fake_adapter):
        adapter = fake_adapter("groq", [RESUME_JSON])
        client = make_client([adapter], RecordingQuota(allowed=False, remaining=0, limit=3))

        resp = client.post("/api/v1/resume/generate", json={"currentResume": CURRENT_RESUME})

        assert resp.status_code == 403
        detail = resp.json()["detail"]
        assert detail["error"] == "limit_reached"
        assert detail["limit"] == 3
        assert detail["remaining"] == 0
        assert adapter.calls == []

    def test_all_providers_fail(self, make_client, fake_adapter):
        adapters = [
            fake_adapter("groq", [AttemptOutcome.RATE_LIMITED]),
            fake_adapter("gemini", [AttemptOutcome.SERVER_ERROR]),
        ]
        resp = make_client(adapters).post("/api/v1/resume/generate", json={"currentResume": CURRENT_RESUME})

        assert resp.status_code == 503
        detail = resp.json()["detail"]
        assert detail["error"] == "unavailable"
        assert "rate_limited" not in resp.text
        assert "groq" not in resp.text

    def test_unparsable_output(self, make_client, fake_adapter):
        adapters = [fake_adapter("groq", ["Sorry, I can't do that."]), fake_adapter("gemini", [RESUME_JSON])]
        resp = make_client(adapters).post("/api/v1/resume/generate", json={"currentResume": CURRENT_RESUME})

        assert resp.status_code == 502
        assert resp.json()["detail"]["error"] == "invalid_ai_output"
        assert adapters[1].calls == []

    def test_unparsable_output_falls_through_when_enabled(self, make_client, fake_adapter):
        adapters = [fake_adapter("groq", ["Sorry, I can't do that."]), fake_adapter("gemini", [RESUME_JSON])]
        client = make_client()
        gateway = LlmGateway([a.config for a in adapters], continue_on_unparsable=True, adapters=adapters)
        client.app.dependency_overrides[get_gateway] = lambda: gateway

        resp = client.post("/api/v1/resume/generate", json={"currentResume": CURRENT_RESUME})

        assert resp.status_code == 200
        assert resp.json()["provider"] == "gemini"

    def test_schema_violation(self, make_client, fake_adapter):
        adapter = fake_adapter("groq", ['{"header": {"name": "Ada"}}'])
        resp = make_client([adapter]).post("/api/v1/resume/generate", json={"currentResume": CURRENT_RESUME})

        assert resp.status_code == 502
        assert resp.json()["detail"]["error"] == "invalid_ai_output"
        assert "sections" in resp.json()["detail"]["message"]

    def test_no_providers_configured(self, make_client):
        with make_client() as client:
            resp = client.post("/api/v1/resume/generate", json={"currentResume": CURRENT_RESUME})

        assert resp.status_code == 503
        assert resp.json()["detail"]["error"] == "not_configured"

    def test_gateway_not_initialized(self, make_client):
        client = make_client()  # lifespan not run

        resp = client.post("/api/v1/resume/generate", json={"currentResume": CURRENT_RESUME})

        assert resp.status_code == 503
        assert resp.json() == {"detail": {"error": "not_configured"}}


class TestEnhance:
    def test_success(self, make_client, fake_adapter):
        adapter = fake_adapter("groq", ["  Led a team of five engineers.  "])
        quota = RecordingQuota(remaining=5, limit=10)

        resp = make_client([adapter], quota).post("/api/v1/ai/enhance", json={"text": "managed people"})

        assert resp.status_code == 200
        assert resp.json() == {"enhanced": "Led a team of five engineers.", "provider": "groq", "remaining": 4}
        request = adapter.calls[0]
        assert request.json_mode is False
        assert request.temperature == 0.7
        assert request.max_tokens == 500
        assert quota.checks == [("anonymous", "aiEnhancements")]

    def test_unlimited_quota_has_no_remaining(self, make_client, fake_adapter):
        resp = make_client([fake_adapter("groq", ["Better"])]).post("/api/v1/ai/enhance", json={"text": "ok"})

        assert resp.json()["remaining"] is None

    def test_missing_text(self, make_client, fake_adapter):
        resp = make_client([fake_adapter("groq")]).post("/api/v1/ai/enhance", json={"text": "   "})

        assert resp.status_code == 400

    def test_all_providers_fail(self, make_client, fake_adapter):
        resp = make_client([fake_adapter("groq", [AttemptOutcome.TIMEOUT])]).post(
            "/api/v1/ai/enhance", json={"text": "managed people"}
        )

        assert resp.status_code == 503
        assert resp.json()["detail"]["error"] == "Failed to enhance text"


class TestAnalyses:
    COMPANY_JSON = '{"overallScore": 81, "classification": "Strong Fit", "verdict": "Hire.", "strengths": ["Go"]}'

    def test_company_fit(self, make_client, fake_adapter):
        adapter = fake_adapter("groq", [self.COMPANY_JSON])
        quota = RecordingQuota(remaining=3, limit=5)

        resp = make_client([adapter], quota).post(
            "/api/v1/ai/company",
            json={"resumeText": "Go developer", "company": "Stripe", "targetRole": "Backend Engineer"},
            headers={"X-User-Id": "user-2"},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["provider"] == "groq"
        assert body["remaining"] == 2
        assert body["result"]["overallScore"] == 81
        assert body["result"]["risks"] == []
        assert quota.checks == [("user-2", "companyCompatibility")]
        assert "COMPANY: Stripe" in adapter.calls[0].prompt

    def test_company_requires_name(self, make_client, fake_adapter):
        adapter = fake_adapter("groq", [self.COMPANY_JSON])
        resp = make_client([adapter]).post("/api/v1/ai/company", json={"resumeText": "Go developer"})

        assert resp.status_code == 400
        assert resp.json()["detail"]["error"] == "Company name is required"
        assert adapter.calls == []

    def test_compare(self, make_client, fake_adapter):
        adapter = fake_adapter("groq", ['{"overallScoreA": 55, "overallScoreB": 72, "winner": "B"}'])
        quota = RecordingQuota()

        resp = make_client([adapter], quota).post(
            "/api/v1/ai/compare", json={"resumeA": "first", "resumeB": "second", "targetRole": "SRE"}
        )

        assert resp.status_code == 200
        assert resp.json()["result"]["winner"] == "B"
        assert quota.checks == [("anonymous", "resumeComparison")]

    def test_compare_requires_both_resumes(self, make_client, fake_adapter):
        resp = make_client([fake_adapter("groq")]).post("/api/v1/ai/compare", json={"resumeA": "first"})

        assert resp.status_code == 400
        assert resp.json()["detail"]["error"] == "Both resumes are required"

    def test_interview(self, make_client, fake_adapter):
        adapter = fake_adapter("groq", ['{"questions": [{"question": "Why Kafka?"}], "overallPreparedness": 70}'])
        quota = RecordingQuota()

        resp = make_client([adapter], quota).post(
            "/api/v1/ai/interview", json={"resumeText": "Kafka pipelines", "questionCount": 5}
        )

        assert resp.status_code == 200
        result = resp.json()["result"]
        assert result["totalQuestions"] == 1
        assert result["questions"][0]["question"] == "Why Kafka?"
        assert "Generate 5 interview questions" in adapter.calls[0].prompt
        assert quota.checks == [("anonymous", "interviewQuestions")]

    def test_interview_quota_checked_before_providers(self, make_client, fake_adapter):
        adapter = fake_adapter("groq")
        client = make_client([adapter], RecordingQuota(allowed=False, remaining=0, limit=2))

        resp = client.post("/api/v1/ai/interview", json={"resumeText": "Kafka pipelines"})

        assert resp.status_code == 403
        assert resp.json()["detail"]["error"] == "limit_reached"
        assert adapter.calls == []

    def test_target(self, make_client, fake_adapter):
        adapter = fake_adapter("groq", ['{"tailoredSummary": "Payments engineer.", "keywords": ["PCI"]}'])
        quota = RecordingQuota()

        resp = make_client([adapter], quota).post(
            "/api/v1/ai/target", json={"resumeText": "payments work", "targetCompany": "Stripe"}
        )

        assert resp.status_code == 200
        assert resp.json()["result"]["tailoredSummary"] == "Payments engineer."
        assert resp.json()["remaining"] is None
        assert quota.checks == []

    def test_target_requires_company(self, make_client, fake_adapter):
        resp = make_client([fake_adapter("groq")]).post("/api/v1/ai/target", json={"resumeText": "payments work"})

        assert resp.status_code == 400

    def test_target_companies(self, make_client):
        resp = make_client().get("/api/v1/ai/target")

        assert resp.status_code == 200
        assert "Stripe" in resp.json()["companies"]

    @pytest.mark.parametrize(
        "reply,status,error",
        [
            (AttemptOutcome.SERVER_ERROR, 503, "unavailable"),
            ("I cannot help with that.", 502, "invalid_ai_output"),
            ('{"verdict": "no score"}', 502, "invalid_ai_output"),
        ],
    )
    def test_error_mapping(self, make_client, fake_adapter, reply, status, error):
        resp = make_client([fake_adapter("groq", [reply])]).post(
            "/api/v1/ai/company", json={"resumeText": "Go developer", "company": "Stripe"}
        )

        assert resp.status_code == status
        assert resp.json()["detail"]["error"] == error
        assert "groq" not in resp.text

    def test_not_configured(self, make_client):
        with make_client() as client:
            resp = client.post("/api/v1/ai/compare", json={"resumeA": "first", "resumeB": "second"})

        assert resp.status_code == 503
        assert resp.json()["detail"]["error"] == "not_configured"


class TestStatusRoutes:
    def test_providers_hide_credentials(self, make_client):
        with make_client(groq_api_key="gsk-live-123", gemini_api_key="AIza-live-456") as client:
            resp = client.get("/api/v1/ai/providers")

        assert resp.status_code == 200
        body = resp.json()
        assert [p["provider_id"] for p in body["providers"]] == ["gemini", "groq"]
        assert "gsk-live-123" not in resp.text
        assert "AIza-live-456" not in resp.text

    def test_health(self, make_client):
        with make_client(groq_api_key="gsk-live-123") as client:
            resp = client.get("/api/v1/health")

        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "providers": ["groq"]}

    def test_request_id_header(self, make_client):
        with make_client() as client:
            resp = client.get("/api/v1/health")

        assert resp.headers.get("X-Request-ID")

    def test_metrics(self, make_client):
        with make_client() as client:
            resp = client.get("/metrics")

        assert resp.status_code == 200
        assert "llm_provider_attempts_total" in resp.text
