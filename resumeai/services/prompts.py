"""Prompt builders for resume rewriting, text enhancement and resume analyses."""

from __future__ import annotations

import json
from typing import Any

RESUME_SYSTEM_PROMPT = """You are an expert Resume writer and ATS optimizer.
Your goal is to normalize resume data into a strict JSON schema and then rewrite content to be high-impact, ATS-friendly, and role-optimized.
You MUST preserve all factual information, dates, and names.
You MUST NOT invent metrics or experiences."""

ENHANCE_SYSTEM_PROMPT = """You are a professional resume writer. Your task is to enhance the given text to make it more professional, impactful, and ATS-friendly.

Rules:
- Keep the same meaning but use stronger action verbs
- Quantify achievements where possible (add realistic metrics if none provided)
- Make it concise and professional
- Use industry-standard terminology
- Return ONLY the enhanced text, no explanations or quotes"""

_RESUME_TEMPLATE = """Transform the following parsed resume data into a normalized, ATS-optimized JSON structure for a "{role}" position ({profile} level).

INPUT DATA:
{resume_json}

STRICT OUTPUT SCHEMA (JSON ONLY):
{{
    "header": {{ "name": "...", "email": "...", "phone": "...", "location": "...", "linkedin": "..." }},
    "sections": {{
        "summary": "Rewrite to identify as {role}. Keep SAME length. Use strong keywords.",
        "experience": [
            {{
                "company": "...", "role": "...", "startDate": "...", "endDate": "...",
                "description": [
                    "Rewrite each bullet using Action + Context + Result format.",
                    "Do NOT shorten. Preserve technical details.",
                    "Ensure {role} keywords are naturally integrated."
                ]
            }}
        ],
        "projects": [
            {{
                "name": "...",
                "technologies": ["List", "Tools"],
                "description": ["Rewrite to emphasize technical depth and outcome."]
            }}
        ],
        "skills": {{
            "languages": [], "frontend": [], "backend": [], "tools": [], "frameworks": []
        }},
        "education": [
             {{ "institution": "...", "degree": "...", "startDate": "...", "endDate": "..." }}
        ]
    }}
}}

RULES:
1. PRESERVE ALL DATES, COMPANIES, AND TITLES EXACTLY.
2. DO NOT REMOVE CONTENT. If a section exists in input, it MUST exist in output.
3. OPTIMIZE FOR ATS: Use standard headings and keywords for {role}.
4. NO MARKDOWN. RETURN PURE JSON."""


def build_resume_prompt(current_resume: dict[str, Any], target_role: str, profile: str) -> str:
    body = _RESUME_TEMPLATE.format(
        role=target_role,
        profile=profile,
        resume_json=json.dumps(current_resume, indent=2, ensure_ascii=False),
    )
    return f"{RESUME_SYSTEM_PROMPT}\n\n{body}"


def build_enhance_prompt(text: str) -> str:
    return f"{ENHANCE_SYSTEM_PROMPT}\n\nEnhance this resume text:\n\n{text}"


# Resume analyses. Each call gets its own system line in front of the body.

COMPANY_SYSTEM_PROMPT = "You are a hiring committee evaluating risk and readiness. Return ONLY valid JSON."

_COMPANY_TEMPLATE = """You are a hiring committee member evaluating how well a candidate fits a specific company. Analyze the resume against the company's known culture, tech stack, and hiring patterns.

RESUME:
{resume_text}

COMPANY: {company}
TARGET ROLE: {role}

Evaluate compatibility across 30 parameters in these categories:
- Skill Match (10 params): Core tech alignment, tool proficiency, domain knowledge
- Experience Match (10 params): Role relevance, seniority fit, industry experience
- Culture & Hiring Fit (10 params): Communication style, values alignment, growth mindset

Return ONLY valid JSON (no markdown):
{{
  "overallScore": <0-100>,
  "classification": "<Strong Fit/Good Fit/Risky/Poor Fit>",
  "verdict": "<2-3 sentence hiring recommendation>",
  "categories": [
    {{
      "category": "<category name>",
      "score": <0-100>,
      "parameters": [
        {{"name": "<param>", "score": <0-100>, "analysis": "<brief analysis>"}}
      ]
    }}
  ],
  "strengths": ["<strength1>", "<strength2>"],
  "risks": ["<risk1>", "<risk2>"],
  "recommendations": ["<action1>", "<action2>"]
}}

Classification Guide:
- 80-100: Strong Fit - High chance of getting interview
- 60-79: Good Fit - Decent chance, minor gaps
- 40-59: Risky - Significant gaps, needs improvement
- 0-39: Poor Fit - Major misalignment"""

COMPARE_SYSTEM_PROMPT = "You are a senior technical recruiter. Return ONLY valid JSON, no markdown or code blocks."

_COMPARE_TEMPLATE = """You are a senior technical recruiter with 15+ years of hiring experience. Compare these two resumes for the role of {role}.

RESUME A:
{resume_a}

RESUME B:
{resume_b}

Evaluate EACH resume using hiring signals and return a detailed comparison.

Return ONLY valid JSON (no markdown, no code blocks):
{{
  "overallScoreA": <0-100>,
  "overallScoreB": <0-100>,
  "winner": "<A/B/TIE>",
  "verdict": "<2-3 sentence hiring recommendation>",
  "parameters": [
    {{
      "name": "<parameter name>",
      "category": "<Technical Strength/Project Quality/Experience & Impact>",
      "scoreA": <0-100>,
      "scoreB": <0-100>,
      "winner": "<A/B/TIE>",
      "analysis": "<brief comparison analysis>"
    }}
  ]
}}

PARAMETERS TO EVALUATE:
Technical Strength: {technical}
Project Quality: {projects}
Experience & Impact: {experience}"""

COMPARISON_PARAMETERS = {
    "technical": (
        "Core Skill Overlap",
        "Skill Depth Evidence",
        "Real-World Usage Proof",
        "Tooling Maturity",
        "Role Relevance",
        "Stack Freshness",
        "System Exposure",
        "Learning Velocity",
    ),
    "projects": (
        "Project Complexity",
        "Ownership",
        "Business Impact",
        "Scalability",
        "Originality",
        "Engineering Clarity",
    ),
    "experience": (
        "Quantified Results",
        "Action Verbs",
        "Responsibility Growth",
        "Collaboration",
        "Leadership",
        "Production Exposure",
    ),
}

INTERVIEW_SYSTEM_PROMPT = (
    "You are a senior interviewer. Return ONLY valid JSON, no markdown or code blocks. "
    "Generate ALL requested questions."
)

_INTERVIEW_TEMPLATE = """You are a senior interviewer with expertise in exposing depth and honesty in candidates. Analyze this resume and generate targeted interview questions.

RESUME:
{resume_text}

TARGET ROLE: {role}

Generate {count} interview questions that would effectively evaluate this candidate. Focus on:
1. Verifying claimed skills and experience
2. Testing technical depth
3. Questioning project decisions
4. Behavioral assessment

Return ONLY valid JSON (no markdown, no code blocks):
{{
  "totalQuestions": <number>,
  "questions": [
    {{
      "question": "<the interview question>",
      "type": "<technical/project/behavioral/scenario/trap/scaling>",
      "difficulty": "<Easy/Medium/Hard>",
      "intent": "<what this question aims to verify>"
    }}
  ],
  "weaknessAreas": ["<area1>", "<area2>"],
  "overallPreparedness": <0-100>,
  "tips": ["<preparation tip 1>", "<preparation tip 2>"]
}}"""

TAILOR_SYSTEM_PROMPT = """You are an expert resume consultant specializing in tailoring resumes for specific companies.

Your task:
1. Analyze the resume and the target company
2. Suggest improvements to match the company's culture and requirements
3. Recommend keywords that would help pass ATS systems at this company
4. Rewrite the professional summary to target this specific company

Return a JSON object with:
{
  "tailoredSummary": "New summary tailored for the company",
  "suggestions": ["suggestion 1", "suggestion 2"],
  "keywords": ["keyword1", "keyword2"],
  "score": 85
}
"score" is the ATS compatibility score, 0-100."""

# Resume text is cut before it goes into a prompt
COMPANY_RESUME_CHARS = 3000
COMPARE_RESUME_CHARS = 2000
INTERVIEW_RESUME_CHARS = 3000


def build_company_prompt(resume_text: str, company: str, target_role: str) -> str:
    body = _COMPANY_TEMPLATE.format(
        resume_text=resume_text[:COMPANY_RESUME_CHARS],
        company=company,
        role=target_role,
    )
    return f"{COMPANY_SYSTEM_PROMPT}\n\n{body}"


def build_compare_prompt(resume_a: str, resume_b: str, target_role: str) -> str:
    body = _COMPARE_TEMPLATE.format(
        role=target_role,
        resume_a=resume_a[:COMPARE_RESUME_CHARS],
        resume_b=resume_b[:COMPARE_RESUME_CHARS],
        **{key: ", ".join(names) for key, names in COMPARISON_PARAMETERS.items()},
    )
    return f"{COMPARE_SYSTEM_PROMPT}\n\n{body}"


def build_interview_prompt(resume_text: str, target_role: str, question_count: int) -> str:
    body = _INTERVIEW_TEMPLATE.format(
        resume_text=resume_text[:INTERVIEW_RESUME_CHARS],
        role=target_role,
        count=question_count,
    )
    return f"{INTERVIEW_SYSTEM_PROMPT}\n\n{body}"


def build_tailor_prompt(resume_text: str, target_company: str) -> str:
    return f"{TAILOR_SYSTEM_PROMPT}\n\nTarget Company: {target_company}\n\nResume:\n{resume_text}"
