# -*- coding: utf-8 -*-
"""Prompt builders for weekly insights and kick-session anomaly analysis."""

from __future__ import annotations

from ..i18n import PROMPT_LANGUAGE, Language

SYSTEM_PROMPT = (
    "You are a prenatal care assistant. Return STRICT JSON only. "
    "Do NOT wrap in markdown or code fences. "
    "Output MUST start with '{' and end with '}'. "
    "Your output is for reference only and must not be presented as a diagnosis."
)


def build_insight_prompt(week: int, language: Language, timezone: str) -> str:
    return (
        f"I am currently in week {week} of pregnancy.\n"
        f"Location/Timezone: {timezone}.\n"
        f"Language: {PROMPT_LANGUAGE[language]}.\n"
        "\n"
        "Provide a JSON response with 5 specific categories.\n"
        "\n"
        "FORMATTING RULES:\n"
        '1. Use a numbered list for content (e.g. "1. First point\\n2. Second point").\n'
        "2. Use the escaped newline sequence '\\n' for line breaks inside JSON strings.\n"
        "3. Keep each category to at most 3-4 points so the response is not truncated.\n"
        "\n"
        'For "medicalAdvice", give checkups and vaccines relevant to this week based on the '
        "location's medical system (e.g. RSV or Tdap in the US, NT or glucose tolerance screening in China).\n"
        'For "shopping", suggest items relevant to the gestational stage.\n'
        "\n"
        "Schema:\n"
        "{\n"
        '  "momSymptoms": "Physiological changes for mom",\n'
        '  "babyDevelopment": "Organ and brain development updates",\n'
        '  "medicalAdvice": "Checkups and vaccines based on location",\n'
        '  "nutrition": "Dietary focus for this week",\n'
        '  "shopping": "Recommended purchases"\n'
        "}\n"
    )


def build_anomaly_prompt(
    *,
    week: int,
    method: str,
    count: int,
    raw_count: int,
    duration_seconds: int,
    personal_average: float,
    hour_of_day: int,
    language: Language,
) -> str:
    return (
        "Analyze a fetal movement counting session.\n"
        f"Language: {PROMPT_LANGUAGE[language]}.\n"
        "\n"
        "Context:\n"
        f"- Gestational Week: {week}\n"
        f"- Method: {method}\n"
        f"- Valid Count: {count}\n"
        f"- Raw Taps: {raw_count}\n"
        f"- Duration: {duration_seconds // 60} min\n"
        "\n"
        "History Context:\n"
        f"- User usually averages {personal_average:.1f} valid kicks during this time of day ({hour_of_day}:00).\n"
        "\n"
        "Task: Determine if this is an anomaly.\n"
        "- Compare against the medical standard (10 in 2h, or more than 3 in 1h).\n"
        "- Compare against personal history (is it below 50% of their normal?).\n"
        "\n"
        "Response JSON:\n"
        "{\n"
        '  "isAnomaly": true or false,\n'
        '  "severity": "low" | "medium" | "high" | "none",\n'
        '  "message": "Reason for the status, explaining why, plus a suggestion.",\n'
        '  "medicalContext": "General medical guideline context."\n'
        "}\n"
    )
