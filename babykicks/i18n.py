# -*- coding: utf-8 -*-
"""Fixed localized strings returned by the core when advisory content is unavailable."""

from __future__ import annotations

from enum import Enum
from typing import Dict


class Language(str, Enum):
    zh = "zh"
    en = "en"


MESSAGES: Dict[str, Dict[str, str]] = {
    "ai_disclaimer_suffix": {
        "zh": " (AI分析结果仅供参考)",
        "en": " (AI Result - For Reference Only)",
    },
    "movement_low": {
        "zh": "胎动次数偏少",
        "en": "Movement seems lower than standard.",
    },
    "movement_normal": {
        "zh": "胎动正常",
        "en": "Movement looks normal.",
    },
    "movement_guideline": {
        "zh": "医学建议2小时内有效胎动应大于10次，或1小时大于3次。",
        "en": "Standard advice is at least 10 valid movements in 2 hours, or at least 3 in 1 hour.",
    },
    "session_recorded": {
        "zh": "记录已保存",
        "en": "Session recorded.",
    },
    "insight_missing_key": {
        "zh": "请配置API Key以获取建议",
        "en": "API Key missing.",
    },
    "insight_failed_mom": {
        "zh": "无法加载数据 (请重试)",
        "en": "Could not load data.",
    },
    "insight_failed_baby": {
        "zh": "保持轻松心情",
        "en": "Stay relaxed.",
    },
    "insight_failed_medical": {
        "zh": "请咨询医生",
        "en": "Consult your doctor.",
    },
    "insight_failed_nutrition": {
        "zh": "均衡饮食",
        "en": "Balanced diet.",
    },
}

PROMPT_LANGUAGE = {
    Language.zh: "Simplified Chinese (zh-CN)",
    Language.en: "English",
}


def t(language: Language | str, key: str) -> str:
    lang = Language(language).value
    return MESSAGES[key][lang]
