# -*- coding: utf-8 -*-
"""Insights: Pydantic models."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field

from ..i18n import Language


class WeeklyInsight(BaseModel):
    week: int = Field(..., ge=0)
    mom_symptoms: str = Field("", validation_alias=AliasChoices("mom_symptoms", "momSymptoms"))
    baby_development: str = Field(
        "", validation_alias=AliasChoices("baby_development", "babyDevelopment")
    )
    medical_advice: str = Field("", validation_alias=AliasChoices("medical_advice", "medicalAdvice"))
    nutrition: str = ""
    shopping: str = ""


class WeeklyInsightResponse(BaseModel):
    week: int
    language: Language
    timezone: str
    insight: WeeklyInsight
