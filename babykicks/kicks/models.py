# -*- coding: utf-8 -*-
"""Kicks: Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from ..i18n import Language


class CountMethod(str, Enum):
    STANDARD_HOUR = "1h"
    EXTENDED_TWO_HOUR = "2h"

    @property
    def ceiling_seconds(self) -> int:
        return 3600 if self is CountMethod.STANDARD_HOUR else 7200


class AnomalySeverity(str, Enum):
    none = "none"
    low = "low"
    medium = "medium"
    high = "high"


class CounterStatus(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    SUMMARY = "summary"


class KickSession(BaseModel):
    id: str = Field(..., min_length=1)
    start_time: int = Field(..., ge=0, description="epoch ms")
    end_time: int = Field(..., ge=0, description="epoch ms")
    duration_seconds: int = Field(..., ge=0)
    count: int = Field(0, ge=0, description="debounced valid kicks")
    raw_count: int = Field(0, ge=0, description="total taps")
    method: CountMethod
    week_of_pregnancy: int = Field(0, ge=0)
    anomaly_status: AnomalySeverity = AnomalySeverity.none
    anomaly_reason: Optional[str] = None

    @model_validator(mode="after")
    def _check_ordering(self) -> "KickSession":
        if self.end_time < self.start_time:
            raise ValueError("end_time must not precede start_time")
        if self.count > self.raw_count:
            raise ValueError("count must not exceed raw_count")
        return self

    @property
    def is_analyzed(self) -> bool:
        return self.anomaly_reason is not None

    def with_analysis(self, analysis: "AnomalyAnalysis") -> Optional["KickSession"]:
        """Copy with the anomaly fields set, or None if an analysis was already applied."""
        if self.is_analyzed:
            return None
        return self.model_copy(
            update={"anomaly_status": analysis.severity, "anomaly_reason": analysis.message}
        )


class AnomalyAnalysis(BaseModel):
    is_anomaly: bool = Field(False, validation_alias=AliasChoices("is_anomaly", "isAnomaly"))
    severity: AnomalySeverity = AnomalySeverity.none
    message: str = ""
    medical_context: str = Field(
        "", validation_alias=AliasChoices("medical_context", "medicalContext")
    )

    @field_validator("severity", mode="before")
    @classmethod
    def _lower_severity(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower() or AnomalySeverity.none.value
        return value


class CounterStartRequest(BaseModel):
    method: CountMethod = CountMethod.STANDARD_HOUR


class CounterStateResponse(BaseModel):
    status: CounterStatus
    method: CountMethod
    elapsed_seconds: int = Field(0, ge=0)
    remaining_seconds: int = Field(0, ge=0)
    count: int = Field(0, ge=0)
    raw_count: int = Field(0, ge=0)
    start_time: Optional[int] = None
    summary: Optional[KickSession] = None


class HistoryResponse(BaseModel):
    account_id: str
    count: int
    items: List[KickSession]


class AnalysisContext(BaseModel):
    """Inputs sent to the advisory service for one session."""

    week: int
    method: CountMethod
    count: int
    raw_count: int
    duration_seconds: int
    personal_average: float
    hour_of_day: int = Field(..., ge=0, le=23)
    language: Language
