# -*- coding: utf-8 -*-
"""Profile: Pydantic models."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from ..i18n import Language


class AuthProviderKind(str, Enum):
    google = "google"
    guest = "guest"


class AccountInfo(BaseModel):
    id: str = Field(..., min_length=1)
    provider: AuthProviderKind
    email: Optional[str] = None
    avatar_url: Optional[str] = None

    @property
    def is_guest(self) -> bool:
        return self.provider is AuthProviderKind.guest


def _check_timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {value}") from exc
    return value


class UserProfile(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)
    due_date: date
    language: Language = Language.zh
    timezone: str = Field(..., description="IANA zone name, e.g. Asia/Shanghai")
    account: Optional[AccountInfo] = None

    @field_validator("timezone")
    @classmethod
    def _valid_timezone(cls, value: str) -> str:
        return _check_timezone(value)

    @property
    def is_authenticated(self) -> bool:
        return self.account is not None and not self.account.is_guest

    @property
    def account_id(self) -> Optional[str]:
        """Storage identity: None for guests and profiles without an account."""
        return self.account.id if self.is_authenticated else None


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=64)
    due_date: Optional[date] = None
    language: Optional[Language] = None
    timezone: Optional[str] = None

    @field_validator("timezone")
    @classmethod
    def _valid_timezone(cls, value: Optional[str]) -> Optional[str]:
        return _check_timezone(value) if value is not None else None


class PregnancyProgress(BaseModel):
    due_date: date
    today: date
    days_remaining: int
    weeks: int = Field(0, ge=0, le=42)
    days: int = Field(0, ge=0, le=6)


class AuthStatusResponse(BaseModel):
    authenticated: bool
    account: Optional[AccountInfo] = None
    history_count: int = Field(0, ge=0)
