# -*- coding: utf-8 -*-
"""
Auth capability.

Login is simulated: ``MockGoogleAuthProvider`` hands back a fixed Google
account. A real identity provider can be plugged in by subclassing
``AuthProvider`` without touching the rest of the app.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

from ..kicks.storage import GUEST_ACCOUNT_ID
from .models import AccountInfo, AuthProviderKind

GUEST_ACCOUNT = AccountInfo(id=GUEST_ACCOUNT_ID, provider=AuthProviderKind.guest)


class AuthProvider(ABC):

    @abstractmethod
    async def login(self) -> AccountInfo:
        """Authenticate and return the account to switch storage to."""
        ...

    @abstractmethod
    async def logout(self) -> None:
        ...


class MockGoogleAuthProvider(AuthProvider):

    def __init__(
        self,
        *,
        account_id: str = "google_1092837465",
        email: str = "mommy@gmail.com",
        avatar_url: str = "https://api.dicebear.com/7.x/avataaars/svg?seed=Felix",
        delay_sec: float = 0.0,
    ) -> None:
        self.account = AccountInfo(
            id=account_id,
            provider=AuthProviderKind.google,
            email=email,
            avatar_url=avatar_url,
        )
        self.delay_sec = delay_sec

    async def login(self) -> AccountInfo:
        if self.delay_sec > 0:
            await asyncio.sleep(self.delay_sec)
        return self.account

    async def logout(self) -> None:
        if self.delay_sec > 0:
            await asyncio.sleep(self.delay_sec / 3)
