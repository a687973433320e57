# -*- coding: utf-8 -*-
"""Advisory service client (Qwen / OpenAI-compatible chat completions)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ..config import Settings, settings as default_settings
from .parsing import parse_model_json

logger = logging.getLogger(__name__)


class AdvisoryError(RuntimeError):
    """Raised for any transport, HTTP or parse failure talking to the advisory service."""


@dataclass(frozen=True)
class AdvisorySettings:
    base_url: str
    model: str
    api_key: Optional[str]
    timeout: float
    temperature: float
    max_tokens: int

    @classmethod
    def from_settings(cls, cfg: Settings) -> "AdvisorySettings":
        return cls(
            base_url=cfg.qwen_base_url,
            model=cfg.qwen_model,
            api_key=cfg.qwen_api_key,
            timeout=cfg.qwen_timeout,
            temperature=cfg.qwen_temperature,
            max_tokens=cfg.qwen_max_tokens,
        )


def _completions_url(base_url: str) -> str:
    base = base_url.rstrip("/")
    if base.endswith("/chat/completions"):
        return base
    return f"{base}/chat/completions"


def _extract_content(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list):
        return ""
    out: List[str] = []
    for choice in choices:
        if not isinstance(choice, dict):
            continue
        msg = choice.get("message")
        if isinstance(msg, dict) and isinstance(msg.get("content"), str):
            out.append(msg["content"])
    return "".join(out)


class AdvisoryClient:
    """Remote advisory capability.

    ``is_available()`` is False when no API key is configured; callers must then
    use their local fallback instead of calling ``complete_json``.
    """

    def __init__(
        self,
        cfg: Optional[AdvisorySettings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.cfg = cfg or AdvisorySettings.from_settings(default_settings)
        self._transport = transport

    def is_available(self) -> bool:
        return bool(self.cfg.api_key)

    async def complete_json(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        if not self.is_available():
            raise AdvisoryError("Advisory API key not configured")

        payload = {
            "model": self.cfg.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.cfg.temperature,
            "max_tokens": self.cfg.max_tokens,
            "response_format": {"type": "json_object"},
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.cfg.api_key}",
        }
        url = _completions_url(self.cfg.base_url)

        try:
            async with httpx.AsyncClient(
                timeout=self.cfg.timeout,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                resp = await client.post(url, headers=headers, json=payload)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise AdvisoryError(f"Advisory API error: {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise AdvisoryError(f"Advisory API unreachable: {exc}") from exc
        except ValueError as exc:
            raise AdvisoryError(f"Advisory API returned non-JSON body: {exc}") from exc

        content = _extract_content(data)
        if not content.strip():
            raise AdvisoryError("Advisory API returned empty content")
        try:
            return parse_model_json(content)
        except ValueError as exc:
            logger.debug("advisory raw output: %s", content[:800])
            raise AdvisoryError(str(exc)) from exc
