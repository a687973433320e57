from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the kick-counting backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.data_root: Path = Path(
            os.environ.get("BABYKICKS_DATA_ROOT") or data_root_default
        ).expanduser()
        self.db_path: Path = Path(
            os.environ.get("BABYKICKS_DB_PATH") or (self.data_root / "babykicks.db")
        ).expanduser()

        # Used until the user has saved a profile.
        self.default_language: str = os.environ.get("BABYKICKS_DEFAULT_LANGUAGE", "zh")
        self.default_timezone: str = os.environ.get(
            "BABYKICKS_DEFAULT_TIMEZONE", "Asia/Shanghai"
        )

        self.tick_sec: float = float(os.environ.get("BABYKICKS_TICK_SEC", "1.0"))
        self.auth_delay_sec: float = float(
            os.environ.get("BABYKICKS_AUTH_DELAY_SEC", "0")
        )

        # Advisory service (Qwen-compatible). No key means degraded mode.
        self.qwen_api_key: str | None = os.environ.get("QWEN_API_KEY") or None
        self.qwen_base_url: str = os.environ.get(
            "QWEN_BASE_URL", "https://dashscope.aliyuncs.com/compatible-mode/v1"
        )
        self.qwen_model: str = os.environ.get("QWEN_MODEL", "qwen-plus")
        self.qwen_timeout: float = float(os.environ.get("QWEN_TIMEOUT", "30"))
        self.qwen_max_tokens: int = int(os.environ.get("QWEN_MAX_TOKENS", "1024"))
        self.qwen_temperature: float = float(os.environ.get("QWEN_TEMPERATURE", "0.2"))

        cors = os.environ.get("BABYKICKS_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()
