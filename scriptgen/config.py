from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from scriptgen.errors import ConfigurationError

MODES = ("live", "offline")
CHECK_PROVIDERS = ("openai", "gemini")

DEFAULT_MODEL = "gpt-4.1-2025-04-14"
DEFAULT_GEMINI_MODEL = "gemini-flash-latest"


@dataclass(frozen=True)
class SessionConfig:
    """Everything a generation session needs from the environment.

    Built once at session start and handed to the adapters; nothing reads
    API keys from the process environment after that.
    """

    mode: str = "offline"
    openai_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    check_provider: str = "openai"
    gemini_model: str = DEFAULT_GEMINI_MODEL
    max_output_tokens: int = 2000
    check_max_output_tokens: int = 1000
    temperature: Optional[float] = None
    check_temperature: float = 0.1
    offline_seed: Optional[int] = None
    timeout_seconds: Optional[float] = None

    def __post_init__(self) -> None:
        if self.mode not in MODES:
            raise ConfigurationError(f"Unknown mode: {self.mode}. Expected one of {', '.join(MODES)}.")
        if self.check_provider not in CHECK_PROVIDERS:
            raise ConfigurationError(
                f"Unknown check provider: {self.check_provider}. "
                f"Expected one of {', '.join(CHECK_PROVIDERS)}."
            )

    @property
    def check_model(self) -> str:
        if self.check_provider == "gemini":
            return self.gemini_model
        return self.model

    def require_live_keys(self) -> None:
        missing = []
        if not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if self.check_provider == "gemini" and not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")
        if missing:
            raise ConfigurationError(
                "Missing required API keys: "
                f"{', '.join(missing)}. Create a .env file from .env.example and set the keys."
            )

    @classmethod
    def from_env(cls, mode: Optional[str] = None, env_file: Optional[Path] = None) -> "SessionConfig":
        load_dotenv(env_file)
        openai_key = os.getenv("OPENAI_API_KEY") or None
        resolved_mode = mode or os.getenv("SCRIPTGEN_MODE") or ("live" if openai_key else "offline")
        return cls(
            mode=resolved_mode,
            openai_api_key=openai_key,
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            model=_env("SCRIPTGEN_MODEL", DEFAULT_MODEL),
            check_provider=_env("SCRIPTGEN_CHECK_PROVIDER", "openai"),
            gemini_model=_env("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            max_output_tokens=int(_env("SCRIPTGEN_MAX_OUTPUT_TOKENS", "2000")),
            check_max_output_tokens=int(_env("SCRIPTGEN_CHECK_MAX_TOKENS", "1000")),
            temperature=_optional_float("SCRIPTGEN_TEMPERATURE"),
            check_temperature=float(_env("SCRIPTGEN_CHECK_TEMPERATURE", "0.1")),
            offline_seed=_optional_int("SCRIPTGEN_OFFLINE_SEED"),
            timeout_seconds=_optional_float("SCRIPTGEN_TIMEOUT_SECONDS"),
        )


def _env(key: str, default: str) -> str:
    return os.getenv(key) or default


def _optional_float(key: str) -> Optional[float]:
    value = os.getenv(key)
    return float(value) if value else None


def _optional_int(key: str) -> Optional[int]:
    value = os.getenv(key)
    return int(value) if value else None
