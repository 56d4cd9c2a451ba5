from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_PROVIDER = "openai_agents"
DEFAULT_MODEL = "gpt-4o-mini"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def load_env(override: bool = False) -> None:
    """Load environment variables from a local .env file if present.

    Existing environment values win unless override=True.
    """
    load_dotenv(override=override)


def env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(name, default)


@dataclass(frozen=True)
class Settings:
    provider: str = DEFAULT_PROVIDER
    model: str = DEFAULT_MODEL
    log_level: str = "WARNING"


def load_settings() -> Settings:
    return Settings(
        provider=(env_str("PROVIDER") or DEFAULT_PROVIDER).strip().lower(),
        model=env_str("LLM_MODEL") or DEFAULT_MODEL,
        log_level=(env_str("LOG_LEVEL") or "WARNING").strip().upper(),
    )


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.WARNING), format=LOG_FORMAT)
