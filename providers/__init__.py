from __future__ import annotations

import os
from typing import Optional

from .base import Provider, Requester


def get_provider(name: Optional[str] = None, model: Optional[str] = None) -> Provider:
    provider_name = (name or os.getenv("PROVIDER") or "openai_agents").strip().lower()
    if provider_name in {"openai_agents", "openai-agents", "agents"}:
        from .openai_agents import OpenAIAgentsProvider  # lazy import
        return OpenAIAgentsProvider(model=model)
    if provider_name in {"openai", "openai_chat", "openai-chat"}:
        from .openai_chat import OpenAIChatProvider  # lazy import
        return OpenAIChatProvider(model=model)

    raise ValueError(
        f"Unknown provider '{provider_name}'. Implement a Provider and register it in providers/__init__.py."
    )


__all__ = ["Provider", "Requester", "get_provider"]
