from __future__ import annotations

import logging
import os
from typing import Any, Optional

from .base import Provider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"


class OpenAIChatProvider(Provider):
    """Plain chat-completions backend: one system message, one user message."""

    name = "openai_chat"

    def __init__(self, model: Optional[str] = None, client: Any = None) -> None:
        if client is None:
            try:
                from openai import AsyncOpenAI  # type: ignore
            except ImportError as e:  # pragma: no cover
                raise ImportError("openai>=1.0 required for the openai_chat provider.") from e
            client = AsyncOpenAI()
        self._client = client
        self.model = model or os.getenv("LLM_MODEL", DEFAULT_MODEL)

    async def complete(
        self,
        *,
        text: str,
        system_prompt: str,
    ) -> str:
        logger.debug("chat.completions request model=%s chars=%d", self.model, len(text))
        res = await self._client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": text},
            ],
        )
        content = res.choices[0].message.content
        return content if isinstance(content, str) else ""
