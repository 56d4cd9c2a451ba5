from __future__ import annotations

import logging
import os
from typing import Optional

from .base import Provider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"


class OpenAIAgentsProvider(Provider):
    name = "openai_agents"

    def __init__(self, model: Optional[str] = None, agent_name: str = "Structured Predictor") -> None:
        # Lazy import so that other providers can be used without this dep present
        try:
            from agents import Agent, Runner  # type: ignore
            self._Agent = Agent
            self._Runner = Runner
        except ImportError as e:  # pragma: no cover
            raise ImportError(
                "OpenAI Agents SDK ('agents') not installed. Install 'openai-agents' or switch PROVIDER."
            ) from e
        self.model = model or os.getenv("LLM_MODEL", DEFAULT_MODEL)
        self.agent_name = agent_name

    async def _run(self, agent, input):
        return await self._Runner.run(agent, input=input)

    async def complete(
        self,
        *,
        text: str,
        system_prompt: str,
    ) -> str:
        agent = self._Agent(name=self.agent_name, instructions=system_prompt, model=self.model)
        logger.debug("agents request model=%s chars=%d", self.model, len(text))
        res = await self._run(agent, input=text)
        out = res.final_output
        if out is None:
            return ""
        return out if isinstance(out, str) else str(out)
