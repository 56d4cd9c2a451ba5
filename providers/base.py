from __future__ import annotations

from typing import Awaitable, Callable


# (user_text, system_prompt) -> reply text
Requester = Callable[[str, str], Awaitable[str]]


class Provider:
    """Abstract interface for text-generation backends.

    A provider turns a user message plus a system prompt into raw reply text.
    Instances are callable with the Requester signature so they can be handed
    straight to Output, Predictor or Program.
    """

    name: str = "provider"

    async def complete(
        self,
        *,
        text: str,
        system_prompt: str,
    ) -> str:
        raise NotImplementedError

    async def __call__(self, text: str, system_prompt: str) -> str:
        return await self.complete(text=text, system_prompt=system_prompt)
