"""Test configuration and fixtures."""

from typing import List, Optional, Tuple

import pytest
from pydantic import BaseModel

from structured_prompting import Output


class Answer(BaseModel):
    answer: str


class Score(BaseModel):
    score: int
    reason: Optional[str] = None


class StubRequester:
    """Async requester returning canned replies in order (last one repeats)."""

    def __init__(self, *replies: str) -> None:
        self.replies = list(replies) or [""]
        self.received: List[Tuple[str, str]] = []

    async def __call__(self, text: str, system_prompt: str) -> str:
        self.received.append((text, system_prompt))
        idx = min(len(self.received) - 1, len(self.replies) - 1)
        return self.replies[idx]


@pytest.fixture
def stub():
    return StubRequester


@pytest.fixture
def answer_output():
    return Output(Answer)


@pytest.fixture
def score_output():
    return Output(Score)
