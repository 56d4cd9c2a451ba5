from __future__ import annotations

import functools
import inspect
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

from fingerprint import hash_string
from prompt_errors import ParseError, RequesterUnconfigured, StructuredOutputError
from prompt_schema import Schema, as_schema
from providers.base import Requester

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============== Records ===============
class Example(BaseModel):
    """A literal input/output demonstration used for few-shot prompting."""
    model_config = ConfigDict(frozen=True)
    input: str
    output: str


class CallRecord(BaseModel):
    model_config = ConfigDict(frozen=True)
    input: str
    output: str


class TrainResult(BaseModel):
    hash: int
    examples: Dict[int, List[Example]] = Field(default_factory=dict)
    accepted: int = 0
    rejected: int = 0


# =============== Base ===============
class Base:
    """Owns a Requester and logs every (input, output) pair it issues."""

    def __init__(self, requester: Optional[Requester] = None) -> None:
        self.requester = requester
        self.calls: List[CallRecord] = []

    async def request(self, input: str, system_prompt: str) -> str:
        if self.requester is None:
            raise RequesterUnconfigured(type(self).__name__)
        logger.debug("%s request: %d chars, system prompt %d chars",
                     type(self).__name__, len(input), len(system_prompt))
        output = await self.requester(input, system_prompt)
        self.calls.append(CallRecord(input=input, output=output))
        return output


# =============== Output ===============
_FENCE = re.compile(r"^\s*```[a-zA-Z]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


class Output(Base):
    def __init__(self, schema: Any, requester: Optional[Requester] = None) -> None:
        super().__init__(requester)
        self.schema: Schema = as_schema(schema)

    def describe(self) -> str:
        return self.schema.describe()

    def canonical_shape(self) -> str:
        return self.schema.canonical_shape()

    def parse(self, raw: str) -> Any:
        """Decode a reply as JSON, tolerating a surrounding markdown code fence."""
        m = _FENCE.match(raw or "")
        text = m.group(1) if m else raw
        try:
            return json.loads(text)
        except (TypeError, ValueError) as e:
            raise ParseError(raw, str(e)) from e

    def validate(self, data: Any) -> Any:
        """Validate against the schema; strings are treated as raw reply text and parsed first."""
        if isinstance(data, str):
            data = self.parse(data)
        return self.validate_parsed(data)

    def validate_parsed(self, value: Any) -> Any:
        """Validate an already decoded value; never parses again."""
        return self.schema.validate(value)


# =============== Predictor ===============
@dataclass(frozen=True)
class PredictorConfig:
    output: Output
    examples: Tuple[Example, ...] = ()
    requester: Optional[Requester] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "examples", tuple(self.examples or ()))


SYSTEM_PROMPT_PREAMBLE = (
    "You are an expert at turning any plain text into json that matches a JSON schema.\n"
    "Respond with a json payload that matches the following JSON schema exactly:\n"
)


class Predictor(Base):
    """One structured call: system prompt from schema + examples, request, parse, validate."""

    def __init__(self, config: PredictorConfig) -> None:
        super().__init__(config.requester)
        self.config = config
        self.examples: List[Example] = list(config.examples)

    @property
    def output(self) -> Output:
        return self.config.output

    def add_example(self, example: Example) -> None:
        self.examples.append(example)

    def system_prompt(self) -> str:
        prompt = f"{SYSTEM_PROMPT_PREAMBLE}```\n{self.output.describe()}\n```"
        if self.examples:
            prompt += "\n----\n\nHere are some examples:\n\n"
            for example in self.examples:
                prompt += f"Input: {example.input}\nOutput: {example.output}\n\n"
        return prompt

    async def forward(self, prompt: str) -> Any:
        system_prompt = self.system_prompt()
        raw = await self.request(prompt, system_prompt)
        data = self.output.parse(raw)
        result = self.output.validate_parsed(data)
        logger.debug("predictor %s validated reply", self.output.schema.title)
        return result


# =============== Program ===============
@dataclass(frozen=True)
class ExecProps:
    input: str
    predict: Callable[[PredictorConfig], Predictor]


ExecFn = Callable[[ExecProps], Union[Awaitable[T], T]]
Evaluate = Callable[[Any], Union[Awaitable[bool], bool]]


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class Program(Generic[T]):
    """A composition of Predictor calls with a content fingerprint.

    `exec` receives ExecProps(input, predict) and may create and chain any
    number of predictors through `predict`. When `steps` is given it is the
    identity of the composition logic used by `hash`; otherwise the source
    text of `exec` is used.
    """

    def __init__(
        self,
        exec: ExecFn,
        *,
        steps: Optional[Sequence[str]] = None,
        requester: Optional[Requester] = None,
    ) -> None:
        self._exec = exec
        self.steps: Optional[Tuple[str, ...]] = tuple(steps) if steps is not None else None
        self.requester = requester
        self.predictors: List[Predictor] = []
        self._learned: Dict[int, List[Example]] = {}

    @property
    def calls(self) -> List[CallRecord]:
        return [c for p in self.predictors for c in p.calls]

    def _predict(self, config: PredictorConfig) -> Predictor:
        slot = len(self.predictors)
        if config.requester is None and self.requester is not None:
            config = PredictorConfig(output=config.output, examples=config.examples, requester=self.requester)
        predictor = Predictor(config)
        for example in self._learned.get(slot, []):
            predictor.add_example(example)
        self.predictors.append(predictor)
        logger.debug("registered predictor #%d (%s)", slot, config.output.schema.title)
        return predictor

    async def forward(self, input: str) -> T:
        self.predictors = []
        props = ExecProps(input=input, predict=self._predict)
        return await _resolve(self._exec(props))

    def _logic_text(self) -> str:
        if self.steps is not None:
            return json.dumps(list(self.steps), separators=(",", ":"))
        fn = self._exec
        while isinstance(fn, functools.partial):
            fn = fn.func
        if not (inspect.isfunction(fn) or inspect.ismethod(fn)):
            fn = type(fn)
        try:
            src = inspect.getsource(fn)
        except (OSError, TypeError):
            src = f"{getattr(fn, '__module__', '')}.{getattr(fn, '__qualname__', type(fn).__qualname__)}"
        return re.sub(r"\s+", "", src)

    @property
    def hash(self) -> int:
        shapes = [p.output.canonical_shape() for p in self.predictors]
        return hash_string(self._logic_text() + "".join(shapes))

    @property
    def learned_examples(self) -> Dict[int, List[Example]]:
        return {slot: list(examples) for slot, examples in self._learned.items()}

    def _slots_full(self, example_count: int) -> bool:
        n = len(self.predictors)
        return n > 0 and all(len(self._learned.get(i, [])) >= example_count for i in range(n))

    async def train(
        self,
        example_count: int,
        evaluate: Evaluate,
        inputs: Sequence[str] = (),
    ) -> TrainResult:
        """Collect up to `example_count` accepted examples per predictor slot.

        Each input is run through `forward`; when `evaluate` accepts the
        program's output, the reply each predictor got in that run becomes a
        few-shot example for the predictor registered at the same position in
        later runs.

        With no inputs nothing is run and only the fingerprint is returned.
        """
        if example_count < 1:
            raise ValueError(f"example_count must be >= 1, got {example_count}")
        accepted = rejected = 0
        for text in inputs:
            if self._slots_full(example_count):
                break
            try:
                output = await self.forward(text)
            except StructuredOutputError as e:
                rejected += 1
                logger.warning("training run failed for input %r: %s", text[:80], e)
                continue
            if not await _resolve(evaluate(output)):
                rejected += 1
                logger.debug("evaluate rejected output for input %r", text[:80])
                continue
            accepted += 1
            for slot, predictor in enumerate(self.predictors):
                if not predictor.calls:
                    continue
                bucket = self._learned.setdefault(slot, [])
                if len(bucket) >= example_count:
                    continue
                last = predictor.calls[-1]
                bucket.append(Example(input=last.input, output=last.output))

        logger.info("training done: accepted=%d rejected=%d slots=%d", accepted, rejected, len(self._learned))
        return TrainResult(
            hash=self.hash,
            examples=self.learned_examples,
            accepted=accepted,
            rejected=rejected,
        )
