from __future__ import annotations

import argparse
import asyncio
import importlib
import json
import sys
from typing import Any, List, Optional

from env import configure_logging, load_env, load_settings
from prompt_errors import StructuredPromptError
from providers import get_provider
from structured_prompting import Example, Output, Predictor, PredictorConfig


def load_import_path(dotted_path: str) -> Any:
    """Import `pkg.module:Attr` (or `pkg.module.Attr`) and return the attribute."""
    if ":" in dotted_path:
        module_path, attr_name = dotted_path.split(":", 1)
    else:
        module_path, _, attr_name = dotted_path.rpartition(".")
    if not module_path or not attr_name:
        raise ValueError(f"Expected 'module:Attr', got '{dotted_path}'")
    mod = importlib.import_module(module_path)
    return getattr(mod, attr_name)


def load_examples(path: str) -> List[Example]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("examples") or []
    examples = []
    for item in data:
        out = item.get("output", "")
        if not isinstance(out, str):
            out = json.dumps(out, ensure_ascii=False)
        examples.append(Example(input=str(item.get("input", "")), output=out))
    return examples


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Ask a backend for JSON matching a pydantic model")
    p.add_argument("prompt", help="Instruction / input text")
    p.add_argument("--schema", required=True, help="Import path of a pydantic model, e.g. mypkg.models:Answer")
    p.add_argument("--examples", dest="examples_path", default=None, help="JSON file with [{input, output}, ...]")
    p.add_argument("--provider", default=None, help="Provider name (openai_agents, openai_chat)")
    p.add_argument("--model", default=None, help="LLM model id")
    p.add_argument("--log-level", dest="log_level", default=None, help="Logging level")
    p.add_argument("--show-prompt", dest="show_prompt", action="store_true", help="Print the system prompt and exit")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    load_env()
    settings = load_settings()
    args = parse_args(argv)
    configure_logging(args.log_level or settings.log_level)

    output = Output(load_import_path(args.schema))
    examples = load_examples(args.examples_path) if args.examples_path else []

    if args.show_prompt:
        print(Predictor(PredictorConfig(output=output, examples=examples)).system_prompt())
        return 0

    provider = get_provider(args.provider or settings.provider, model=args.model or settings.model)
    predictor = Predictor(PredictorConfig(output=output, examples=examples, requester=provider))
    try:
        res = asyncio.run(predictor.forward(args.prompt))
    except StructuredPromptError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(res.model_dump_json(indent=2) if hasattr(res, "model_dump_json") else json.dumps(res, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
