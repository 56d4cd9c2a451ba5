from __future__ import annotations

from typing import Any, List, Optional


class StructuredPromptError(Exception):
    """Base class for every error raised by the structured prompting layer."""


class RequesterUnconfigured(StructuredPromptError):
    def __init__(self, owner: str = "") -> None:
        msg = "Requester not configured"
        if owner:
            msg += f" for {owner}"
        super().__init__(msg + ". Pass requester=... or create it through a Program that has one.")


class StructuredOutputError(StructuredPromptError):
    """The backend replied, but the reply could not be turned into a valid value."""


class ParseError(StructuredOutputError):
    def __init__(self, raw: str, reason: str) -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(f"Reply is not valid JSON ({reason}): {_truncate(raw)!r}")


class SchemaValidationError(StructuredOutputError):
    def __init__(
        self,
        *,
        expected: str,
        value: Any,
        errors: Optional[List[dict]] = None,
        schema_name: str = "",
    ) -> None:
        self.expected = expected
        self.value = value
        self.errors = list(errors or [])
        self.schema_name = schema_name
        details = "; ".join(
            f"{'.'.join(str(p) for p in e.get('loc', ())) or '<root>'}: {e.get('msg', '')}"
            for e in self.errors
        )
        super().__init__(
            f"Value does not match {schema_name or 'schema'}: {_truncate(repr(value))}"
            + (f" ({details})" if details else "")
            + f"\nExpected:\n{expected}"
        )


def _truncate(s: str, max_chars: int = 300) -> str:
    s = s or ""
    return s if len(s) <= max_chars else (s[:max_chars] + " …")
