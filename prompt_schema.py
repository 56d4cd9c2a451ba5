from __future__ import annotations

import json
from typing import Any, Type

from pydantic import BaseModel, ValidationError

from prompt_errors import SchemaValidationError


class Schema:
    """Abstract description of an expected structured value.

    A schema must be able to validate a parsed value, render itself as a type
    description for prompting, and produce a canonical serialization of its
    shape for fingerprinting.
    """

    @property
    def title(self) -> str:
        return type(self).__name__

    def validate(self, value: Any) -> Any:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def canonical_shape(self) -> str:
        raise NotImplementedError


class PydanticSchema(Schema):
    def __init__(self, model: Type[BaseModel]) -> None:
        if not (isinstance(model, type) and issubclass(model, BaseModel)):
            raise TypeError(f"PydanticSchema expects a BaseModel subclass, got {model!r}")
        self.model = model

    @property
    def title(self) -> str:
        return self.model.__name__

    def validate(self, value: Any) -> BaseModel:
        try:
            return self.model.model_validate(value)
        except ValidationError as e:
            raise SchemaValidationError(
                expected=self.describe(),
                value=value,
                errors=e.errors(include_url=False),
                schema_name=self.title,
            ) from e

    def describe(self) -> str:
        return json.dumps(self.model.model_json_schema(), indent=2, ensure_ascii=False)

    def canonical_shape(self) -> str:
        return json.dumps(self.model.model_json_schema(), sort_keys=True, separators=(",", ":"))

    def serialize(self, instance: BaseModel) -> str:
        return instance.model_dump_json()

    def __repr__(self) -> str:
        return f"PydanticSchema({self.title})"


def as_schema(obj: Any) -> Schema:
    if isinstance(obj, Schema):
        return obj
    if isinstance(obj, type) and issubclass(obj, BaseModel):
        return PydanticSchema(obj)
    raise TypeError(f"Cannot use {obj!r} as a schema; pass a Schema or a pydantic BaseModel subclass")
