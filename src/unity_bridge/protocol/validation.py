"""
Parameter validation.

Each call declares its parameters as a pydantic model deriving from
``CallParams``. Field names are snake_case in Python and camelCase on the
wire (``search_pattern`` <-> ``searchPattern``).

Validation is strict: ``"yes"`` is not a boolean and ``"60000"`` is not an
integer. The only relaxation is that an explicit null means "use the default".
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from .errors import ValidationError

_NULL = {"type": "null"}
_TRUE_WORDS = ("true", "1", "yes", "on")
_FALSE_WORDS = ("false", "0", "no", "off")


def _allow_null(prop: dict) -> dict:
    """Widen one property schema so that null is accepted."""
    if "anyOf" in prop:
        if _NULL not in prop["anyOf"]:
            prop["anyOf"].append(_NULL)
        return prop
    outer = {key: prop.pop(key) for key in ("title", "description", "default") if key in prop}
    return {"anyOf": [prop, _NULL], **outer}


class CallParams(BaseModel):
    """Base class for declarative call parameter schemas.

    An explicit null is treated the same as an omitted field, so optional
    fields fall back to their declared default.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        strict=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    def to_wire(self) -> dict:
        """Normalized mapping keyed by wire (camelCase) names."""
        return self.model_dump(by_alias=True)

    @classmethod
    def input_schema(cls) -> dict:
        """JSON schema advertised to callers; every field also accepts null."""
        schema = cls.model_json_schema(by_alias=True)
        properties = schema.get("properties", {})
        for name, prop in properties.items():
            properties[name] = _allow_null(prop)
        return schema


class NoParams(CallParams):
    """Schema for calls that take no parameters."""


def parse_params(model: type[CallParams], raw: Any) -> CallParams:
    """Validate a raw parameter mapping against ``model``.

    Args:
        model: Declared parameter schema
        raw: Caller-supplied mapping (None means empty)

    Returns:
        Validated, immutable parameter model with defaults applied

    Raises:
        ValidationError: On the first violated constraint, with its field path
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValidationError("$", "type", f"expected an object, got {type(raw).__name__}")

    try:
        return model.model_validate(raw)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(part) for part in first.get("loc", ())) or "$"
        raise ValidationError(loc, first.get("type", "invalid"), first.get("msg", "invalid value")) from e


def validate_params(model: type[CallParams], raw: Any) -> dict:
    """Validate and return the normalized wire mapping."""
    return parse_params(model, raw).to_wire()


def _declared_type(prop: dict) -> str | None:
    if "type" in prop:
        return prop["type"]
    for option in prop.get("anyOf", ()):
        if option.get("type") not in (None, "null"):
            return option["type"]
    return None


def coerce_query(model: type[CallParams], query: Mapping[str, str | None]) -> dict:
    """Turn URI query strings into the JSON types ``model`` declares.

    Values that do not read as the declared type are passed through unchanged,
    so ``parse_params`` rejects them with a ValidationError.
    """
    properties = model.input_schema().get("properties", {})
    params: dict[str, Any] = {}
    for name, value in query.items():
        if value is None or value == "":
            continue
        kind = _declared_type(properties.get(name, {}))
        if kind == "boolean" and value.lower() in _TRUE_WORDS + _FALSE_WORDS:
            params[name] = value.lower() in _TRUE_WORDS
        elif kind == "integer":
            try:
                params[name] = int(value)
            except ValueError:
                params[name] = value
        else:
            params[name] = value
    return params
