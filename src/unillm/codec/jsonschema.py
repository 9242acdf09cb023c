"""Translation of tool input schemas into vendor schema dialects.

Tool inputs are described with a JSON-schema-like ``dict``.  Vendors in
this domain only accept object-shaped inputs and expect the literal
``false`` for "no additional properties", while some schema generators
emit the equivalent ``{"not": {}}``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from unillm.api.errors import InvalidArgumentError

_FORBID_ALL: dict[str, Any] = {"not": {}}


class ToolInputSchema(BaseModel):
    """An object schema split into the parts vendors care about.

    Keys other than ``type``, ``properties`` and ``required`` are kept in
    :attr:`extra_fields` so that schema extensions survive translation.
    """

    type: str = "object"
    properties: dict[str, Any] | None = None
    required: list[str] | None = None
    extra_fields: dict[str, Any] = Field(default_factory=lambda: dict[str, Any]())

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type}
        if self.properties is not None:
            out["properties"] = self.properties
        if self.required is not None:
            out["required"] = self.required
        out.update(self.extra_fields)
        return out


def normalize_schema(schema: Any) -> Any:
    """Return a copy of *schema* with every ``additionalProperties: {"not": {}}``
    rewritten to ``additionalProperties: false``.

    The rewrite applies at any depth (nested properties, ``items``,
    ``allOf`` branches, ...).  Other ``not`` schemas are left alone.
    """
    if isinstance(schema, dict):
        out: dict[str, Any] = {}
        for key, value in schema.items():
            if key == "additionalProperties" and value == _FORBID_ALL:
                out[key] = False
            else:
                out[key] = normalize_schema(value)
        return out
    if isinstance(schema, list):
        return [normalize_schema(item) for item in schema]
    return schema


def translate_schema(schema: dict[str, Any] | None, *, argument: str = "input_schema") -> ToolInputSchema:
    """Validate and split an object schema.

    A missing schema or a missing ``type`` means an empty object schema.

    Raises:
        InvalidArgumentError: If the declared type is a list of types or
            anything other than ``"object"``.
    """
    if schema is None:
        return ToolInputSchema()

    normalized: dict[str, Any] = normalize_schema(schema)
    declared = normalized.get("type", "object")
    if isinstance(declared, list):
        raise InvalidArgumentError(argument, f"union schema types are not supported: {declared}")
    if declared != "object":
        raise InvalidArgumentError(argument, f"schema type must be 'object', got {declared!r}")

    extra = {
        k: v for k, v in normalized.items() if k not in ("type", "properties", "required")
    }
    return ToolInputSchema(
        properties=normalized.get("properties"),
        required=normalized.get("required"),
        extra_fields=extra,
    )
