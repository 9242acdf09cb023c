"""OpenAI schema dialect for function parameters and structured outputs."""

from __future__ import annotations

from typing import Any

from unillm.api.errors import InvalidArgumentError
from unillm.codec.jsonschema import translate_schema


def encode_schema(schema: dict[str, Any] | None, *, argument: str) -> dict[str, Any]:
    """Translate *schema* and apply OpenAI's root restrictions.

    The root must be an object and must not use ``anyOf``.  ``properties``
    is always present at the root, even when empty.
    """
    translated = translate_schema(schema, argument=argument)
    if "anyOf" in translated.extra_fields:
        raise InvalidArgumentError(argument, "schema root cannot use anyOf")
    if translated.properties is None:
        translated.properties = {}
    return translated.to_dict()
