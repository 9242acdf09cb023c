"""Vendor codecs and the helpers they share."""

from unillm.codec.base import Codec, EncodedRequest
from unillm.codec.jsonschema import ToolInputSchema, normalize_schema, translate_schema
from unillm.codec.normalize import merge_messages
from unillm.codec.registry import get_codec, providers

__all__ = [
    "Codec",
    "EncodedRequest",
    "ToolInputSchema",
    "get_codec",
    "merge_messages",
    "normalize_schema",
    "providers",
    "translate_schema",
]
