"""unillm: provider-agnostic request and response model for LLM vendor APIs."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from unillm.generate import generate_text as generate_text
    from unillm.generate import stream_text as stream_text
    from unillm.providers import AnthropicModel as AnthropicModel
    from unillm.providers import OpenAIModel as OpenAIModel

_LAZY_EXPORTS = {
    "generate_text": "unillm.generate",
    "stream_text": "unillm.generate",
    "AnthropicModel": "unillm.providers",
    "OpenAIModel": "unillm.providers",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'unillm' has no attribute {name!r}")
