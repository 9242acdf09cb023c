"""Provider metadata bag: opaque, namespace-keyed extension data.

Messages, content blocks, call options and responses each carry a
:class:`ProviderMetadata` bag.  Only the vendor codec that owns a namespace
(``"anthropic"``, ``"openai"``, ...) reads or writes its entry; everything
else treats the bag as opaque and copies it around unchanged.

Values are usually pydantic models owned by the vendor codec.  After a JSON
round-trip they come back as plain dicts, so :func:`get_metadata` accepts
both and validates dicts into the requested model type.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel, Field, RootModel, ValidationError

from unillm.api.errors import InvalidArgumentError

T = TypeVar("T", bound=BaseModel)


class ProviderMetadata(RootModel[dict[str, Any]]):
    """Mapping from provider namespace to an opaque value."""

    root: dict[str, Any] = Field(default_factory=lambda: dict[str, Any]())

    def get(self, namespace: str) -> Any:
        return self.root.get(namespace)

    def set(self, namespace: str, value: Any) -> None:
        self.root[namespace] = value

    def has(self, namespace: str) -> bool:
        return namespace in self.root

    def is_empty(self) -> bool:
        return not self.root

    def namespaces(self) -> list[str]:
        return list(self.root)

    def copy_bag(self) -> ProviderMetadata:
        """Return a shallow copy whose top-level mapping can be mutated freely."""
        return ProviderMetadata(dict(self.root))


class HasProviderMetadata(Protocol):
    """Anything that carries a metadata bag."""

    provider_metadata: ProviderMetadata


def get_metadata(
    namespace: str,
    source: HasProviderMetadata | ProviderMetadata | None,
    model_type: type[T],
) -> T | None:
    """Typed accessor for the *namespace* entry of *source*.

    Returns ``None`` when *source* is ``None``, the entry is missing, or the
    stored value is neither a *model_type* nor a mapping.

    Raises:
        InvalidArgumentError: If the entry is a mapping that does not
            validate as *model_type*.
    """
    if source is None:
        return None
    bag = source if isinstance(source, ProviderMetadata) else source.provider_metadata
    value = bag.get(namespace)
    if value is None:
        return None
    if isinstance(value, model_type):
        return value
    if isinstance(value, Mapping):
        try:
            return model_type.model_validate(value)
        except ValidationError as exc:
            raise InvalidArgumentError(
                f"provider_metadata.{namespace}",
                f"invalid {namespace} provider metadata: {exc}",
            ) from exc
    return None


def with_provider_metadata(namespace: str, value: Any) -> ProviderMetadata:
    """Build a bag holding a single *namespace* entry."""
    return ProviderMetadata({namespace: value})
