"""Connection settings for the vendor HTTP APIs."""

from __future__ import annotations

import os
from typing import ClassVar

from pydantic import BaseModel, Field

from unillm.api.errors import LoadAPIKeyError


class ProviderConfig(BaseModel):
    """Where and how to reach a vendor API.

    ``api_key`` may be left unset; :meth:`resolve_api_key` then falls back
    to the vendor's environment variable.
    """

    api_key_env: ClassVar[str] = ""

    base_url: str
    api_key: str | None = None
    headers: dict[str, str] = Field(default_factory=lambda: dict[str, str]())
    timeout: float = 60.0

    def resolve_api_key(self) -> str:
        """Return the configured key, or the one from the environment.

        Raises:
            LoadAPIKeyError: If neither is set.
        """
        if self.api_key:
            return self.api_key
        key = os.environ.get(self.api_key_env) if self.api_key_env else None
        if not key:
            msg = (
                f"API key is missing. Pass it as api_key or set the "
                f"{self.api_key_env or 'provider API key'} environment variable."
            )
            raise LoadAPIKeyError(msg)
        return key

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.resolve_api_key()}"}

    def request_headers(self) -> dict[str, str]:
        """Authentication plus static headers, sent with every request."""
        return {**self.auth_headers(), **self.headers}


class AnthropicConfig(ProviderConfig):
    api_key_env: ClassVar[str] = "ANTHROPIC_API_KEY"

    base_url: str = "https://api.anthropic.com/v1"
    api_version: str = "2023-06-01"

    def auth_headers(self) -> dict[str, str]:
        return {"x-api-key": self.resolve_api_key(), "anthropic-version": self.api_version}


class OpenAIConfig(ProviderConfig):
    api_key_env: ClassVar[str] = "OPENAI_API_KEY"

    base_url: str = "https://api.openai.com/v1"
    organization: str | None = None
    project: str | None = None

    def auth_headers(self) -> dict[str, str]:
        headers = super().auth_headers()
        if self.organization:
            headers["OpenAI-Organization"] = self.organization
        if self.project:
            headers["OpenAI-Project"] = self.project
        return headers
