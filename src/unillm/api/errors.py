"""Error types shared by the codecs, transports and models.

Fatal encode/decode errors are raised before any network I/O.  Non-fatal
problems are reported as :class:`~unillm.api.response.CallWarning` values
instead and never raise.
"""

from __future__ import annotations

from typing import Any


class UnillmError(Exception):
    """Base error for everything raised by unillm."""


class InvalidPromptError(UnillmError):
    """The messages handed to an encoder violate an invariant."""

    def __init__(self, message: str, prompt: Any = None) -> None:
        self.prompt = prompt
        super().__init__(f"Invalid prompt: {message}")


class InvalidArgumentError(UnillmError):
    """A call option, tool definition or schema is not acceptable."""

    def __init__(self, argument: str, message: str) -> None:
        self.argument = argument
        super().__init__(f"Invalid argument for {argument}: {message}")


class UnsupportedFunctionalityError(UnillmError):
    """The vendor cannot express the requested feature at all."""

    def __init__(self, functionality: str, message: str | None = None) -> None:
        self.functionality = functionality
        super().__init__(message or f"'{functionality}' functionality not supported.")


class InvalidResponseDataError(UnillmError):
    """The vendor response is absent or structurally unusable."""

    def __init__(self, data: Any, message: str | None = None) -> None:
        self.data = data
        super().__init__(message or f"Invalid response data: {data!r}")


class JSONParseError(UnillmError):
    """A raw payload could not be parsed as JSON.

    The offending text is kept on :attr:`text` for debugging.
    """

    def __init__(self, text: str, cause: Exception | None = None) -> None:
        self.text = text
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"JSON parsing failed{detail}\nText: {text}")


class APICallError(UnillmError):
    """The vendor API returned an error status or could not be reached."""

    def __init__(
        self,
        message: str,
        url: str,
        status_code: int | None = None,
        response_body: str | None = None,
        is_retryable: bool | None = None,
    ) -> None:
        self.url = url
        self.status_code = status_code
        self.response_body = response_body
        if is_retryable is None:
            is_retryable = status_code is not None and (
                status_code in (408, 409, 429) or status_code >= 500
            )
        self.is_retryable = is_retryable
        super().__init__(message)


class LoadAPIKeyError(UnillmError):
    """No API key was configured and none could be found in the environment."""


class NoSuchProviderError(UnillmError):
    """No codec or model is registered for the provider name."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"No such provider: {provider}")
