"""
Error taxonomy for the Azure image client.

Every terminal error carries enough context (model name, HTTP status, remote
error code, raw response snippet) to reproduce the failure without re-running
the call.
"""

from typing import Optional

SNIPPET_LENGTH = 500


def _snippet(body: Optional[str], limit: int = SNIPPET_LENGTH) -> str:
    if not body:
        return ""
    body = body.strip()
    if len(body) <= limit:
        return body
    return body[:limit] + "..."


class AzureImageError(Exception):
    """Base class for all errors raised by this package."""

    retryable = False

    def __init__(
        self,
        message: str,
        *,
        model_name: Optional[str] = None,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        response_body: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.model_name = model_name
        self.status_code = status_code
        self.error_code = error_code
        self.response_body = response_body
        self.attempts: Optional[int] = None

    def __str__(self) -> str:
        parts = [self.message]
        if self.model_name:
            parts.append(f"model={self.model_name}")
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.error_code:
            parts.append(f"code={self.error_code}")
        if self.attempts:
            parts.append(f"attempts={self.attempts}")
        snippet = _snippet(self.response_body)
        if snippet:
            parts.append(f"body={snippet}")
        return " | ".join(parts)


class ConfigurationError(AzureImageError):
    """A model descriptor or configuration value is invalid."""


class ValidationError(AzureImageError):
    """A request field violates one of its variant's constraints."""

    def __init__(self, message: str, *, field: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field


class TransportError(AzureImageError):
    """Network failure or timeout before a response was received."""

    retryable = True


class RemoteServiceError(AzureImageError):
    """The remote service answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        content_filtered: bool = False,
        **kwargs,
    ):
        super().__init__(message, status_code=status_code, **kwargs)
        self.content_filtered = content_filtered

    @property
    def retryable(self) -> bool:
        return self.status_code == 429 or self.status_code >= 500


class ParseError(AzureImageError):
    """A response body did not match the expected schema."""

    def __init__(self, message: str, *, payload: Optional[str] = None, **kwargs):
        kwargs.setdefault("response_body", payload)
        super().__init__(message, **kwargs)
        self.payload = payload
