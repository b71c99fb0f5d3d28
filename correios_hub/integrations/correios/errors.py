"""
Correios integration error types.
Every upstream failure keeps the HTTP status and the raw response body as
attributes so callers can inspect them without parsing the message.
"""

from __future__ import annotations

from typing import Optional


class CorreiosError(Exception):
    """Base for all Correios errors."""

    def __init__(
        self,
        message: str = "",
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code is not None:
            parts.append(f"HTTP {self.status_code}")
        if self.response_body:
            parts.append(f"body={self.response_body[:500]}")
        return " | ".join(p for p in parts if p)


class CorreiosTransportError(CorreiosError):
    """Network/connection error, no HTTP response was obtained."""


class CorreiosStatusError(CorreiosError):
    """Response received but the status differs from the documented success code."""


class CorreiosAuthError(CorreiosStatusError):
    """Token endpoint rejected the credentials."""


class CorreiosPayloadError(CorreiosError):
    """Success status but the body could not be decoded as expected."""


class CorreiosPreconditionError(CorreiosError):
    """Operation called before its required state exists."""


class CorreiosNotFoundError(CorreiosError):
    """Lookup found no matching record."""
