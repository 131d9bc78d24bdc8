from __future__ import annotations


class VerificationError(Exception):
    """Base class for errors surfaced to the caller of a verification."""


class InvalidInput(VerificationError):
    """A request field is missing or malformed (user-correctable, HTTP 400)."""


class UpstreamUnavailable(VerificationError):
    """A required signal provider failed; carries the provider's status and body."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Upstream provider returned {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class PayloadTooLarge(VerificationError):
    """The request body exceeds the configured size limit (HTTP 413)."""
