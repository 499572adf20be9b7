"""
Exception hierarchy for the send pipeline.

Every failure raised while resolving, downloading, merging or delivering is a
RelayError, so the /send route can turn any of them into the uniform
"Send failed" response.
"""

from typing import Optional


class RelayError(Exception):
    """Base class for pipeline failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(RelayError):
    """A required setting (e.g. BREVO_API_KEY) is missing."""


class RemoteServiceError(RelayError):
    """An outbound call returned a non-success status, timed out, or failed in transport."""

    def __init__(self, service: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{service}: {message}")
        self.service = service
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Drive download failures
# ---------------------------------------------------------------------------

class FetchError(RelayError):
    """A Drive download produced something other than an acceptable PDF."""


class FileTooLargeError(FetchError):
    def __init__(self, size_bytes: int, message: str):
        super().__init__(message)
        self.size_bytes = size_bytes


class UnexpectedContentTypeError(FetchError):
    def __init__(self, content_type: str, message: str):
        super().__init__(message)
        self.content_type = content_type


class ConfirmTokenNotFoundError(FetchError):
    def __init__(self, content_type: str, message: str):
        super().__init__(message)
        self.content_type = content_type
