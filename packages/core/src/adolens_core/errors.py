"""Error taxonomy shared by the review pipeline.

Every exception raised by adolens_core derives from AdolensError so the
presentation layer can catch one type and render a readable message instead
of a stack trace.
"""

from __future__ import annotations


class AdolensError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(AdolensError):
    """A required setting or credential is missing or still a placeholder."""


class GatewayError(AdolensError):
    """The Azure DevOps REST API could not be reached or answered non-2xx."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(GatewayError):
    """A remote payload did not have the shape the decoder expects."""


class ContentNotFoundError(GatewayError):
    """A file blob does not exist at the requested ref.

    Only used inside the blob fetch; callers always see an empty string.
    """


class UpstreamError(AdolensError):
    """The model endpoint failed or answered non-2xx."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class EmptyResponseError(AdolensError):
    """The model answered without any usable message content."""


class ReviewPreparationError(AdolensError):
    """Pull request context could not be established for a review."""
