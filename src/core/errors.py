"""ENPA ingestion exception hierarchy.

Each pipeline boundary raises its own error type so a failed run
points at the stage that broke. Only document rejections are recoverable.
"""

from __future__ import annotations


class EnpaError(Exception):
    """Base exception for all ingestion failures."""


class EnpaConfigError(EnpaError):
    """Raised for invalid runtime configuration or store bootstrap."""


class EnpaIngestError(EnpaError):
    """Raised when the document source cannot be read."""


class EnpaDocumentRejectedError(EnpaError):
    """Raised when one stored document is not a valid data share."""


class EnpaTransformError(EnpaError):
    """Raised for misuse of the serialization transforms."""


class EnpaStoreError(EnpaError):
    """Raised when an output batch cannot be persisted."""


class EnpaDependencyError(EnpaError):
    """Raised when an optional runtime dependency is missing."""
