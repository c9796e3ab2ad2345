"""S3 URI helpers shared by document sources and batch writers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core.config import EnpaConfig
from core.errors import EnpaDependencyError, EnpaIngestError, EnpaStoreError

S3_SCHEME = "s3://"


@dataclass(frozen=True)
class S3Location:
    """Parsed S3 location model."""

    bucket: str
    key: str


def is_s3_uri(uri: str) -> bool:
    """Return whether a location points at S3."""
    return uri.startswith(S3_SCHEME)


def parse_s3_uri(uri: str, domain: str) -> S3Location:
    """Parse and validate an S3 URI.

    Args:
        uri: URI in format ``s3://bucket/key``.
        domain: Error domain, ``"ingest"`` for sources or ``"store"`` for outputs.

    Returns:
        Parsed bucket and key pair.

    Raises:
        EnpaIngestError: For ingest-domain parse failures.
        EnpaStoreError: For store-domain parse failures.
    """
    bucket, _, key = uri.removeprefix(S3_SCHEME).partition("/")
    if not bucket or not key:
        message = (
            f"Invalid S3 URI '{uri}': expected s3://bucket/key. "
            "Provide both bucket and key prefix."
        )
        if domain == "ingest":
            raise EnpaIngestError(message)
        raise EnpaStoreError(message)
    return S3Location(bucket=bucket, key=key)


def create_s3_client(config: EnpaConfig) -> Any:
    """Create a boto3 S3 client from runtime config.

    Args:
        config: Runtime config with optional profile and region.

    Returns:
        Boto3 S3 client.

    Raises:
        EnpaDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise EnpaDependencyError(
            "S3 locations require boto3, but it is not installed. "
            "Install boto3 to read from or write to s3:// locations."
        ) from error
    session_kwargs: dict[str, str] = {}
    if config.s3_profile:
        session_kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        session_kwargs["region_name"] = config.s3_region
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")
