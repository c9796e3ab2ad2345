"""Runtime configuration model for ingestion runs.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os

from core.constants import DEFAULT_MAX_WORKERS, DEFAULT_RANDOM_SEED
from core.errors import EnpaConfigError


@dataclass(frozen=True)
class EnpaConfig:
    """Validated runtime configuration.

    Attributes:
        s3_region: Optional default AWS region for S3 reads and writes.
        s3_profile: Optional AWS profile for boto3 session initialization.
        firebase_project_id: Project hosting the Firestore document store.
        service_account_key: Path to the service-account JSON key file.
        random_seed: Seed used when sampling a representative share.
        max_workers: Number of per-metric sub-pipelines run concurrently.
    """

    s3_region: str | None
    s3_profile: str | None
    firebase_project_id: str | None
    service_account_key: str | None
    random_seed: int
    max_workers: int

    @classmethod
    def from_env(cls) -> "EnpaConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            EnpaConfigError: If environment values are invalid.
        """
        random_seed = _parse_int_env("ENPA_RANDOM_SEED", DEFAULT_RANDOM_SEED)
        max_workers = _parse_int_env("ENPA_MAX_WORKERS", DEFAULT_MAX_WORKERS)
        if max_workers < 1:
            raise EnpaConfigError(
                f"Invalid ENPA_MAX_WORKERS value: expected at least 1, got {max_workers}. "
                "Set ENPA_MAX_WORKERS to a positive integer."
            )
        return cls(
            s3_region=os.getenv("ENPA_S3_REGION"),
            s3_profile=os.getenv("ENPA_S3_PROFILE"),
            firebase_project_id=os.getenv("ENPA_FIREBASE_PROJECT_ID"),
            service_account_key=os.getenv("ENPA_SERVICE_ACCOUNT_KEY"),
            random_seed=random_seed,
            max_workers=max_workers,
        )


def _parse_int_env(name: str, default: int) -> int:
    """Parse an integer environment value.

    Args:
        name: Environment variable name.
        default: Value used when the variable is unset.

    Returns:
        Parsed integer.

    Raises:
        EnpaConfigError: If value cannot be parsed into int.
    """
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError as error:
        raise EnpaConfigError(
            f"Invalid {name} value: expected integer, got '{raw_value}'. "
            f"Set {name} to a numeric value."
        ) from error
