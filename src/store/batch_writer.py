"""Output batch persistence.

Writes encoded packet and header files to local paths or S3 keys.
Local files are written through a temporary sibling and renamed into
place, so a failed run never leaves a truncated file under the final name.
"""

from __future__ import annotations

import contextlib
import os
from pathlib import Path
from typing import Any

from core.config import EnpaConfig
from core.constants import OUTPUT_FILE_SUFFIX
from core.errors import EnpaStoreError
from core.logging_config import get_logger
from core.s3_uri import create_s3_client, is_s3_uri, parse_s3_uri

_LOGGER = get_logger(__name__)


def batch_location(output_prefix: str, metric: str) -> str:
    """Return the file location for one metric under an output prefix.

    Args:
        output_prefix: Local path prefix or ``s3://bucket/key`` prefix.
        metric: Metric name of the batch.

    Returns:
        ``{output_prefix}_metric={metric}.parquet``.
    """
    return f"{output_prefix}_metric={metric}{OUTPUT_FILE_SUFFIX}"


class BatchWriter:
    """Persists encoded batch files."""

    def __init__(self, config: EnpaConfig, s3_client: Any | None = None) -> None:
        self._config = config
        self._s3_client = s3_client

    def write(self, location: str, payload: bytes) -> str:
        """Write one complete file.

        Args:
            location: Local path or ``s3://`` URI.
            payload: File contents.

        Returns:
            The written location.

        Raises:
            EnpaStoreError: If the file cannot be persisted.
        """
        if is_s3_uri(location):
            self._write_s3(location, payload)
        else:
            _write_local(Path(location).expanduser(), payload)
        _LOGGER.debug("batch_file_written", location=location, size_bytes=len(payload))
        return location

    def _write_s3(self, location: str, payload: bytes) -> None:
        target = parse_s3_uri(location, domain="store")
        if self._s3_client is None:
            self._s3_client = create_s3_client(self._config)
        try:
            self._s3_client.put_object(Bucket=target.bucket, Key=target.key, Body=payload)
        except Exception as error:
            raise EnpaStoreError(
                f"Failed to write batch file to {location}: {error}. "
                "Check AWS credentials and bucket permissions."
            ) from error


def _write_local(path: Path, payload: bytes) -> None:
    temporary_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        temporary_path.write_bytes(payload)
        os.replace(temporary_path, path)
    except OSError as error:
        # the original write error is the one reported
        with contextlib.suppress(OSError):
            temporary_path.unlink(missing_ok=True)
        raise EnpaStoreError(
            f"Failed to write batch file at {path}: {error}. "
            "Check write permissions and available disk space."
        ) from error
