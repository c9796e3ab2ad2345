"""Unit tests for batch file persistence."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.config import EnpaConfig
from core.errors import EnpaStoreError
from store.batch_writer import BatchWriter, batch_location


class _RecordingS3Client:
    def __init__(self, fail: bool = False) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self._fail = fail

    def put_object(self, Bucket: str, Key: str, Body: bytes) -> None:
        if self._fail:
            raise RuntimeError("access denied")
        self.objects[(Bucket, Key)] = Body


def test_batch_location_appends_metric_and_suffix() -> None:
    """Batch files are named after the output prefix and metric."""
    assert batch_location("gs/pha", "fever") == "gs/pha_metric=fever.parquet"


def test_write_creates_parent_directories(config: EnpaConfig, tmp_path: Path) -> None:
    """Local writes should create missing directories and leave no temp file."""
    location = str(tmp_path / "nested" / "pha_metric=X.parquet")

    BatchWriter(config).write(location, b"payload")

    assert Path(location).read_bytes() == b"payload"
    assert sorted(path.name for path in (tmp_path / "nested").iterdir()) == ["pha_metric=X.parquet"]


def test_write_raises_store_error_for_unwritable_path(config: EnpaConfig, tmp_path: Path) -> None:
    """Write failures are fatal store errors."""
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")

    with pytest.raises(EnpaStoreError):
        BatchWriter(config).write(str(blocker / "pha_metric=X.parquet"), b"payload")


def test_write_puts_s3_objects(config: EnpaConfig) -> None:
    """S3 locations are written with one put per file."""
    s3_client = _RecordingS3Client()

    BatchWriter(config, s3_client=s3_client).write("s3://bucket/out/pha_metric=X.parquet", b"data")

    assert s3_client.objects == {("bucket", "out/pha_metric=X.parquet"): b"data"}


def test_write_wraps_s3_failures(config: EnpaConfig) -> None:
    """S3 client errors become store errors."""
    writer = BatchWriter(config, s3_client=_RecordingS3Client(fail=True))

    with pytest.raises(EnpaStoreError):
        writer.write("s3://bucket/out/pha_metric=X.parquet", b"data")


def test_write_removes_temporary_file_after_failed_replace(
    config: EnpaConfig, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A failed local write leaves neither the target nor its temp file."""

    def _failing_replace(source: object, target: object) -> None:
        raise OSError("device busy")

    monkeypatch.setattr("store.batch_writer.os.replace", _failing_replace)

    with pytest.raises(EnpaStoreError, match="device busy"):
        BatchWriter(config).write(str(tmp_path / "pha_metric=X.parquet"), b"payload")
    assert list(tmp_path.iterdir()) == []
