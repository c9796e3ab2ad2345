"""Document sources for ingestion runs.

A document source yields raw ``StoreDocument`` values. This module holds
the source protocol and the reader for JSONL store exports kept on the
local file system or under an S3 prefix.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Iterator, Protocol

from core.config import EnpaConfig
from core.constants import SUPPORTED_EXPORT_EXTENSIONS
from core.counters import Counter
from core.errors import EnpaIngestError
from core.logging_config import get_logger
from core.s3_uri import S3Location, create_s3_client, is_s3_uri, parse_s3_uri
from core.types import StoreDocument

_LOGGER = get_logger(__name__)


class DocumentSource(Protocol):
    """Supplies the immutable document snapshot for one run."""

    def read_documents(self) -> Iterable[StoreDocument]:
        """Return every stored document visible to this run."""
        ...


class JsonlDocumentSource:
    """Reads document-store exports written as JSON lines.

    Each line is either ``{"id": ..., "data": {...}}`` or a flat document
    object carrying its own ``id`` field. Lines that are not JSON objects
    are counted as invalid documents and skipped.
    """

    def __init__(
        self,
        source_uri: str,
        config: EnpaConfig,
        invalid_documents: Counter,
        s3_client: Any | None = None,
    ) -> None:
        self._source_uri = source_uri
        self._config = config
        self._invalid_documents = invalid_documents
        self._s3_client = s3_client

    def read_documents(self) -> Iterator[StoreDocument]:
        """Yield documents from every export file under the source.

        Raises:
            EnpaIngestError: If the source path or prefix cannot be read.
        """
        for source_name, body in self._read_bodies():
            yield from self._documents_from_body(source_name, body)

    def _read_bodies(self) -> Iterator[tuple[str, str]]:
        if is_s3_uri(self._source_uri):
            yield from self._read_s3_bodies(parse_s3_uri(self._source_uri, domain="ingest"))
            return
        yield from _read_local_bodies(Path(self._source_uri).expanduser())

    def _read_s3_bodies(self, location: S3Location) -> Iterator[tuple[str, str]]:
        s3_client = self._s3_client or create_s3_client(self._config)
        try:
            keys = _list_s3_keys(s3_client, location)
            for key in keys:
                body = s3_client.get_object(Bucket=location.bucket, Key=key)["Body"].read()
                yield f"s3://{location.bucket}/{key}", body.decode("utf-8")
        except EnpaIngestError:
            raise
        except Exception as error:
            raise EnpaIngestError(
                f"Failed to read document export at {self._source_uri}: {error}. "
                "Check AWS credentials and the export prefix."
            ) from error

    def _documents_from_body(self, source_name: str, body: str) -> Iterator[StoreDocument]:
        for line_number, line in enumerate(body.splitlines(), 1):
            if not line.strip():
                continue
            document = _parse_document_line(source_name, line, line_number)
            if document is None:
                _LOGGER.debug("export_line_skipped", source=source_name, line_number=line_number)
                self._invalid_documents.inc()
                continue
            yield document


def _read_local_bodies(source_path: Path) -> Iterator[tuple[str, str]]:
    """Read export file bodies from a file or directory.

    Raises:
        EnpaIngestError: If the path is missing or unreadable.
    """
    if not source_path.exists():
        raise EnpaIngestError(
            f"Failed to read document export at {source_path}: path does not exist. "
            "Provide an existing export file or directory."
        )
    if source_path.is_file():
        file_paths = [source_path]
    else:
        file_paths = [
            path
            for path in sorted(source_path.rglob("*"))
            if path.is_file() and path.suffix.lower() in SUPPORTED_EXPORT_EXTENSIONS
        ]
    for file_path in file_paths:
        try:
            yield str(file_path), file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as error:
            raise EnpaIngestError(
                f"Failed to read document export file {file_path}: {error}."
            ) from error


def _list_s3_keys(s3_client: Any, location: S3Location) -> list[str]:
    paginator = s3_client.get_paginator("list_objects_v2")
    keys: list[str] = []
    for page in paginator.paginate(Bucket=location.bucket, Prefix=location.key):
        for obj in page.get("Contents", []):
            key = obj["Key"]
            if Path(key).suffix.lower() in SUPPORTED_EXPORT_EXTENSIONS:
                keys.append(key)
    if not keys:
        raise EnpaIngestError(
            f"No export objects found under s3://{location.bucket}/{location.key}. "
            f"Supported extensions: {SUPPORTED_EXPORT_EXTENSIONS}."
        )
    return sorted(keys)


def _parse_document_line(source_name: str, line: str, line_number: int) -> StoreDocument | None:
    """Parse one export line, returning ``None`` for malformed lines."""
    try:
        payload = json.loads(line)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    document_id = payload.get("id")
    if not isinstance(document_id, str) or not document_id:
        document_id = f"{source_name}:{line_number}"
    data = payload.get("data")
    if isinstance(data, dict):
        return StoreDocument(document_id=document_id, fields=data)
    fields = {key: value for key, value in payload.items() if key != "id"}
    return StoreDocument(document_id=document_id, fields=fields)
