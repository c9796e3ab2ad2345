"""Unit tests for the Firestore document source."""

from __future__ import annotations

from dataclasses import replace

import pytest

from core.config import EnpaConfig
from core.errors import EnpaConfigError, EnpaIngestError
from ingest.firestore_source import FirestoreDocumentSource, create_firestore_client


class _FakeSnapshot:
    def __init__(self, document_id: str, data: dict[str, object] | None) -> None:
        self.id = document_id
        self._data = data

    def to_dict(self) -> dict[str, object] | None:
        return self._data


class _FakeQuery:
    def __init__(self, snapshots: list[_FakeSnapshot]) -> None:
        self._snapshots = snapshots

    def stream(self) -> list[_FakeSnapshot]:
        return self._snapshots


class _FakeFirestoreClient:
    def __init__(self, groups: dict[str, list[_FakeSnapshot]]) -> None:
        self._groups = groups
        self.queried: list[str] = []

    def collection_group(self, collection_id: str) -> _FakeQuery:
        self.queried.append(collection_id)
        if collection_id not in self._groups:
            raise RuntimeError("permission denied")
        return _FakeQuery(self._groups[collection_id])


def test_read_documents_streams_each_collection_group(config: EnpaConfig) -> None:
    """Every configured collection group should be read once."""
    client = _FakeFirestoreClient(
        {
            "X": [_FakeSnapshot("x-1", {"uuid": "a"}), _FakeSnapshot("x-2", None)],
            "Y": [_FakeSnapshot("y-1", {"uuid": "b"})],
        }
    )
    source = FirestoreDocumentSource(("X", "Y"), config, client=client)

    documents = list(source.read_documents())

    assert client.queried == ["X", "Y"]
    assert [document.document_id for document in documents] == ["x-1", "x-2", "y-1"]
    assert documents[1].fields == {}


def test_read_documents_wraps_query_failures(config: EnpaConfig) -> None:
    """A failed collection-group query aborts the read."""
    source = FirestoreDocumentSource(("missing",), config, client=_FakeFirestoreClient({}))

    with pytest.raises(EnpaIngestError):
        list(source.read_documents())


def test_create_firestore_client_requires_credentials(config: EnpaConfig) -> None:
    """Bootstrap without project or key is a configuration failure."""
    pytest.importorskip("google.cloud.firestore")

    with pytest.raises(EnpaConfigError):
        create_firestore_client(replace(config, firebase_project_id=None))
