"""Builders for data share test values."""

from __future__ import annotations

from core.types import DataShare, DataShareMetadata, EncryptedShare, StoreDocument

DEFAULT_PRIME = 4293918721


def build_metadata(metric_name: str = "X", bins: int = 10, epsilon: float = 8.0) -> DataShareMetadata:
    return DataShareMetadata(
        metric_name=metric_name,
        number_of_servers=2,
        bins=bins,
        hamming_weight=1,
        prime=DEFAULT_PRIME,
        epsilon=epsilon,
    )


def build_share(
    share_id: str = "id1",
    created: int | None = 0,
    metric_name: str = "X",
    r_pit: int = 7,
    uuid: str | None = None,
    metadata: DataShareMetadata | None = None,
) -> DataShare:
    return DataShare(
        id=share_id,
        created=created,
        r_pit=r_pit,
        uuid=uuid or f"uuid-{share_id}",
        encrypted_data_shares=(
            EncryptedShare(encryption_key_id="pha-key", encrypted_payload=f"pha-{share_id}".encode()),
            EncryptedShare(
                encryption_key_id="facilitator-key",
                encrypted_payload=f"fac-{share_id}".encode(),
            ),
        ),
        metadata=metadata or build_metadata(metric_name),
    )


def build_document_fields(metric_name: str = "X", created: object = 20) -> dict[str, object]:
    """Return stored fields for a valid document, as Firestore would return them."""
    return {
        "created": created,
        "rPit": 12345,
        "uuid": "share-uuid",
        "encryptedDataShares": [
            {"encryptionKeyId": "pha-key", "encryptedPayload": b"pha-bytes"},
            {"encryptionKeyId": "facilitator-key", "encryptedPayload": b"fac-bytes"},
        ],
        "dataShareMetadata": {
            "metricName": metric_name,
            "numberOfServers": 2,
            "bins": 10,
            "hammingWeight": 1,
            "prime": DEFAULT_PRIME,
            "epsilon": 8.0,
        },
    }


def build_document(document_id: str = "doc", **kwargs: object) -> StoreDocument:
    return StoreDocument(document_id=document_id, fields=build_document_fields(**kwargs))
