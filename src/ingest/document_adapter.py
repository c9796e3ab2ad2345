"""Stored document to data share conversion.

This module is the only place that knows the document-store schema.
Documents that do not describe a complete two-server share are rejected
here and never reach the filters or serializers.
"""

from __future__ import annotations

import base64
import binascii
from datetime import datetime
from typing import Iterable, Mapping, Sequence

from core.constants import (
    FIELD_BINS,
    FIELD_CREATED,
    FIELD_DATA_SHARE_METADATA,
    FIELD_ENCRYPTED_DATA_SHARES,
    FIELD_ENCRYPTED_PAYLOAD,
    FIELD_ENCRYPTION_KEY_ID,
    FIELD_EPSILON,
    FIELD_HAMMING_WEIGHT,
    FIELD_METRIC_NAME,
    FIELD_NUMBER_OF_SERVERS,
    FIELD_PRIME,
    FIELD_R_PIT,
    FIELD_UUID,
    NUMBER_OF_SHARES,
)
from core.counters import Counter
from core.errors import EnpaDocumentRejectedError
from core.logging_config import get_logger
from core.types import DataShare, DataShareMetadata, EncryptedShare, StoreDocument
from store.packet_schema import INT32_BOUNDS, INT64_BOUNDS

_LOGGER = get_logger(__name__)


def data_share_from_document(document: StoreDocument) -> DataShare:
    """Convert one stored document into a validated data share.

    Args:
        document: Raw document read from the store.

    Returns:
        Data share with exactly two encrypted halves.

    Raises:
        EnpaDocumentRejectedError: If a required field is missing,
            ``encryptedDataShares`` does not hold two entries, or a value
            cannot be converted to its expected type or does not fit its
            output column.
    """
    fields = document.fields
    encrypted_shares = _parse_encrypted_shares(_require(fields, FIELD_ENCRYPTED_DATA_SHARES))
    metadata = _parse_metadata(_require(fields, FIELD_DATA_SHARE_METADATA))
    return DataShare(
        id=document.document_id,
        created=_parse_created(fields.get(FIELD_CREATED)),
        r_pit=_as_int(_require(fields, FIELD_R_PIT), FIELD_R_PIT, INT64_BOUNDS),
        uuid=_as_str(_require(fields, FIELD_UUID), FIELD_UUID),
        encrypted_data_shares=encrypted_shares,
        metadata=metadata,
    )


def read_data_shares(
    documents: Iterable[StoreDocument],
    invalid_documents: Counter,
) -> list[DataShare]:
    """Adapt every document, dropping and counting rejects.

    Args:
        documents: Documents from a document source.
        invalid_documents: Counter incremented once per rejected document.

    Returns:
        Valid data shares in source order.
    """
    shares: list[DataShare] = []
    for document in documents:
        try:
            shares.append(data_share_from_document(document))
        except EnpaDocumentRejectedError as error:
            _LOGGER.debug(
                "document_skipped",
                document_id=document.document_id,
                reason=str(error),
            )
            invalid_documents.inc()
    return shares


def _parse_encrypted_shares(value: object) -> tuple[EncryptedShare, EncryptedShare]:
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes, bytearray)):
        raise EnpaDocumentRejectedError(
            f"'{FIELD_ENCRYPTED_DATA_SHARES}' must be a list, got {type(value).__name__}"
        )
    if len(value) != NUMBER_OF_SHARES:
        raise EnpaDocumentRejectedError(
            f"'{FIELD_ENCRYPTED_DATA_SHARES}' must hold {NUMBER_OF_SHARES} entries, "
            f"got {len(value)}"
        )
    first, second = (_parse_encrypted_share(item) for item in value)
    return first, second


def _parse_encrypted_share(value: object) -> EncryptedShare:
    share_fields = _as_mapping(value, FIELD_ENCRYPTED_DATA_SHARES)
    return EncryptedShare(
        encryption_key_id=_as_str(
            _require(share_fields, FIELD_ENCRYPTION_KEY_ID), FIELD_ENCRYPTION_KEY_ID
        ),
        encrypted_payload=_as_bytes(
            _require(share_fields, FIELD_ENCRYPTED_PAYLOAD), FIELD_ENCRYPTED_PAYLOAD
        ),
    )


def _parse_metadata(value: object) -> DataShareMetadata:
    metadata_fields = _as_mapping(value, FIELD_DATA_SHARE_METADATA)
    return DataShareMetadata(
        metric_name=_as_str(_require(metadata_fields, FIELD_METRIC_NAME), FIELD_METRIC_NAME),
        number_of_servers=_as_int(
            _require(metadata_fields, FIELD_NUMBER_OF_SERVERS),
            FIELD_NUMBER_OF_SERVERS,
            INT32_BOUNDS,
        ),
        bins=_as_int(_require(metadata_fields, FIELD_BINS), FIELD_BINS, INT64_BOUNDS),
        hamming_weight=_as_int(
            _require(metadata_fields, FIELD_HAMMING_WEIGHT),
            FIELD_HAMMING_WEIGHT,
            INT32_BOUNDS,
        ),
        prime=_as_int(_require(metadata_fields, FIELD_PRIME), FIELD_PRIME, INT64_BOUNDS),
        epsilon=_as_float(_require(metadata_fields, FIELD_EPSILON), FIELD_EPSILON),
    )


def _parse_created(value: object) -> int | None:
    """Normalize the optional creation time to epoch seconds."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return int(value.timestamp())
    return _as_int(value, FIELD_CREATED, INT64_BOUNDS)


def _require(fields: Mapping[str, object], field_name: str) -> object:
    value = fields.get(field_name)
    if value is None:
        raise EnpaDocumentRejectedError(f"missing required field '{field_name}'")
    return value


def _as_mapping(value: object, field_name: str) -> Mapping[str, object]:
    if not isinstance(value, Mapping):
        raise EnpaDocumentRejectedError(
            f"'{field_name}' must be a map, got {type(value).__name__}"
        )
    return value


def _as_str(value: object, field_name: str) -> str:
    if not isinstance(value, str) or not value:
        raise EnpaDocumentRejectedError(f"'{field_name}' must be a non-empty string")
    return value


def _as_int(value: object, field_name: str, bounds: tuple[int, int]) -> int:
    number = _parse_int(value, field_name)
    lower, upper = bounds
    if not lower <= number <= upper:
        raise EnpaDocumentRejectedError(
            f"'{field_name}' is outside the range [{lower}, {upper}]"
        )
    return number


def _parse_int(value: object, field_name: str) -> int:
    # bool is an int subclass; a flag is never a valid numeric field
    if isinstance(value, bool):
        raise EnpaDocumentRejectedError(f"'{field_name}' must be an integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError as error:
            raise EnpaDocumentRejectedError(
                f"'{field_name}' must be an integer, got '{value}'"
            ) from error
    raise EnpaDocumentRejectedError(
        f"'{field_name}' must be an integer, got {type(value).__name__}"
    )


def _as_float(value: object, field_name: str) -> float:
    if isinstance(value, bool):
        raise EnpaDocumentRejectedError(f"'{field_name}' must be a number, got bool")
    try:
        if isinstance(value, (int, float, str)):
            return float(value)
    except (ValueError, OverflowError) as error:
        raise EnpaDocumentRejectedError(
            f"'{field_name}' must be a number that fits a float"
        ) from error
    raise EnpaDocumentRejectedError(f"'{field_name}' must be a number, got {type(value).__name__}")


def _as_bytes(value: object, field_name: str) -> bytes:
    """Accept raw bytes from the store or base64 text from JSON exports."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as error:
            raise EnpaDocumentRejectedError(f"'{field_name}' is not valid base64") from error
    raise EnpaDocumentRejectedError(f"'{field_name}' must be bytes, got {type(value).__name__}")
