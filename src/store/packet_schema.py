"""Versioned columnar schemas for packet and header files.

Packet and header files are Parquet files with fixed Arrow schemas.
The schema name and version are stored in the file metadata so the
aggregation servers can refuse files they do not understand.
"""

from __future__ import annotations

from typing import Any

import pyarrow as pa
import pyarrow.parquet as pq

from core.constants import PACKET_SCHEMA_VERSION
from core.types import DataSharePacket, IngestionHeader

PACKET_SCHEMA_NAME = "PrioDataSharePacket"
HEADER_SCHEMA_NAME = "PrioIngestionHeader"

# Inclusive value ranges of the integer columns below; the document adapter
# rejects values outside them.
INT32_BOUNDS = (-(2**31), 2**31 - 1)
INT64_BOUNDS = (-(2**63), 2**63 - 1)

PACKET_SCHEMA = pa.schema(
    [
        pa.field("uuid", pa.string(), nullable=False),
        pa.field("encrypted_payload", pa.binary(), nullable=False),
        pa.field("encryption_key_id", pa.string(), nullable=False),
        pa.field("r_PIT", pa.int64(), nullable=False),
    ],
    metadata={
        "enpa.schema": PACKET_SCHEMA_NAME,
        "enpa.schema_version": PACKET_SCHEMA_VERSION,
    },
)

HEADER_SCHEMA = pa.schema(
    [
        pa.field("batch_uuid", pa.string(), nullable=False),
        pa.field("name", pa.string(), nullable=False),
        pa.field("bins", pa.int64(), nullable=False),
        pa.field("epsilon", pa.float64(), nullable=False),
        pa.field("prime", pa.int64(), nullable=False),
        pa.field("number_of_servers", pa.int32(), nullable=False),
        pa.field("hamming_weight", pa.int32(), nullable=False),
        pa.field("batch_start_time", pa.int64(), nullable=False),
        pa.field("batch_end_time", pa.int64(), nullable=False),
        pa.field("packet_file_digest", pa.binary(), nullable=False),
    ],
    metadata={
        "enpa.schema": HEADER_SCHEMA_NAME,
        "enpa.schema_version": PACKET_SCHEMA_VERSION,
    },
)


def encode_packets(packets: list[DataSharePacket]) -> bytes:
    """Encode packets into Parquet file bytes.

    Args:
        packets: Packets for one server, in file order.

    Returns:
        Complete Parquet file contents.
    """
    rows = [
        {
            "uuid": packet.uuid,
            "encrypted_payload": packet.encrypted_payload,
            "encryption_key_id": packet.encryption_key_id,
            "r_PIT": packet.r_pit,
        }
        for packet in packets
    ]
    return _encode_table(pa.Table.from_pylist(rows, schema=PACKET_SCHEMA))


def encode_header(header: IngestionHeader) -> bytes:
    """Encode a single batch header into Parquet file bytes."""
    row = {
        "batch_uuid": header.batch_uuid,
        "name": header.name,
        "bins": header.bins,
        "epsilon": header.epsilon,
        "prime": header.prime,
        "number_of_servers": header.number_of_servers,
        "hamming_weight": header.hamming_weight,
        "batch_start_time": header.batch_start_time,
        "batch_end_time": header.batch_end_time,
        "packet_file_digest": header.packet_file_digest,
    }
    return _encode_table(pa.Table.from_pylist([row], schema=HEADER_SCHEMA))


def decode_packets(payload: bytes) -> list[DataSharePacket]:
    """Decode a packet file produced by ``encode_packets``."""
    return [
        DataSharePacket(
            encryption_key_id=row["encryption_key_id"],
            encrypted_payload=row["encrypted_payload"],
            r_pit=row["r_PIT"],
            uuid=row["uuid"],
        )
        for row in _decode_rows(payload, PACKET_SCHEMA_NAME)
    ]


def decode_headers(payload: bytes) -> list[IngestionHeader]:
    """Decode a header file produced by ``encode_header``."""
    return [IngestionHeader(**row) for row in _decode_rows(payload, HEADER_SCHEMA_NAME)]


def _encode_table(table: pa.Table) -> bytes:
    sink = pa.BufferOutputStream()
    pq.write_table(table, sink)
    return sink.getvalue().to_pybytes()


def _decode_rows(payload: bytes, schema_name: str) -> list[dict[str, Any]]:
    table = pq.read_table(pa.BufferReader(payload))
    metadata = table.schema.metadata or {}
    found_name = metadata.get(b"enpa.schema", b"").decode("utf-8")
    if found_name != schema_name:
        raise ValueError(f"Expected a {schema_name} file, found schema '{found_name or '-'}'.")
    return table.to_pylist()
