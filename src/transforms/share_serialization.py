"""Data share to packet serialization.

Every share becomes exactly two packets in server index order. Both
packets carry the share's ``r_pit`` and ``uuid`` unchanged so the two
servers can later pair their halves.
"""

from __future__ import annotations

from typing import Iterable

from core.constants import FACILITATOR_INDEX, PHA_INDEX
from core.counters import Counter
from core.errors import EnpaTransformError
from core.types import DataShare, DataSharePacket, EncryptedShare, SerializedDataShare


def serialize_data_share(
    share: DataShare,
    included: Counter | None = None,
) -> SerializedDataShare:
    """Split one share into its PHA and Facilitator packets.

    Args:
        share: Validated data share.
        included: Optional counter incremented once per share.

    Returns:
        Packets keyed by the share metadata, index 0 for the PHA.
    """
    pha_share, facilitator_share = share.encrypted_data_shares
    packets = (
        _build_packet(share, pha_share),
        _build_packet(share, facilitator_share),
    )
    if included is not None:
        included.inc()
    return SerializedDataShare(metadata=share.metadata, packets=packets)


def serialize_data_shares(
    shares: Iterable[DataShare],
    included: Counter | None = None,
) -> list[SerializedDataShare]:
    """Serialize shares one by one, preserving input order."""
    return [serialize_data_share(share, included) for share in shares]


def fork_by_index(
    serialized_shares: Iterable[SerializedDataShare],
    index: int,
) -> list[DataSharePacket]:
    """Project the packet bound for one server out of every share.

    Args:
        serialized_shares: Packet pairs from ``serialize_data_share``.
        index: ``0`` for the PHA stream, ``1`` for the Facilitator stream.

    Returns:
        One packet per share, in input order.

    Raises:
        EnpaTransformError: If ``index`` is not a server index.
    """
    if index not in (PHA_INDEX, FACILITATOR_INDEX):
        raise EnpaTransformError(
            f"Invalid server index {index}: expected {PHA_INDEX} or {FACILITATOR_INDEX}."
        )
    return [serialized.packets[index] for serialized in serialized_shares]


def _build_packet(share: DataShare, encrypted_share: EncryptedShare) -> DataSharePacket:
    return DataSharePacket(
        encryption_key_id=encrypted_share.encryption_key_id,
        encrypted_payload=encrypted_share.encrypted_payload,
        r_pit=share.r_pit,
        uuid=share.uuid,
    )
