"""Public SDK surface for ENPA ingestion.

This module provides a stable import path for ingestion users.
It re-exports the client and the typed run models.
"""

from __future__ import annotations

from core.config import EnpaConfig
from core.errors import (
    EnpaConfigError,
    EnpaError,
    EnpaIngestError,
    EnpaStoreError,
)
from core.run_config import load_run_config
from core.types import (
    BatchResult,
    DataShare,
    DataShareMetadata,
    DataSharePacket,
    EncryptedShare,
    IngestionHeader,
    IngestionOptions,
    IngestionSummary,
)
from ingest.ingestion_sdk import IngestionClient

__all__ = [
    "BatchResult",
    "DataShare",
    "DataShareMetadata",
    "DataSharePacket",
    "EncryptedShare",
    "EnpaConfig",
    "EnpaConfigError",
    "EnpaError",
    "EnpaIngestError",
    "EnpaStoreError",
    "IngestionClient",
    "IngestionHeader",
    "IngestionOptions",
    "IngestionSummary",
    "load_run_config",
]
