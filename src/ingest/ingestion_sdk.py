"""Python SDK for ingestion runs.

This module exposes the high-level client used by the CLI and by
scheduled jobs that run ingestion in-process.
"""

from __future__ import annotations

from core.config import EnpaConfig
from core.run_config import load_run_config
from core.types import IngestionOptions, IngestionSummary
from ingest.pipeline import run_ingestion


class IngestionClient:
    """Primary SDK entry point for ingestion runs."""

    def __init__(self, config: EnpaConfig | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration, read from env when omitted.
        """
        self._config = config or EnpaConfig.from_env()

    @property
    def config(self) -> EnpaConfig:
        return self._config

    def run(self, options: IngestionOptions) -> IngestionSummary:
        """Run ingestion for the given options.

        Args:
            options: Immutable run options.

        Returns:
            Per-metric batch results and final counters.

        Raises:
            EnpaConfigError: If options or store bootstrap are invalid.
            EnpaIngestError: If the document source cannot be read.
            EnpaStoreError: If output persistence fails.
        """
        return run_ingestion(options, self._config)

    def run_config_file(self, config_path: str) -> IngestionSummary:
        """Load a YAML run config and run it."""
        return self.run(load_run_config(config_path))
