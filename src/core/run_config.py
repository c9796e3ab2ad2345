"""Typed run-config parsing for ingestion runs.

A run config is a YAML file describing one run: the metrics to batch,
the time window, the document source, and the output prefixes. The
parsed result is the same immutable ``IngestionOptions`` the CLI builds.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence, cast

from core.constants import (
    DEFAULT_HEADER_OUTPUT,
    DEFAULT_MIN_BATCH_SIZE,
    SOURCE_KIND_FIRESTORE,
    SOURCE_KIND_JSONL,
    SUPPORTED_SOURCE_KINDS,
)
from core.errors import EnpaConfigError, EnpaDependencyError
from core.types import IngestionOptions

_ROOT_KEYS = {"version", "metrics", "window", "source", "output", "min_batch_size"}
_WINDOW_KEYS = {"start_time", "duration"}
_SOURCE_KEYS = {"kind", "uri"}
_OUTPUT_KEYS = {"pha", "facilitator", "header"}


def load_run_config(config_path: str) -> IngestionOptions:
    """Load and validate a YAML run config from disk.

    Args:
        config_path: File path to the YAML run config.

    Returns:
        Validated ingestion options.

    Raises:
        EnpaDependencyError: If PyYAML is unavailable.
        EnpaConfigError: If the file is unreadable or fails schema checks.
    """
    payload = _load_yaml_payload(config_path)
    root = _expect_mapping(payload, "run config root")
    _validate_keys(root, _ROOT_KEYS, "run config")
    _parse_version(root)
    window = _expect_mapping(_required(root, "window", "run config"), "run config window")
    _validate_keys(window, _WINDOW_KEYS, "run config window")
    output = _expect_mapping(_required(root, "output", "run config"), "run config output")
    _validate_keys(output, _OUTPUT_KEYS, "run config output")
    source = _expect_mapping(root.get("source", {}), "run config source")
    _validate_keys(source, _SOURCE_KEYS, "run config source")
    options = IngestionOptions(
        metrics=_parse_metrics(_required(root, "metrics", "run config")),
        start_time=_expect_int(_required(window, "start_time", "run config window"), "start_time"),
        duration=_expect_int(_required(window, "duration", "run config window"), "duration"),
        pha_output=_expect_string(_required(output, "pha", "run config output"), "output.pha"),
        facilitator_output=_expect_string(
            _required(output, "facilitator", "run config output"), "output.facilitator"
        ),
        header_output=_expect_string(
            output.get("header", DEFAULT_HEADER_OUTPUT), "output.header"
        ),
        source_uri=_optional_string(source, "uri"),
        source_kind=_expect_string(source.get("kind", SOURCE_KIND_JSONL), "source.kind"),
        min_batch_size=_expect_int(
            root.get("min_batch_size", DEFAULT_MIN_BATCH_SIZE), "min_batch_size"
        ),
    )
    validate_ingestion_options(options)
    return options


def validate_ingestion_options(options: IngestionOptions) -> None:
    """Validate run options before any source read.

    Args:
        options: Options built by the CLI, SDK, or run config.

    Raises:
        EnpaConfigError: If options cannot describe a valid run.
    """
    if not options.metrics:
        raise EnpaConfigError("No metrics configured. Provide at least one metric name.")
    if any(not metric for metric in options.metrics):
        raise EnpaConfigError("Metric names must be non-empty strings.")
    if len(set(options.metrics)) != len(options.metrics):
        raise EnpaConfigError(
            f"Duplicate metric names in {list(options.metrics)}. "
            "Each metric writes its own batch; list it once."
        )
    if options.start_time < 0:
        raise EnpaConfigError(
            f"Invalid window start time {options.start_time}: expected epoch seconds >= 0."
        )
    if options.duration <= 0:
        raise EnpaConfigError(
            f"Invalid window duration {options.duration}: expected a positive number of seconds."
        )
    if options.min_batch_size < 0:
        raise EnpaConfigError(
            f"Invalid min batch size {options.min_batch_size}: expected 0 or more."
        )
    if options.source_kind not in SUPPORTED_SOURCE_KINDS:
        raise EnpaConfigError(
            f"Unsupported source kind '{options.source_kind}'. "
            f"Use one of: {', '.join(SUPPORTED_SOURCE_KINDS)}."
        )
    if options.source_kind != SOURCE_KIND_FIRESTORE and not options.source_uri:
        raise EnpaConfigError(
            f"Source kind '{options.source_kind}' requires a source URI. "
            "Provide a local export path or s3://bucket/prefix."
        )
    if not options.pha_output or not options.facilitator_output or not options.header_output:
        raise EnpaConfigError("PHA, Facilitator, and header output prefixes must be non-empty.")
    outputs = (options.pha_output, options.facilitator_output, options.header_output)
    if len(set(outputs)) != len(outputs):
        raise EnpaConfigError(
            f"Output prefixes must be distinct, got pha={options.pha_output!r}, "
            f"facilitator={options.facilitator_output!r}, header={options.header_output!r}. "
            "Each server reads its own packet files."
        )


def _load_yaml_payload(config_path: str) -> object:
    try:
        import yaml
    except ImportError as error:  # pragma: no cover - dependency failure
        raise EnpaDependencyError(
            "YAML run configs require PyYAML. Install with 'pip install pyyaml'."
        ) from error
    config_file = Path(config_path).expanduser().resolve()
    if not config_file.exists():
        raise EnpaConfigError(
            f"Run config file does not exist at {config_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(config_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise EnpaConfigError(
            f"Failed to read run config at {config_file}: {error}. Check file permissions."
        ) from error
    except yaml.YAMLError as error:
        raise EnpaConfigError(
            f"Failed to parse YAML run config at {config_file}: {error}. Fix YAML syntax."
        ) from error
    if payload is None:
        raise EnpaConfigError(f"Run config at {config_file} is empty.")
    return payload


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if not isinstance(value, Mapping):
        raise EnpaConfigError(
            f"Invalid {context}: expected object mapping, got {type(value).__name__}."
        )
    for key in value:
        if not isinstance(key, str):
            raise EnpaConfigError(
                f"Invalid {context}: expected string keys, got {type(key).__name__}."
            )
    return cast(Mapping[str, object], value)


def _required(mapping: Mapping[str, object], field_name: str, context: str) -> object:
    if field_name not in mapping:
        raise EnpaConfigError(f"Invalid {context}: missing required field '{field_name}'.")
    return mapping[field_name]


def _parse_version(root: Mapping[str, object]) -> None:
    raw_version = root.get("version")
    if not isinstance(raw_version, int) or isinstance(raw_version, bool):
        raise EnpaConfigError("Run config field 'version' must be an integer. Set version: 1.")
    if raw_version != 1:
        raise EnpaConfigError(f"Unsupported run config version {raw_version}. Use version: 1.")


def _parse_metrics(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return tuple(_expect_string(item, "metrics[]") for item in value)
    raise EnpaConfigError(
        f"Run config field 'metrics' must be a string or list, got {type(value).__name__}."
    )


def _expect_int(value: object, field_name: str) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise EnpaConfigError(f"Run config field '{field_name}' must be an integer.")


def _expect_string(value: object, field_name: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    raise EnpaConfigError(f"Run config field '{field_name}' must be a non-empty string.")


def _optional_string(mapping: Mapping[str, object], field_name: str) -> str | None:
    raw_value = mapping.get(field_name)
    if raw_value is None:
        return None
    return _expect_string(raw_value, f"source.{field_name}")


def _validate_keys(mapping: Mapping[str, object], allowed_keys: set[str], context: str) -> None:
    unknown_keys = sorted(set(mapping) - allowed_keys)
    if unknown_keys:
        raise EnpaConfigError(f"The {context} contains unknown fields: {', '.join(unknown_keys)}.")
