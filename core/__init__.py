"""Core shared contracts and utilities."""

from core.structured_logging import (
    configure_structured_logging,
    get_phase,
    get_source,
    phase_scope,
    source_scope,
)
from core.bindgen_config import (
    BindgenConfig,
    ConfigValidationError,
    config_from_mapping,
    load_bindgen_config,
    load_config_payload,
    resolve_strict_config_validation,
)
from core.cargo_manifest import (
    CargoManifest,
    ManifestError,
    load_cargo_manifest,
    parse_cargo_manifest,
)
from core.run_artifacts import write_library_snapshot

__all__ = [
    "configure_structured_logging",
    "get_phase",
    "get_source",
    "phase_scope",
    "source_scope",
    "BindgenConfig",
    "ConfigValidationError",
    "config_from_mapping",
    "load_bindgen_config",
    "load_config_payload",
    "resolve_strict_config_validation",
    "CargoManifest",
    "ManifestError",
    "load_cargo_manifest",
    "parse_cargo_manifest",
    "write_library_snapshot",
]
