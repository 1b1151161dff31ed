"""Binding generator configuration loading and validation.

Settings come from an optional YAML file (``ffi-bindgen.yml``) with
environment overrides. In strict mode every problem raises
``ConfigValidationError``; otherwise problems are logged and defaults used.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from typing import Any, Optional

import yaml

from extraction.config import (
    DEFAULT_ALLOW_SYNTAX_ERRORS,
    DEFAULT_ARRAY_WRAPPERS,
    DEFAULT_CHAR_TYPES,
    DEFAULT_EXPORT_MARKER,
    DEFAULT_OPAQUE_MARKER,
    DEFAULT_POLICY,
    DEFAULT_RECORD_MARKER,
    DEFAULT_VARIANT_FALLBACK,
    POLICY_NAMES,
    VARIANT_FALLBACKS,
)

logger = logging.getLogger(__name__)

POLICY_ENV = "FFI_BINDGEN_POLICY"
STRICT_ENV = "STRICT_CONFIG_VALIDATION"


class ConfigValidationError(RuntimeError):
    """Raised when strict configuration validation fails."""


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def resolve_strict_config_validation(default: bool = False) -> bool:
    """Resolve strict validation mode from ``STRICT_CONFIG_VALIDATION`` env."""
    return _env_flag(STRICT_ENV, default=default)


@dataclass(frozen=True)
class BindgenConfig:
    """Validated binding generator settings."""

    policy: str = DEFAULT_POLICY
    variant_fallback: str = DEFAULT_VARIANT_FALLBACK
    export_marker: str = DEFAULT_EXPORT_MARKER
    opaque_marker: str = DEFAULT_OPAQUE_MARKER
    record_marker: str = DEFAULT_RECORD_MARKER
    array_wrappers: tuple[str, ...] = field(
        default_factory=lambda: tuple(sorted(DEFAULT_ARRAY_WRAPPERS))
    )
    char_types: tuple[str, ...] = field(
        default_factory=lambda: tuple(sorted(DEFAULT_CHAR_TYPES))
    )
    allow_syntax_errors: bool = DEFAULT_ALLOW_SYNTAX_ERRORS

    def extraction_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``extraction.ExtractionOptions``."""
        return {
            "policy": self.policy,
            "variant_fallback": self.variant_fallback,
            "export_marker": self.export_marker,
            "opaque_marker": self.opaque_marker,
            "record_marker": self.record_marker,
            "array_wrappers": frozenset(self.array_wrappers),
            "char_types": frozenset(self.char_types),
            "allow_syntax_errors": self.allow_syntax_errors,
        }


_KNOWN_KEYS = {f.name for f in fields(BindgenConfig)}
_MARKER_KEYS = ("export_marker", "opaque_marker", "record_marker")
_NAME_LIST_KEYS = ("array_wrappers", "char_types")


def _reject(msg: str, strict: bool) -> None:
    if strict:
        raise ConfigValidationError(msg)
    logger.warning("%s; using default", msg)


def load_config_payload(config_path: str, strict: bool = False) -> dict[str, Any]:
    """Load and parse the YAML config file.

    In non-strict mode this returns an empty dict on parse/read failures.
    In strict mode this raises ``ConfigValidationError``.
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            payload = yaml.safe_load(f)
    except FileNotFoundError as exc:
        msg = f"Config file not found: {config_path}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}
    except yaml.YAMLError as exc:
        msg = f"Failed to parse config YAML at {config_path}: {exc}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}

    if payload is None:
        return {}

    if not isinstance(payload, dict):
        msg = f"Unexpected config payload type: {type(payload).__name__}"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; continuing with defaults", msg)
        return {}

    return payload


def _parse_name_list(key: str, raw: Any, strict: bool) -> Optional[tuple[str, ...]]:
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list) or not raw or not all(
        isinstance(item, str) and item.strip() for item in raw
    ):
        _reject(f"'{key}' must be a non-empty list of names", strict)
        return None
    return tuple(item.strip() for item in raw)


def config_from_mapping(payload: dict[str, Any], strict: bool = False) -> BindgenConfig:
    """Validate a config mapping and build a BindgenConfig."""
    values: dict[str, Any] = {}

    unknown = sorted(set(payload) - _KNOWN_KEYS)
    if unknown:
        _reject(f"Unknown config keys: {', '.join(unknown)}", strict)

    policy = payload.get("policy")
    if policy is not None:
        if policy in POLICY_NAMES:
            values["policy"] = policy
        else:
            _reject(
                f"'policy' must be one of {sorted(POLICY_NAMES)}, got {policy!r}",
                strict,
            )

    fallback = payload.get("variant_fallback")
    if fallback is not None:
        if fallback in VARIANT_FALLBACKS:
            values["variant_fallback"] = fallback
        else:
            _reject(
                f"'variant_fallback' must be one of {sorted(VARIANT_FALLBACKS)}, "
                f"got {fallback!r}",
                strict,
            )

    for key in _MARKER_KEYS:
        raw = payload.get(key)
        if raw is None:
            continue
        if isinstance(raw, str) and raw.strip():
            values[key] = raw.strip()
        else:
            _reject(f"'{key}' must be a non-empty attribute name", strict)

    for key in _NAME_LIST_KEYS:
        raw = payload.get(key)
        if raw is None:
            continue
        parsed = _parse_name_list(key, raw, strict)
        if parsed is not None:
            values[key] = parsed

    allow = payload.get("allow_syntax_errors")
    if allow is not None:
        if isinstance(allow, bool):
            values["allow_syntax_errors"] = allow
        else:
            _reject("'allow_syntax_errors' must be true or false", strict)

    return BindgenConfig(**values)


def load_bindgen_config(
    config_path: Optional[str] = None,
    strict: Optional[bool] = None,
) -> BindgenConfig:
    """Load the generator configuration.

    Args:
        config_path: Optional YAML file; defaults apply when None.
        strict: Strict validation; resolved from ``STRICT_CONFIG_VALIDATION``
            when None.

    Returns:
        The validated configuration, with ``FFI_BINDGEN_POLICY`` applied.

    Raises:
        ConfigValidationError: In strict mode, on any invalid setting.
    """
    if strict is None:
        strict = resolve_strict_config_validation()

    payload: dict[str, Any] = {}
    if config_path is not None:
        payload = load_config_payload(config_path, strict=strict)

    env_policy = os.getenv(POLICY_ENV)
    if env_policy:
        logger.info("Using classification policy '%s' from %s", env_policy, POLICY_ENV)
        payload = {**payload, "policy": env_policy.strip()}

    config = config_from_mapping(payload, strict=strict)
    logger.debug("Loaded bindgen config: %s", config)
    return config
