"""Cargo manifest contract consumed by the binding renderer."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class ManifestError(ValueError):
    """Raised when a Cargo manifest is missing required package data."""


@dataclass(frozen=True)
class CargoManifest:
    """Package metadata of the Rust crate being bound."""

    package_name: str
    version: str
    description: str = ""
    authors: tuple[str, ...] = ()
    license: str = ""
    package: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "package_name": self.package_name,
            "version": self.version,
            "description": self.description,
            "authors": list(self.authors),
            "license": self.license,
            "package": dict(self.package),
        }


def _expect_dict(payload: Any, ctx: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ManifestError(f"{ctx} must be a table")
    return payload


def _string_field(package: dict[str, Any], key: str, default: str = "") -> str:
    raw = package.get(key, default)
    # workspace-inherited values look like {workspace = true}
    if isinstance(raw, dict):
        return default
    return str(raw).strip()


def parse_cargo_manifest(payload: dict[str, Any]) -> CargoManifest:
    """Build a CargoManifest from a parsed ``Cargo.toml`` mapping.

    Raises:
        ManifestError: If ``[package]`` or its ``name`` is missing.
    """
    package = _expect_dict(payload.get("package"), "[package]")
    package_name = _string_field(package, "name")
    if not package_name:
        raise ManifestError("[package] requires a non-empty 'name'")

    authors_raw = package.get("authors", [])
    authors = tuple(str(a) for a in authors_raw) if isinstance(authors_raw, list) else ()

    return CargoManifest(
        package_name=package_name,
        version=_string_field(package, "version", "0.0.0"),
        description=_string_field(package, "description"),
        authors=authors,
        license=_string_field(package, "license"),
        package=dict(package),
    )


def load_cargo_manifest(path: str) -> CargoManifest:
    """Load and validate a ``Cargo.toml`` file.

    Raises:
        FileNotFoundError: If the manifest does not exist.
        ManifestError: If the TOML is invalid or lacks package data.
    """
    manifest_path = Path(path)
    if not manifest_path.is_file():
        raise FileNotFoundError(f"Cargo manifest not found: {manifest_path}")

    try:
        payload = tomllib.loads(manifest_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ManifestError(f"Failed to parse {manifest_path}: {exc}") from exc
    return parse_cargo_manifest(payload)
