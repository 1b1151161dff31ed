"""Tests for Cargo manifest loading."""

import tempfile
import unittest
from pathlib import Path

from core.cargo_manifest import ManifestError, load_cargo_manifest, parse_cargo_manifest

FIXTURE_MANIFEST = (
    Path(__file__).resolve().parents[2] / "extraction" / "tests" / "fixtures" / "sample_crate" / "Cargo.toml"
)


class TestCargoManifest(unittest.TestCase):
    def test_load_fixture(self) -> None:
        manifest = load_cargo_manifest(str(FIXTURE_MANIFEST))
        self.assertEqual(manifest.package_name, "sample-ffi")
        self.assertEqual(manifest.version, "0.3.1")
        self.assertEqual(manifest.description, "Sample handles over FFI")
        self.assertEqual(manifest.authors, ("Ada Example <ada@example.com>",))
        self.assertEqual(manifest.license, "MIT OR Apache-2.0")
        self.assertEqual(manifest.package["edition"], "2021")

    def test_optional_fields_default(self) -> None:
        manifest = parse_cargo_manifest({"package": {"name": "my-crate", "version": "1.0.0"}})
        self.assertEqual(manifest.description, "")
        self.assertEqual(manifest.license, "")
        self.assertEqual(manifest.authors, ())

    def test_workspace_inherited_fields(self) -> None:
        manifest = parse_cargo_manifest(
            {"package": {"name": "member", "version": {"workspace": True}}}
        )
        self.assertEqual(manifest.version, "0.0.0")

    def test_missing_package_raises(self) -> None:
        with self.assertRaises(ManifestError):
            parse_cargo_manifest({"workspace": {"members": ["a"]}})

    def test_missing_name_raises(self) -> None:
        with self.assertRaises(ManifestError):
            parse_cargo_manifest({"package": {"version": "1.0.0"}})

    def test_missing_file_raises(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_cargo_manifest("/definitely/missing/Cargo.toml")

    def test_invalid_toml_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "Cargo.toml"
            path.write_text("[package\nname = \n", encoding="utf-8")
            with self.assertRaises(ManifestError):
                load_cargo_manifest(str(path))

    def test_to_dict(self) -> None:
        payload = load_cargo_manifest(str(FIXTURE_MANIFEST)).to_dict()
        self.assertEqual(
            set(payload), {"package_name", "version", "description", "authors", "license", "package"}
        )
        self.assertEqual(payload["authors"], ["Ada Example <ada@example.com>"])


if __name__ == "__main__":
    unittest.main()
