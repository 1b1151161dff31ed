"""
Integration tests for run_bindgen.py

Runs the whole extract-and-render pipeline on the fixture crate.
"""

import json
import tempfile
import unittest
from pathlib import Path

import run_bindgen

CRATE_DIR = Path(__file__).resolve().parents[2] / "extraction" / "tests" / "fixtures" / "sample_crate"
FIXTURES_DIR = CRATE_DIR.parent


class TestRunBindgen(unittest.TestCase):
    """Test the command-line entry point."""

    def _run(self, *extra):
        return run_bindgen.main(
            [
                "--name", "Sample::Ffi",
                "-c", str(CRATE_DIR / "Cargo.toml"),
                "--output-dir", self.output_dir,
                *extra,
            ]
        )

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.output_dir = tmp.name

    def test_parse_args_defaults(self):
        args = run_bindgen.parse_args(["--name", "A::B"])
        self.assertEqual(args.input, "ffi/src/lib.rs")
        self.assertEqual(args.cargo_toml, "ffi/Cargo.toml")
        self.assertIsNone(args.policy)
        self.assertFalse(args.verbose)

    def test_generates_distribution(self):
        snapshot = Path(self.output_dir) / "surface.json"
        status = self._run("-i", str(CRATE_DIR / "src"), "--dump-json", str(snapshot))

        self.assertEqual(status, 0)
        module = Path(self.output_dir) / "lib" / "Sample" / "Ffi.pm"
        text = module.read_text(encoding="utf-8")
        self.assertIn("$ffi->attach('session_open' => ['u16'] => 'Session');", text)
        self.assertIn("$ffi->type('opaque' => 'Session');", text)
        self.assertIn("our $VERSION = '0.3.1';", text)

        dist_ini = (Path(self.output_dir) / "dist.ini").read_text(encoding="utf-8")
        self.assertIn("name             = Sample-Ffi", dist_ini)

        payload = json.loads(snapshot.read_text(encoding="utf-8"))
        self.assertEqual(payload["library"]["opaques"], [{"name": "Session"}])

    def test_custom_main_file(self):
        status = self._run("-i", str(CRATE_DIR / "src"), "--main-file", "lib/Custom.pm")
        self.assertEqual(status, 0)
        self.assertTrue((Path(self.output_dir) / "lib" / "Custom.pm").is_file())

    def test_policy_flag(self):
        status = self._run("-i", str(FIXTURES_DIR / "repr_surface.rs"), "--policy", "repr")
        self.assertEqual(status, 0)
        text = (Path(self.output_dir) / "lib" / "Sample" / "Ffi.pm").read_text(encoding="utf-8")
        self.assertIn("$ffi->attach('ctx_new' => [] => 'Context');", text)

    def test_extraction_error_exit_code(self):
        status = self._run("-i", str(FIXTURES_DIR / "unsupported_callback.rs"))
        self.assertEqual(status, 1)
        self.assertFalse((Path(self.output_dir) / "dist.ini").exists())

    def test_non_utf8_input_reported_as_extraction_failure(self):
        source = Path(self.output_dir) / "latin1.rs"
        source.write_bytes(b'#[doc = "caf\xe9"]\n#[export]\nfn f(x: i32) {}\n')
        with self.assertLogs("run_bindgen", level="ERROR") as logs:
            status = self._run("-i", str(source))
        self.assertEqual(status, 1)
        self.assertTrue(any("Extraction failed" in line for line in logs.output))
        self.assertFalse((Path(self.output_dir) / "dist.ini").exists())

    def test_missing_input_exit_code(self):
        self.assertEqual(self._run("-i", str(FIXTURES_DIR / "missing.rs")), 1)

    def test_missing_manifest_exit_code(self):
        status = run_bindgen.main(
            [
                "--name", "Sample::Ffi",
                "-i", str(CRATE_DIR / "src"),
                "-c", str(FIXTURES_DIR / "no" / "Cargo.toml"),
                "--output-dir", self.output_dir,
            ]
        )
        self.assertEqual(status, 1)


if __name__ == "__main__":
    unittest.main()
