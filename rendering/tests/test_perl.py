"""
Unit tests for perl.py

Tests Perl module and dist.ini rendering from a finalized Library.
"""

import tempfile
import unittest
from pathlib import Path

from core.cargo_manifest import CargoManifest
from extraction.models import Enum, Field, Function, Library, Opaque, Record, Repr, Variant
from rendering.perl import (
    ModuleNames,
    PerlBindingRenderer,
    build_context,
    dzil_license,
    perl_constant,
    perl_quote,
    write_generated_files,
)


def sample_library():
    return Library(
        functions=[
            Function(name="add", args=["i32", "i32"], ret="i32"),
            Function(name="make", args=[], ret="Handle"),
            Function(name="label", args=["Handle"], ret="string"),
        ],
        enums=[
            Enum(
                name="Color",
                repr=Repr.U8,
                variants=[Variant("Red", "0"), Variant("Green", "5u8"), Variant("Blue", "(BASE) + 1")],
            ),
            Enum(name="Mode", variants=[Variant("On", "On")]),
        ],
        records=[Record(name="Point", fields=[Field("x", "i32"), Field("y", "i32")])],
        opaques=[Opaque(name="Handle")],
    )


def sample_manifest():
    return CargoManifest(
        package_name="math-fast",
        version="0.3.1",
        description="Fast math over FFI",
        authors=("Ada Example <ada@example.com>",),
        license="MIT OR Apache-2.0",
    )


class TestFilters(unittest.TestCase):
    """Test template filters."""

    def test_perl_quote(self):
        self.assertEqual(perl_quote("i32"), "'i32'")
        self.assertEqual(perl_quote("it's"), "'it\\'s'")
        self.assertEqual(perl_quote("a\\b"), "'a\\\\b'")

    def test_perl_constant(self):
        self.assertEqual(perl_constant("5", "A"), "5")
        self.assertEqual(perl_constant("5u8", "A"), "5")
        self.assertEqual(perl_constant("-0x10i32", "A"), "-0x10")
        self.assertEqual(perl_constant("(BASE) + 1", "A"), "(BASE) + 1")
        self.assertEqual(perl_constant("A", "A"), "'A'")

    def test_dzil_license(self):
        self.assertEqual(dzil_license("MIT"), "MIT")
        self.assertEqual(dzil_license("MIT OR Apache-2.0"), "MIT")
        self.assertEqual(dzil_license("Apache-2.0/MIT"), "Apache_2_0")
        self.assertEqual(dzil_license(""), "Perl_5")
        self.assertEqual(dzil_license("WTFPL"), "Perl_5")


class TestModuleNames(unittest.TestCase):
    """Test distribution naming defaults."""

    def test_defaults(self):
        names = ModuleNames(name="Math::Fast::Ops")
        self.assertEqual(names.resolved_distname, "Math-Fast-Ops")
        self.assertEqual(names.resolved_main_file, "lib/Math/Fast/Ops.pm")

    def test_overrides(self):
        names = ModuleNames(name="Math::Fast", distname="MathFast", main_file="lib/MF.pm")
        self.assertEqual(names.to_dict(), {"name": "Math::Fast", "distname": "MathFast", "main_file": "lib/MF.pm"})

    def test_empty_name(self):
        with self.assertRaises(ValueError):
            ModuleNames(name="  ")


class TestRenderModule(unittest.TestCase):
    """Test the FFI::Platypus module template."""

    def setUp(self):
        self.renderer = PerlBindingRenderer()
        self.names = ModuleNames(name="Math::Fast")
        self.text = self.renderer.render_module(sample_library(), self.names, sample_manifest())

    def test_header(self):
        self.assertTrue(self.text.startswith("package Math::Fast;\n"))
        self.assertIn("# ABSTRACT: Fast math over FFI", self.text)
        self.assertIn("our $VERSION = '0.3.1';", self.text)
        self.assertIn("FFI::Platypus->new( api => 2, lang => 'Rust' );", self.text)
        self.assertTrue(self.text.rstrip().endswith("1;"))

    def test_functions(self):
        self.assertIn("$ffi->attach('add' => ['i32', 'i32'] => 'i32');", self.text)
        self.assertIn("$ffi->attach('make' => [] => 'Handle');", self.text)
        self.assertIn("$ffi->attach('label' => ['Handle'] => 'string');", self.text)

    def test_enums(self):
        self.assertIn("use constant Red => 0;", self.text)
        self.assertIn("use constant Green => 5;", self.text)
        self.assertIn("use constant Blue => (BASE) + 1;", self.text)
        self.assertIn("$ffi->type('u8' => 'Color');", self.text)
        self.assertIn("use constant On => 'On';", self.text)
        self.assertIn("$ffi->type('enum' => 'Mode');", self.text)

    def test_records(self):
        self.assertIn("package Math::Fast::Point {", self.text)
        self.assertIn("'i32' => 'x',", self.text)
        self.assertIn("$ffi->type('record(Math::Fast::Point)' => 'Point');", self.text)

    def test_opaques(self):
        self.assertIn("$ffi->type('opaque' => 'Handle');", self.text)

    def test_exports(self):
        export_block = self.text[self.text.index("our @EXPORT_OK"):]
        for name in ("'add'", "'make'", "'label'", "'Red'", "'On'"):
            self.assertIn(name, export_block)

    def test_declaration_order(self):
        self.assertLess(self.text.index("'add' =>"), self.text.index("'make' =>"))
        self.assertLess(self.text.index("Red =>"), self.text.index("Green =>"))

    def test_without_manifest(self):
        text = self.renderer.render_module(sample_library(), self.names)
        self.assertIn("# ABSTRACT: Perl bindings for Math::Fast", text)
        self.assertNotIn("$VERSION", text)

    def test_empty_library(self):
        text = self.renderer.render_module(Library(), self.names)
        self.assertNotIn("$ffi->attach", text)
        self.assertNotIn("# Records", text)
        self.assertIn("our @EXPORT_OK = (", text)


class TestRenderDistIni(unittest.TestCase):
    """Test the Dist::Zilla template."""

    def setUp(self):
        self.renderer = PerlBindingRenderer()
        self.names = ModuleNames(name="Math::Fast")

    def test_with_manifest(self):
        text = self.renderer.render_dist_ini(sample_library(), self.names, sample_manifest())
        self.assertIn("name             = Math-Fast", text)
        self.assertIn("main_module      = lib/Math/Fast.pm", text)
        self.assertIn("version          = 0.3.1", text)
        self.assertIn("author           = Ada Example <ada@example.com>", text)
        self.assertIn("license          = MIT", text)
        self.assertIn("copyright_holder = Ada Example <ada@example.com>", text)
        self.assertIn("[FFI::Build]", text)

    def test_without_manifest(self):
        text = self.renderer.render_dist_ini(Library(), self.names)
        self.assertIn("license          = Perl_5", text)
        self.assertIn("copyright_holder = Math-Fast", text)
        self.assertNotIn("version", text)


class TestGenerate(unittest.TestCase):
    """Test generating and writing every output file."""

    def test_generate_and_write(self):
        names = ModuleNames(name="Math::Fast")
        files = PerlBindingRenderer().generate(sample_library(), names, sample_manifest())
        self.assertEqual([str(f.path) for f in files], ["lib/Math/Fast.pm", "dist.ini"])

        with tempfile.TemporaryDirectory() as tmpdir:
            written = write_generated_files(files, tmpdir)
            self.assertEqual(len(written), 2)
            module = Path(tmpdir) / "lib" / "Math" / "Fast.pm"
            self.assertTrue(module.is_file())
            self.assertEqual(module.read_text(encoding="utf-8"), files[0].content)

    def test_build_context(self):
        context = build_context(sample_library(), ModuleNames(name="Math::Fast"))
        self.assertEqual(set(context), {"exports", "enums", "records", "opaques", "names", "cargo"})
        self.assertIsNone(context["cargo"])


if __name__ == "__main__":
    unittest.main()
