"""
Unit tests for type_mapping.py

Tests translation of parser-neutral type expressions into FFI descriptors.
"""

import unittest
from extraction.config import MAX_TYPE_DEPTH
from extraction.errors import UnsupportedTypeError
from extraction.syntax import TypeExpr
from extraction.type_mapping import (
    TypeMappingOptions,
    is_char_descriptor,
    normalize_path_text,
    translate_return_type,
    translate_type,
)


def path(text):
    return TypeExpr(kind="path", text=text)


def pointer(inner, text=None):
    return TypeExpr(kind="pointer", text=text or f"*const {inner.text}", args=(inner,))


def array(inner, length):
    return TypeExpr(kind="array", text=f"[{inner.text}; {length}]", args=(inner,), length=length)


def generic(base, *args):
    inner = ", ".join(arg.text for arg in args)
    return TypeExpr(kind="generic", text=f"{base}<{inner}>", args=tuple(args), base=base)


class TestPathTypes(unittest.TestCase):
    """Test pass-through of named paths."""

    def test_primitive(self):
        """Primitive names pass through unchanged."""
        self.assertEqual(translate_type(path("i32")), "i32")

    def test_user_type(self):
        """User-defined type names pass through unchanged."""
        self.assertEqual(translate_type(path("Point")), "Point")

    def test_scoped_path_whitespace_removed(self):
        """Whitespace inside a scoped path is dropped."""
        self.assertEqual(translate_type(path("std :: ffi :: c_int")), "std::ffi::c_int")

    def test_normalize_path_text(self):
        """normalize_path_text strips every whitespace run."""
        self.assertEqual(normalize_path_text(" a ::\n b "), "a::b")


class TestPointers(unittest.TestCase):
    """Test raw pointer translation."""

    def test_pointer_to_primitive(self):
        """*const u8 becomes u8*."""
        self.assertEqual(translate_type(pointer(path("u8"))), "u8*")

    def test_mut_pointer_to_named_type(self):
        """*mut Handle becomes Handle* before post-processing."""
        self.assertEqual(translate_type(pointer(path("Handle"), "*mut Handle")), "Handle*")

    def test_pointer_to_char_is_string(self):
        """A pointer to c_char collapses to string, never char*."""
        result = translate_type(pointer(path("c_char")))
        self.assertEqual(result, "string")

    def test_pointer_to_qualified_char_is_string(self):
        """Qualified c_char paths count as the character type."""
        self.assertEqual(translate_type(pointer(path("std::os::raw::c_char"))), "string")

    def test_pointer_to_pointer(self):
        """Nested pointers stack their stars."""
        self.assertEqual(translate_type(pointer(pointer(path("i32")))), "i32**")

    def test_pointer_to_char_pointer(self):
        """Only the innermost char pointer becomes a string."""
        self.assertEqual(translate_type(pointer(pointer(path("c_char")))), "string*")

    def test_pointer_without_element_rejected(self):
        """A pointer with no element type is rejected, not passed through."""
        with self.assertRaises(UnsupportedTypeError):
            translate_type(TypeExpr(kind="pointer", text="*const"))


class TestArrays(unittest.TestCase):
    """Test fixed array and growable array translation."""

    def test_fixed_array(self):
        """[u8; 4] becomes u8[4]."""
        self.assertEqual(translate_type(array(path("u8"), "4")), "u8[4]")

    def test_fixed_array_constant_length_verbatim(self):
        """The length is reproduced as source text."""
        self.assertEqual(translate_type(array(path("f32"), "N * 2")), "f32[N * 2]")

    def test_char_array_is_fixed_string(self):
        """[c_char; 16] becomes string(16), never c_char[16]."""
        result = translate_type(array(path("c_char"), "16"))
        self.assertEqual(result, "string(16)")
        self.assertNotIn("[", result)

    def test_array_of_pointers(self):
        """Arrays of pointers keep the pointer descriptor."""
        self.assertEqual(translate_type(array(pointer(path("Node")), "8")), "Node*[8]")

    def test_slice_rejected(self):
        """Arrays without a length are slices and are rejected."""
        slice_expr = TypeExpr(kind="array", text="[u8]", args=(path("u8"),))
        with self.assertRaises(UnsupportedTypeError) as ctx:
            translate_type(slice_expr)
        self.assertIn("slices", str(ctx.exception))

    def test_array_wrapper(self):
        """array<T> becomes T[]."""
        self.assertEqual(translate_type(generic("array", path("i32"))), "i32[]")

    def test_array_wrapper_of_pointers(self):
        """The wrapper recurses into its element."""
        self.assertEqual(translate_type(generic("array", pointer(path("Foo")))), "Foo*[]")

    def test_custom_array_wrapper(self):
        """Wrapper names are configurable."""
        options = TypeMappingOptions(array_wrappers=frozenset({"FfiVec"}))
        self.assertEqual(translate_type(generic("FfiVec", path("u16")), options), "u16[]")
        with self.assertRaises(UnsupportedTypeError):
            translate_type(generic("array", path("u16")), options)


class TestRejections(unittest.TestCase):
    """Test that unsupported constructs fail with a named construct."""

    def test_function_pointer(self):
        """Function pointers are rejected by name."""
        expr = TypeExpr(kind="function_pointer", text="fn(i32) -> i32")
        with self.assertRaises(UnsupportedTypeError) as ctx:
            translate_type(expr)
        self.assertIn("function pointer", str(ctx.exception))
        self.assertEqual(ctx.exception.construct, "function pointers")
        self.assertEqual(ctx.exception.type_text, "fn(i32) -> i32")

    def test_reference(self):
        """References are rejected."""
        with self.assertRaises(UnsupportedTypeError) as ctx:
            translate_type(TypeExpr(kind="reference", text="&str"))
        self.assertIn("references", str(ctx.exception))

    def test_tuple(self):
        """Tuples are rejected."""
        with self.assertRaises(UnsupportedTypeError) as ctx:
            translate_type(TypeExpr(kind="tuple", text="(i32, u8)"))
        self.assertIn("tuples", str(ctx.exception))

    def test_trait_object(self):
        """Trait objects are rejected."""
        with self.assertRaises(UnsupportedTypeError) as ctx:
            translate_type(TypeExpr(kind="trait_object", text="dyn Fn()"))
        self.assertIn("trait objects", str(ctx.exception))

    def test_never_type_singular_message(self):
        """Singular construct names read 'is not supported'."""
        with self.assertRaises(UnsupportedTypeError) as ctx:
            translate_type(TypeExpr(kind="never", text="!"))
        self.assertIn("never type is not supported", str(ctx.exception))

    def test_other_generics(self):
        """Generic paths other than the array wrapper are rejected."""
        with self.assertRaises(UnsupportedTypeError) as ctx:
            translate_type(generic("Vec", path("u8")))
        self.assertIn("generic type arguments", str(ctx.exception))

    def test_array_wrapper_with_two_arguments(self):
        """The wrapper takes exactly one type argument."""
        with self.assertRaises(UnsupportedTypeError):
            translate_type(generic("array", path("u8"), path("u16")))

    def test_array_wrapper_with_lifetime(self):
        """A non-type generic argument is not an element type."""
        lifetime = TypeExpr(kind="generic_argument", text="'a")
        with self.assertRaises(UnsupportedTypeError):
            translate_type(generic("array", lifetime))

    def test_nested_failure_propagates(self):
        """A failure inside a pointer element fails the whole translation."""
        with self.assertRaises(UnsupportedTypeError) as ctx:
            translate_type(pointer(TypeExpr(kind="tuple", text="()")))
        self.assertIn("tuples", str(ctx.exception))

    def test_variadic(self):
        """C variadic parameters are rejected."""
        with self.assertRaises(UnsupportedTypeError) as ctx:
            translate_type(TypeExpr(kind="variadic", text="..."))
        self.assertIn("variadic parameters", str(ctx.exception))

    def test_nesting_limit(self):
        """Chains deeper than the limit fail instead of exhausting the stack."""
        expr = path("u8")
        for _ in range(1500):
            expr = TypeExpr(kind="pointer", text="*const T", args=(expr,))
        with self.assertRaises(UnsupportedTypeError) as ctx:
            translate_type(expr)
        self.assertIn("type nesting beyond depth 64", str(ctx.exception))

    def test_nesting_at_limit_translates(self):
        expr = path("u8")
        for _ in range(MAX_TYPE_DEPTH):
            expr = TypeExpr(kind="pointer", text="*const T", args=(expr,))
        self.assertEqual(translate_type(expr), "u8" + "*" * MAX_TYPE_DEPTH)

    def test_lowered_too_deep_kind(self):
        with self.assertRaises(UnsupportedTypeError) as ctx:
            translate_type(TypeExpr(kind="too_deep", text="*const *const u8"))
        self.assertEqual(ctx.exception.construct, "type nesting beyond depth 64")

    def test_unknown_kind(self):
        """Unknown kinds are failures, not pass-throughs."""
        with self.assertRaises(UnsupportedTypeError) as ctx:
            translate_type(TypeExpr(kind="unknown", text="weird"))
        self.assertIn("unrecognized type syntax", str(ctx.exception))

    def test_kinds_without_a_lowering_are_unrecognized(self):
        """Kinds the front end never produces get the generic message."""
        for kind in ("group", "verbatim"):
            with self.subTest(kind=kind):
                with self.assertRaises(UnsupportedTypeError) as ctx:
                    translate_type(TypeExpr(kind=kind, text="T"))
                self.assertEqual(ctx.exception.construct, "unrecognized type syntax")


class TestReturnTypes(unittest.TestCase):
    """Test return type translation."""

    def test_missing_return_is_void(self):
        """No return type maps to void."""
        self.assertEqual(translate_return_type(None), "void")

    def test_return_type_translated(self):
        """Present return types are translated."""
        self.assertEqual(translate_return_type(pointer(path("c_char"))), "string")


class TestCharDescriptor(unittest.TestCase):
    """Test character type detection."""

    def test_plain(self):
        self.assertTrue(is_char_descriptor("c_char"))

    def test_qualified(self):
        self.assertTrue(is_char_descriptor("libc::c_char"))

    def test_not_char(self):
        self.assertFalse(is_char_descriptor("u8"))
        self.assertFalse(is_char_descriptor("c_char_t"))

    def test_custom_char_types(self):
        options = TypeMappingOptions(char_types=frozenset({"c_char", "u8"}))
        self.assertTrue(is_char_descriptor("u8", options))
        self.assertEqual(translate_type(array(path("u8"), "32"), options), "string(32)")


if __name__ == "__main__":
    unittest.main()
