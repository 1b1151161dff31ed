"""
Translation of Rust type expressions into FFI type descriptors.

Descriptors form a closed vocabulary understood by FFI::Platypus with the Rust
language plugin: primitive and named types pass through, ``T*`` for raw
pointers, ``T[n]`` for fixed arrays, ``T[]`` for the growable array wrapper,
and ``string`` / ``string(n)`` for C character data. Every other construct is
rejected with an UnsupportedTypeError naming it.
"""

import re
from dataclasses import dataclass
from typing import FrozenSet, Optional

from extraction.config import (
    DEFAULT_ARRAY_WRAPPERS,
    DEFAULT_CHAR_TYPES,
    KIND_ARRAY,
    KIND_GENERIC,
    KIND_GENERIC_ARGUMENT,
    KIND_PATH,
    KIND_POINTER,
    KIND_SLICE,
    KIND_TOO_DEEP,
    MAX_TYPE_DEPTH,
    STRING_DESCRIPTOR,
    UNSUPPORTED_CONSTRUCTS,
    VOID_DESCRIPTOR,
)
from extraction.errors import UnsupportedTypeError
from extraction.syntax import TypeExpr

_WHITESPACE_RE = re.compile(r"\s+")
_UNRECOGNIZED_CONSTRUCT = "unrecognized type syntax"


@dataclass(frozen=True)
class TypeMappingOptions:
    """Tunable parts of the type vocabulary.

    Attributes:
        array_wrappers: Generic path names mapped to the growable ``T[]`` form.
        char_types: Element types that turn arrays and pointers into strings.
    """

    array_wrappers: FrozenSet[str] = DEFAULT_ARRAY_WRAPPERS
    char_types: FrozenSet[str] = DEFAULT_CHAR_TYPES


DEFAULT_TYPE_MAPPING = TypeMappingOptions()


def normalize_path_text(text: str) -> str:
    """Drop whitespace from a path (``std :: ffi :: c_char`` -> ``std::ffi::c_char``)."""
    return _WHITESPACE_RE.sub("", text)


def normalize_expression_text(text: str) -> str:
    """Collapse whitespace runs in an expression to single spaces."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def is_char_descriptor(descriptor: str, options: TypeMappingOptions = DEFAULT_TYPE_MAPPING) -> bool:
    """Check whether a descriptor names the C character element type.

    A qualified path counts when its last segment is a character type, so
    ``std::os::raw::c_char`` and ``libc::c_char`` behave like ``c_char``.
    """
    if descriptor in options.char_types:
        return True
    if "::" in descriptor:
        return descriptor.rsplit("::", 1)[-1] in options.char_types
    return False


def translate_type(
    type_expr: TypeExpr,
    options: TypeMappingOptions = DEFAULT_TYPE_MAPPING,
) -> str:
    """Translate a type expression into an FFI type descriptor.

    Args:
        type_expr: The type expression to translate.
        options: Array wrapper and character type configuration.

    Returns:
        The descriptor string.

    Raises:
        UnsupportedTypeError: If the expression, or any type nested in it,
            is outside the supported vocabulary.

    Example:
        >>> translate_type(TypeExpr(kind="pointer", text="*const c_char",
        ...     args=(TypeExpr(kind="path", text="c_char"),)))
        'string'
    """
    return _translate(type_expr, options, 0)


def _translate(type_expr: TypeExpr, options: TypeMappingOptions, depth: int) -> str:
    if depth > MAX_TYPE_DEPTH:
        raise UnsupportedTypeError(
            UNSUPPORTED_CONSTRUCTS[KIND_TOO_DEEP],
            normalize_expression_text(type_expr.text),
        )

    kind = type_expr.kind
    if kind == KIND_PATH:
        return normalize_path_text(type_expr.text)
    if kind == KIND_GENERIC:
        return _translate_generic(type_expr, options, depth)
    if kind == KIND_ARRAY:
        return _translate_array(type_expr, options, depth)
    if kind == KIND_POINTER:
        return _translate_pointer(type_expr, options, depth)

    construct = UNSUPPORTED_CONSTRUCTS.get(kind, _UNRECOGNIZED_CONSTRUCT)
    raise UnsupportedTypeError(construct, normalize_expression_text(type_expr.text))


def translate_return_type(
    type_expr: Optional[TypeExpr],
    options: TypeMappingOptions = DEFAULT_TYPE_MAPPING,
) -> str:
    """Translate an optional return type; no return type maps to ``void``."""
    if type_expr is None:
        return VOID_DESCRIPTOR
    return translate_type(type_expr, options)


def _translate_generic(type_expr: TypeExpr, options: TypeMappingOptions, depth: int) -> str:
    base = normalize_path_text(type_expr.base or "")
    args = type_expr.args
    if (
        base in options.array_wrappers
        and len(args) == 1
        and args[0].kind != KIND_GENERIC_ARGUMENT
    ):
        return f"{_translate(args[0], options, depth + 1)}[]"

    raise UnsupportedTypeError(
        UNSUPPORTED_CONSTRUCTS[KIND_GENERIC],
        normalize_expression_text(type_expr.text),
    )


def _translate_array(type_expr: TypeExpr, options: TypeMappingOptions, depth: int) -> str:
    if type_expr.length is None or not type_expr.args:
        raise UnsupportedTypeError(
            UNSUPPORTED_CONSTRUCTS[KIND_SLICE],
            normalize_expression_text(type_expr.text),
        )

    element = _translate(type_expr.args[0], options, depth + 1)
    length = normalize_expression_text(type_expr.length)

    # No raw char arrays on the Perl side; they are fixed-length strings.
    if is_char_descriptor(element, options):
        return f"{STRING_DESCRIPTOR}({length})"
    return f"{element}[{length}]"


def _translate_pointer(type_expr: TypeExpr, options: TypeMappingOptions, depth: int) -> str:
    if not type_expr.args:
        raise UnsupportedTypeError(
            _UNRECOGNIZED_CONSTRUCT, normalize_expression_text(type_expr.text)
        )

    element = _translate(type_expr.args[0], options, depth + 1)
    if is_char_descriptor(element, options):
        return STRING_DESCRIPTOR
    return f"{element}*"
