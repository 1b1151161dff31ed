"""
Configuration constants for Rust FFI surface extraction.

Defines the tree-sitter node type strings used while walking the syntax tree,
the parser-neutral type kinds produced by the front end, and the default
marker names used by the classification policies.
"""

from typing import Dict, FrozenSet, Set, Tuple

# Item node types we lower into declarations
FUNCTION_ITEM: str = "function_item"
STRUCT_ITEM: str = "struct_item"
ENUM_ITEM: str = "enum_item"
TYPE_ALIAS_ITEM: str = "type_item"

DECLARATION_ITEM_TYPES: Set[str] = {
    FUNCTION_ITEM,
    STRUCT_ITEM,
    ENUM_ITEM,
    TYPE_ALIAS_ITEM,
}

# Outer attribute node (#[...]); a sibling that precedes the item it decorates
ATTRIBUTE_ITEM: str = "attribute_item"
ATTRIBUTE_NODE: str = "attribute"

# Comments may sit between attributes and the item
COMMENT_NODES: Set[str] = {
    "line_comment",
    "block_comment",
}

# Items whose direct function children are methods, not free functions
METHOD_CONTAINERS: Set[str] = {
    "impl_item",
    "trait_item",
}

VISIBILITY_NODE: str = "visibility_modifier"
FUNCTION_MODIFIERS_NODE: str = "function_modifiers"
EXTERN_MODIFIER_NODE: str = "extern_modifier"

# Parameter node types
PARAMETER_NODE: str = "parameter"
SELF_PARAMETER_NODE: str = "self_parameter"
VARIADIC_PARAMETER_NODE: str = "variadic_parameter"

# Struct and variant body node types
NAMED_FIELDS_NODE: str = "field_declaration_list"
ORDERED_FIELDS_NODE: str = "ordered_field_declaration_list"
FIELD_DECLARATION_NODE: str = "field_declaration"
ENUM_VARIANT_NODE: str = "enum_variant"

# Parser-neutral type kinds (TypeExpr.kind)
KIND_PATH: str = "path"
KIND_GENERIC: str = "generic"
KIND_ARRAY: str = "array"
KIND_POINTER: str = "pointer"
KIND_FUNCTION_POINTER: str = "function_pointer"
KIND_REFERENCE: str = "reference"
KIND_SLICE: str = "slice"
KIND_TUPLE: str = "tuple"
KIND_TRAIT_OBJECT: str = "trait_object"
KIND_IMPL_TRAIT: str = "impl_trait"
KIND_INFERRED: str = "inferred"
KIND_NEVER: str = "never"
KIND_MACRO: str = "macro"
KIND_PARENTHESIZED: str = "parenthesized"
KIND_QUALIFIED_PATH: str = "qualified_path"
KIND_GENERIC_ARGUMENT: str = "generic_argument"
KIND_VARIADIC: str = "variadic"
KIND_TOO_DEEP: str = "too_deep"
KIND_UNKNOWN: str = "unknown"

# Deepest pointer/array/generic nesting lowered or translated
MAX_TYPE_DEPTH: int = 64

# tree-sitter type node -> TypeExpr kind, for shapes lowered without recursion
PATH_TYPE_NODES: Set[str] = {
    "primitive_type",
    "type_identifier",
    "scoped_type_identifier",
}

TYPE_NODE_KINDS: Dict[str, str] = {
    "function_type": KIND_FUNCTION_POINTER,
    "reference_type": KIND_REFERENCE,
    "tuple_type": KIND_TUPLE,
    "unit_type": KIND_TUPLE,
    "dynamic_type": KIND_TRAIT_OBJECT,
    "bounded_type": KIND_TRAIT_OBJECT,
    "removed_trait_bound": KIND_TRAIT_OBJECT,
    "abstract_type": KIND_IMPL_TRAIT,
    "never_type": KIND_NEVER,
    "macro_invocation": KIND_MACRO,
    "metavariable": KIND_MACRO,
    "parenthesized_type": KIND_PARENTHESIZED,
    "qualified_type": KIND_QUALIFIED_PATH,
}

# Human-readable construct names used in UnsupportedTypeError messages
UNSUPPORTED_CONSTRUCTS: Dict[str, str] = {
    KIND_FUNCTION_POINTER: "function pointers",
    KIND_REFERENCE: "references",
    KIND_SLICE: "slices",
    KIND_TUPLE: "tuples",
    KIND_TRAIT_OBJECT: "trait objects",
    KIND_IMPL_TRAIT: "impl trait",
    KIND_INFERRED: "inferred types",
    KIND_NEVER: "never type",
    KIND_MACRO: "macros",
    KIND_PARENTHESIZED: "parenthesized types",
    KIND_QUALIFIED_PATH: "qualified paths",
    KIND_GENERIC: "generic type arguments",
    KIND_GENERIC_ARGUMENT: "generic type arguments",
    KIND_VARIADIC: "variadic parameters",
    KIND_TOO_DEEP: f"type nesting beyond depth {MAX_TYPE_DEPTH}",
}

# Descriptor tokens
VOID_DESCRIPTOR: str = "void"
STRING_DESCRIPTOR: str = "string"

# Crate-relative path prefixes dropped before matching opaque pointers
LOCAL_PATH_PREFIXES: Tuple[str, ...] = ("crate::", "self::", "super::")

# Classification defaults
POLICY_ATTRIBUTE: str = "attribute"
POLICY_REPR: str = "repr"
POLICY_NAMES: FrozenSet[str] = frozenset({POLICY_ATTRIBUTE, POLICY_REPR})
DEFAULT_POLICY: str = POLICY_ATTRIBUTE

DEFAULT_EXPORT_MARKER: str = "export"
DEFAULT_OPAQUE_MARKER: str = "opaque"
DEFAULT_RECORD_MARKER: str = "record"
NO_MANGLE_MARKER: str = "no_mangle"
REPR_ATTRIBUTE: str = "repr"

# #[unsafe(no_mangle)] wraps the real attribute (Rust 2024)
UNSAFE_ATTRIBUTE_WRAPPER: str = "unsafe"

C_ABI: str = "C"

DEFAULT_ARRAY_WRAPPERS: FrozenSet[str] = frozenset({"array"})
DEFAULT_CHAR_TYPES: FrozenSet[str] = frozenset({"c_char"})

# Enum discriminant fallback policies
FALLBACK_SEQUENTIAL: str = "sequential"
FALLBACK_NAME: str = "name"
FALLBACK_ZERO: str = "zero"
VARIANT_FALLBACKS: FrozenSet[str] = frozenset(
    {FALLBACK_SEQUENTIAL, FALLBACK_NAME, FALLBACK_ZERO}
)
DEFAULT_VARIANT_FALLBACK: str = FALLBACK_SEQUENTIAL

# repr tokens that are valid Rust but outside the enum width vocabulary
NON_WIDTH_REPR_TOKENS: FrozenSet[str] = frozenset(
    {"Rust", "transparent", "packed", "usize", "isize", "u128", "i128"}
)
PARAMETERIZED_REPR_TOKENS: FrozenSet[str] = frozenset({"packed", "align"})

# Rust source discovery
RUST_EXTENSIONS: Set[str] = {".rs"}

SKIPPED_DIRECTORIES: Set[str] = {
    "target",
    "vendor",
    "node_modules",
    "__pycache__",
}

DEFAULT_ALLOW_SYNTAX_ERRORS: bool = False

# Generic arguments that are not types (lifetimes, bindings, const generics)
NON_TYPE_GENERIC_ARGUMENTS: Set[str] = {
    "lifetime",
    "type_binding",
    "block",
    "integer_literal",
    "float_literal",
    "boolean_literal",
    "char_literal",
    "string_literal",
    "negative_literal",
    "trait_bounds",
}

# Subtrees that never contain items
OPAQUE_SUBTREES: Set[str] = {
    ATTRIBUTE_ITEM,
    "inner_attribute_item",
    "token_tree",
    "line_comment",
    "block_comment",
    "string_literal",
    "raw_string_literal",
}
