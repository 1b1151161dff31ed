"""
Layer 1: Extraction Engine

Tree-sitter-based Rust source parser and FFI surface extractor.
Classifies exported functions, enums, records and opaque handles and
translates their types into FFI type descriptors.
"""

from extraction.models import Enum, Field, Function, Library, Opaque, Record, Repr, Variant
from extraction.errors import (
    ExtractionError,
    MalformedAttributeError,
    SourceEncodingError,
    SyntaxTreeError,
    UnsupportedTypeError,
)
from extraction.options import ExtractionOptions
from extraction.parser import create_parser, parse_file, parse_bytes, count_error_nodes
from extraction.traversal import iter_declarations, extract_declarations_from_tree
from extraction.type_mapping import TypeMappingOptions, translate_type
from extraction.rules import AttributePolicy, ClassificationPolicy, ReprPolicy, get_policy
from extraction.visitor import SurfaceVisitor, visit_declarations
from extraction.postprocess import remap_opaque_pointers
from extraction.extractor import (
    extract_source,
    extract_file,
    extract_files,
    extract_directory,
    extract_path,
    extract_to_dict,
    discover_rust_files,
    ExtractionStats,
)

__all__ = [
    # Data models
    "Library",
    "Function",
    "Enum",
    "Variant",
    "Record",
    "Field",
    "Opaque",
    "Repr",
    "ExtractionStats",
    # Errors
    "ExtractionError",
    "UnsupportedTypeError",
    "MalformedAttributeError",
    "SyntaxTreeError",
    "SourceEncodingError",
    # Options and policies
    "ExtractionOptions",
    "TypeMappingOptions",
    "ClassificationPolicy",
    "AttributePolicy",
    "ReprPolicy",
    "get_policy",
    # Low-level parsing
    "create_parser",
    "parse_file",
    "parse_bytes",
    "count_error_nodes",
    # Mid-level extraction
    "iter_declarations",
    "extract_declarations_from_tree",
    "translate_type",
    "SurfaceVisitor",
    "visit_declarations",
    "remap_opaque_pointers",
    # High-level orchestration
    "extract_source",
    "extract_file",
    "extract_files",
    "extract_directory",
    "extract_path",
    "extract_to_dict",
    "discover_rust_files",
]
