"""
High-level orchestrator for FFI surface extraction.

This module provides the main entry points for extracting a finalized
Library from source bytes, single files, or an entire crate directory.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
from tree_sitter import Tree

from extraction.config import RUST_EXTENSIONS, SKIPPED_DIRECTORIES
from extraction.errors import SourceEncodingError, SyntaxTreeError
from extraction.models import Library
from extraction.options import ExtractionOptions
from extraction.parser import count_error_nodes, parse_bytes, parse_file
from extraction.postprocess import remap_opaque_pointers
from extraction.traversal import iter_declarations
from extraction.visitor import SurfaceVisitor

logger = logging.getLogger(__name__)


@dataclass
class UnitExtraction:
    """Raw (not yet post-processed) extraction result of one compilation unit."""

    library: Library
    parse_error_count: int


class ExtractionStats:
    """Statistics for an extraction operation."""

    def __init__(self):
        self.files_processed = 0
        self.parse_errors = 0
        self.functions = 0
        self.enums = 0
        self.records = 0
        self.opaques = 0

    def record_library(self, library: Library) -> None:
        self.functions += len(library.functions)
        self.enums += len(library.enums)
        self.records += len(library.records)
        self.opaques += len(library.opaques)

    def to_dict(self) -> Dict[str, int]:
        """Convert stats to dictionary."""
        return {
            "files_processed": self.files_processed,
            "parse_errors": self.parse_errors,
            "functions": self.functions,
            "enums": self.enums,
            "records": self.records,
            "opaques": self.opaques,
        }

    def __str__(self) -> str:
        """String representation of stats."""
        return (
            f"ExtractionStats(processed={self.files_processed}, "
            f"functions={self.functions}, enums={self.enums}, "
            f"records={self.records}, opaques={self.opaques}, "
            f"parse_errors={self.parse_errors})"
        )


def _check_encoding(source_bytes: bytes, file_path: str) -> None:
    try:
        source_bytes.decode("utf-8")
    except UnicodeDecodeError as exc:
        line = source_bytes[:exc.start].count(b"\n") + 1
        raise SourceEncodingError(
            f"source is not valid UTF-8 (byte offset {exc.start})",
            line=line,
            file_path=file_path,
        ) from exc


def _extract_unit(
    tree: Tree,
    source_bytes: bytes,
    file_path: str,
    options: ExtractionOptions,
) -> UnitExtraction:
    """Run the visitor over one compilation unit without post-processing."""
    _check_encoding(source_bytes, file_path)
    parse_error_count = count_error_nodes(tree)

    if tree.root_node.has_error:
        if not options.allow_syntax_errors:
            raise SyntaxTreeError(
                f"source contains {parse_error_count} syntax error node(s)",
                file_path=file_path,
            )
        logger.warning(
            "File %s contains syntax errors (%d error nodes); extracting anyway",
            file_path,
            parse_error_count,
        )

    visitor = SurfaceVisitor(options=options, file_path=file_path)
    library = visitor.visit(iter_declarations(tree))
    return UnitExtraction(library=library, parse_error_count=parse_error_count)


def extract_source(
    source_bytes: bytes,
    file_path: str = "<memory>",
    options: Optional[ExtractionOptions] = None,
) -> Library:
    """Extract the finalized FFI surface of a single compilation unit.

    Args:
        source_bytes: UTF-8 encoded Rust source.
        file_path: Name used in log messages and error context.
        options: Extraction options; defaults apply when None.

    Returns:
        The post-processed Library.

    Raises:
        ExtractionError: On invalid UTF-8, any unsupported type, a malformed
            attribute, or (unless allowed) a syntax error.

    Example:
        >>> library = extract_source(b"#[export] fn add(a: i32, b: i32) -> i32 { a + b }")
        >>> library.functions[0].args
        ['i32', 'i32']
    """
    options = options or ExtractionOptions()
    unit = _extract_unit(parse_bytes(source_bytes), source_bytes, file_path, options)
    return remap_opaque_pointers(unit.library)


def extract_file(
    file_path: str,
    options: Optional[ExtractionOptions] = None,
) -> Library:
    """Extract the finalized FFI surface of a single Rust source file.

    Args:
        file_path: Absolute or relative path to the ``.rs`` file.
        options: Extraction options; defaults apply when None.

    Returns:
        The post-processed Library.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a Rust source file.
        ExtractionError: If the surface cannot be extracted.
    """
    library, _ = extract_files([file_path], options=options)
    return library


def _check_rust_file(file_path: str) -> str:
    file_path = os.path.abspath(file_path)
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")
    ext = os.path.splitext(file_path)[1]
    if ext not in RUST_EXTENSIONS:
        raise ValueError(
            f"File {file_path} is not a Rust source file. "
            f"Expected one of: {RUST_EXTENSIONS}"
        )
    return file_path


def extract_files(
    file_paths: Iterable[str],
    options: Optional[ExtractionOptions] = None,
) -> Tuple[Library, ExtractionStats]:
    """Extract and merge the surfaces of several files.

    Each file is visited on its own; the per-file libraries are concatenated
    in the given order and post-processed once, since the opaque rewrite
    needs every opaque name.

    Args:
        file_paths: Rust files, in the order their declarations should appear.
        options: Extraction options; defaults apply when None.

    Returns:
        A tuple of (library, stats).

    Raises:
        FileNotFoundError: If a file does not exist.
        ValueError: If a file is not a Rust source file.
        ExtractionError: If any file's surface cannot be extracted.
    """
    options = options or ExtractionOptions()
    stats = ExtractionStats()
    merged = Library()

    for file_path in file_paths:
        file_path = _check_rust_file(file_path)
        logger.info("Extracting FFI surface from %s", file_path)
        tree, source_bytes = parse_file(file_path)
        unit = _extract_unit(tree, source_bytes, file_path, options)
        merged.extend(unit.library)
        stats.files_processed += 1
        stats.parse_errors += unit.parse_error_count

    remap_opaque_pointers(merged)
    stats.record_library(merged)
    logger.info(f"Extraction complete: {stats}")
    return merged, stats


def discover_rust_files(directory: str) -> List[str]:
    """Recursively discover all Rust source files in a directory.

    Args:
        directory: Root directory to search.

    Returns:
        Sorted list of absolute paths to ``.rs`` files.
    """
    rust_files = []
    directory = os.path.abspath(directory)

    logger.info(f"Discovering Rust files in {directory}")

    for root, dirs, files in os.walk(directory):
        # Skip hidden directories and build/vendor output
        dirs[:] = [d for d in dirs if not d.startswith('.') and d not in SKIPPED_DIRECTORIES]

        for file in files:
            ext = os.path.splitext(file)[1]
            if ext in RUST_EXTENSIONS:
                rust_files.append(os.path.join(root, file))

    logger.info(f"Found {len(rust_files)} Rust files")
    return sorted(rust_files)


def extract_directory(
    directory: str,
    options: Optional[ExtractionOptions] = None,
) -> Tuple[Library, ExtractionStats]:
    """Extract the merged FFI surface of every Rust file under a directory.

    Args:
        directory: Root directory to process.
        options: Extraction options; defaults apply when None.

    Returns:
        A tuple of (library, stats).

    Raises:
        FileNotFoundError: If the directory does not exist.
        ExtractionError: If any file's surface cannot be extracted.
    """
    directory = os.path.abspath(directory)

    if not os.path.isdir(directory):
        raise FileNotFoundError(f"Directory not found: {directory}")

    rust_files = discover_rust_files(directory)
    if not rust_files:
        logger.warning(f"No Rust files found in {directory}")
        return Library(), ExtractionStats()

    logger.info(f"Processing {len(rust_files)} Rust files from {directory}")
    return extract_files(rust_files, options=options)


def extract_path(
    source: str,
    options: Optional[ExtractionOptions] = None,
) -> Tuple[Library, ExtractionStats]:
    """Extract from a file or a directory, whichever ``source`` is.

    Raises:
        FileNotFoundError: If ``source`` does not exist.
    """
    source = os.path.abspath(source)

    if os.path.isfile(source):
        return extract_files([source], options=options)
    if os.path.isdir(source):
        return extract_directory(source, options=options)
    raise FileNotFoundError(f"Source not found: {source}")


def extract_to_dict(
    source: str,
    options: Optional[ExtractionOptions] = None,
) -> Dict[str, object]:
    """Extract from a file or directory and return the Library as a dict.

    Example:
        >>> surface = extract_to_dict("ffi/src/lib.rs")
        >>> import json
        >>> json.dump(surface, open("surface.json", "w"), indent=2)
    """
    library, stats = extract_path(source, options=options)
    logger.info(f"Extraction stats: {stats}")
    return library.to_dict()
