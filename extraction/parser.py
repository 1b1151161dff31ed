"""
Tree-sitter parser initialization and file parsing utilities.

This module provides functions to initialize the Rust parser and parse source files.
"""

import logging
from typing import Tuple
import tree_sitter_rust as tsrust
from tree_sitter import Language, Parser, Tree

# Configure logging
logger = logging.getLogger(__name__)

# Module-level language constant
RUST_LANGUAGE = Language(tsrust.language())


def create_parser() -> Parser:
    """Create and configure a tree-sitter parser for Rust.

    Returns:
        A Parser instance configured with the Rust language.

    Example:
        >>> parser = create_parser()
        >>> tree = parser.parse(b"pub fn main() {}")
    """
    parser = Parser(RUST_LANGUAGE)
    logger.debug("Created tree-sitter Rust parser")
    return parser


def parse_bytes(source: bytes) -> Tree:
    """Parse raw bytes of Rust source code.

    Args:
        source: UTF-8 encoded bytes of Rust source code.

    Returns:
        A Tree object representing the parsed syntax tree.

    Raises:
        TypeError: If source is not bytes.

    Example:
        >>> tree = parse_bytes(b"fn foo() {}")
        >>> tree.root_node.type
        'source_file'
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")

    parser = create_parser()
    tree = parser.parse(source)

    if tree.root_node.has_error:
        logger.warning("Parsed tree contains syntax errors")

    logger.debug("Parsed %d bytes of Rust code", len(source))
    return tree


def parse_file(file_path: str) -> Tuple[Tree, bytes]:
    """Parse a Rust source file from disk.

    Args:
        file_path: Path to the .rs file.

    Returns:
        A tuple of (Tree, source_bytes).

    Raises:
        FileNotFoundError: If the file does not exist.
        IOError: If the file cannot be read.
    """
    try:
        with open(file_path, "rb") as f:
            source_bytes = f.read()
    except FileNotFoundError:
        logger.error(f"File not found: {file_path}")
        raise
    except IOError as e:
        logger.error(f"Error reading file {file_path}: {e}")
        raise

    tree = parse_bytes(source_bytes)
    logger.info(f"Successfully parsed file: {file_path}")
    return tree, source_bytes


def count_error_nodes(tree: Tree) -> int:
    """Count ERROR and MISSING nodes in a parsed tree.

    Args:
        tree: A parsed tree.

    Returns:
        Number of nodes the parser could not place in the grammar.
    """
    if not tree.root_node.has_error:
        return 0

    count = 0
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.is_error or node.is_missing:
            count += 1
        if node.has_error:
            stack.extend(node.children)
    return count
