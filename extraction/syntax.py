"""
Parser-neutral syntax records consumed by the extraction core.

The front end lowers its concrete syntax tree into these records so the type
translator, classification rules and visitor never touch parser nodes.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class TypeExpr:
    """A type expression.

    Attributes:
        kind: One of the ``KIND_*`` constants in ``extraction.config``.
        text: Source text of the whole expression.
        args: Nested types: the element of an array or pointer, or the
            arguments of a generic path.
        length: Source text of a fixed array length.
        base: Base path text of a generic path (``array`` in ``array<u8>``).
    """

    kind: str
    text: str
    args: Tuple["TypeExpr", ...] = ()
    length: Optional[str] = None
    base: Optional[str] = None


@dataclass(frozen=True)
class Attribute:
    """An outer attribute such as ``#[repr(C)]``.

    ``args`` holds the top-level comma-separated tokens inside the
    parentheses, ``value`` the right-hand side of ``#[name = value]``.
    """

    name: str
    args: Tuple[str, ...] = ()
    value: Optional[str] = None
    text: str = ""


@dataclass(frozen=True)
class Param:
    name: str
    type: TypeExpr


@dataclass(frozen=True)
class FieldDecl:
    name: Optional[str]
    type: TypeExpr


@dataclass(frozen=True)
class VariantDecl:
    name: str
    discriminant: Optional[str] = None
    has_fields: bool = False


@dataclass(frozen=True)
class FunctionDecl:
    name: str
    visibility: Optional[str] = None
    attributes: Tuple[Attribute, ...] = ()
    abi: Optional[str] = None
    params: Tuple[Param, ...] = ()
    ret: Optional[TypeExpr] = None
    line: int = 0


@dataclass(frozen=True)
class StructDecl:
    """A struct item; ``fields`` is None for unit structs."""

    name: str
    visibility: Optional[str] = None
    attributes: Tuple[Attribute, ...] = ()
    fields: Optional[Tuple[FieldDecl, ...]] = None
    tuple_like: bool = False
    line: int = 0


@dataclass(frozen=True)
class EnumDecl:
    name: str
    visibility: Optional[str] = None
    attributes: Tuple[Attribute, ...] = ()
    variants: Tuple[VariantDecl, ...] = field(default_factory=tuple)
    line: int = 0


@dataclass(frozen=True)
class TypeAliasDecl:
    name: str
    visibility: Optional[str] = None
    attributes: Tuple[Attribute, ...] = ()
    target: Optional[TypeExpr] = None
    line: int = 0


Declaration = Union[FunctionDecl, StructDecl, EnumDecl, TypeAliasDecl]
