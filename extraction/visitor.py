"""
Extraction visitor building a Library from a compilation unit's declarations.

Declarations arrive in source (pre-order) order from the front end; the
visitor applies the active classification policy to each one and translates
every field, argument and return type. The first translation failure aborts
the whole run.
"""

import logging
import re
from typing import Iterable, List, Optional

from extraction.config import (
    FALLBACK_NAME,
    FALLBACK_ZERO,
)
from extraction.errors import ExtractionError, UnsupportedTypeError
from extraction.models import Enum, Field, Function, Library, Opaque, Record, Variant
from extraction.options import ExtractionOptions
from extraction.rules import OPAQUE, RECORD
from extraction.syntax import (
    Declaration,
    EnumDecl,
    FunctionDecl,
    StructDecl,
    TypeAliasDecl,
    TypeExpr,
    VariantDecl,
)
from extraction.type_mapping import (
    normalize_expression_text,
    translate_return_type,
    translate_type,
)

logger = logging.getLogger(__name__)

_INT_LITERAL_RE = re.compile(
    r"^(?P<sign>-)?\s*(?P<body>0x[0-9a-fA-F_]+|0o[0-7_]+|0b[01_]+|[0-9][0-9_]*)"
    r"(?:[iu](?:8|16|32|64|128|size))?$"
)
_INT_BASES = {"0x": 16, "0o": 8, "0b": 2}


def parse_int_literal(text: str) -> Optional[int]:
    """Parse a Rust integer literal (``0x1F``, ``1_000u32``, ``-3``).

    Returns:
        The integer value, or None if the text is not a plain literal.
    """
    match = _INT_LITERAL_RE.match(text.strip())
    if not match:
        return None
    body = match.group("body").replace("_", "")
    base = _INT_BASES.get(body[:2], 10)
    digits = body[2:] if base != 10 else body
    if not digits:
        return None
    value = int(digits, base)
    return -value if match.group("sign") else value


def resolve_variant_values(variants: Iterable[VariantDecl], fallback: str) -> List[Variant]:
    """Assign a value to every variant.

    Explicit discriminants keep their source text. Variants without one get
    the fallback: ``name`` reuses the variant name, ``zero`` gives ``0``, and
    ``sequential`` follows C numbering (previous discriminant plus one,
    starting at 0).
    """
    resolved = []
    base_expr: Optional[str] = None
    offset = 0
    for variant in variants:
        if variant.discriminant is not None:
            value = normalize_expression_text(variant.discriminant)
            literal = parse_int_literal(value)
            if literal is None:
                base_expr, offset = value, 1
            else:
                base_expr, offset = None, literal + 1
        elif fallback == FALLBACK_NAME:
            value = variant.name
        elif fallback == FALLBACK_ZERO:
            value = "0"
        else:
            value = str(offset) if base_expr is None else f"({base_expr}) + {offset}"
            offset += 1
        resolved.append(Variant(name=variant.name, value=value))
    return resolved


class SurfaceVisitor:
    """Accumulates the FFI surface of one compilation unit.

    Attributes:
        options: Extraction options for this run.
        policy: The active classification policy.
        library: The Library being built.
        file_path: Source file used in error context, if any.
    """

    def __init__(self, options: Optional[ExtractionOptions] = None, file_path: Optional[str] = None):
        self.options = options or ExtractionOptions()
        self.policy = self.options.build_policy()
        self.type_mapping = self.options.type_mapping()
        self.file_path = file_path
        self.library = Library()

    def visit(self, declarations: Iterable[Declaration]) -> Library:
        """Visit declarations in order and return the accumulated Library."""
        for decl in declarations:
            try:
                self.visit_declaration(decl)
            except ExtractionError as exc:
                exc.with_context(declaration=decl.name, line=decl.line, file_path=self.file_path)
                raise
        return self.library

    def visit_declaration(self, decl: Declaration) -> None:
        if isinstance(decl, FunctionDecl):
            self.visit_function(decl)
        elif isinstance(decl, StructDecl):
            self.visit_struct(decl)
        elif isinstance(decl, EnumDecl):
            self.visit_enum(decl)
        elif isinstance(decl, TypeAliasDecl):
            self.visit_type_alias(decl)
        else:
            raise TypeError(f"Unknown declaration type: {type(decl).__name__}")

    def visit_function(self, decl: FunctionDecl) -> None:
        if not self.policy.is_exported_function(decl):
            return
        args = [self._translate(param.type, f"{decl.name}({param.name})") for param in decl.params]
        try:
            ret = translate_return_type(decl.ret, self.type_mapping)
        except UnsupportedTypeError as exc:
            exc.with_context(declaration=f"{decl.name} -> return")
            raise
        self.library.functions.append(Function(name=decl.name, args=args, ret=ret))
        logger.debug("Extracted function %s(%s) -> %s", decl.name, ", ".join(args), ret)

    def visit_struct(self, decl: StructDecl) -> None:
        kind = self.policy.classify_struct(decl)
        if kind == OPAQUE:
            self.library.opaques.append(Opaque(name=decl.name))
            logger.debug("Extracted opaque struct %s", decl.name)
        elif kind == RECORD:
            self.library.records.append(self._build_record(decl))
            logger.debug("Extracted record %s", decl.name)

    def visit_type_alias(self, decl: TypeAliasDecl) -> None:
        if self.policy.is_opaque_alias(decl):
            self.library.opaques.append(Opaque(name=decl.name))
            logger.debug("Extracted opaque type alias %s", decl.name)

    def visit_enum(self, decl: EnumDecl) -> None:
        repr_ = self.policy.enum_repr(decl)
        if repr_ is None:
            return
        variants = resolve_variant_values(decl.variants, self.options.variant_fallback)
        self.library.enums.append(Enum(name=decl.name, repr=repr_, variants=variants))
        logger.debug("Extracted enum %s (%s, %d variants)", decl.name, repr_.value, len(variants))

    def _build_record(self, decl: StructDecl) -> Record:
        if decl.tuple_like:
            raise ExtractionError("tuple structs cannot be exported as records")
        fields = [
            Field(name=field.name, type=self._translate(field.type, f"{decl.name}.{field.name}"))
            for field in decl.fields or ()
        ]
        return Record(name=decl.name, fields=fields)

    def _translate(self, type_expr: TypeExpr, where: str) -> str:
        try:
            return translate_type(type_expr, self.type_mapping)
        except UnsupportedTypeError as exc:
            exc.with_context(declaration=where)
            raise


def visit_declarations(
    declarations: Iterable[Declaration],
    options: Optional[ExtractionOptions] = None,
    file_path: Optional[str] = None,
) -> Library:
    """Run a fresh SurfaceVisitor over declarations (no post-processing)."""
    return SurfaceVisitor(options=options, file_path=file_path).visit(declarations)
