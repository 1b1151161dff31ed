"""
Classification rules deciding which declarations join the FFI surface.

Two schemes exist for the same decisions and are not interchangeable on the
same input, so each is a ClassificationPolicy and exactly one is active per
run:

- ``attribute``: explicit marker attributes (``#[export]``, ``#[opaque]``,
  ``#[record]``).
- ``repr``: implicit, driven by ``extern "C"``/``#[no_mangle]`` on functions
  and ``#[repr(C)]`` on structs.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence

from extraction.config import (
    C_ABI,
    DEFAULT_EXPORT_MARKER,
    DEFAULT_OPAQUE_MARKER,
    DEFAULT_RECORD_MARKER,
    NO_MANGLE_MARKER,
    NON_WIDTH_REPR_TOKENS,
    PARAMETERIZED_REPR_TOKENS,
    POLICY_ATTRIBUTE,
    POLICY_REPR,
    REPR_ATTRIBUTE,
)
from extraction.errors import MalformedAttributeError
from extraction.models import Repr
from extraction.syntax import Attribute, EnumDecl, FunctionDecl, StructDecl, TypeAliasDecl

logger = logging.getLogger(__name__)

RECORD = "record"
OPAQUE = "opaque"


def is_public(visibility: Optional[str]) -> bool:
    """Only a bare ``pub`` is public; ``pub(crate)`` and friends are not."""
    return visibility is not None and visibility.strip() == "pub"


def has_attribute(attributes: Iterable[Attribute], name: str) -> bool:
    return any(attribute.name == name for attribute in attributes)


def _repr_tokens(attributes: Sequence[Attribute], declaration: str) -> list:
    tokens = []
    for attribute in attributes:
        if attribute.name != REPR_ATTRIBUTE:
            continue
        if not attribute.args:
            raise MalformedAttributeError(
                REPR_ATTRIBUTE, "no representation given", declaration=declaration
            )
        for token in attribute.args:
            if not _is_known_repr_token(token):
                raise MalformedAttributeError(
                    REPR_ATTRIBUTE,
                    f"unrecognized representation `{token}`",
                    declaration=declaration,
                )
            tokens.append(token)
    return tokens


def _is_known_repr_token(token: str) -> bool:
    if token == "C" or token in NON_WIDTH_REPR_TOKENS:
        return True
    head, paren, _ = token.partition("(")
    if paren and token.endswith(")"):
        return head.strip() in PARAMETERIZED_REPR_TOKENS
    try:
        Repr.from_token(token)
    except ValueError:
        return False
    return True


def parse_repr(attributes: Sequence[Attribute], declaration: str = "") -> Optional[Repr]:
    """Resolve the integer representation named by ``#[repr(...)]``.

    An explicit width wins over ``C`` (``#[repr(C, u8)]`` is ``u8``).

    Args:
        attributes: The declaration's outer attributes.
        declaration: Declaration name used in error messages.

    Returns:
        The Repr, or None when no repr attribute names a supported width or
        ``C``.

    Raises:
        MalformedAttributeError: If a repr attribute is empty or names
            something that is not a Rust representation.
    """
    result = None
    for token in _repr_tokens(attributes, declaration):
        if token in NON_WIDTH_REPR_TOKENS or "(" in token:
            continue
        parsed = Repr.from_token(token)
        if parsed is not Repr.C or result is None:
            result = parsed
    return result


def is_repr_c(attributes: Sequence[Attribute], declaration: str = "") -> bool:
    return "C" in _repr_tokens(attributes, declaration)


def is_simple_enum(decl: EnumDecl) -> bool:
    """True when no variant carries associated data."""
    return all(not variant.has_fields for variant in decl.variants)


class ClassificationPolicy(ABC):
    """Decides, per declaration, what it becomes in the Library."""

    name: str = ""

    @abstractmethod
    def is_exported_function(self, decl: FunctionDecl) -> bool:
        """Whether a free function is part of the exported surface."""

    @abstractmethod
    def classify_struct(self, decl: StructDecl) -> Optional[str]:
        """Return ``"record"``, ``"opaque"`` or None."""

    @abstractmethod
    def is_opaque_alias(self, decl: TypeAliasDecl) -> bool:
        """Whether a type alias names an opaque handle."""

    @abstractmethod
    def enum_repr(self, decl: EnumDecl) -> Optional[Repr]:
        """Return the enum's representation if it is exported, else None."""


class AttributePolicy(ClassificationPolicy):
    """Explicit marker attributes decide everything."""

    name = POLICY_ATTRIBUTE

    def __init__(
        self,
        export_marker: str = DEFAULT_EXPORT_MARKER,
        opaque_marker: str = DEFAULT_OPAQUE_MARKER,
        record_marker: str = DEFAULT_RECORD_MARKER,
    ):
        self.export_marker = export_marker
        self.opaque_marker = opaque_marker
        self.record_marker = record_marker

    def is_exported_function(self, decl: FunctionDecl) -> bool:
        return has_attribute(decl.attributes, self.export_marker)

    def classify_struct(self, decl: StructDecl) -> Optional[str]:
        if not is_public(decl.visibility):
            return None
        is_record = has_attribute(decl.attributes, self.record_marker)
        is_opaque = has_attribute(decl.attributes, self.opaque_marker)
        if is_record and is_opaque:
            logger.warning(
                "Struct '%s' carries both #[%s] and #[%s]; treating it as a record",
                decl.name,
                self.record_marker,
                self.opaque_marker,
            )
        if is_record:
            return RECORD
        if is_opaque:
            return OPAQUE
        return None

    def is_opaque_alias(self, decl: TypeAliasDecl) -> bool:
        return has_attribute(decl.attributes, self.opaque_marker)

    def enum_repr(self, decl: EnumDecl) -> Optional[Repr]:
        return parse_repr(decl.attributes, decl.name)


class ReprPolicy(ClassificationPolicy):
    """``extern "C"`` + ``pub`` + ``#[no_mangle]`` exports; ``#[repr(C)]`` makes records.

    Every public struct without ``#[repr(C)]`` is an opaque handle, and only
    simple (data-free) enums are exported.
    """

    name = POLICY_REPR

    def __init__(self, opaque_marker: str = DEFAULT_OPAQUE_MARKER):
        self.opaque_marker = opaque_marker

    def is_exported_function(self, decl: FunctionDecl) -> bool:
        return (
            decl.abi == C_ABI
            and is_public(decl.visibility)
            and has_attribute(decl.attributes, NO_MANGLE_MARKER)
        )

    def classify_struct(self, decl: StructDecl) -> Optional[str]:
        if is_repr_c(decl.attributes, decl.name):
            return RECORD
        if is_public(decl.visibility):
            return OPAQUE
        return None

    def is_opaque_alias(self, decl: TypeAliasDecl) -> bool:
        return has_attribute(decl.attributes, self.opaque_marker)

    def enum_repr(self, decl: EnumDecl) -> Optional[Repr]:
        repr_ = parse_repr(decl.attributes, decl.name)
        if repr_ is None:
            return None
        if not is_simple_enum(decl):
            logger.debug("Skipping enum '%s': variants carry data", decl.name)
            return None
        return repr_


def get_policy(
    name: str,
    export_marker: str = DEFAULT_EXPORT_MARKER,
    opaque_marker: str = DEFAULT_OPAQUE_MARKER,
    record_marker: str = DEFAULT_RECORD_MARKER,
) -> ClassificationPolicy:
    """Build the classification policy registered under ``name``.

    Raises:
        ValueError: If no policy has that name.
    """
    if name == POLICY_ATTRIBUTE:
        return AttributePolicy(
            export_marker=export_marker,
            opaque_marker=opaque_marker,
            record_marker=record_marker,
        )
    if name == POLICY_REPR:
        return ReprPolicy(opaque_marker=opaque_marker)
    raise ValueError(
        f"Unknown classification policy '{name}'. "
        f"Expected one of: {POLICY_ATTRIBUTE}, {POLICY_REPR}"
    )
