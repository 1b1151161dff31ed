"""
Options controlling one extraction run.
"""

from dataclasses import dataclass
from typing import FrozenSet

from extraction.config import (
    DEFAULT_ALLOW_SYNTAX_ERRORS,
    DEFAULT_ARRAY_WRAPPERS,
    DEFAULT_CHAR_TYPES,
    DEFAULT_EXPORT_MARKER,
    DEFAULT_OPAQUE_MARKER,
    DEFAULT_POLICY,
    DEFAULT_RECORD_MARKER,
    DEFAULT_VARIANT_FALLBACK,
    VARIANT_FALLBACKS,
)
from extraction.rules import ClassificationPolicy, get_policy
from extraction.type_mapping import TypeMappingOptions


@dataclass(frozen=True)
class ExtractionOptions:
    """Extraction settings.

    Attributes:
        policy: Classification policy name (``attribute`` or ``repr``).
        variant_fallback: Value given to enum variants without an explicit
            discriminant (``sequential``, ``name`` or ``zero``).
        export_marker: Attribute marking exported functions.
        opaque_marker: Attribute marking opaque structs and type aliases.
        record_marker: Attribute marking record structs.
        array_wrappers: Generic names translated to ``T[]``.
        char_types: Character element types translated to strings.
        allow_syntax_errors: Extract from trees containing parse errors
            instead of failing.
    """

    policy: str = DEFAULT_POLICY
    variant_fallback: str = DEFAULT_VARIANT_FALLBACK
    export_marker: str = DEFAULT_EXPORT_MARKER
    opaque_marker: str = DEFAULT_OPAQUE_MARKER
    record_marker: str = DEFAULT_RECORD_MARKER
    array_wrappers: FrozenSet[str] = DEFAULT_ARRAY_WRAPPERS
    char_types: FrozenSet[str] = DEFAULT_CHAR_TYPES
    allow_syntax_errors: bool = DEFAULT_ALLOW_SYNTAX_ERRORS

    def __post_init__(self):
        if self.variant_fallback not in VARIANT_FALLBACKS:
            raise ValueError(
                f"Unknown variant fallback '{self.variant_fallback}'. "
                f"Expected one of: {sorted(VARIANT_FALLBACKS)}"
            )
        # Fail on unknown policy names at construction time
        self.build_policy()

    def build_policy(self) -> ClassificationPolicy:
        return get_policy(
            self.policy,
            export_marker=self.export_marker,
            opaque_marker=self.opaque_marker,
            record_marker=self.record_marker,
        )

    def type_mapping(self) -> TypeMappingOptions:
        return TypeMappingOptions(
            array_wrappers=frozenset(self.array_wrappers),
            char_types=frozenset(self.char_types),
        )
