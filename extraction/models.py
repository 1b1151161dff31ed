"""
Data models for the extracted FFI surface.

The Library is the root aggregate handed to renderers. Every list keeps
source declaration order.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum as _Enum
from typing import Any, Dict, List


class Repr(str, _Enum):
    """Integer representation of an exported enum.

    ``C`` is the platform default and serializes as ``"enum"``.
    """

    C = "enum"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"

    @classmethod
    def from_token(cls, token: str) -> "Repr":
        """Map a ``#[repr(...)]`` token (``C``, ``u8``, ...) to a Repr.

        Raises:
            ValueError: If the token is not a supported representation.
        """
        if token == "C":
            return cls.C
        if token == cls.C.value:
            raise ValueError(f"Unknown repr token: {token}")
        return cls(token)


@dataclass
class Function:
    """An exported function signature.

    Attributes:
        name: Function name as declared.
        args: One FFI type descriptor per parameter, in declaration order.
        ret: Return descriptor; ``"void"`` when nothing is returned.
    """

    name: str
    args: List[str] = field(default_factory=list)
    ret: str = "void"


@dataclass
class Variant:
    """A single enum variant with its discriminant text."""

    name: str
    value: str


@dataclass
class Enum:
    """A C-style enum exported by value."""

    name: str
    repr: Repr = Repr.C
    variants: List[Variant] = field(default_factory=list)


@dataclass
class Field:
    """A named record field and its FFI type descriptor."""

    name: str
    type: str


@dataclass
class Record:
    """A value type with a stable field layout."""

    name: str
    fields: List[Field] = field(default_factory=list)


@dataclass
class Opaque:
    """A handle type whose layout is hidden from callers."""

    name: str


@dataclass
class Library:
    """The extracted FFI surface of one or more compilation units."""

    functions: List[Function] = field(default_factory=list)
    enums: List[Enum] = field(default_factory=list)
    records: List[Record] = field(default_factory=list)
    opaques: List[Opaque] = field(default_factory=list)

    def extend(self, other: "Library") -> "Library":
        """Append another library's declarations after this one's."""
        self.functions.extend(other.functions)
        self.enums.extend(other.enums)
        self.records.extend(other.records)
        self.opaques.extend(other.opaques)
        return self

    def opaque_names(self) -> List[str]:
        return [opaque.name for opaque in self.opaques]

    def is_empty(self) -> bool:
        return not (self.functions or self.enums or self.records or self.opaques)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the library to plain dicts and lists.

        Functions are emitted under ``exports`` and enum reprs as their
        string value, which is the shape the binding templates consume.

        Returns:
            Dictionary representation of the library.
        """
        payload = asdict(self)
        payload["exports"] = payload.pop("functions")
        for enum_payload in payload["enums"]:
            enum_payload["repr"] = Repr(enum_payload["repr"]).value
        return {
            "exports": payload["exports"],
            "enums": payload["enums"],
            "records": payload["records"],
            "opaques": payload["opaques"],
        }
