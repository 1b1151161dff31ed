"""
Error types raised while extracting an FFI surface.

Every error here is fatal to the current extraction run.
"""

from typing import Optional


class ExtractionError(RuntimeError):
    """Base class for extraction failures.

    Attributes:
        message: Description of the failure without location context.
        declaration: Name of the declaration being extracted, if known.
        line: 1-indexed source line of the declaration, if known.
        file_path: Source file of the compilation unit, if known.
    """

    def __init__(
        self,
        message: str,
        declaration: Optional[str] = None,
        line: Optional[int] = None,
        file_path: Optional[str] = None,
    ):
        self.message = message
        self.declaration = declaration
        self.line = line
        self.file_path = file_path
        super().__init__(self._format())

    def _format(self) -> str:
        location = []
        if self.file_path:
            location.append(
                f"{self.file_path}:{self.line}" if self.line else self.file_path
            )
        elif self.line:
            location.append(f"line {self.line}")
        if self.declaration:
            location.append(f"in '{self.declaration}'")
        if not location:
            return self.message
        return f"{self.message} ({' '.join(location)})"

    def with_context(
        self,
        declaration: Optional[str] = None,
        line: Optional[int] = None,
        file_path: Optional[str] = None,
    ) -> "ExtractionError":
        """Attach location context, keeping anything already recorded."""
        self.declaration = self.declaration or declaration
        self.line = self.line or line
        self.file_path = self.file_path or file_path
        self.args = (self._format(),)
        return self


class UnsupportedTypeError(ExtractionError):
    """A type expression uses a construct outside the FFI vocabulary."""

    def __init__(
        self,
        construct: str,
        type_text: str,
        declaration: Optional[str] = None,
        line: Optional[int] = None,
        file_path: Optional[str] = None,
    ):
        self.construct = construct
        self.type_text = type_text
        super().__init__(
            f"{construct} are not supported: `{type_text}`"
            if construct.endswith("s")
            else f"{construct} is not supported: `{type_text}`",
            declaration=declaration,
            line=line,
            file_path=file_path,
        )


class MalformedAttributeError(ExtractionError):
    """A recognized attribute has arguments of an unexpected shape."""

    def __init__(
        self,
        attribute: str,
        detail: str,
        declaration: Optional[str] = None,
        line: Optional[int] = None,
        file_path: Optional[str] = None,
    ):
        self.attribute = attribute
        super().__init__(
            f"malformed #[{attribute}] attribute: {detail}",
            declaration=declaration,
            line=line,
            file_path=file_path,
        )


class SyntaxTreeError(ExtractionError):
    """The parser reported syntax errors in a compilation unit."""


class SourceEncodingError(ExtractionError):
    """A compilation unit is not valid UTF-8."""
