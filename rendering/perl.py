"""
Perl (FFI::Platypus) binding renderer.

Turns a finalized Library into a Perl module that attaches every exported
function through FFI::Platypus with the Rust language plugin, plus a
Dist::Zilla ``dist.ini`` for the distribution.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from core.cargo_manifest import CargoManifest
from extraction.models import Library

logger = logging.getLogger(__name__)

MODULE_TEMPLATE = "module.pm.j2"
DIST_INI_TEMPLATE = "dist.ini.j2"
DIST_INI_FILE = "dist.ini"

_INT_SUFFIX_RE = re.compile(r"^(-?(?:0x[0-9a-fA-F_]+|0o[0-7_]+|0b[01_]+|[0-9][0-9_]*))(?:[iu](?:8|16|32|64|128|size))$")

# SPDX identifiers -> Software::License class suffixes used by Dist::Zilla
_DZIL_LICENSES = {
    "MIT": "MIT",
    "Apache-2.0": "Apache_2_0",
    "GPL-2.0": "GPL_2",
    "GPL-3.0": "GPL_3",
    "LGPL-2.1": "LGPL_2_1",
    "LGPL-3.0": "LGPL_3_0",
    "BSD-2-Clause": "FreeBSD",
    "BSD-3-Clause": "BSD",
    "MPL-2.0": "Mozilla_2_0",
    "Artistic-2.0": "Artistic_2_0",
}
DEFAULT_DZIL_LICENSE = "Perl_5"


@dataclass(frozen=True)
class ModuleNames:
    """Naming of the generated Perl distribution.

    Attributes:
        name: Base package, e.g. ``Math::Fast``.
        distname: Distribution name; defaults to the package with ``::``
            replaced by ``-``.
        main_file: Path of the main module; defaults to ``lib/Math/Fast.pm``.
    """

    name: str
    distname: Optional[str] = None
    main_file: Optional[str] = None

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Module name must not be empty")

    @property
    def resolved_distname(self) -> str:
        return self.distname or self.name.replace("::", "-")

    @property
    def resolved_main_file(self) -> str:
        return self.main_file or f"lib/{self.name.replace('::', '/')}.pm"

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "distname": self.resolved_distname,
            "main_file": self.resolved_main_file,
        }


@dataclass
class GeneratedFile:
    """A rendered file, relative to the output directory."""

    path: Path
    content: str


def perl_quote(value: Any) -> str:
    """Quote a value as a single-quoted Perl string literal."""
    text = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{text}'"


def perl_constant(value: str, name: str) -> str:
    """Render an enum variant value as a Perl constant expression.

    Integer type suffixes (``5u8``) are dropped; a value that is just the
    variant's own name becomes a string.
    """
    if value == name:
        return perl_quote(value)
    match = _INT_SUFFIX_RE.match(value)
    if match:
        return match.group(1)
    return value


def dzil_license(spdx: str) -> str:
    """Map a Cargo SPDX license expression to a Dist::Zilla license name."""
    if not spdx:
        return DEFAULT_DZIL_LICENSE
    first = re.split(r"\s+(?:OR|AND)\s+|/", spdx.strip())[0].strip("() ")
    return _DZIL_LICENSES.get(first, DEFAULT_DZIL_LICENSE)


def create_environment() -> Environment:
    """Create the Jinja2 environment over the packaged templates."""
    env = Environment(
        loader=PackageLoader("rendering", "templates"),
        autoescape=select_autoescape(default=False),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["perl_quote"] = perl_quote
    env.filters["dzil_license"] = dzil_license
    env.globals["perl_constant"] = perl_constant
    return env


def build_context(
    library: Library,
    names: ModuleNames,
    manifest: Optional[CargoManifest] = None,
) -> dict[str, Any]:
    """Build the template context shared by every template."""
    context: dict[str, Any] = dict(library.to_dict())
    context["names"] = names.to_dict()
    context["cargo"] = manifest.to_dict() if manifest is not None else None
    return context


class PerlBindingRenderer:
    """Renders the Perl module and distribution files for a Library."""

    def __init__(self, env: Optional[Environment] = None):
        self._env = env

    @property
    def env(self) -> Environment:
        """Lazy-load Jinja2 environment."""
        if self._env is None:
            self._env = create_environment()
        return self._env

    def render_module(
        self,
        library: Library,
        names: ModuleNames,
        manifest: Optional[CargoManifest] = None,
    ) -> str:
        template = self.env.get_template(MODULE_TEMPLATE)
        return template.render(**build_context(library, names, manifest))

    def render_dist_ini(
        self,
        library: Library,
        names: ModuleNames,
        manifest: Optional[CargoManifest] = None,
    ) -> str:
        template = self.env.get_template(DIST_INI_TEMPLATE)
        return template.render(**build_context(library, names, manifest))

    def generate(
        self,
        library: Library,
        names: ModuleNames,
        manifest: Optional[CargoManifest] = None,
    ) -> list[GeneratedFile]:
        """Render every output file for the distribution."""
        return [
            GeneratedFile(
                path=Path(names.resolved_main_file),
                content=self.render_module(library, names, manifest),
            ),
            GeneratedFile(
                path=Path(DIST_INI_FILE),
                content=self.render_dist_ini(library, names, manifest),
            ),
        ]


def write_generated_files(files: list[GeneratedFile], output_dir: str) -> list[Path]:
    """Write rendered files below ``output_dir`` and return their paths."""
    root = Path(output_dir)
    written = []
    for generated in files:
        target = root / generated.path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(generated.content, encoding="utf-8")
        logger.info("Wrote %s", target)
        written.append(target)
    return written
