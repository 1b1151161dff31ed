"""
Layer 2: Binding Renderer

Jinja2 templates turning an extracted Library into a Perl FFI::Platypus
distribution.
"""

from rendering.perl import (
    GeneratedFile,
    ModuleNames,
    PerlBindingRenderer,
    build_context,
    create_environment,
    dzil_license,
    perl_constant,
    perl_quote,
    write_generated_files,
)

__all__ = [
    "GeneratedFile",
    "ModuleNames",
    "PerlBindingRenderer",
    "build_context",
    "create_environment",
    "dzil_license",
    "perl_constant",
    "perl_quote",
    "write_generated_files",
]
