"""
Library post-processing run once after every declaration is known.
"""

import logging
from typing import Dict, Optional

from extraction.config import LOCAL_PATH_PREFIXES
from extraction.models import Library

logger = logging.getLogger(__name__)


def build_opaque_pointer_map(library: Library) -> Dict[str, str]:
    """Map ``"Name*"`` to ``"Name"`` for every opaque handle in the library."""
    return {f"{opaque.name}*": opaque.name for opaque in library.opaques}


def strip_local_prefixes(descriptor: str) -> str:
    """Drop leading ``crate::``, ``self::`` and ``super::`` path segments."""
    stripped = True
    while stripped:
        stripped = False
        for prefix in LOCAL_PATH_PREFIXES:
            if descriptor.startswith(prefix):
                descriptor = descriptor[len(prefix):]
                stripped = True
    return descriptor


def _lookup(depoint: Dict[str, str], descriptor: str) -> Optional[str]:
    return depoint.get(strip_local_prefixes(descriptor))


def remap_opaque_pointers(library: Library) -> Library:
    """Rewrite pointer-to-opaque descriptors in function signatures.

    Opaque handles are always passed as pointers on the Rust side, but the
    Perl side refers to them by bare name. Only whole-descriptor matches are
    rewritten, so ``Name*[]`` and ``Name**`` are left alone. A crate-relative
    spelling such as ``crate::Name*`` names the same handle and is rewritten
    too. Running this twice is the same as running it once.

    Args:
        library: The library to rewrite in place.

    Returns:
        The same library, for chaining.
    """
    depoint = build_opaque_pointer_map(library)
    if not depoint:
        return library

    rewritten = 0
    for function in library.functions:
        for idx, arg in enumerate(function.args):
            replacement = _lookup(depoint, arg)
            if replacement is not None:
                function.args[idx] = replacement
                rewritten += 1
        replacement = _lookup(depoint, function.ret)
        if replacement is not None:
            function.ret = replacement
            rewritten += 1

    logger.debug(
        "Rewrote %d opaque pointer descriptors across %d functions",
        rewritten,
        len(library.functions),
    )
    return library
