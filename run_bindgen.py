#!/usr/bin/env python3
"""
Top-level orchestrator: extract a Rust crate's FFI surface and render Perl bindings.

Phase 1 extracts the finalized Library from the crate sources; phase 2
renders the FFI::Platypus module and dist.ini from it.

Usage:
    python run_bindgen.py --name Math::Fast
    python run_bindgen.py --name Math::Fast -i ffi/src -c ffi/Cargo.toml --output-dir out
    python run_bindgen.py --name Math::Fast --policy repr --dump-json out/surface.json
"""

import argparse
import logging
import os
import sys
import time
from typing import List, Optional

from core.bindgen_config import ConfigValidationError, load_bindgen_config
from core.cargo_manifest import CargoManifest, ManifestError, load_cargo_manifest
from core.run_artifacts import write_library_snapshot
from core.structured_logging import configure_structured_logging, phase_scope, source_scope
from extraction.errors import ExtractionError
from extraction.extractor import extract_path
from extraction.models import Library
from extraction.options import ExtractionOptions
from rendering.perl import ModuleNames, PerlBindingRenderer, write_generated_files

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Rust FFI surface extraction & Perl binding generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_bindgen.py --name Math::Fast\n"
            "  python run_bindgen.py --name Math::Fast --policy repr --dump-json surface.json\n"
        )
    )

    parser.add_argument(
        "-n", "--name",
        required=True,
        help="Base package for the generated Perl module (e.g. Math::Fast)."
    )
    parser.add_argument(
        "--distname",
        default=None,
        help="Distribution name. Default: the package name with '::' replaced by '-'."
    )
    parser.add_argument(
        "--main-file",
        default=None,
        help="Path of the main module. Default: lib/<Name/As/Path>.pm"
    )
    parser.add_argument(
        "-i", "--input",
        default="ffi/src/lib.rs",
        help="Rust source file or directory to extract from. Default: ffi/src/lib.rs"
    )
    parser.add_argument(
        "-c", "--cargo-toml",
        default="ffi/Cargo.toml",
        help="Cargo manifest of the crate. Default: ffi/Cargo.toml"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML config file (policy, markers, variant fallback, ...)."
    )
    parser.add_argument(
        "--policy",
        choices=("attribute", "repr"),
        default=None,
        help="Classification policy; overrides the config file."
    )
    parser.add_argument(
        "--output-dir",
        default=".",
        help="Directory the binding files are written to. Default: current directory"
    )
    parser.add_argument(
        "--dump-json",
        default=None,
        help="Also write the extracted surface as JSON to this path."
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging."
    )

    return parser.parse_args(argv)


def build_options(config_path: Optional[str], policy: Optional[str]) -> ExtractionOptions:
    """Merge config file settings and the CLI policy override."""
    config = load_bindgen_config(config_path)
    kwargs = config.extraction_kwargs()
    if policy is not None:
        kwargs["policy"] = policy
    return ExtractionOptions(**kwargs)


def phase1_extract(source: str, options: ExtractionOptions) -> Library:
    """Phase 1: Extract the finalized FFI surface.

    Raises:
        FileNotFoundError: If the source does not exist.
        ExtractionError: If the surface cannot be extracted.
    """
    logger.info("=" * 80)
    logger.info(" PHASE 1: FFI Surface Extraction")
    logger.info("=" * 80)
    logger.info(f"Source           : {os.path.abspath(source)}")
    logger.info(f"Policy           : {options.policy}")

    t0 = time.time()
    with phase_scope("extract"), source_scope(source):
        library, stats = extract_path(source, options=options)

    logger.info("Extraction completed in %.2fs: %s", time.time() - t0, stats)
    return library


def phase2_render(
    library: Library,
    names: ModuleNames,
    manifest: CargoManifest,
    output_dir: str,
) -> None:
    """Phase 2: Render and write the Perl binding files."""
    logger.info("=" * 80)
    logger.info(" PHASE 2: Perl Binding Rendering")
    logger.info("=" * 80)
    logger.info(f"Module           : {names.name}")
    logger.info(f"Output directory : {os.path.abspath(output_dir)}")

    with phase_scope("render"):
        files = PerlBindingRenderer().generate(library, names, manifest)
        write_generated_files(files, output_dir)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit status."""
    args = parse_args(argv)
    configure_structured_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        with phase_scope("setup"):
            options = build_options(args.config, args.policy)
            manifest = load_cargo_manifest(args.cargo_toml)
            names = ModuleNames(name=args.name, distname=args.distname, main_file=args.main_file)

        library = phase1_extract(args.input, options)
        if library.is_empty():
            logger.warning("No FFI surface found in %s; rendering an empty module.", args.input)

        if args.dump_json:
            path = write_library_snapshot(library.to_dict(), args.dump_json, source=args.input)
            logger.info(f"Wrote surface snapshot to {path}")

        phase2_render(library, names, manifest, args.output_dir)
        logger.info("Binding generation finished successfully.")
        return 0

    except FileNotFoundError as e:
        logger.error(f"File error: {e}")
    except (ConfigValidationError, ManifestError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
    except ExtractionError as e:
        logger.error(f"Extraction failed: {e}")
    except OSError as e:
        logger.error(f"I/O error: {e}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
