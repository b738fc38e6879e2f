"""CDS viewer CLI entry point."""

import argparse
import logging
import sys

from codon_tables import AmbiguityPolicy
from gene_catalog import CatalogError
from viewer_orchestrator import (
    VIEWER_VERSION,
    ViewerConfig,
    ViewerError,
    run_viewer,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cds-viewer",
        description="Translate and display CDS features of a GenBank file "
                    "(NCBI translation table 11)",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {VIEWER_VERSION}"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    parser.add_argument(
        "genbank", nargs="?", default=None,
        help="GenBank file to read (default: $CDS_VIEWER_GENBANK or nc_005816.gb)",
    )
    parser.add_argument(
        "--one-letter", action="store_true",
        help="Show residues as one-letter codes (default: three-letter)",
    )
    parser.add_argument(
        "--permissive-n", action="store_true",
        help="Translate the ambiguity code N as A instead of rejecting it",
    )
    parser.add_argument(
        "--select", type=int, default=None, metavar="INDEX",
        help="Gene index to display in every record instead of prompting",
    )
    parser.add_argument(
        "--output-dir", type=str, default=None,
        help="Also write protein FASTA and a JSON report for each shown gene",
    )
    parser.add_argument(
        "--overwrite", action="store_true",
        help="Overwrite existing files in --output-dir",
    )
    parser.add_argument(
        "--skip-incomplete", action="store_true",
        help="Skip CDS features without protein_id/product instead of failing",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )

    config_kwargs = dict(
        one_letter=args.one_letter,
        ambiguity_policy=(
            AmbiguityPolicy.PERMISSIVE if args.permissive_n else AmbiguityPolicy.STRICT
        ),
        selection=args.select,
        output_dir=args.output_dir,
        overwrite=args.overwrite,
        skip_incomplete=args.skip_incomplete,
    )
    if args.genbank is not None:
        config_kwargs["genbank_path"] = args.genbank

    try:
        config = ViewerConfig(**config_kwargs)
        result = run_viewer(config)
    except (FileNotFoundError, FileExistsError, ViewerError, CatalogError) as exc:
        logging.error("%s", exc)
        return 1
    except (EOFError, KeyboardInterrupt):
        logging.error("No selection made.")
        return 1

    for view in result.views:
        for path in view.output_paths:
            print(f"Wrote {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
