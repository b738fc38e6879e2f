"""
viewer_orchestrator.py
======================
CDS Viewer: Orchestration (GenBank file -> rendered gene)

Overview
--------
This module wires the viewer stages together.  It does no translation or
formatting itself; it delegates to the specialist modules, handles the
selection prompt, and returns a :class:`ViewerResult`.

Stages
------
::

    GenBank file
        │
    Load ──────── gene_catalog.load_genbank        → list[SeqRecord]
        │
    Catalog ───── gene_catalog.GeneCatalog         → genes + feature tally
        │                 (per record)
    Select ────── prompt or ViewerConfig.selection → Gene
        │
    Extract ───── gene_catalog.extract_sequence    → uppercase CDS
        │
    Translate ─── protein_translation.translate_gene → ProteinRecord
        │
    Render ────── sequence_formatter.render_sequence → text block

Error Strategy
--------------
Translation and naming failures surface as :class:`GeneRenderError`
carrying the gene and the original error.  Nothing here exits the
process; the CLI decides what to do with the exception.

Environment Variables
---------------------
  CDS_VIEWER_GENBANK   default GenBank path when none is configured
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Final, TextIO

from Bio.SeqRecord import SeqRecord

from codon_tables import AmbiguityPolicy, TranslationError
from gene_catalog import (
    Gene,
    GeneCatalog,
    InvalidSelectionError,
    extract_sequence,
    load_genbank,
)
from protein_translation import (
    ProteinRecord,
    translate_gene,
    write_protein_fasta,
    write_translation_report,
)
from sequence_formatter import render_sequence

# ---------------------------------------------------------------------------
# Module logger
# ---------------------------------------------------------------------------

logger = logging.getLogger(__name__)

VIEWER_VERSION: Final[str] = "1.0.0"

DEFAULT_GENBANK: Final[str] = "nc_005816.gb"
GENBANK_ENV_VAR: Final[str] = "CDS_VIEWER_GENBANK"


def _default_genbank_path() -> Path:
    return Path(os.environ.get(GENBANK_ENV_VAR) or DEFAULT_GENBANK)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass
class ViewerConfig:
    """
    Configuration for a single viewer run.

    Parameters
    ----------
    genbank_path : str | Path
        GenBank flat file to read.  Defaults to ``$CDS_VIEWER_GENBANK`` or
        ``nc_005816.gb``.
    one_letter : bool
        Render residues in one-letter blocks instead of three-letter codes.
    ambiguity_policy : AmbiguityPolicy | str
        ``"strict"`` rejects ``N``; ``"permissive"`` reads it as ``A``.
    selection : int | None
        Gene index to render in every record.  ``None`` prompts.
    output_dir : str | Path | None
        If set, the rendered protein is also written there as FASTA + JSON.
    overwrite : bool
        Overwrite existing output files.
    skip_incomplete : bool
        Skip CDS features lacking ``protein_id``/``product`` instead of
        failing.
    """

    genbank_path: str | Path = field(default_factory=_default_genbank_path)
    one_letter: bool = False
    ambiguity_policy: AmbiguityPolicy | str = AmbiguityPolicy.STRICT
    selection: int | None = None
    output_dir: str | Path | None = None
    overwrite: bool = False
    skip_incomplete: bool = False

    def __post_init__(self) -> None:
        self.genbank_path = Path(self.genbank_path)
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)
        if not isinstance(self.ambiguity_policy, AmbiguityPolicy):
            try:
                self.ambiguity_policy = AmbiguityPolicy(self.ambiguity_policy)
            except ValueError:
                valid = [p.value for p in AmbiguityPolicy]
                raise InvalidConfigError(
                    f"'ambiguity_policy' must be one of {valid}; "
                    f"got {self.ambiguity_policy!r}."
                ) from None

    def to_dict(self) -> dict:
        return {
            "genbank_path":     str(self.genbank_path),
            "one_letter":       self.one_letter,
            "ambiguity_policy": self.ambiguity_policy.value,
            "selection":        self.selection,
            "output_dir":       str(self.output_dir) if self.output_dir else None,
            "overwrite":        self.overwrite,
            "skip_incomplete":  self.skip_incomplete,
        }


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class GeneView:
    """One rendered gene: its text block and translation."""

    record_name: str
    gene: Gene
    protein: ProteinRecord
    lines: list[str] = field(default_factory=list)
    output_paths: list[str] = field(default_factory=list)

    def text(self) -> str:
        return "\n".join(self.lines)


@dataclass(slots=True)
class ViewerResult:
    """Everything a run produced, in record order."""

    config: ViewerConfig
    catalogs: list[GeneCatalog] = field(default_factory=list)
    views: list[GeneView] = field(default_factory=list)

    def summary(self) -> str:
        n_genes = sum(len(c) for c in self.catalogs)
        return (
            f"{len(self.catalogs)} record(s), {n_genes} gene(s), "
            f"{len(self.views)} rendered"
        )


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ViewerError(Exception):
    """Base exception for orchestration-level failures."""


class InvalidConfigError(ViewerError):
    """Raised when :class:`ViewerConfig` contains invalid parameters."""


class GeneRenderError(ViewerError):
    """
    Raised when a selected gene cannot be translated or rendered.

    Attributes
    ----------
    gene : Gene
    cause : TranslationError
    """

    def __init__(self, gene: Gene, cause: Exception) -> None:
        self.gene = gene
        self.cause = cause
        super().__init__(
            f"Could not render '{gene.identifier}': "
            f"{type(cause).__name__}: {cause}"
        )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _validate_config(config: ViewerConfig) -> None:
    """
    Validate a :class:`ViewerConfig` before any file is read.

    Raises
    ------
    InvalidConfigError
    """
    if config.selection is not None and config.selection < 0:
        raise InvalidConfigError(
            f"'selection' must be a non-negative gene index; got {config.selection}."
        )
    if config.output_dir is not None and Path(config.output_dir).is_file():
        raise InvalidConfigError(
            f"'output_dir' points to an existing file: {config.output_dir}"
        )


def _emit(out: TextIO, line: str = "") -> None:
    out.write(line + "\n")


def _parse_selection(raw: str) -> int:
    """Turn prompt input into a gene index; range is checked by the catalog."""
    text = raw.strip()
    if not (text.isascii() and text.isdigit()):
        raise InvalidSelectionError(f"Invalid input: '{text}'")
    return int(text)


def _choose_gene(
    catalog: GeneCatalog,
    config: ViewerConfig,
    input_fn: Callable[[str], str],
    out: TextIO,
) -> Gene:
    if config.selection is not None:
        index = config.selection
    else:
        out.flush()
        raw = input_fn(f"\nWhich would you like to view [0-{len(catalog) - 1}]: ")
        index = _parse_selection(raw)
    gene = catalog.select(index)
    _emit(out, f"You selected: {index}")
    return gene


def _write_artefacts(view: GeneView, config: ViewerConfig) -> None:
    base_dir = Path(config.output_dir).resolve()
    stem = view.gene.identifier.replace("/", "_")
    fasta_path = write_protein_fasta(
        view.protein, base_dir / f"{stem}.fasta", overwrite=config.overwrite
    )
    json_path = write_translation_report(
        view.protein, base_dir / f"{stem}_translation.json",
        overwrite=config.overwrite,
    )
    view.output_paths.extend([str(fasta_path), str(json_path)])


# ---------------------------------------------------------------------------
# Primary public API
# ---------------------------------------------------------------------------


def render_gene(
    record: SeqRecord,
    gene: Gene,
    one_letter: bool = False,
    policy: AmbiguityPolicy = AmbiguityPolicy.STRICT,
) -> GeneView:
    """
    Extract, translate and render one gene of ``record``.

    Returns
    -------
    GeneView
        ``lines`` holds the header, the interleaved peptide/DNA blocks and
        the length footer.

    Raises
    ------
    GeneRenderError
        If any codon fails translation or naming.  No partial block is
        returned.
    SequenceExtractionError
        If the record carries no sequence.
    """
    nucleotides = extract_sequence(record, gene)
    logger.debug(
        "'%s': extracted %d nt from %s.", gene.identifier, len(nucleotides), gene.location
    )

    try:
        protein = translate_gene(gene.identifier, gene.description, nucleotides, policy)
        formatted = render_sequence(
            nucleotides, one_letter, policy, residues=protein.sequence
        )
    except TranslationError as exc:
        raise GeneRenderError(gene, exc) from exc

    lines = [str(gene)]
    lines.extend(formatted.lines)
    lines.append(f"DNA:     {formatted.dna_length} bases")
    lines.append(f"Protein: {formatted.n_codons} amino acids (including stop)")

    return GeneView(
        record_name=record.name,
        gene=gene,
        protein=protein,
        lines=lines,
    )


def run_viewer(
    config: ViewerConfig,
    input_fn: Callable[[str], str] = input,
    out: TextIO | None = None,
) -> ViewerResult:
    """
    Read a GenBank file and render one selected gene per record.

    Parameters
    ----------
    config : ViewerConfig
    input_fn : callable
        Prompt function used when ``config.selection`` is ``None``.
    out : TextIO | None
        Stream for the human-readable output.  Defaults to ``sys.stdout``.

    Returns
    -------
    ViewerResult

    Raises
    ------
    InvalidConfigError
        If the configuration fails validation.
    FileNotFoundError
        If the GenBank file does not exist.
    GenBankParsingError
        If the file cannot be parsed.
    MissingQualifierError
        If a CDS lacks ``protein_id``/``product`` and incomplete features
        are not being skipped.
    InvalidSelectionError
        If the chosen index is not a valid gene number.
    GeneRenderError
        If the selected gene cannot be translated.
    """
    out = out if out is not None else sys.stdout
    _validate_config(config)

    logger.info("CDS viewer starting | config=%s", config.to_dict())
    _emit(out, f"\nReading records from file '{config.genbank_path}'...")

    records = load_genbank(config.genbank_path)
    result = ViewerResult(config=config)

    for record in records:
        _emit(out, f"Record name: {record.name}")
        _emit(out, f"Sequence length: {len(record)}")

        catalog = GeneCatalog.from_record(record, skip_incomplete=config.skip_incomplete)
        result.catalogs.append(catalog)

        _emit(out)
        _emit(
            out,
            f"Found {catalog.tally.total} features, including {len(catalog)} genes.",
        )
        for line in catalog.tally.format_lines():
            _emit(out, f"  {line}")
        for line in catalog.format_listing():
            _emit(out, line)

        if not catalog:
            logger.info("Record '%s' has no CDS features; nothing to render.", record.name)
            continue

        gene = _choose_gene(catalog, config, input_fn, out)
        view = render_gene(record, gene, config.one_letter, config.ambiguity_policy)

        _emit(out)
        _emit(out, view.text())

        if config.output_dir is not None:
            _write_artefacts(view, config)

        result.views.append(view)

    logger.info("Viewer complete: %s", result.summary())
    return result


def run_viewer_from_dict(config_dict: dict, **kwargs) -> ViewerResult:
    """
    Create a :class:`ViewerConfig` from a dict and run the viewer.

    Raises
    ------
    InvalidConfigError
        If unknown keys are present or values fail validation.
    """
    try:
        config = ViewerConfig(**config_dict)
    except TypeError as exc:
        raise InvalidConfigError(
            f"Invalid configuration key or type: {exc}"
        ) from exc
    return run_viewer(config, **kwargs)
