"""
protein_translation.py
======================
CDS Viewer: Codon-by-codon translation with start-codon override

Responsibilities
----------------
- Translate a single codon through the fixed table-11 lookup, treating the
  first codon of a reading frame as Met when it is a valid start codon
- Translate a whole extracted CDS, dropping a trailing partial codon
- Produce a ``ProteinRecord`` describing the translated gene
- Write protein FASTA and JSON translation reports

Data Flow
---------
    Input  : uppercase nucleotide string (from gene_catalog.extract_sequence)
    Output : residue string | ProteinRecord (dataclass)

Design Notes
------------
- The start-codon rule applies only at frame position 0.  Mid-sequence,
  alternative starts keep their standard meaning (GTG -> V).
- Translation never guesses: any codon outside the accepted alphabet raises
  ``BadNucleotideError`` and nothing is returned for the sequence.
- ``N`` handling is an explicit ``AmbiguityPolicy`` chosen by the caller.

Dependencies
------------
    biopython >= 1.83  (FASTA serialisation)
    Python    >= 3.10
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, NamedTuple

from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from codon_tables import (
    CODON_LENGTH,
    GENETIC_CODE,
    TABLE_ID,
    AmbiguityPolicy,
    BadNucleotideError,
    TranslationError,
    codon_index,
    is_start_codon,
)
from amino_acids import InvalidAminoAcidError

__all__ = [
    "BadNucleotideError",
    "InvalidAminoAcidError",
    "ProteinRecord",
    "StopCodonInfo",
    "TranslationError",
    "translate_codon",
    "translate_gene",
    "translate_sequence",
    "write_protein_fasta",
    "write_translation_report",
]

# ---------------------------------------------------------------------------
# Module logger
# ---------------------------------------------------------------------------

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: The stop codon character in the genetic code table.
STOP_SYMBOL: Final[str] = "*"

#: Residue forced by the start-codon override.
START_RESIDUE: Final[str] = "M"


# ---------------------------------------------------------------------------
# Supporting types
# ---------------------------------------------------------------------------

class StopCodonInfo(NamedTuple):
    """Location and context of a stop codon within a translated sequence."""

    position: int        # 0-based index in the **amino acid** sequence
    codon: str           # Three-nucleotide codon (e.g. "TAA")
    is_terminal: bool    # True when this is the last character in the sequence


# ---------------------------------------------------------------------------
# Data contract
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class ProteinRecord:
    """
    Translation of one CDS feature.

    Attributes
    ----------
    sequence_id : str
        Protein identifier (the feature's ``protein_id``).
    description : str
        Product name (the feature's ``product``).
    sequence : str
        One-letter residues including a terminal stop ('*') if present.
    dna_length : int
        Length of the nucleotide sequence that was translated, including
        any trailing partial codon.
    codon_table_id : int
        Always 11.
    ambiguity_policy : AmbiguityPolicy
        Policy used for ``N`` while translating.
    is_complete : bool
        True when the sequence begins with Met ('M') and ends with '*'.
    has_internal_stop : bool
        True if a stop codon appears anywhere before the final position.
    stop_codons : list[StopCodonInfo]
        All stop codons found, ordered by position.
    warnings : list[str]
        Non-fatal translation quality issues.
    """

    sequence_id: str
    description: str
    sequence: str
    dna_length: int
    codon_table_id: int = TABLE_ID
    ambiguity_policy: AmbiguityPolicy = AmbiguityPolicy.STRICT
    is_complete: bool = False
    has_internal_stop: bool = False
    stop_codons: list[StopCodonInfo] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def length(self) -> int:
        """Residue count, stop symbols included."""
        return len(self.sequence)

    @property
    def clean_sequence(self) -> str:
        """Amino acid sequence with all stop codon symbols ('*') stripped."""
        return self.sequence.replace(STOP_SYMBOL, "")

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_seqrecord(self, strip_stop: bool = False) -> SeqRecord:
        seq = self.clean_sequence if strip_stop else self.sequence
        return SeqRecord(
            Seq(seq),
            id=self.sequence_id,
            description=self.description,
        )

    def to_dict(self) -> dict:
        return {
            "sequence_id": self.sequence_id,
            "description": self.description,
            "sequence": self.sequence,
            "length": self.length,
            "dna_length": self.dna_length,
            "codon_table_id": self.codon_table_id,
            "ambiguity_policy": self.ambiguity_policy.value,
            "is_complete": self.is_complete,
            "has_internal_stop": self.has_internal_stop,
            "stop_codons": [sc._asdict() for sc in self.stop_codons],
            "warnings": self.warnings,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


# ---------------------------------------------------------------------------
# Codon translation
# ---------------------------------------------------------------------------

def translate_codon(
    codon: str,
    position: int,
    policy: AmbiguityPolicy = AmbiguityPolicy.STRICT,
) -> str:
    """
    Translate one codon to its single-letter residue.

    Parameters
    ----------
    codon : str
        Three uppercase bases.
    position : int
        Nucleotide offset of the codon within its reading frame.  Only
        ``0`` (the first codon) is significant: there, any table-11 start
        codon reads as Met.
    policy : AmbiguityPolicy
        Whether ``N`` is rejected or looked up as ``A``.

    Returns
    -------
    str
        One of the 20 amino acid letters or '*'.

    Raises
    ------
    BadNucleotideError
        If the codon contains a base outside the accepted alphabet.
    """
    index = codon_index(codon, policy)
    if position == 0 and is_start_codon(index):
        return START_RESIDUE
    return GENETIC_CODE[index]


def translate_sequence(
    nucleotides: str,
    policy: AmbiguityPolicy = AmbiguityPolicy.STRICT,
) -> str:
    """
    Translate a CDS codon by codon from offset 0.

    Fewer than three remaining bases end translation; the partial codon is
    not an error and contributes no residue.

    Raises
    ------
    BadNucleotideError
        On the first codon that cannot be resolved.
    """
    n_codons = len(nucleotides) // CODON_LENGTH
    residues = [
        translate_codon(nucleotides[start : start + CODON_LENGTH], start, policy)
        for start in range(0, n_codons * CODON_LENGTH, CODON_LENGTH)
    ]
    return "".join(residues)


# ---------------------------------------------------------------------------
# Record analysis
# ---------------------------------------------------------------------------

def _find_stop_codons(protein: str, cds: str) -> list[StopCodonInfo]:
    """One ``StopCodonInfo`` per '*' in ``protein``, ordered by position."""
    stops: list[StopCodonInfo] = []
    last_pos = len(protein) - 1

    for aa_pos, aa in enumerate(protein):
        if aa == STOP_SYMBOL:
            nt_start = aa_pos * CODON_LENGTH
            stops.append(StopCodonInfo(
                position=aa_pos,
                codon=cds[nt_start : nt_start + CODON_LENGTH],
                is_terminal=(aa_pos == last_pos),
            ))

    return stops


def _check_completeness(
    protein: str,
    dna_length: int,
    sequence_id: str,
) -> tuple[bool, bool, list[str]]:
    """
    Assess a translated sequence.

    A *complete* protein begins with Met and ends with a stop codon.

    Returns
    -------
    tuple[bool, bool, list[str]]
        ``(is_complete, has_internal_stop, warnings)``
    """
    warnings: list[str] = []

    has_internal_stop = STOP_SYMBOL in protein[:-1]
    starts_with_met = protein.startswith(START_RESIDUE)
    ends_with_stop = protein.endswith(STOP_SYMBOL)
    is_complete = starts_with_met and ends_with_stop

    trim = dna_length % CODON_LENGTH
    if trim:
        warnings.append(
            f"'{sequence_id}': {trim} trailing nucleotide(s) do not form a "
            "complete codon and were not translated."
        )

    if protein and not starts_with_met:
        warnings.append(
            f"'{sequence_id}': protein does not begin with Met (M); the first "
            "codon is not a table-11 start codon."
        )

    if protein and not ends_with_stop:
        warnings.append(
            f"'{sequence_id}': no terminal stop codon found."
        )

    if has_internal_stop:
        n_internal = protein[:-1].count(STOP_SYMBOL)
        warnings.append(
            f"'{sequence_id}': {n_internal} internal stop codon(s) detected."
        )

    return is_complete, has_internal_stop, warnings


def translate_gene(
    sequence_id: str,
    description: str,
    nucleotides: str,
    policy: AmbiguityPolicy = AmbiguityPolicy.STRICT,
) -> ProteinRecord:
    """
    Translate an extracted CDS into a ``ProteinRecord``.

    Parameters
    ----------
    sequence_id : str
        Protein identifier carried into the record.
    description : str
        Product description carried into the record.
    nucleotides : str
        Uppercase CDS sequence, already strand-resolved.
    policy : AmbiguityPolicy

    Returns
    -------
    ProteinRecord

    Raises
    ------
    BadNucleotideError
        If any codon contains an invalid base.
    """
    protein = translate_sequence(nucleotides, policy)
    stop_codons = _find_stop_codons(protein, nucleotides)
    is_complete, has_internal_stop, warnings = _check_completeness(
        protein, len(nucleotides), sequence_id
    )

    record = ProteinRecord(
        sequence_id=sequence_id,
        description=description,
        sequence=protein,
        dna_length=len(nucleotides),
        ambiguity_policy=policy,
        is_complete=is_complete,
        has_internal_stop=has_internal_stop,
        stop_codons=stop_codons,
        warnings=warnings,
    )

    logger.info(
        "Translated '%s': %d nt -> %d aa, complete=%s, internal_stops=%s, "
        "warnings=%d.",
        sequence_id, record.dna_length, record.length, is_complete,
        has_internal_stop, len(warnings),
    )
    return record


# ---------------------------------------------------------------------------
# I/O helpers
# ---------------------------------------------------------------------------

def _prepare_output(output_path: str | Path, overwrite: bool, label: str) -> Path:
    output_path = Path(output_path).resolve()
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if output_path.exists() and not overwrite:
        raise FileExistsError(
            f"{label} '{output_path}' already exists. "
            "Pass overwrite=True to replace it."
        )
    return output_path


def write_protein_fasta(
    record: ProteinRecord,
    output_path: str | Path,
    strip_stop: bool = False,
    overwrite: bool = False,
) -> Path:
    """
    Write a ``ProteinRecord`` to a FASTA file.

    Parameters
    ----------
    record : ProteinRecord
    output_path : str | Path
    strip_stop : bool
        Strip '*' characters before writing.
    overwrite : bool
        Overwrite an existing file if True.

    Returns
    -------
    Path
        Resolved output path.

    Raises
    ------
    FileExistsError
        If the file exists and ``overwrite=False``.
    """
    output_path = _prepare_output(output_path, overwrite, "Output file")

    with open(output_path, "w", encoding="utf-8") as handle:
        SeqIO.write(record.to_seqrecord(strip_stop=strip_stop), handle, "fasta")

    logger.info(
        "Protein FASTA written to '%s' (%d aa, stop_stripped=%s).",
        output_path, record.length, strip_stop,
    )
    return output_path


def write_translation_report(
    record: ProteinRecord,
    output_path: str | Path,
    overwrite: bool = False,
) -> Path:
    """Write translation metadata to a JSON file."""
    output_path = _prepare_output(output_path, overwrite, "Translation report")
    output_path.write_text(record.to_json(), encoding="utf-8")

    logger.info("Translation report written to '%s'.", output_path)
    return output_path
