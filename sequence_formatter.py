"""
sequence_formatter.py
=====================
CDS Viewer: Paginated dual-sequence renderer

Responsibilities
----------------
- Translate a nucleotide sequence and build the display peptide string
- Split DNA and peptide into 72-column lines, numbered and zero-padded
- Interleave them: peptide line, DNA line, blank line

Layout
------
Every residue occupies three display columns so each peptide column sits
above the codon it came from::

    1  M  F  *
    1 ATGTTTTAG

    (three-letter mode)
    1 MetPhe***
    1 ATGTTTTAG

DNA lines are numbered by 1-based nucleotide position; peptide lines by
1-based residue ordinal (``start // 3 + 1``).  Both use the digit count of
the total nucleotide length as their width.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Final

from amino_acids import three_letter_name
from codon_tables import CODON_LENGTH, AmbiguityPolicy
from protein_translation import translate_sequence

logger = logging.getLogger(__name__)

#: Display columns per line.
LINE_WIDTH: Final[int] = 72

#: Largest length for which the numbering width was designed (16-bit).
MAX_NUMBERED_LENGTH: Final[int] = 65535


@dataclass(slots=True)
class FormattedSequence:
    """
    Rendered lines plus the numbers needed for a summary footer.

    Attributes
    ----------
    lines : list[str]
        Display lines, each block ending with an empty string.
    residues : str
        One-letter translation that was rendered.
    dna_length : int
        Number of nucleotides rendered.
    """

    lines: list[str] = field(default_factory=list)
    residues: str = ""
    dna_length: int = 0

    @property
    def n_codons(self) -> int:
        return self.dna_length // CODON_LENGTH


def count_digits(n: int) -> int:
    """Decimal digit count of a non-negative integer; ``count_digits(0) == 1``."""
    if n < 0:
        raise ValueError(f"count_digits expects a non-negative value; received {n}")
    digits = 1
    while n >= 10:
        n //= 10
        digits += 1
    return digits


def build_peptide_display(residues: str, one_letter: bool) -> str:
    """
    Widen a residue string so each residue spans three columns.

    Raises
    ------
    InvalidAminoAcidError
        In three-letter mode, for any residue without a mnemonic.
    """
    if one_letter:
        return "".join(f" {residue} " for residue in residues)
    return "".join(three_letter_name(residue) for residue in residues)


def _line_starts(length: int, width: int = LINE_WIDTH) -> range:
    return range(0, length, width)


def _numbered(number: int, width: int, text: str) -> str:
    return f"{number:0{width}d} {text}"


def render_sequence(
    nucleotides: str,
    one_letter: bool = False,
    policy: AmbiguityPolicy = AmbiguityPolicy.STRICT,
    residues: str | None = None,
) -> FormattedSequence:
    """
    Translate and render a nucleotide sequence.

    Parameters
    ----------
    nucleotides : str
        Uppercase CDS sequence.
    one_letter : bool
        Render residues as `` M `` blocks instead of ``Met`` mnemonics.
    policy : AmbiguityPolicy
        Handling of ``N`` during translation.
    residues : str | None
        One-letter translation of ``nucleotides`` when the caller already
        has it; translation is skipped.

    Returns
    -------
    FormattedSequence

    Raises
    ------
    BadNucleotideError
        If any codon cannot be translated; no lines are returned.
    InvalidAminoAcidError
        If a residue has no three-letter mnemonic.
    """
    if residues is None:
        residues = translate_sequence(nucleotides, policy)
    peptide = build_peptide_display(residues, one_letter)

    dna_length = len(nucleotides)
    if dna_length > MAX_NUMBERED_LENGTH:
        logger.debug(
            "Sequence of %d nt exceeds %d; numbering widens to %d digits.",
            dna_length, MAX_NUMBERED_LENGTH, count_digits(dna_length),
        )
    width = count_digits(dna_length)

    lines: list[str] = []
    for start in _line_starts(dna_length):
        # Peptide pagination is bounded by its own length, which is shorter
        # than the DNA when a partial codon trails.
        peptide_line = peptide[start : min(start + LINE_WIDTH, len(peptide))]
        if peptide_line:
            lines.append(_numbered(start // CODON_LENGTH + 1, width, peptide_line))
        lines.append(_numbered(start + 1, width, nucleotides[start : start + LINE_WIDTH]))
        lines.append("")

    logger.debug(
        "Rendered %d nt / %d aa into %d line(s) (one_letter=%s).",
        dna_length, len(residues), len(lines), one_letter,
    )
    return FormattedSequence(lines=lines, residues=residues, dna_length=dna_length)


def format_sequence(
    nucleotides: str,
    one_letter: bool = False,
    policy: AmbiguityPolicy = AmbiguityPolicy.STRICT,
) -> list[str]:
    """Display lines for ``nucleotides``; see :func:`render_sequence`."""
    return render_sequence(nucleotides, one_letter, policy).lines
