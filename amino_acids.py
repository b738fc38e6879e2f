"""
amino_acids.py
==============
Single-letter residue code to three-letter mnemonic.

The domain is the 26 uppercase letters plus ``*`` (stop).  IUPAC
ambiguity letters with no single amino acid (B, J, X, Z) resolve to the
``UNKNOWN_RESIDUE`` placeholder rather than failing.
"""

from __future__ import annotations

import logging
from typing import Final

from codon_tables import TranslationError

logger = logging.getLogger(__name__)

#: Placeholder mnemonic for ambiguity letters.
UNKNOWN_RESIDUE: Final[str] = "???"

#: Mnemonic used for the stop symbol.
STOP_NAME: Final[str] = "***"

THREE_LETTER_CODE: Final[dict[str, str]] = {
    "A": "Ala", "B": UNKNOWN_RESIDUE, "C": "Cys", "D": "Asp",
    "E": "Glu", "F": "Phe", "G": "Gly", "H": "His",
    "I": "Ile", "J": UNKNOWN_RESIDUE, "K": "Lys", "L": "Leu",
    "M": "Met", "N": "Asn", "O": "Pyr", "P": "Pro",
    "Q": "Gln", "R": "Arg", "S": "Ser", "T": "Thr",
    "U": "Sel", "V": "Val", "W": "Trp", "X": UNKNOWN_RESIDUE,
    "Y": "Tyr", "Z": UNKNOWN_RESIDUE, "*": STOP_NAME,
}


class InvalidAminoAcidError(TranslationError):
    """Raised when a residue code falls outside A-Z and ``*``."""

    def __init__(self, residue: str) -> None:
        self.residue = residue
        super().__init__(
            f"{residue!r} is not a single-letter amino acid code "
            "(expected A-Z or '*')."
        )


def three_letter_name(residue: str) -> str:
    """
    Return the three-letter mnemonic for a single-letter residue code.

    Parameters
    ----------
    residue : str
        One uppercase letter, or ``*`` for stop.

    Returns
    -------
    str
        Three-character mnemonic, e.g. ``"Met"``; ``"???"`` for B/J/X/Z.

    Raises
    ------
    InvalidAminoAcidError
        If ``residue`` is not in the 27-symbol domain.
    """
    try:
        return THREE_LETTER_CODE[residue]
    except (KeyError, TypeError):
        raise InvalidAminoAcidError(residue) from None


def to_three_letter(peptide: str) -> str:
    """Concatenate the mnemonics of every residue in ``peptide``."""
    return "".join(three_letter_name(residue) for residue in peptide)
