"""
codon_tables.py
===============
Fixed genetic-code lookup tables (NCBI translation table 11).

Responsibilities
----------------
- Map a nucleotide character to its 2-bit lane (T=0, C=1, A=2, G=3)
- Turn a three-base codon into a flat table index in [0, 63]
- Hold the standard residue table and the start-codon override table

Indexing
--------
``index = 16 * lane(b0) + 4 * lane(b1) + lane(b2)``, so
TTT = 0, TTC = 1, TTA = 2, ... , GGC = 61, GGA = 62, GGG = 63.

Both tables are module-level string constants; they are never mutated,
so sharing them between threads needs no locking.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Final

# ---------------------------------------------------------------------------
# Module logger
# ---------------------------------------------------------------------------

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Canonical base ordering; position in this string is the lane.
BASE_ORDER: Final[str] = "TCAG"

#: NCBI table number the constants below were taken from.
TABLE_ID: Final[int] = 11

#: Residue per codon index, NCBI table 11 (bacterial, archaeal, plastid).
GENETIC_CODE: Final[str] = (
    "FFLLSSSSYY**CC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG"
)

#: 'M' where the codon is a valid start, '-' where no override applies.
START_CODONS: Final[str] = (
    "---M---------------M------------MMMM---------------M------------"
)

START_MARKER: Final[str] = "M"
NO_OVERRIDE: Final[str] = "-"

CODON_LENGTH: Final[int] = 3

_LANES: Final[dict[str, int]] = {base: i for i, base in enumerate(BASE_ORDER)}


class AmbiguityPolicy(str, Enum):
    """How the ambiguity code ``N`` is treated during lane lookup."""

    STRICT     = "strict"       # only T, C, A, G
    PERMISSIVE = "permissive"   # N is looked up as A


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class TranslationError(Exception):
    """Base exception for all codon translation failures."""


class BadNucleotideError(TranslationError):
    """
    Raised when a codon contains a character outside the accepted alphabet.

    Attributes
    ----------
    codon : str
        The codon as supplied.
    lanes : list[int | None]
        Lanes resolved for each base, ``None`` where lookup failed.
    """

    def __init__(self, codon: str, lanes: list[int | None]) -> None:
        self.codon = codon
        self.lanes = lanes
        super().__init__(
            f"Codon {codon!r} contains invalid nucleotide(s) "
            f"{self.offending!r}; resolved lanes: {lanes}"
        )

    @property
    def offending(self) -> list[str]:
        """Characters of the codon that could not be mapped to a lane."""
        return [b for b, lane in zip(self.codon, self.lanes) if lane is None]


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def _lane(base: str, policy: AmbiguityPolicy) -> int | None:
    if base == "N" and policy is AmbiguityPolicy.PERMISSIVE:
        return _LANES["A"]
    return _LANES.get(base)


def lane(base: str, policy: AmbiguityPolicy = AmbiguityPolicy.STRICT) -> int:
    """
    Return the lane of a single uppercase base.

    Lookup is case-sensitive; callers uppercase beforehand.

    Raises
    ------
    BadNucleotideError
        If ``base`` is outside T, C, A, G (and ``N`` under the permissive
        policy).
    """
    resolved = _lane(base, policy)
    if resolved is None:
        raise BadNucleotideError(base, [None])
    return resolved


def codon_lanes(
    codon: str,
    policy: AmbiguityPolicy = AmbiguityPolicy.STRICT,
) -> list[int]:
    """
    Resolve the three lanes of a codon.

    Parameters
    ----------
    codon : str
        Exactly three uppercase bases.
    policy : AmbiguityPolicy
        Whether ``N`` is accepted (as ``A``) or rejected.

    Returns
    -------
    list[int]

    Raises
    ------
    ValueError
        If ``codon`` is not three characters long.
    BadNucleotideError
        If any base is outside the accepted alphabet.
    """
    if len(codon) != CODON_LENGTH:
        raise ValueError(
            f"A codon must have exactly {CODON_LENGTH} bases; received {codon!r}"
        )

    lanes = [_lane(base, policy) for base in codon]
    if None in lanes:
        raise BadNucleotideError(codon, lanes)
    return lanes  # type: ignore[return-value]


def codon_index(
    codon: str,
    policy: AmbiguityPolicy = AmbiguityPolicy.STRICT,
) -> int:
    """Flat table index of a codon, in [0, 63]."""
    first, second, third = codon_lanes(codon, policy)
    return 16 * first + 4 * second + third


def index_to_codon(index: int) -> str:
    """Inverse of :func:`codon_index` for the unambiguous alphabet."""
    if not 0 <= index < len(GENETIC_CODE):
        raise ValueError(f"Codon index must be in [0, 63]; received {index}")
    return (
        BASE_ORDER[index // 16]
        + BASE_ORDER[(index // 4) % 4]
        + BASE_ORDER[index % 4]
    )


def is_start_codon(index: int) -> bool:
    """True when the codon at ``index`` reads as Met in the first position."""
    return START_CODONS[index] != NO_OVERRIDE
