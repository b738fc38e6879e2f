"""
gene_catalog.py
===============
CDS Viewer: GenBank loading and CDS collection

Responsibilities
----------------
- Parse a GenBank flat file into Biopython ``SeqRecord`` objects
- Tally every feature kind in a record (for display)
- Collect ``CDS`` features as ``Gene`` entries (protein_id, product, location)
- Extract the uppercase nucleotide slice of a selected gene

Data Flow
---------
    Input  : GenBank file path | Bio.SeqRecord.SeqRecord
    Output : GeneCatalog (ordered Gene list + FeatureTally) | str (CDS)

Design Notes
------------
- Locations are kept as Biopython ``SeqFeature`` locations and resolved
  with their own ``extract``; strand and joins are handled there.
- A catalog belongs to a single record and is rebuilt for the next one.

Dependencies
------------
    biopython >= 1.83
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Iterator

from Bio import SeqIO
from Bio.Seq import UndefinedSequenceError
from Bio.SeqFeature import Location
from Bio.SeqRecord import SeqRecord

# ---------------------------------------------------------------------------
# Module logger
# ---------------------------------------------------------------------------

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CDS_KIND: Final[str] = "CDS"
IDENTIFIER_QUALIFIER: Final[str] = "protein_id"
DESCRIPTION_QUALIFIER: Final[str] = "product"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class CatalogError(Exception):
    """Base exception for GenBank loading and gene collection failures."""


class GenBankParsingError(CatalogError):
    """Raised when a GenBank file is empty or cannot be parsed."""


class MissingQualifierError(CatalogError):
    """
    Raised when a CDS feature lacks a qualifier the catalog needs.

    Attributes
    ----------
    qualifier : str
    feature_index : int
        0-based position of the feature in the record's feature table.
    """

    def __init__(self, qualifier: str, feature_index: int, record_name: str) -> None:
        self.qualifier = qualifier
        self.feature_index = feature_index
        self.record_name = record_name
        super().__init__(
            f"CDS feature #{feature_index} of record '{record_name}' has no "
            f"/{qualifier} qualifier."
        )


class InvalidSelectionError(CatalogError):
    """Raised when a gene index is outside [0, N-1]."""


class SequenceExtractionError(CatalogError):
    """Raised when a record carries no sequence data to extract from."""


# ---------------------------------------------------------------------------
# Data contracts
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Gene:
    """A CDS feature: identifier, description and unmodified location."""

    identifier: str
    description: str
    location: Location

    def __str__(self) -> str:
        return f"{self.identifier}: {self.description}"


@dataclass(slots=True)
class FeatureTally:
    """
    Occurrences of each feature kind in one record.

    ``label_width`` is the longest kind label seen, used to right-align
    the tally when it is printed.
    """

    counts: Counter = field(default_factory=Counter)
    label_width: int = 0

    def add(self, kind: str) -> None:
        self.counts[kind] += 1
        self.label_width = max(self.label_width, len(kind))

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def format_lines(self) -> list[str]:
        return [
            f"{kind:>{self.label_width}}: {count}"
            for kind, count in self.counts.items()
        ]


@dataclass(slots=True)
class GeneCatalog:
    """
    CDS features of one record, indexed 0..N-1 in encounter order.

    Attributes
    ----------
    record_name : str
    sequence_length : int
    genes : list[Gene]
    tally : FeatureTally
    """

    record_name: str
    sequence_length: int
    genes: list[Gene] = field(default_factory=list)
    tally: FeatureTally = field(default_factory=FeatureTally)

    def __len__(self) -> int:
        return len(self.genes)

    def __iter__(self) -> Iterator[Gene]:
        return iter(self.genes)

    def __getitem__(self, index: int) -> Gene:
        return self.genes[index]

    def select(self, index: int) -> Gene:
        """
        Return the gene at ``index``.

        Raises
        ------
        InvalidSelectionError
            If the catalog is empty or ``index`` is outside [0, N-1].
        """
        if not self.genes:
            raise InvalidSelectionError(
                f"Record '{self.record_name}' contains no CDS features."
            )
        if not 0 <= index < len(self.genes):
            raise InvalidSelectionError(
                f"Gene index {index} is out of range [0-{len(self.genes) - 1}]."
            )
        return self.genes[index]

    def format_listing(self) -> list[str]:
        return [f"{i}) {gene}" for i, gene in enumerate(self.genes)]

    @classmethod
    def from_record(
        cls,
        record: SeqRecord,
        skip_incomplete: bool = False,
    ) -> GeneCatalog:
        """
        Build a catalog by scanning a record's feature table once.

        Parameters
        ----------
        record : Bio.SeqRecord.SeqRecord
        skip_incomplete : bool
            If True, CDS features without ``protein_id`` or ``product`` are
            logged and left out instead of raising.

        Returns
        -------
        GeneCatalog

        Raises
        ------
        MissingQualifierError
            If a CDS lacks a required qualifier and ``skip_incomplete`` is
            False.
        """
        catalog = cls(record_name=record.name, sequence_length=len(record))

        for feature_index, feature in enumerate(record.features):
            catalog.tally.add(feature.type)
            if feature.type != CDS_KIND:
                continue

            try:
                identifier = _first_qualifier(
                    feature.qualifiers, IDENTIFIER_QUALIFIER, feature_index, record.name
                )
                description = _first_qualifier(
                    feature.qualifiers, DESCRIPTION_QUALIFIER, feature_index, record.name
                )
            except MissingQualifierError as exc:
                if not skip_incomplete:
                    raise
                logger.warning("Skipping CDS: %s", exc)
                continue

            catalog.genes.append(Gene(identifier, description, feature.location))

        logger.info(
            "Record '%s': %d features, %d CDS collected.",
            catalog.record_name, catalog.tally.total, len(catalog.genes),
        )
        return catalog


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _first_qualifier(
    qualifiers: dict,
    key: str,
    feature_index: int,
    record_name: str,
) -> str:
    values = qualifiers.get(key) or []
    if not values:
        raise MissingQualifierError(key, feature_index, record_name)
    return str(values[0]).replace("\n", "")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_sequence(record: SeqRecord, gene: Gene) -> str:
    """
    Return the uppercase nucleotide sequence covered by ``gene``.

    Raises
    ------
    SequenceExtractionError
        If the record has no sequence data (e.g. a GenBank file without an
        ORIGIN section), or the location points into a different
        record.
    """
    try:
        return str(gene.location.extract(record.seq)).upper()
    except UndefinedSequenceError as exc:
        raise SequenceExtractionError(
            f"Record '{record.name}' has no sequence data for "
            f"'{gene.identifier}': {exc}"
        ) from exc
    except ValueError as exc:
        # Raised by Biopython for locations that reference another record.
        raise SequenceExtractionError(
            f"Cannot extract '{gene.identifier}' from record "
            f"'{record.name}': {exc}"
        ) from exc


def load_genbank(path: str | Path) -> list[SeqRecord]:
    """
    Parse every record in a GenBank file.

    Parameters
    ----------
    path : str | Path

    Returns
    -------
    list[Bio.SeqRecord.SeqRecord]
        Records in file order.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    GenBankParsingError
        If the file is empty, unreadable, or holds no records.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"File '{path}' does not exist.")
    if not path.is_file():
        raise GenBankParsingError(f"Path is not a regular file: {path}")
    if path.stat().st_size == 0:
        raise GenBankParsingError(f"GenBank file is empty: {path}")

    try:
        records = list(SeqIO.parse(str(path), "genbank"))
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        raise GenBankParsingError(
            f"Failed to read GenBank file '{path}': {exc}"
        ) from exc

    if not records:
        raise GenBankParsingError(
            f"No parseable records found in '{path}'.  "
            "Ensure the file is in GenBank flat-file format."
        )

    logger.info("Loaded %d record(s) from '%s'.", len(records), path)
    return records
