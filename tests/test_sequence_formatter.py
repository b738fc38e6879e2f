"""Tests for the paginated peptide/DNA renderer."""

import math

import pytest

from amino_acids import InvalidAminoAcidError
from codon_tables import AmbiguityPolicy, BadNucleotideError
from sequence_formatter import (
    LINE_WIDTH,
    build_peptide_display,
    count_digits,
    format_sequence,
    render_sequence,
)

LONG_CDS = "ATG" + "GCT" * 48 + "TAA"   # 150 nt, 50 codons


def _dna_lines(lines):
    """DNA lines are the ones directly followed by a blank separator."""
    return [lines[i] for i in range(len(lines) - 1) if lines[i + 1] == ""]


# ── count_digits ──────────────────────────────────────────────────────────────

@pytest.mark.parametrize("n, digits", [
    (0, 1), (9, 1), (10, 2), (72, 2), (999, 3), (1000, 4), (65535, 5),
])
def test_count_digits(n, digits):
    assert count_digits(n) == digits


def test_count_digits_negative():
    with pytest.raises(ValueError):
        count_digits(-1)


# ── Peptide display ───────────────────────────────────────────────────────────

def test_peptide_display_one_letter_is_three_columns_per_residue():
    display = build_peptide_display("MF*", one_letter=True)
    assert display == " M  F  * "
    assert len(display) == 3 * 3


def test_peptide_display_three_letter():
    assert build_peptide_display("MF*", one_letter=False) == "MetPhe***"


def test_peptide_display_rejects_invalid_residue():
    with pytest.raises(InvalidAminoAcidError):
        build_peptide_display("M1", one_letter=False)


# ── format_sequence ───────────────────────────────────────────────────────────

def test_format_short_three_letter():
    assert format_sequence("ATGTTTTAG") == ["1 MetPhe***", "1 ATGTTTTAG", ""]


def test_format_short_one_letter():
    assert format_sequence("ATGTTTTAG", one_letter=True) == [
        "1  M  F  * ", "1 ATGTTTTAG", "",
    ]


def test_format_gtg_start():
    lines = format_sequence("GTGTTTTAG")
    assert lines[0] == "1 MetPhe***"


def test_trailing_partial_codon_only_dropped_from_peptide():
    lines = format_sequence("ATGTTTTAGC")
    assert lines == ["01 MetPhe***", "01 ATGTTTTAGC", ""]


def test_multi_line_numbering():
    lines = format_sequence(LONG_CDS)
    assert lines == [
        "001 Met" + "Ala" * 23,
        "001 " + LONG_CDS[:72],
        "",
        "025 " + "Ala" * 24,
        "073 " + LONG_CDS[72:144],
        "",
        "049 Ala***",
        "145 " + LONG_CDS[144:],
        "",
    ]


def test_peptide_pagination_uses_its_own_length():
    sequence = "ATG" + "GCT" * 23 + "G"   # 73 nt, 72 peptide columns
    lines = format_sequence(sequence)
    assert lines == [
        "01 Met" + "Ala" * 23,
        "01 " + sequence[:72],
        "",
        "73 G",
        "",
    ]


@pytest.mark.parametrize("length", [0, 1, 71, 72, 73, 144, 150, 217])
def test_dna_lines_round_trip(length):
    sequence = ("ATGGCTTAA" * 30)[:length]
    lines = format_sequence(sequence)
    dna = _dna_lines(lines)
    assert len(dna) == math.ceil(length / LINE_WIDTH)
    assert "".join(line.split(" ", 1)[1] for line in dna) == sequence


def test_one_letter_columns_align_with_codons():
    result = render_sequence(LONG_CDS, one_letter=True)
    peptide_lines = [line for line in result.lines if line and line not in _dna_lines(result.lines)]
    rendered = "".join(line.split(" ", 1)[1] for line in peptide_lines)
    assert len(rendered) == 3 * len(result.residues)
    assert rendered.replace(" ", "") == result.residues


def test_render_sequence_counts():
    result = render_sequence("ATGTTTTAGC")
    assert result.residues == "MF*"
    assert result.dna_length == 10
    assert result.n_codons == 3


def test_bad_nucleotide_aborts_formatting():
    with pytest.raises(BadNucleotideError):
        format_sequence("ATG" * 30 + "ANG")


def test_permissive_policy_formats_n():
    assert format_sequence("NTGTAA", policy=AmbiguityPolicy.PERMISSIVE) == [
        "1 Met***", "1 NTGTAA", "",
    ]


def test_render_sequence_reuses_supplied_residues():
    # Supplied residues are rendered as-is; the DNA is not re-translated.
    result = render_sequence("NNNNNN", one_letter=True, residues="MF")
    assert result.lines == ["1  M  F ", "1 NNNNNN", ""]
    assert result.residues == "MF"
