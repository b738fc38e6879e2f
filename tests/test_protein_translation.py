"""Tests for codon translation and ProteinRecord construction."""

import json

import pytest
from Bio import SeqIO

from codon_tables import (
    GENETIC_CODE,
    AmbiguityPolicy,
    BadNucleotideError,
    index_to_codon,
    is_start_codon,
)
from protein_translation import (
    translate_codon,
    translate_gene,
    translate_sequence,
    write_protein_fasta,
    write_translation_report,
)


# ── translate_codon ───────────────────────────────────────────────────────────

def test_translate_is_deterministic_over_all_codons():
    for index in range(64):
        codon = index_to_codon(index)
        for position in (0, 3):
            first = translate_codon(codon, position)
            assert translate_codon(codon, position) == first


def test_start_override_only_at_frame_start():
    for index in range(64):
        codon = index_to_codon(index)
        if is_start_codon(index):
            assert translate_codon(codon, 0) == "M"
        else:
            assert translate_codon(codon, 0) == GENETIC_CODE[index]
        assert translate_codon(codon, 3) == GENETIC_CODE[index]


def test_gtg_start_vs_mid_sequence():
    assert translate_codon("GTG", 0) == "M"
    assert translate_codon("GTG", 1) == "V"


def test_stop_codons_are_not_overridden():
    assert translate_codon("TAG", 0) == "*"
    assert translate_codon("TGA", 0) == "*"


@pytest.mark.parametrize("codon", ["ATN", "NTG", "AUG", "atg", "A-G"])
def test_invalid_codon_raises(codon):
    with pytest.raises(BadNucleotideError):
        translate_codon(codon, 3)


def test_permissive_policy_translates_n():
    assert translate_codon("NTG", 0, AmbiguityPolicy.PERMISSIVE) == "M"
    assert translate_codon("TTN", 3, AmbiguityPolicy.PERMISSIVE) == "L"


# ── translate_sequence ────────────────────────────────────────────────────────

def test_translate_sequence_atg():
    assert translate_sequence("ATGTTTTAG") == "MF*"


def test_translate_sequence_gtg_start():
    assert translate_sequence("GTGTTTTAG") == "MF*"
    assert translate_sequence("GTGTTTTAG"[3:]) == "F*"
    assert translate_sequence("TTTGTGTAG") == "FV*"


def test_translate_sequence_drops_partial_codon():
    assert translate_sequence("ATGTTTTAGC") == "MF*"
    assert translate_sequence("AT") == ""
    assert translate_sequence("") == ""


def test_translate_sequence_aborts_on_bad_codon():
    with pytest.raises(BadNucleotideError) as excinfo:
        translate_sequence("ATGTTTNNNTAG")
    assert excinfo.value.codon == "NNN"


def test_partial_codon_is_not_validated():
    assert translate_sequence("ATGTAAXX") == "M*"


# ── translate_gene ────────────────────────────────────────────────────────────

def test_translate_gene_complete():
    record = translate_gene("WP_1.1", "test peptide", "ATGTTTTAG")
    assert record.sequence == "MF*"
    assert record.length == 3
    assert record.dna_length == 9
    assert record.is_complete
    assert not record.has_internal_stop
    assert record.clean_sequence == "MF"
    assert [s.codon for s in record.stop_codons] == ["TAG"]
    assert record.stop_codons[0].is_terminal
    assert record.warnings == []


def test_translate_gene_warnings():
    record = translate_gene("WP_2.1", "odd", "TTTTAATTTC")
    assert record.sequence == "F*F"
    assert not record.is_complete
    assert record.has_internal_stop
    assert len(record.warnings) == 4


def test_translate_gene_serialisation():
    record = translate_gene("WP_1.1", "test peptide", "ATGTTTTAG")
    data = json.loads(record.to_json())
    assert data["sequence"] == "MF*"
    assert data["codon_table_id"] == 11
    assert data["ambiguity_policy"] == "strict"
    assert data["stop_codons"][0]["codon"] == "TAG"


def test_seqrecord_strips_stop_on_request():
    record = translate_gene("WP_1.1", "test peptide", "ATGTTTTAG")
    assert str(record.to_seqrecord().seq) == "MF*"
    assert str(record.to_seqrecord(strip_stop=True).seq) == "MF"
    assert record.to_seqrecord().description == "test peptide"


# ── Writers ───────────────────────────────────────────────────────────────────

def test_write_protein_fasta(tmp_path):
    record = translate_gene("WP_1.1", "test peptide", "ATGTTTTAG")
    path = write_protein_fasta(record, tmp_path / "out" / "p.fasta")
    parsed = list(SeqIO.parse(str(path), "fasta"))
    assert len(parsed) == 1
    assert parsed[0].id == "WP_1.1"
    assert str(parsed[0].seq) == "MF*"


def test_writers_refuse_to_overwrite(tmp_path):
    record = translate_gene("WP_1.1", "test peptide", "ATGTTTTAG")
    path = write_translation_report(record, tmp_path / "r.json")
    with pytest.raises(FileExistsError):
        write_translation_report(record, path)
    write_translation_report(record, path, overwrite=True)
    assert json.loads(path.read_text())["sequence_id"] == "WP_1.1"
