"""Shared fixtures: small GenBank records built with Biopython."""

from pathlib import Path

import pytest
from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqFeature import SeqFeature, SimpleLocation
from Bio.SeqRecord import SeqRecord

# 0..9   ATG TTT TAG      -> M F *
# 9..18  GTG GTG TAA      -> M V *   (start override on the first GTG only)
# 18..27 reverse strand of ATG AAA TGA -> M K *
# 27..37 filler
TEST_SEQUENCE = "ATGTTTTAG" + "GTGGTGTAA" + "TCATTTCAT" + "ACGTACGTAC"


def _cds(start, end, strand, protein_id, product):
    qualifiers = {}
    if protein_id is not None:
        qualifiers["protein_id"] = [protein_id]
    if product is not None:
        qualifiers["product"] = [product]
    return SeqFeature(
        SimpleLocation(start, end, strand=strand), type="CDS", qualifiers=qualifiers
    )


def make_record(sequence=TEST_SEQUENCE, features=None, name="TESTREC"):
    record = SeqRecord(Seq(sequence), id=f"{name}.1", name=name, description="test record")
    record.annotations["molecule_type"] = "DNA"
    if features is None:
        features = [
            SeqFeature(SimpleLocation(0, len(sequence), strand=1), type="source"),
            SeqFeature(SimpleLocation(0, 9, strand=1), type="gene",
                       qualifiers={"gene": ["pepA"]}),
            _cds(0, 9, 1, "WP_000001.1", "test peptide"),
            _cds(9, 18, 1, "WP_000002.1", "alternative start peptide"),
            _cds(18, 27, -1, "WP_000003.1", "reverse strand peptide"),
        ]
    record.features = features
    return record


@pytest.fixture
def genbank_record():
    return make_record()


@pytest.fixture
def write_genbank(tmp_path):
    """Return a function writing records to a GenBank file under tmp_path."""

    def _write(*records, filename="test.gb"):
        path = Path(tmp_path) / filename
        SeqIO.write(list(records), str(path), "genbank")
        return path

    return _write


@pytest.fixture
def genbank_file(write_genbank, genbank_record):
    return write_genbank(genbank_record)


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def cds_factory():
    return _cds
