"""Tests for motif assembly and the JSON motif writer."""

import json
from pathlib import Path

from conftest import make_record
from rnamotif.motif import Motif, assemble_motif
from rnamotif.writer import write_motifs

GAPPED = {"r2a": "GGAC-UUCGUCC", "r2b": "GGACAUUCG-CC"}


def test_default_motif_is_empty() -> None:
    motif = Motif()
    assert motif.is_empty
    assert motif.partition == []
    assert motif.interaction_graphs == []


def test_assemble_from_consensus() -> None:
    record = make_record(GAPPED, accession="RF99902", ident="gapped-stem")
    motif = assemble_motif(record, "((((....))))")

    assert not motif.is_empty
    assert motif.header == {"AC": "RF99902", "ID": "gapped-stem"}
    assert motif.sequence_names == ("r2a", "r2b")
    assert motif.seed_alignment == ("GGAC-UUCGUCC", "GGACAUUCG-CC")
    assert motif.interaction_pairs == [
        [(0, 10), (1, 9), (2, 8), (3, 7)],
        [(0, 10), (1, 9), (3, 8)],
    ]
    assert [g.number_of_nodes() for g in motif.interaction_graphs] == [11, 11]
    assert [(c.start, c.end) for c in motif.partition] == [(0, 11)]
    assert motif.constraint is None


def test_constraint_is_pairing_source() -> None:
    """Sequence pairs follow the constraint; the partition follows the consensus."""
    record = make_record({"s1": "GGGAAACCC"})
    motif = assemble_motif(record, ".........", constraint="(((...)))")

    assert motif.interaction_pairs == [[(0, 8), (1, 7), (2, 6)]]
    assert motif.partition == []
    assert motif.constraint == "(((...)))"


def test_to_dict_layout() -> None:
    record = make_record({"s1": "GGGAAACCC"})
    doc = assemble_motif(record, "(((...)))").to_dict()

    assert doc["consensus_structure"] == "(((...)))"
    assert doc["sequences"] == [
        {"name": "s1", "aligned": "GGGAAACCC", "pairs": [[0, 8], [1, 7], [2, 6]]}
    ]
    (comp,) = doc["partition"]
    assert (comp["start"], comp["end"]) == (0, 8)
    assert comp["helices"][0]["loop"] == "hairpin"


def test_write_motifs_keeps_empty_slots(tmp_path: Path) -> None:
    record = make_record({"s1": "GGGAAACCC"})
    motifs = [Motif(), assemble_motif(record, "(((...)))")]

    out = write_motifs(tmp_path / "nested" / "motifs.json", motifs)

    doc = json.loads(out.read_text())
    assert doc["format"] == "rnamotif"
    assert doc["motifs"][0] is None
    assert doc["motifs"][1]["header"]["AC"] == "RF00000"
