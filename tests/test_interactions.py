"""Tests for per-sequence interaction graphs."""

import pytest

from rnamotif.interactions import (
    aln_to_seq_map,
    build_interactions,
    is_canonical_pair,
    project_pairs,
)


def test_is_canonical_pair() -> None:
    assert is_canonical_pair("G", "C")
    assert is_canonical_pair("g", "u")
    assert is_canonical_pair("T", "A")
    assert not is_canonical_pair("A", "A")
    assert not is_canonical_pair("G", "A")


def test_aln_to_seq_map() -> None:
    aln2seq, length = aln_to_seq_map("A-C.G")
    assert length == 3
    assert aln2seq == {0: 0, 1: -1, 2: 1, 3: -1, 4: 2}


class TestProjectPairs:
    def test_gap_in_unpaired_column_shifts_positions(self) -> None:
        assert project_pairs("GGGA-AACCC", [(0, 9), (1, 8), (2, 7)]) == [(0, 8), (1, 7), (2, 6)]

    def test_pair_hitting_gap_dropped(self) -> None:
        pairs = [(0, 11), (1, 10), (2, 9), (3, 8)]
        assert project_pairs("GGAC-UUCGUCC", pairs) == [(0, 10), (1, 9), (2, 8), (3, 7)]
        assert project_pairs("GGACAUUCG-CC", pairs) == [(0, 10), (1, 9), (3, 8)]

    def test_ambiguous_residue_dropped(self) -> None:
        assert project_pairs("GGNAAACCC", [(0, 8), (1, 7), (2, 6)]) == [(0, 8), (1, 7)]

    def test_non_canonical_filter(self) -> None:
        pairs = [(0, 8), (1, 7), (2, 6)]
        assert project_pairs("GGAAAAACA", pairs) == [(1, 7)]
        assert project_pairs("GGAAAAACA", pairs, canonical_only=False) == pairs


class TestBuildInteractions:
    def test_nodes_are_ungapped_residues(self) -> None:
        graph, pairs = build_interactions("gg-t")
        assert pairs == []
        assert graph.number_of_nodes() == 3
        assert graph.number_of_edges() == 0
        assert [graph.nodes[k]["base"] for k in range(3)] == ["G", "G", "U"]

    def test_edges_match_pairs(self) -> None:
        graph, pairs = build_interactions("GGGAAACCC", "(((...)))")
        assert pairs == [(0, 8), (1, 7), (2, 6)]
        assert sorted(tuple(sorted(e)) for e in graph.edges) == pairs
        assert graph.number_of_nodes() == 9

    def test_every_edge_is_canonical(self) -> None:
        graph, _pairs = build_interactions("GGAAAAACA", "(((...)))")
        for i, j in graph.edges:
            assert is_canonical_pair(graph.nodes[i]["base"], graph.nodes[j]["base"])

    def test_pseudoknotted_structure(self) -> None:
        _graph, pairs = build_interactions("GAGAACCUCU", "(.[..)..].")
        assert pairs == [(0, 5), (2, 8)]

    def test_length_mismatch_raises(self) -> None:
        with pytest.raises(ValueError):
            build_interactions("GGGAAACCC", "((...))")
