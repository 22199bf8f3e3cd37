"""
Per-sequence base-pairing graphs.

Column pairs of a structure (the seed constraint, or the predicted
consensus) are projected onto each ungapped sequence. A projected pair is
kept only when both columns hold a residue in that sequence, both residues
are unambiguous nucleotides and, by default, they can form a Watson–Crick
or GU wobble pair.
"""

from __future__ import annotations

from typing import Optional

import networkx as nx

from .notation import parse_pairs
from .stockholm import GAP_CHARS

__all__ = [
    "CANONICAL_BASE_PAIRS",
    "NUCLEOTIDES",
    "aln_to_seq_map",
    "is_canonical_pair",
    "project_pairs",
    "build_interactions",
]

NUCLEOTIDES = set("ACGU")

# Canonical base pairs (including GU wobble)
CANONICAL_BASE_PAIRS = {
    ("A", "U"),
    ("U", "A"),
    ("G", "C"),
    ("C", "G"),
    ("G", "U"),
    ("U", "G"),  # wobble
}


def _residue(ch: str) -> str:
    ch = ch.upper()
    return "U" if ch == "T" else ch


def is_canonical_pair(b1: str, b2: str) -> bool:
    """Return True if (b1, b2) is a canonical Watson–Crick or GU wobble pair."""
    return (_residue(b1), _residue(b2)) in CANONICAL_BASE_PAIRS


def aln_to_seq_map(aligned_seq: str) -> tuple[dict[int, int], int]:
    """
    Build a map alignment_index -> sequence_index (ungapped)
    for one sequence. Returns (aln2seq, L), where:
      - aln2seq[i] = seq_index or -1 if gap
      - L = length of ungapped sequence
    """
    aln2seq: dict[int, int] = {}
    pos = 0
    for i, ch in enumerate(aligned_seq):
        if ch in GAP_CHARS:
            aln2seq[i] = -1
        else:
            aln2seq[i] = pos
            pos += 1
    return aln2seq, pos


def project_pairs(
    aligned_seq: str,
    pairs_aln: list[tuple[int, int]],
    canonical_only: bool = True,
) -> list[tuple[int, int]]:
    """
    Map pairs from alignment columns to sequence positions, dropping any
    that hit a gap or an ambiguous residue (and non-canonical ones when
    `canonical_only` is set).
    """
    aln2seq, _L = aln_to_seq_map(aligned_seq)
    result: list[tuple[int, int]] = []
    for i, j in pairs_aln:
        si = aln2seq.get(i, -1)
        sj = aln2seq.get(j, -1)
        if si < 0 or sj < 0:
            continue
        bi = _residue(aligned_seq[i])
        bj = _residue(aligned_seq[j])
        if bi not in NUCLEOTIDES or bj not in NUCLEOTIDES:
            continue
        if canonical_only and not is_canonical_pair(bi, bj):
            continue
        if si > sj:
            si, sj = sj, si
        result.append((si, sj))
    result.sort()
    return result


def build_interactions(
    aligned_seq: str,
    structure: Optional[str] = None,
    canonical_only: bool = True,
) -> tuple[nx.Graph, list[tuple[int, int]]]:
    """Build the interaction graph and pair list of one aligned sequence.

    Args:
        aligned_seq: Aligned residues (gaps allowed)
        structure: Column structure in bracket notation, same width as
            `aligned_seq`; None gives a graph without edges
        canonical_only: Keep only Watson–Crick and GU pairs

    Returns:
        (graph, pairs): graph nodes are ungapped positions 0..L-1 carrying
        a ``base`` attribute; edges and the sorted pair list hold the
        projected base pairs
    """
    if structure is not None and len(structure) != len(aligned_seq):
        raise ValueError(
            f"Structure length {len(structure)} != aligned sequence length {len(aligned_seq)}"
        )

    graph = nx.Graph()
    residues = [_residue(ch) for ch in aligned_seq if ch not in GAP_CHARS]
    graph.add_nodes_from((pos, {"base": base}) for pos, base in enumerate(residues))

    if structure is None:
        return graph, []

    pairs = project_pairs(aligned_seq, parse_pairs(structure), canonical_only=canonical_only)
    graph.add_edges_from(pairs)
    return graph, pairs
