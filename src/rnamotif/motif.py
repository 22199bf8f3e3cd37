"""Motif entity: everything built for one seed alignment."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import networkx as nx

from .interactions import build_interactions
from .partition import Component, Helix, partition_structure
from .stockholm import AlignmentRecord

__all__ = [
    "Motif",
    "assemble_motif",
]


@dataclass
class Motif:
    """Partitioned structural motif of one alignment record.

    A default-constructed Motif is the empty value of an output slot whose
    record was skipped or failed.
    """

    header: dict[str, str] = field(default_factory=dict)
    seed_alignment: tuple[str, ...] = ()
    sequence_names: tuple[str, ...] = ()
    interaction_graphs: list[nx.Graph] = field(default_factory=list)
    interaction_pairs: list[list[tuple[int, int]]] = field(default_factory=list)
    consensus_structure: str = ""
    constraint: Optional[str] = None
    partition: list[Component] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.seed_alignment

    def to_dict(self) -> dict[str, Any]:
        return {
            "header": dict(self.header),
            "sequences": [
                {"name": name, "aligned": row, "pairs": [list(p) for p in pairs]}
                for name, row, pairs in zip(
                    self.sequence_names, self.seed_alignment, self.interaction_pairs
                )
            ],
            "consensus_structure": self.consensus_structure,
            "constraint": self.constraint,
            "partition": [_component_to_dict(c) for c in self.partition],
        }


def _helix_to_dict(helix: Helix) -> dict[str, Any]:
    return {
        "start5": helix.start5,
        "start3": helix.start3,
        "length": helix.length,
        "loop": helix.loop_type,
        "children": [_helix_to_dict(c) for c in helix.children],
    }


def _component_to_dict(component: Component) -> dict[str, Any]:
    return {
        "start": component.start,
        "end": component.end,
        "pairs": [list(p) for p in component.pairs],
        "helices": [_helix_to_dict(h) for h in component.helices],
        "pseudoknots": [_helix_to_dict(h) for h in component.pseudoknots],
    }


def assemble_motif(
    record: AlignmentRecord,
    consensus: str,
    constraint: Optional[str] = None,
    canonical_only: bool = True,
) -> Motif:
    """
    Aggregate one record's pieces into a Motif.

    Per-sequence pairs are projected from the constraint when one was
    used, otherwise from the predicted consensus.
    """
    pairing_source = constraint if constraint is not None else consensus

    graphs: list[nx.Graph] = []
    pair_lists: list[list[tuple[int, int]]] = []
    for aligned in record.sequences.values():
        graph, pairs = build_interactions(aligned, pairing_source, canonical_only=canonical_only)
        graphs.append(graph)
        pair_lists.append(pairs)

    return Motif(
        header=dict(record.header),
        seed_alignment=record.alignment,
        sequence_names=record.names,
        interaction_graphs=graphs,
        interaction_pairs=pair_lists,
        consensus_structure=consensus,
        constraint=constraint,
        partition=partition_structure(consensus),
    )
