"""
Decomposition of a consensus structure into independent motif components.

A component is a maximal column range held together by base pairs: the
structure is cut at every unpaired run that no pair spans, so pairs whose
intervals overlap (nested or crossing) end up in the same component.

Inside a component the nested pairs are grouped into helices (runs of
stacked pairs) and arranged as a tree: the children of a helix are the
helices that sit directly inside its closing loop. Pairs that cross the
nested layer are kept as separate pseudoknot helices.

Example:
    "((..))...(((...)))"  ->  [Component(0, 5), Component(9, 17)]
"""

from __future__ import annotations

from dataclasses import dataclass

from .notation import pairs_to_layers, parse_pairs

__all__ = [
    "Helix",
    "Component",
    "find_helices",
    "nest_helices",
    "merge_spans",
    "partition_structure",
]


@dataclass(frozen=True)
class Helix:
    """A contiguous stem of stacked base pairs.

    Example: Helix(start5=2, start3=15, length=4) represents:
        pairs: [(2,15), (3,14), (4,13), (5,12)]

    Attributes:
        start5: 5' strand start position
        start3: 3' strand start position (paired with start5)
        length: Number of stacked pairs
        children: Helices directly enclosed by the innermost pair
    """

    start5: int
    start3: int
    length: int
    children: tuple["Helix", ...] = ()

    def __post_init__(self) -> None:
        if self.length < 1:
            raise ValueError("Helix length must be >= 1")
        if self.start5 >= self.start3:
            raise ValueError("start5 must be less than start3")

    @property
    def end5(self) -> int:
        return self.start5 + self.length - 1

    @property
    def end3(self) -> int:
        return self.start3 - self.length + 1

    @property
    def loop_span(self) -> tuple[int, int]:
        """Columns strictly inside the innermost pair (may be empty)."""
        return self.end5 + 1, self.end3 - 1

    @property
    def loop_type(self) -> str:
        if not self.children:
            return "hairpin"
        if len(self.children) == 1:
            return "internal"
        return "multi"

    def pairs(self) -> list[tuple[int, int]]:
        return [(self.start5 + k, self.start3 - k) for k in range(self.length)]

    def walk(self):
        """Yield this helix and all nested helices, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(frozen=True)
class Component:
    """One independently indexable substructure.

    Attributes:
        start: First column of the span (a paired column)
        end: Last column of the span, inclusive
        pairs: All base pairs inside the span, sorted
        helices: Roots of the nested helix tree
        pseudoknots: Helices of pairs crossing the nested layer
    """

    start: int
    end: int
    pairs: tuple[tuple[int, int], ...]
    helices: tuple[Helix, ...] = ()
    pseudoknots: tuple[Helix, ...] = ()

    @property
    def width(self) -> int:
        return self.end - self.start + 1

    def columns(self) -> range:
        return range(self.start, self.end + 1)


def find_helices(pairs) -> list[Helix]:
    """Group non-crossing pairs into maximal runs of stacked pairs."""
    sorted_pairs = sorted(pairs)
    helices: list[Helix] = []
    if not sorted_pairs:
        return helices

    first = sorted_pairs[0]
    length = 1
    for prev, curr in zip(sorted_pairs, sorted_pairs[1:]):
        # (i, j) stacks on (i-1, j+1)
        if curr[0] == prev[0] + 1 and curr[1] == prev[1] - 1:
            length += 1
        else:
            helices.append(Helix(first[0], first[1], length))
            first = curr
            length = 1
    helices.append(Helix(first[0], first[1], length))
    return helices


def _encloses(outer: Helix, inner: Helix) -> bool:
    return outer.end5 < inner.start5 and inner.start3 < outer.end3


def nest_helices(helices) -> list[Helix]:
    """Arrange helices of one nested layer into a forest by enclosure."""
    ordered = sorted(helices, key=lambda h: h.start5)
    children: dict[int, list[int]] = {k: [] for k in range(len(ordered))}
    roots: list[int] = []
    stack: list[int] = []

    for k, helix in enumerate(ordered):
        while stack and not _encloses(ordered[stack[-1]], helix):
            stack.pop()
        (children[stack[-1]] if stack else roots).append(k)
        stack.append(k)

    def build(k: int) -> Helix:
        h = ordered[k]
        return Helix(h.start5, h.start3, h.length, tuple(build(c) for c in children[k]))

    return [build(k) for k in roots]


def merge_spans(pairs) -> list[tuple[int, int, list[tuple[int, int]]]]:
    """Merge overlapping pair intervals.

    Returns:
        List of (start, end, pairs) in increasing start order
    """
    spans: list[tuple[int, int, list[tuple[int, int]]]] = []
    for i, j in sorted(pairs):
        if spans and i <= spans[-1][1]:
            start, end, members = spans[-1]
            members.append((i, j))
            spans[-1] = (start, max(end, j), members)
        else:
            spans.append((i, j, [(i, j)]))
    return spans


def partition_structure(structure: str) -> list[Component]:
    """Split a bracket structure into disjoint components.

    Args:
        structure: Consensus structure (layered bracket notation)

    Returns:
        Components ordered by start column; empty if nothing pairs

    Raises:
        MalformedAnnotationError: the structure is not balanced
    """
    components: list[Component] = []
    for start, end, members in merge_spans(parse_pairs(structure)):
        layers = pairs_to_layers(members)
        nested = nest_helices(find_helices(layers[0]))
        knots = [h for layer in layers[1:] for h in find_helices(layer)]
        components.append(
            Component(
                start=start,
                end=end,
                pairs=tuple(sorted(members)),
                helices=tuple(nested),
                pseudoknots=tuple(sorted(knots, key=lambda h: h.start5)),
            )
        )
    return components
