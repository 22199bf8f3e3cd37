"""
Stockholm seed alignment reader.

Produces one immutable :class:`AlignmentRecord` per ``//``-terminated
alignment block. Only the markup the motif pipeline consumes is kept:

- ``#=GF KEY value``  -> record header (AC, ID, DE, ...)
- ``#=GC TAG track``  -> per-column annotation (SS_cons, RF, ...)
- ``name  sequence``  -> aligned sequences

All other ``#`` lines (``#=GS``, ``#=GR``, comments) are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .errors import MissingAnnotationKey

__all__ = [
    "GAP_CHARS",
    "AlignmentRecord",
    "ungap",
    "read_stockholm",
    "parse_stockholm",
]

# Alignment gaps
GAP_CHARS = set("-._~")


def ungap(aligned_seq: str) -> str:
    return "".join(ch for ch in aligned_seq if ch not in GAP_CHARS)


@dataclass(frozen=True)
class AlignmentRecord:
    """One seed alignment with its Stockholm markup.

    Attributes:
        header: ``#=GF`` key -> value
        sequences: sequence name -> aligned residues, in file order
        column_annotation: ``#=GC`` tag -> per-column track
    """

    header: dict[str, str] = field(default_factory=dict)
    sequences: dict[str, str] = field(default_factory=dict)
    column_annotation: dict[str, str] = field(default_factory=dict)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self.sequences)

    @property
    def alignment(self) -> tuple[str, ...]:
        """Aligned rows in sequence order (the alignment matrix)."""
        return tuple(self.sequences.values())

    @property
    def width(self) -> int:
        for row in self.sequences.values():
            return len(row)
        return 0

    def representative_length(self) -> int:
        """Ungapped length of the first sequence in the alignment."""
        for row in self.sequences.values():
            return len(ungap(row))
        return 0

    def header_value(self, key: str) -> str:
        try:
            return self.header[key]
        except KeyError:
            raise MissingAnnotationKey(f"Header key #=GF {key} not present") from None

    def column_value(self, key: str) -> str:
        try:
            return self.column_annotation[key]
        except KeyError:
            raise MissingAnnotationKey(f"Column annotation #=GC {key} not present") from None


def _build_record(
    header: dict[str, str],
    sequences: dict[str, list[str]],
    tracks: dict[str, list[str]],
    where: str,
) -> AlignmentRecord:
    seqs_joined = {name: "".join(chunks) for name, chunks in sequences.items()}
    tracks_joined = {tag: "".join(chunks) for tag, chunks in tracks.items()}

    if not seqs_joined:
        raise ValueError(f"Alignment without sequences in {where}")

    lengths = {len(v) for v in seqs_joined.values()}
    lengths.update(len(v) for v in tracks_joined.values())
    if len(lengths) != 1:
        raise ValueError(f"Alignment length mismatch in {where}: lengths={sorted(lengths)}")

    return AlignmentRecord(
        header=dict(header),
        sequences=seqs_joined,
        column_annotation=tracks_joined,
    )


def parse_stockholm(lines, where: str = "<stockholm>") -> list[AlignmentRecord]:
    """Parse every alignment in an iterable of Stockholm lines.

    Raises:
        ValueError: rows or column tracks of one alignment differ in width,
            or an alignment has no sequences
    """
    records: list[AlignmentRecord] = []

    header: dict[str, str] = {}
    sequences: dict[str, list[str]] = {}
    tracks: dict[str, list[str]] = {}
    seen_content = False

    for raw in lines:
        line = raw.rstrip("\n").rstrip("\r")

        if not line.strip():
            continue
        if line.startswith("# STOCKHOLM"):
            continue
        if line.startswith("//"):
            if seen_content:
                records.append(
                    _build_record(header, sequences, tracks, f"{where} record {len(records) + 1}")
                )
            header, sequences, tracks = {}, {}, {}
            seen_content = False
            continue

        seen_content = True

        if line.startswith("#=GF "):
            parts = line.split(maxsplit=2)
            if len(parts) < 2:
                continue
            key = parts[1]
            value = parts[2].strip() if len(parts) > 2 else ""
            header[key] = f"{header[key]} {value}" if key in header else value
            continue

        # Per-column markup (WUSS etc.)
        if line.startswith("#=GC "):
            parts = line.split(maxsplit=2)
            if len(parts) < 3:
                continue
            tag, s = parts[1], parts[2].strip()
            tracks.setdefault(tag, []).append(s)
            continue

        # Ignore other comment lines
        if line.startswith("#"):
            continue

        # Sequence line: "name  aligned-sequence"
        parts = line.split(maxsplit=1)
        if len(parts) < 2:
            continue
        name, s = parts[0], parts[1].strip()
        sequences.setdefault(name, []).append(s)

    # Tolerate a missing final terminator
    if seen_content and sequences:
        records.append(_build_record(header, sequences, tracks, f"{where} record {len(records) + 1}"))

    return records


def read_stockholm(path: str | Path) -> list[AlignmentRecord]:
    """Read all alignment records from a Stockholm file."""
    path = Path(path)
    with path.open() as fh:
        return parse_stockholm(fh, where=str(path))
