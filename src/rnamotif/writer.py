"""JSON motif file writer."""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

from .motif import Motif

__all__ = ["write_motifs"]


def write_motifs(path: Path, motifs: Sequence[Motif]) -> Path:
    """
    Write motifs in input order. Empty slots (skipped or failed records)
    are written as null so indices line up with the input alignments.
    """
    path = Path(path)
    doc = {
        "format": "rnamotif",
        "version": 1,
        "motifs": [None if m.is_empty else m.to_dict() for m in motifs],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(doc, indent=2) + "\n")
    return path
