# tests/conftest.py
"""Shared test fixtures for motif construction tests."""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pytest

# Repo root = parent of this file's directory
ROOT = Path(__file__).resolve().parents[1]

# Ensure src/ is on sys.path so `import rnamotif` works without installing
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from rnamotif.config import MotifConfig  # noqa: E402
from rnamotif.folding import FoldingStrategy  # noqa: E402
from rnamotif.stockholm import AlignmentRecord  # noqa: E402


@dataclass
class StaticFold(FoldingStrategy):
    """Backend stand-in: echoes the constraint, else a fixed structure.

    With neither a constraint nor a fixed structure every column is
    left unpaired.
    """

    structure: Optional[str] = None

    name = "static"
    pseudoknot_free = False

    def _predict(self, rows, constraint):
        if constraint is not None:
            return constraint
        if self.structure is not None:
            return self.structure
        return "." * len(rows[0])


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to test fixtures directory."""
    return ROOT / "tests" / "fixtures"


@pytest.fixture
def seeds_sto_path(fixtures_dir: Path) -> Path:
    """Three-record Stockholm file (hairpin, gapped stem, no accession)."""
    return fixtures_dir / "seeds.sto"


@pytest.fixture
def quiet_config() -> MotifConfig:
    return MotifConfig(verbosity=0, workers=1)


def make_record(
    sequences: dict[str, str],
    ss_cons: Optional[str] = None,
    accession: Optional[str] = "RF00000",
    ident: Optional[str] = "test",
) -> AlignmentRecord:
    header = {}
    if accession is not None:
        header["AC"] = accession
    if ident is not None:
        header["ID"] = ident
    tracks = {"SS_cons": ss_cons} if ss_cons is not None else {}
    return AlignmentRecord(header=header, sequences=dict(sequences), column_annotation=tracks)
