"""
Consensus structure prediction backends.

Two interchangeable strategies fold a whole alignment into one consensus
structure in bracket notation:

- ViennaFold: ViennaRNA alifold MFE (pseudoknot-free), optionally under a
  hard base-pair constraint.
- IPknotFold: the IPknot executable, which may emit crossing pairs in the
  layered alphabet ('()', '[]', '{}', ...).

The strategy is chosen once per run with :func:`select_strategy`.
Every call is attempted exactly once; backend problems surface as
:class:`BackendFault`, unmet constraints as :class:`InfeasibleConstraintError`.
"""

from __future__ import annotations

import subprocess
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import RNA

from .config import FoldConfig
from .errors import (
    BackendFault,
    InfeasibleConstraintError,
    MalformedAnnotationError,
    MotifError,
)
from .notation import pairs_to_layers, parse_pairs, partner_table
from .stockholm import GAP_CHARS

__all__ = [
    "FoldingStrategy",
    "ViennaFold",
    "IPknotFold",
    "enforce_constraint",
    "normalize_rows",
    "parse_ipknot_output",
    "select_strategy",
]

# IPknot writes up to four layers and never letters
IPKNOT_CHARS = set("()[]{}<>.")


def normalize_rows(rows: Sequence[str]) -> list[str]:
    """Upper-case, read T as U and write every gap glyph as '-'."""
    out = []
    for row in rows:
        chars = []
        for ch in row:
            if ch in GAP_CHARS:
                chars.append("-")
            else:
                ch = ch.upper()
                chars.append("U" if ch == "T" else ch)
        out.append("".join(chars))
    return out


def enforce_constraint(structure: str, constraint: str) -> None:
    """
    Require every paired constraint column to be paired with the same
    partner in `structure`. Unpaired constraint columns are free.
    """
    wanted = partner_table(constraint)
    got = partner_table(structure)

    missing = [i for i, j in enumerate(wanted) if j >= 0 and got[i] != j]
    if missing:
        shown = ", ".join(f"{i}-{wanted[i]}" for i in missing[:5] if i < wanted[i])
        raise InfeasibleConstraintError(
            f"{len(missing)} constrained column(s) not reproduced by the backend"
            + (f" (first pairs: {shown})" if shown else "")
        )


class FoldingStrategy(ABC):
    """Fold an alignment of width W into a consensus structure of width W."""

    name = "abstract"
    pseudoknot_free = True

    def fold(self, rows: Sequence[str], constraint: Optional[str] = None) -> str:
        rows = normalize_rows(rows)
        if not rows:
            raise BackendFault(f"{self.name}: empty alignment")
        width = len(rows[0])
        if any(len(r) != width for r in rows):
            raise BackendFault(f"{self.name}: alignment rows differ in width")
        if constraint is not None and len(constraint) != width:
            raise MalformedAnnotationError(
                f"Constraint length {len(constraint)} != alignment width {width}"
            )

        try:
            structure = self._predict(rows, constraint)
        except MotifError:
            raise
        except Exception as exc:
            raise BackendFault(f"{self.name} failed: {type(exc).__name__}: {exc}") from exc

        if len(structure) != width:
            raise BackendFault(
                f"{self.name} returned a structure of length {len(structure)}, "
                f"expected {width}"
            )
        try:
            pairs = parse_pairs(structure)
        except MalformedAnnotationError as exc:
            raise BackendFault(f"{self.name} returned a malformed structure: {exc}") from exc
        if self.pseudoknot_free and len(pairs_to_layers(pairs)) > 1:
            raise BackendFault(f"{self.name} returned crossing pairs")

        if constraint is not None:
            enforce_constraint(structure, constraint)
        return structure

    @abstractmethod
    def _predict(self, rows: list[str], constraint: Optional[str]) -> str:
        """Run the backend on normalised rows; return its raw structure."""


@dataclass
class ViennaFold(FoldingStrategy):
    temperature: Optional[float] = None

    name = "RNAalifold"

    def _predict(self, rows: list[str], constraint: Optional[str]) -> str:
        try:
            md = RNA.md()
            if self.temperature is not None:
                md.temperature = self.temperature
            fc = RNA.fold_compound(rows, md)
            if constraint is not None:
                fc.hc_add_from_db(
                    constraint,
                    RNA.CONSTRAINT_DB_DEFAULT | RNA.CONSTRAINT_DB_ENFORCE_BP,
                )
            structure, _energy = fc.mfe()
        except Exception as exc:
            raise BackendFault(f"ViennaRNA alifold failed: {exc}") from exc
        return structure


def _write_aligned_fasta(rows: Sequence[str], path: Path) -> None:
    with path.open("w") as fh:
        for k, row in enumerate(rows):
            fh.write(f">seq{k}\n")
            fh.write(row + "\n")


def parse_ipknot_output(text: str, width: int) -> str:
    """
    Return the structure line of IPknot's output: the last line made only
    of IPknot's bracket glyphs and dots whose length equals the alignment
    width. Residue lines never qualify.
    """
    for line in reversed(text.splitlines()):
        line = line.strip()
        if len(line) == width and set(line) <= IPKNOT_CHARS:
            return line
    raise BackendFault(f"No structure of width {width} in IPknot output")


@dataclass
class IPknotFold(FoldingStrategy):
    exe: str = "ipknot"
    extra_args: Sequence[str] = ()
    timeout: Optional[float] = None

    name = "IPknot"
    pseudoknot_free = False

    def _predict(self, rows: list[str], constraint: Optional[str]) -> str:
        with tempfile.TemporaryDirectory() as tmpdir:
            fasta_path = Path(tmpdir) / "alignment.fa"
            _write_aligned_fasta(rows, fasta_path)

            cmd = [str(self.exe), *self.extra_args, str(fasta_path)]
            try:
                out = subprocess.run(
                    cmd,
                    check=True,
                    text=True,
                    capture_output=True,
                    timeout=self.timeout,
                )
            except FileNotFoundError as exc:
                raise BackendFault(f"IPknot executable not found: {self.exe}") from exc
            except subprocess.TimeoutExpired as exc:
                raise BackendFault(f"IPknot exceeded {self.timeout} seconds") from exc
            except subprocess.CalledProcessError as exc:
                raise BackendFault(
                    f"IPknot exited with status {exc.returncode}: {(exc.stderr or '').strip()}"
                ) from exc
            except OSError as exc:
                raise BackendFault(f"Could not run IPknot ({self.exe}): {exc}") from exc

        return parse_ipknot_output(out.stdout, len(rows[0]))


def select_strategy(cfg: FoldConfig) -> FoldingStrategy:
    if cfg.pseudoknot:
        return IPknotFold(
            exe=cfg.ipknot_exe,
            extra_args=tuple(cfg.ipknot_args),
            timeout=cfg.timeout,
        )
    return ViennaFold(temperature=cfg.temperature)
