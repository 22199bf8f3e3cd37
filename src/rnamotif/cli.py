"""
Command line entry point: seed alignment in, motif file out.

    rnamotif [OPTIONS] <SEED ALIGNMENT> <MOTIF OUTPUT>

Per-record failures are reported on stderr but do not change the exit
status; only bad arguments (2) and unreadable input or config files (1) do.
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .config import MotifConfig, load_config
from .driver import run_records
from .folding import select_strategy
from .stockholm import read_stockholm
from .writer import write_motifs


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rnamotif",
        description="Generate a searchable RNA motif from a seed alignment.",
    )
    parser.add_argument("input", metavar="SEED_ALIGNMENT", help="Stockholm seed alignment.")
    parser.add_argument("output", metavar="MOTIF_OUTPUT", help="Motif file to write.")
    parser.add_argument(
        "-ps",
        "--pseudoknot",
        action="store_true",
        default=None,
        help="Predict structure with IPknot to include pseudoknots.",
    )
    parser.add_argument(
        "-co",
        "--constrain",
        action="store_true",
        default=None,
        help="Constrain individual structures with the seed consensus structure.",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-q", "--quiet", dest="verbosity", action="store_const", const=0,
        help="Set verbosity to a minimum.",
    )
    verbosity.add_argument(
        "-v", "--verbose", dest="verbosity", action="store_const", const=2,
        help="Enable verbose output.",
    )
    verbosity.add_argument(
        "-vv", "--very-verbose", dest="verbosity", action="store_const", const=3,
        help="Enable very verbose output.",
    )

    parser.add_argument(
        "-c",
        "--config",
        help="Optional YAML or JSON config file; command line flags take precedence.",
    )
    parser.add_argument(
        "-j",
        "--workers",
        type=int,
        default=None,
        help="Number of worker processes (default: one per CPU).",
    )
    parser.add_argument(
        "--max-length",
        type=int,
        default=None,
        help="Skip alignments whose first sequence is longer than this (default: 1000).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def resolve_config(args: argparse.Namespace) -> MotifConfig:
    cfg = load_config(Path(args.config)) if args.config else MotifConfig()

    if args.pseudoknot is not None:
        cfg.fold.pseudoknot = args.pseudoknot
    if args.constrain is not None:
        cfg.constrain = args.constrain
    if args.verbosity is not None:
        cfg.verbosity = args.verbosity
    if args.workers is not None:
        cfg.workers = args.workers
    if args.max_length is not None:
        cfg.max_length = args.max_length
    return cfg


def _print_options(cfg: MotifConfig, args: argparse.Namespace) -> None:
    print("__OPTIONS____________________________________________________________________")
    print()
    print(f"VERBOSITY\t{cfg.verbosity}")
    print(f"CONSTRAINT\t{int(cfg.constrain)}")
    print(f"PSEUDOKNOTS\t{int(cfg.fold.pseudoknot)}")
    print(f"RNA      \t{args.input}")
    print(f"OUTPUT   \t{args.output}")
    print()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        cfg = resolve_config(args)
    except (OSError, ValueError) as e:
        sys.stderr.write(f"[ERROR] Could not load config {args.config}: {e}\n")
        return 1

    print("RNA motif generator")
    print("===============")
    print()
    if cfg.verbosity > 0:
        _print_options(cfg, args)

    start = time.time()
    try:
        records = read_stockholm(Path(args.input))
    except (OSError, ValueError) as e:
        sys.stderr.write(f"[ERROR] Could not read seed alignment {args.input}: {e}\n")
        return 1

    if cfg.verbosity > 0:
        print(f"{len(records)} records read")
        print(f"Time: {int((time.time() - start) * 1000)}ms")

    strategy = select_strategy(cfg.fold)
    motifs, _summary = run_records(records, strategy, cfg)

    try:
        out_path = write_motifs(Path(args.output), motifs)
    except OSError as e:
        sys.stderr.write(f"[ERROR] Could not write motif file {args.output}: {e}\n")
        return 1
    if cfg.verbosity > 1:
        sys.stderr.write(f"[MOTIF] Wrote {len(motifs)} motif slot(s) to {out_path}\n")

    return 0


if __name__ == "__main__":
    sys.exit(main())
