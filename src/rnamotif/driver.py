"""
Run motif construction over every record of a seed alignment file.

Each record moves through

    PENDING -> PROCESSING -> COMPLETED | SKIPPED | FAILED

independently of all others. The output list is sized to the input up
front and every task owns exactly one index of it, so records can be
processed in a process pool in any order and still produce the same
result as a sequential run.
"""

from __future__ import annotations

import multiprocessing as mp
import os
import signal
import sys
from collections.abc import Sequence
from concurrent.futures import ProcessPoolExecutor, as_completed
from concurrent.futures.process import BrokenProcessPool
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .config import MotifConfig
from .errors import MissingAnnotationKey, MotifError, SkippedTooLong
from .folding import FoldingStrategy
from .motif import Motif, assemble_motif
from .notation import wuss_to_bracket
from .stockholm import AlignmentRecord

__all__ = [
    "RecordStatus",
    "RecordOutcome",
    "RunSummary",
    "process_record",
    "run_records",
]


class RecordStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class RecordOutcome:
    index: int
    status: RecordStatus
    label: str
    motif: Optional[Motif] = None
    reason: str = ""
    error_kind: str = ""


@dataclass
class RunSummary:
    outcomes: list[RecordOutcome] = field(default_factory=list)

    def count(self, status: RecordStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def completed(self) -> int:
        return self.count(RecordStatus.COMPLETED)

    @property
    def skipped(self) -> int:
        return self.count(RecordStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(RecordStatus.FAILED)

    def format(self) -> str:
        return (
            f"{len(self.outcomes)} record(s): {self.completed} completed, "
            f"{self.skipped} skipped, {self.failed} failed"
        )


def _log(cfg: MotifConfig, level: int, text: str) -> None:
    if cfg.verbosity >= level:
        sys.stderr.write(text)


def process_record(
    index: int,
    record: AlignmentRecord,
    strategy: FoldingStrategy,
    cfg: MotifConfig,
) -> RecordOutcome:
    """Build the motif of one record; per-record errors become outcomes."""
    label = f"record {index}"
    try:
        label = " : ".join(record.header_value(key) for key in cfg.header_keys)
        _log(cfg, 1, f"[MOTIF] {label}\n")

        length = record.representative_length()
        if length > cfg.max_length:
            raise SkippedTooLong(
                f"Alignment has length {length} > {cfg.max_length} .. skipping."
            )

        constraint = None
        if cfg.constrain:
            ss_cons = record.column_value(cfg.structure_key)
            _log(cfg, 3, f"[MOTIF] {label} {cfg.structure_key}: {ss_cons}\n")
            constraint = wuss_to_bracket(ss_cons, pseudoknots=cfg.fold.pseudoknot)

        consensus = strategy.fold(record.alignment, constraint)
        _log(cfg, 3, f"[MOTIF] {label} {strategy.name}: {consensus}\n")

        motif = assemble_motif(
            record,
            consensus,
            constraint=constraint,
            canonical_only=cfg.canonical_only,
        )
    except SkippedTooLong as exc:
        return RecordOutcome(
            index, RecordStatus.SKIPPED, label, reason=str(exc), error_kind=type(exc).__name__
        )
    except MotifError as exc:
        return RecordOutcome(
            index, RecordStatus.FAILED, label, reason=str(exc), error_kind=type(exc).__name__
        )

    return RecordOutcome(index, RecordStatus.COMPLETED, label, motif=motif)


def _record_label(index: int, record: AlignmentRecord, cfg: MotifConfig) -> str:
    try:
        return " : ".join(record.header_value(key) for key in cfg.header_keys)
    except MissingAnnotationKey:
        return f"record {index}"


def _failed_outcome(
    index: int, record: AlignmentRecord, cfg: MotifConfig, reason: str
) -> RecordOutcome:
    return RecordOutcome(
        index,
        RecordStatus.FAILED,
        _record_label(index, record, cfg),
        reason=reason,
        error_kind="BackendFault",
    )


def _run_sequential(
    records: Sequence[AlignmentRecord],
    strategy: FoldingStrategy,
    cfg: MotifConfig,
) -> list[RecordOutcome]:
    results = []
    for k, record in enumerate(records):
        results.append(process_record(k, record, strategy, cfg))
    return results


# Per-record progress, shared with pool workers
_NOT_STARTED, _STARTED, _DONE, _INTERRUPTED = 0, 1, 2, 3

_worker_state = None
_worker_current = -1


def _init_worker(state) -> None:
    global _worker_state
    _worker_state = state
    signal.signal(signal.SIGTERM, _on_terminate)


def _on_terminate(signum, frame) -> None:
    # The pool is shutting down because a sibling worker died
    if _worker_current >= 0:
        _worker_state[_worker_current] = _INTERRUPTED
    os._exit(128 + signum)


def _pool_task(
    index: int,
    record: AlignmentRecord,
    strategy: FoldingStrategy,
    cfg: MotifConfig,
) -> RecordOutcome:
    global _worker_current
    _worker_current = index
    _worker_state[index] = _STARTED
    outcome = process_record(index, record, strategy, cfg)
    _worker_state[index] = _DONE
    _worker_current = -1
    return outcome


def _run_pool(
    records: Sequence[AlignmentRecord],
    strategy: FoldingStrategy,
    cfg: MotifConfig,
    workers: int,
    ctx,
) -> list[RecordOutcome]:
    """
    Process records in a pool of worker processes.

    A worker that dies (e.g. a backend segfault) breaks the whole pool.
    Only the record that worker was folding fails; records still queued,
    or interrupted while the pool shut down, go to a fresh pool. A record
    whose backend call failed is never run again.
    """
    n = len(records)
    outcomes: dict[int, RecordOutcome] = {}
    pending = list(range(n))

    while pending:
        state = None
        submitted = {}
        pool_error = None
        try:
            state = ctx.Array("b", n, lock=False)
            with ProcessPoolExecutor(
                max_workers=min(workers, len(pending)),
                mp_context=ctx,
                initializer=_init_worker,
                initargs=(state,),
            ) as ex:
                for k in pending:
                    try:
                        fut = ex.submit(_pool_task, k, records[k], strategy, cfg)
                    except BrokenProcessPool:
                        break
                    except OSError as exc:
                        pool_error = exc
                        break
                    submitted[fut] = k

                for fut in as_completed(submitted):
                    k = submitted[fut]
                    try:
                        outcomes[k] = fut.result()
                    except BrokenProcessPool:
                        continue
                    except Exception as exc:
                        outcomes[k] = _failed_outcome(
                            k, records[k], cfg, f"{type(exc).__name__}: {exc}"
                        )
        except OSError as exc:
            pool_error = exc

        if not submitted and pool_error is not None:
            # Some environments disallow process-based parallelism (e.g. blocked semaphores).
            sys.stderr.write(
                f"[WARN] Process pool unavailable ({pool_error}); "
                "processing records sequentially.\n"
            )
            for k in pending:
                outcomes[k] = process_record(k, records[k], strategy, cfg)
            break

        unresolved = []
        for k in pending:
            if k in outcomes:
                continue
            if state[k] == _STARTED:
                outcomes[k] = _failed_outcome(
                    k, records[k], cfg, "Worker process terminated while folding this record"
                )
            else:
                unresolved.append(k)

        if len(unresolved) == len(pending):
            # Pool broke without a worker to blame
            for k in unresolved:
                outcomes[k] = _failed_outcome(
                    k, records[k], cfg, "Process pool broke before the record finished"
                )
            unresolved = []
        pending = unresolved

    return [outcomes[k] for k in range(n)]


def run_records(
    records: Sequence[AlignmentRecord],
    strategy: FoldingStrategy,
    cfg: MotifConfig,
) -> tuple[list[Motif], RunSummary]:
    """
    Build motifs for all records.

    Returns:
        (motifs, summary): motifs[k] belongs to records[k] and stays an
        empty Motif() when that record was skipped or failed
    """
    records = list(records)
    n = len(records)
    motifs = [Motif() for _ in range(n)]

    workers = cfg.workers or os.cpu_count() or 1

    try:
        ctx = mp.get_context("fork")
    except ValueError:
        ctx = None

    if ctx is None or workers <= 1 or n <= 1:
        results = _run_sequential(records, strategy, cfg)
    else:
        results = _run_pool(records, strategy, cfg, workers, ctx)

    outcomes: list[Optional[RecordOutcome]] = [None] * n
    for outcome in results:
        outcomes[outcome.index] = outcome
        if outcome.status is RecordStatus.COMPLETED:
            motifs[outcome.index] = outcome.motif

    summary = RunSummary(outcomes=[o for o in outcomes if o is not None])
    for o in summary.outcomes:
        if o.status is RecordStatus.SKIPPED:
            _log(cfg, 1, f"[SKIP] {o.label}: {o.reason}\n")
        elif o.status is RecordStatus.FAILED:
            sys.stderr.write(f"[FAIL] {o.label}: {o.error_kind}: {o.reason}\n")
    _log(cfg, 0, f"[MOTIF] {summary.format()}\n")

    return motifs, summary
