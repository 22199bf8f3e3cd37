"""
Per-record failure taxonomy for motif construction.

Every exception here is scoped to a single alignment record: the driver
catches :class:`MotifError` and records the outcome instead of aborting
the batch.
"""

from __future__ import annotations

__all__ = [
    "MotifError",
    "MalformedAnnotationError",
    "InfeasibleConstraintError",
    "BackendFault",
    "SkippedTooLong",
    "MissingAnnotationKey",
]


class MotifError(Exception):
    """Base class for failures local to one alignment record."""


class MalformedAnnotationError(MotifError, ValueError):
    """Structure annotation has unbalanced or mismatched brackets."""


class InfeasibleConstraintError(MotifError):
    """Folding backend could not reproduce the constrained pairs."""


class BackendFault(MotifError):
    """Folding backend errored or returned an unusable structure."""


class SkippedTooLong(MotifError):
    """Record exceeds the configured length threshold (policy skip)."""


class MissingAnnotationKey(MotifError, LookupError):
    """A required header or column annotation key is absent."""
