"""
Seed alignment → partitioned RNA structural motif.

Pipeline per alignment record:

    SS_cons (WUSS) → constraint → consensus fold → per-sequence pairs
    → structural partition → Motif
"""

__version__ = "0.1.0"
