#!/usr/bin/env python3
"""CLI wrapper for building motifs from a Stockholm seed alignment.

All implementation lives in :mod:`rnamotif.cli`.
"""

import sys

from rnamotif.cli import main

if __name__ == "__main__":
    sys.exit(main())
