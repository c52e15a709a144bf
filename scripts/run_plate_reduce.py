#!/usr/bin/env python3
"""Plate reduction runner.

Usage:
    python scripts/run_plate_reduce.py /data/earth.plate --level 5
    python scripts/run_plate_reduce.py /data/earth.plate -l 5 -j 0 -n 4 --start_t 10 --end_t 20

Note: same flags as the ``platereduce`` console script.
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from platereduce.cli.run_reduce import main


if __name__ == "__main__":
    sys.exit(main())
