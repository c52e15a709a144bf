"""`platereduce` - sharded weighted-average reduction over transaction-versioned plates.

Subpackages:
- plate: Store interface, SQLite-backed plate, tile records
- reduce: Reduction strategies (weighted average)
- pipeline: Partitioning, gathering, runner, driver
- schemas: Pydantic configuration
- contracts: Stage invariants
- cli: Command-line entry point
"""

__version__ = "0.1.0"
