"""Reduction contracts: fail-fast enforcement of stage invariants.

Contracts fail immediately and loudly when a stage doesn't produce its
promised invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- Strategies handle numeric edge cases (zero weight, saturation)
"""

from platereduce.contracts.failure import ContractViolation
from platereduce.contracts.base import require
from platereduce.contracts.reduction import assert_reduction_input, assert_reduction_output

__all__ = [
    "ContractViolation",
    "require",
    "assert_reduction_input",
    "assert_reduction_output",
]
