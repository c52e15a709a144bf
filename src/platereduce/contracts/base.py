"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts.
"""

from platereduce.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce a stage contract.

    This is called at stage boundaries to verify the preceding stage
    produced the guaranteed invariants. It is fail-fast: no recovery,
    no fallback, no silence.

    Parameters
    ----------
    condition : bool
        The invariant that must be true. If False, ContractViolation is raised.

    message : str
        Error message explaining the contract violation (for debugging).

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require(len(inputs) > 0, "Reduction input contract violated: no tiles")
    """
    if not condition:
        raise ContractViolation(message)
