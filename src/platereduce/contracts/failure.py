"""Centralized failure policy for contract violations.

Contracts fail fast, loud, and once. All violations raise the same
exception type, allowing caller to handle pipeline bugs uniformly.
"""


class ContractViolation(RuntimeError):
    """Raised when a reduction stage contract is violated.

    This indicates a bug in the stage that produced the data (or a plate
    that broke its one-layout guarantee), not bad user input. It means a
    stage did not produce the invariants it promised.

    Key distinction:
    - ConfigurationError: User/config error (reported before processing)
    - PlateStoreError: The store could not read or write
    - ContractViolation: Stage bug (programmer error)
    """
    pass
