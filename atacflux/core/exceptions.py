"""
Custom exception classes for AtacFlux.
"""

class AtacFluxError(Exception):
    """Base class for exceptions in AtacFlux."""
    pass

class ConfigurationError(AtacFluxError):
    """Raised when a pathway, accessibility table or config is malformed."""
    pass

class DegenerateBranchError(AtacFluxError):
    """Raised when every exit of a branch point has zero accessibility and the solver policy is 'raise'."""

    def __init__(self, node: str, genes):
        self.node = node
        self.genes = list(genes)
        super().__init__(
            f"Branch node '{node}' has zero total accessibility across {self.genes}"
        )
