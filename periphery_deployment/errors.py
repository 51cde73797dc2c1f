from typing import Iterable


class DeploymentError(Exception):
    """Base class for every error that terminates a deployment run."""


class ConfigurationError(DeploymentError):
    """Raised when a required parameter is absent or malformed."""


class InvalidSequenceError(ConfigurationError):
    """Raised when a step list references a step that is not strictly earlier."""


class DuplicateBindingError(DeploymentError):
    """Raised when a contract name is bound to an address more than once."""


class UnknownReferenceError(DeploymentError):
    """Raised when a contract name is resolved before any step has bound it."""


class PreconditionFailedError(DeploymentError):
    """Raised when the on-chain owner of a contract is not the expected caller."""

    def __init__(self, contract_address: str, expected: str, actual: str):
        self.contract_address = contract_address
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Owner of {contract_address} is {actual}, expected {expected} (signer)."
        )


class TransactionFailureError(DeploymentError):
    """Raised when a transaction is rejected or its receipt reports a revert."""


class RecompileError(DeploymentError):
    """Raised when recompiling after a library rebind produces no usable artifacts."""


class IncompleteManifestError(DeploymentError):
    """Raised when a manifest would be written with unbound keys."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"Manifest is missing entries for: {', '.join(self.missing)}")


class DeploymentAborted(DeploymentError):
    """Raised when the operator declines to continue."""
