from eth_utils import is_address, to_canonical_address, to_checksum_address

from periphery_deployment.collaborators import ChainReader
from periphery_deployment.constants import FACTORY_CONTRACT_TYPE
from periphery_deployment.errors import ConfigurationError, PreconditionFailedError


class PreconditionGate:
    """Checks on-chain invariants before a governance-mutating transaction is sent."""

    OWNER_METHOD = "owner"

    def __init__(self, reader: ChainReader):
        self.reader = reader

    def require_governance_owner(
        self,
        contract_address: str,
        expected_caller: str,
        contract_type: str = FACTORY_CONTRACT_TYPE,
    ) -> None:
        """
        Raises PreconditionFailedError unless the current owner() of the contract
        is exactly the expected caller. Nothing is submitted either way.
        """
        if not contract_address or not is_address(contract_address):
            raise ConfigurationError(f"Missing or invalid {contract_type} address: {contract_address}")
        if not expected_caller or not is_address(expected_caller):
            raise ConfigurationError(f"Missing or invalid caller address: {expected_caller}")

        contract_address = to_checksum_address(contract_address)
        owner = self.reader.call(contract_type, contract_address, self.OWNER_METHOD)

        if not _same_address(owner, expected_caller):
            raise PreconditionFailedError(
                contract_address=contract_address,
                expected=to_checksum_address(expected_caller),
                actual=str(owner),
            )


def _same_address(actual, expected: str) -> bool:
    if not isinstance(actual, (str, bytes)) or not is_address(actual):
        return False
    return to_canonical_address(actual) == to_canonical_address(expected)
