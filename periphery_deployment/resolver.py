from typing import Dict, Iterator

from eth_typing import ChecksumAddress
from eth_utils import is_address, to_checksum_address

from periphery_deployment.errors import (
    ConfigurationError,
    DuplicateBindingError,
    UnknownReferenceError,
)

ContractName = str


class AddressResolver:
    """
    Tracks the addresses produced by the current run, keyed by logical contract name.
    Bindings are write-once; there is no removal.
    """

    def __init__(self):
        self._bindings: Dict[ContractName, ChecksumAddress] = dict()

    def record(self, name: ContractName, address: str) -> ChecksumAddress:
        if name in self._bindings:
            raise DuplicateBindingError(
                f"{name} is already bound to {self._bindings[name]} in this run."
            )
        if not is_address(address):
            raise ConfigurationError(f"Cannot bind {name} to invalid address '{address}'.")
        checksum_address = to_checksum_address(address)
        self._bindings[name] = checksum_address
        return checksum_address

    def resolve(self, name: ContractName) -> ChecksumAddress:
        try:
            return self._bindings[name]
        except KeyError:
            raise UnknownReferenceError(f"No address has been recorded for {name} yet.")

    @property
    def bindings(self) -> Dict[ContractName, ChecksumAddress]:
        return dict(self._bindings)

    def __contains__(self, name: ContractName) -> bool:
        return name in self._bindings

    def __iter__(self) -> Iterator[ContractName]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)
