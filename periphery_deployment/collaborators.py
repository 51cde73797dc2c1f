"""
Narrow contracts the orchestrator consumes from the compiler toolchain,
the signing account and the network.
"""

import typing
from abc import ABC, abstractmethod
from typing import Any, Dict

from eth_typing import ChecksumAddress

if typing.TYPE_CHECKING:
    from periphery_deployment.linker import BuildConfiguration


class Deployment(typing.NamedTuple):
    """A confirmed contract creation."""

    address: ChecksumAddress
    txn_hash: str


class ArtifactCompiler(ABC):
    @abstractmethod
    def compile(self, build_config: "BuildConfiguration") -> Dict[str, Any]:
        """Compiles all sources with the given library bindings; returns artifacts by name."""
        raise NotImplementedError


class Signer(ABC):
    @property
    @abstractmethod
    def address(self) -> ChecksumAddress:
        raise NotImplementedError

    @abstractmethod
    def deploy(self, artifact: Any, *args) -> Deployment:
        """Submits a contract creation and waits for its confirmation."""
        raise NotImplementedError

    @abstractmethod
    def transact(self, contract_type: str, address: ChecksumAddress, method: str, *args) -> str:
        """Submits a state-changing call, waits for its confirmation and returns the tx hash."""
        raise NotImplementedError


class ChainReader(ABC):
    @abstractmethod
    def call(self, contract_type: str, address: ChecksumAddress, method: str, *args) -> Any:
        """Performs a read-only contract call."""
        raise NotImplementedError
