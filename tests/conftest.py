import typing
from typing import Any, Dict, List

import pytest
from eth_utils import keccak, to_checksum_address

from periphery_deployment.collaborators import ArtifactCompiler, ChainReader, Deployment, Signer
from periphery_deployment.constants import FACTORY_CONTRACT_TYPE, MANIFEST_KEYS
from periphery_deployment.errors import TransactionFailureError
from periphery_deployment.params import DeploymentConfig

SIGNER_ADDRESS = to_checksum_address("0x" + "bb" * 20)
OTHER_OWNER = to_checksum_address("0x" + "aa" * 20)
WETH9 = to_checksum_address("0x771C933F280B5b1a5Ef5D45A504935D142B15549")
FACTORY = to_checksum_address("0x24593C0BF4B17a129Eb7B2346B76e3fFE7720443")

CONTRACT_NAMES = list(MANIFEST_KEYS.values())


class FakeArtifact(typing.NamedTuple):
    name: str
    libraries: Dict[str, Dict[str, str]]
    build: int


class SimulatedChain:
    """Just enough of a network to deploy contracts and mutate a factory."""

    def __init__(self):
        self.contracts: Dict[str, Dict[str, Any]] = dict()
        self.transactions: List[Dict[str, Any]] = list()

    def _next_hash(self) -> str:
        return "0x" + keccak(text=f"tx-{len(self.transactions)}").hex()

    def add_factory(self, owner: str) -> str:
        self.contracts[FACTORY] = {"type": FACTORY_CONTRACT_TYPE, "owner": owner, "fee_tiers": {}}
        return FACTORY

    def create(self, sender: str, artifact: FakeArtifact, args) -> Deployment:
        address = to_checksum_address(keccak(text=f"contract-{len(self.contracts)}")[-20:])
        self.contracts[address] = {"type": artifact.name, "args": list(args), "artifact": artifact}
        txn_hash = self._next_hash()
        self.transactions.append({"kind": "create", "sender": sender, "contract": artifact.name})
        return Deployment(address=address, txn_hash=txn_hash)

    def transact(self, sender: str, address: str, method: str, *args) -> str:
        contract = self.contracts[address]
        if method == "enableFeeAmount":
            if contract["owner"] != sender:
                raise TransactionFailureError("execution reverted")
            fee, tick_spacing = args
            contract["fee_tiers"][fee] = tick_spacing
        else:
            raise TransactionFailureError(f"unknown method {method}")
        txn_hash = self._next_hash()
        self.transactions.append({"kind": "call", "sender": sender, "method": method, "args": args})
        return txn_hash

    def deployed(self, contract_name: str) -> List[str]:
        return [a for a, c in self.contracts.items() if c["type"] == contract_name]


class FakeCompiler(ArtifactCompiler):
    def __init__(self, names=None, fail=False):
        self.names = list(CONTRACT_NAMES if names is None else names)
        self.fail = fail
        self.builds: List[Dict[str, Dict[str, str]]] = list()

    def compile(self, build_config) -> Dict[str, FakeArtifact]:
        if self.fail:
            raise RuntimeError("linker error: unresolved library")
        libraries = build_config.libraries
        self.builds.append(libraries)
        build = len(self.builds)
        return {name: FakeArtifact(name, libraries, build) for name in self.names}


class FakeSigner(Signer):
    def __init__(self, chain: SimulatedChain, address: str = SIGNER_ADDRESS, fail_on=()):
        self.chain = chain
        self._address = address
        self.fail_on = set(fail_on)
        self.deployments: List[typing.Tuple[FakeArtifact, tuple]] = list()
        self.calls: List[typing.Tuple[str, str, str, tuple]] = list()

    @property
    def address(self):
        return self._address

    def deploy(self, artifact, *args) -> Deployment:
        if artifact.name in self.fail_on:
            raise TransactionFailureError(f"Deployment of {artifact.name} reverted")
        self.deployments.append((artifact, args))
        return self.chain.create(self._address, artifact, args)

    def transact(self, contract_type, address, method, *args) -> str:
        self.calls.append((contract_type, address, method, args))
        return self.chain.transact(self._address, address, method, *args)


class FakeReader(ChainReader):
    def __init__(self, chain: SimulatedChain):
        self.chain = chain
        self.reads: List[typing.Tuple[str, str, str]] = list()

    def call(self, contract_type, address, method, *args):
        self.reads.append((contract_type, address, method))
        return self.chain.contracts[address][method]


@pytest.fixture
def chain():
    simulated = SimulatedChain()
    simulated.add_factory(owner=SIGNER_ADDRESS)
    return simulated


@pytest.fixture
def signer(chain):
    return FakeSigner(chain)


@pytest.fixture
def reader(chain):
    return FakeReader(chain)


@pytest.fixture
def compiler():
    return FakeCompiler()


@pytest.fixture
def constants():
    return {"FACTORY": FACTORY, "WETH9": WETH9, "NATIVE_CURRENCY_LABEL": "ETH"}


@pytest.fixture
def config(tmp_path, constants):
    return DeploymentConfig(
        name="v3-periphery-test",
        network="ethereum-local",
        chain_id=1337,
        constants=constants,
        artifacts_dir=tmp_path / "deployments",
    )
