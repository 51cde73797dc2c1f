import json

import pytest
from eth_utils import is_checksum_address

from periphery_deployment.constants import MANIFEST_KEYS
from periphery_deployment.deployer import Deployer
from periphery_deployment.errors import (
    ConfigurationError,
    PreconditionFailedError,
    TransactionFailureError,
)
from periphery_deployment.manifest import read_manifest
from periphery_deployment.sequencer import RunState
from periphery_deployment.steps import FEE_TIER_STEPS
from tests.conftest import FACTORY, OTHER_OWNER, SIGNER_ADDRESS, FakeSigner


@pytest.fixture
def deployer(config, compiler, signer, reader):
    return Deployer(config=config, compiler=compiler, signer=signer, reader=reader)


def test_successful_deployment(deployer, config, chain):
    filepath = deployer.run()

    assert deployer.state == RunState.COMPLETED
    assert filepath == config.artifacts_dir / "deployment.ethereum-local.json"

    with open(filepath) as file:
        manifest = json.load(file)
    assert set(manifest) == set(MANIFEST_KEYS)
    assert len(manifest) == 8
    for key, contract_name in MANIFEST_KEYS.items():
        assert is_checksum_address(manifest[key])
        assert chain.contracts[manifest[key]]["type"] == contract_name


def test_factory_owner_mismatch(deployer, config, chain, signer):
    chain.contracts[FACTORY]["owner"] = OTHER_OWNER

    with pytest.raises(PreconditionFailedError) as error:
        deployer.run()

    assert error.value.expected == SIGNER_ADDRESS
    assert error.value.actual == OTHER_OWNER
    assert deployer.state == RunState.ABORTED
    assert deployer.failed_step.name == "EnableOneBpFeeTier"
    assert signer.deployments == []
    assert chain.transactions == []
    assert not config.artifacts_dir.exists()


def test_failure_leaves_previous_manifest_untouched(config, compiler, chain, reader, deployer):
    previous = deployer.run()
    previous_content = previous.read_text()

    # the simulated factory accepts the same fee tier twice
    failing_signer = FakeSigner(chain, fail_on={"QuoterV2"})
    rerun = Deployer(config=config, compiler=compiler, signer=failing_signer, reader=reader)
    with pytest.raises(TransactionFailureError):
        rerun.run()

    assert rerun.state == RunState.ABORTED
    assert rerun.failed_step.name == "QuoterV2"
    assert previous.read_text() == previous_content


def test_rerun_after_fix_produces_same_shape(config, compiler, chain, reader):
    failing = Deployer(
        config=config,
        compiler=compiler,
        signer=FakeSigner(chain, fail_on={"TickLens"}),
        reader=reader,
    )
    with pytest.raises(TransactionFailureError):
        failing.run()
    assert not config.artifacts_dir.exists()

    fixed = Deployer(config=config, compiler=compiler, signer=FakeSigner(chain), reader=reader)
    filepath = fixed.run()
    assert set(read_manifest(filepath)) == set(MANIFEST_KEYS)


def test_missing_constant_fails_before_any_transaction(config, compiler, signer, reader, chain):
    del config.constants["NATIVE_CURRENCY_LABEL"]

    with pytest.raises(ConfigurationError):
        Deployer(config=config, compiler=compiler, signer=signer, reader=reader)
    assert chain.transactions == []


def test_fee_tier_only(config, compiler, signer, reader, chain):
    deployer = Deployer(
        config=config, compiler=compiler, signer=signer, reader=reader, steps=FEE_TIER_STEPS
    )
    resolver = deployer.execute()

    assert len(resolver) == 0
    assert chain.contracts[FACTORY]["fee_tiers"] == {100: 1}
    assert signer.deployments == []
    assert not config.artifacts_dir.exists()
