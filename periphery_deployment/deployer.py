import typing
from pathlib import Path
from typing import Optional

from ape import networks
from ape.api import AccountAPI

from periphery_deployment.backends import ApeChainReader, ApeCompiler, Transactor
from periphery_deployment.collaborators import ArtifactCompiler, ChainReader, Signer
from periphery_deployment.confirm import _continue
from periphery_deployment.manifest import ManifestWriter
from periphery_deployment.networks import is_local_network
from periphery_deployment.params import DeploymentConfig
from periphery_deployment.resolver import AddressResolver
from periphery_deployment.sequencer import DeploymentStep, Sequencer, validate_constants
from periphery_deployment.steps import PERIPHERY_STEPS
from periphery_deployment.utils import check_plugins


class Deployer:
    """
    Runs a fixed step sequence against one network and records the outcome.
    Configuration problems surface here, before any transaction is sent.
    """

    def __init__(
        self,
        config: DeploymentConfig,
        compiler: ArtifactCompiler,
        signer: Signer,
        reader: ChainReader,
        steps: typing.Sequence[DeploymentStep] = PERIPHERY_STEPS,
        manifest_writer: Optional[ManifestWriter] = None,
    ):
        validate_constants(steps, config.constants)
        self.config = config
        self.sequencer = Sequencer(
            steps=steps,
            compiler=compiler,
            signer=signer,
            reader=reader,
            constants=config.constants,
        )
        self.manifest_writer = manifest_writer or ManifestWriter(directory=config.artifacts_dir)

    @classmethod
    def from_yaml(
        cls,
        filepath: Path,
        account: Optional[AccountAPI] = None,
        autosign: bool = False,
        steps: typing.Sequence[DeploymentStep] = PERIPHERY_STEPS,
    ) -> "Deployer":
        check_plugins()
        config = DeploymentConfig.from_yaml(filepath)
        config.validate_chain(networks.provider.network.chain_id, live=not is_local_network())

        deployer = cls(
            config=config,
            compiler=ApeCompiler(),
            signer=Transactor(account=account, autosign=autosign),
            reader=ApeChainReader(),
            steps=steps,
        )
        deployer._print_deployment_info()
        if not autosign:
            # Confirms the start of the deployment.
            _continue()
        return deployer

    @property
    def state(self):
        return self.sequencer.state

    @property
    def failed_step(self) -> Optional[DeploymentStep]:
        return self.sequencer.failed_step

    def execute(self) -> AddressResolver:
        """Runs every step; no manifest is written."""
        return self.sequencer.run()

    def run(self) -> Path:
        resolver = self.execute()
        return self.manifest_writer.write(self.config.network, resolver)

    def _print_deployment_info(self):
        print(
            f"Account: {self.sequencer.signer.address}",
            f"Config: {self.config.path}",
            f"Manifest: {self.manifest_writer.directory}",
            f"Deployment: {self.config.name}",
            f"Network: {self.config.network}",
            f"Chain ID: {self.config.chain_id}",
            f"Factory: {self.config.factory}",
            f"Steps: {len(self.sequencer.steps)}",
            sep="\n",
        )
