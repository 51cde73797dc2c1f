#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from periphery_deployment.deployer import Deployer
from periphery_deployment.errors import DeploymentError
from periphery_deployment.networks import params_filepath_for_network
from periphery_deployment.options import autosign_option
from periphery_deployment.steps import FEE_TIER_STEPS


@click.command(cls=ConnectedProviderCommand, name="add-fee-tier")
@account_option()
@network_option(required=True)
@autosign_option
def cli(account, network, autosign):
    """Enables the 1 bp fee tier on the configured factory. No manifest is written."""
    params_filepath = params_filepath_for_network(network)
    try:
        deployer = Deployer.from_yaml(
            filepath=params_filepath, account=account, autosign=autosign, steps=FEE_TIER_STEPS
        )
        deployer.execute()
    except DeploymentError as e:
        raise click.ClickException(str(e))


if __name__ == "__main__":
    cli()
