#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from periphery_deployment.deployer import Deployer
from periphery_deployment.errors import DeploymentError
from periphery_deployment.networks import params_filepath_for_network
from periphery_deployment.options import autosign_option


@click.command(cls=ConnectedProviderCommand, name="deploy-periphery")
@account_option()
@network_option(required=True)
@autosign_option
def cli(account, network, autosign):
    """
    Deploys the Uniswap V3 periphery against the configured factory
    and writes deployments/deployment.<network>.json.

    ape run deploy_periphery --network zksync:sepolia:<PROVIDER> --account <ALIAS>
    """
    params_filepath = params_filepath_for_network(network)
    click.echo(f"Connected to {network.name} network; using {params_filepath}.")

    deployer = None
    try:
        deployer = Deployer.from_yaml(filepath=params_filepath, account=account, autosign=autosign)
        manifest_filepath = deployer.run()
    except DeploymentError as e:
        step = deployer.failed_step if deployer else None
        where = f"step '{step.name}'" if step else "deployment"
        raise click.ClickException(f"{where} failed: {e}")

    click.secho(f"Deployment completed; manifest at {manifest_filepath}", fg="green")


if __name__ == "__main__":
    cli()
