#!/usr/bin/python3

from pathlib import Path

import click
from ape.cli import ConnectedProviderCommand, network_option

from periphery_deployment.constants import MANIFEST_KEYS
from periphery_deployment.manifest import manifest_filepath, read_manifest
from periphery_deployment.networks import network_key
from periphery_deployment.options import manifest_option


@click.command(cls=ConnectedProviderCommand, name="show-manifest")
@network_option(required=True)
@manifest_option
def cli(network, manifest):
    """Print the persisted periphery addresses for a network."""
    filepath = Path(manifest) if manifest else manifest_filepath(network_key(network))
    if not filepath.exists():
        raise click.ClickException(f"No manifest found at {filepath}")

    entries = read_manifest(filepath)
    click.secho(f"\n{network_key(network)} ({filepath})", fg="green")
    for index, (key, contract_name) in enumerate(MANIFEST_KEYS.items(), start=1):
        click.secho(f"    {index}. {contract_name} {entries[key]}", fg="cyan")


if __name__ == "__main__":
    cli()
