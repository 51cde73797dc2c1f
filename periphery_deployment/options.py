import click

autosign_option = click.option(
    "--autosign",
    help="Automatically sign transactions.",
    is_flag=True,
)

manifest_option = click.option(
    "--manifest",
    "-m",
    help="Path to a manifest file; defaults to the one for the connected network.",
    type=click.Path(exists=True, dir_okay=False),
    required=False,
)
