import click

from trellis.cli.openapi import openapi, schemas


@click.group(invoke_without_command=True)
@click.version_option(package_name="trellis-api")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Trellis CLI"""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(openapi)
cli.add_command(schemas)


if __name__ == "__main__":
    cli()
