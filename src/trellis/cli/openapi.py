from pathlib import Path

import click

from trellis.cli.utils import configure_logging, load_api, output_error, output_result
from trellis.config import load_config
from trellis.errors import TrellisError
from trellis.schema import OpenApi3Generator, SchemaCompiler


@click.command(name="openapi")
@click.argument("api")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"]),
    default="json",
    show_default=True,
    help="Output format",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write to a file")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--app-dir", default=".", show_default=True, help="Directory to import from")
@click.option("--json-output", is_flag=True, help="Report errors in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def openapi(
    api: str,
    output_format: str,
    output: str | None,
    config_path: str | None,
    app_dir: str,
    json_output: bool,
    debug: bool,
) -> None:
    """Generate the OpenAPI document of an API.

    API is a MODULE:ATTRIBUTE reference to an ApiDescriptor, or to a
    function returning one.

    \b
    Examples:
        trellis openapi petstore.app:api                 # JSON to stdout
        trellis openapi petstore.app:api --format yaml   # YAML to stdout
        trellis openapi petstore.app:api -o openapi.json
        trellis openapi petstore.app:api --json-output   # Errors as JSON
    """
    configure_logging(debug)
    try:
        config = load_config(Path(config_path) if config_path else None)
        descriptor = load_api(api, app_dir)
        generator = OpenApi3Generator(openapi_version=config.openapi_version)
        document = generator.generate(descriptor)
        output_result(generator.dumps(document, format=output_format), output)
    except click.ClickException:
        raise
    except (TrellisError, ValueError, OSError) as e:
        output_error(e, json_output, debug)


@click.command(name="schemas")
@click.argument("api")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"]),
    default="json",
    show_default=True,
    help="Output format",
)
@click.option("--app-dir", default=".", show_default=True, help="Directory to import from")
@click.option("--json-output", is_flag=True, help="Report errors in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def schemas(
    api: str, output_format: str, app_dir: str, json_output: bool, debug: bool
) -> None:
    """Print the compiled struct schemas of an API.

    \b
    Examples:
        trellis schemas petstore.app:api
    """
    configure_logging(debug)
    try:
        descriptor = load_api(api, app_dir)
        document = SchemaCompiler().compile(descriptor.type_roots())
        output_result(OpenApi3Generator.dumps(document.schemas, format=output_format))
    except click.ClickException:
        raise
    except TrellisError as e:
        output_error(e, json_output, debug)
