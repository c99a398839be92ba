import importlib
import json
import logging
import os
import sys
import traceback
from typing import Any

import click

from trellis.descriptor.core import ApiDescriptor


def get_env_flag(env_var: str, default: bool = False) -> bool:
    """Get a boolean flag from an environment variable.

    Args:
        env_var: Name of the environment variable
        default: Default value if environment variable is not set

    Returns:
        True if the environment variable is set to "1", "true", or "yes" (case insensitive)
        False otherwise
    """
    value = os.environ.get(env_var, "").lower()
    return value in ("1", "true", "yes") if value else default


def configure_logging(debug: bool = False) -> None:
    """Configure logging for all modules.

    Args:
        debug: Whether to enable debug logging
    """
    if not debug:
        debug = get_env_flag("TRELLIS_DEBUG")

    log_level = logging.DEBUG if debug else logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove any existing handlers to avoid duplicate messages
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))
    root_logger.addHandler(handler)

    logging.getLogger("trellis").setLevel(log_level)


def load_api(reference: str, app_dir: str = ".") -> ApiDescriptor:
    """Import an `ApiDescriptor` from a ``module:attribute`` reference.

    The attribute may be the descriptor itself or a zero-argument callable
    returning one.

    Raises:
        click.BadParameter: If the reference is malformed or doesn't resolve
    """
    module_name, sep, attribute = reference.partition(":")
    if not sep or not module_name or not attribute:
        raise click.BadParameter(
            f"Expected MODULE:ATTRIBUTE, got {reference!r}", param_hint="API"
        )

    app_dir = os.path.abspath(app_dir)
    if app_dir not in sys.path:
        sys.path.insert(0, app_dir)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"Could not import module {module_name!r}: {e}") from e

    try:
        api: Any = getattr(module, attribute)
    except AttributeError as e:
        raise click.BadParameter(
            f"Module {module_name!r} has no attribute {attribute!r}"
        ) from e

    if callable(api) and not isinstance(api, ApiDescriptor):
        api = api()
    if not isinstance(api, ApiDescriptor):
        raise click.BadParameter(
            f"{reference!r} is a {type(api).__name__}, not an ApiDescriptor"
        )
    return api


def format_error(error: Exception, debug: bool = False) -> dict[str, Any]:
    """Format an error for output.

    Args:
        error: The exception that occurred
        debug: Whether to include debug information

    Returns:
        Dict containing error information
    """
    error_info = {"error": str(error)}

    if debug:
        error_info["traceback"] = traceback.format_exc()
        error_info["type"] = error.__class__.__name__

    return error_info


def output_result(result: str, output: str | None = None) -> None:
    """Write a rendered result to a file, or to stdout when no path is given."""
    if output:
        with open(output, "w") as f:
            f.write(result)
            if not result.endswith("\n"):
                f.write("\n")
        click.echo(f"Wrote {output}", err=True)
    else:
        click.echo(result)


def output_error(error: Exception, json_output: bool = False, debug: bool = False) -> None:
    """Output an error in either JSON or human-readable format.

    Args:
        error: The exception that occurred
        json_output: Whether to output in JSON format
        debug: Whether to include debug information
    """
    error_info = format_error(error, debug)

    if json_output:
        click.echo(json.dumps({"status": "error", **error_info}, indent=2))
    else:
        click.echo(f"Error: {error_info['error']}", err=True)
        if debug and "traceback" in error_info:
            click.echo("\nTraceback:", err=True)
            click.echo(error_info["traceback"], err=True)

    raise click.Abort()
