# src/graphbridge/cli.py
"""graphbridge Command Line Interface.

Entry point for the graphbridge CLI tool. TARGET arguments name a class as
``module:ClassName`` (nested classes as ``module:Outer.Inner``).
"""

from __future__ import annotations

import importlib
import json
from pathlib import Path
from typing import Any

import typer
import yaml
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from graphbridge import __version__
from graphbridge.contracts import ElementConstructionError
from graphbridge.core.config import BridgeSettings, load_settings
from graphbridge.core.introspection import construct_default
from graphbridge.engine import (
    apply_dynamic,
    discover_type,
    ensure_non_empty,
    prune_defaults,
    to_dynamic,
    type_handles,
)

__all__ = ["app"]

app = typer.Typer(
    name="graphbridge",
    help="graphbridge: Expose typed object graphs to script hosts.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"graphbridge version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """graphbridge: Expose typed object graphs to script hosts."""
    from graphbridge.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "INFO"
    configure_logging(json_output=json_logs, level=log_level)


def _resolve_target(target: str) -> type:
    """Import ``module:ClassName`` and return the class.

    Raises:
        typer.Exit: If the target is malformed, missing, or not a class
    """
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        typer.echo(f"Error: target must look like 'module:ClassName', got '{target}'", err=True)
        raise typer.Exit(1)
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        typer.echo(f"Error: cannot import module '{module_name}': {e}", err=True)
        raise typer.Exit(1) from None
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            typer.echo(f"Error: '{attr_path}' not found in module '{module_name}'", err=True)
            raise typer.Exit(1) from None
    if not isinstance(obj, type):
        typer.echo(f"Error: '{target}' is not a class", err=True)
        raise typer.Exit(1)
    return obj


def _new_instance(cls: type) -> Any:
    try:
        return construct_default(cls)
    except ElementConstructionError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _settings_from(path: str | None) -> BridgeSettings:
    """Load settings from a YAML file, or defaults when no file is given."""
    if path is None:
        return BridgeSettings()
    settings_path = Path(path).expanduser()
    try:
        return load_settings(settings_path)
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {path}: {e.problem}", err=True)
        raise typer.Exit(1) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {path}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None


def _echo_graph(root: Any, settings: BridgeSettings) -> None:
    tree = to_dynamic(root, include_nulls=settings.include_nulls, max_depth=settings.max_depth)
    typer.echo(json.dumps(tree.to_plain(), indent=2, default=str))


@app.command()
def catalog(
    target: str = typer.Argument(..., help="Root class as module:ClassName."),
) -> None:
    """List every type reachable from a class.

    Prints one line per type: the host identifier and the qualified name.
    """
    cls = _resolve_target(target)
    handles = type_handles(discover_type(cls))
    width = max((len(name) for name in handles), default=0)
    for name, handle in handles.items():
        typer.echo(f"{name:<{width}}  {handle.qualified_name}")


@app.command()
def scaffold(
    target: str = typer.Argument(..., help="Root class as module:ClassName."),
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """Print a populated default document for a class as JSON.

    Every reachable collection holds one default element, so the output
    shows the full nested shape a script can fill.
    """
    config = _settings_from(settings)
    cls = _resolve_target(target)
    root = _new_instance(cls)
    ensure_non_empty(root, config.max_depth, placeholder_key=config.map_placeholder_key)
    _echo_graph(root, config)


@app.command()
def prune(
    target: str = typer.Argument(..., help="Root class as module:ClassName."),
    input_file: Path = typer.Option(
        ...,
        "--input",
        "-i",
        help="JSON (or YAML) document to load onto a new instance.",
    ),
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """Load a document onto a class, prune defaults, print the result as JSON.

    Files ending in .yaml or .yml are read as YAML, anything else as JSON.
    """
    config = _settings_from(settings)
    cls = _resolve_target(target)

    try:
        text = input_file.read_text(encoding="utf-8")
        if input_file.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except FileNotFoundError:
        typer.echo(f"Error: Input file not found: {input_file}", err=True)
        raise typer.Exit(1) from None
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        typer.echo(f"Error: Cannot parse {input_file}: {e}", err=True)
        raise typer.Exit(1) from None
    if not isinstance(data, dict):
        typer.echo(f"Error: {input_file} must contain an object", err=True)
        raise typer.Exit(1)

    root = _new_instance(cls)
    apply_dynamic(root, data)
    prune_defaults(root, null_empty_collections=config.null_empty_collections, max_depth=config.max_depth)
    _echo_graph(root, config)


if __name__ == "__main__":
    app()
