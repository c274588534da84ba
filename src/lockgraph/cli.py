"""
Command-line interface for lockgraph.
"""

import click
import json
import sys
import yaml
from dataclasses import replace
from pathlib import Path
from typing import Optional, Tuple

from . import __version__
from .config import ConfigManager, SUPPORTED_ECOSYSTEMS
from .error_handling import LockGraphError
from .logging import LoggerConfig, setup_logging, close_logging
from .resolution import ProjectResolver

VERBOSITY_LEVELS = {1: "INFO", 2: "DEBUG"}


@click.group()
@click.version_option(version=__version__)
@click.option(
    '--config', '-c',
    type=click.Path(exists=True, path_type=Path),
    help='Path to YAML configuration file'
)
@click.option(
    '--verbose', '-v',
    count=True,
    help='Increase verbosity (use -v or -vv)'
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], verbose: int) -> None:
    """
    lockgraph - normalize package manager lock files into an SBOM-ready module graph.
    """
    ctx.ensure_object(dict)

    try:
        app_config = ConfigManager(config).get_config()
    except LockGraphError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    setup_logging(LoggerConfig.from_app_config(app_config, VERBOSITY_LEVELS.get(min(verbose, 2))))
    ctx.call_on_close(close_logging)

    ctx.obj['config'] = app_config
    ctx.obj['verbose'] = verbose


@cli.command()
@click.argument('path', type=click.Path(exists=True, file_okay=False, path_type=Path), default='.')
@click.option(
    '--deps/--no-deps',
    default=False,
    help='Include each module\'s transitive dependency tree'
)
@click.option(
    '--format', '-f', 'output_format',
    type=click.Choice(['json', 'yaml'], case_sensitive=False),
    default='json',
    help='Output format for the module lists'
)
@click.option(
    '--ecosystem', '-e',
    type=click.Choice(list(SUPPORTED_ECOSYSTEMS)),
    multiple=True,
    help='Only resolve these ecosystems'
)
@click.option(
    '--include-dev/--no-include-dev',
    default=None,
    help='Include development dependencies (defaults to configuration)'
)
@click.pass_context
def resolve(
    ctx: click.Context,
    path: Path,
    deps: bool,
    output_format: str,
    ecosystem: Tuple[str, ...],
    include_dev: Optional[bool]
) -> None:
    """
    Resolve the modules of the project in PATH.

    Examples:

        # Flat module list of the current directory
        lockgraph resolve

        # Dependency tree of the npm project only, as YAML
        lockgraph resolve ./web --deps -e npm -f yaml
    """
    app_config = ctx.obj['config']
    if include_dev is not None:
        app_config = replace(
            app_config,
            resolution=replace(app_config.resolution, include_dev_dependencies=include_dev)
        )

    try:
        results = ProjectResolver(app_config).resolve(path, with_deps=deps, ecosystems=list(ecosystem))
    except LockGraphError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not results:
        click.echo(f"Error: no supported ecosystem found in {path}", err=True)
        sys.exit(1)

    payload = {
        name: [module.to_dict(include_modules=deps) for module in modules]
        for name, modules in results.items()
    }
    if output_format == 'yaml':
        click.echo(yaml.safe_dump(payload, default_flow_style=False, sort_keys=False))
    else:
        click.echo(json.dumps(payload, indent=2))


@cli.command()
@click.argument('path', type=click.Path(exists=True, file_okay=False, path_type=Path), default='.')
@click.pass_context
def ecosystems(ctx: click.Context, path: Path) -> None:
    """
    Show which ecosystems apply to PATH and whether their modules are installed.
    """
    report = ProjectResolver(ctx.obj['config']).inspect(path)

    for name, entry in report.items():
        if not entry['valid']:
            status = "not applicable"
        elif entry['installed']:
            status = "installed"
        else:
            status = f"not installed ({entry['error']})"
        click.echo(f"{name}: {status}")


@cli.command()
@click.option(
    '--format', '-f', 'output_format',
    type=click.Choice(['table', 'json', 'yaml'], case_sensitive=False),
    default='table',
    help='Output format for configuration display'
)
@click.pass_context
def config(ctx: click.Context, output_format: str) -> None:
    """
    Display the effective configuration: defaults, file settings and
    environment variable overrides.
    """
    config_dict = ctx.obj['config'].to_dict()

    if output_format == 'json':
        click.echo(json.dumps(config_dict, indent=2, default=str))
    elif output_format == 'yaml':
        click.echo(yaml.safe_dump(config_dict, default_flow_style=False))
    else:
        for section_name, section in config_dict.items():
            click.echo(f"[{section_name}]")
            for key, value in section.items():
                click.echo(f"  {key}: {value}")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()
