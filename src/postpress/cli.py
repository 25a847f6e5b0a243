"""CLI interface for Postpress.

Command-line tool for building and previewing MDX blog posts.
"""

import asyncio
import logging
import sys
from pathlib import Path

import click

from postpress.config import Config

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover postpress.toml)",
)
source_dir_option = click.option(
    "--source-dir",
    "-s",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Posts source directory (overrides config)",
)
verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)


@click.group()
def cli() -> None:
    """Postpress - static MDX blog pages with annotated code."""


@cli.command()
@config_option
@source_dir_option
def routes(config_path: Path | None, source_dir: Path | None) -> None:
    """List the routes that a build would generate."""
    from postpress.posts import PostPage

    try:
        config = Config.load(config_path).with_overrides(source_dir=source_dir)
        static_paths = PostPage.from_config(config).get_static_paths()
    except Exception as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    for route in static_paths.routes():
        click.echo(route)


@cli.command()
@config_option
@source_dir_option
@click.option(
    "--out-dir",
    "-o",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Output directory (overrides config)",
)
@click.option(
    "--cache/--no-cache",
    default=None,
    help="Enable/disable the serialization cache (overrides config, default: enabled)",
)
@verbose_option
def build(
    config_path: Path | None,
    source_dir: Path | None,
    out_dir: Path | None,
    cache: bool | None,
    verbose: bool,
) -> None:
    """Pre-render every post to static HTML."""
    from postpress.core.builder import build_site
    from postpress.posts import PostPage

    _configure_logging(verbose)

    try:
        config = Config.load(config_path).with_overrides(
            source_dir=source_dir,
            out_dir=out_dir,
            cache_enabled=cache,
        )
        click.echo(f"Source directory: {config.posts.source_dir}")
        click.echo(f"Output directory: {config.build.out_dir}")

        page = PostPage.from_config(config)
        result = asyncio.run(build_site(page, config.build.out_dir))
    except Exception as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    for route in result.routes:
        click.echo(f"  {route}")
    click.echo(
        click.style(f"\nGenerated {len(result.routes)} page(s)", fg="green", bold=True),
    )


@cli.command()
@config_option
@source_dir_option
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--live-reload/--no-live-reload",
    default=None,
    help="Enable/disable live reload (overrides config, default: enabled)",
)
@verbose_option
def serve(
    config_path: Path | None,
    source_dir: Path | None,
    host: str | None,
    port: int | None,
    live_reload: bool | None,
    verbose: bool,
) -> None:
    """Start the preview server."""
    from postpress.server import run_server

    _configure_logging(verbose)

    config = Config.load(config_path).with_overrides(
        host=host,
        port=port,
        source_dir=source_dir,
        live_reload_enabled=live_reload,
    )

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Source directory: {config.posts.source_dir}")
    if config.live_reload.enabled:
        click.echo("Live reload: enabled")
    else:
        click.echo("Live reload: disabled")

    run_server(config)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
