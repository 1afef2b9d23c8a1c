#!/usr/bin/env python3
"""Main CLI entry point for autoui using Typer."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from typing_extensions import Annotated

from .. import __version__
from ..audit.capture.navigation import is_http_url
from ..audit.errors import ConfigurationError
from .config import load_configuration, print_configuration, validate_configuration
from .runner import CLIRunner, ExitCode


app = typer.Typer(
    name="autoui",
    help="autoui - automated website crawler and UI auditor",
    add_completion=False,
)


def setup_logging(verbose: bool, quiet: bool) -> None:
    """Configure root logging once for the CLI process."""
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.callback()
def main():
    """
    autoui - automated website crawler and UI auditor.

    Explores a site from a seed URL, interacts with every page like a user
    would and audits performance, accessibility, security, SEO and network
    weight per device viewport.
    """
    pass


@app.command(name="version")
def show_version():
    """Show version information."""
    typer.echo(f"autoui v{__version__}")


@app.command()
def crawl(
    url: Annotated[
        str,
        typer.Argument(help="Seed URL to start crawling from")
    ],

    depth: Annotated[
        Optional[int],
        typer.Option("--depth", "-d", help="Maximum crawl depth [default: 2]")
    ] = None,

    max_links: Annotated[
        Optional[int],
        typer.Option("--max-links", "-l", help="Maximum links followed per page [default: 2]")
    ] = None,

    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Report directory [default: reports]")
    ] = None,

    viewports: Annotated[
        Optional[str],
        typer.Option("--viewports", "-v", help="Comma-separated viewports: desktop, mobile, tablet [default: desktop]")
    ] = None,

    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to YAML or JSON configuration file")
    ] = None,

    headful: Annotated[
        bool,
        typer.Option("--headful", help="Run browser with GUI (for debugging)")
    ] = False,

    parallel_viewports: Annotated[
        bool,
        typer.Option("--parallel-viewports", help="Crawl viewports concurrently")
    ] = False,

    no_gate: Annotated[
        bool,
        typer.Option("--no-gate", help="Always exit 0 regardless of quality gate thresholds")
    ] = False,

    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Verbose output")
    ] = False,

    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Quiet mode")
    ] = False,

    print_config: Annotated[
        bool,
        typer.Option("--print-config", help="Print effective configuration and exit")
    ] = False,
):
    """
    Crawl and audit a website.

    Examples:

        # Crawl two levels deep on desktop
        autoui crawl https://example.com

        # Mobile and tablet, wider crawl, custom report directory
        autoui crawl https://example.com -d 3 -l 5 -v mobile,tablet -o out
    """
    if not is_http_url(url):
        typer.echo(f"❌ Seed URL must be an absolute http(s) URL: {url}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    # Only explicitly provided values override lower-precedence sources
    cli_overrides: Dict[str, Any] = {}

    def override(section: str, key: str, value: Any) -> None:
        cli_overrides.setdefault(section, {})[key] = value

    if depth is not None:
        override("crawl", "max_depth", depth)
    if max_links is not None:
        override("crawl", "max_links_per_page", max_links)
    if output is not None:
        override("output", "output_dir", output)
    if viewports is not None:
        override("browser", "viewports", viewports)
    if headful:
        override("browser", "headless", False)
    if parallel_viewports:
        override("browser", "parallel_viewports", True)
    if no_gate:
        override("gate", "enabled", False)
    if verbose:
        override("output", "verbose", True)
    if quiet:
        override("output", "quiet", True)

    try:
        full_config = load_configuration(config_file=config_file, cli_overrides=cli_overrides)
    except ConfigurationError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    if print_config:
        typer.echo("# Effective Configuration")
        typer.echo("# Loaded from: " + " -> ".join(full_config.loaded_from))
        typer.echo(print_configuration(full_config, "yaml"))
        raise typer.Exit()

    errors = validate_configuration(full_config)
    if errors:
        for error in errors:
            typer.echo(f"❌ {error}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    setup_logging(full_config.output.verbose, full_config.output.quiet)

    runner = CLIRunner(full_config, url)

    try:
        exit_code = asyncio.run(runner.run())
    except KeyboardInterrupt:
        typer.echo("❌ Operation interrupted by user", err=True)
        raise typer.Exit(code=ExitCode.RUNTIME_ERROR.value)

    raise typer.Exit(code=exit_code.value)


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    sys.exit(cli_main())
