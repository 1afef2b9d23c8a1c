"""Command-line interface for autoui."""

from .main import app, cli_main
from .runner import CLIRunner, ExitCode

__all__ = ['app', 'cli_main', 'CLIRunner', 'ExitCode']
