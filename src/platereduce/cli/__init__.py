"""Command-line interface for platereduce."""

from platereduce.cli.run_reduce import main

__all__ = ['main']
