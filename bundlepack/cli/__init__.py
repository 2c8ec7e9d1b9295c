"""bundlepack command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``bundlepack`` script).
"""

from bundlepack.cli.main import cli

__all__ = ["cli"]
