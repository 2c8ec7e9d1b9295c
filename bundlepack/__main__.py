"""Entry point for `python -m bundlepack`.

Usage:
    python -m bundlepack unpack --namespace ns --pod-name pod \
        --bundle-name name --manifests-dir /manifests
"""

from __future__ import annotations

from bundlepack.cli import cli

cli(prog_name="bundlepack")
