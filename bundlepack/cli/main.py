"""Click entry point for bundlepack."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from bundlepack import __version__
from bundlepack.app import main
from bundlepack.config import load_config


@click.group()
@click.version_option(__version__, prog_name="bundlepack")
def cli() -> None:
    """bundlepack - unpack bundle manifests into immutable ConfigMaps."""


@cli.command()
@click.option("--namespace", default=None, help="Namespace in which to unpack configmaps.")
@click.option("--pod-name", default=None, help="Name of pod with bundle image container.")
@click.option("--bundle-name", default=None, help="The name of the bundle object that is being unpacked.")
@click.option("--manifests-dir", default=None, help="Directory in which manifests can be found.")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default=None,
    help="Log level (defaults to BUNDLEPACK_LOG_LEVEL or info).",
)
def unpack(
    namespace: str | None,
    pod_name: str | None,
    bundle_name: str | None,
    manifests_dir: str | None,
    log_level: str | None,
) -> None:
    """Unpack a bundle's manifests and converge its chunk ConfigMaps.

    Each option falls back to the matching BUNDLEPACK_* environment variable.
    """
    try:
        config = load_config()
    except ValueError as exc:
        raise click.UsageError(f"invalid configuration: {exc}") from exc

    overrides = {
        "namespace": namespace,
        "pod_name": pod_name,
        "bundle_name": bundle_name,
        "manifests_dir": manifests_dir,
    }
    for attr, value in overrides.items():
        if value is not None:
            setattr(config.unpack, attr, value)
    if log_level is not None:
        config.log.level = log_level

    missing = config.unpack.missing()
    if missing:
        flags = ", ".join("--" + name.replace("_", "-") for name in missing)
        raise click.UsageError(f"missing required options: {flags}")
    if not Path(config.unpack.manifests_dir).is_dir():
        raise click.BadParameter(
            f"Directory '{config.unpack.manifests_dir}' does not exist.", param_hint="--manifests-dir"
        )

    raise SystemExit(asyncio.run(main(config)))
