"""Tests for the click entry point."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from click.testing import CliRunner

from bundlepack.cli import cli
from bundlepack.cli import main as cli_main
from bundlepack.models.config import BundlePackConfig

_CLEAN_ENV = {
    "BUNDLEPACK_NAMESPACE": None,
    "BUNDLEPACK_POD_NAME": None,
    "BUNDLEPACK_BUNDLE_NAME": None,
    "BUNDLEPACK_MANIFESTS_DIR": None,
    "BUNDLEPACK_LOG_LEVEL": None,
    "BUNDLEPACK_LABEL_KEY": None,
}


@pytest.fixture()
def run_main(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    mock = AsyncMock(return_value=0)
    monkeypatch.setattr(cli_main, "main", mock)
    return mock


def _args(manifests_dir: Path) -> list[str]:
    return [
        "unpack",
        "--namespace",
        "olm",
        "--pod-name",
        "unpack-abc",
        "--bundle-name",
        "mybundle",
        "--manifests-dir",
        str(manifests_dir),
    ]


class TestUnpackCommand:
    def test_flags_build_the_config(self, tmp_path: Path, run_main: AsyncMock) -> None:
        result = CliRunner().invoke(cli, _args(tmp_path), env=_CLEAN_ENV)
        assert result.exit_code == 0, result.output
        (config,) = run_main.await_args.args
        assert isinstance(config, BundlePackConfig)
        assert config.unpack.namespace == "olm"
        assert config.unpack.pod_name == "unpack-abc"
        assert config.unpack.bundle_name == "mybundle"
        assert config.unpack.manifests_dir == str(tmp_path)

    def test_environment_fills_missing_flags(self, tmp_path: Path, run_main: AsyncMock) -> None:
        env = dict(_CLEAN_ENV)
        env.update(
            {
                "BUNDLEPACK_NAMESPACE": "olm",
                "BUNDLEPACK_POD_NAME": "unpack-abc",
                "BUNDLEPACK_BUNDLE_NAME": "mybundle",
                "BUNDLEPACK_MANIFESTS_DIR": str(tmp_path),
            }
        )
        result = CliRunner().invoke(cli, ["unpack", "--log-level", "debug"], env=env)
        assert result.exit_code == 0, result.output
        (config,) = run_main.await_args.args
        assert config.unpack.bundle_name == "mybundle"
        assert config.log.level == "debug"

    def test_missing_parameters_is_a_usage_error(self, run_main: AsyncMock) -> None:
        result = CliRunner().invoke(cli, ["unpack", "--namespace", "olm"], env=_CLEAN_ENV)
        assert result.exit_code == 2
        assert "--pod-name" in result.output
        assert "--manifests-dir" in result.output
        run_main.assert_not_awaited()

    def test_nonexistent_manifests_dir(self, tmp_path: Path, run_main: AsyncMock) -> None:
        result = CliRunner().invoke(cli, _args(tmp_path / "absent"), env=_CLEAN_ENV)
        assert result.exit_code == 2
        run_main.assert_not_awaited()

    def test_failed_run_exits_non_zero(self, tmp_path: Path, run_main: AsyncMock) -> None:
        run_main.return_value = 1
        result = CliRunner().invoke(cli, _args(tmp_path), env=_CLEAN_ENV)
        assert result.exit_code == 1

    def test_invalid_environment_is_a_usage_error(self, tmp_path: Path, run_main: AsyncMock) -> None:
        env = dict(_CLEAN_ENV)
        env["BUNDLEPACK_LOG_LEVEL"] = "loud"
        result = CliRunner().invoke(cli, _args(tmp_path), env=env)
        assert result.exit_code == 2
        assert "invalid configuration" in result.output
