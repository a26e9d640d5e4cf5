# ABOUTME: Unit tests for the kustomize renderer
# ABOUTME: Tests command invocation, retries and error wrapping with subprocess mocked

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from autopilot_mcp.apps.errors import RenderError
from autopilot_mcp.apps.models import Kustomization
from autopilot_mcp.apps.render import KustomizeRenderer


def _completed(stdout: bytes = b"kind: ConfigMap\n") -> subprocess.CompletedProcess[bytes]:
    return subprocess.CompletedProcess(args=[], returncode=0, stdout=stdout, stderr=b"")


@pytest.fixture(autouse=True)
def no_retry_wait():
    """Skip tenacity backoff sleeps."""
    with patch.object(KustomizeRenderer._build.retry, "sleep", lambda _: None):
        yield


@pytest.mark.unit
class TestKustomizeRenderer:
    """Tests for KustomizeRenderer."""

    def test_returns_build_output(self):
        renderer = KustomizeRenderer(binary="kustomize", timeout=30)
        seen: dict[str, object] = {}

        def fake_run(cmd, **kwargs):
            seen["cmd"] = cmd
            seen["timeout"] = kwargs["timeout"]
            seen["kustomization"] = yaml.safe_load(Path(cmd[2], "kustomization.yaml").read_text())
            return _completed(b"rendered")

        with patch("autopilot_mcp.apps.render.subprocess.run", side_effect=fake_run):
            out = renderer(Kustomization(resources=["github.com/owner/repo"]))

        assert out == b"rendered"
        assert seen["cmd"][:2] == ["kustomize", "build"]
        assert seen["timeout"] == 30
        assert seen["kustomization"]["resources"] == ["github.com/owner/repo"]

    def test_local_paths_made_absolute(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        (tmp_path / "manifests").mkdir()
        monkeypatch.chdir(tmp_path)
        renderer = KustomizeRenderer()
        seen: dict[str, object] = {}

        def fake_run(cmd, **kwargs):
            seen["kustomization"] = yaml.safe_load(Path(cmd[2], "kustomization.yaml").read_text())
            return _completed()

        with patch("autopilot_mcp.apps.render.subprocess.run", side_effect=fake_run):
            renderer(Kustomization(resources=["manifests"]))

        assert seen["kustomization"]["resources"] == [str((tmp_path / "manifests").resolve())]

    def test_build_failure(self):
        error = subprocess.CalledProcessError(1, ["kustomize"], stderr=b"accumulating resources")

        with (
            patch("autopilot_mcp.apps.render.subprocess.run", side_effect=error),
            pytest.raises(RenderError) as exc_info,
        ):
            KustomizeRenderer()(Kustomization(resources=["bad"]))

        assert exc_info.value.specifier == "bad"
        assert "accumulating resources" in str(exc_info.value)
        assert str(exc_info.value).startswith("failed to generate manifests for 'bad'")

    def test_missing_binary(self):
        with (
            patch("autopilot_mcp.apps.render.subprocess.run", side_effect=FileNotFoundError()),
            pytest.raises(RenderError, match="not found"),
        ):
            KustomizeRenderer(binary="no-such-kustomize")(Kustomization(resources=["x"]))

    def test_timeout_retried_then_succeeds(self):
        side_effects = [subprocess.TimeoutExpired("kustomize", 1), _completed(b"ok")]

        with patch("autopilot_mcp.apps.render.subprocess.run", side_effect=side_effects) as run:
            out = KustomizeRenderer(timeout=1)(Kustomization(resources=["x"]))

        assert out == b"ok"
        assert run.call_count == 2

    def test_timeout_gives_up(self):
        with (
            patch(
                "autopilot_mcp.apps.render.subprocess.run",
                side_effect=subprocess.TimeoutExpired("kustomize", 1),
            ) as run,
            pytest.raises(RenderError, match="timed out"),
        ):
            KustomizeRenderer(timeout=1)(Kustomization(resources=["x"]))

        assert run.call_count == 3

    def test_build_failure_not_retried(self):
        error = subprocess.CalledProcessError(1, ["kustomize"], stderr=b"")

        with (
            patch("autopilot_mcp.apps.render.subprocess.run", side_effect=error) as run,
            pytest.raises(RenderError, match="exit status 1"),
        ):
            KustomizeRenderer()(Kustomization(resources=["x"]))

        assert run.call_count == 1
