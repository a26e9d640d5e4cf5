# ABOUTME: Integration tests for flat installations rendered by a real kustomize binary
# ABOUTME: Requires kustomize in PATH, skipped otherwise

"""Integration tests running build_app/create_files with KustomizeRenderer.

These tests require:
- kustomize available in PATH

The application source is a local kustomization created under tmp_path, so
no network access is needed.
"""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest
import yaml

from autopilot_mcp.apps import (
    CreateOptions,
    KustomizeRenderer,
    RenderError,
    build_app,
    create_files,
)
from autopilot_mcp.apps.models import Kustomization
from autopilot_mcp.utils.repofs import RepoFS

CONFIGMAP = """\
apiVersion: v1
kind: ConfigMap
metadata:
  name: web-settings
data:
  color: blue
"""

# Skip marker for tests that require kustomize
requires_kustomize = pytest.mark.skipif(
    shutil.which("kustomize") is None,
    reason="kustomize not available in PATH",
)


@pytest.fixture
def app_source(tmp_path: Path) -> Path:
    source = tmp_path / "source"
    source.mkdir()
    (source / "configmap.yaml").write_text(CONFIGMAP)
    (source / "kustomization.yaml").write_text(
        yaml.safe_dump(
            {
                "apiVersion": "kustomize.config.k8s.io/v1beta1",
                "kind": "Kustomization",
                "resources": ["configmap.yaml"],
            }
        )
    )
    return source


@pytest.mark.integration
@requires_kustomize
class TestKustomizeRenderIntegration:
    """Flat installations against a real kustomize build."""

    def test_render_local_source(self, app_source: Path):
        manifests = KustomizeRenderer()(Kustomization(resources=[str(app_source)]))

        docs = list(yaml.safe_load_all(manifests))
        assert [d["kind"] for d in docs] == ["ConfigMap"]
        assert docs[0]["metadata"]["name"] == "web-settings"

    def test_flat_install_writes_rendered_manifests(self, app_source: Path, repofs: RepoFS):
        app = build_app(
            CreateOptions(
                app_name="web",
                app_specifier=str(app_source),
                installation_mode="flat",
                dest_namespace="web",
            ),
            "staging",
        )

        create_files(app, repofs, "staging")

        installed = yaml.safe_load(repofs.read_file("apps/web/base/install.yaml"))
        assert installed["data"] == {"color": "blue"}
        assert repofs.read_yaml("apps/web/base/kustomization.yaml")["resources"] == [
            "install.yaml"
        ]
        assert repofs.exists("apps/web/overlays/staging/namespace.yaml")

    def test_broken_source(self, tmp_path: Path):
        broken = tmp_path / "broken"
        broken.mkdir()
        (broken / "kustomization.yaml").write_text("resources:\n  - missing.yaml\n")

        with pytest.raises(RenderError, match="failed to generate manifests"):
            KustomizeRenderer()(Kustomization(resources=[str(broken)]))
