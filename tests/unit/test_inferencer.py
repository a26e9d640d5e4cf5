# ABOUTME: Unit tests for application type inference
# ABOUTME: Tests detection rules and their priority order

import pytest

from autopilot_mcp.apps.inferencer import (
    APP_TYPE_DIRECTORY,
    APP_TYPE_HELM,
    APP_TYPE_KSONNET,
    APP_TYPE_KUSTOMIZE,
    infer_app_type,
)
from autopilot_mcp.utils.repofs import RepoFS


@pytest.mark.unit
class TestInferAppType:
    """Tests for infer_app_type."""

    @pytest.mark.parametrize(
        ("paths", "expected"),
        [
            (["app.yaml", "components/params.libsonnet"], APP_TYPE_KSONNET),
            (["components/params.libsonnet"], APP_TYPE_DIRECTORY),
            (["app.yaml"], APP_TYPE_DIRECTORY),
            (
                ["app.yaml", "components/params.libsonnet", "Chart.yaml", "kustomization.yaml"],
                APP_TYPE_KSONNET,
            ),
            (["Chart.yaml"], APP_TYPE_HELM),
            (["Chart.yaml", "kustomization.yaml"], APP_TYPE_HELM),
            (["kustomization.yaml"], APP_TYPE_KUSTOMIZE),
            (["kustomization.yml"], APP_TYPE_KUSTOMIZE),
            (["Kustomization/"], APP_TYPE_KUSTOMIZE),
            (["deployment.yaml", "service.yaml"], APP_TYPE_DIRECTORY),
            ([], APP_TYPE_DIRECTORY),
        ],
    )
    def test_detection(self, repofs: RepoFS, write_tree, paths: list[str], expected: str):
        write_tree(*paths)

        assert infer_app_type(repofs) == expected

    def test_labels(self):
        assert APP_TYPE_KSONNET == "ksonnet"
        assert APP_TYPE_HELM == "helm"
        assert APP_TYPE_KUSTOMIZE == "kustomize"
        assert APP_TYPE_DIRECTORY == "directory"

    def test_ksonnet_requires_files(self, repofs: RepoFS, write_tree):
        """Directories named like ksonnet files do not count."""
        write_tree("app.yaml/", "components/params.libsonnet/")

        assert infer_app_type(repofs) == APP_TYPE_DIRECTORY

    def test_kustomization_yaml_directory_does_not_count(self, repofs: RepoFS, write_tree):
        write_tree("kustomization.yaml/")

        assert infer_app_type(repofs) == APP_TYPE_DIRECTORY

    def test_chrooted_source(self, repofs: RepoFS, write_tree):
        write_tree("sources/chart/Chart.yaml", "kustomization.yaml")

        assert infer_app_type(repofs.chroot("sources/chart")) == APP_TYPE_HELM
        assert infer_app_type(repofs) == APP_TYPE_KUSTOMIZE

    def test_nested_markers_ignored(self, repofs: RepoFS, write_tree):
        write_tree("charts/sub/Chart.yaml")

        assert infer_app_type(repofs) == APP_TYPE_DIRECTORY
