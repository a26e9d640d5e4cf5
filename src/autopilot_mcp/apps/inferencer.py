# ABOUTME: Detects the configuration format of an application source directory
# ABOUTME: Ordered detection rules, first match wins, directory as fallback

"""Application type inference from a directory listing."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Callable

    from autopilot_mcp.utils.repofs import RepoFS

logger = structlog.get_logger(__name__)

APP_TYPE_KSONNET = "ksonnet"
APP_TYPE_HELM = "helm"
APP_TYPE_KUSTOMIZE = "kustomize"
APP_TYPE_DIRECTORY = "directory"


def _is_ksonnet(repofs: RepoFS) -> bool:
    return repofs.is_file("app.yaml") and repofs.is_file("components/params.libsonnet")


def _is_helm(repofs: RepoFS) -> bool:
    return repofs.exists("Chart.yaml")


def _is_kustomize(repofs: RepoFS) -> bool:
    return (
        repofs.is_file("kustomization.yaml")
        or repofs.is_file("kustomization.yml")
        or repofs.is_dir("Kustomization")
    )


# Checked in order; the first rule that matches decides the type.
DETECTION_RULES: tuple[tuple[str, Callable[[RepoFS], bool]], ...] = (
    (APP_TYPE_KSONNET, _is_ksonnet),
    (APP_TYPE_HELM, _is_helm),
    (APP_TYPE_KUSTOMIZE, _is_kustomize),
)


def infer_app_type(repofs: RepoFS) -> str:
    """
    Return the application type of the directory repofs is rooted at.

    Returns one of "ksonnet", "helm", "kustomize" or, when nothing matches,
    "directory" (plain manifests).
    """
    for app_type, matches in DETECTION_RULES:
        if matches(repofs):
            logger.debug("Inferred application type", root=str(repofs.root), app_type=app_type)
            return app_type

    logger.debug("Inferred application type", root=str(repofs.root), app_type=APP_TYPE_DIRECTORY)
    return APP_TYPE_DIRECTORY
