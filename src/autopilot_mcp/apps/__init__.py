# ABOUTME: Application management package for Autopilot MCP Server
# ABOUTME: Builds, writes, inspects and removes applications in a GitOps tree

"""
Application management core.

    builder.py      - build_app(): options -> KustApp descriptor
    materializer.py - create_files(): KustApp -> base/overlay files
    inferencer.py   - infer_app_type(): directory -> ksonnet/helm/kustomize/directory
    pruner.py       - delete_from_project(): remove an app from a project
    catalog.py      - list_apps(): installed apps per project
    render.py       - KustomizeRenderer for flat installations
"""

from autopilot_mcp.apps.builder import KustApp, build_app
from autopilot_mcp.apps.catalog import InstalledApp, list_apps
from autopilot_mcp.apps.errors import (
    AppAlreadyInstalledOnProjectError,
    AppCollisionWithExistingBaseError,
    AppValidationError,
    AutopilotError,
    EmptyAppNameError,
    EmptyAppSpecifierError,
    EmptyProjectNameError,
    FileReadError,
    FileWriteError,
    InvalidNameError,
    RenderError,
    UnknownInstallationModeError,
)
from autopilot_mcp.apps.inferencer import (
    APP_TYPE_DIRECTORY,
    APP_TYPE_HELM,
    APP_TYPE_KSONNET,
    APP_TYPE_KUSTOMIZE,
    infer_app_type,
)
from autopilot_mcp.apps.materializer import MaterializeResult, create_files, write_file
from autopilot_mcp.apps.models import AppConfig, CreateOptions, InstallationMode, Kustomization
from autopilot_mcp.apps.pruner import delete_from_project
from autopilot_mcp.apps.render import KustomizeRenderer

__all__ = [
    "APP_TYPE_DIRECTORY",
    "APP_TYPE_HELM",
    "APP_TYPE_KSONNET",
    "APP_TYPE_KUSTOMIZE",
    "AppAlreadyInstalledOnProjectError",
    "AppCollisionWithExistingBaseError",
    "AppConfig",
    "AppValidationError",
    "AutopilotError",
    "CreateOptions",
    "EmptyAppNameError",
    "EmptyAppSpecifierError",
    "EmptyProjectNameError",
    "FileReadError",
    "FileWriteError",
    "InvalidNameError",
    "InstallationMode",
    "InstalledApp",
    "KustApp",
    "KustomizeRenderer",
    "Kustomization",
    "MaterializeResult",
    "RenderError",
    "UnknownInstallationModeError",
    "build_app",
    "create_files",
    "delete_from_project",
    "infer_app_type",
    "list_apps",
    "write_file",
]
