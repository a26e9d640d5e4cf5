# ABOUTME: Writes an application descriptor into the repository tree
# ABOUTME: Detects base collisions and existing installations before writing

"""
Materialization of a KustApp into base and overlay files.

create_files() runs a fixed sequence of steps:

    1. existing base with different resources  -> AppCollisionWithExistingBaseError
    2. overlay for this project already present -> AppAlreadyInstalledOnProjectError
    3. base/kustomization.yaml
    4. base/install.yaml                (flat installations only)
    5. overlays/<project>/kustomization.yaml
    6. overlays/<project>/config.json
    7. overlays/<project>/namespace.yaml (when a namespace was generated)

Every write goes through write_file(), which never clobbers an existing file.
Nothing is rolled back on failure: a failed run leaves the files written so
far in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from urllib.parse import urlsplit, urlunsplit

import structlog
import yaml
from pydantic import ValidationError

from autopilot_mcp.apps.errors import (
    AppAlreadyInstalledOnProjectError,
    AppCollisionWithExistingBaseError,
    FileReadError,
    FileWriteError,
)
from autopilot_mcp.apps.models import (
    CONFIG_FILE,
    INSTALL_FILE,
    KUSTOMIZATION_FILE,
    NAMESPACE_FILE,
    Kustomization,
)
from autopilot_mcp.config import BaseComparison, RepoSettings
from autopilot_mcp.utils.repofs import dump_yamls

if TYPE_CHECKING:
    from autopilot_mcp.apps.builder import KustApp
    from autopilot_mcp.utils.repofs import RepoFS

logger = structlog.get_logger(__name__)


@dataclass
class MaterializeResult:
    """Absolute paths of the files a create_files() run touched."""

    created: list[str] = field(default_factory=list)
    existing: list[str] = field(default_factory=list)

    def record(self, path: str, existed: bool) -> None:
        (self.existing if existed else self.created).append(path)


def write_file(repofs: RepoFS, path: str, name: str, data: bytes) -> bool:
    """
    Create a file unless it already exists.

    An existing file is left untouched, whatever its content.

    Args:
        repofs: Repository filesystem
        path: Repository-relative target path
        name: Logical file name used in log lines and errors
        data: File content

    Returns:
        True if the file already existed, False if it was created.

    Raises:
        FileWriteError: If writing or reading back fails.
    """
    abs_path = str(repofs.abs_path(path))
    try:
        exists = repofs.check_exists_or_write(path, data)
        same = not exists or repofs.read_file(path) == data
    except OSError as e:
        raise FileWriteError(name, abs_path, e) from e

    if not same:
        logger.warning("File exists with different content, keeping it", name=name, path=abs_path)
    elif exists:
        logger.info("File exists", name=name, path=abs_path)
    else:
        logger.info("Created file", name=name, path=abs_path)
    return exists


def _normalize_reference(resource: str) -> str:
    parts = urlsplit(resource)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def bases_match(
    existing: Kustomization,
    new: Kustomization,
    comparison: BaseComparison = BaseComparison.STRICT,
) -> bool:
    """Compare the resource lists of two bases under the given strictness."""
    if comparison is BaseComparison.REFERENCE:
        return [_normalize_reference(r) for r in existing.resources] == [
            _normalize_reference(r) for r in new.resources
        ]
    return existing.resources == new.resources


def _read_base(repofs: RepoFS, path: str) -> Kustomization | None:
    if not repofs.exists(path):
        return None

    abs_path = str(repofs.abs_path(path))
    try:
        return Kustomization.model_validate(repofs.read_yaml(path) or {})
    except (OSError, yaml.YAMLError, ValidationError) as e:
        raise FileReadError("base kustomization", abs_path, e) from e


def create_files(
    app: KustApp,
    repofs: RepoFS,
    project_name: str,
    settings: RepoSettings | None = None,
) -> MaterializeResult:
    """
    Write the base and project overlay of an application.

    Raises:
        AppCollisionWithExistingBaseError: A different base is already installed
            under the same application name.
        AppAlreadyInstalledOnProjectError: The overlay for this project exists.
        FileReadError: The existing base cannot be parsed.
        FileWriteError: A file cannot be written.
    """
    settings = settings or RepoSettings()
    result = MaterializeResult()

    app_path = repofs.join(settings.apps_dir, app.name)
    base_path = repofs.join(app_path, settings.base_dir)
    base_kustomization_path = repofs.join(base_path, KUSTOMIZATION_FILE)
    overlay_path = repofs.join(app_path, settings.overlays_dir, project_name)
    overlay_kustomization_path = repofs.join(overlay_path, KUSTOMIZATION_FILE)

    existing_base = _read_base(repofs, base_kustomization_path)
    if existing_base is not None:
        logger.debug("Application with the same name exists, checking for collisions", app=app.name)
        if not bases_match(existing_base, app.base, settings.base_comparison):
            raise AppCollisionWithExistingBaseError(app.name)

    if repofs.exists(overlay_kustomization_path):
        raise AppAlreadyInstalledOnProjectError(app.name, project_name)

    if existing_base is None:
        existed = write_file(
            repofs,
            base_kustomization_path,
            "base kustomization",
            dump_yamls(app.base.to_document()),
        )
        result.record(str(repofs.abs_path(base_kustomization_path)), existed)
    else:
        result.record(str(repofs.abs_path(base_kustomization_path)), True)

    if app.manifests is not None:
        install_path = repofs.join(base_path, INSTALL_FILE)
        existed = write_file(repofs, install_path, "manifests", app.manifests)
        result.record(str(repofs.abs_path(install_path)), existed)

    existed = write_file(
        repofs,
        overlay_kustomization_path,
        "overlay kustomization",
        dump_yamls(app.overlay.to_document()),
    )
    result.record(str(repofs.abs_path(overlay_kustomization_path)), existed)

    config_path = repofs.join(overlay_path, CONFIG_FILE)
    existed = write_file(repofs, config_path, "config", app.config.to_json())
    result.record(str(repofs.abs_path(config_path)), existed)

    if app.namespace is not None:
        namespace_path = repofs.join(overlay_path, NAMESPACE_FILE)
        existed = write_file(
            repofs,
            namespace_path,
            "application namespace",
            dump_yamls(app.namespace.to_document()),
        )
        result.record(str(repofs.abs_path(namespace_path)), existed)

    logger.info(
        "Application files written",
        app=app.name,
        project=project_name,
        created=len(result.created),
        existing=len(result.existing),
    )
    return result
