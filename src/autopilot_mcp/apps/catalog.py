# ABOUTME: Lists applications installed in the repository tree
# ABOUTME: Reads the config.json metadata of every project overlay

"""Application listing from overlay metadata."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from autopilot_mcp.apps.models import CONFIG_FILE, AppConfig
from autopilot_mcp.config import RepoSettings

if TYPE_CHECKING:
    from autopilot_mcp.utils.repofs import RepoFS

logger = structlog.get_logger(__name__)


@dataclass
class InstalledApp:
    """An application overlay found in the repository."""

    name: str
    project: str
    config: AppConfig


def list_apps(
    repofs: RepoFS,
    project_name: str | None = None,
    settings: RepoSettings | None = None,
) -> list[InstalledApp]:
    """
    List installed applications, optionally restricted to one project.

    Overlays without a readable config.json are skipped with a warning.
    Results are ordered by application name, then project.
    """
    settings = settings or RepoSettings()
    if not repofs.is_dir(settings.apps_dir):
        return []

    apps: list[InstalledApp] = []
    for app_name in repofs.read_dir(settings.apps_dir):
        overlays_dir = repofs.join(settings.apps_dir, app_name, settings.overlays_dir)
        if not repofs.is_dir(overlays_dir):
            continue

        for project in repofs.read_dir(overlays_dir):
            if project_name is not None and project != project_name:
                continue

            config_path = repofs.join(overlays_dir, project, CONFIG_FILE)
            if not repofs.is_file(config_path):
                logger.warning("Overlay has no config", app=app_name, project=project)
                continue

            try:
                config = AppConfig.model_validate_json(repofs.read_file(config_path))
            except (OSError, ValidationError) as e:
                logger.warning(
                    "Skipping unreadable config", app=app_name, project=project, error=str(e)
                )
                continue

            apps.append(InstalledApp(name=app_name, project=project, config=config))

    return apps
