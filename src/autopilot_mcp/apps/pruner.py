# ABOUTME: Removes an application from a project in the repository tree
# ABOUTME: Deletes the project overlay and the whole app once no overlay is left

"""
Application removal.

Two layouts are handled:

    kustomize apps:  apps/<app>/base + apps/<app>/overlays/<project>
    directory apps:  apps/<app>/<project>

In both cases only the project's directory is removed, unless it is the last
one, in which case the whole apps/<app> directory goes with it. Removing an
application that is not installed on the project does nothing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from autopilot_mcp.apps.errors import EmptyAppNameError, EmptyProjectNameError
from autopilot_mcp.apps.models import check_path_segment
from autopilot_mcp.config import RepoSettings

if TYPE_CHECKING:
    from autopilot_mcp.utils.repofs import RepoFS

logger = structlog.get_logger(__name__)


def delete_from_project(
    repofs: RepoFS,
    app_name: str,
    project_name: str,
    settings: RepoSettings | None = None,
) -> str | None:
    """
    Remove an application's footprint from a project.

    Returns:
        The repository-relative path that was removed, or None if the
        application was not installed on the project.

    Raises:
        EmptyAppNameError, EmptyProjectNameError, InvalidNameError: If a name
            is empty or is not a single path segment.
        OSError: If the filesystem refuses the removal. A partially removed
            tree can be pruned again.
    """
    if not app_name:
        raise EmptyAppNameError()
    if not project_name:
        raise EmptyProjectNameError()
    check_path_segment("app", app_name)
    check_path_segment("project", project_name)

    settings = settings or RepoSettings()
    app_dir = repofs.join(settings.apps_dir, app_name)
    overlays_dir = repofs.join(app_dir, settings.overlays_dir)

    if repofs.is_dir(overlays_dir):
        overlay = repofs.join(overlays_dir, project_name)
        if not repofs.exists(overlay):
            logger.debug("Application not installed on project", app=app_name, project=project_name)
            return None

        if repofs.read_dir(overlays_dir) == [project_name]:
            # Last overlay, the base is orphaned.
            repofs.remove_all(app_dir)
            logger.info("Removed application", app=app_name, path=app_dir)
            return app_dir

        repofs.remove_all(overlay)
        logger.info("Removed application overlay", app=app_name, project=project_name, path=overlay)
        return overlay

    project_dir = repofs.join(app_dir, project_name)
    if not repofs.exists(project_dir):
        logger.debug("Application not installed on project", app=app_name, project=project_name)
        return None

    repofs.remove_all(project_dir)
    if not repofs.read_dir(app_dir):
        repofs.remove_all(app_dir)
        logger.info("Removed application", app=app_name, path=app_dir)
        return app_dir

    logger.info("Removed application directory", app=app_name, project=project_name, path=project_dir)
    return project_dir
