# ABOUTME: Builds the in-memory description of an application to install
# ABOUTME: Validates creation options and prepares base, overlay and metadata

"""
Application descriptor construction.

build_app() turns creation options into a KustApp: the base kustomization,
the project overlay, the metadata record and, for flat installations, the
rendered manifest and optional namespace. Nothing is written to disk here;
see materializer.create_files() for that.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from autopilot_mcp.apps.errors import (
    EmptyAppNameError,
    EmptyAppSpecifierError,
    EmptyProjectNameError,
    RenderError,
    UnknownInstallationModeError,
)
from autopilot_mcp.apps.models import (
    BASE_REFERENCE,
    INSTALL_FILE,
    NAMESPACE_FILE,
    AppConfig,
    CreateOptions,
    InstallationMode,
    Kustomization,
    Namespace,
    check_path_segment,
    generate_namespace,
)
from autopilot_mcp.apps.render import KustomizeRenderer
from autopilot_mcp.config import RepoSettings

if TYPE_CHECKING:
    from autopilot_mcp.apps.render import Renderer

logger = structlog.get_logger(__name__)

# Installing into "default" never needs a namespace manifest.
DEFAULT_NAMESPACE = "default"


@dataclass
class KustApp:
    """An application described as a base plus one project overlay."""

    name: str
    user_given_name: str
    installation_mode: InstallationMode
    base: Kustomization
    overlay: Kustomization
    config: AppConfig
    manifests: bytes | None = None
    namespace: Namespace | None = None


def _parse_mode(mode: str) -> InstallationMode:
    if mode == "":
        return InstallationMode.NORMAL
    try:
        return InstallationMode(mode)
    except ValueError:
        raise UnknownInstallationModeError(mode) from None


def build_app(
    opts: CreateOptions,
    project_name: str,
    src_repo_url: str = "",
    src_target_revision: str = "",
    *,
    render: Renderer | None = None,
    settings: RepoSettings | None = None,
) -> KustApp:
    """
    Build the descriptor of an application to install into a project.

    Args:
        opts: Creation options (name, source specifier, mode, destination)
        project_name: Project the overlay is created for
        src_repo_url: URL of the repository the tree lives in
        src_target_revision: Revision of that repository
        render: Manifest renderer for flat installations. Defaults to a
            KustomizeRenderer configured from settings.
        settings: Repository layout. Defaults to RepoSettings().

    Raises:
        EmptyAppSpecifierError, EmptyAppNameError, EmptyProjectNameError,
        InvalidNameError, UnknownInstallationModeError: On invalid options.
        RenderError: If the flat manifest cannot be built.
    """
    if not opts.app_specifier:
        raise EmptyAppSpecifierError()
    if not opts.app_name:
        raise EmptyAppNameError()
    if not project_name:
        raise EmptyProjectNameError()
    check_path_segment("app", opts.app_name)
    check_path_segment("project", project_name)

    mode = _parse_mode(opts.installation_mode)
    settings = settings or RepoSettings()

    manifests: bytes | None = None
    namespace: Namespace | None = None
    overlay = Kustomization(resources=[BASE_REFERENCE])

    if mode is InstallationMode.FLAT:
        if render is None:
            render = KustomizeRenderer(settings.kustomize_binary, settings.render_timeout)

        logger.info("Rendering flat manifests", app=opts.app_name, specifier=opts.app_specifier)
        try:
            manifests = render(Kustomization(resources=[opts.app_specifier]))
        except RenderError:
            raise
        except Exception as e:
            raise RenderError(opts.app_specifier, str(e)) from e
        base = Kustomization(resources=[INSTALL_FILE])

        if opts.dest_namespace and opts.dest_namespace != DEFAULT_NAMESPACE:
            namespace = generate_namespace(opts.dest_namespace)
            overlay.resources.append(NAMESPACE_FILE)
    else:
        base = Kustomization(resources=[opts.app_specifier])

    config = AppConfig(
        app_name=opts.app_name,
        user_given_name=opts.app_name,
        dest_namespace=opts.dest_namespace,
        dest_server=opts.dest_server,
        src_path="/".join((settings.apps_dir, opts.app_name, settings.overlays_dir, project_name)),
        src_repo_url=src_repo_url,
        src_target_revision=src_target_revision,
    )

    return KustApp(
        name=opts.app_name,
        user_given_name=opts.app_name,
        installation_mode=mode,
        base=base,
        overlay=overlay,
        config=config,
        manifests=manifests,
        namespace=namespace,
    )
