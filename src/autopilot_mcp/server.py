# ABOUTME: FastMCP server initialization and main entry point
# ABOUTME: Exposes application create/delete/list/infer tools over a GitOps repository

"""Autopilot MCP Server - application management in a GitOps repository."""

from __future__ import annotations

import sys
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import structlog
from mcp.server.fastmcp import Context, FastMCP
from pydantic import BaseModel, Field

from autopilot_mcp.apps import (
    AutopilotError,
    CreateOptions,
    build_app,
    create_files,
    delete_from_project,
    infer_app_type,
    list_apps,
)
from autopilot_mcp.config import ServerSettings, load_settings
from autopilot_mcp.utils.logging import AuditLogger, configure_logging, set_correlation_id
from autopilot_mcp.utils.repofs import PathOutsideRootError, RepoFS
from autopilot_mcp.utils.safety import ConfirmationRequired, SafetyGuard

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

MCPContext = Context[Any, Any]
logger = structlog.get_logger(__name__)

# Global state (initialized in lifespan)
_settings: ServerSettings | None = None
_repofs: RepoFS | None = None
_safety_guard: SafetyGuard | None = None
_audit_logger: AuditLogger | None = None


@asynccontextmanager
async def lifespan(_server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Load config, open the repository checkout, reset state on shutdown."""
    global _settings, _repofs, _safety_guard, _audit_logger

    _settings = load_settings()
    configure_logging(level=_settings.log_level, json_output=_settings.json_logs)
    _repofs = RepoFS(_settings.repo.repo_root)
    _safety_guard = SafetyGuard(_settings.security)
    _audit_logger = AuditLogger(_settings.security.audit_log)

    logger.info(
        "Autopilot MCP Server started",
        repo_root=str(_repofs.root),
        apps_dir=_settings.repo.apps_dir,
        read_only=_settings.security.read_only,
    )

    yield {"settings": _settings, "repofs": _repofs}

    _repofs = None
    logger.info("Autopilot MCP Server stopped")


mcp = FastMCP("autopilot-mcp", lifespan=lifespan)


def get_settings() -> ServerSettings:
    if not _settings:
        raise RuntimeError("Server not initialized")
    return _settings


def get_repofs() -> RepoFS:
    if not _repofs:
        raise RuntimeError("Server not initialized")
    return _repofs


def get_safety_guard() -> SafetyGuard:
    if not _safety_guard:
        raise RuntimeError("Server not initialized")
    return _safety_guard


def get_audit_logger() -> AuditLogger:
    if not _audit_logger:
        raise RuntimeError("Server not initialized")
    return _audit_logger


def _request_id(ctx: MCPContext) -> str:
    return ctx.request_id if hasattr(ctx, "request_id") else ""


# =============================================================================
# READ OPERATIONS
# =============================================================================


class ListApplicationsParams(BaseModel):
    """Parameters for list_applications tool."""

    project: str | None = Field(default=None, description="Only list apps installed on this project")


@mcp.tool()
async def list_applications(params: ListApplicationsParams, ctx: MCPContext) -> str:
    """
    List applications installed in the repository.

    Reads the config.json of every project overlay and reports where each
    application's source comes from.
    """
    set_correlation_id(_request_id(ctx))
    target = f"project={params.project}"

    blocked = get_safety_guard().check_read_operation("list_applications")
    if blocked:
        get_audit_logger().log_blocked("list_applications", target, blocked.reason)
        return blocked.format_message()

    apps = list_apps(get_repofs(), params.project, get_settings().repo)
    get_audit_logger().log_read("list_applications", target)

    if not apps:
        return "No applications found."

    lines = [f"Found {len(apps)} application(s):", ""]
    for app in apps:
        dest = app.config.dest_namespace or "-"
        lines.append(
            f"- {app.name} [{app.project}] "
            f"src={app.config.src_repo_url or '-'}@{app.config.src_target_revision or '-'} "
            f"dest={dest}"
        )
    return "\n".join(lines)


class InferApplicationTypeParams(BaseModel):
    """Parameters for infer_application_type tool."""

    path: str = Field(description="Repository-relative directory holding the application source")


@mcp.tool()
async def infer_application_type(params: InferApplicationTypeParams, ctx: MCPContext) -> str:
    """
    Detect whether a directory is a ksonnet, helm, kustomize or plain directory app.
    """
    set_correlation_id(_request_id(ctx))

    blocked = get_safety_guard().check_read_operation("infer_application_type")
    if blocked:
        get_audit_logger().log_blocked("infer_application_type", params.path, blocked.reason)
        return blocked.format_message()

    try:
        source = get_repofs().chroot(params.path)
    except PathOutsideRootError as e:
        get_audit_logger().log_error("infer_application_type", params.path, str(e))
        return str(e)

    if not source.root.is_dir():
        return f"Directory '{params.path}' not found in repository"

    app_type = infer_app_type(source)
    get_audit_logger().log_read("infer_application_type", params.path)
    return f"Application type of '{params.path}': {app_type}"


# =============================================================================
# WRITE OPERATIONS
# =============================================================================


class CreateApplicationParams(BaseModel):
    """Parameters for create_application tool."""

    app_name: str = Field(description="Application name")
    app_specifier: str = Field(
        description="Application source: a path, kustomize remote target or git URL"
    )
    project: str = Field(description="Project to install the application into")
    installation_mode: str = Field(
        default="normal",
        description="'normal' references the source, 'flat' stores rendered manifests",
    )
    dest_namespace: str = Field(default="", description="Destination namespace")
    dest_server: str = Field(default="", description="Destination cluster server URL")
    src_repo_url: str = Field(default="", description="URL of this GitOps repository")
    src_target_revision: str = Field(default="", description="Revision of this GitOps repository")


@mcp.tool()
async def create_application(params: CreateApplicationParams, ctx: MCPContext) -> str:
    """
    Create an application and install it on a project.

    Writes apps/<app>/base (once per application) and
    apps/<app>/overlays/<project>. Fails if an application with the same
    name but a different source exists, or if the application is already
    installed on the project.
    """
    set_correlation_id(_request_id(ctx))
    target = f"{params.app_name}@{params.project}"

    blocked = get_safety_guard().check_write_operation("create_application")
    if blocked:
        get_audit_logger().log_blocked("create_application", target, blocked.reason)
        return blocked.format_message()

    settings = get_settings()
    opts = CreateOptions(
        app_name=params.app_name,
        app_specifier=params.app_specifier,
        installation_mode=params.installation_mode,
        dest_namespace=params.dest_namespace,
        dest_server=params.dest_server,
    )

    try:
        app = build_app(
            opts,
            params.project,
            params.src_repo_url,
            params.src_target_revision,
            settings=settings.repo,
        )
        await ctx.report_progress(0, 1, f"Writing application {params.app_name}")
        result = create_files(app, get_repofs(), params.project, settings.repo)
    except (AutopilotError, PathOutsideRootError) as e:
        get_audit_logger().log_error("create_application", target, str(e))
        return str(e)

    get_audit_logger().log_write(
        "create_application",
        target,
        "created",
        {"mode": app.installation_mode.value, "files": len(result.created)},
    )

    lines = [
        f"Application '{params.app_name}' installed on project '{params.project}'.",
        f"Mode: {app.installation_mode.value}",
        "",
        "Created:",
    ]
    lines.extend(f"  {path}" for path in result.created)
    if result.existing:
        lines.extend(["", "Already present:"])
        lines.extend(f"  {path}" for path in result.existing)
    return "\n".join(lines)


# =============================================================================
# DESTRUCTIVE OPERATIONS
# =============================================================================


class DeleteApplicationParams(BaseModel):
    """Parameters for delete_application tool."""

    app_name: str = Field(min_length=1, description="Application name to remove")
    project: str = Field(min_length=1, description="Project to remove the application from")
    confirm: bool = Field(default=False, description="Must be true to execute deletion")
    confirm_name: str | None = Field(
        default=None, description="Type application name to confirm deletion"
    )


@mcp.tool()
async def delete_application(params: DeleteApplicationParams, ctx: MCPContext) -> str:
    """
    Remove an application from a project (DESTRUCTIVE).

    Requires confirm=true AND confirm_name matching the application name.
    When the project holds the application's last overlay, the base is
    removed as well.
    """
    set_correlation_id(_request_id(ctx))
    target = f"{params.app_name}@{params.project}"

    blocked = get_safety_guard().check_destructive_operation(
        "delete_application",
        params.app_name,
        confirmed=params.confirm,
        confirm_name=params.confirm_name,
    )
    if blocked:
        if isinstance(blocked, ConfirmationRequired):
            blocked.details = {"project": params.project}
            get_audit_logger().log_blocked("delete_application", target, "confirmation required")
        else:
            get_audit_logger().log_blocked("delete_application", target, blocked.reason)
        return blocked.format_message()

    try:
        removed = delete_from_project(
            get_repofs(), params.app_name, params.project, get_settings().repo
        )
    except (AutopilotError, OSError, PathOutsideRootError) as e:
        get_audit_logger().log_error("delete_application", target, str(e))
        return f"Failed to remove application '{params.app_name}': {e}"

    if removed is None:
        get_audit_logger().log_write("delete_application", target, "noop")
        return (
            f"Application '{params.app_name}' is not installed on project "
            f"'{params.project}', nothing to remove."
        )

    get_audit_logger().log_write("delete_application", target, "deleted", {"path": removed})
    return f"Application '{params.app_name}' removed from project '{params.project}'.\nRemoved: {removed}"


# =============================================================================
# MCP RESOURCES
# =============================================================================


@mcp.resource("autopilot://settings")
async def get_settings_resource() -> str:
    """Get repository layout and security settings."""
    settings = get_settings()
    repo = settings.repo
    sec = settings.security

    return (
        "Repository:\n"
        f"  Root: {get_repofs().root}\n"
        f"  Apps directory: {repo.apps_dir}\n"
        f"  Layout: {repo.apps_dir}/<app>/{repo.base_dir}, "
        f"{repo.apps_dir}/<app>/{repo.overlays_dir}/<project>\n"
        f"  Base comparison: {repo.base_comparison.value}\n"
        "Security:\n"
        f"  Read-only mode: {sec.read_only}\n"
        f"  Destructive operations disabled: {sec.disable_destructive}\n"
        f"  Rate limit: {sec.rate_limit_calls} calls per {sec.rate_limit_window}s"
    )


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================


def main() -> None:
    """Run the Autopilot MCP server."""
    configure_logging(level="INFO")
    logger.info("Autopilot MCP Server starting")

    try:
        mcp.run()
    except KeyboardInterrupt:
        logger.info("Server interrupted")
        sys.exit(0)
    except Exception as e:
        logger.error("Server error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
