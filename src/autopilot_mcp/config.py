# ABOUTME: Configuration management for Autopilot MCP Server
# ABOUTME: Handles repository layout, security modes, and server settings

"""
Configuration management using pydantic-settings.

=============================================================================
WHAT IS THIS FILE?
=============================================================================

This module holds every setting the server and the application core read:

1. WHERE the GitOps repository checkout lives and how it is laid out
   (apps directory, base/overlays directory names)
2. HOW applications are rendered and compared (kustomize binary, timeout,
   base comparison strictness)
3. WHAT the MCP client is allowed to do (read-only, destructive operations,
   rate limiting, audit log)

=============================================================================
THREE CONFIGURATION CLASSES
=============================================================================

1. RepoSettings: Repository layout and application handling (AUTOPILOT_*)
2. SecuritySettings: Safety controls shared with SafetyGuard (MCP_*)
3. ServerSettings: Top-level container (AUTOPILOT_MCP_*), nests the other two

=============================================================================
ENVIRONMENT VARIABLE MAPPING
=============================================================================

Repository (AUTOPILOT_ prefix):
    AUTOPILOT_REPO_ROOT         -> Path of the repository checkout (default: .)
    AUTOPILOT_APPS_DIR          -> Directory holding applications (default: apps)
    AUTOPILOT_BASE_DIR          -> Name of each app's base directory (default: base)
    AUTOPILOT_OVERLAYS_DIR      -> Name of each app's overlays directory (default: overlays)
    AUTOPILOT_BASE_COMPARISON   -> strict | reference (default: strict)
    AUTOPILOT_KUSTOMIZE_BINARY  -> kustomize executable (default: kustomize)
    AUTOPILOT_RENDER_TIMEOUT    -> Seconds allowed for one render (default: 120)

Security settings (MCP_ prefix):
    MCP_READ_ONLY           -> Block all write operations (default: true)
    MCP_DISABLE_DESTRUCTIVE -> Block delete operations (default: true)
    MCP_AUDIT_LOG           -> Path to audit log file
    MCP_RATE_LIMIT_CALLS    -> Max operations per window (default: 100)
    MCP_RATE_LIMIT_WINDOW   -> Rate limit window in seconds (default: 60)
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path  # noqa: TC003 - Required at runtime for Pydantic
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# REPOSITORY SETTINGS
# =============================================================================


class BaseComparison(str, Enum):
    """
    How strictly an existing base is compared against a new one.

    STRICT: resource lists must be identical, entry by entry.
    REFERENCE: resources are compared with URL query strings and fragments
    removed, so "github.com/owner/repo?ref=v1" and "github.com/owner/repo?ref=v2"
    refer to the same application.
    """

    STRICT = "strict"
    REFERENCE = "reference"


class RepoSettings(BaseSettings):
    """
    Layout of the GitOps repository and application handling options.

    The tree managed under these settings looks like:

        <repo_root>/<apps_dir>/<app>/<base_dir>/kustomization.yaml
        <repo_root>/<apps_dir>/<app>/<overlays_dir>/<project>/kustomization.yaml
        <repo_root>/<apps_dir>/<app>/<overlays_dir>/<project>/config.json
    """

    model_config = SettingsConfigDict(env_prefix="AUTOPILOT_", extra="ignore")

    repo_root: Path = Field(
        default=Path("."),
        description="Path of the GitOps repository checkout",
    )
    # Every filesystem operation is chrooted here. Paths written into
    # config.json are relative to this root.

    apps_dir: str = Field(default="apps", description="Directory holding applications")
    base_dir: str = Field(default="base", description="Name of an application's base directory")
    overlays_dir: str = Field(
        default="overlays",
        description="Name of an application's overlays directory",
    )

    base_comparison: BaseComparison = Field(
        default=BaseComparison.STRICT,
        description="Strictness used when checking a new base against an existing one",
    )

    kustomize_binary: str = Field(
        default="kustomize",
        description="kustomize executable used to render flat installations",
    )
    render_timeout: int = Field(
        default=120,
        gt=0,
        description="Seconds allowed for a single kustomize build",
    )
    # A timed out build is retried (see apps/render.py), so the worst case
    # is roughly three times this value.

    @field_validator("apps_dir", "base_dir", "overlays_dir")
    @classmethod
    def validate_dir_name(cls, v: str) -> str:
        """Strip surrounding slashes and reject empty or parent-relative names."""
        v = v.strip("/")
        if not v or ".." in v.split("/"):
            raise ValueError(f"invalid directory name: '{v}'")
        return v


# =============================================================================
# SECURITY SETTINGS
# =============================================================================


class SecuritySettings(BaseSettings):
    """
    Security-related configuration.

    Layer 1: MCP_READ_ONLY=true (default)
        - Blocks application creation and deletion
        - Listing and type inference stay available

    Layer 2: MCP_DISABLE_DESTRUCTIVE=true (default)
        - Even with writes enabled, blocks application deletion

    Layer 3: Rate limiting (MCP_RATE_LIMIT_*)
        - Prevents runaway loops from hammering the repository

    Layer 4: Confirmation (in SafetyGuard)
        - Deletion requires confirm=true AND confirm_name matching the app
    """

    model_config = SettingsConfigDict(env_prefix="MCP_")

    read_only: bool = Field(
        default=True,
        description="Block all write operations when true",
    )

    disable_destructive: bool = Field(
        default=True,
        description="Block delete operations when true",
    )

    audit_log: Path | None = Field(
        default=None,
        description="Path to audit log file",
    )
    # JSON lines, one entry per operation. When None, audit entries go
    # through structlog to stdout.

    rate_limit_calls: int = Field(
        default=100,
        description="Maximum operations per window",
    )

    rate_limit_window: int = Field(
        default=60,
        description="Rate limit window in seconds",
    )


# =============================================================================
# MAIN SERVER SETTINGS
# =============================================================================


class ServerSettings(BaseSettings):
    """
    Main server configuration.

    USAGE:
    ------
        settings = load_settings()
        settings.repo.apps_dir        # "apps"
        settings.security.read_only   # True
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTOPILOT_MCP_",
        env_nested_delimiter="__",
        # AUTOPILOT_MCP_REPO__APPS_DIR=applications also works
        extra="ignore",
        populate_by_name=True,
    )

    server_name: str = Field(
        default="autopilot-mcp",
        description="MCP server name",
    )

    server_version: str = Field(
        default="0.1.0",
        description="MCP server version",
    )

    log_level: Annotated[str, Field(pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")] = Field(
        default="INFO",
        description="Logging level",
    )

    json_logs: bool = Field(
        default=False,
        description="Render log lines as JSON instead of console output",
    )

    repo: RepoSettings = Field(default_factory=RepoSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)


# =============================================================================
# SETTINGS LOADER
# =============================================================================


def load_settings() -> ServerSettings:
    """
    Load settings from environment with validation.

    If AUTOPILOT_MCP_ENV_FILE is set, additional variables are read from
    that file. Useful for pointing a local server at a scratch checkout:

        AUTOPILOT_REPO_ROOT=/tmp/gitops
        MCP_READ_ONLY=false

    Raises:
        pydantic.ValidationError: If configuration is invalid.
    """
    return ServerSettings(
        _env_file=os.environ.get("AUTOPILOT_MCP_ENV_FILE"),
    )
