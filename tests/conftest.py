# ABOUTME: Pytest fixtures and configuration for Autopilot MCP Server tests
# ABOUTME: Provides repository, settings, safety and context fixtures

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from autopilot_mcp.apps.models import Kustomization
from autopilot_mcp.config import RepoSettings, SecuritySettings, ServerSettings
from autopilot_mcp.utils.repofs import RepoFS
from autopilot_mcp.utils.safety import SafetyGuard

FAKE_MANIFESTS = b"apiVersion: v1\nkind: ConfigMap\nmetadata:\n  name: foo\n"


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    """Empty repository checkout."""
    root = tmp_path / "repo"
    root.mkdir()
    return root


@pytest.fixture
def repofs(repo_root: Path) -> RepoFS:
    return RepoFS(repo_root)


@pytest.fixture
def repo_settings(repo_root: Path) -> RepoSettings:
    return RepoSettings(repo_root=repo_root)


@pytest.fixture
def fake_render() -> MagicMock:
    """Renderer double returning fixed manifests."""
    return MagicMock(return_value=FAKE_MANIFESTS)


@pytest.fixture
def write_tree(repo_root: Path):
    """Create files (and empty directories for paths ending in '/') under the repo root."""

    def _write(*paths: str, content: bytes = b"") -> None:
        for rel in paths:
            target = repo_root / rel
            if rel.endswith("/"):
                target.mkdir(parents=True, exist_ok=True)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(content)

    return _write


@pytest.fixture
def remote_base() -> Kustomization:
    return Kustomization(resources=["github.com/owner/repo?ref=v1.2.3"])


@pytest.fixture
def mock_security_settings() -> SecuritySettings:
    """Security settings allowing writes and deletion."""
    return SecuritySettings(
        read_only=False,
        disable_destructive=False,
        audit_log=None,
        rate_limit_calls=100,
        rate_limit_window=60,
    )


@pytest.fixture
def read_only_security_settings() -> SecuritySettings:
    return SecuritySettings(
        read_only=True,
        disable_destructive=True,
        audit_log=None,
        rate_limit_calls=100,
        rate_limit_window=60,
    )


@pytest.fixture
def mock_server_settings(
    repo_settings: RepoSettings,
    mock_security_settings: SecuritySettings,
) -> ServerSettings:
    return ServerSettings(repo=repo_settings, security=mock_security_settings)


@pytest.fixture
def safety_guard(mock_security_settings: SecuritySettings) -> SafetyGuard:
    return SafetyGuard(mock_security_settings)


@pytest.fixture
def read_only_safety_guard(read_only_security_settings: SecuritySettings) -> SafetyGuard:
    return SafetyGuard(read_only_security_settings)


@pytest.fixture
def mock_context() -> MagicMock:
    """Create a mock MCP context."""
    ctx = MagicMock()
    ctx.request_id = "test-request-123"
    ctx.report_progress = AsyncMock()
    return ctx
