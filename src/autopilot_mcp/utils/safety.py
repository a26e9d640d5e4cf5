# ABOUTME: Safety utilities for Autopilot MCP Server
# ABOUTME: Read-only and destructive operation guards, confirmation and rate limiting

"""
Guards placed in front of every change to the GitOps repository.

An MCP client is an automated caller: it can loop, misread a tool
description or retry blindly. Each tool therefore asks SafetyGuard first
and returns the guard's message instead of touching the tree when the
answer is not None.

    read        list_applications, infer_application_type
    write       create_application
    destructive delete_application
"""

from __future__ import annotations

import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from autopilot_mcp.config import SecuritySettings

logger = structlog.get_logger(__name__)


@dataclass
class ConfirmationRequired:
    """
    Returned instead of deleting when the caller has not confirmed.

    The caller must repeat the request with confirm=true and confirm_name set
    to the target. Tools may add context (the project being pruned) through
    details before formatting.
    """

    operation: str
    target: str
    impact: str
    confirmation_instructions: str
    details: dict[str, Any] = field(default_factory=dict)

    def format_message(self) -> str:
        """Render the request as plain text for the MCP client."""
        lines = [
            f"CONFIRMATION REQUIRED: {self.operation}",
            "",
            f"Target: {self.target}",
            f"Impact: {self.impact}",
        ]

        if self.details:
            lines.append("")
            lines.append("Details:")
            lines.extend(f"  {key}: {value}" for key, value in self.details.items())

        lines.extend(["", self.confirmation_instructions])
        return "\n".join(lines)


@dataclass
class OperationBlocked:
    """An operation refused by configuration, naming the setting responsible."""

    operation: str
    reason: str
    setting: str

    def format_message(self) -> str:
        """Render the refusal, including how to lift it."""
        return (
            f"OPERATION BLOCKED: {self.operation}\n"
            f"Reason: {self.reason}\n"
            f"Setting: {self.setting}\n"
            f"To enable: Set {self.setting}=false in server configuration"
        )


class RateLimiter:
    """
    Sliding-window call counter, one window per key.

    Keys are "<kind>:<operation>" (e.g. "write:create_application"), so a
    burst of listing calls does not starve application creation.
    """

    def __init__(self, max_calls: int = 100, window_seconds: int = 60) -> None:
        """
        Args:
            max_calls: Calls allowed per key within one window
            window_seconds: Length of the sliding window
        """
        self._max_calls = max_calls
        self._window = window_seconds
        self._calls: dict[str, list[float]] = defaultdict(list)

    def check(self, key: str) -> bool:
        """
        Record a call for key if the window has room.

        Timestamps older than the window are dropped first. A refused call is
        not recorded.

        Returns:
            True if allowed, False if the window is already full.
        """
        now = time.time()
        self._calls[key] = [t for t in self._calls[key] if now - t < self._window]

        if len(self._calls[key]) >= self._max_calls:
            logger.warning("Rate limit exceeded", key=key, calls=len(self._calls[key]))
            return False

        self._calls[key].append(now)
        return True

    def reset(self, key: str | None = None) -> None:
        """Forget the calls of one key, or of every key when key is None."""
        if key:
            self._calls.pop(key, None)
        else:
            self._calls.clear()


class SafetyGuard:
    """
    Permission checks for MCP tools, driven by SecuritySettings.

    Each check returns None when the operation may proceed, or a response
    object (OperationBlocked, ConfirmationRequired) whose format_message()
    the tool returns verbatim.
    """

    # Shown to the caller in a ConfirmationRequired response.
    IMPACTS = {
        "delete_application": (
            "The application overlay is removed from the project; "
            "the base is removed too when no other project uses it"
        ),
    }

    def __init__(self, settings: SecuritySettings) -> None:
        self._settings = settings
        self._rate_limiter = RateLimiter(
            max_calls=settings.rate_limit_calls,
            window_seconds=settings.rate_limit_window,
        )

    def check_read_operation(self, operation: str) -> OperationBlocked | None:
        """
        Check a read-only operation.

        Reads never modify the tree, so only the rate limit applies, even in
        read-only mode.
        """
        if not self._rate_limiter.check(f"read:{operation}"):
            return OperationBlocked(
                operation=operation,
                reason="Rate limit exceeded",
                setting="MCP_RATE_LIMIT_CALLS",
            )
        return None

    def check_write_operation(self, operation: str) -> OperationBlocked | None:
        """
        Check an operation that adds files to the repository.

        Blocked in read-only mode (MCP_READ_ONLY, the default) and when the
        write rate limit is exhausted.
        """
        if self._settings.read_only:
            return OperationBlocked(
                operation=operation,
                reason="Server is running in read-only mode",
                setting="MCP_READ_ONLY",
            )

        if not self._rate_limiter.check(f"write:{operation}"):
            return OperationBlocked(
                operation=operation,
                reason="Rate limit exceeded",
                setting="MCP_RATE_LIMIT_CALLS",
            )

        return None

    def check_destructive_operation(
        self,
        operation: str,
        target: str,
        confirmed: bool = False,
        confirm_name: str | None = None,
    ) -> OperationBlocked | ConfirmationRequired | None:
        """
        Check an operation that removes files from the repository.

        Runs the write checks, then MCP_DISABLE_DESTRUCTIVE, then the
        confirmation handshake.

        Args:
            operation: Operation name, also the key into IMPACTS
            target: Name the caller must echo back in confirm_name
            confirmed: Whether the caller set confirm=true
            confirm_name: Name confirmation

        Returns:
            OperationBlocked if blocked, ConfirmationRequired if confirmation
            is missing or does not match, None if allowed
        """
        write_check = self.check_write_operation(operation)
        if write_check:
            return write_check

        if self._settings.disable_destructive:
            return OperationBlocked(
                operation=operation,
                reason="Destructive operations are disabled",
                setting="MCP_DISABLE_DESTRUCTIVE",
            )

        if not confirmed or confirm_name != target:
            return ConfirmationRequired(
                operation=operation,
                target=target,
                impact=self.IMPACTS.get(operation, "This operation may have significant impact"),
                confirmation_instructions=(
                    f"To proceed, set confirm=true AND confirm_name='{target}'"
                ),
            )

        return None
