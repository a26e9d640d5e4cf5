# ABOUTME: Structured logging with correlation IDs for Autopilot MCP Server
# ABOUTME: Configures structlog and records an audit trail of repository changes

"""
Structured logging with correlation IDs and audit trails.

=============================================================================
WHAT IS THIS FILE?
=============================================================================

1. STRUCTURED LOGGING: every log line is an event name plus key/value pairs,
   rendered as JSON (for aggregators) or as colored console text.

       logger.info("Created file", name="config", path="/repo/apps/a/...")

2. CORRELATION IDs: one short identifier attached to every line produced
   while serving a single tool call, so the lines of "create_application"
   for app A are easy to separate from a concurrent "list_applications".

3. AUDIT LOGGING: one entry per tool call recording what was attempted on
   which application and how it ended (success, blocked, error).

=============================================================================
CONTEXT VARIABLES
=============================================================================

The correlation ID lives in a ContextVar, so each asyncio task serving a
request sees its own value without threading it through every function.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import MutableMapping
    from pathlib import Path


# =============================================================================
# CORRELATION ID MANAGEMENT
# =============================================================================

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """
    Get current correlation ID or generate new one.

    Code running outside of a request (startup, tests) still gets an ID, so
    every log line is correlatable.

    Returns:
        8-character correlation ID string (first 8 characters of a UUID4).
    """
    cid = correlation_id.get()
    if not cid:
        cid = str(uuid.uuid4())[:8]
        correlation_id.set(cid)
    return cid


def set_correlation_id(cid: str) -> None:
    """
    Set correlation ID for current context.

    Called at the start of each MCP tool. Passing "" makes the next
    get_correlation_id() call generate a fresh one.
    """
    correlation_id.set(cid)


def add_correlation_id(
    logger: structlog.types.WrappedLogger,  # noqa: ARG001 - Required by structlog Processor API
    method_name: str,  # noqa: ARG001 - Required by structlog Processor API
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """structlog processor adding "correlation_id" to every event."""
    event_dict["correlation_id"] = get_correlation_id()
    return event_dict


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
) -> None:
    """
    Configure structured logging.

    Processor pipeline:
        merge_contextvars -> add_log_level -> TimeStamper(iso)
        -> add_correlation_id -> JSONRenderer | ConsoleRenderer

    Args:
        level: Minimum level name ("DEBUG", "INFO", ...). Unknown names fall
            back to INFO.
        json_output: JSON lines when True, colored console output otherwise.
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_correlation_id,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        context_class=dict,
        # MCP stdio transport owns stdout, log lines go to stderr.
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# =============================================================================
# AUDIT LOGGER
# =============================================================================


class AuditLogger:
    """
    Audit logger for repository changes.

    Every entry records:
    - timestamp: UTC ISO 8601
    - correlation_id: request identifier
    - action: tool name ("create_application", "delete_application", ...)
    - target: application and project ("my-app@production")
    - result: "success", "created", "deleted", "noop", "blocked" or "error"
    - details: optional extra context

    EXAMPLE ENTRIES:
    ----------------
    {"timestamp": "2025-01-15T10:30:00+00:00", "correlation_id": "abc12345",
     "action": "create_application", "target": "nginx@staging", "result": "created",
     "details": {"mode": "normal", "files": 3}}

    {"timestamp": "2025-01-15T10:31:02+00:00", "correlation_id": "def67890",
     "action": "delete_application", "target": "nginx@staging", "result": "blocked",
     "details": {"reason": "Destructive operations are disabled"}}
    """

    def __init__(self, log_path: Path | None = None) -> None:
        """
        Args:
            log_path: JSON-lines file to append entries to, or None to emit
                them through structlog.
        """
        self._log_path = log_path
        self._logger = structlog.get_logger("audit")

    def log(
        self,
        action: str,
        target: str,
        result: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Record one auditable action."""
        entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "correlation_id": get_correlation_id(),
            "action": action,
            "target": target,
            "result": result,
        }
        if details:
            entry["details"] = details

        if self._log_path:
            with self._log_path.open("a") as f:
                f.write(json.dumps(entry) + "\n")
        else:
            self._logger.info(
                "audit",
                action=action,
                target=target,
                result=result,
                details=details,
            )

    def log_read(self, action: str, target: str) -> None:
        self.log(action, target, "success")

    def log_write(
        self,
        action: str,
        target: str,
        result: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Record a change to the repository tree.

        Example:
            audit_logger.log_write(
                "create_application", "nginx@staging", "created", {"files": 3}
            )
        """
        self.log(action, target, result, details)

    def log_blocked(self, action: str, target: str, reason: str) -> None:
        """Record an operation refused by SafetyGuard."""
        self.log(action, target, "blocked", {"reason": reason})

    def log_error(self, action: str, target: str, error: str) -> None:
        """Record an operation that failed, e.g. a base collision."""
        self.log(action, target, "error", {"error": error})
