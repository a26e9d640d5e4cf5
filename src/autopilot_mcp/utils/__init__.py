# ABOUTME: Utilities package initialization for Autopilot MCP Server
# ABOUTME: Contains shared utilities for filesystem access, safety, and logging

"""
Autopilot MCP Utilities Package

Shared utilities:
    - repofs.py: Chrooted access to the repository checkout
    - safety.py: Confirmation patterns and destructive operation guards
    - logging.py: Structured logging with correlation IDs
"""
