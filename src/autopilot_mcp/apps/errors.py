# ABOUTME: Exception hierarchy for application management
# ABOUTME: Validation, collision, file I/O and rendering failures

"""
Errors raised by the application core.

Every error derives from AutopilotError so the MCP layer can catch one type
and turn it into a readable message. Three families exist:

- validation errors: the caller passed incomplete or invalid options
- collision errors: the repository already holds something that conflicts
- I/O errors: reading, writing or rendering a file failed
"""

from __future__ import annotations


class AutopilotError(Exception):
    """Base class for all application management errors."""


# =============================================================================
# VALIDATION
# =============================================================================


class AppValidationError(AutopilotError):
    """Invalid or missing creation options."""


class EmptyAppSpecifierError(AppValidationError):
    def __init__(self) -> None:
        super().__init__("empty app specifier, please specify the application source")


class EmptyAppNameError(AppValidationError):
    def __init__(self) -> None:
        super().__init__("app name cannot be empty, please specify application name")


class EmptyProjectNameError(AppValidationError):
    def __init__(self) -> None:
        super().__init__("project name cannot be empty, please specify project name")


class InvalidNameError(AppValidationError):
    """A name that would not map to exactly one directory in the tree."""

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"invalid {kind} name '{name}': must be a single path segment")


class UnknownInstallationModeError(AppValidationError):
    def __init__(self, mode: str) -> None:
        self.mode = mode
        super().__init__(f"unknown installation mode: {mode}")


# =============================================================================
# COLLISIONS
# =============================================================================


class AppCollisionWithExistingBaseError(AutopilotError):
    """A same-named application with a different base is already in the repository."""

    def __init__(self, app_name: str) -> None:
        self.app_name = app_name
        super().__init__(
            f"an application named '{app_name}' with a different base already exists, "
            "consider choosing a different name"
        )


class AppAlreadyInstalledOnProjectError(AutopilotError):
    """The (application, project) overlay already exists."""

    def __init__(self, app_name: str, project_name: str) -> None:
        self.app_name = app_name
        self.project_name = project_name
        super().__init__(
            f"application '{app_name}' already installed on project '{project_name}'"
        )


# =============================================================================
# FILES AND RENDERING
# =============================================================================


class AppFileError(AutopilotError):
    """
    A file operation failed.

    Carries the logical file name ("base kustomization", "config", ...) and
    the absolute target path so the message tells the user exactly what to
    inspect before retrying.
    """

    verb = "access"

    def __init__(self, name: str, path: str, cause: BaseException | str) -> None:
        self.name = name
        self.path = path
        self.cause = cause
        super().__init__(f"failed to {self.verb} '{name}' file at '{path}': {cause}")


class FileWriteError(AppFileError):
    verb = "create"


class FileReadError(AppFileError):
    verb = "read"


class RenderError(AutopilotError):
    """Rendering the manifests of a source specifier failed."""

    def __init__(self, specifier: str, details: str) -> None:
        self.specifier = specifier
        self.details = details
        super().__init__(f"failed to generate manifests for '{specifier}': {details}")
