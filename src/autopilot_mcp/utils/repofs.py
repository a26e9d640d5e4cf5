# ABOUTME: Chrooted filesystem access to a GitOps repository checkout
# ABOUTME: Provides join/read/write/remove primitives plus YAML document helpers

"""
Repository filesystem wrapper.

All application operations address files with repository-relative paths
such as "apps/my-app/base/kustomization.yaml". RepoFS maps those paths onto
a directory on disk and refuses any path that would resolve outside of it.

A leading "/" is accepted and means "the repository root", so
"/apps/my-app" and "apps/my-app" are the same file.

    repofs = RepoFS("/tmp/gitops")
    repofs.write_yamls("apps/a/base/kustomization.yaml", {"resources": ["x"]})
    sub = repofs.chroot("apps")
    sub.exists("a/base")  # True
"""

from __future__ import annotations

import posixpath
import shutil
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)


class PathOutsideRootError(ValueError):
    """Raised when a path resolves outside of the repository root."""

    def __init__(self, path: str, root: Path) -> None:
        self.path = path
        self.root = root
        super().__init__(f"path '{path}' is outside of repository root '{root}'")


class RepoFS:
    """Filesystem view rooted at a single directory."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).resolve()

    def __repr__(self) -> str:
        return f"RepoFS({str(self._root)!r})"

    @property
    def root(self) -> Path:
        """Absolute path of the directory this view is rooted at."""
        return self._root

    @staticmethod
    def join(*parts: str) -> str:
        """Join repository-relative path segments with forward slashes."""
        return posixpath.join(*parts)

    def abs_path(self, path: str) -> Path:
        """Resolve a repository-relative path to an absolute path on disk.

        Raises:
            PathOutsideRootError: If the path escapes the root.
        """
        resolved = (self._root / path.lstrip("/")).resolve()
        if resolved != self._root and self._root not in resolved.parents:
            raise PathOutsideRootError(path, self._root)
        return resolved

    def chroot(self, path: str) -> RepoFS:
        """Return a new view rooted at a subdirectory of this one."""
        return RepoFS(self.abs_path(path))

    # -------------------------------------------------------------------------
    # QUERIES
    # -------------------------------------------------------------------------

    def exists(self, path: str) -> bool:
        return self.abs_path(path).exists()

    def is_file(self, path: str) -> bool:
        return self.abs_path(path).is_file()

    def is_dir(self, path: str) -> bool:
        return self.abs_path(path).is_dir()

    def read_dir(self, path: str = "") -> list[str]:
        """List entry names of a directory, sorted.

        Raises:
            FileNotFoundError: If the directory does not exist.
            NotADirectoryError: If the path is a file.
        """
        return sorted(entry.name for entry in self.abs_path(path).iterdir())

    # -------------------------------------------------------------------------
    # READ / WRITE
    # -------------------------------------------------------------------------

    def read_file(self, path: str) -> bytes:
        return self.abs_path(path).read_bytes()

    def write_file(self, path: str, data: bytes) -> None:
        """Write bytes to a file, creating parent directories as needed."""
        target = self.abs_path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    def check_exists_or_write(self, path: str, data: bytes) -> bool:
        """Write data unless the file already exists.

        Returns:
            True if the file already existed (nothing was written),
            False if it was created.
        """
        if self.exists(path):
            return True
        self.write_file(path, data)
        return False

    def read_yaml(self, path: str) -> Any:
        """Parse the first YAML document of a file."""
        return yaml.safe_load(self.read_file(path))

    def write_yamls(self, path: str, *docs: Any) -> None:
        """Serialize one or more documents into a single YAML file."""
        self.write_file(path, dump_yamls(*docs))

    # -------------------------------------------------------------------------
    # REMOVAL
    # -------------------------------------------------------------------------

    def remove_all(self, path: str) -> bool:
        """Remove a file or a directory tree.

        Returns:
            True if something was removed, False if the path was already absent.
        """
        target = self.abs_path(path)
        if target == self._root:
            raise PathOutsideRootError(path, self._root)

        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        elif target.exists() or target.is_symlink():
            target.unlink()
        else:
            return False

        logger.debug("Removed path", path=str(target))
        return True


def dump_yamls(*docs: Any) -> bytes:
    """Render documents as YAML, separated by '---' when there are several."""
    return yaml.safe_dump_all(
        docs,
        default_flow_style=False,
        sort_keys=False,
    ).encode()
