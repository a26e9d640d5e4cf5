# ABOUTME: Renders a kustomization into a flat manifest with the kustomize CLI
# ABOUTME: Retries timed out builds and wraps failures in RenderError

"""
Manifest rendering for flat installations.

A flat installation stores the fully built output of the application source
as base/install.yaml instead of referencing the source. Building is done by
the kustomize binary:

    1. write {"resources": [<specifier>]} to <tmp>/kustomization.yaml
    2. run `kustomize build <tmp>`
    3. stdout is the manifest

Any callable with the signature `(Kustomization) -> bytes` can be used in
place of KustomizeRenderer (tests pass a lambda).
"""

from __future__ import annotations

import subprocess
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from autopilot_mcp.apps.errors import RenderError
from autopilot_mcp.apps.models import KUSTOMIZATION_FILE, Kustomization
from autopilot_mcp.utils.repofs import dump_yamls

if TYPE_CHECKING:
    from collections.abc import Callable

    Renderer = Callable[[Kustomization], bytes]

logger = structlog.get_logger(__name__)


def _localize(resource: str) -> str:
    """Make an existing local path absolute, leave remote specifiers untouched.

    The kustomization is built from a temporary directory, so a relative path
    would otherwise resolve against that directory.
    """
    path = Path(resource)
    if "://" not in resource and path.exists():
        return str(path.resolve())
    return resource


class KustomizeRenderer:
    """Build kustomizations with an external kustomize binary."""

    def __init__(self, binary: str = "kustomize", timeout: int = 120) -> None:
        self._binary = binary
        self._timeout = timeout

    def __call__(self, kustomization: Kustomization) -> bytes:
        specifier = ", ".join(kustomization.resources)
        localized = kustomization.model_copy(
            update={"resources": [_localize(r) for r in kustomization.resources]}
        )

        with tempfile.TemporaryDirectory(prefix="autopilot-build-") as tmp:
            Path(tmp, KUSTOMIZATION_FILE).write_bytes(dump_yamls(localized.to_document()))
            logger.info("Building manifests", specifier=specifier)

            try:
                result = self._build(tmp)
            except FileNotFoundError:
                raise RenderError(
                    specifier, f"kustomize binary '{self._binary}' not found"
                ) from None
            except subprocess.TimeoutExpired:
                raise RenderError(
                    specifier, f"kustomize build timed out after {self._timeout}s"
                ) from None
            except subprocess.CalledProcessError as e:
                stderr = (e.stderr or b"").decode(errors="replace").strip()
                raise RenderError(specifier, stderr or f"exit status {e.returncode}") from e

        logger.debug("Built manifests", specifier=specifier, size=len(result.stdout))
        return result.stdout

    @retry(
        retry=retry_if_exception_type(subprocess.TimeoutExpired),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    def _build(self, directory: str) -> subprocess.CompletedProcess[bytes]:
        return subprocess.run(
            [self._binary, "build", directory],
            capture_output=True,
            check=True,
            timeout=self._timeout,
        )
