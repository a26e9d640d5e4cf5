# ABOUTME: Data models for applications, kustomizations and overlay metadata
# ABOUTME: Pydantic models serialized to kustomization.yaml, namespace.yaml and config.json

"""
Models persisted into the repository tree.

    apps/<app>/base/kustomization.yaml          -> Kustomization
    apps/<app>/overlays/<project>/kustomization.yaml -> Kustomization
    apps/<app>/overlays/<project>/namespace.yaml     -> Namespace
    apps/<app>/overlays/<project>/config.json        -> AppConfig

Field names are snake_case in Python and camelCase on disk, through aliases.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from autopilot_mcp.apps.errors import InvalidNameError

KUSTOMIZATION_API_VERSION = "kustomize.config.k8s.io/v1beta1"
KUSTOMIZATION_KIND = "Kustomization"

KUSTOMIZATION_FILE = "kustomization.yaml"
INSTALL_FILE = "install.yaml"
NAMESPACE_FILE = "namespace.yaml"
CONFIG_FILE = "config.json"

# Overlays live at <app>/overlays/<project>, the base at <app>/base.
BASE_REFERENCE = "../../base"

NAMESPACE_SYNC_OPTIONS_ANNOTATION = "argocd.argoproj.io/sync-options"


def check_path_segment(kind: str, name: str) -> str:
    """Reject app and project names that are not a single directory name."""
    if "/" in name or "\\" in name or name in (".", ".."):
        raise InvalidNameError(kind, name)
    return name


class InstallationMode(str, Enum):
    """
    NORMAL: the base references the source specifier directly.
    FLAT: the source is rendered once and stored as base/install.yaml.
    """

    NORMAL = "normal"
    FLAT = "flat"


class Kustomization(BaseModel):
    """A kustomization document. Unknown keys are kept as-is."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    api_version: str = Field(default=KUSTOMIZATION_API_VERSION, alias="apiVersion")
    kind: str = KUSTOMIZATION_KIND
    resources: list[str] = Field(default_factory=list)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ObjectMeta(BaseModel):
    name: str
    annotations: dict[str, str] = Field(default_factory=dict)


class Namespace(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_version: str = Field(default="v1", alias="apiVersion")
    kind: str = "Namespace"
    metadata: ObjectMeta

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def generate_namespace(name: str) -> Namespace:
    """Build the namespace object written next to an overlay.

    Pruning is disabled so removing the application from Argo CD does not
    delete a namespace that other workloads may share.
    """
    return Namespace(
        metadata=ObjectMeta(
            name=name,
            annotations={NAMESPACE_SYNC_OPTIONS_ANNOTATION: "Prune=false"},
        )
    )


class AppConfig(BaseModel):
    """
    Metadata stored as config.json in every overlay.

    This is the durable record of where an application came from and where
    it deploys to. Sync tooling outside this package reads it back.
    """

    model_config = ConfigDict(populate_by_name=True)

    app_name: str = Field(alias="appName")
    user_given_name: str = Field(alias="userGivenName")
    dest_namespace: str = Field(default="", alias="destNamespace")
    dest_server: str = Field(default="", alias="destServer")
    src_path: str = Field(alias="srcPath")
    src_repo_url: str = Field(default="", alias="srcRepoURL")
    src_target_revision: str = Field(default="", alias="srcTargetRevision")

    def to_json(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode()


@dataclass
class CreateOptions:
    """Options describing an application to create.

    installation_mode accepts any string so an unsupported value can be
    reported back to the caller verbatim. An empty string means "normal".
    """

    app_name: str = ""
    app_specifier: str = ""
    installation_mode: str = ""
    dest_namespace: str = ""
    dest_server: str = ""
