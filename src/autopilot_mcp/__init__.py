# ABOUTME: Autopilot MCP Server package initialization
# ABOUTME: Exposes version information

"""
Autopilot MCP Server - declarative application management for GitOps repositories.

=============================================================================
WHAT DOES IT MANAGE?
=============================================================================

A GitOps repository holds one directory per application. Each application
has a single base (where its manifests come from) and one overlay per
project it is installed on:

    apps/
    └── nginx/
        ├── base/
        │   ├── kustomization.yaml      <- resources: [<source>] or [install.yaml]
        │   └── install.yaml            <- flat installations only
        └── overlays/
            ├── staging/
            │   ├── kustomization.yaml  <- resources: [../../base, namespace.yaml?]
            │   ├── config.json         <- where the app came from, where it goes
            │   └── namespace.yaml      <- when a destination namespace was set
            └── production/
                └── ...

The base is shared by every overlay and is never rewritten. Installing a
different application under an existing name is a collision, installing the
same application twice on a project is an error, and removing the last
overlay removes the base too.

=============================================================================
PACKAGE STRUCTURE OVERVIEW
=============================================================================

autopilot_mcp/
├── __init__.py          <- Package entry point
├── config.py            <- Repository layout, security and server settings
├── server.py            <- MCP server with all tools defined
├── apps/
│   ├── builder.py       <- Options -> application descriptor
│   ├── materializer.py  <- Descriptor -> base/overlay files
│   ├── inferencer.py    <- Source directory -> application type
│   ├── pruner.py        <- Remove an application from a project
│   ├── catalog.py       <- List installed applications
│   ├── render.py        <- kustomize build for flat installations
│   ├── models.py        <- Kustomization, Namespace, AppConfig
│   └── errors.py        <- Exception hierarchy
└── utils/
    ├── repofs.py        <- Chrooted repository filesystem
    ├── logging.py       <- Structured logging with audit trails
    └── safety.py        <- Security guards and rate limiting
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
