"""
Core layer - Raw types, result normalization and HTTP client.

This layer provides:
- Typed dataclasses for Fly.io API payloads
- The APIResponse result shared by every safe call
- Low-level HTTP client with auth and error handling
"""

from fly_admin.core.client import APIClient
from fly_admin.core.errors import (
    APIError,
    ConfigurationError,
    FlyError,
    GraphQLError,
    ResponseShapeError,
    ValidationError,
)
from fly_admin.core.result import APIResponse, ErrorInfo
from fly_admin.core.types import (
    AllocatedIPAddress,
    App,
    AppDetailed,
    AppList,
    AppMachine,
    AppSummary,
    ExtendVolumeResponse,
    IPAddress,
    Machine,
    MachineEvent,
    MachineProcess,
    MachineVersion,
    Organization,
    OrganizationRef,
    PlatformRegions,
    Region,
    Release,
    ReleaseUser,
    SecretsRelease,
    Snapshot,
    Volume,
)

__all__ = [
    "APIClient",
    "APIError",
    "APIResponse",
    "AllocatedIPAddress",
    "App",
    "AppDetailed",
    "AppList",
    "AppMachine",
    "AppSummary",
    "ConfigurationError",
    "ErrorInfo",
    "ExtendVolumeResponse",
    "FlyError",
    "GraphQLError",
    "IPAddress",
    "Machine",
    "MachineEvent",
    "MachineProcess",
    "MachineVersion",
    "Organization",
    "OrganizationRef",
    "PlatformRegions",
    "Region",
    "Release",
    "ReleaseUser",
    "ResponseShapeError",
    "SecretsRelease",
    "Snapshot",
    "ValidationError",
    "Volume",
]
