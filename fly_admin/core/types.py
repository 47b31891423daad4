"""
Core types for Fly.io API responses.

REST payloads are already snake_case and map onto these dataclasses through
``from_dict``. GraphQL payloads are camelCase and wrap list fields in
``{"nodes": [...]}`` envelopes; ``from_graphql`` converts that wire shape into
the same plain dataclasses, unwrapping every envelope into a list.
"""

from dataclasses import dataclass, field
from typing import Any

from fly_admin.core.errors import ResponseShapeError

# =============================================================================
# GraphQL shaping
# =============================================================================


def require(data: Any, key: str) -> Any:
    """Return ``data[key]``, failing loudly when the object or field is missing."""
    if not isinstance(data, dict) or data.get(key) is None:
        raise ResponseShapeError(f"Unexpected response shape: missing '{key}'", details={"field": key})
    return data[key]


def unwrap_nodes(data: Any, key: str) -> list[Any]:
    """
    Replace a node-wrapped collection with its bare element list.

    Order and count of the elements are preserved.

    Raises:
        ResponseShapeError: If ``data[key]`` is not a ``{"nodes": [...]}`` object

    """
    container = require(data, key)
    nodes = container.get("nodes") if isinstance(container, dict) else None
    if not isinstance(nodes, list):
        raise ResponseShapeError(
            f"Unexpected response shape: '{key}' is not a node-wrapped collection",
            details={"field": key},
        )
    return nodes


# =============================================================================
# Organization Types
# =============================================================================


@dataclass
class OrganizationRef:
    """Organization summary embedded in app payloads."""

    name: str
    slug: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrganizationRef":
        return cls(name=data.get("name", ""), slug=data.get("slug", ""))


@dataclass
class Organization:
    """A Fly.io organization."""

    id: str
    slug: str
    name: str
    type: str | None = None
    viewer_role: str | None = None

    @classmethod
    def from_graphql(cls, data: dict[str, Any]) -> "Organization":
        """Create from a GraphQL ``organization`` object."""
        return cls(
            id=data["id"],
            slug=data["slug"],
            name=data.get("name", ""),
            type=data.get("type"),
            viewer_role=data.get("viewerRole"),
        )


# =============================================================================
# App Types
# =============================================================================


@dataclass
class App:
    """An app as returned by the Machines API."""

    name: str
    status: str | None = None
    organization: OrganizationRef | None = None
    id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "App":
        """Create from API response dict."""
        org = data.get("organization")
        return cls(
            name=data["name"],
            status=data.get("status"),
            organization=OrganizationRef.from_dict(org) if org else None,
            id=data.get("id"),
        )


@dataclass
class AppSummary:
    """An entry of the org-wide app listing."""

    name: str
    machine_count: int = 0
    network: str | None = None
    id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppSummary":
        return cls(
            name=data["name"],
            machine_count=data.get("machine_count", 0),
            network=data.get("network"),
            id=data.get("id"),
        )


@dataclass
class AppList:
    """Org-wide app listing."""

    total_apps: int
    apps: list[AppSummary] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppList":
        apps = [AppSummary.from_dict(a) for a in data.get("apps") or []]
        return cls(total_apps=data.get("total_apps", len(apps)), apps=apps)


@dataclass
class IPAddress:
    """An IP address allocated to an app."""

    type: str
    address: str
    region: str | None = None

    @classmethod
    def from_graphql(cls, data: dict[str, Any]) -> "IPAddress":
        return cls(type=data.get("type", ""), address=data.get("address", ""), region=data.get("region"))


@dataclass
class AppMachine:
    """Machine summary embedded in a detailed app."""

    id: str
    name: str | None = None
    state: str | None = None
    region: str | None = None

    @classmethod
    def from_graphql(cls, data: dict[str, Any]) -> "AppMachine":
        return cls(
            id=data["id"],
            name=data.get("name"),
            state=data.get("state"),
            region=data.get("region"),
        )


@dataclass
class AppDetailed:
    """An app with its IP addresses and machines."""

    name: str
    status: str | None = None
    organization: OrganizationRef | None = None
    ip_addresses: list[IPAddress] = field(default_factory=list)
    machines: list[AppMachine] = field(default_factory=list)

    @classmethod
    def from_graphql(cls, data: dict[str, Any]) -> "AppDetailed":
        """Create from a GraphQL ``app`` object, unwrapping its node collections."""
        org = data.get("organization")
        return cls(
            name=data["name"],
            status=data.get("status"),
            organization=OrganizationRef.from_dict(org) if org else None,
            ip_addresses=[IPAddress.from_graphql(ip) for ip in unwrap_nodes(data, "ipAddresses")],
            machines=[AppMachine.from_graphql(m) for m in unwrap_nodes(data, "machines")],
        )


# =============================================================================
# Machine Types
# =============================================================================


@dataclass
class MachineEvent:
    """A lifecycle event of a machine."""

    type: str
    status: str | None = None
    source: str | None = None
    timestamp: int | None = None
    id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MachineEvent":
        return cls(
            type=data.get("type", ""),
            status=data.get("status"),
            source=data.get("source"),
            timestamp=data.get("timestamp"),
            id=data.get("id"),
        )


@dataclass
class Machine:
    """A Fly Machine."""

    id: str
    name: str | None = None
    state: str | None = None
    region: str | None = None
    instance_id: str | None = None
    private_ip: str | None = None
    config: dict[str, Any] = field(default_factory=dict)
    image_ref: dict[str, Any] | None = None
    created_at: str | None = None
    updated_at: str | None = None
    events: list[MachineEvent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Machine":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            name=data.get("name"),
            state=data.get("state"),
            region=data.get("region"),
            instance_id=data.get("instance_id"),
            private_ip=data.get("private_ip"),
            config=data.get("config") or {},
            image_ref=data.get("image_ref"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            events=[MachineEvent.from_dict(e) for e in data.get("events") or []],
        )


@dataclass
class MachineVersion:
    """A previous configuration version of a machine."""

    version: str
    user_config: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MachineVersion":
        return cls(version=data.get("version", ""), user_config=data.get("user_config") or {})


@dataclass
class MachineProcess:
    """A process running inside a machine."""

    pid: int
    command: str = ""
    cpu: int | None = None
    rss: int | None = None
    directory: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MachineProcess":
        return cls(
            pid=data.get("pid", 0),
            command=data.get("command", ""),
            cpu=data.get("cpu"),
            rss=data.get("rss"),
            directory=data.get("directory"),
        )


# =============================================================================
# Volume Types
# =============================================================================


@dataclass
class Volume:
    """A persistent volume."""

    id: str
    name: str
    state: str | None = None
    size_gb: int | None = None
    region: str | None = None
    zone: str | None = None
    encrypted: bool = False
    attached_machine_id: str | None = None
    attached_alloc_id: str | None = None
    created_at: str | None = None
    blocks: int | None = None
    block_size: int | None = None
    blocks_free: int | None = None
    blocks_avail: int | None = None
    fstype: str | None = None
    host_dedication_key: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Volume":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            state=data.get("state"),
            size_gb=data.get("size_gb"),
            region=data.get("region"),
            zone=data.get("zone"),
            encrypted=data.get("encrypted", False),
            attached_machine_id=data.get("attached_machine_id"),
            attached_alloc_id=data.get("attached_alloc_id"),
            created_at=data.get("created_at"),
            blocks=data.get("blocks"),
            block_size=data.get("block_size"),
            blocks_free=data.get("blocks_free"),
            blocks_avail=data.get("blocks_avail"),
            fstype=data.get("fstype"),
            host_dedication_key=data.get("host_dedication_key"),
        )


@dataclass
class ExtendVolumeResponse:
    """Result of growing a volume."""

    needs_restart: bool
    volume: Volume

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExtendVolumeResponse":
        return cls(needs_restart=data.get("needs_restart", False), volume=Volume.from_dict(data["volume"]))


@dataclass
class Snapshot:
    """A volume snapshot."""

    id: str
    created_at: str | None = None
    digest: str | None = None
    size: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Snapshot":
        return cls(
            id=data["id"],
            created_at=data.get("created_at"),
            digest=data.get("digest"),
            size=data.get("size"),
        )


# =============================================================================
# Secret Types
# =============================================================================


@dataclass
class ReleaseUser:
    id: str
    email: str | None = None
    name: str | None = None


@dataclass
class Release:
    """A release created by a secrets change."""

    id: str
    version: int | str | None = None
    reason: str | None = None
    description: str | None = None
    user: ReleaseUser | None = None
    evaluation_id: str | None = None
    created_at: str | None = None

    @classmethod
    def from_graphql(cls, data: dict[str, Any]) -> "Release":
        user = data.get("user")
        return cls(
            id=data["id"],
            version=data.get("version"),
            reason=data.get("reason"),
            description=data.get("description"),
            user=ReleaseUser(id=user["id"], email=user.get("email"), name=user.get("name")) if user else None,
            evaluation_id=data.get("evaluationId"),
            created_at=data.get("createdAt"),
        )


@dataclass
class SecretsRelease:
    """Payload of setSecrets/unsetSecrets. ``release`` is None when nothing was deployed."""

    release: Release | None = None

    @classmethod
    def from_graphql(cls, data: dict[str, Any], mutation: str) -> "SecretsRelease":
        release = require(data, mutation).get("release")
        return cls(release=Release.from_graphql(release) if release else None)


# =============================================================================
# Network Types
# =============================================================================


@dataclass
class AllocatedIPAddress:
    """An IP address returned by allocateIpAddress."""

    id: str
    address: str
    type: str
    region: str | None = None
    created_at: str | None = None

    @classmethod
    def from_graphql(cls, data: dict[str, Any]) -> "AllocatedIPAddress":
        return cls(
            id=data["id"],
            address=data.get("address", ""),
            type=data.get("type", ""),
            region=data.get("region"),
            created_at=data.get("createdAt"),
        )


# =============================================================================
# Region Types
# =============================================================================


@dataclass
class Region:
    """A platform region."""

    code: str
    name: str
    latitude: float | None = None
    longitude: float | None = None
    gateway_available: bool = False
    requires_paid_plan: bool = False

    @classmethod
    def from_graphql(cls, data: dict[str, Any]) -> "Region":
        return cls(
            code=data["code"],
            name=data.get("name", ""),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            gateway_available=data.get("gatewayAvailable", False),
            requires_paid_plan=data.get("requiresPaidPlan", False),
        )


@dataclass
class PlatformRegions:
    """All regions plus the one nearest to the caller."""

    request_region: str | None = None
    regions: list[Region] = field(default_factory=list)

    @classmethod
    def from_graphql(cls, data: dict[str, Any]) -> "PlatformRegions":
        platform = require(data, "platform")
        return cls(
            request_region=platform.get("requestRegion"),
            regions=[Region.from_graphql(r) for r in platform.get("regions") or []],
        )
