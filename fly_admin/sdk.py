"""
Fly SDK - High-level client with one accessor per resource family.

Every operation is a single request/response round trip that returns an
``APIResponse``: check ``response.error`` before touching ``response.data``.
Built on top of the core APIClient.
"""

import builtins
from typing import Any

from fly_admin.core import queries
from fly_admin.core.client import APIClient, build_path
from fly_admin.core.result import APIResponse
from fly_admin.core.types import (
    AllocatedIPAddress,
    App,
    AppDetailed,
    AppList,
    ExtendVolumeResponse,
    Machine,
    MachineEvent,
    MachineProcess,
    MachineVersion,
    Organization,
    PlatformRegions,
    SecretsRelease,
    Snapshot,
    Volume,
    require,
    unwrap_nodes,
)


def _without_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


class FlyClient:
    """
    High-level Fly.io client.

    Example:
        client = FlyClient("fo1_...")

        response = client.apps.get_detailed("my-app")
        if response.error:
            print(response.error.status, response.error.message)
        else:
            for machine in response.data.machines:
                print(machine.id, machine.state)

    """

    def __init__(
        self,
        api_key: str | None = None,
        graphql_url: str | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
    ):
        """
        Initialize the Fly client.

        Args:
            api_key: Fly API token (or FLY_API_TOKEN env var)
            graphql_url: GraphQL base URL (or FLY_API_GRAPHQL_URL env var)
            api_url: Machines API base URL (or FLY_API_HOSTNAME env var)
            timeout: Request timeout in seconds

        Raises:
            ConfigurationError: If no API token is available

        """
        self._client = APIClient(
            api_key=api_key,
            graphql_url=graphql_url,
            api_url=api_url,
            timeout=timeout,
        )

        # Sub-clients for different resource families, all sharing one transport
        self.apps = AppOperations(self._client)
        self.machines = MachineOperations(self._client)
        self.networks = NetworkOperations(self._client)
        self.organizations = OrganizationOperations(self._client)
        self.secrets = SecretOperations(self._client)
        self.volumes = VolumeOperations(self._client)
        self.regions = RegionOperations(self._client)

    @property
    def api(self) -> APIClient:
        """The underlying transport, for strict-convention calls."""
        return self._client


# =============================================================================
# App Operations
# =============================================================================


def _parse_organization_apps(data: Any) -> builtins.list[AppDetailed]:
    organization = require(data, "organization")
    return [AppDetailed.from_graphql(app) for app in unwrap_nodes(organization, "apps")]


class AppOperations:
    """Operations for managing apps."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(self, org_slug: str) -> APIResponse[AppList]:
        """
        List apps in an organization.

        Args:
            org_slug: Organization slug

        Returns:
            APIResponse containing an AppList

        """
        return self._client.safe_rest(build_path("apps", params={"org_slug": org_slug}), parser=AppList.from_dict)

    def list_detailed(self, org_slug: str) -> APIResponse[builtins.list[AppDetailed]]:
        """
        List apps in an organization with their IP addresses and machines.

        Args:
            org_slug: Organization slug

        Returns:
            APIResponse containing a list of AppDetailed

        """
        return self._client.safe_graphql(
            queries.GET_ORGANIZATION_APPS,
            {"slug": org_slug},
            parser=_parse_organization_apps,
        )

    def get(self, app_name: str) -> APIResponse[App]:
        """
        Get an app by name.

        Args:
            app_name: The app name

        Returns:
            APIResponse containing the App

        """
        return self._client.safe_rest(build_path("apps", app_name), parser=App.from_dict)

    def get_detailed(self, app_name: str) -> APIResponse[AppDetailed]:
        """
        Get an app with its IP addresses and machines.

        Args:
            app_name: The app name

        Returns:
            APIResponse containing the AppDetailed

        """
        return self._client.safe_graphql(
            queries.GET_APP,
            {"name": app_name},
            parser=lambda data: AppDetailed.from_graphql(require(data, "app")),
        )

    def create(self, org_slug: str, app_name: str, network: str | None = None) -> APIResponse[None]:
        """
        Create an app.

        Args:
            org_slug: Organization slug owning the app
            app_name: Name of the new app
            network: Optional custom private network name

        """
        body = _without_none({"org_slug": org_slug, "app_name": app_name, "network": network})
        return self._client.safe_rest("apps", "POST", body)

    def delete(self, app_name: str) -> APIResponse[None]:
        """Delete an app."""
        return self._client.safe_rest(build_path("apps", app_name), "DELETE")


# =============================================================================
# Machine Operations
# =============================================================================


class MachineOperations:
    """Operations for managing machines."""

    def __init__(self, client: APIClient):
        self._client = client

    def _path(self, app_name: str, *rest: str, params: dict[str, Any] | None = None) -> str:
        return build_path("apps", app_name, "machines", *rest, params=params)

    def list(self, app_name: str) -> APIResponse[builtins.list[Machine]]:
        """
        List machines of an app.

        Args:
            app_name: The app name

        Returns:
            APIResponse containing a list of Machines

        """
        return self._client.safe_rest(
            self._path(app_name),
            parser=lambda data: [Machine.from_dict(m) for m in data or []],
        )

    def get(self, app_name: str, machine_id: str) -> APIResponse[Machine]:
        """Get a machine by ID."""
        return self._client.safe_rest(self._path(app_name, machine_id), parser=Machine.from_dict)

    def create(
        self,
        app_name: str,
        config: dict[str, Any],
        name: str | None = None,
        region: str | None = None,
        **options: Any,
    ) -> APIResponse[Machine]:
        """
        Create and start a machine.

        Args:
            app_name: The app name
            config: Machine config (image, guest, services, ...)
            name: Optional machine name
            region: Optional region code
            **options: Extra request fields (e.g. skip_launch, lease_ttl)

        Returns:
            APIResponse containing the created Machine

        """
        body = _without_none({"config": config, "name": name, "region": region, **options})
        return self._client.safe_rest(self._path(app_name), "POST", body, parser=Machine.from_dict)

    def update(
        self,
        app_name: str,
        machine_id: str,
        config: dict[str, Any],
        **options: Any,
    ) -> APIResponse[Machine]:
        """Replace a machine's config."""
        body = _without_none({"config": config, **options})
        return self._client.safe_rest(self._path(app_name, machine_id), "POST", body, parser=Machine.from_dict)

    def delete(self, app_name: str, machine_id: str, force: bool = False) -> APIResponse[Any]:
        """
        Destroy a machine.

        Args:
            app_name: The app name
            machine_id: The machine ID
            force: Kill a running machine instead of failing

        """
        params = {"force": True} if force else None
        return self._client.safe_rest(self._path(app_name, machine_id, params=params), "DELETE")

    def start(self, app_name: str, machine_id: str) -> APIResponse[Any]:
        """Start a stopped machine."""
        return self._client.safe_rest(self._path(app_name, machine_id, "start"), "POST")

    def stop(
        self,
        app_name: str,
        machine_id: str,
        signal: str | None = None,
        timeout: str | None = None,
    ) -> APIResponse[Any]:
        """
        Stop a running machine.

        Args:
            app_name: The app name
            machine_id: The machine ID
            signal: Signal to send first (e.g. SIGINT)
            timeout: Grace period before the machine is killed (e.g. "30s")

        """
        body = _without_none({"signal": signal, "timeout": timeout}) or None
        return self._client.safe_rest(self._path(app_name, machine_id, "stop"), "POST", body)

    def restart(
        self,
        app_name: str,
        machine_id: str,
        signal: str | None = None,
        timeout: str | None = None,
    ) -> APIResponse[Any]:
        """Restart a machine."""
        params = {"signal": signal, "timeout": timeout}
        return self._client.safe_rest(self._path(app_name, machine_id, "restart", params=params), "POST")

    def signal(self, app_name: str, machine_id: str, signal: str) -> APIResponse[Any]:
        """Send a signal to a machine."""
        return self._client.safe_rest(self._path(app_name, machine_id, "signal"), "POST", {"signal": signal})

    def wait(
        self,
        app_name: str,
        machine_id: str,
        state: str = "started",
        timeout: int | None = None,
        instance_id: str | None = None,
    ) -> APIResponse[Any]:
        """
        Block server-side until a machine reaches ``state``.

        Args:
            app_name: The app name
            machine_id: The machine ID
            state: Target state (started, stopped, destroyed)
            timeout: Seconds the server waits before giving up
            instance_id: Machine version to wait on

        """
        params = {"state": state, "timeout": timeout, "instance_id": instance_id}
        return self._client.safe_rest(self._path(app_name, machine_id, "wait", params=params))

    def cordon(self, app_name: str, machine_id: str) -> APIResponse[Any]:
        """Stop routing traffic to a machine."""
        return self._client.safe_rest(self._path(app_name, machine_id, "cordon"), "POST")

    def uncordon(self, app_name: str, machine_id: str) -> APIResponse[Any]:
        """Resume routing traffic to a machine."""
        return self._client.safe_rest(self._path(app_name, machine_id, "uncordon"), "POST")

    def list_events(self, app_name: str, machine_id: str) -> APIResponse[builtins.list[MachineEvent]]:
        """List a machine's lifecycle events."""
        return self._client.safe_rest(
            self._path(app_name, machine_id, "events"),
            parser=lambda data: [MachineEvent.from_dict(e) for e in data or []],
        )

    def list_versions(self, app_name: str, machine_id: str) -> APIResponse[builtins.list[MachineVersion]]:
        """List a machine's config versions."""
        return self._client.safe_rest(
            self._path(app_name, machine_id, "versions"),
            parser=lambda data: [MachineVersion.from_dict(v) for v in data or []],
        )

    def list_processes(self, app_name: str, machine_id: str) -> APIResponse[builtins.list[MachineProcess]]:
        """List processes running in a machine."""
        return self._client.safe_rest(
            self._path(app_name, machine_id, "ps"),
            parser=lambda data: [MachineProcess.from_dict(p) for p in data or []],
        )


# =============================================================================
# Network Operations
# =============================================================================


class NetworkOperations:
    """Operations for managing app IP addresses."""

    def __init__(self, client: APIClient):
        self._client = client

    def allocate_ip_address(
        self,
        app_id: str,
        ip_type: str,
        region: str | None = None,
        organization_id: str | None = None,
    ) -> APIResponse[AllocatedIPAddress]:
        """
        Allocate an IP address to an app.

        Args:
            app_id: The app name or ID
            ip_type: Address type (v4, v6, private_v6, shared_v4), sent as ``type``
            region: Optional region for the address
            organization_id: Organization, for private_v6 addresses on custom networks

        Returns:
            APIResponse containing the AllocatedIPAddress

        """
        variables = {
            "input": _without_none(
                {"appId": app_id, "type": ip_type, "region": region, "organizationId": organization_id}
            )
        }
        return self._client.safe_graphql(
            queries.ALLOCATE_IP_ADDRESS,
            variables,
            parser=lambda data: AllocatedIPAddress.from_graphql(
                require(require(data, "allocateIpAddress"), "ipAddress")
            ),
        )

    def release_ip_address(
        self,
        app_id: str,
        ip: str | None = None,
        ip_address_id: str | None = None,
    ) -> APIResponse[str]:
        """
        Release an app's IP address, by address or by ID.

        Returns:
            APIResponse containing the name of the app the address was released from

        """
        variables = {"input": _without_none({"appId": app_id, "ip": ip, "ipAddressId": ip_address_id})}
        return self._client.safe_graphql(
            queries.RELEASE_IP_ADDRESS,
            variables,
            parser=lambda data: require(require(require(data, "releaseIpAddress"), "app"), "name"),
        )


# =============================================================================
# Organization Operations
# =============================================================================


class OrganizationOperations:
    """Operations for reading organizations."""

    def __init__(self, client: APIClient):
        self._client = client

    def get(self, slug: str) -> APIResponse[Organization]:
        """Get an organization by slug."""
        return self._client.safe_graphql(
            queries.GET_ORGANIZATION,
            {"slug": slug},
            parser=lambda data: Organization.from_graphql(require(data, "organization")),
        )


# =============================================================================
# Secret Operations
# =============================================================================


class SecretOperations:
    """Operations for managing app secrets."""

    def __init__(self, client: APIClient):
        self._client = client

    def set(
        self,
        app_id: str,
        secrets: dict[str, str],
        replace_all: bool = False,
    ) -> APIResponse[SecretsRelease]:
        """
        Set secrets on an app, creating a release.

        Args:
            app_id: The app name or ID
            secrets: Mapping of secret name to value
            replace_all: Remove secrets not present in ``secrets``

        Returns:
            APIResponse containing the SecretsRelease

        """
        variables = {
            "input": {
                "appId": app_id,
                "secrets": [{"key": k, "value": v} for k, v in secrets.items()],
                "replaceAll": replace_all,
            }
        }
        return self._client.safe_graphql(
            queries.SET_SECRETS,
            variables,
            parser=lambda data: SecretsRelease.from_graphql(data, "setSecrets"),
        )

    def unset(self, app_id: str, keys: builtins.list[str]) -> APIResponse[SecretsRelease]:
        """Remove secrets from an app, creating a release."""
        variables = {"input": {"appId": app_id, "keys": builtins.list(keys)}}
        return self._client.safe_graphql(
            queries.UNSET_SECRETS,
            variables,
            parser=lambda data: SecretsRelease.from_graphql(data, "unsetSecrets"),
        )


# =============================================================================
# Volume Operations
# =============================================================================


class VolumeOperations:
    """Operations for managing volumes."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(self, app_name: str) -> APIResponse[builtins.list[Volume]]:
        """
        List volumes of an app.

        Args:
            app_name: The app name

        Returns:
            APIResponse containing a list of Volumes

        """
        return self._client.safe_rest(
            build_path("apps", app_name, "volumes"),
            parser=lambda data: [Volume.from_dict(v) for v in data or []],
        )

    def get(self, app_name: str, volume_id: str) -> APIResponse[Volume]:
        """Get a volume by ID."""
        return self._client.safe_rest(build_path("apps", app_name, "volumes", volume_id), parser=Volume.from_dict)

    def create(
        self,
        app_name: str,
        name: str,
        region: str,
        size_gb: int | None = None,
        **options: Any,
    ) -> APIResponse[Volume]:
        """
        Create a volume.

        Args:
            app_name: The app name
            name: Volume name
            region: Region code
            size_gb: Size in GB
            **options: Extra request fields (encrypted, snapshot_id, require_unique_zone, ...)

        Returns:
            APIResponse containing the created Volume

        """
        body = _without_none({"name": name, "region": region, "size_gb": size_gb, **options})
        return self._client.safe_rest(
            build_path("apps", app_name, "volumes"),
            "POST",
            body,
            parser=Volume.from_dict,
        )

    def delete(self, app_name: str, volume_id: str) -> APIResponse[Any]:
        """Delete a volume."""
        return self._client.safe_rest(build_path("apps", app_name, "volumes", volume_id), "DELETE")

    def extend(self, app_name: str, volume_id: str, size_gb: int) -> APIResponse[ExtendVolumeResponse]:
        """
        Grow a volume.

        Args:
            app_name: The app name
            volume_id: The volume ID
            size_gb: New size in GB

        Returns:
            APIResponse containing an ExtendVolumeResponse

        """
        return self._client.safe_rest(
            build_path("apps", app_name, "volumes", volume_id, "extend"),
            "PUT",
            {"size_gb": size_gb},
            parser=ExtendVolumeResponse.from_dict,
        )

    def list_snapshots(self, app_name: str, volume_id: str) -> APIResponse[builtins.list[Snapshot]]:
        """List snapshots of a volume."""
        return self._client.safe_rest(
            build_path("apps", app_name, "volumes", volume_id, "snapshots"),
            parser=lambda data: [Snapshot.from_dict(s) for s in data or []],
        )


# =============================================================================
# Region Operations
# =============================================================================


class RegionOperations:
    """Operations for listing platform regions."""

    def __init__(self, client: APIClient):
        self._client = client

    def get(self) -> APIResponse[PlatformRegions]:
        """List all regions and the region nearest to the caller."""
        return self._client.safe_graphql(queries.GET_REGIONS, parser=PlatformRegions.from_graphql)
