"""Tests for response DTOs and GraphQL node unwrapping."""

import pytest

from fly_admin.core.errors import ResponseShapeError
from fly_admin.core.types import (
    App,
    AppDetailed,
    AppList,
    ExtendVolumeResponse,
    Machine,
    OrganizationRef,
    PlatformRegions,
    SecretsRelease,
    Volume,
    unwrap_nodes,
)

GRAPHQL_APP = {
    "name": "my-app",
    "status": "deployed",
    "organization": {"name": "Acme", "slug": "acme"},
    "ipAddresses": {
        "nodes": [
            {"type": "v6", "region": "global", "address": "2a09:8280:1::1"},
            {"type": "shared_v4", "region": "global", "address": "66.241.124.1"},
        ]
    },
    "machines": {
        "nodes": [
            {"id": "m1", "name": "web-1", "state": "started", "region": "ams"},
            {"id": "m2", "name": "web-2", "state": "stopped", "region": "fra"},
            {"id": "m3", "name": "worker", "state": "started", "region": "ams"},
        ]
    },
}


class TestUnwrapNodes:
    def test_returns_bare_list_in_order(self):
        nodes = unwrap_nodes(GRAPHQL_APP, "machines")
        assert [n["id"] for n in nodes] == ["m1", "m2", "m3"]

    def test_empty_collection(self):
        assert unwrap_nodes({"machines": {"nodes": []}}, "machines") == []

    def test_missing_field_fails_loudly(self):
        with pytest.raises(ResponseShapeError, match="machines"):
            unwrap_nodes({"name": "my-app"}, "machines")

    def test_bare_list_is_not_an_envelope(self):
        with pytest.raises(ResponseShapeError):
            unwrap_nodes({"machines": [{"id": "m1"}]}, "machines")

    def test_null_nodes_fails(self):
        with pytest.raises(ResponseShapeError):
            unwrap_nodes({"machines": {"nodes": None}}, "machines")


class TestAppDetailed:
    def test_unwraps_machines_and_ip_addresses(self):
        app = AppDetailed.from_graphql(GRAPHQL_APP)

        assert app.name == "my-app"
        assert app.status == "deployed"
        assert app.organization == OrganizationRef(name="Acme", slug="acme")
        assert isinstance(app.machines, list)
        assert [m.id for m in app.machines] == ["m1", "m2", "m3"]
        assert app.machines[1].state == "stopped"
        assert [ip.address for ip in app.ip_addresses] == ["2a09:8280:1::1", "66.241.124.1"]

    def test_missing_envelope_raises(self):
        data = {k: v for k, v in GRAPHQL_APP.items() if k != "ipAddresses"}
        with pytest.raises(ResponseShapeError, match="ipAddresses"):
            AppDetailed.from_graphql(data)


class TestRestTypes:
    def test_app_from_dict(self):
        app = App.from_dict({"name": "my-app", "status": "deployed", "organization": {"name": "Acme", "slug": "acme"}})
        assert app == App(name="my-app", status="deployed", organization=OrganizationRef("Acme", "acme"))

    def test_app_list(self):
        listing = AppList.from_dict(
            {"total_apps": 2, "apps": [{"name": "a", "machine_count": 3, "network": "default"}, {"name": "b"}]}
        )
        assert listing.total_apps == 2
        assert listing.apps[0].machine_count == 3
        assert listing.apps[1].machine_count == 0

    def test_machine_keeps_config_and_events(self):
        machine = Machine.from_dict(
            {
                "id": "m1",
                "state": "started",
                "config": {"image": "nginx"},
                "events": [{"type": "start", "status": "started", "source": "user", "timestamp": 1}],
            }
        )
        assert machine.config == {"image": "nginx"}
        assert machine.events[0].type == "start"

    def test_extend_volume(self):
        result = ExtendVolumeResponse.from_dict({"needs_restart": True, "volume": {"id": "vol_1", "size_gb": 20}})
        assert result.needs_restart is True
        assert result.volume == Volume(id="vol_1", name="", size_gb=20)


class TestGraphQLTypes:
    def test_secrets_release(self):
        release = SecretsRelease.from_graphql(
            {
                "setSecrets": {
                    "release": {
                        "id": "rel_1",
                        "version": 4,
                        "reason": "change_secrets",
                        "description": "Set secrets",
                        "user": {"id": "u1", "email": "dev@acme.test", "name": "Dev"},
                        "evaluationId": "ev_1",
                        "createdAt": "2024-01-01T00:00:00Z",
                    }
                }
            },
            "setSecrets",
        )
        assert release.release.evaluation_id == "ev_1"
        assert release.release.user.email == "dev@acme.test"

    def test_secrets_without_release(self):
        assert SecretsRelease.from_graphql({"unsetSecrets": {"release": None}}, "unsetSecrets").release is None

    def test_platform_regions(self):
        regions = PlatformRegions.from_graphql(
            {
                "platform": {
                    "requestRegion": "ams",
                    "regions": [{"code": "ams", "name": "Amsterdam", "gatewayAvailable": True}],
                }
            }
        )
        assert regions.request_region == "ams"
        assert regions.regions[0].gateway_available is True
