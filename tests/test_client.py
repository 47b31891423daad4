"""
Transport and result normalization tests.

Exercises APIClient's strict and safe calling conventions against a fake
urlopen, and the mapping of every failure mode onto one ErrorInfo.
"""

import json
import urllib.error

import pytest

from fly_admin.core.client import FLY_API_GRAPHQL, FLY_API_HOSTNAME, APIClient, build_path
from fly_admin.core.errors import APIError, ConfigurationError, GraphQLError, ResponseShapeError, ValidationError
from fly_admin.core.result import UNKNOWN_ERROR_MESSAGE, APIResponse, ErrorInfo, capture, error_from_exception

from .conftest import API_URL, GRAPHQL_URL, TOKEN

GRAPHQL_ERRORS = [{"message": "Could not find App", "locations": [{"line": 2, "column": 3}]}]


@pytest.fixture
def api(fake_http) -> APIClient:
    return APIClient(TOKEN, graphql_url=GRAPHQL_URL, api_url=API_URL)


# =============================================================================
# Configuration
# =============================================================================


class TestConfiguration:
    """Constructor settings and env var fallbacks."""

    def test_empty_api_key_fails_before_any_request(self, fake_http, monkeypatch):
        monkeypatch.delenv("FLY_API_TOKEN", raising=False)
        with pytest.raises(ConfigurationError):
            APIClient("")
        assert fake_http.requests == []

    def test_missing_api_key_fails(self, monkeypatch):
        monkeypatch.delenv("FLY_API_TOKEN", raising=False)
        with pytest.raises(ConfigurationError):
            APIClient()

    def test_api_key_from_env(self, monkeypatch):
        monkeypatch.setenv("FLY_API_TOKEN", "from-env")
        assert APIClient().api_key == "from-env"

    def test_default_urls(self, monkeypatch):
        monkeypatch.delenv("FLY_API_GRAPHQL_URL", raising=False)
        monkeypatch.delenv("FLY_API_HOSTNAME", raising=False)
        api = APIClient(TOKEN)
        assert api.graphql_url == FLY_API_GRAPHQL
        assert api.api_url == FLY_API_HOSTNAME

    def test_url_overrides_strip_trailing_slash(self, monkeypatch):
        monkeypatch.setenv("FLY_API_HOSTNAME", "https://env.example")
        api = APIClient(TOKEN, graphql_url="https://gql.example/", api_url="https://rest.example/")
        assert api.graphql_url == "https://gql.example"
        assert api.api_url == "https://rest.example"

    def test_url_from_env(self, monkeypatch):
        monkeypatch.setenv("FLY_API_HOSTNAME", "https://env.example")
        assert APIClient(TOKEN).api_url == "https://env.example"


# =============================================================================
# GraphQL
# =============================================================================


class TestGraphQL:
    def test_posts_query_and_variables_with_bearer_token(self, api, fake_http):
        fake_http.reply({"data": {"app": {"name": "my-app"}}})

        data = api.graphql_or_raise("query { app }", {"name": "my-app"})

        assert data == {"app": {"name": "my-app"}}
        req = fake_http.last
        assert req.method == "POST"
        assert req.url == f"{GRAPHQL_URL}/graphql"
        assert req.headers["authorization"] == f"Bearer {TOKEN}"
        assert req.headers["content-type"] == "application/json"
        assert req.body == {"query": "query { app }", "variables": {"name": "my-app"}}

    def test_strict_raises_on_errors_list(self, api, fake_http):
        fake_http.reply({"data": {"app": None}, "errors": GRAPHQL_ERRORS})

        with pytest.raises(GraphQLError) as exc_info:
            api.graphql_or_raise("query { app }")

        assert exc_info.value.errors == GRAPHQL_ERRORS
        assert exc_info.value.status == 500

    def test_strict_ignores_empty_errors_list(self, api, fake_http):
        fake_http.reply({"data": {"ok": True}, "errors": []})
        assert api.graphql_or_raise("query { ok }") == {"ok": True}

    def test_strict_raises_on_http_status(self, api, fake_http):
        fake_http.reply("unauthorized", status=401)

        with pytest.raises(APIError) as exc_info:
            api.graphql_or_raise("query { app }")

        assert exc_info.value.status == 401
        assert exc_info.value.message == "unauthorized"

    def test_strict_raises_on_invalid_json(self, api, fake_http):
        fake_http.reply("<html>oops</html>")

        with pytest.raises(APIError, match="Invalid JSON response"):
            api.graphql_or_raise("query { app }")

    def test_safe_reports_errors_list_as_500_with_serialized_errors(self, api, fake_http):
        fake_http.reply({"data": {"app": {"name": "partial"}}, "errors": GRAPHQL_ERRORS})

        response = api.safe_graphql("query { app }")

        assert response.data is None
        assert response.error.status == 500
        assert json.loads(response.error.message) == GRAPHQL_ERRORS

    def test_safe_reports_http_status_and_body(self, api, fake_http):
        fake_http.reply("bad gateway", status=502)

        response = api.safe_graphql("query { app }")

        assert response.error == ErrorInfo(status=502, message="bad gateway")
        assert response.data is None

    def test_safe_applies_parser(self, api, fake_http):
        fake_http.reply({"data": {"app": {"name": "my-app"}}})

        response = api.safe_graphql("query { app }", parser=lambda d: d["app"]["name"])

        assert response.ok
        assert response.data == "my-app"

    def test_safe_reports_parser_failure(self, api, fake_http):
        fake_http.reply({"data": {"app": {}}})

        def parser(data):
            raise ResponseShapeError("Unexpected response shape: missing 'machines'")

        response = api.safe_graphql("query { app }", parser=parser)

        assert response.error == ErrorInfo(status=500, message="Unexpected response shape: missing 'machines'")


# =============================================================================
# REST
# =============================================================================


class TestREST:
    def test_get_decodes_json(self, api, fake_http):
        fake_http.reply({"name": "my-app"})

        assert api.rest_or_raise("apps/my-app") == {"name": "my-app"}
        assert fake_http.last.method == "GET"
        assert fake_http.last.url == f"{API_URL}/v1/apps/my-app"
        assert fake_http.last.body is None

    def test_empty_body_is_none(self, api, fake_http):
        fake_http.reply("")
        assert api.rest_or_raise("apps/my-app", "DELETE") is None

    def test_safe_empty_body_is_success_without_data(self, api, fake_http):
        fake_http.reply("")

        response = api.safe_rest("apps/my-app", "DELETE")

        assert response.ok
        assert response.error is None
        assert response.data is None

    def test_safe_error_body_that_is_not_utf8_keeps_status(self, api, fake_http):
        fake_http.reply(b"\xff\xfebad gateway", status=502)

        response = api.safe_rest("apps/my-app")

        assert response.error.status == 502
        assert response.error.message.endswith("bad gateway")

    def test_success_body_that_is_not_utf8_is_decoded_lossily(self, api, fake_http):
        fake_http.reply(b'{"name": "caf\xe9"}')
        assert api.rest_or_raise("apps/my-app") == {"name": "caf\ufffd"}

    def test_safe_empty_body_skips_parser(self, api, fake_http):
        fake_http.reply("")

        response = api.safe_rest("apps/my-app/volumes", "POST", {"name": "data"}, parser=lambda data: data["id"])

        assert response.ok
        assert response.data is None

    def test_sends_json_body(self, api, fake_http):
        fake_http.reply({"id": "vol_1"})

        api.rest_or_raise("apps/my-app/volumes", "POST", {"name": "data"})

        assert fake_http.last.method == "POST"
        assert fake_http.last.body == {"name": "data"}

    def test_unsupported_method(self, api, fake_http):
        with pytest.raises(ValidationError):
            api.rest_or_raise("apps", "PATCH")
        assert fake_http.requests == []

    def test_strict_raises_on_http_status(self, api, fake_http):
        fake_http.reply("app not found", status=404)

        with pytest.raises(APIError) as exc_info:
            api.rest_or_raise("apps/missing-app")

        assert exc_info.value.status == 404
        assert exc_info.value.to_dict() == {"error": "app not found", "status": 404}

    def test_safe_reports_http_status_and_body(self, api, fake_http):
        fake_http.reply("app not found", status=404)

        response = api.safe_rest("apps/missing-app")

        assert response.data is None
        assert response.error == ErrorInfo(status=404, message="app not found")

    def test_safe_network_failure_is_500(self, api, fake_http):
        fake_http.fail(urllib.error.URLError("Name or service not known"))

        response = api.safe_rest("apps/my-app")

        assert response.error.status == 500
        assert "Name or service not known" in response.error.message

    def test_strict_network_failure_raises(self, api, fake_http):
        fake_http.fail(urllib.error.URLError("Name or service not known"))

        with pytest.raises(APIError) as exc_info:
            api.rest_or_raise("apps/my-app")

        assert exc_info.value.message == "Name or service not known"
        assert exc_info.value.to_dict() == {"error": "Name or service not known"}

    def test_safe_timeout_is_500(self, api, fake_http):
        fake_http.fail(TimeoutError())

        response = api.safe_rest("apps/my-app")

        assert response.error.status == 500
        assert "timed out" in response.error.message

    def test_safe_invalid_json_is_500(self, api, fake_http):
        fake_http.reply("not json")

        response = api.safe_rest("apps/my-app")

        assert response.error.status == 500
        assert response.error.message.startswith("Invalid JSON response")

    def test_safe_unexpected_exception_is_500(self, api, fake_http):
        fake_http.fail(RuntimeError("socket exploded"))

        response = api.safe_rest("apps/my-app")

        assert response.error == ErrorInfo(status=500, message="socket exploded")


# =============================================================================
# Result normalization
# =============================================================================


class TestErrorFromException:
    def test_http_error_keeps_status_and_body(self):
        assert error_from_exception(APIError("nope", status=403)) == ErrorInfo(403, "nope")

    def test_graphql_error_is_500_with_compact_json(self):
        errors = [{"message": "boom"}]
        assert error_from_exception(GraphQLError(errors)) == ErrorInfo(500, '[{"message":"boom"}]')

    def test_api_error_without_status_is_500(self):
        assert error_from_exception(APIError("Connection refused")) == ErrorInfo(500, "Connection refused")

    def test_graphql_error_to_dict_keeps_structured_errors(self):
        errors = [{"message": "boom"}]
        assert GraphQLError(errors).to_dict() == {"error": '[{"message":"boom"}]', "status": 500, "errors": errors}

    def test_plain_exception_message(self):
        assert error_from_exception(ValueError("bad value")) == ErrorInfo(500, "bad value")

    def test_exception_without_message(self):
        assert error_from_exception(RuntimeError()) == ErrorInfo(500, UNKNOWN_ERROR_MESSAGE)


class TestAPIResponse:
    def test_rejects_both_data_and_error(self):
        with pytest.raises(ValueError):
            APIResponse(data={"name": "x"}, error=ErrorInfo(500, "boom"))

    def test_unwrap_success(self):
        assert APIResponse(data=[1, 2]).unwrap() == [1, 2]

    def test_unwrap_error_raises(self):
        response = APIResponse(error=ErrorInfo(404, "app not found"))
        assert not response.ok
        with pytest.raises(APIError) as exc_info:
            response.unwrap()
        assert exc_info.value.status == 404

    def test_capture_never_raises(self):
        def call():
            raise KeyError("id")

        response = capture(call)
        assert response.error.status == 500
        assert response.data is None


# =============================================================================
# Paths
# =============================================================================


class TestBuildPath:
    def test_quotes_segments(self):
        assert build_path("apps", "my app", "volumes") == "apps/my%20app/volumes"

    def test_query_drops_none_and_lowers_bools(self):
        path = build_path("apps", "a", "machines", "m1", params={"force": True, "signal": None})
        assert path == "apps/a/machines/m1?force=true"

    def test_empty_params(self):
        assert build_path("apps", params={"org_slug": None}) == "apps"
