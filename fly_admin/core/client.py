"""
Core HTTP client for the Fly.io platform.

Handles authentication, request/response, and error handling for both the
GraphQL endpoint and the Machines REST API.
"""

import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable
from typing import Any, TypeVar

from fly_admin.core.errors import APIError, ConfigurationError, GraphQLError, ValidationError
from fly_admin.core.result import APIResponse, capture

logger = logging.getLogger(__name__)

# Configuration
FLY_API_GRAPHQL = "https://api.fly.io"
FLY_API_HOSTNAME = "https://api.machines.dev"

REST_METHODS = ("GET", "POST", "PUT", "DELETE")

T = TypeVar("T")


class APIClient:
    """
    Low-level HTTP client for the Fly.io APIs.

    Every endpoint is available in two calling conventions:

    - strict (``graphql_or_raise``, ``rest_or_raise``): returns the decoded
      payload and raises ``FlyError`` subclasses on failure
    - safe (``safe_graphql``, ``safe_rest``): never raises, returns an
      ``APIResponse`` carrying either ``data`` or ``error``
    """

    def __init__(
        self,
        api_key: str | None = None,
        graphql_url: str | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
    ):
        """
        Initialize the API client.

        Args:
            api_key: Fly API token (or FLY_API_TOKEN env var)
            graphql_url: GraphQL base URL (or FLY_API_GRAPHQL_URL env var)
            api_url: Machines API base URL (or FLY_API_HOSTNAME env var)
            timeout: Request timeout in seconds, None leaves it to urllib

        Raises:
            ConfigurationError: If no API token is available

        """
        api_key = api_key or os.environ.get("FLY_API_TOKEN")
        if not api_key:
            raise ConfigurationError("Fly API token is required. Pass api_key or set FLY_API_TOKEN")
        self._api_key = api_key
        env_graphql_url = os.environ.get("FLY_API_GRAPHQL_URL") or FLY_API_GRAPHQL
        env_api_url = os.environ.get("FLY_API_HOSTNAME") or FLY_API_HOSTNAME
        self.graphql_url = (graphql_url or env_graphql_url).rstrip("/")
        self.api_url = (api_url or env_api_url).rstrip("/")
        self.timeout = timeout

    @property
    def api_key(self) -> str:
        return self._api_key

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _send(self, method: str, url: str, payload: Any = None) -> str:
        """
        Perform one HTTP round trip and return the response body text.

        Raises:
            APIError: On non-2xx status (status = HTTP code, message = body),
                connection failure or timeout

        """
        body = json.dumps(payload).encode("utf-8") if payload is not None else None
        req = urllib.request.Request(url, data=body, headers=self._headers(), method=method)
        logger.debug("%s %s", method, url)

        try:
            if self.timeout is None:
                response = urllib.request.urlopen(req)
            else:
                response = urllib.request.urlopen(req, timeout=self.timeout)
            with response:
                return response.read().decode("utf-8", errors="replace")

        except urllib.error.HTTPError as e:
            error_body = e.read().decode("utf-8", errors="replace")
            raise APIError(error_body, status=e.code)

        except urllib.error.URLError as e:
            raise APIError(str(e.reason))

        except TimeoutError:
            raise APIError(f"Request timed out after {self.timeout} seconds")

    @staticmethod
    def _decode(text: str) -> Any:
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise APIError(f"Invalid JSON response: {e}")

    # =========================================================================
    # GraphQL
    # =========================================================================

    def graphql_or_raise(self, query: str, variables: dict[str, Any] | None = None) -> Any:
        """
        Run a GraphQL document and return its ``data``.

        Args:
            query: GraphQL query or mutation document
            variables: Variables for the document

        Returns:
            The decoded ``data`` member of the response envelope

        Raises:
            APIError: On HTTP, connection or parsing errors
            GraphQLError: If the envelope carries a non-empty ``errors`` list

        """
        text = self._send(
            "POST",
            f"{self.graphql_url}/graphql",
            {"query": query, "variables": variables or {}},
        )
        envelope = self._decode(text)
        if not isinstance(envelope, dict):
            raise APIError("Invalid GraphQL response: expected a JSON object")

        errors = envelope.get("errors")
        if errors:
            raise GraphQLError(errors)
        return envelope.get("data")

    def safe_graphql(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        parser: Callable[[Any], T] | None = None,
    ) -> APIResponse[T]:
        """Run a GraphQL document, returning failures as an error result."""
        return capture(lambda: self.graphql_or_raise(query, variables), parser)

    # =========================================================================
    # REST
    # =========================================================================

    def rest_or_raise(self, path: str, method: str = "GET", body: Any = None) -> Any:
        """
        Call the Machines REST API at ``<api_url>/v1/<path>``.

        Args:
            path: Path relative to /v1/, may include a query string
            method: HTTP method (GET, POST, PUT, DELETE)
            body: JSON body for mutating requests

        Returns:
            Decoded JSON payload, or None when the response body is empty

        Raises:
            ValidationError: On an unsupported HTTP method
            APIError: On HTTP, connection or parsing errors

        """
        method = method.upper()
        if method not in REST_METHODS:
            raise ValidationError(f"Unsupported HTTP method: {method}")

        text = self._send(method, f"{self.api_url}/v1/{path.lstrip('/')}", body)
        if not text:
            return None
        return self._decode(text)

    def safe_rest(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
        parser: Callable[[Any], T] | None = None,
    ) -> APIResponse[T]:
        """Call the Machines REST API, returning failures as an error result."""
        return capture(lambda: self.rest_or_raise(path, method, body), parser)


def build_path(*segments: str, params: dict[str, Any] | None = None) -> str:
    """
    Join URL-quoted path segments and append a query string.

    ``None`` values in ``params`` are dropped, booleans become ``true``/``false``.
    """
    path = "/".join(urllib.parse.quote(str(s), safe="") for s in segments)
    if params:
        filtered_params = {
            k: (str(v).lower() if isinstance(v, bool) else v) for k, v in params.items() if v is not None
        }
        if filtered_params:
            path = f"{path}?{urllib.parse.urlencode(filtered_params)}"
    return path
