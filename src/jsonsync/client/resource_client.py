"""REST client for json-server style resources."""

from typing import Any, Dict, Optional

import requests

from jsonsync.client.models import PageResponse
from jsonsync.config.loader import (
    DEFAULT_SERVER_URL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    get_server_settings,
)
from jsonsync.errors import ConfigurationError, RequestError
from jsonsync.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PAGE = 0
DEFAULT_PAGE_SIZE = 10

TOTAL_COUNT_HEADER = "X-Total-Count"

# Query keys with a meaning of their own; everything else is a plain filter
TEXT_SEARCH_KEY = "text_search"
UNION_KEY = "union"


def build_find_params(
    query: Optional[Dict[str, Any]],
    page: int = DEFAULT_PAGE,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Dict[str, Any]:
    """
    Translate a query and a page window into list-endpoint parameters.

    Args:
        query: Filters; ``text_search`` becomes ``q`` and ``union`` is dropped
        page: Zero-based page number
        page_size: Items per page

    Returns:
        Parameter dict with ``q``, ``_start``, ``_limit`` and the remaining filters
    """
    query = dict(query or {})
    params: Dict[str, Any] = {
        "q": query.pop(TEXT_SEARCH_KEY, None),
        "_start": page * page_size,
        "_limit": page_size,
    }
    query.pop(UNION_KEY, None)
    for key, value in query.items():
        params[key] = value
    return {key: value for key, value in params.items() if value is not None}


def _error_payload(response: requests.Response) -> Any:
    """Decode the server's error body, falling back to the raw text."""
    try:
        return response.json()
    except ValueError:
        return response.text or None


def _parse_total_count(raw: Optional[Any]) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring unparseable total count: {raw!r}")
        return None


class ResourceClient:
    """Performs CRUD requests against one resource path."""

    def __init__(
        self,
        base_path: str,
        server_url: str = DEFAULT_SERVER_URL,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ):
        if not base_path or not str(base_path).strip("/ "):
            raise ConfigurationError("base_path missing on ResourceClient")
        self._base_path = str(base_path).strip("/ ")
        self.server_url = server_url
        self.timeout = timeout_seconds
        self.user_agent = user_agent
        self._session = session or requests.Session()

    @property
    def base_path(self) -> str:
        return self._base_path

    @property
    def url(self) -> str:
        """Absolute URL of the resource collection."""
        return f"{self.server_url.rstrip('/')}/{self._base_path}"

    def _item_url(self, item_id: Any) -> str:
        return f"{self.url}/{item_id}"

    def _get_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        """Send one request; any failure surfaces as RequestError."""
        logger.debug(f"{method} {url} params={kwargs.get('params')}")
        try:
            response = self._session.request(
                method,
                url,
                headers=self._get_headers(),
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise RequestError(payload=None, message=f"{method} {url} failed: {e}") from e

        if not response.ok:
            logger.warning(f"{method} {url} returned {response.status_code}")
            raise RequestError(
                payload=_error_payload(response),
                status_code=response.status_code,
                message=f"{method} {url} returned {response.status_code}",
            )
        return response

    @staticmethod
    def _json_body(response: requests.Response, default: Any = None) -> Any:
        if not response.content:
            return default
        try:
            return response.json()
        except ValueError as e:
            raise RequestError(
                payload=response.text,
                status_code=response.status_code,
                message=f"Response from {response.url} is not valid JSON",
            ) from e

    def find(
        self,
        query: Optional[Dict[str, Any]] = None,
        page: int = DEFAULT_PAGE,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> PageResponse:
        """
        Retrieve one page of the resource list.

        Args:
            query: Filters; ``text_search`` enables full text search
            page: The desired page
            page_size: The desired page size

        Returns:
            PageResponse with the items and, when the backend reports it, the total count

        Raises:
            RequestError: With the server's error body as payload
        """
        params = build_find_params(query, page, page_size)
        response = self._request("GET", self.url, params=params)
        body = self._json_body(response, default=[])

        total_count = _parse_total_count(response.headers.get(TOTAL_COUNT_HEADER))
        if isinstance(body, dict) and isinstance(body.get("data"), list):
            items = body["data"]
            if total_count is None:
                total_count = _parse_total_count(body.get("total"))
        elif isinstance(body, list):
            items = body
        else:
            items = [body] if body else []

        return PageResponse(
            items=items,
            total_count=total_count,
            status_code=response.status_code,
            headers=dict(response.headers),
        )

    def find_one(self, item_id: Any) -> Any:
        """Fetch a single item by id."""
        response = self._request("GET", self._item_url(item_id))
        return self._json_body(response)

    def put(self, item: Dict[str, Any]) -> Any:
        """Create or update an item; the backend reads the id from the body."""
        response = self._request("PUT", self.url, json=dict(item))
        return self._json_body(response)

    def destroy(self, item_id: Any) -> Any:
        """Delete an item by id. An empty response body acknowledges with ``{}``."""
        response = self._request("DELETE", self._item_url(item_id))
        return self._json_body(response, default={})


class ResourceClientFactory:
    """Creates ResourceClient instances that share one server and HTTP session."""

    def __init__(
        self,
        server_url: str = DEFAULT_SERVER_URL,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ):
        if not server_url:
            raise ConfigurationError("server_url missing on ResourceClientFactory")
        self.server_url = server_url
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self.session = session or requests.Session()

    @classmethod
    def from_config(
        cls,
        config: Optional[Dict[str, Any]] = None,
        session: Optional[requests.Session] = None,
    ) -> "ResourceClientFactory":
        server = get_server_settings(config)
        return cls(
            server["url"],
            timeout_seconds=server["timeout_seconds"],
            user_agent=server["user_agent"],
            session=session,
        )

    def create_instance(self, resource_path: str) -> ResourceClient:
        if not resource_path:
            raise ConfigurationError("resource_path missing on ResourceClientFactory")
        return ResourceClient(
            resource_path,
            self.server_url,
            timeout_seconds=self.timeout_seconds,
            user_agent=self.user_agent,
            session=self.session,
        )
