import logging
from typing import Any

import requests

from .errors import ApiError, AuthenticationError, NetworkError, RateLimitError

API_BASE = "https://api.ticktick.com/open/v1"
RATE_LIMIT_ERROR_CODE = "exceed_query_limit"

logger = logging.getLogger(__name__)


class TickTickConnection:
    """Authenticated access point to the TickTick Open API.

    Every request carries the bearer token. Successful responses are returned
    as parsed JSON (or ``None`` for an empty body); everything else is raised
    as a classified error. Nothing is retried here.
    """

    def __init__(
        self,
        token: str | None,
        base_url: str = API_BASE,
        session: requests.Session | None = None,
    ):
        if not token:
            raise AuthenticationError(
                "TickTick access token is not set (TICKTICK_ACCESS_TOKEN)"
            )

        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update(
            {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        )

    def get(self, path: str) -> Any:
        return self._make_request("GET", path)

    def post(self, path: str) -> Any:
        return self._make_request("POST", path)

    def post_json(self, path: str, body: dict[str, Any]) -> Any:
        return self._make_request("POST", path, json_body=body)

    def delete(self, path: str) -> Any:
        return self._make_request("DELETE", path)

    def _make_request(
        self, method: str, path: str, json_body: dict[str, Any] | None = None
    ) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug(f"{method} {url}")

        try:
            if method == "GET":
                response = self.session.get(url)
            elif method == "POST" and json_body is not None:
                # requests sets Content-Type: application/json for json=
                response = self.session.post(url, json=json_body)
            elif method == "POST":
                response = self.session.post(url)
            elif method == "DELETE":
                response = self.session.delete(url)
            else:
                raise ValueError(f"Unsupported HTTP method: {method}")
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise NetworkError(str(e)) from e

        logger.debug(f"Response status: {response.status_code}")
        return self._handle_response(response)

    def _handle_response(self, response: requests.Response) -> Any:
        if not 200 <= response.status_code < 300:
            if self._is_rate_limited(response):
                logger.warning(f"Rate limited by TickTick (HTTP {response.status_code})")
                raise RateLimitError(status=response.status_code, body=response.text)
            raise ApiError(status=response.status_code, body=response.text)

        if not response.content:
            return None

        try:
            return response.json()
        except requests.exceptions.JSONDecodeError as e:
            logger.error(f"Non-JSON success body (HTTP {response.status_code}): {response.text!r}")
            raise ApiError(status=response.status_code, body=response.text) from e

    @staticmethod
    def _is_rate_limited(response: requests.Response) -> bool:
        try:
            error_data = response.json()
        except requests.exceptions.JSONDecodeError:
            return False

        return isinstance(error_data, dict) and error_data.get("errorCode") == RATE_LIMIT_ERROR_CODE
