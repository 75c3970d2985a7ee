# azlok/client.py
import logging
from typing import Any, Dict, Optional

import httpx
import requests

from .config import settings
from .storage import LocalStorage

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised for any non-2xx response or transport failure from the backend"""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def __str__(self):
        if self.status_code is not None:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message


class ValidationFailed(ValueError):
    """A form payload failed local presence checks before any request was made"""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


def _clean_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not params:
        return None
    out = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif hasattr(value, "value"):
            value = value.value
        out[key] = value
    return out


def _error_from_response(resp) -> ApiError:
    try:
        body = resp.json()
    except ValueError:
        body = None
    detail = body.get("detail") if isinstance(body, dict) else None
    if not isinstance(detail, str) or not detail:
        detail = f"API request failed with status {resp.status_code}"
    return ApiError(detail, status_code=resp.status_code, payload=body)


class ApiClient:
    """
    Thin JSON-over-HTTP client for the Azlok backend.

    Attaches the stored bearer token, serialises JSON, and turns every
    failure into an ApiError. `session` can be any requests-compatible
    client (tests pass a FastAPI TestClient); `async_transport` is handed
    to httpx for the async path.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        storage: Optional[LocalStorage] = None,
        timeout: Optional[float] = None,
        session=None,
        async_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.API_URL).rstrip("/")
        self.storage = storage
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self.session = session if session is not None else requests.Session()
        self._async_transport = async_transport

    def url_for(self, endpoint: str) -> str:
        if endpoint.startswith("http"):
            return endpoint
        return f"{self.base_url}{endpoint}"

    def _headers(self, extra: Optional[Dict[str, str]] = None, multipart: bool = False) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if not multipart:
            headers["Content-Type"] = "application/json"
        token = self.storage.auth_token() if self.storage is not None else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if extra:
            headers.update(extra)
        return headers

    @staticmethod
    def _decode(resp, endpoint: str) -> Any:
        if not 200 <= resp.status_code < 300:
            err = _error_from_response(resp)
            logger.error(f"API error for {endpoint}: {err}")
            raise err
        if resp.status_code == 204 or not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError:
            raise ApiError(f"Invalid JSON in response from {endpoint}", status_code=resp.status_code)

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        url = self.url_for(endpoint)
        kwargs: Dict[str, Any] = {
            "params": _clean_params(params),
            "headers": self._headers(headers, multipart=files is not None or data is not None),
            "timeout": self.timeout,
        }
        if json is not None:
            kwargs["json"] = json
        if data is not None:
            kwargs["data"] = data
        if files is not None:
            kwargs["files"] = files

        logger.debug(f"API request: {method} {url}")
        try:
            resp = self.session.request(method, url, **kwargs)
        except (requests.RequestException, httpx.HTTPError) as e:
            logger.error(f"API request error for {endpoint}: {e}")
            raise ApiError(f"Could not reach API: {e}") from e
        logger.debug(f"API response status: {resp.status_code} for {endpoint}")
        return self._decode(resp, endpoint)

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return self.request("GET", endpoint, params=params, **kwargs)

    def post(self, endpoint: str, json: Any = None, **kwargs) -> Any:
        return self.request("POST", endpoint, json=json, **kwargs)

    def put(self, endpoint: str, json: Any = None, **kwargs) -> Any:
        return self.request("PUT", endpoint, json=json, **kwargs)

    def patch(self, endpoint: str, json: Any = None, **kwargs) -> Any:
        return self.request("PATCH", endpoint, json=json, **kwargs)

    def delete(self, endpoint: str, **kwargs) -> Any:
        return self.request("DELETE", endpoint, **kwargs)

    async def arequest(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        url = self.url_for(endpoint)
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._async_transport) as client:
            try:
                resp = await client.request(
                    method, url, params=_clean_params(params), json=json, headers=self._headers(headers)
                )
            except httpx.HTTPError as e:
                logger.error(f"API request error for {endpoint}: {e}")
                raise ApiError(f"Could not reach API: {e}") from e
        return self._decode(resp, endpoint)

    async def aget(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.arequest("GET", endpoint, params=params)
