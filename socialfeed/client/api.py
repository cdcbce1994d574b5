from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import requests

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"

TokenProvider = Callable[[], Optional[str]]


class ApiRequestError(Exception):
    """Non-2xx answer (or no answer at all) from the API."""

    def __init__(self, code: int, message: str, *, from_server: bool = True):
        super().__init__(message)
        self.code = code
        self.message = message
        self.from_server = from_server

    @property
    def is_auth_error(self) -> bool:
        return self.from_server and self.code in (401, 403)


def _envelope(resp: requests.Response) -> Optional[Dict[str, Any]]:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("message"), str) and isinstance(body.get("code"), int):
        return body
    return None


class ApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        token_provider: TokenProvider,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.session = session or requests.Session()
        self.timeout = timeout

    def token(self) -> Optional[str]:
        return self.token_provider()

    def auth_headers(self) -> Dict[str, str]:
        token = self.token()
        return {"Authorization": f"Bearer {token}"} if token else {}

    def request(self, method: str, path: str, *, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        headers = self.auth_headers()
        try:
            resp = self.session.request(
                method,
                f"{self.base_url}{path}",
                json=json,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("request to %s failed: %s", path, exc)
            raise ApiRequestError(500, UNEXPECTED_ERROR_MESSAGE, from_server=False) from exc

        body = _envelope(resp)
        if resp.ok and body is not None:
            return body
        if body is None:
            raise ApiRequestError(500, UNEXPECTED_ERROR_MESSAGE, from_server=False)
        raise ApiRequestError(body["code"], body["message"])

    def get(self, path: str, **params: Any) -> Dict[str, Any]:
        return self.request("GET", path, params=params or None)

    def patch(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("PATCH", path, json=payload)

    def close(self) -> None:
        self.session.close()
