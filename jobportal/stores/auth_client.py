"""
HTTP client for the /api/auth endpoints, used by AuthStore.

Every call returns {"success": True, ...} or {"success": False, "error": msg}
for API-level failures (4xx/5xx). Transport failures raise AuthClientError.
"""

from typing import Any, Dict, Optional

import httpx

DEFAULT_TIMEOUT = 10.0


class AuthClientError(Exception):
    """The auth API could not be reached."""


def _error_message(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except ValueError:
        return f"Request failed with status {response.status_code}"
    if isinstance(detail, dict):
        return detail.get("message") or str(detail)
    if isinstance(detail, list):
        # FastAPI request validation errors
        return "; ".join(item.get("msg", "") for item in detail if isinstance(item, dict))
    return str(detail) if detail else f"Request failed with status {response.status_code}"


class ApiAuthClient:
    """
    Args:
        base_url: API root, e.g. "http://localhost:5000"
        http: pre-built httpx.Client (a FastAPI TestClient works too)
    """

    def __init__(self, base_url: str = "http://localhost:5000", http: Optional[httpx.Client] = None):
        self.http = http or httpx.Client(base_url=base_url, timeout=DEFAULT_TIMEOUT)

    def _request(self, method: str, path: str, token: str = None, **kwargs) -> httpx.Response:
        headers = kwargs.pop("headers", {})
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            return self.http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise AuthClientError(str(e)) from e

    def login(self, email: str, password: str) -> Dict[str, Any]:
        response = self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        if response.status_code != 200:
            return {"success": False, "error": _error_message(response)}
        body = response.json()
        return {"success": True, "user": body["user"], "token": body["access_token"]}

    def register(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        response = self._request("POST", "/api/auth/register", json=user_data)
        if response.status_code not in (200, 201):
            return {"success": False, "error": _error_message(response)}
        body = response.json()
        return {"success": True, "user": body["user"], "token": body["access_token"]}

    def get_current_user(self, token: str) -> Optional[Dict[str, Any]]:
        """The user behind token, or None when the token is rejected."""
        response = self._request("GET", "/api/auth/me", token=token)
        if response.status_code != 200:
            return None
        return response.json()

    def update_profile(self, token: str, profile_data: Dict[str, Any]) -> Dict[str, Any]:
        response = self._request("PUT", "/api/auth/profile", token=token, json=profile_data)
        if response.status_code != 200:
            return {"success": False, "error": _error_message(response)}
        return {"success": True, "user": response.json()}
