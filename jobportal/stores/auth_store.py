"""
Auth store - current user, token and request status.

The persisted subset (key "auth-store") is user, token and isAuthenticated,
so a restarted session can call initialize_auth() to re-validate the token.
"""

import logging
from typing import Any, Dict, Optional

from jobportal.stores.auth_client import ApiAuthClient, AuthClientError
from jobportal.stores.base import PersistedStore

logger = logging.getLogger(__name__)

_SIGNED_OUT = {
    "user": None,
    "token": None,
    "is_authenticated": False,
    "loading": False,
    "error": None,
}


class AuthStore(PersistedStore):
    persist_name = "auth-store"
    persisted_fields = {
        "user": "user",
        "token": "token",
        "is_authenticated": "isAuthenticated",
    }

    def __init__(self, client: ApiAuthClient = None, storage=None):
        self.client = client or ApiAuthClient()

        self.user: Optional[Dict[str, Any]] = None
        self.token: Optional[str] = None
        self.is_authenticated = False
        self.loading = False
        self.error: Optional[str] = None

        super().__init__(storage)

    def _signed_in(self, response: Dict[str, Any]):
        self.set_state(
            user=response["user"],
            token=response["token"],
            is_authenticated=True,
            loading=False,
            error=None,
        )

    def _failed(self, message: str) -> Dict[str, Any]:
        self.set_state(loading=False, error=message)
        return {"success": False, "error": message}

    # ----- actions ------------------------------------------------------

    def login(self, email: str, password: str) -> Dict[str, Any]:
        self.set_state(loading=True, error=None)
        try:
            response = self.client.login(email, password)
        except AuthClientError as e:
            logger.warning("Login request failed: %s", e)
            return self._failed("Login failed. Please try again.")

        if not response["success"]:
            return self._failed(response["error"])

        self._signed_in(response)
        return {"success": True}

    def register(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        self.set_state(loading=True, error=None)
        try:
            response = self.client.register(user_data)
        except AuthClientError as e:
            logger.warning("Registration request failed: %s", e)
            return self._failed("Registration failed. Please try again.")

        if not response["success"]:
            return self._failed(response["error"])

        self._signed_in(response)
        return {"success": True}

    def logout(self):
        self.set_state(**_SIGNED_OUT)

    def update_profile(self, profile_data: Dict[str, Any]) -> Dict[str, Any]:
        if not self.user or not self.token:
            return {"success": False, "error": "Not authenticated"}

        self.set_state(loading=True, error=None)
        try:
            response = self.client.update_profile(self.token, profile_data)
        except AuthClientError as e:
            logger.warning("Profile update request failed: %s", e)
            return self._failed("Failed to update profile. Please try again.")

        if not response["success"]:
            return self._failed(response["error"])

        self.set_state(user=response["user"], loading=False, error=None)
        return {"success": True}

    def initialize_auth(self):
        """Re-validate a persisted token; an invalid one signs the user out."""
        if not self.token:
            return

        self.set_state(loading=True)
        try:
            user = self.client.get_current_user(self.token)
        except AuthClientError as e:
            logger.warning("Could not re-validate session: %s", e)
            user = None

        if user:
            self.set_state(user=user, is_authenticated=True, loading=False, error=None)
        else:
            self.set_state(**_SIGNED_OUT)

    def clear_error(self):
        self.set_state(error=None)

    # ----- derived ------------------------------------------------------

    def is_logged_in(self) -> bool:
        return bool(self.is_authenticated and self.user and self.token)

    def get_user_id(self) -> Optional[int]:
        return self.user.get("id") if self.user else None

    def has_permission(self, permission: str) -> bool:
        # Permissions are not modelled yet; any signed-in user has them all.
        return self.user is not None
