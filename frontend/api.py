"""HTTP client for the library API, one method per endpoint the pages use."""

import logging
import os
from typing import Any, Dict, Optional

import httpx
from dotenv import load_dotenv

from frontend.exceptions import ApiError, SessionExpiredError

load_dotenv()
logger = logging.getLogger(__name__)

LIBRARY_API_URL = os.getenv("LIBRARY_API_URL", "http://localhost:8000")
REQUEST_TIMEOUT = float(os.getenv("LIBRARY_API_TIMEOUT", "10"))


class LibraryClient:
    def __init__(
        self,
        base_url: str = LIBRARY_API_URL,
        token: Optional[str] = None,
        http: Optional[httpx.Client] = None,
    ):
        self.token = token
        self._owns_http = http is None
        self.http = http or httpx.Client(base_url=base_url, timeout=REQUEST_TIMEOUT)

    def close(self):
        if self._owns_http:
            self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        response = self.http.request(method, path, headers=headers, **kwargs)
        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error:
            logger.warning(f"{method} {path} failed with {response.status_code}: {body.get('message')}")
            error_cls = SessionExpiredError if response.status_code == 401 else ApiError
            if error_cls is SessionExpiredError:
                self.token = None
            raise error_cls(response.status_code, body.get("message"), body.get("errors"))
        return body

    # Auth

    def login(self, email: str, password: str) -> Dict[str, Any]:
        body = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = body["data"]["token"]
        return body

    def logout(self) -> Dict[str, Any]:
        body = self._request("POST", "/auth/logout")
        self.token = None
        return body

    # Categories

    def get_all_categories(
        self,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = {}
        if search:
            params["search"] = search
        if sort_by:
            params["sortBy"] = sort_by
        if sort_order:
            params["sortOrder"] = sort_order
        return self._request("GET", "/categories", params=params)

    def create_category(self, name: str, description: Optional[str] = None) -> Dict[str, Any]:
        return self._request("POST", "/categories", json={"name": name, "description": description})

    def update_category(self, category_id: int, name: str, description: Optional[str] = None) -> Dict[str, Any]:
        return self._request(
            "PATCH", f"/categories/{category_id}", json={"name": name, "description": description}
        )

    def delete_category(self, category_id: int) -> Dict[str, Any]:
        return self._request("DELETE", f"/categories/{category_id}")

    # Profile

    def get_profile(self) -> Dict[str, Any]:
        return self._request("GET", "/profile")

    def update_profile(self, name: str, phone: Optional[str], address: str) -> Dict[str, Any]:
        return self._request("PUT", "/profile", json={"name": name, "phone": phone, "address": address})

    def change_password(self, current_password: str, new_password: str, confirm_password: str) -> Dict[str, Any]:
        body = self._request(
            "PUT",
            "/profile/password",
            json={
                "currentPassword": current_password,
                "newPassword": new_password,
                "confirmPassword": confirm_password,
            },
        )
        # the server has invalidated this session
        self.token = None
        return body
