import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from backend.validation import validate_payload
from frontend.api import LibraryClient
from frontend.exceptions import ApiError, SessionExpiredError, describe_error

logger = logging.getLogger(__name__)


def _checked(page, schema_name: str, form: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Apply the server's form rules locally; on failure fill the page errors and return None."""
    result = validate_payload(schema_name, form)
    if result.is_valid:
        return result.data
    page.field_errors = {error["field"]: error["message"] for error in result.errors}
    page.error_message = result.errors[0]["message"]
    return None


@dataclass
class CategoryManagementPage:
    """State behind the category management screen."""

    client: LibraryClient
    search_term: str = ""
    sort_by: str = "name"
    sort_order: str = "asc"
    categories: List[Dict[str, Any]] = field(default_factory=list)
    error_message: str = ""
    success_message: str = ""
    field_errors: Dict[str, str] = field(default_factory=dict)
    requires_login: bool = False

    def _reset_messages(self):
        self.error_message = ""
        self.success_message = ""
        self.field_errors = {}

    def _fail(self, error: ApiError, fallback: str) -> bool:
        logger.warning(f"Category page action failed: {error}")
        if isinstance(error, SessionExpiredError):
            self.requires_login = True
        self.error_message = describe_error(error, fallback)
        self.field_errors = error.field_errors
        return False

    def load(self) -> bool:
        try:
            response = self.client.get_all_categories(
                search=self.search_term or None,
                sort_by=self.sort_by,
                sort_order=self.sort_order,
            )
        except ApiError as e:
            return self._fail(e, "Could not load categories")
        self.categories = response["data"]["categories"]
        return True

    def search(self, term: str) -> bool:
        self.search_term = term
        return self.load()

    def sort(self, sort_by: str, sort_order: Optional[str] = None) -> bool:
        self.sort_by = sort_by
        if sort_order:
            self.sort_order = sort_order
        return self.load()

    def add(self, name: str, description: Optional[str] = None) -> bool:
        self._reset_messages()
        data = _checked(self, "category", {"name": name, "description": description})
        if data is None:
            return False
        try:
            response = self.client.create_category(data["name"], data["description"])
        except ApiError as e:
            return self._fail(e, "Could not create the category")
        self.success_message = response.get("message", "")
        return self.load()

    def edit(self, category_id: int, name: str, description: Optional[str] = None) -> bool:
        self._reset_messages()
        data = _checked(self, "category", {"name": name, "description": description})
        if data is None:
            return False
        try:
            response = self.client.update_category(category_id, data["name"], data["description"])
        except ApiError as e:
            return self._fail(e, "Could not update the category")
        self.success_message = response.get("message", "")
        return self.load()

    def remove(self, category_id: int) -> bool:
        self._reset_messages()
        try:
            response = self.client.delete_category(category_id)
        except ApiError as e:
            return self._fail(e, "Could not delete the category")
        self.success_message = response.get("message", "")
        return self.load()

    @staticmethod
    def can_delete(category: Dict[str, Any]) -> bool:
        return category.get("books_count", 0) == 0


@dataclass
class ProfilePage:
    client: LibraryClient
    profile: Optional[Dict[str, Any]] = None
    error_message: str = ""
    success_message: str = ""
    field_errors: Dict[str, str] = field(default_factory=dict)
    requires_login: bool = False

    def _reset_messages(self):
        self.error_message = ""
        self.success_message = ""
        self.field_errors = {}

    def _fail(self, error: ApiError, fallback: str) -> bool:
        logger.warning(f"Profile page action failed: {error}")
        if isinstance(error, SessionExpiredError):
            self.requires_login = True
        self.error_message = describe_error(error, fallback)
        self.field_errors = error.field_errors
        return False

    def load(self) -> bool:
        try:
            response = self.client.get_profile()
        except ApiError as e:
            return self._fail(e, "Could not load the profile")
        self.profile = response["data"]["profile"]
        return True

    def save(self, name: str, phone: Optional[str], address: str) -> bool:
        self._reset_messages()
        data = _checked(self, "profile", {"name": name, "phone": phone, "address": address})
        if data is None:
            return False
        try:
            response = self.client.update_profile(data["name"], data["phone"], data["address"])
        except ApiError as e:
            return self._fail(e, "Could not update the profile")
        self.profile = response["data"]["profile"]
        self.success_message = response.get("message", "")
        return True

    def change_password(self, current_password: str, new_password: str, confirm_password: str) -> bool:
        self._reset_messages()
        data = _checked(
            self,
            "password",
            {
                "currentPassword": current_password,
                "newPassword": new_password,
                "confirmPassword": confirm_password,
            },
        )
        if data is None:
            return False
        try:
            response = self.client.change_password(
                data["current_password"], data["new_password"], data["confirm_password"]
            )
        except ApiError as e:
            return self._fail(e, "Could not change the password")
        self.success_message = response.get("message", "")
        self.requires_login = True
        return True
