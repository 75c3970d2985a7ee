# azlok/users.py
import logging
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from .client import ApiClient, ApiError
from .models import User, UserFilters, UserPage

logger = logging.getLogger(__name__)


class UserService:
    """Back-office user management. Failures are logged and turned into empty/None/False results."""

    def __init__(self, client: ApiClient):
        self.client = client

    def list_users(self, filters: Optional[Union[UserFilters, Dict[str, Any]]] = None) -> UserPage:
        if isinstance(filters, dict):
            filters = UserFilters.model_validate(filters)
        params = filters.model_dump(exclude_none=True, by_alias=True) if filters else {}
        try:
            return UserPage.model_validate(self.client.get("/api/users", params=params))
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching users: {e}")
            return UserPage(page=params.get("page", 1), size=params.get("size", 0))

    def get_user(self, user_id: Union[int, str]) -> Optional[User]:
        try:
            return User.model_validate(self.client.get(f"/api/users/{user_id}"))
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching user with ID {user_id}: {e}")
            return None

    def create_user(self, data: Dict[str, Any]) -> Optional[User]:
        try:
            return User.model_validate(self.client.post("/api/users", json=data))
        except (ApiError, ValidationError) as e:
            logger.error(f"Error creating user: {e}")
            return None

    def update_user(self, user_id: Union[int, str], data: Dict[str, Any]) -> Optional[User]:
        try:
            return User.model_validate(self.client.put(f"/api/users/{user_id}", json=data))
        except (ApiError, ValidationError) as e:
            logger.error(f"Error updating user with ID {user_id}: {e}")
            return None

    def update_status(self, user_id: Union[int, str], status: str) -> Optional[User]:
        try:
            return User.model_validate(self.client.patch(f"/api/users/{user_id}/status", json={"status": status}))
        except (ApiError, ValidationError) as e:
            logger.error(f"Error updating status for user {user_id}: {e}")
            return None

    def delete_user(self, user_id: Union[int, str]) -> bool:
        try:
            self.client.delete(f"/api/users/{user_id}")
            return True
        except (ApiError, ValidationError) as e:
            logger.error(f"Error deleting user with ID {user_id}: {e}")
            return False
