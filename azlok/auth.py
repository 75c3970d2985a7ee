# azlok/auth.py
import json
import logging
from typing import List, Optional, Tuple

from .client import ApiClient, ApiError
from .models import User, UsernameAvailability
from .storage import LEGACY_TOKEN_KEY, TOKEN_KEY, USER_KEY, LocalStorage

logger = logging.getLogger(__name__)

# Roles that are granted every permission
SUPER_ROLES = ("admin", "company")


class AuthService:
    def __init__(self, client: ApiClient):
        self.client = client

    def login(self, email: str, password: str) -> Tuple[str, User]:
        data = self.client.post("/api/auth/login", data={"username": email, "password": password})
        token = data.get("access_token") or data.get("token")
        if not token:
            raise ApiError("Login response did not contain a token", payload=data)
        user_data = data.get("user")
        if user_data is None:
            user_data = self.client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        return token, User.model_validate(user_data)

    def register(self, name: str, email: str, password: str, role: str = "buyer",
                 company: Optional[str] = None) -> User:
        body = {"full_name": name, "email": email, "password": password, "role": role, "company": company}
        data = self.client.post("/api/auth/register", json={k: v for k, v in body.items() if v is not None})
        return User.model_validate(data)

    def check_username(self, username: str) -> UsernameAvailability:
        try:
            return UsernameAvailability.model_validate(self.client.get(f"/api/auth/check-username/{username}"))
        except ApiError as e:
            logger.error(f"Username availability check error: {e}")
            return UsernameAvailability(
                username=username, available=False, message="Error checking username availability"
            )

    def my_permissions(self, token: Optional[str] = None) -> List[str]:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        data = self.client.get("/api/permissions/my-permissions", headers=headers)
        return [str(p) for p in data or []]


class AuthState:
    """
    Signed-in user and bearer token, persisted in local storage so the next
    session starts authenticated.
    """

    def __init__(self, storage: LocalStorage, auth_service: Optional[AuthService] = None):
        self.storage = storage
        self.auth_service = auth_service
        self.token: Optional[str] = storage.auth_token()
        self.user: Optional[User] = None

        stored_user = storage.get_item(USER_KEY)
        if stored_user:
            try:
                self.user = User.model_validate(json.loads(stored_user))
            except ValueError as e:
                logger.error(f"Failed to parse stored user data: {e}")
                storage.remove_item(USER_KEY)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def role(self) -> Optional[str]:
        return self.user.role if self.user else None

    def _persist_user(self) -> None:
        if self.user is not None:
            self.storage.set_item(USER_KEY, self.user.model_dump_json(exclude_none=True))

    def login(self, token: str, user: User) -> None:
        self.token = token
        self.user = user
        self.storage.set_item(TOKEN_KEY, token)
        self._persist_user()
        self.refresh_permissions()

    def login_with_password(self, email: str, password: str) -> User:
        if self.auth_service is None:
            raise RuntimeError("AuthState needs an AuthService to log in with a password")
        token, user = self.auth_service.login(email, password)
        self.login(token, user)
        return self.user

    def logout(self) -> None:
        self.token = None
        self.user = None
        for key in (TOKEN_KEY, LEGACY_TOKEN_KEY, USER_KEY):
            self.storage.remove_item(key)

    def refresh_permissions(self) -> None:
        if not (self.token and self.user and self.auth_service):
            return
        try:
            permissions = self.auth_service.my_permissions(self.token)
        except ApiError as e:
            logger.error(f"Failed to fetch user permissions: {e}")
            return
        self.user = self.user.model_copy(update={"permissions": permissions})
        self._persist_user()

    def has_permission(self, permission: str) -> bool:
        if self.user is None:
            return False
        if self.user.role in SUPER_ROLES:
            return True
        return permission in (self.user.permissions or [])
