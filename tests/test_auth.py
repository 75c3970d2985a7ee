# tests/test_auth.py
import json

import pytest

from azlok.auth import AuthService, AuthState
from azlok.client import ApiError
from azlok.storage import LEGACY_TOKEN_KEY, TOKEN_KEY, USER_KEY, LocalStorage


def test_login_fetches_user_when_response_has_none(api):
    token, user = AuthService(api).login("priya@example.com", "buyer123")
    assert token
    assert user.email == "priya@example.com"
    assert user.role == "buyer"


def test_login_rejects_bad_password(api):
    with pytest.raises(ApiError) as exc:
        AuthService(api).login("priya@example.com", "nope")
    assert exc.value.status_code == 401
    assert exc.value.message == "Incorrect email or password"


def test_register_and_username_check(api):
    s = AuthService(api)
    assert s.check_username("priya").available is False
    assert s.check_username("rahul").available is True

    user = s.register("Rahul Verma", "rahul@example.com", "secret1")
    assert user.role == "buyer"
    assert s.check_username("rahul").available is False

    with pytest.raises(ApiError, match="Email already registered"):
        s.register("Rahul Again", "rahul@example.com", "secret2")


def test_username_check_error_is_unavailable(down_api):
    result = AuthService(down_api).check_username("anyone")
    assert result.available is False
    assert result.message == "Error checking username availability"


def test_state_login_persists_and_restores(api, storage):
    state = AuthState(storage, AuthService(api))
    assert not state.is_authenticated

    user = state.login_with_password("seller@azlok.com", "seller123")
    assert state.is_authenticated
    assert state.role == "seller"
    assert user.permissions == ["orders:read", "products:read", "products:write", "uploads:write"]
    assert storage.get_item(TOKEN_KEY) == state.token

    restored = AuthState(LocalStorage(storage.path))
    assert restored.token == state.token
    assert restored.user.email == "seller@azlok.com"
    assert restored.has_permission("products:write")
    assert not restored.has_permission("payments:write")


def test_admin_has_every_permission(api, storage):
    state = AuthState(storage, AuthService(api))
    state.login_with_password("admin@azlok.com", "admin123")
    assert state.has_permission("anything:at-all")


def test_permission_failure_keeps_login(api, storage):
    state = AuthState(storage, AuthService(api))
    _, user = AuthService(api).login("priya@example.com", "buyer123")
    state.login("stale-token", user)
    assert state.is_authenticated
    assert state.user.permissions is None
    assert not state.has_permission("orders:read")


def test_logout_clears_all_keys(storage):
    storage.set_item(TOKEN_KEY, "a")
    storage.set_item(LEGACY_TOKEN_KEY, "b")
    storage.set_item(USER_KEY, json.dumps({"id": 2, "email": "priya@example.com", "role": "buyer"}))
    state = AuthState(storage)
    assert state.role == "buyer"

    state.logout()
    assert not state.is_authenticated
    assert state.user is None
    assert storage.keys() == []


def test_corrupt_stored_user_is_dropped(storage):
    storage.set_item(USER_KEY, "{not json")
    state = AuthState(storage)
    assert state.user is None
    assert storage.get_item(USER_KEY) is None


def test_password_login_needs_service(storage):
    with pytest.raises(RuntimeError):
        AuthState(storage).login_with_password("a@b.c", "x")
