# tests/test_users.py
from azlok.models import User, UserFilters
from azlok.users import UserService


def test_listing_requires_admin(buyer_api):
    page = UserService(buyer_api).list_users({"page": 2, "size": 5})
    assert page.items == []
    assert (page.page, page.size) == (2, 5)


def test_list_filter_and_sort(admin_api):
    s = UserService(admin_api)
    assert s.list_users().total == 3
    assert [u.email for u in s.list_users({"role": "seller"}).items] == ["seller@azlok.com"]
    assert [u.email for u in s.list_users({"search": "priya"}).items] == ["priya@example.com"]

    ordered = s.list_users(UserFilters(sort_by="email", sort_order="desc"))
    assert [u.email for u in ordered.items] == ["seller@azlok.com", "priya@example.com", "admin@azlok.com"]


def test_passwords_never_returned(admin_api):
    raw = admin_api.get("/api/users/1")
    assert "password" not in raw
    assert UserService(admin_api).get_user(1).display_name == "Azlok Admin"


def test_create_update_status_delete(admin_api):
    s = UserService(admin_api)
    user = s.create_user({"full_name": "Kiran Rao", "email": "kiran@example.com", "password": "pw123456"})
    assert user.role == "buyer"
    assert user.status == "active"
    assert s.create_user({"full_name": "Dup", "email": "kiran@example.com", "password": "x"}) is None

    assert s.update_user(user.id, {"phone": "9999999999"}).phone == "9999999999"
    assert s.update_status(user.id, "suspended").status == "suspended"

    assert s.delete_user(user.id) is True
    assert s.get_user(user.id) is None
    assert s.delete_user(user.id) is False


def test_suspended_user_cannot_log_in(admin_api, backend):
    UserService(admin_api).update_status(2, "suspended")
    r = backend.post("/api/auth/login", data={"username": "priya@example.com", "password": "buyer123"})
    assert r.status_code == 403


def test_display_name_fallbacks():
    assert User(id=9, email="x@y.z").display_name == "x@y.z"
    assert User(id=9).display_name == "User 9"


def test_wrong_shape_bodies_are_swallowed(canned_api):
    s = UserService(canned_api([{"id": 1}]))
    page = s.list_users({"page": 2, "size": 5})
    assert page.items == []
    assert (page.page, page.size) == (2, 5)
    assert s.get_user(1) is None
