# tests/test_storefront.py
import httpx
import pytest
from fastapi.testclient import TestClient

from azlok.config import settings
from demo_backend.main import app as backend_app
from storefront.core import CART_SUMMARY_FIELDS, normalize_cart_summary, search_page
from storefront.main import app, get_backend_client

from conftest import BACKEND_URL


def _use_transport(transport):
    async def override():
        async with httpx.AsyncClient(transport=transport, base_url=BACKEND_URL) as client:
            yield client

    app.dependency_overrides[get_backend_client] = override


@pytest.fixture
def storefront(backend):
    _use_transport(httpx.ASGITransport(app=backend_app))
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def broken_storefront():
    def fail(request):
        raise httpx.ConnectError("connection refused", request=request)

    _use_transport(httpx.MockTransport(fail))
    yield TestClient(app)
    app.dependency_overrides.clear()


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


# Cart summary
def test_cart_summary_needs_shipping_method(storefront):
    r = storefront.get("/api/proxy/cart-summary")
    assert r.status_code == 400
    assert r.json() == {"error": "Shipping method ID is required"}


def test_empty_cart_gives_zeroed_summary(storefront, admin_token):
    r = storefront.get("/api/proxy/cart-summary", params={"shipping_method_id": 1}, headers=_auth(admin_token))
    assert r.status_code == 200
    assert r.json() == {field: 0 for field in CART_SUMMARY_FIELDS}


def test_cart_summary_totals(storefront, backend, admin_token):
    backend.post("/api/cart/items", json={"product_id": 4, "quantity": 1}, headers=_auth(admin_token))
    r = storefront.get("/api/proxy/cart-summary", params={"shipping_method_id": 1}, headers=_auth(admin_token))
    assert r.status_code == 200
    body = r.json()
    assert set(body) == set(CART_SUMMARY_FIELDS)
    assert body["subtotal"] == 210
    assert body["tax_amount"] == pytest.approx(37.8)
    assert body["shipping_tax_amount"] == pytest.approx(9.0)
    assert body["total"] == pytest.approx(306.8)
    assert body["igst_amount"] == 0


def test_cart_summary_backend_errors(storefront, backend, admin_token):
    r = storefront.get("/api/proxy/cart-summary", params={"shipping_method_id": 1})
    assert r.status_code == 401
    assert r.json() == {"error": "Failed to fetch cart summary"}

    backend.post("/api/cart/items", json={"product_id": 1}, headers=_auth(admin_token))
    r = storefront.get("/api/proxy/cart-summary", params={"shipping_method_id": 9}, headers=_auth(admin_token))
    assert r.status_code == 404


def test_cart_summary_unreachable_backend(broken_storefront):
    r = broken_storefront.get("/api/proxy/cart-summary", params={"shipping_method_id": 1})
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error"}


def test_normalize_cart_summary_defaults_nulls():
    out = normalize_cart_summary({"subtotal": 100, "tax_amount": None, "extra": 1})
    assert out["subtotal"] == 100
    assert out["tax_amount"] == 0
    assert "extra" not in out


# Search
def test_search_reshapes_results(storefront):
    r = storefront.get("/api/search", params={"query": "zeera"})
    assert r.status_code == 200
    body = r.json()
    assert [p["name"] for p in body["items"]] == ["Azlok Zeera"]
    assert (body["total"], body["page"], body["size"], body["pages"], body["query"]) == (1, 1, 20, 1, "zeera")


def test_search_backend_error():
    _use_transport(httpx.MockTransport(lambda request: httpx.Response(502, text="bad gateway")))
    try:
        r = TestClient(app).get("/api/search", params={"query": "x"})
    finally:
        app.dependency_overrides.clear()
    assert r.status_code == 502
    assert r.json() == {"error": "Failed to fetch search results from backend", "items": []}


def test_search_unreachable_backend(broken_storefront):
    r = broken_storefront.get("/api/search", params={"query": "x"})
    assert r.status_code == 503
    assert r.json()["items"] == []


def _html_gateway(request):
    return httpx.Response(200, text="<html>gateway</html>", headers={"content-type": "text/html"})


@pytest.mark.parametrize("path, params", [
    ("/api/search", {"query": "zeera"}),
    ("/api/proxy/cart-summary", {"shipping_method_id": 1}),
])
def test_non_json_success_body_gives_json_error(path, params):
    _use_transport(httpx.MockTransport(_html_gateway))
    try:
        r = TestClient(app).get(path, params=params)
    finally:
        app.dependency_overrides.clear()
    assert r.status_code == 500
    assert r.headers["content-type"].startswith("application/json")
    assert r.json() == {"error": "Internal server error"}


def test_search_page_defaults():
    assert search_page({}, "q", 3, 12) == {"items": [], "total": 0, "page": 3, "size": 12, "pages": 1, "query": "q"}


# Image upload
def test_upload_requires_bearer(storefront):
    r = storefront.post("/api/seller/upload/image", files={"file": ("a.png", b"\x89PNG", "image/png")})
    assert r.status_code == 401


def test_upload_requires_file(storefront, admin_token):
    r = storefront.post("/api/seller/upload/image", data={"folder": "products"}, headers=_auth(admin_token))
    assert r.status_code == 400
    assert r.json() == {"detail": "No file provided"}


def test_upload_is_forwarded(storefront, admin_token):
    r = storefront.post(
        "/api/seller/upload/image",
        files={"file": ("haldi.jpg", b"\xff\xd8jpeg", "image/jpeg")},
        data={"folder": "blogs"},
        headers=_auth(admin_token),
    )
    assert r.status_code == 200
    assert r.json()["url"].startswith("https://cdn.azlok.com/blogs/")


def test_upload_mirrors_backend_detail(storefront, admin_token):
    r = storefront.post(
        "/api/seller/upload/image",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=_auth(admin_token),
    )
    assert r.status_code == 400
    assert r.json() == {"detail": "File must be an image"}


def test_upload_default_detail():
    _use_transport(httpx.MockTransport(lambda request: httpx.Response(500, text="boom")))
    try:
        r = TestClient(app).post(
            "/api/seller/upload/image",
            files={"file": ("a.png", b"\x89PNG", "image/png")},
            headers={"Authorization": "Bearer t"},
        )
    finally:
        app.dependency_overrides.clear()
    assert r.status_code == 500
    assert r.json() == {"detail": "Failed to upload image"}


def test_upload_non_json_success_body():
    _use_transport(httpx.MockTransport(_html_gateway))
    try:
        r = TestClient(app).post(
            "/api/seller/upload/image",
            files={"file": ("a.png", b"\x89PNG", "image/png")},
            headers={"Authorization": "Bearer t"},
        )
    finally:
        app.dependency_overrides.clear()
    assert r.status_code == 500
    assert r.json() == {"detail": "Internal server error"}


# Crawlers
def test_robots_txt():
    r = TestClient(app).get("/robots.txt")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")
    assert "Disallow: /checkout/" in r.text
    assert f"Sitemap: {settings.SITE_URL.rstrip('/')}/sitemap.xml" in r.text
    assert r.headers["cache-control"] == "public, max-age=3600"


def test_sitemap_xml():
    r = TestClient(app).get("/sitemap.xml")
    assert r.headers["content-type"].startswith("application/xml")
    assert r.text.count("<url>") == 12
    assert f"<loc>{settings.SITE_URL.rstrip('/')}/products</loc>" in r.text
