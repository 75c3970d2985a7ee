# storefront/main.py
import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import Depends, FastAPI, File, Form, Header, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from azlok.config import settings

from .core import EMPTY_CART_SUMMARY, normalize_cart_summary, robots_txt, search_page, sitemap_xml

logger = logging.getLogger(__name__)

app = FastAPI(title="Azlok storefront")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

CACHE_HEADERS = {"Cache-Control": "public, max-age=3600"}


async def get_backend_client():
    async with httpx.AsyncClient(base_url=settings.API_URL, timeout=settings.REQUEST_TIMEOUT) as client:
        yield client


def _json_object(resp: httpx.Response) -> Optional[Dict[str, Any]]:
    try:
        body = resp.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _detail(resp: httpx.Response) -> Optional[str]:
    body = _json_object(resp)
    return body.get("detail") if body else None


# ---------------------------
# Seller image upload proxy
# ---------------------------
@app.post("/api/seller/upload/image")
async def upload_image(
    file: Optional[UploadFile] = File(None),
    folder: str = Form("products"),
    authorization: Optional[str] = Header(None),
    backend: httpx.AsyncClient = Depends(get_backend_client),
):
    if not authorization or not authorization.startswith("Bearer "):
        return JSONResponse(status_code=401, content={"detail": "Authorization header missing or invalid"})
    if file is None:
        return JSONResponse(status_code=400, content={"detail": "No file provided"})

    try:
        content = await file.read()
        resp = await backend.post(
            "/api/seller/upload/image",
            files={"file": (file.filename, content, file.content_type or "application/octet-stream")},
            data={"folder": folder},
            headers={"Authorization": authorization},
        )
    except httpx.HTTPError as e:
        logger.error(f"Error uploading image: {e}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    if not resp.is_success:
        detail = _detail(resp) or "Failed to upload image"
        return JSONResponse(status_code=resp.status_code, content={"detail": detail})
    body = _json_object(resp)
    if body is None:
        logger.error(f"Error uploading image: backend returned {resp.headers.get('content-type')}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return body


# ---------------------------
# Cart summary proxy
# ---------------------------
@app.get("/api/proxy/cart-summary")
async def cart_summary(
    shipping_method_id: Optional[str] = None,
    authorization: Optional[str] = Header(None),
    backend: httpx.AsyncClient = Depends(get_backend_client),
):
    if not shipping_method_id:
        return JSONResponse(status_code=400, content={"error": "Shipping method ID is required"})

    headers = {"Content-Type": "application/json"}
    if authorization:
        headers["Authorization"] = authorization
    try:
        resp = await backend.get(
            "/api/cart-summary/", params={"shipping_method_id": shipping_method_id}, headers=headers
        )
    except httpx.HTTPError as e:
        logger.error(f"Error fetching cart summary: {e}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    if resp.status_code == 400 and _detail(resp) == "Cart is empty":
        return dict(EMPTY_CART_SUMMARY)
    if not resp.is_success:
        return JSONResponse(status_code=resp.status_code, content={"error": "Failed to fetch cart summary"})
    body = _json_object(resp)
    if body is None:
        logger.error(f"Error fetching cart summary: backend returned {resp.headers.get('content-type')}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
    return normalize_cart_summary(body)


# ---------------------------
# Product search proxy
# ---------------------------
@app.get("/api/search")
async def search(
    query: str = "",
    page: int = 1,
    size: int = 20,
    category_id: Optional[int] = None,
    authorization: Optional[str] = Header(None),
    backend: httpx.AsyncClient = Depends(get_backend_client),
):
    params = {"query": query, "page": page, "size": size}
    if category_id is not None:
        params["category_id"] = category_id
    headers = {"Authorization": authorization} if authorization else {}
    logger.info(f"Proxying search request: {params}")

    try:
        resp = await backend.get("/api/products/search/", params=params, headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"Error connecting to backend API: {e}")
        return JSONResponse(status_code=503, content={"error": "Failed to connect to backend API", "items": []})

    if not resp.is_success:
        logger.error(f"Backend API error: {resp.status_code} {resp.text}")
        return JSONResponse(
            status_code=resp.status_code,
            content={"error": "Failed to fetch search results from backend", "items": []},
        )

    body = _json_object(resp)
    if body is None:
        logger.error(f"Error in search route: backend returned {resp.headers.get('content-type')}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
    result = search_page(body, query, page, size)
    logger.info(f"Search results: {len(result['items'])} items found")
    return result


# ---------------------------
# Crawlers
# ---------------------------
@app.get("/robots.txt", response_class=PlainTextResponse)
async def robots():
    return PlainTextResponse(robots_txt(settings.SITE_URL), headers=CACHE_HEADERS)


@app.get("/sitemap.xml")
async def sitemap():
    return Response(sitemap_xml(settings.SITE_URL), media_type="application/xml", headers=CACHE_HEADERS)


def run(host: str = "127.0.0.1", port: int = 3000):
    """Serve the storefront routes; the backend is taken from AZLOK_API_URL"""
    import uvicorn
    uvicorn.run(app, host=host, port=port, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
