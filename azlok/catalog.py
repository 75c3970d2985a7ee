# azlok/catalog.py
import logging
import mimetypes
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from .client import ApiClient, ApiError
from .models import Category, ProductPage, Seller, UploadedImage

logger = logging.getLogger(__name__)

_categories = TypeAdapter(List[Category])
_sellers = TypeAdapter(List[Seller])


class CategoryService:
    def __init__(self, client: ApiClient):
        self.client = client

    def _list(self, endpoint: str, params=None) -> List[Category]:
        try:
            return _categories.validate_python(self.client.get(endpoint, params=params) or [])
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching categories from {endpoint}: {e}")
            return []

    def all(self) -> List[Category]:
        return self._list("/api/categories/all")

    def top_level(self) -> List[Category]:
        return self._list("/api/categories")

    def subcategories(self, parent_id: int) -> List[Category]:
        return self._list("/api/categories", params={"parent_id": parent_id})

    def get(self, category_id: int) -> Category:
        return Category.model_validate(self.client.get(f"/api/categories/{category_id}"))


class SellerService:
    def __init__(self, client: ApiClient):
        self.client = client

    def all(self) -> List[Seller]:
        try:
            return _sellers.validate_python(self.client.get("/api/sellers") or [])
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching sellers: {e}")
            return []

    def top(self, limit: int = 4) -> List[Seller]:
        try:
            return _sellers.validate_python(self.client.get("/api/sellers/top", params={"limit": limit}) or [])
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching top sellers: {e}")
            return []

    def get(self, seller_id: int) -> Seller:
        return Seller.model_validate(self.client.get(f"/api/sellers/{seller_id}"))

    def by_slug(self, slug: str) -> Seller:
        return Seller.model_validate(self.client.get(f"/api/sellers/slug/{slug}"))

    def products(self, seller_id: int, page: int = 1, limit: int = 10) -> ProductPage:
        try:
            data = self.client.get(f"/api/sellers/{seller_id}/products", params={"page": page, "size": limit})
            return ProductPage.model_validate(data)
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching products for seller {seller_id}: {e}")
            return ProductPage(page=page, size=limit)


def upload_image(
    client: ApiClient,
    file: Union[str, Path, bytes, BinaryIO],
    filename: Optional[str] = None,
    folder: str = "products",
) -> UploadedImage:
    """Upload a product/blog image as multipart form data; returns the hosted URL"""
    if isinstance(file, (str, Path)):
        path = Path(file)
        filename = filename or path.name
        content = path.read_bytes()
    elif isinstance(file, bytes):
        content = file
    else:
        content = file.read()
    filename = filename or "upload.bin"
    content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"

    data = client.post(
        "/api/seller/upload/image",
        files={"file": (filename, content, content_type)},
        data={"folder": folder},
    )
    return UploadedImage.model_validate(data)
