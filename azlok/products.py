# azlok/products.py
import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from .client import ApiClient, ApiError, ValidationFailed
from .models import Product, ProductCreate, ProductFilters, ProductPage, ProductSales, ProductUpdate
from .validation import validate_product_form

logger = logging.getLogger(__name__)


def _filter_params(filters: Optional[Union[ProductFilters, Dict[str, Any]]]) -> Dict[str, Any]:
    if filters is None:
        return {}
    if isinstance(filters, dict):
        filters = ProductFilters(**filters)
    return filters.model_dump(exclude_none=True)


class ProductService:
    """Catalogue reads fall back to empty results; writes raise."""

    def __init__(self, client: ApiClient):
        self.client = client

    def list_products(self, filters: Optional[Union[ProductFilters, Dict[str, Any]]] = None) -> ProductPage:
        params = _filter_params(filters)
        try:
            return ProductPage.model_validate(self.client.get("/api/products", params=params))
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching products: {e}")
            return ProductPage(page=params.get("page", 1), size=params.get("size", 0))

    def _items(self, **params) -> List[Product]:
        return self.list_products(ProductFilters(**params)).items

    def get_product(self, product_id: int) -> Product:
        return Product.model_validate(self.client.get(f"/api/products/{product_id}"))

    def featured(self, limit: int = 8) -> List[Product]:
        return self._items(is_featured=True, size=limit)

    def new_arrivals(self, limit: int = 8) -> List[Product]:
        return self._items(is_new=True, size=limit)

    def bestsellers(self, limit: int = 8) -> List[Product]:
        return self._items(is_bestseller=True, size=limit)

    def by_category(self, category_id: int, limit: int = 12) -> List[Product]:
        return self._items(category_id=category_id, size=limit)

    def search(self, query: str, limit: int = 12) -> List[Product]:
        return self._items(search=query, size=limit)

    def create_product(self, data: Union[ProductCreate, Dict[str, Any]]) -> Product:
        raw = data.payload() if isinstance(data, ProductCreate) else dict(data)
        errors = validate_product_form(raw)
        if errors:
            raise ValidationFailed(errors)
        body = ProductCreate.model_validate(raw).payload()
        return Product.model_validate(self.client.post("/api/products", json=body))

    def update_product(self, product_id: int, data: Union[ProductUpdate, Dict[str, Any]]) -> Product:
        update = data if isinstance(data, ProductUpdate) else ProductUpdate.model_validate(data)
        # Only the fields being changed are checked
        errors = {k: v for k, v in validate_product_form(update.payload()).items() if k in update.model_fields_set}
        if errors:
            raise ValidationFailed(errors)
        return Product.model_validate(self.client.put(f"/api/products/{product_id}", json=update.payload()))

    def delete_product(self, product_id: int) -> bool:
        self.client.delete(f"/api/products/{product_id}")
        return True

    def seller_products(self, seller_id: int, filters: Optional[Union[ProductFilters, Dict[str, Any]]] = None) -> ProductPage:
        params = _filter_params(filters)
        try:
            return ProductPage.model_validate(self.client.get(f"/api/sellers/{seller_id}/products", params=params))
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching products for seller {seller_id}: {e}")
            return ProductPage(page=params.get("page", 1), size=params.get("size", 0))

    def product_sales(self, product_id: int) -> ProductSales:
        try:
            return ProductSales.model_validate(self.client.get(f"/api/products/{product_id}/sales"))
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching sales data for product {product_id}: {e}")
            return ProductSales()
