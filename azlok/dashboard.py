# azlok/dashboard.py
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from .client import ApiClient, ApiError
from .models import Product, ProductSales, Seller

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "Not available"


@dataclass
class ProductOverview:
    product: Product
    sales: ProductSales
    seller: Optional[Seller]


def _fallback_seller(product: Product) -> Optional[Seller]:
    ref = product.seller
    if ref is None:
        return None
    return Seller(
        id=ref.id,
        name=ref.business_name or ref.full_name or "Unknown Seller",
        email=NOT_AVAILABLE,
        phone=NOT_AVAILABLE,
        join_date=NOT_AVAILABLE,
    )


async def _fetch_sales(client: ApiClient, product_id: int) -> ProductSales:
    try:
        return ProductSales.model_validate(await client.aget(f"/api/products/{product_id}/sales"))
    except ApiError as e:
        logger.error(f"Error fetching sales data for product {product_id}: {e}")
        return ProductSales()


async def _fetch_seller(client: ApiClient, product: Product) -> Optional[Seller]:
    if product.seller is None:
        return None
    try:
        return Seller.model_validate(await client.aget(f"/api/sellers/{product.seller.id}"))
    except ApiError as e:
        logger.error(f"Error fetching seller info for product {product.id}: {e}")
        return _fallback_seller(product)


async def load_product_overview(client: ApiClient, product_id: int) -> ProductOverview:
    """
    Back-office product detail: the product, then its sales figures and
    seller profile fetched side by side. Sales and seller each fall back
    independently; a missing product raises ApiError.
    """
    product = Product.model_validate(await client.aget(f"/api/products/{product_id}"))
    sales, seller = await asyncio.gather(
        _fetch_sales(client, product_id),
        _fetch_seller(client, product),
    )
    return ProductOverview(product=product, sales=sales, seller=seller)
