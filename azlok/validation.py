# azlok/validation.py
import math
from typing import Any, Dict, Mapping


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _number(value: Any):
    try:
        n = float(value)
    except (TypeError, ValueError):
        return None
    return n if math.isfinite(n) else None


def validate_product_form(data: Mapping[str, Any]) -> Dict[str, str]:
    """Presence checks run before a product is created or updated. Empty dict means valid."""
    errors: Dict[str, str] = {}

    if _blank(data.get("name")):
        errors["name"] = "Product name is required"
    if _blank(data.get("sku")):
        errors["sku"] = "SKU is required"

    price = data.get("price")
    if _blank(price):
        errors["price"] = "Price is required"
    else:
        n = _number(price)
        if n is None or n <= 0:
            errors["price"] = "Price must be a positive number"

    stock = data.get("stock_quantity")
    if _blank(stock):
        errors["stock_quantity"] = "Stock quantity is required"
    else:
        n = _number(stock)
        if n is None or n < 0:
            errors["stock_quantity"] = "Stock must be a non-negative number"

    if _blank(data.get("category_id")):
        errors["category_id"] = "Category is required"
    if _blank(data.get("description")):
        errors["description"] = "Description is required"

    return errors


def validate_blog_form(data: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    if _blank(data.get("title")):
        errors["title"] = "Title is required"
    if _blank(data.get("content")):
        errors["content"] = "Content is required"
    if data.get("status") == "published" and _blank(data.get("published_date")):
        errors["published_date"] = "Published date is required for published blogs"

    return errors
