# tests/test_validation.py
from azlok.validation import validate_blog_form, validate_product_form

VALID = {
    "name": "Azlok Zeera",
    "sku": "AZ-ZEERA",
    "price": "120",
    "stock_quantity": "0",
    "category_id": 1,
    "description": "Whole cumin.",
}


def test_valid_product():
    assert validate_product_form(VALID) == {}


def test_product_messages():
    errors = validate_product_form({**VALID, "name": "  ", "price": "", "stock_quantity": ""})
    assert errors == {
        "name": "Product name is required",
        "price": "Price is required",
        "stock_quantity": "Stock quantity is required",
    }
    assert validate_product_form({**VALID, "price": "abc"}) == {"price": "Price must be a positive number"}
    assert validate_product_form({**VALID, "stock_quantity": "-2"}) == {
        "stock_quantity": "Stock must be a non-negative number",
    }


def test_blog_form():
    assert validate_blog_form({"title": "Hi", "content": "Body"}) == {}
    assert validate_blog_form({"content": "Body", "status": "published"}) == {
        "title": "Title is required",
        "published_date": "Published date is required for published blogs",
    }
    assert validate_blog_form({"title": "Hi", "content": "Body", "status": "published",
                               "published_date": "2026-10-17"}) == {}


def test_non_finite_numbers_rejected():
    assert validate_product_form({**VALID, "price": "nan"}) == {"price": "Price must be a positive number"}
    assert validate_product_form({**VALID, "price": float("inf")}) == {"price": "Price must be a positive number"}
    assert validate_product_form({**VALID, "stock_quantity": "inf"}) == {
        "stock_quantity": "Stock must be a non-negative number",
    }
