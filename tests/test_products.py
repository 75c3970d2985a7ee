# tests/test_products.py
import pytest

from azlok.client import ApiError, ValidationFailed
from azlok.products import ProductService


def test_list_products_pages(api):
    page = ProductService(api).list_products({"page": 1, "size": 2})
    assert page.total == 5
    assert page.pages == 3
    assert [p.id for p in page.items] == [1, 2]


def test_list_filters(api):
    s = ProductService(api)
    assert {p.id for p in s.featured()} == {1, 2, 5}
    assert {p.id for p in s.bestsellers()} == {1, 3}
    assert {p.id for p in s.new_arrivals()} == {2, 4, 5}
    assert {p.id for p in s.by_category(2)} == {4, 5}
    assert [p.name for p in s.search("masala")] == ["Azlok Garam Masala 200 g"]
    assert {p.id for p in s.list_products({"min_price": 150}).items} == {3, 4, 5}


def test_sorting(api):
    page = ProductService(api).list_products({"sort_by": "price", "sort_order": "desc", "size": 5})
    assert [p.price for p in page.items] == [210.0, 180.0, 160.0, 120.0, 45.0]


def test_list_falls_back_to_empty_page(down_api):
    page = ProductService(down_api).list_products({"page": 2, "size": 4})
    assert page.items == []
    assert page.total == 0
    assert page.page == 2


def test_wrong_shape_body_falls_back(canned_api):
    s = ProductService(canned_api([{"id": 1}]))
    page = s.list_products({"page": 2, "size": 4})
    assert page.items == []
    assert (page.page, page.size) == (2, 4)
    assert s.featured() == []
    assert s.seller_products(1).items == []
    assert s.product_sales(1).total_sales == 0


def test_get_product_raises_for_missing(api):
    with pytest.raises(ApiError) as exc:
        ProductService(api).get_product(99)
    assert exc.value.status_code == 404


def test_image_urls_stay_raw(api):
    # the API sends a JSON-encoded string; normalisation happens at display time
    p = ProductService(api).get_product(1)
    assert isinstance(p.image_urls, str)
    assert p.seller.business_name == "Azlok Enterprises"


def test_create_validates_before_sending(down_api):
    with pytest.raises(ValidationFailed) as exc:
        ProductService(down_api).create_product({"name": "", "price": 0, "stock_quantity": -1})
    assert exc.value.errors == {
        "name": "Product name is required",
        "sku": "SKU is required",
        "price": "Price must be a positive number",
        "stock_quantity": "Stock must be a non-negative number",
        "category_id": "Category is required",
        "description": "Description is required",
    }


NEW_PRODUCT = {
    "name": "Neem Powder",
    "sku": "AZ-NEEM-100",
    "description": "Sun dried neem leaf powder.",
    "price": 90,
    "stock_quantity": 25,
    "category_id": 1,
}


def test_create_requires_login(api):
    with pytest.raises(ApiError) as exc:
        ProductService(api).create_product(NEW_PRODUCT)
    assert exc.value.status_code == 401


def test_create_update_delete(admin_api):
    s = ProductService(admin_api)
    created = s.create_product(NEW_PRODUCT)
    assert created.id == 6
    assert created.category_name == "Spices"
    assert created.slug == "neem-powder"

    with pytest.raises(ApiError, match="SKU already exists"):
        s.create_product(NEW_PRODUCT)

    updated = s.update_product(created.id, {"stock_quantity": 5, "discount_price": 80})
    assert updated.stock_quantity == 5
    assert updated.discount_price == 80
    assert updated.name == "Neem Powder"

    assert s.delete_product(created.id) is True
    with pytest.raises(ApiError):
        s.get_product(created.id)


def test_update_only_checks_changed_fields(admin_api):
    s = ProductService(admin_api)
    with pytest.raises(ValidationFailed) as exc:
        s.update_product(1, {"price": -5})
    assert list(exc.value.errors) == ["price"]


def test_sales_and_fallback(api):
    s = ProductService(api)
    assert s.product_sales(1).total_sales == 42
    zero = s.product_sales(4)
    assert (zero.total_sales, zero.total_revenue) == (0, 0.0)


def test_seller_products(api):
    assert ProductService(api).seller_products(2).total == 2
    assert ProductService(api).seller_products(42).items == []
