# tests/test_cart.py
import pytest

from azlok.cart import TAX_ERROR_MESSAGE, CartItem, CartState
from azlok.products import ProductService
from azlok.storage import CART_KEY
from azlok.tax import TaxService


@pytest.fixture
def cart(api, storage):
    return CartState(storage, TaxService(api))


def _item(api, product_id, quantity=1):
    return CartItem.from_product(ProductService(api).get_product(product_id), quantity)


def test_item_from_product_uses_discount_and_first_image(api):
    item = _item(api, 1)
    assert item.price == 99.0
    assert item.image == "/products/azlok-zeera.jpg"
    assert item.seller == "Azlok Enterprises"
    assert item.seller_id == 1


def test_add_merges_quantities_and_persists(api, storage, cart):
    cart.add_item(_item(api, 2, 2))
    cart.add_item(_item(api, 2, 3))
    cart.add_item(_item(api, 1))
    assert cart.item_count == 6
    assert cart.subtotal == pytest.approx(45 * 5 + 99)

    reloaded = CartState(storage)
    assert [(i.id, i.quantity) for i in reloaded.items] == [(2, 5), (1, 1)]


def test_update_quantity_and_remove(api, cart):
    cart.add_item(_item(api, 2))
    cart.add_item(_item(api, 5))
    cart.update_quantity(2, 4)
    assert cart._find(2).quantity == 4

    cart.update_quantity(5, 0)
    assert [i.id for i in cart.items] == [2]
    cart.update_quantity(42, 3)
    assert cart.item_count == 4


def test_interstate_order_uses_igst(api, cart):
    cart.add_item(_item(api, 4, 2))
    cart.buyer_state = "Karnataka"
    cart.set_shipping_amount(50)

    assert cart.calculate_taxes() is True
    assert cart.tax_amount == pytest.approx(75.6)
    assert cart.igst_amount == pytest.approx(75.6)
    assert cart.cgst_amount == 0
    assert cart.shipping_tax_amount == pytest.approx(9.0)
    assert cart.total_price == pytest.approx(554.6)
    assert cart.items[0].hsn_code == "2840"


def test_same_state_order_splits_cgst_sgst(api, cart):
    cart.add_item(_item(api, 4, 2))
    cart.buyer_state = "Rajasthan"

    assert cart.calculate_taxes()
    line = cart.items[0]
    assert (line.cgst_amount, line.sgst_amount, line.igst_amount) == (18.9, 18.9, 0.0)
    assert cart.cgst_amount == pytest.approx(37.8)


def test_tax_failure_sets_error(down_api, storage):
    cart = CartState(storage, TaxService(down_api))
    cart.add_item(CartItem(id=4, name="Borax", price=210))
    assert cart.calculate_taxes() is False
    assert cart.tax_error == TAX_ERROR_MESSAGE
    assert cart.tax_amount == 0


def test_emptying_cart_resets_taxes(api, cart):
    cart.add_item(_item(api, 4))
    cart.set_shipping_amount(50)
    cart.calculate_taxes()
    assert cart.tax_amount > 0

    cart.remove_item(4)
    assert cart.tax_amount == 0
    assert cart.shipping_tax_amount == 0
    assert cart.shipping_amount == 50

    cart.clear()
    assert cart.shipping_amount == 0
    assert cart.total_price == 0


def test_empty_cart_needs_no_tax_service(storage):
    assert CartState(storage).calculate_taxes() is True


def test_corrupt_saved_cart_starts_empty(storage):
    storage.set_item(CART_KEY, "[{broken")
    assert CartState(storage).items == []
