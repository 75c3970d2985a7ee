# tests/test_orders_checkout.py
import pytest

from azlok.checkout import CheckoutService, _detail_message
from azlok.client import ApiError
from azlok.orders import OrderService
from azlok.payments import PaymentService

JAIPUR = {
    "full_name": "Priya Sharma",
    "address_line1": "12 MI Road",
    "city": "Jaipur",
    "state": "Rajasthan",
    "zip_code": "302001",
    "phone_number": "9810000002",
}


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


def _place_borax_order(backend, buyer_api, buyer_token, payment_method_id=99):
    checkout = CheckoutService(buyer_api)
    address = checkout.add_shipping_address(JAIPUR).data
    backend.post("/api/cart/items", json={"product_id": 4, "quantity": 1}, headers=_auth(buyer_token))
    return checkout.place_order({
        "shipping_address_id": address.id,
        "shipping_method_id": 1,
        "payment_method_id": payment_method_id,
    })


# Checkout
def test_checkout_flow(backend, buyer_api, buyer_token):
    checkout = CheckoutService(buyer_api)
    assert checkout.shipping_addresses().data == []

    added = checkout.add_shipping_address(JAIPUR)
    assert added.ok
    assert added.data.is_default is True
    assert added.data.address_line2 == ""
    assert [a.city for a in checkout.shipping_addresses().data] == ["Jaipur"]

    assert [m.name for m in checkout.shipping_methods().data] == ["Standard Delivery", "Express Delivery"]
    assert checkout.checkout_summary(None).error == "Shipping method ID is required."

    backend.post("/api/cart/items", json={"product_id": 4, "quantity": 1}, headers=_auth(buyer_token))
    summary = checkout.checkout_summary(1).data
    assert summary.subtotal == 210
    assert summary.total == pytest.approx(306.8)

    placed = checkout.place_order({"shipping_address_id": added.data.id, "shipping_method_id": 1, "payment_method_id": 99})
    assert placed.error is None
    assert placed.payment_method == "razorpay"
    assert placed.redirect_url == f"/checkout/payment/razorpay?orderId={placed.order_id}"

    # the cart is consumed by the order
    assert checkout.checkout_summary(1).error == "Unable to load checkout summary. Please try again."


def test_saved_payment_method_skips_gateway(backend, buyer_api, buyer_token):
    upi = PaymentService(buyer_api).create_payment_method(
        {"method_type": "upi", "provider": "PhonePe", "upi_id": "priya@ybl", "is_default": True}
    )
    methods = CheckoutService(buyer_api).payment_methods().data
    assert [m.method_type for m in methods] == ["upi", "razorpay"]
    assert methods[1].id == 2
    assert methods[1].is_default is False

    placed = _place_borax_order(backend, buyer_api, buyer_token, payment_method_id=upi.id)
    assert placed.payment_method == "upi"
    assert placed.redirect_url is None


def test_payment_methods_fall_back_to_razorpay(down_api):
    result = CheckoutService(down_api).payment_methods()
    assert result.error is None
    assert [(m.id, m.method_type, m.is_default) for m in result.data] == [(2, "razorpay", True)]


def test_place_order_errors(guest_api, buyer_api, down_api):
    request = {"shipping_address_id": 1, "shipping_method_id": 1, "payment_method_id": 1}
    assert CheckoutService(guest_api).place_order(request).error == "You need to be logged in to place an order."
    assert CheckoutService(down_api).place_order(request).error == "Failed to place order. Please try again."

    CheckoutService(buyer_api).add_shipping_address(JAIPUR)
    placed = CheckoutService(buyer_api).place_order(request)
    assert placed.order_id is None
    assert placed.error == "Failed to place order. Please try again."


def test_address_errors(guest_api, buyer_api, down_api):
    assert CheckoutService(guest_api).shipping_addresses().error == "Please log in to view your saved addresses."
    assert CheckoutService(down_api).shipping_addresses().error == (
        "Unable to load your saved addresses. Please try again later."
    )
    assert CheckoutService(guest_api).shipping_methods().data  # public
    assert CheckoutService(down_api).shipping_methods().error == (
        "Unable to load shipping methods. Please try again later."
    )

    checkout = CheckoutService(buyer_api)
    assert checkout.update_shipping_address(99, JAIPUR).error == "Error: Address not found"
    deleted = checkout.delete_shipping_address(99)
    assert (deleted.data, deleted.error) == (False, "Error: Address not found")

    address = checkout.add_shipping_address(JAIPUR).data
    moved = checkout.update_shipping_address(address.id, {**JAIPUR, "city": "Ajmer", "zip_code": "305001"})
    assert moved.data.city == "Ajmer"
    assert checkout.delete_shipping_address(address.id).ok
    assert checkout.shipping_addresses().data == []


def test_detail_messages():
    validation = ApiError("x", status_code=422, payload={"detail": [{"loc": ["body", "city"], "msg": "Field required"}]})
    assert _detail_message(validation) == "Validation error: Field required"
    assert _detail_message(ApiError("x", status_code=400, payload={"detail": "Cart is empty"})) == "Error: Cart is empty"
    assert _detail_message(ApiError("x", status_code=500)) is None


# Orders
def test_order_details(backend, buyer_api, buyer_token):
    placed = _place_borax_order(backend, buyer_api, buyer_token)
    order = OrderService(buyer_api).get_order(placed.order_id)
    assert order.order_number == f"AZ{placed.order_id:06d}"
    assert (order.status, order.payment_status) == ("pending", "pending")
    assert order.total_amount == pytest.approx(306.8)
    assert order.tax_amount == pytest.approx(46.8)
    assert order.shipping_cost == 50
    assert order.shipping_address.state == "Rajasthan"
    assert [(i.product_name, i.quantity, i.total_price) for i in order.items] == [("Dr Tomar Borax Powder", 1, 210.0)]


def test_orders_are_private(backend, guest_api, buyer_api, buyer_token, admin_token, down_api):
    placed = _place_borax_order(backend, buyer_api, buyer_token)
    assert [o.id for o in OrderService(buyer_api).list_orders()] == [placed.order_id]
    assert OrderService(guest_api).list_orders() == []

    r = backend.get(f"/api/orders/{placed.order_id}", headers=_auth(admin_token))
    assert r.status_code == 200

    assert OrderService(down_api).list_orders() == []
    assert OrderService(down_api).get_order(placed.order_id) is None


def test_track_order(backend, guest_api, buyer_api, buyer_token):
    placed = _place_borax_order(backend, buyer_api, buyer_token)
    order = OrderService(buyer_api).get_order(placed.order_id)

    by_number = OrderService(guest_api).track_order(order.order_number.lower())
    assert by_number.success and by_number.order.id == order.id
    assert OrderService(guest_api).track_order(order.tracking_number).order.id == order.id

    # plain ids fall through to the signed-in buyer's own orders
    assert OrderService(buyer_api).track_order(order.id).success

    missing = OrderService(guest_api).track_order("AZ999999")
    assert not missing.success
    assert missing.error == "Order #AZ999999 not found. Please check your order number and try again."


def test_cancel_and_pay(backend, buyer_api, buyer_token):
    orders = OrderService(buyer_api)
    first = _place_borax_order(backend, buyer_api, buyer_token).order_id
    assert orders.cancel_order(first) is True
    assert orders.get_order(first).status == "cancelled"
    assert orders.cancel_order(first) is False

    second = _place_borax_order(backend, buyer_api, buyer_token).order_id
    assert orders.update_payment_status(second, {"payment_status": "paid", "payment_method": "razorpay",
                                                 "payment_id": "pay_29QQoUBi66xm2f"}) is True
    paid = orders.get_order(second)
    assert (paid.status, paid.payment_status) == ("processing", "paid")

    assert orders.update_payment_status(second, {"payment_status": "partially_paid", "payment_method": "upi"}) is False
    assert orders.update_payment_status(second, {"payment_status": "bogus", "payment_method": "upi"}) is False
