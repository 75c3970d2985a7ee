# azlok/checkout.py
"""
Checkout: saved shipping addresses, shipping and payment options, the
order summary and placing the order.

Every call returns its data together with a message the checkout page can
show as-is; only local form mistakes raise.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from .client import ApiClient, ApiError
from .models import (
    CheckoutSummary,
    OrderRequest,
    PaymentMethod,
    PaymentMethodType,
    PlacedOrder,
    ShippingAddress,
    ShippingMethod,
)

logger = logging.getLogger(__name__)

_addresses = TypeAdapter(List[ShippingAddress])
_shipping_methods = TypeAdapter(List[ShippingMethod])
_payment_methods = TypeAdapter(List[PaymentMethod])

ADDRESS_FIELDS = ("full_name", "address_line1", "address_line2", "city", "state", "country", "zip_code", "phone_number")

RAZORPAY_FALLBACK = PaymentMethod(id=2, method_type=PaymentMethodType.RAZORPAY, provider="Razorpay", is_default=True)


@dataclass
class CheckoutResult:
    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _detail_message(err: ApiError) -> Optional[str]:
    """FastAPI validation lists and plain string details, phrased for the page"""
    detail = err.payload.get("detail") if isinstance(err.payload, dict) else None
    if isinstance(detail, list) and detail:
        first = detail[0] if isinstance(detail[0], dict) else {}
        return f"Validation error: {first.get('msg') or 'Invalid data format'}"
    if isinstance(detail, str) and detail:
        return f"Error: {detail}"
    return None


def _address_body(address: Union[ShippingAddress, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(address, dict):
        address = ShippingAddress.model_validate(address)
    body = {field: getattr(address, field) for field in ADDRESS_FIELDS}
    body["address_line2"] = body["address_line2"] or ""
    body["is_default"] = True
    return body


class CheckoutService:
    def __init__(self, client: ApiClient):
        self.client = client

    # Shipping addresses
    def shipping_addresses(self) -> CheckoutResult:
        try:
            return CheckoutResult(_addresses.validate_python(self.client.get("/api/users/addresses/") or []))
        except ApiError as e:
            logger.error(f"Error fetching shipping addresses: {e}")
            if e.status_code is None:
                return CheckoutResult([], "Unable to load your saved addresses. Please try again later.")
            messages = {
                401: "Please log in to view your saved addresses.",
                404: "Address service is not available. Please try again later.",
                405: "Unable to load addresses due to server configuration.",
            }
            if e.status_code == 422:
                return CheckoutResult([], _detail_message(e) or "Invalid data format.")
            return CheckoutResult([], messages.get(e.status_code, "Unable to load your saved addresses."))
        except ValidationError as e:
            logger.error(f"Error fetching shipping addresses: {e}")
            return CheckoutResult([], "Unable to load your saved addresses. Please try again later.")

    def _save_address(self, method: str, endpoint: str, address, action: str, messages: Dict[int, str]) -> CheckoutResult:
        failed = f"Failed to {action} shipping address. Please try again."
        body = _address_body(address)
        try:
            data = self.client.request(method, endpoint, json=body)
            return CheckoutResult(ShippingAddress.model_validate(data))
        except ApiError as e:
            logger.error(f"Error trying to {action} shipping address at {endpoint}: {e}")
            return CheckoutResult(None, _detail_message(e) or messages.get(e.status_code, failed))
        except ValidationError as e:
            logger.error(f"Error trying to {action} shipping address at {endpoint}: {e}")
            return CheckoutResult(None, failed)

    def add_shipping_address(self, address: Union[ShippingAddress, Dict[str, Any]]) -> CheckoutResult:
        """New addresses become the default one"""
        return self._save_address("POST", "/api/users/addresses/", address, "add", {
            422: "Invalid address information. Please check your inputs.",
            401: "You need to be logged in to add an address.",
            404: "Address service is not available. Please try again later.",
            405: "Unable to add address due to server configuration.",
        })

    def update_shipping_address(self, address_id: int, address: Union[ShippingAddress, Dict[str, Any]]) -> CheckoutResult:
        return self._save_address("PUT", f"/api/users/addresses/{address_id}", address, "update", {
            422: "Invalid address information. Please check your inputs.",
            404: "Address not found or service unavailable.",
            401: "You need to be logged in to update an address.",
            405: "Unable to update address due to server configuration.",
        })

    def delete_shipping_address(self, address_id: int) -> CheckoutResult:
        messages = {
            404: "Address not found or service unavailable.",
            401: "You need to be logged in to delete an address.",
            403: "You do not have permission to delete this address.",
            405: "Unable to delete address due to server configuration.",
        }
        try:
            self.client.delete(f"/api/users/addresses/{address_id}")
            return CheckoutResult(True)
        except ApiError as e:
            logger.error(f"Error deleting shipping address with ID {address_id}: {e}")
            failed = "Failed to delete shipping address. Please try again."
            return CheckoutResult(False, _detail_message(e) or messages.get(e.status_code, failed))

    # Options
    def payment_methods(self) -> CheckoutResult:
        """Saved methods plus Razorpay, which checkout always offers"""
        try:
            methods = _payment_methods.validate_python(self.client.get("/api/payment-methods/") or [])
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching payment methods: {e}")
            return CheckoutResult([RAZORPAY_FALLBACK.model_copy()])
        if not any(m.method_type == PaymentMethodType.RAZORPAY.value for m in methods):
            methods.append(PaymentMethod(
                id=len(methods) + 1,
                method_type=PaymentMethodType.RAZORPAY,
                provider="Razorpay",
                is_default=False,
            ))
        return CheckoutResult(methods)

    def shipping_methods(self) -> CheckoutResult:
        try:
            return CheckoutResult(_shipping_methods.validate_python(self.client.get("/api/shipping/") or []))
        except ApiError as e:
            logger.error(f"Error fetching shipping methods: {e}")
            if e.status_code is None:
                return CheckoutResult([], "Unable to load shipping methods. Please try again later.")
            messages = {
                404: "Shipping methods service is not available.",
                401: "You need to be logged in to view shipping methods.",
            }
            return CheckoutResult([], messages.get(e.status_code, "Unable to load shipping methods. Please try again."))
        except ValidationError as e:
            logger.error(f"Error fetching shipping methods: {e}")
            return CheckoutResult([], "Unable to load shipping methods. Please try again later.")

    def checkout_summary(self, shipping_method_id: Optional[int]) -> CheckoutResult:
        if not shipping_method_id:
            return CheckoutResult(None, "Shipping method ID is required.")
        try:
            data = self.client.get("/api/cart-summary/", params={"shipping_method_id": shipping_method_id})
            return CheckoutResult(CheckoutSummary.model_validate(data))
        except ApiError as e:
            logger.error(f"Error fetching checkout summary: {e}")
            if e.status_code is None:
                return CheckoutResult(None, "Unable to load checkout summary. Please try again later.")
            messages = {
                404: "Checkout summary service is not available.",
                401: "You need to be logged in to view checkout summary.",
            }
            return CheckoutResult(None, messages.get(e.status_code, "Unable to load checkout summary. Please try again."))
        except ValidationError as e:
            logger.error(f"Error fetching checkout summary: {e}")
            return CheckoutResult(None, "Unable to load checkout summary. Please try again later.")

    # Order
    def place_order(self, request: Union[OrderRequest, Dict[str, Any]]) -> PlacedOrder:
        """
        POST the order. Razorpay orders come back with the payment page to
        send the buyer to next.
        """
        if isinstance(request, dict):
            request = OrderRequest.model_validate(request)
        try:
            data = self.client.post("/api/orders", json=request.payload())
        except ApiError as e:
            logger.error(f"Error placing order: {e}")
            messages = {
                422: "Invalid order information. Please check your inputs.",
                401: "You need to be logged in to place an order.",
            }
            return PlacedOrder(error=messages.get(e.status_code, "Failed to place order. Please try again."))

        order_id = (data.get("id") or data.get("order_id")) if isinstance(data, dict) else None
        if not order_id:
            return PlacedOrder(error="Invalid response from order service")
        if data.get("payment_method") == PaymentMethodType.RAZORPAY.value:
            return PlacedOrder(
                order_id=order_id,
                payment_method=PaymentMethodType.RAZORPAY.value,
                redirect_url=f"/checkout/payment/razorpay?orderId={order_id}",
            )
        return PlacedOrder(order_id=order_id, payment_method=data.get("payment_method"))
