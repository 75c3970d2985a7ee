# azlok/orders.py
import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from .client import ApiClient, ApiError
from .models import Order, OrderPaymentUpdate, OrderTracking

logger = logging.getLogger(__name__)

_orders = TypeAdapter(List[Order])


class OrderService:
    """A buyer's orders. Nothing here raises: failures become [], None, False or an error message."""

    def __init__(self, client: ApiClient):
        self.client = client

    def list_orders(self) -> List[Order]:
        try:
            return _orders.validate_python(self.client.get("/api/orders") or [])
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching orders: {e}")
            return []

    def get_order(self, order_id: int) -> Optional[Order]:
        try:
            return Order.model_validate(self.client.get(f"/api/orders/{order_id}"))
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching order #{order_id}: {e}")
            return None

    def track_order(self, identifier: Union[int, str]) -> OrderTracking:
        """
        Look an order up by order number, tracking number or id.

        The public tracking endpoint is tried first, then the signed-in
        buyer's own order by id.
        """
        for endpoint in (f"/api/orders/track/{identifier}", f"/api/orders/{identifier}"):
            try:
                data = self.client.get(endpoint)
            except ApiError as e:
                logger.info(f"Order {identifier} not found via {endpoint}: {e}")
                continue
            try:
                return OrderTracking(success=True, order=Order.model_validate(data))
            except ValidationError as e:
                logger.error(f"Unexpected tracking response for {identifier}: {e}")
                return OrderTracking(
                    success=False,
                    error="An error occurred while tracking your order. Please try again later.",
                )
        return OrderTracking(
            success=False,
            error=f"Order #{identifier} not found. Please check your order number and try again.",
        )

    def cancel_order(self, order_id: int) -> bool:
        try:
            self.client.post(f"/api/orders/{order_id}/cancel")
            return True
        except ApiError as e:
            logger.error(f"Error cancelling order #{order_id}: {e}")
            return False

    def update_payment_status(self, order_id: int, data: Union[OrderPaymentUpdate, Dict[str, Any]]) -> bool:
        try:
            update = data if isinstance(data, OrderPaymentUpdate) else OrderPaymentUpdate.model_validate(data)
            self.client.put(f"/api/orders/{order_id}/payment", json=update.payload())
            return True
        except (ApiError, ValidationError) as e:
            logger.error(f"Error updating payment status for order #{order_id}: {e}")
            return False
