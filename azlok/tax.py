# azlok/tax.py
import logging
from typing import List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from .client import ApiClient, ApiError
from .models import MarginSetting, OrderTaxRequest, OrderTaxResult, ProductTaxResult, TaxRate

logger = logging.getLogger(__name__)

_rates = TypeAdapter(List[TaxRate])
_margins = TypeAdapter(List[MarginSetting])


class TaxService:
    """GST calculation is done server-side; this only wraps the /api/tax endpoints."""

    def __init__(self, client: ApiClient):
        self.client = client

    def calculate_product_tax(self, product_id: int, quantity: int = 1, region: Optional[str] = None,
                              buyer_state: Optional[str] = None, seller_state: Optional[str] = None) -> ProductTaxResult:
        body = {
            "product_id": product_id,
            "quantity": quantity,
            "region": region,
            "buyer_state": buyer_state,
            "seller_state": seller_state,
        }
        data = self.client.post("/api/tax/calculate-tax", json={k: v for k, v in body.items() if v is not None})
        return ProductTaxResult.model_validate(data)

    def calculate_order_tax(self, request: Union[OrderTaxRequest, dict]) -> OrderTaxResult:
        if isinstance(request, dict):
            request = OrderTaxRequest.model_validate(request)
        data = self.client.post("/api/tax/calculate-order-tax", json=request.payload())
        return OrderTaxResult.model_validate(data)

    def tax_rates(self, tax_type: Optional[str] = None, region: Optional[str] = None,
                  category_id: Optional[int] = None, is_active: bool = True) -> List[TaxRate]:
        params = {"is_active": is_active, "tax_type": tax_type, "region": region, "category_id": category_id}
        try:
            return _rates.validate_python(self.client.get("/api/tax/tax-rates", params=params) or [])
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching tax rates: {e}")
            return []

    def margin_settings(self, product_id: Optional[int] = None, category_id: Optional[int] = None,
                        seller_id: Optional[int] = None, region: Optional[str] = None,
                        is_active: bool = True) -> List[MarginSetting]:
        params = {
            "is_active": is_active,
            "product_id": product_id,
            "category_id": category_id,
            "seller_id": seller_id,
            "region": region,
        }
        try:
            return _margins.validate_python(self.client.get("/api/tax/margin-settings", params=params) or [])
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching margin settings: {e}")
            return []
