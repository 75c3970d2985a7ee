# azlok/cart.py
import json
import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .client import ApiError
from .models import OrderTaxRequest, Product, TaxCalculationItem
from .images import primary_image
from .storage import CART_KEY, LocalStorage
from .tax import TaxService

logger = logging.getLogger(__name__)

TAX_ERROR_MESSAGE = "Failed to calculate taxes. Please try again."


class CartItem(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int
    name: str
    image: str = ""
    price: float
    quantity: int = 1
    seller: str = ""
    seller_id: Optional[int] = None
    min_order: int = Field(1, alias="minOrder")
    tax_amount: Optional[float] = None
    cgst_amount: Optional[float] = None
    sgst_amount: Optional[float] = None
    igst_amount: Optional[float] = None
    is_tax_inclusive: Optional[bool] = None
    hsn_code: Optional[str] = None

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1) -> "CartItem":
        seller = product.seller
        return cls(
            id=product.id,
            name=product.name,
            image=primary_image(product),
            price=product.discount_price or product.price,
            quantity=quantity,
            seller=(seller.business_name or seller.full_name or "") if seller else "",
            seller_id=seller.id if seller else None,
            hsn_code=product.hsn_code,
        )


_items_adapter = TypeAdapter(List[CartItem])


class CartState:
    """
    Shopping cart kept in local storage under `azlok-cart`.

    Totals are derived from the items; taxes come from the order tax
    endpoint and are reset whenever the cart empties.
    """

    def __init__(self, storage: LocalStorage, tax_service: Optional[TaxService] = None):
        self.storage = storage
        self.tax_service = tax_service
        self.items: List[CartItem] = self._load()

        self.tax_amount = 0.0
        self.cgst_amount = 0.0
        self.sgst_amount = 0.0
        self.igst_amount = 0.0
        self.shipping_amount = 0.0
        self.shipping_tax_amount = 0.0
        self.buyer_state = ""
        self.seller_state = ""
        self.tax_error: Optional[str] = None

    def _load(self) -> List[CartItem]:
        saved = self.storage.get_item(CART_KEY)
        if not saved:
            return []
        try:
            return _items_adapter.validate_python(json.loads(saved))
        except ValueError as e:
            logger.error(f"Failed to parse cart from local storage: {e}")
            return []

    def _save(self) -> None:
        self.storage.set_item(CART_KEY, _items_adapter.dump_json(self.items, exclude_none=True).decode())

    def _find(self, product_id: int) -> Optional[CartItem]:
        return next((i for i in self.items if i.id == product_id), None)

    # Mutations
    def add_item(self, item: CartItem) -> None:
        existing = self._find(item.id)
        if existing is not None:
            existing.quantity += item.quantity
        else:
            self.items.append(item)
        self._save()

    def remove_item(self, product_id: int) -> None:
        self.items = [i for i in self.items if i.id != product_id]
        if not self.items:
            self._reset_taxes()
        self._save()

    def update_quantity(self, product_id: int, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(product_id)
            return
        item = self._find(product_id)
        if item is not None:
            item.quantity = quantity
            self._save()

    def clear(self) -> None:
        self.items = []
        self._reset_taxes()
        self.shipping_amount = 0.0
        self._save()

    def set_shipping_amount(self, amount: float) -> None:
        self.shipping_amount = amount

    def _reset_taxes(self) -> None:
        self.tax_amount = 0.0
        self.cgst_amount = 0.0
        self.sgst_amount = 0.0
        self.igst_amount = 0.0
        self.shipping_tax_amount = 0.0

    # Derived totals
    @property
    def item_count(self) -> int:
        return sum(i.quantity for i in self.items)

    @property
    def subtotal(self) -> float:
        return sum(i.line_total for i in self.items)

    @property
    def total_price(self) -> float:
        return self.subtotal + self.tax_amount + self.shipping_amount + self.shipping_tax_amount

    def calculate_taxes(self) -> bool:
        """Refresh tax amounts from the API. Returns False and sets tax_error on failure."""
        self.tax_error = None
        if not self.items:
            self._reset_taxes()
            return True
        if self.tax_service is None:
            raise RuntimeError("CartState needs a TaxService to calculate taxes")

        request = OrderTaxRequest(
            items=[TaxCalculationItem(product_id=i.id, quantity=i.quantity) for i in self.items],
            buyer_state=self.buyer_state or None,
            seller_state=self.seller_state or None,
            shipping_amount=self.shipping_amount,
            apply_tax_to_shipping=True,
        )
        try:
            result = self.tax_service.calculate_order_tax(request)
        except ApiError as e:
            logger.error(f"Error calculating taxes: {e}")
            self.tax_error = TAX_ERROR_MESSAGE
            return False

        self.tax_amount = result.total_tax_amount
        self.cgst_amount = result.total_cgst_amount
        self.sgst_amount = result.total_sgst_amount
        self.igst_amount = result.total_igst_amount
        self.shipping_tax_amount = result.shipping_tax_amount

        by_product = {line.product_id: line for line in result.items}
        for item in self.items:
            line = by_product.get(item.id)
            if line is None:
                continue
            item.tax_amount = line.unit_tax
            item.cgst_amount = line.unit_cgst
            item.sgst_amount = line.unit_sgst
            item.igst_amount = line.unit_igst
            item.hsn_code = line.hsn_code
        self._save()
        return True
