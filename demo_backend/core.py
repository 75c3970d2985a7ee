from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from azlok.pagination import Paginator

from .database import DEFAULT_GST_RATE, PRODUCTS


class RegisterIn(BaseModel):
    full_name: str
    email: str
    password: str
    role: str = "buyer"
    company: Optional[str] = None


class UserIn(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None


class UserStatusIn(BaseModel):
    status: str


class ProductIn(BaseModel):
    name: str
    description: str
    price: float
    category_id: int
    stock_quantity: int
    sku: str
    discount_price: Optional[float] = None
    brand: Optional[str] = None
    image_url: Optional[str] = None
    image_urls: Optional[List[str]] = None
    is_featured: bool = False
    is_new: bool = True
    is_bestseller: bool = False
    weight: Optional[float] = None
    dimensions: Optional[str] = None
    hsn_code: Optional[str] = None


class ProductPatch(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    discount_price: Optional[float] = None
    category_id: Optional[int] = None
    brand: Optional[str] = None
    stock_quantity: Optional[int] = None
    image_url: Optional[str] = None
    image_urls: Optional[List[str]] = None
    is_featured: Optional[bool] = None
    is_new: Optional[bool] = None
    is_bestseller: Optional[bool] = None
    sku: Optional[str] = None
    weight: Optional[float] = None
    dimensions: Optional[str] = None
    hsn_code: Optional[str] = None


class BlogIn(BaseModel):
    title: str
    content: str
    slug: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    status: str = "draft"
    published_date: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    tags: List[str] = []
    featured_product_ids: List[int] = []


class BlogPatch(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    status: Optional[str] = None
    published_date: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    tags: Optional[List[str]] = None
    featured_product_ids: Optional[List[int]] = None


class PaymentMethodIn(BaseModel):
    method_type: str
    provider: str
    is_default: bool = False
    card_last_four: Optional[str] = None
    card_expiry_month: Optional[str] = None
    card_expiry_year: Optional[str] = None
    card_holder_name: Optional[str] = None
    upi_id: Optional[str] = None
    bank_name: Optional[str] = None
    account_last_four: Optional[str] = None
    account_holder_name: Optional[str] = None
    wallet_provider: Optional[str] = None
    wallet_id: Optional[str] = None


class PaymentMethodPatch(BaseModel):
    is_default: Optional[bool] = None
    is_active: Optional[bool] = None
    card_expiry_month: Optional[str] = None
    card_expiry_year: Optional[str] = None
    card_holder_name: Optional[str] = None
    upi_id: Optional[str] = None
    bank_name: Optional[str] = None
    account_holder_name: Optional[str] = None
    wallet_provider: Optional[str] = None
    wallet_id: Optional[str] = None


class PaymentIn(BaseModel):
    amount: float
    currency: str = "INR"
    description: Optional[str] = None
    order_id: Optional[int] = None
    payment_method_id: Optional[int] = None
    gateway: Optional[str] = None
    due_date: Optional[str] = None
    is_installment: bool = False
    installment_plan_id: Optional[int] = None
    installment_number: Optional[int] = None
    is_recurring: bool = False
    recurring_schedule: Optional[str] = None


class PaymentPatch(BaseModel):
    status: Optional[str] = None
    payment_date: Optional[str] = None
    due_date: Optional[str] = None
    description: Optional[str] = None
    gateway_payment_id: Optional[str] = None
    refunded_amount: Optional[float] = None
    refund_reason: Optional[str] = None
    next_payment_date: Optional[str] = None


class InstallmentPlanIn(BaseModel):
    order_id: int
    total_amount: float
    number_of_installments: int = 3
    installment_frequency: str = "monthly"
    interest_rate: float = 0.0
    processing_fee: float = 0.0
    start_date: date


class TaxItemIn(BaseModel):
    product_id: int
    quantity: int = 1


class OrderTaxIn(BaseModel):
    items: List[TaxItemIn]
    region: Optional[str] = None
    buyer_state: Optional[str] = None
    seller_state: Optional[str] = None
    shipping_amount: float = 0.0
    apply_tax_to_shipping: bool = True


class ProductTaxIn(BaseModel):
    product_id: int
    quantity: int = 1
    region: Optional[str] = None
    buyer_state: Optional[str] = None
    seller_state: Optional[str] = None


class CartItemIn(BaseModel):
    product_id: int
    quantity: int = 1


class AddressIn(BaseModel):
    full_name: str
    address_line1: str
    address_line2: Optional[str] = ""
    city: str
    state: str
    country: str = "India"
    zip_code: str
    phone_number: str
    is_default: bool = False


class OrderIn(BaseModel):
    shipping_address_id: int
    shipping_method_id: int
    payment_method_id: int
    cart_id: Optional[int] = None


class OrderPaymentIn(BaseModel):
    payment_status: str
    payment_method: str
    payment_id: Optional[str] = None
    payment_details: Optional[Dict[str, Any]] = None


# ---------------------------
# Helpers
# ---------------------------
def page_of(items: List[Dict[str, Any]], page: int, size: int, key: str = "items") -> Dict[str, Any]:
    pager = Paginator(len(items), per_page=size, page=page)
    return {key: pager.slice(items), "total": len(items), "page": pager.page, "size": size, "pages": pager.total_pages}


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in user.items() if k != "password"}


def _split(unit_tax: float, interstate: bool):
    if interstate:
        return 0.0, 0.0, unit_tax
    cgst = round(unit_tax / 2, 2)
    return cgst, round(unit_tax - cgst, 2), 0.0


def _is_interstate(buyer_state: Optional[str], seller_state: Optional[str]) -> bool:
    return bool(buyer_state and seller_state) and buyer_state.strip().lower() != seller_state.strip().lower()


def product_tax(product: Dict[str, Any], quantity: int, buyer_state: Optional[str] = None,
                seller_state: Optional[str] = None) -> Dict[str, Any]:
    base_price = product["discount_price"] or product["price"]
    rate = product.get("tax_percentage", DEFAULT_GST_RATE)
    unit_tax = round(base_price * rate / 100, 2)
    cgst, sgst, igst = _split(unit_tax, _is_interstate(buyer_state, seller_state or product.get("seller_state")))
    return {
        "product_id": product["id"],
        "product_name": product["name"],
        "base_price": base_price,
        "price_without_tax": base_price,
        "tax_percentage": rate,
        "tax_amount": round(unit_tax * quantity, 2),
        "price_with_tax": round((base_price + unit_tax) * quantity, 2),
        "is_tax_inclusive": False,
        "cgst_amount": round(cgst * quantity, 2),
        "sgst_amount": round(sgst * quantity, 2),
        "igst_amount": round(igst * quantity, 2),
        "hsn_code": product.get("hsn_code"),
    }


def order_tax(req: OrderTaxIn) -> Dict[str, Any]:
    """GST per line (CGST+SGST within a state, IGST across states) plus tax on shipping"""
    lines = []
    subtotal = tax = cgst_total = sgst_total = igst_total = 0.0
    for item in req.items:
        product = PRODUCTS.get(item.product_id)
        if product is None:
            raise KeyError(item.product_id)
        unit_price = product["discount_price"] or product["price"]
        unit_tax = round(unit_price * product.get("tax_percentage", DEFAULT_GST_RATE) / 100, 2)
        interstate = _is_interstate(req.buyer_state, req.seller_state or product.get("seller_state"))
        cgst, sgst, igst = _split(unit_tax, interstate)

        subtotal += unit_price * item.quantity
        tax += unit_tax * item.quantity
        cgst_total += cgst * item.quantity
        sgst_total += sgst * item.quantity
        igst_total += igst * item.quantity
        lines.append({
            "product_id": product["id"],
            "product_name": product["name"],
            "quantity": item.quantity,
            "unit_price": unit_price,
            "unit_tax": unit_tax,
            "unit_cgst": cgst,
            "unit_sgst": sgst,
            "unit_igst": igst,
            "item_total": round((unit_price + unit_tax) * item.quantity, 2),
            "hsn_code": product.get("hsn_code"),
        })

    shipping_tax = round(req.shipping_amount * DEFAULT_GST_RATE / 100, 2) if req.apply_tax_to_shipping else 0.0
    return {
        "subtotal": round(subtotal, 2),
        "shipping_amount": req.shipping_amount,
        "shipping_tax_amount": shipping_tax,
        "total_tax_amount": round(tax, 2),
        "total_cgst_amount": round(cgst_total, 2),
        "total_sgst_amount": round(sgst_total, 2),
        "total_igst_amount": round(igst_total, 2),
        "total_amount": round(subtotal + tax + req.shipping_amount + shipping_tax, 2),
        "items": lines,
    }
