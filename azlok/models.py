# azlok/models.py
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Record(BaseModel):
    """Base for server records: unknown fields are ignored, everything else is loose"""
    model_config = ConfigDict(extra="ignore", populate_by_name=True, use_enum_values=True)

    def payload(self) -> Dict[str, Any]:
        """JSON-ready dict without unset/None fields, as sent to the API"""
        return self.model_dump(mode="json", exclude_none=True)


# ---------------------------
# Enums
# ---------------------------
class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"
    PARTIALLY_PAID = "partially_paid"
    PROCESSING = "processing"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class PaymentMethodType(str, Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    UPI = "upi"
    NET_BANKING = "net_banking"
    WALLET = "wallet"
    COD = "cash_on_delivery"
    EMI = "emi"
    BANK_TRANSFER = "bank_transfer"
    RAZORPAY = "razorpay"


class TransactionType(str, Enum):
    PAYMENT = "payment"
    REFUND = "refund"
    CHARGEBACK = "chargeback"
    SETTLEMENT = "settlement"
    FEE = "fee"


class BlogStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class UserRole(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"
    COMPANY = "company"


# ---------------------------
# Catalog
# ---------------------------
class SellerRef(Record):
    id: int
    business_name: Optional[str] = None
    full_name: Optional[str] = None


class Product(Record):
    id: int
    name: str
    description: Optional[str] = None
    price: float = 0.0
    discount_price: Optional[float] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    brand: Optional[str] = None
    stock_quantity: int = 0
    image_url: Optional[str] = None
    # The API returns either a list or a JSON-encoded string here
    image_urls: Optional[Union[List[str], str]] = None
    rating: Optional[float] = None
    is_featured: bool = False
    is_new: bool = False
    is_bestseller: bool = False
    sku: Optional[str] = None
    slug: Optional[str] = None
    weight: Optional[float] = None
    dimensions: Optional[str] = None
    hsn_code: Optional[str] = None
    seller: Optional[SellerRef] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductCreate(Record):
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
    is_featured: Optional[bool] = None
    is_new: Optional[bool] = None
    is_bestseller: Optional[bool] = None
    weight: Optional[float] = None
    dimensions: Optional[str] = None
    hsn_code: Optional[str] = None


class ProductUpdate(Record):
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


class ProductFilters(Record):
    category_id: Optional[int] = None
    brand: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    is_featured: Optional[bool] = None
    is_new: Optional[bool] = None
    is_bestseller: Optional[bool] = None
    search: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    page: Optional[int] = None
    size: Optional[int] = None


class ProductPage(Record):
    items: List[Product] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    size: int = 0
    pages: int = 0


class ProductSales(Record):
    total_sales: int = Field(0, alias="totalSales")
    total_revenue: float = Field(0.0, alias="totalRevenue")
    last_month_sales: int = Field(0, alias="lastMonthSales")
    last_month_revenue: float = Field(0.0, alias="lastMonthRevenue")


class Category(Record):
    id: int
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    parent_id: Optional[int] = None


class Seller(Record):
    id: int
    name: Optional[str] = None
    slug: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    rating: Optional[float] = None
    verified: Optional[bool] = None
    member_since: Optional[str] = None
    join_date: Optional[str] = Field(None, alias="joinDate")


class UploadedImage(Record):
    url: str
    filename: Optional[str] = None
    folder: Optional[str] = None


# ---------------------------
# Blogs
# ---------------------------
class BlogAuthor(Record):
    id: int
    full_name: Optional[str] = None
    username: Optional[str] = None


class FeaturedProduct(Record):
    id: int
    name: str
    price: float = 0.0
    image_url: Optional[str] = None
    slug: Optional[str] = None


class Blog(Record):
    id: int
    title: str
    slug: str
    content: str = ""
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    author_id: Optional[int] = None
    author: Optional[BlogAuthor] = None
    status: BlogStatus = BlogStatus.DRAFT
    published_date: Optional[datetime] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    views_count: int = 0
    featured_products: List[FeaturedProduct] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BlogCreate(Record):
    title: str
    content: str
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    status: Optional[BlogStatus] = None
    published_date: Optional[datetime] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    tags: Optional[List[str]] = None
    featured_product_ids: Optional[List[int]] = None


class BlogUpdate(Record):
    title: Optional[str] = None
    content: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    status: Optional[BlogStatus] = None
    published_date: Optional[datetime] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    tags: Optional[List[str]] = None
    featured_product_ids: Optional[List[int]] = None


class BlogPage(Record):
    blogs: List[Blog] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    size: int = 10
    pages: int = 0


# ---------------------------
# Payments
# ---------------------------
class PaymentMethod(Record):
    id: int
    user_id: Optional[int] = None
    method_type: PaymentMethodType
    provider: str
    is_default: bool = False
    is_active: bool = True
    last_used: Optional[datetime] = None
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
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PaymentMethodCreate(Record):
    method_type: PaymentMethodType
    provider: str
    is_default: Optional[bool] = None
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


class PaymentMethodUpdate(Record):
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


class Transaction(Record):
    id: int
    transaction_reference: str
    payment_id: Optional[int] = None
    user_id: Optional[int] = None
    transaction_type: TransactionType
    amount: float
    currency: str = "INR"
    status: str
    gateway: Optional[str] = None
    gateway_transaction_id: Optional[str] = None
    description: Optional[str] = None
    transaction_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class TransactionFilters(Record):
    payment_id: Optional[int] = None
    transaction_type: Optional[TransactionType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class InstallmentPlan(Record):
    id: int
    order_id: int
    user_id: Optional[int] = None
    total_amount: float
    number_of_installments: int
    installment_frequency: str
    interest_rate: float = 0.0
    processing_fee: float = 0.0
    start_date: date
    end_date: Optional[date] = None
    status: str = "active"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class InstallmentPlanCreate(Record):
    order_id: int
    total_amount: float
    number_of_installments: int = 3
    installment_frequency: str = "monthly"
    interest_rate: float = 0.0
    processing_fee: float = 0.0
    start_date: date


class Payment(Record):
    id: int
    payment_reference: str
    order_id: Optional[int] = None
    user_id: Optional[int] = None
    payment_method_id: Optional[int] = None
    amount: float
    currency: str = "INR"
    status: PaymentStatus = PaymentStatus.PENDING
    payment_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    description: Optional[str] = None
    gateway: Optional[str] = None
    gateway_payment_id: Optional[str] = None
    is_installment: bool = False
    installment_plan_id: Optional[int] = None
    installment_number: Optional[int] = None
    is_recurring: bool = False
    recurring_schedule: Optional[str] = None
    next_payment_date: Optional[datetime] = None
    refunded_amount: float = 0.0
    refund_reason: Optional[str] = None
    transactions: List[Transaction] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PaymentCreate(Record):
    amount: float
    currency: Optional[str] = None
    description: Optional[str] = None
    order_id: Optional[int] = None
    payment_method_id: Optional[int] = None
    gateway: Optional[str] = None
    due_date: Optional[datetime] = None
    is_installment: Optional[bool] = None
    installment_plan_id: Optional[int] = None
    installment_number: Optional[int] = None
    is_recurring: Optional[bool] = None
    recurring_schedule: Optional[str] = None


class PaymentUpdate(Record):
    status: Optional[PaymentStatus] = None
    payment_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    description: Optional[str] = None
    gateway_payment_id: Optional[str] = None
    refunded_amount: Optional[float] = None
    refund_reason: Optional[str] = None
    next_payment_date: Optional[datetime] = None


class PaymentFilters(Record):
    status: Optional[PaymentStatus] = None
    order_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    page: Optional[int] = None
    size: Optional[int] = None


class PaymentPage(Record):
    payments: List[Payment] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    size: int = 0
    pages: int = 0


class PaymentSummary(Record):
    total_payments: int = 0
    total_amount: float = 0.0
    paid_amount: float = 0.0
    pending_amount: float = 0.0
    refunded_amount: float = 0.0
    failed_amount: float = 0.0
    currency: str = "INR"
    payment_status_counts: Dict[str, int] = Field(default_factory=dict)
    recent_payments: List[Payment] = Field(default_factory=list)


# ---------------------------
# Orders and checkout
# ---------------------------
class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ShippingAddress(Record):
    id: Optional[int] = None
    user_id: Optional[int] = None
    full_name: str
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    country: str = "India"
    zip_code: str
    phone_number: str
    is_default: bool = False


class ShippingMethod(Record):
    id: int
    name: str
    description: Optional[str] = None
    price: float = 0.0
    estimated_days: Optional[str] = None
    is_active: bool = True


class CheckoutSummary(Record):
    subtotal: float = 0.0
    shipping_amount: float = 0.0
    tax_amount: float = 0.0
    total: float = 0.0
    cgst_amount: float = 0.0
    sgst_amount: float = 0.0
    igst_amount: float = 0.0
    shipping_tax_amount: float = 0.0


class OrderItem(Record):
    id: Optional[int] = None
    order_id: Optional[int] = None
    product_id: int
    product_name: str
    product_image: Optional[str] = None
    quantity: int
    price: float
    total_price: float
    tax_amount: float = 0.0


class Order(Record):
    id: int
    user_id: Optional[int] = None
    order_number: str
    status: OrderStatus = OrderStatus.PENDING
    total_amount: float = 0.0
    subtotal: float = 0.0
    tax_amount: float = 0.0
    shipping_cost: float = 0.0
    discount_amount: float = 0.0
    shipping_address: Optional[ShippingAddress] = None
    shipping_method: Optional[str] = None
    payment_method: Optional[str] = None
    payment_status: Optional[PaymentStatus] = None
    tracking_number: Optional[str] = None
    estimated_delivery: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItem] = Field(default_factory=list)


class OrderRequest(Record):
    shipping_address_id: int
    shipping_method_id: int
    payment_method_id: int
    cart_id: Optional[int] = None


class OrderPaymentUpdate(Record):
    payment_status: PaymentStatus
    payment_method: str
    payment_id: Optional[str] = None
    payment_details: Optional[Dict[str, Any]] = None


class OrderTracking(Record):
    success: bool
    order: Optional[Order] = None
    error: Optional[str] = None


class PlacedOrder(Record):
    order_id: Optional[int] = None
    error: Optional[str] = None
    payment_method: Optional[str] = None
    redirect_url: Optional[str] = None


# ---------------------------
# Users
# ---------------------------
class User(Record):
    id: int
    name: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    role: str = UserRole.BUYER.value
    status: Optional[str] = None
    avatar: Optional[str] = None
    permissions: Optional[List[str]] = None

    @property
    def display_name(self) -> str:
        return self.name or self.full_name or self.email or f"User {self.id}"


class UserFilters(Record):
    page: Optional[int] = None
    size: Optional[int] = None
    search: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    sort_by: Optional[str] = Field(None, serialization_alias="sortBy")
    sort_order: Optional[str] = Field(None, serialization_alias="sortOrder")


class UserPage(Record):
    items: List[User] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    size: int = 0
    pages: int = 0


class UsernameAvailability(Record):
    username: str
    available: bool
    message: str = ""


# ---------------------------
# Tax
# ---------------------------
class TaxCalculationItem(Record):
    product_id: int
    quantity: int = 1


class OrderTaxRequest(Record):
    items: List[TaxCalculationItem]
    region: Optional[str] = None
    buyer_state: Optional[str] = None
    seller_state: Optional[str] = None
    shipping_amount: float = 0.0
    apply_tax_to_shipping: bool = True


class OrderTaxLine(Record):
    product_id: int
    product_name: Optional[str] = None
    quantity: int = 1
    unit_price: float = 0.0
    unit_tax: float = 0.0
    unit_cgst: float = 0.0
    unit_sgst: float = 0.0
    unit_igst: float = 0.0
    item_total: float = 0.0
    hsn_code: Optional[str] = None


class OrderTaxResult(Record):
    subtotal: float = 0.0
    shipping_amount: float = 0.0
    shipping_tax_amount: float = 0.0
    total_tax_amount: float = 0.0
    total_cgst_amount: float = 0.0
    total_sgst_amount: float = 0.0
    total_igst_amount: float = 0.0
    total_amount: float = 0.0
    items: List[OrderTaxLine] = Field(default_factory=list)


class ProductTaxResult(Record):
    product_id: int
    product_name: Optional[str] = None
    base_price: float = 0.0
    price_without_tax: float = 0.0
    tax_percentage: float = 0.0
    tax_amount: float = 0.0
    price_with_tax: float = 0.0
    is_tax_inclusive: bool = False
    cgst_amount: float = 0.0
    sgst_amount: float = 0.0
    igst_amount: float = 0.0
    hsn_code: Optional[str] = None


class TaxRate(Record):
    id: int
    tax_type: str
    rate: float
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    region: Optional[str] = None
    is_active: bool = True
    effective_from: Optional[date] = None
    effective_to: Optional[date] = None
    hsn_code: Optional[str] = None


class MarginSetting(Record):
    id: int
    margin_percentage: float
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    seller_id: Optional[int] = None
    seller_name: Optional[str] = None
    region: Optional[str] = None
    is_active: bool = True
