import asyncio
import itertools
from datetime import datetime, timedelta
from typing import Any, Dict, List

# This file holds all the in-memory data stores and concurrency locks.

USERS: Dict[int, Dict[str, Any]] = {}
TOKENS: Dict[str, int] = {}
CATEGORIES: Dict[int, Dict[str, Any]] = {}
SELLERS: Dict[int, Dict[str, Any]] = {}
PRODUCTS: Dict[int, Dict[str, Any]] = {}
SALES: Dict[int, Dict[str, Any]] = {}
BLOGS: Dict[int, Dict[str, Any]] = {}
CARTS: Dict[int, Dict[int, int]] = {}
PAYMENT_METHODS: Dict[int, Dict[str, Any]] = {}
PAYMENTS: Dict[int, Dict[str, Any]] = {}
TRANSACTIONS: Dict[int, Dict[str, Any]] = {}
INSTALLMENT_PLANS: Dict[int, Dict[str, Any]] = {}
TAX_RATES: Dict[int, Dict[str, Any]] = {}
MARGIN_SETTINGS: Dict[int, Dict[str, Any]] = {}
ADDRESSES: Dict[int, Dict[str, Any]] = {}
ORDERS: Dict[int, Dict[str, Any]] = {}
UPLOADS: List[Dict[str, Any]] = []
_LOCKS: Dict[str, asyncio.Lock] = {}
_COUNTERS: Dict[str, Any] = {}

STORES = (
    USERS, TOKENS, CATEGORIES, SELLERS, PRODUCTS, SALES, BLOGS, CARTS, PAYMENT_METHODS,
    PAYMENTS, TRANSACTIONS, INSTALLMENT_PLANS, TAX_RATES, MARGIN_SETTINGS, ADDRESSES, ORDERS,
)

SHIPPING_METHODS = {
    1: {"id": 1, "name": "Standard Delivery", "description": "Delivered by road", "price": 50.0,
        "estimated_days": "5-7", "is_active": True},
    2: {"id": 2, "name": "Express Delivery", "description": "Delivered by air", "price": 150.0,
        "estimated_days": "1-2", "is_active": True},
    3: {"id": 3, "name": "Freight", "description": "Bulk consignments", "price": 900.0,
        "estimated_days": "10-14", "is_active": False},
}

DEFAULT_GST_RATE = 18.0

ROLE_PERMISSIONS = {
    "buyer": ["orders:read", "payments:read", "payments:write"],
    "seller": ["orders:read", "products:read", "products:write", "uploads:write"],
}


def _get_lock(key: str) -> asyncio.Lock:
    if key not in _LOCKS:
        _LOCKS[key] = asyncio.Lock()
    return _LOCKS[key]


def next_id(kind: str) -> int:
    if kind not in _COUNTERS:
        _COUNTERS[kind] = itertools.count(1)
    return next(_COUNTERS[kind])


def now() -> str:
    return datetime.now().isoformat(timespec="seconds")


def reset() -> None:
    for store in STORES:
        store.clear()
    UPLOADS.clear()
    _LOCKS.clear()
    _COUNTERS.clear()


def _add(store: Dict[int, Dict[str, Any]], kind: str, **fields) -> Dict[str, Any]:
    record_id = next_id(kind)
    store[record_id] = {"id": record_id, **fields}
    return store[record_id]


def seed() -> None:
    """Small catalogue, two sellers, an admin, a buyer and a couple of posts"""
    reset()
    stamp = now()

    admin = _add(USERS, "user", full_name="Azlok Admin", email="admin@azlok.com", password="admin123",
                 role="admin", status="active", phone="9810000001", created_at=stamp)
    _add(USERS, "user", full_name="Priya Sharma", email="priya@example.com", password="buyer123",
         role="buyer", status="active", phone="9810000002", created_at=stamp)
    _add(USERS, "user", full_name="Dr Tomar Chemicals", email="seller@azlok.com", password="seller123",
         role="seller", status="active", phone="9810000003", company="Dr Tomar Chemicals", created_at=stamp)

    spices = _add(CATEGORIES, "category", name="Spices", slug="spices", parent_id=None,
                  description="Ground and whole spices", image_url="/categories/spices.jpg")
    chemicals = _add(CATEGORIES, "category", name="Chemicals", slug="chemicals", parent_id=None,
                     description="Industrial and household chemicals", image_url=None)
    _add(CATEGORIES, "category", name="Blended Masala", slug="blended-masala", parent_id=spices["id"],
         description="Ready spice blends", image_url=None)

    azlok = _add(SELLERS, "seller", name="Azlok Enterprises", slug="azlok-enterprises",
                 email="sales@azlok.com", phone="+91 98100 00000", location="Delhi", rating=4.7,
                 verified=True, member_since="2021", state="Delhi")
    tomar = _add(SELLERS, "seller", name="Dr Tomar Chemicals", slug="dr-tomar-chemicals",
                 email="seller@azlok.com", phone="+91 98100 00003", location="Jaipur", rating=4.4,
                 verified=True, member_since="2022", state="Rajasthan")

    catalogue = [
        ("Azlok Zeera", "azlok-zeera", spices, azlok, 120.0, 99.0, 250, True, True, "0909"),
        ("Turmeric (Haldi) Powder 100g", "turmeric-haldi-powder-100g", spices, azlok, 45.0, None, 400, True, False, "0910"),
        ("Azlok Garam Masala 200 g", "azlok-garam-masala-200-g", spices, azlok, 160.0, 149.0, 0, False, True, "0910"),
        ("Dr Tomar Borax Powder", "dr-tomar-borax-powder", chemicals, tomar, 210.0, None, 80, False, False, "2840"),
        ("Glycerine", "glycerine", chemicals, tomar, 180.0, 165.0, 60, True, False, "2905"),
    ]
    for name, slug, category, seller, price, discount, stock, featured, bestseller, hsn in catalogue:
        product = _add(
            PRODUCTS, "product",
            name=name, slug=slug, sku=f"AZ-{slug[:12].upper()}", description=f"{name} from {seller['name']}.",
            price=price, discount_price=discount, category_id=category["id"], category_name=category["name"],
            brand="Azlok", stock_quantity=stock, image_url=f"/products/{slug}.jpg",
            image_urls=f'["/products/{slug}.jpg", "/products/{slug}-2.jpg"]',
            rating=4.5, is_featured=featured, is_new=not bestseller, is_bestseller=bestseller,
            hsn_code=hsn, tax_percentage=5.0 if category is spices else DEFAULT_GST_RATE,
            seller={"id": seller["id"], "business_name": seller["name"], "full_name": None},
            seller_state=seller["state"], created_at=stamp, updated_at=stamp,
        )
        if featured:
            SALES[product["id"]] = {
                "totalSales": 42, "totalRevenue": 42 * (discount or price),
                "lastMonthSales": 7, "lastMonthRevenue": 7 * (discount or price),
            }

    published = (datetime.now() - timedelta(days=3)).isoformat(timespec="seconds")
    author = {"id": admin["id"], "full_name": admin["full_name"], "username": "admin"}
    _add(BLOGS, "blog", title="Cooking With Whole Zeera", slug="cooking-with-whole-zeera",
         content="<p>Dry roast before grinding.</p>", excerpt="Dry roast before grinding.",
         featured_image="/blog/zeera.jpg", author_id=admin["id"], author=author, status="published",
         published_date=published, meta_title=None, meta_description=None, tags=["spices", "cooking"],
         views_count=12, featured_products=[], created_at=stamp, updated_at=stamp)
    _add(BLOGS, "blog", title="Storing Borax Safely", slug="storing-borax-safely",
         content="<p>Keep sealed and dry.</p>", excerpt=None, featured_image=None, author_id=admin["id"],
         author=author, status="draft", published_date=None, meta_title=None, meta_description=None,
         tags=["chemicals"], views_count=0, featured_products=[], created_at=stamp, updated_at=stamp)

    _add(TAX_RATES, "tax_rate", tax_type="GST", rate=5.0, category_id=spices["id"], category_name="Spices",
         region=None, is_active=True, hsn_code="0909")
    _add(TAX_RATES, "tax_rate", tax_type="GST", rate=DEFAULT_GST_RATE, category_id=chemicals["id"],
         category_name="Chemicals", region=None, is_active=True, hsn_code="2840")
    _add(MARGIN_SETTINGS, "margin", margin_percentage=12.5, category_id=spices["id"], category_name="Spices",
         region=None, is_active=True)
