# demo_backend/main.py
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, File, Form, Header, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from azlok.installments import preview_installments

from .core import (
    AddressIn, BlogIn, BlogPatch, CartItemIn, InstallmentPlanIn, OrderIn, OrderPaymentIn, OrderTaxIn,
    PaymentIn, PaymentMethodIn, PaymentMethodPatch, PaymentPatch, ProductIn, ProductPatch, ProductTaxIn,
    RegisterIn, UserIn, UserStatusIn, order_tax, page_of, product_tax, public_user,
)
from .database import (
    ADDRESSES, BLOGS, CARTS, CATEGORIES, INSTALLMENT_PLANS, MARGIN_SETTINGS, ORDERS, PAYMENT_METHODS,
    PAYMENTS, PRODUCTS, ROLE_PERMISSIONS, SALES, SELLERS, SHIPPING_METHODS, TAX_RATES, TOKENS, TRANSACTIONS,
    UPLOADS, USERS, _get_lock, next_id, now,
)
from . import database

app = FastAPI(title="Azlok demo backend (in-memory)")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ADMIN_ROLES = ("admin", "company")
CATALOG_ROLES = ("seller",) + ADMIN_ROLES


# ---------------------------
# Auth dependencies
# ---------------------------
def current_user(authorization: Optional[str] = Header(None)) -> Dict[str, Any]:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")
    user_id = TOKENS.get(authorization[len("Bearer "):])
    if user_id is None or user_id not in USERS:
        raise HTTPException(status_code=401, detail="Could not validate credentials")
    return USERS[user_id]


def admin_user(user: Dict[str, Any] = Depends(current_user)) -> Dict[str, Any]:
    if user["role"] not in ADMIN_ROLES:
        raise HTTPException(status_code=403, detail="Not enough permissions")
    return user


def catalog_user(user: Dict[str, Any] = Depends(current_user)) -> Dict[str, Any]:
    if user["role"] not in CATALOG_ROLES:
        raise HTTPException(status_code=403, detail="Not enough permissions")
    return user


def _sorted(items: List[Dict[str, Any]], sort_by: Optional[str], sort_order: Optional[str],
            allowed: tuple) -> List[Dict[str, Any]]:
    if sort_by not in allowed:
        return items
    return sorted(
        items,
        key=lambda r: (r.get(sort_by) is None, r.get(sort_by) if r.get(sort_by) is not None else 0),
        reverse=(sort_order or "asc").lower() == "desc",
    )


def _get_or_404(store: Dict[int, Dict[str, Any]], record_id: int, label: str) -> Dict[str, Any]:
    record = store.get(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return record


# ---------------------------
# Auth and permissions
# ---------------------------
@app.post("/api/auth/login")
async def login(username: str = Form(...), password: str = Form(...)):
    user = next((u for u in USERS.values() if u["email"] == username), None)
    if user is None or user["password"] != password:
        raise HTTPException(status_code=401, detail="Incorrect email or password")
    if user.get("status") == "suspended":
        raise HTTPException(status_code=403, detail="Account suspended")
    token = uuid.uuid4().hex
    TOKENS[token] = user["id"]
    return {"access_token": token, "token_type": "bearer"}


@app.post("/api/auth/register", status_code=201)
async def register(payload: RegisterIn):
    if any(u["email"] == payload.email for u in USERS.values()):
        raise HTTPException(status_code=400, detail="Email already registered")
    user_id = next_id("user")
    USERS[user_id] = {"id": user_id, **payload.model_dump(), "status": "active", "created_at": now()}
    return public_user(USERS[user_id])


@app.get("/api/auth/check-username/{username}")
async def check_username(username: str):
    taken = any(u["email"].split("@")[0].lower() == username.lower() for u in USERS.values())
    message = "Username is already taken" if taken else "Username is available"
    return {"username": username, "available": not taken, "message": message}


@app.get("/api/permissions/my-permissions")
async def my_permissions(user: Dict[str, Any] = Depends(current_user)):
    if user["role"] in ADMIN_ROLES:
        return sorted({p for perms in ROLE_PERMISSIONS.values() for p in perms})
    return ROLE_PERMISSIONS.get(user["role"], [])


# ---------------------------
# Users
# ---------------------------
@app.get("/api/users/me")
async def read_me(user: Dict[str, Any] = Depends(current_user)):
    return public_user(user)


# ---------------------------
# Shipping addresses
# ---------------------------
@app.get("/api/users/addresses/")
async def list_addresses(user: Dict[str, Any] = Depends(current_user)):
    return [a for a in ADDRESSES.values() if a["user_id"] == user["id"]]


def _clear_default_address(user_id: int) -> None:
    for a in ADDRESSES.values():
        if a["user_id"] == user_id:
            a["is_default"] = False


@app.post("/api/users/addresses/", status_code=201)
async def add_address(payload: AddressIn, user: Dict[str, Any] = Depends(current_user)):
    async with _get_lock(f"addresses:{user['id']}"):
        if payload.is_default:
            _clear_default_address(user["id"])
        address_id = next_id("address")
        ADDRESSES[address_id] = {"id": address_id, "user_id": user["id"], **payload.model_dump(), "created_at": now()}
    return ADDRESSES[address_id]


@app.put("/api/users/addresses/{address_id}")
async def update_address(address_id: int, payload: AddressIn, user: Dict[str, Any] = Depends(current_user)):
    address = _owned_or_404(ADDRESSES, address_id, "Address", user)
    async with _get_lock(f"addresses:{user['id']}"):
        if payload.is_default:
            _clear_default_address(address["user_id"])
        address.update(payload.model_dump())
    return address


@app.delete("/api/users/addresses/{address_id}", status_code=204)
async def delete_address(address_id: int, user: Dict[str, Any] = Depends(current_user)):
    _owned_or_404(ADDRESSES, address_id, "Address", user)
    del ADDRESSES[address_id]


@app.get("/api/users")
async def list_users(
    page: int = 1,
    size: int = 10,
    search: Optional[str] = None,
    role: Optional[str] = None,
    status: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    _: Dict[str, Any] = Depends(admin_user),
):
    out = []
    for u in USERS.values():
        if role and u["role"] != role:
            continue
        if status and u.get("status") != status:
            continue
        if search and search.lower() not in f"{u.get('full_name', '')} {u['email']}".lower():
            continue
        out.append(public_user(u))
    out = _sorted(out, sort_by, sort_order, ("full_name", "email", "created_at", "role"))
    return page_of(out, page, size)


@app.post("/api/users", status_code=201)
async def create_user(payload: UserIn, _: Dict[str, Any] = Depends(admin_user)):
    if not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="Email and password are required")
    if any(u["email"] == payload.email for u in USERS.values()):
        raise HTTPException(status_code=400, detail="Email already registered")
    user_id = next_id("user")
    fields = payload.model_dump(exclude_none=True)
    USERS[user_id] = {"id": user_id, "role": "buyer", "status": "active", **fields, "created_at": now()}
    return public_user(USERS[user_id])


@app.get("/api/users/{user_id}")
async def get_user(user_id: int, _: Dict[str, Any] = Depends(admin_user)):
    return public_user(_get_or_404(USERS, user_id, "User"))


@app.put("/api/users/{user_id}")
async def update_user(user_id: int, payload: UserIn, _: Dict[str, Any] = Depends(admin_user)):
    user = _get_or_404(USERS, user_id, "User")
    user.update(payload.model_dump(exclude_none=True))
    return public_user(user)


@app.patch("/api/users/{user_id}/status")
async def update_user_status(user_id: int, payload: UserStatusIn, _: Dict[str, Any] = Depends(admin_user)):
    user = _get_or_404(USERS, user_id, "User")
    user["status"] = payload.status
    return public_user(user)


@app.delete("/api/users/{user_id}", status_code=204)
async def delete_user(user_id: int, _: Dict[str, Any] = Depends(admin_user)):
    _get_or_404(USERS, user_id, "User")
    del USERS[user_id]
    for token in [t for t, uid in TOKENS.items() if uid == user_id]:
        del TOKENS[token]


# ---------------------------
# Categories and sellers
# ---------------------------
@app.get("/api/categories")
async def list_categories(parent_id: Optional[int] = None):
    return [c for c in CATEGORIES.values() if c["parent_id"] == parent_id]


@app.get("/api/categories/all")
async def all_categories():
    return list(CATEGORIES.values())


@app.get("/api/categories/{category_id}")
async def get_category(category_id: int):
    return _get_or_404(CATEGORIES, category_id, "Category")


@app.get("/api/sellers")
async def list_sellers():
    return list(SELLERS.values())


@app.get("/api/sellers/top")
async def top_sellers(limit: int = 4):
    return sorted(SELLERS.values(), key=lambda s: s.get("rating") or 0, reverse=True)[:limit]


@app.get("/api/sellers/slug/{slug}")
async def seller_by_slug(slug: str):
    seller = next((s for s in SELLERS.values() if s["slug"] == slug), None)
    if seller is None:
        raise HTTPException(status_code=404, detail="Seller not found")
    return seller


@app.get("/api/sellers/{seller_id}")
async def get_seller(seller_id: int):
    return _get_or_404(SELLERS, seller_id, "Seller")


@app.get("/api/sellers/{seller_id}/products")
async def seller_products(seller_id: int, page: int = 1, size: int = 10):
    _get_or_404(SELLERS, seller_id, "Seller")
    items = [p for p in PRODUCTS.values() if (p.get("seller") or {}).get("id") == seller_id]
    return page_of(items, page, size)


# ---------------------------
# Products
# ---------------------------
def _matches(p: Dict[str, Any], term: str) -> bool:
    term = term.lower()
    return term in p["name"].lower() or term in (p.get("description") or "").lower()


@app.get("/api/products")
async def list_products(
    page: int = 1,
    size: int = 10,
    category_id: Optional[int] = None,
    brand: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    is_featured: Optional[bool] = None,
    is_new: Optional[bool] = None,
    is_bestseller: Optional[bool] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
):
    out = []
    for p in PRODUCTS.values():
        if category_id is not None and p["category_id"] != category_id:
            continue
        if brand and (p.get("brand") or "").lower() != brand.lower():
            continue
        if min_price is not None and p["price"] < min_price:
            continue
        if max_price is not None and p["price"] > max_price:
            continue
        if is_featured is not None and p["is_featured"] != is_featured:
            continue
        if is_new is not None and p["is_new"] != is_new:
            continue
        if is_bestseller is not None and p["is_bestseller"] != is_bestseller:
            continue
        if search and not _matches(p, search):
            continue
        out.append(p)
    out = _sorted(out, sort_by, sort_order, ("price", "name", "rating", "created_at"))
    return page_of(out, page, size)


@app.get("/api/products/search/")
async def search_products(query: str = "", page: int = 1, size: int = 20, category_id: Optional[int] = None):
    results = [
        p for p in PRODUCTS.values()
        if _matches(p, query) and (category_id is None or p["category_id"] == category_id)
    ]
    found = page_of(results, page, size, key="results")
    return {"results": found["results"], "total": found["total"], "page": found["page"],
            "limit": size, "pages": found["pages"]}


@app.get("/api/products/{product_id}")
async def get_product(product_id: int):
    return _get_or_404(PRODUCTS, product_id, "Product")


@app.get("/api/products/{product_id}/sales")
async def product_sales(product_id: int):
    _get_or_404(PRODUCTS, product_id, "Product")
    sales = SALES.get(product_id)
    if sales is None:
        raise HTTPException(status_code=404, detail="Sales data not found")
    return sales


def _seller_for(user: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    seller = next((s for s in SELLERS.values() if s["email"] == user["email"]), None)
    if seller is None:
        return None
    return {"id": seller["id"], "business_name": seller["name"], "full_name": user.get("full_name")}


@app.post("/api/products", status_code=201)
async def create_product(payload: ProductIn, user: Dict[str, Any] = Depends(catalog_user)):
    if payload.price <= 0:
        raise HTTPException(status_code=400, detail="Price must be greater than 0")
    category = _get_or_404(CATEGORIES, payload.category_id, "Category")

    # sku uniqueness check and insert must not interleave
    async with _get_lock("products:sku"):
        if any(p["sku"] == payload.sku for p in PRODUCTS.values()):
            raise HTTPException(status_code=400, detail="Product with this SKU already exists")
        product_id = next_id("product")
        stamp = now()
        PRODUCTS[product_id] = {
            "id": product_id,
            **payload.model_dump(),
            "slug": payload.name.lower().replace(" ", "-"),
            "category_name": category["name"],
            "rating": None,
            "tax_percentage": database.DEFAULT_GST_RATE,
            "seller": _seller_for(user),
            "created_at": stamp,
            "updated_at": stamp,
        }
    return PRODUCTS[product_id]


@app.put("/api/products/{product_id}")
async def update_product(product_id: int, payload: ProductPatch, _: Dict[str, Any] = Depends(catalog_user)):
    async with _get_lock(f"product:{product_id}"):
        product = _get_or_404(PRODUCTS, product_id, "Product")
        changes = payload.model_dump(exclude_none=True)
        if "category_id" in changes:
            changes["category_name"] = _get_or_404(CATEGORIES, changes["category_id"], "Category")["name"]
        product.update(changes, updated_at=now())
        return product


@app.delete("/api/products/{product_id}", status_code=204)
async def delete_product(product_id: int, _: Dict[str, Any] = Depends(catalog_user)):
    async with _get_lock(f"product:{product_id}"):
        _get_or_404(PRODUCTS, product_id, "Product")
        del PRODUCTS[product_id]
        SALES.pop(product_id, None)


# ---------------------------
# Image upload
# ---------------------------
@app.post("/api/seller/upload/image")
async def upload_image(
    file: UploadFile = File(...),
    folder: str = Form("products"),
    _: Dict[str, Any] = Depends(catalog_user),
):
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty file")
    if file.content_type and not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="File must be an image")
    filename = f"{uuid.uuid4().hex[:8]}-{file.filename}"
    record = {"url": f"https://cdn.azlok.com/{folder}/{filename}", "filename": filename, "folder": folder}
    UPLOADS.append({**record, "size": len(content)})
    return record


# ---------------------------
# Blogs
# ---------------------------
def _blog_listing(blogs: List[Dict[str, Any]], skip: int, limit: int, search: Optional[str],
                  sort_by: Optional[str], sort_order: Optional[str]) -> Dict[str, Any]:
    if search:
        term = search.lower()
        blogs = [b for b in blogs if term in b["title"].lower() or term in b["content"].lower()]
    blogs = _sorted(blogs, sort_by or "created_at", sort_order or "desc",
                    ("created_at", "published_date", "title", "views_count"))
    limit = max(limit, 1)
    return page_of(blogs, skip // limit + 1, limit, key="blogs")


def _featured_products(ids: List[int]) -> List[Dict[str, Any]]:
    out = []
    for pid in ids:
        p = PRODUCTS.get(pid)
        if p:
            out.append({"id": p["id"], "name": p["name"], "price": p["price"],
                        "image_url": p.get("image_url"), "slug": p.get("slug")})
    return out


@app.get("/api/blogs/")
async def list_blogs(skip: int = 0, limit: int = 10, search: Optional[str] = None, status: Optional[str] = None,
                     sort_by: Optional[str] = None, sort_order: Optional[str] = None):
    published = [b for b in BLOGS.values() if b["status"] == "published"]
    return _blog_listing(published, skip, limit, search, sort_by, sort_order)


@app.get("/api/blogs/admin")
async def admin_list_blogs(skip: int = 0, limit: int = 10, search: Optional[str] = None,
                           status: Optional[str] = None, sort_by: Optional[str] = None,
                           sort_order: Optional[str] = None, _: Dict[str, Any] = Depends(admin_user)):
    blogs = [b for b in BLOGS.values() if not status or b["status"] == status]
    return _blog_listing(blogs, skip, limit, search, sort_by, sort_order)


@app.get("/api/blogs/{blog_id}/admin")
async def admin_get_blog(blog_id: int, _: Dict[str, Any] = Depends(admin_user)):
    return _get_or_404(BLOGS, blog_id, "Blog")


@app.get("/api/blogs/{slug}")
async def get_blog(slug: str):
    blog = next((b for b in BLOGS.values() if b["slug"] == slug and b["status"] == "published"), None)
    if blog is None:
        raise HTTPException(status_code=404, detail="Blog not found")
    blog["views_count"] += 1
    return blog


@app.post("/api/blogs", status_code=201)
async def create_blog(payload: BlogIn, user: Dict[str, Any] = Depends(admin_user)):
    async with _get_lock("blogs:slug"):
        if any(b["slug"] == payload.slug for b in BLOGS.values()):
            raise HTTPException(status_code=400, detail="Blog with this slug already exists")
        blog_id = next_id("blog")
        stamp = now()
        fields = payload.model_dump(exclude={"featured_product_ids"})
        BLOGS[blog_id] = {
            "id": blog_id,
            **fields,
            "author_id": user["id"],
            "author": {"id": user["id"], "full_name": user.get("full_name"), "username": user["email"].split("@")[0]},
            "views_count": 0,
            "featured_products": _featured_products(payload.featured_product_ids),
            "created_at": stamp,
            "updated_at": stamp,
        }
    return BLOGS[blog_id]


@app.put("/api/blogs/{blog_id}")
async def update_blog(blog_id: int, payload: BlogPatch, _: Dict[str, Any] = Depends(admin_user)):
    blog = _get_or_404(BLOGS, blog_id, "Blog")
    changes = payload.model_dump(exclude_none=True, exclude={"featured_product_ids"})
    if payload.featured_product_ids is not None:
        changes["featured_products"] = _featured_products(payload.featured_product_ids)
    blog.update(changes, updated_at=now())
    return blog


@app.delete("/api/blogs/{blog_id}", status_code=204)
async def delete_blog(blog_id: int, _: Dict[str, Any] = Depends(admin_user)):
    _get_or_404(BLOGS, blog_id, "Blog")
    del BLOGS[blog_id]


# ---------------------------
# Cart (server side, backs the cart summary)
# ---------------------------
@app.post("/api/cart/items")
async def cart_add(payload: CartItemIn, user: Dict[str, Any] = Depends(current_user)):
    if payload.quantity <= 0:
        raise HTTPException(status_code=400, detail="quantity must be > 0")
    if payload.product_id not in PRODUCTS:
        raise HTTPException(status_code=404, detail="Product not found")
    cart = CARTS.setdefault(user["id"], {})
    cart[payload.product_id] = cart.get(payload.product_id, 0) + payload.quantity
    return {"user_id": user["id"], "cart": cart}


@app.delete("/api/cart", status_code=204)
async def cart_clear(user: Dict[str, Any] = Depends(current_user)):
    CARTS.pop(user["id"], None)


@app.get("/api/cart-summary/")
async def cart_summary(shipping_method_id: int, user: Dict[str, Any] = Depends(current_user)):
    cart = CARTS.get(user["id"], {})
    if not cart:
        raise HTTPException(status_code=400, detail="Cart is empty")
    method = _active_shipping_method(shipping_method_id)
    result = order_tax(OrderTaxIn(
        items=[{"product_id": pid, "quantity": qty} for pid, qty in cart.items() if pid in PRODUCTS],
        buyer_state=user.get("state"),
        shipping_amount=method["price"],
    ))
    return {
        "subtotal": result["subtotal"],
        "shipping_amount": result["shipping_amount"],
        "tax_amount": result["total_tax_amount"],
        "total": result["total_amount"],
        "cgst_amount": result["total_cgst_amount"],
        "sgst_amount": result["total_sgst_amount"],
        "igst_amount": result["total_igst_amount"],
        "shipping_tax_amount": result["shipping_tax_amount"],
    }


# ---------------------------
# Checkout and orders
# ---------------------------
ORDER_ADDRESS_FIELDS = ("id", "full_name", "address_line1", "address_line2", "city", "state", "country",
                        "zip_code", "phone_number")
CANCELLABLE = ("pending", "processing")
ORDER_PAYMENT_STATUSES = ("pending", "paid", "failed", "refunded")


def _active_shipping_method(method_id: int) -> Dict[str, Any]:
    method = SHIPPING_METHODS.get(method_id)
    if method is None or not method["is_active"]:
        raise HTTPException(status_code=404, detail="Shipping method not found")
    return method


@app.get("/api/shipping/")
async def list_shipping_methods():
    return [m for m in SHIPPING_METHODS.values() if m["is_active"]]


@app.get("/api/payment-methods/")
async def checkout_payment_methods(user: Dict[str, Any] = Depends(current_user)):
    return [m for m in PAYMENT_METHODS.values() if m["user_id"] == user["id"] and m["is_active"]]


@app.post("/api/orders", status_code=201)
async def place_order(payload: OrderIn, user: Dict[str, Any] = Depends(current_user)):
    address = _owned_or_404(ADDRESSES, payload.shipping_address_id, "Address", user)
    method = _active_shipping_method(payload.shipping_method_id)
    # Anything other than one of the buyer's saved methods goes through the gateway
    saved = PAYMENT_METHODS.get(payload.payment_method_id)
    payment_method = saved["method_type"] if saved and saved["user_id"] == user["id"] else "razorpay"

    async with _get_lock(f"cart:{user['id']}"):
        cart = CARTS.get(user["id"], {})
        if not cart:
            raise HTTPException(status_code=400, detail="Cart is empty")
        totals = order_tax(OrderTaxIn(
            items=[{"product_id": pid, "quantity": qty} for pid, qty in cart.items() if pid in PRODUCTS],
            buyer_state=address["state"],
            shipping_amount=method["price"],
        ))
        order_id = next_id("order")
        stamp = now()
        ORDERS[order_id] = {
            "id": order_id,
            "user_id": user["id"],
            "order_number": f"AZ{order_id:06d}",
            "status": "pending",
            "subtotal": totals["subtotal"],
            "tax_amount": round(totals["total_tax_amount"] + totals["shipping_tax_amount"], 2),
            "shipping_cost": method["price"],
            "discount_amount": 0.0,
            "total_amount": totals["total_amount"],
            "shipping_address": {k: address.get(k) for k in ORDER_ADDRESS_FIELDS},
            "shipping_method": method["name"],
            "payment_method": payment_method,
            "payment_status": "pending",
            "tracking_number": f"TRK{uuid.uuid4().hex[:10].upper()}",
            "estimated_delivery": f"{method['estimated_days']} days",
            "created_at": stamp,
            "updated_at": None,
            "items": [
                {
                    "id": i,
                    "order_id": order_id,
                    "product_id": line["product_id"],
                    "product_name": line["product_name"],
                    "product_image": PRODUCTS[line["product_id"]].get("image_url"),
                    "quantity": line["quantity"],
                    "price": line["unit_price"],
                    "total_price": round(line["unit_price"] * line["quantity"], 2),
                    "tax_amount": round(line["unit_tax"] * line["quantity"], 2),
                }
                for i, line in enumerate(totals["items"], start=1)
            ],
        }
        CARTS.pop(user["id"], None)
    return ORDERS[order_id]


@app.get("/api/orders")
async def list_orders(user: Dict[str, Any] = Depends(current_user)):
    return sorted((o for o in ORDERS.values() if _visible(o, user)), key=lambda o: o["id"], reverse=True)


@app.get("/api/orders/track/{identifier}")
async def track_order(identifier: str):
    wanted = identifier.strip().upper()
    for order in ORDERS.values():
        if wanted in (order["order_number"], order["tracking_number"]):
            return order
    raise HTTPException(status_code=404, detail="Order not found")


@app.get("/api/orders/{order_id}")
async def get_order(order_id: int, user: Dict[str, Any] = Depends(current_user)):
    return _owned_or_404(ORDERS, order_id, "Order", user)


@app.post("/api/orders/{order_id}/cancel")
async def cancel_order(order_id: int, user: Dict[str, Any] = Depends(current_user)):
    order = _owned_or_404(ORDERS, order_id, "Order", user)
    if order["status"] not in CANCELLABLE:
        raise HTTPException(status_code=400, detail=f"Order cannot be cancelled once {order['status']}")
    order.update(status="cancelled", updated_at=now())
    return order


@app.put("/api/orders/{order_id}/payment")
async def update_order_payment(order_id: int, payload: OrderPaymentIn, user: Dict[str, Any] = Depends(current_user)):
    order = _owned_or_404(ORDERS, order_id, "Order", user)
    if payload.payment_status not in ORDER_PAYMENT_STATUSES:
        raise HTTPException(status_code=400, detail=f"Unknown payment status '{payload.payment_status}'")
    order.update(
        payment_status=payload.payment_status,
        payment_method=payload.payment_method,
        payment_id=payload.payment_id,
        updated_at=now(),
    )
    if payload.payment_status == "paid" and order["status"] == "pending":
        order["status"] = "processing"
    return order


# ---------------------------
# Tax
# ---------------------------
@app.post("/api/tax/calculate-tax")
async def calculate_tax(payload: ProductTaxIn):
    product = _get_or_404(PRODUCTS, payload.product_id, "Product")
    return product_tax(product, payload.quantity, payload.buyer_state, payload.seller_state)


@app.post("/api/tax/calculate-order-tax")
async def calculate_order_tax(payload: OrderTaxIn):
    try:
        return order_tax(payload)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=f"Product {e.args[0]} not found")


@app.get("/api/tax/tax-rates")
async def tax_rates(is_active: bool = True, tax_type: Optional[str] = None, region: Optional[str] = None,
                    category_id: Optional[int] = None):
    out = []
    for r in TAX_RATES.values():
        if r["is_active"] != is_active:
            continue
        if tax_type and r["tax_type"] != tax_type:
            continue
        if region and r.get("region") != region:
            continue
        if category_id is not None and r.get("category_id") != category_id:
            continue
        out.append(r)
    return out


@app.get("/api/tax/margin-settings")
async def margin_settings(is_active: bool = True, product_id: Optional[int] = None,
                          category_id: Optional[int] = None, seller_id: Optional[int] = None,
                          region: Optional[str] = None):
    wanted = {"product_id": product_id, "category_id": category_id, "seller_id": seller_id, "region": region}
    return [
        m for m in MARGIN_SETTINGS.values()
        if m["is_active"] == is_active and all(v is None or m.get(k) == v for k, v in wanted.items())
    ]


# ---------------------------
# Payments
# ---------------------------
def _visible(record: Dict[str, Any], user: Dict[str, Any]) -> bool:
    return user["role"] in ADMIN_ROLES or record.get("user_id") == user["id"]


def _owned_or_404(store: Dict[int, Dict[str, Any]], record_id: int, label: str,
                  user: Dict[str, Any]) -> Dict[str, Any]:
    record = _get_or_404(store, record_id, label)
    if not _visible(record, user):
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return record


def _with_transactions(payment: Dict[str, Any]) -> Dict[str, Any]:
    txns = [t for t in TRANSACTIONS.values() if t["payment_id"] == payment["id"]]
    return {**payment, "transactions": txns}


def _record_transaction(payment: Dict[str, Any], kind: str, amount: float, status: str,
                        description: Optional[str] = None) -> Dict[str, Any]:
    txn_id = next_id("transaction")
    stamp = now()
    TRANSACTIONS[txn_id] = {
        "id": txn_id,
        "transaction_reference": f"TXN-{uuid.uuid4().hex[:10].upper()}",
        "payment_id": payment["id"],
        "user_id": payment["user_id"],
        "transaction_type": kind,
        "amount": amount,
        "currency": payment["currency"],
        "status": status,
        "gateway": payment.get("gateway"),
        "description": description,
        "transaction_date": stamp,
        "created_at": stamp,
    }
    return TRANSACTIONS[txn_id]


def _new_payment(user: Dict[str, Any], fields: Dict[str, Any]) -> Dict[str, Any]:
    payment_id = next_id("payment")
    stamp = now()
    PAYMENTS[payment_id] = {
        "id": payment_id,
        "payment_reference": f"PAY-{uuid.uuid4().hex[:10].upper()}",
        "user_id": user["id"],
        "currency": "INR",
        "status": "pending",
        "refunded_amount": 0.0,
        **fields,
        "created_at": stamp,
        "updated_at": stamp,
    }
    return PAYMENTS[payment_id]


@app.get("/api/payments/methods")
async def list_payment_methods(active_only: bool = True, user: Dict[str, Any] = Depends(current_user)):
    return [
        m for m in PAYMENT_METHODS.values()
        if m["user_id"] == user["id"] and (m["is_active"] or not active_only)
    ]


@app.post("/api/payments/methods", status_code=201)
async def create_payment_method(payload: PaymentMethodIn, user: Dict[str, Any] = Depends(current_user)):
    async with _get_lock(f"methods:{user['id']}"):
        if payload.is_default:
            for m in PAYMENT_METHODS.values():
                if m["user_id"] == user["id"]:
                    m["is_default"] = False
        method_id = next_id("method")
        stamp = now()
        PAYMENT_METHODS[method_id] = {
            "id": method_id, "user_id": user["id"], **payload.model_dump(), "is_active": True,
            "last_used": None, "created_at": stamp, "updated_at": stamp,
        }
    return PAYMENT_METHODS[method_id]


@app.get("/api/payments/methods/{method_id}")
async def get_payment_method(method_id: int, user: Dict[str, Any] = Depends(current_user)):
    return _owned_or_404(PAYMENT_METHODS, method_id, "Payment method", user)


@app.put("/api/payments/methods/{method_id}")
async def update_payment_method(method_id: int, payload: PaymentMethodPatch,
                                user: Dict[str, Any] = Depends(current_user)):
    method = _owned_or_404(PAYMENT_METHODS, method_id, "Payment method", user)
    async with _get_lock(f"methods:{user['id']}"):
        if payload.is_default:
            for m in PAYMENT_METHODS.values():
                if m["user_id"] == method["user_id"]:
                    m["is_default"] = False
        method.update(payload.model_dump(exclude_none=True), updated_at=now())
    return method


@app.delete("/api/payments/methods/{method_id}", status_code=204)
async def delete_payment_method(method_id: int, user: Dict[str, Any] = Depends(current_user)):
    _owned_or_404(PAYMENT_METHODS, method_id, "Payment method", user)
    del PAYMENT_METHODS[method_id]


@app.get("/api/payments/summary")
async def payment_summary(start_date: Optional[str] = None, end_date: Optional[str] = None,
                          user: Dict[str, Any] = Depends(current_user)):
    payments = [
        p for p in PAYMENTS.values()
        if _visible(p, user)
        and (not start_date or p["created_at"][:10] >= start_date)
        and (not end_date or p["created_at"][:10] <= end_date)
    ]

    def total_for(*statuses):
        return round(sum(p["amount"] for p in payments if p["status"] in statuses), 2)

    counts: Dict[str, int] = {}
    for p in payments:
        counts[p["status"]] = counts.get(p["status"], 0) + 1
    recent = sorted(payments, key=lambda p: p["created_at"], reverse=True)[:5]
    return {
        "total_payments": len(payments),
        "total_amount": round(sum(p["amount"] for p in payments), 2),
        "paid_amount": total_for("paid", "partially_paid"),
        "pending_amount": total_for("pending", "processing"),
        "refunded_amount": round(sum(p["refunded_amount"] for p in payments), 2),
        "failed_amount": total_for("failed"),
        "currency": "INR",
        "payment_status_counts": counts,
        "recent_payments": [_with_transactions(p) for p in recent],
    }


@app.get("/api/payments/transactions")
async def list_transactions(payment_id: Optional[int] = None, transaction_type: Optional[str] = None,
                            start_date: Optional[str] = None, end_date: Optional[str] = None,
                            user: Dict[str, Any] = Depends(current_user)):
    out = []
    for t in TRANSACTIONS.values():
        if not _visible(t, user):
            continue
        if payment_id is not None and t["payment_id"] != payment_id:
            continue
        if transaction_type and t["transaction_type"] != transaction_type:
            continue
        if start_date and t["created_at"][:10] < start_date:
            continue
        if end_date and t["created_at"][:10] > end_date:
            continue
        out.append(t)
    return out


@app.get("/api/payments/transactions/{transaction_id}")
async def get_transaction(transaction_id: int, user: Dict[str, Any] = Depends(current_user)):
    return _owned_or_404(TRANSACTIONS, transaction_id, "Transaction", user)


@app.get("/api/payments/installment-plans")
async def list_installment_plans(status: Optional[str] = None, user: Dict[str, Any] = Depends(current_user)):
    return [p for p in INSTALLMENT_PLANS.values() if _visible(p, user) and (not status or p["status"] == status)]


@app.post("/api/payments/installment-plans", status_code=201)
async def create_installment_plan(payload: InstallmentPlanIn, user: Dict[str, Any] = Depends(current_user)):
    if not 2 <= payload.number_of_installments <= 24:
        raise HTTPException(status_code=400, detail="Number of installments must be between 2 and 24")
    try:
        schedule = preview_installments(
            payload.total_amount,
            payload.number_of_installments,
            payload.installment_frequency,
            payload.interest_rate,
            payload.processing_fee,
            payload.start_date,
        )
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown installment frequency '{payload.installment_frequency}'")

    plan_id = next_id("plan")
    stamp = now()
    INSTALLMENT_PLANS[plan_id] = {
        "id": plan_id,
        "user_id": user["id"],
        **payload.model_dump(mode="json"),
        "end_date": schedule[-1].due_date.isoformat(),
        "status": "active",
        "created_at": stamp,
        "updated_at": stamp,
    }
    for line in schedule:
        _new_payment(user, {
            "order_id": payload.order_id,
            "amount": float(line.amount),
            "due_date": datetime.combine(line.due_date, datetime.min.time()).isoformat(),
            "description": f"Installment {line.number} of {payload.number_of_installments}",
            "is_installment": True,
            "installment_plan_id": plan_id,
            "installment_number": line.number,
        })
    return INSTALLMENT_PLANS[plan_id]


@app.get("/api/payments/installment-plans/{plan_id}")
async def get_installment_plan(plan_id: int, user: Dict[str, Any] = Depends(current_user)):
    return _owned_or_404(INSTALLMENT_PLANS, plan_id, "Installment plan", user)


@app.get("/api/payments")
async def list_payments(page: int = 1, size: int = 10, status: Optional[str] = None,
                        order_id: Optional[int] = None, start_date: Optional[str] = None,
                        end_date: Optional[str] = None, user: Dict[str, Any] = Depends(current_user)):
    out = []
    for p in PAYMENTS.values():
        if not _visible(p, user):
            continue
        if status and p["status"] != status:
            continue
        if order_id is not None and p.get("order_id") != order_id:
            continue
        if start_date and p["created_at"][:10] < start_date:
            continue
        if end_date and p["created_at"][:10] > end_date:
            continue
        out.append(_with_transactions(p))
    return page_of(out, page, size, key="payments")


@app.post("/api/payments", status_code=201)
async def create_payment(payload: PaymentIn, user: Dict[str, Any] = Depends(current_user)):
    if payload.amount <= 0:
        raise HTTPException(status_code=400, detail="Amount must be greater than 0")
    if payload.payment_method_id is not None:
        _owned_or_404(PAYMENT_METHODS, payload.payment_method_id, "Payment method", user)
    payment = _new_payment(user, payload.model_dump())
    _record_transaction(payment, "payment", payment["amount"], "pending", payment.get("description"))
    return _with_transactions(payment)


@app.get("/api/payments/{payment_id}")
async def get_payment(payment_id: int, user: Dict[str, Any] = Depends(current_user)):
    return _with_transactions(_owned_or_404(PAYMENTS, payment_id, "Payment", user))


@app.put("/api/payments/{payment_id}")
async def update_payment(payment_id: int, payload: PaymentPatch, user: Dict[str, Any] = Depends(current_user)):
    async with _get_lock(f"payment:{payment_id}"):
        payment = _owned_or_404(PAYMENTS, payment_id, "Payment", user)
        changes = payload.model_dump(exclude_none=True)
        if changes.get("status") == "paid" and not payment.get("payment_date"):
            changes.setdefault("payment_date", now())
        payment.update(changes, updated_at=now())
        return _with_transactions(payment)


@app.post("/api/payments/{payment_id}/refund")
async def refund_payment(payment_id: int, amount: float, reason: Optional[str] = None,
                         user: Dict[str, Any] = Depends(current_user)):
    async with _get_lock(f"payment:{payment_id}"):
        payment = _owned_or_404(PAYMENTS, payment_id, "Payment", user)
        if payment["status"] not in ("paid", "partially_paid"):
            raise HTTPException(status_code=400, detail="Only paid payments can be refunded")
        refundable = round(payment["amount"] - payment["refunded_amount"], 2)
        if amount <= 0 or amount > refundable:
            raise HTTPException(status_code=400, detail="Refund amount exceeds refundable balance")

        payment["refunded_amount"] = round(payment["refunded_amount"] + amount, 2)
        payment["refund_reason"] = reason
        if payment["refunded_amount"] >= payment["amount"]:
            payment["status"] = "refunded"
        payment["updated_at"] = now()
        _record_transaction(payment, "refund", amount, "success", reason)
        return _with_transactions(payment)


# ---------------------------
# Utility: reset (for tests/demo)
# ---------------------------
@app.post("/reset")
async def reset_all(seed: bool = False):
    if seed:
        database.seed()
    else:
        database.reset()
    return {"status": "reset", "seeded": seed}


def run(host: str = "127.0.0.1", port: int = 8085):
    import uvicorn
    database.seed()
    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    run()
