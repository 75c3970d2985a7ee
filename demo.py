#!/usr/bin/env python
# Walkthrough against a running demo backend:
#   python -m demo_backend.main        (seeded, port 8085)
#   python demo.py
import tempfile
from datetime import date
from pathlib import Path

from azlok.auth import AuthService, AuthState
from azlok.blogs import BlogService
from azlok.cart import CartItem, CartState
from azlok.catalog import CategoryService, upload_image
from azlok.client import ApiClient
from azlok.config import configure_logging
from azlok.formatting import format_currency
from azlok.installments import preview_installments
from azlok.payments import PaymentService
from azlok.products import ProductService
from azlok.seo import product_schema, render_json_ld
from azlok.storage import LocalStorage
from azlok.tax import TaxService

API_URL = "http://127.0.0.1:8085"


def main():
    configure_logging("WARNING")
    storage = LocalStorage(Path(tempfile.mkdtemp()) / "storage.json")
    c = ApiClient(base_url=API_URL, storage=storage)

    # -----------------------------
    # Reset everything for demo
    # -----------------------------
    print("Resetting store...")
    print(c.post("/reset", params={"seed": True}))

    # -----------------------------
    # Browse
    # -----------------------------
    products = ProductService(c)
    print("\nCategories:", [cat.name for cat in CategoryService(c).all()])
    page = products.list_products({"page": 1, "size": 3})
    print(f"\nPage {page.page}/{page.pages} of {page.total} products:")
    for p in page.items:
        print(f"  #{p.id} {p.name:35} {format_currency(p.discount_price or p.price)}")

    print("\nSearching for 'masala'...")
    print([p.name for p in products.search("masala")])

    # -----------------------------
    # Sign in
    # -----------------------------
    auth = AuthState(storage, AuthService(c))
    user = auth.login_with_password("admin@azlok.com", "admin123")
    print(f"\nLogged in as {user.display_name} ({user.role}), permissions: {user.permissions}")

    # -----------------------------
    # Cart and GST
    # -----------------------------
    cart = CartState(storage, TaxService(c))
    cart.clear()
    cart.add_item(CartItem.from_product(page.items[0], 2))
    cart.add_item(CartItem.from_product(products.get_product(4), 1))
    cart.buyer_state = "Karnataka"
    cart.set_shipping_amount(50)
    cart.calculate_taxes()
    print(f"\nCart: {cart.item_count} items, subtotal {format_currency(cart.subtotal)}, "
          f"tax {format_currency(cart.tax_amount)} (IGST {format_currency(cart.igst_amount)}), "
          f"total {format_currency(cart.total_price)}")

    # -----------------------------
    # Back-office
    # -----------------------------
    image = upload_image(c, b"\x89PNG demo bytes", filename="neem-powder.png")
    created = products.create_product({
        "name": "Neem Powder",
        "sku": "AZ-NEEM-100",
        "description": "Sun dried neem leaf powder.",
        "price": 90,
        "stock_quantity": 25,
        "category_id": 1,
        "image_url": image.url,
    })
    print(f"\nCreated product #{created.id} with image {image.url}")
    print(render_json_ld(product_schema(created)))

    blog = BlogService(c).create_blog({
        "title": "Why Neem Powder Belongs In Your Pantry",
        "content": "<p>Neem has been used for centuries.</p>",
        "tags": [" neem ", "wellness", ""],
    })
    print(f"\nDraft blog saved at /blog/{blog.slug} with tags {blog.tags}")

    # -----------------------------
    # Installments and payments
    # -----------------------------
    print("\nInstallment preview for 1000.00 over 4 months at 12% with 25 fee:")
    for line in preview_installments(1000, 4, "monthly", 12, 25):
        print(f"  {line.number}. {line.due_date}  {format_currency(line.amount)}")

    payments = PaymentService(c)
    plan = payments.create_installment_plan({
        "order_id": 1001,
        "total_amount": 1000,
        "number_of_installments": 4,
        "installment_frequency": "monthly",
        "interest_rate": 12,
        "processing_fee": 25,
        "start_date": date.today().isoformat(),
    })
    print(f"\nPlan #{plan.id} ends {plan.end_date}")
    first = payments.list_payments({"page": 1, "size": 10}).payments[0]
    payments.update_payment(first.id, {"status": "paid"})
    refunded = payments.refund(first.id, 100, "Partial return")
    print(f"Refunded {format_currency(refunded.refunded_amount)} on {refunded.payment_reference}")
    print("Summary:", payments.summary().model_dump(include={"total_payments", "paid_amount", "refunded_amount"}))

    auth.logout()
    print("\nLogged out.")


if __name__ == "__main__":
    main()
