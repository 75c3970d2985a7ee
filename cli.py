# cli.py
import argparse
import asyncio
import sys
from datetime import date, datetime
from typing import Any, List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table
from rich.text import Text

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from azlok.auth import AuthService, AuthState
from azlok.blogs import BlogService
from azlok.cart import CartItem, CartState
from azlok.checkout import CheckoutService
from azlok.client import ApiClient, ApiError
from azlok.config import configure_logging, settings
from azlok.dashboard import load_product_overview
from azlok.formatting import format_currency, format_date, format_tax_percentage
from azlok.images import gallery_images, primary_image
from azlok.installments import InstallmentFrequency, preview_installments
from azlok.models import Blog, Payment, Product, ProductFilters
from azlok.orders import OrderService
from azlok.pagination import Paginator
from azlok.payments import PaymentService
from azlok.products import ProductService
from azlok.storage import LocalStorage
from azlok.tax import TaxService
from azlok.users import UserService

console = Console()

# Wired up in init()
api: ApiClient = None
auth: AuthState = None
cart: CartState = None
products: ProductService = None
blogs: BlogService = None
payments: PaymentService = None
taxes: TaxService = None
users: UserService = None
checkouts: CheckoutService = None
orders: OrderService = None

# Global state for status messages and caching
status_message = "Ready"
product_cache: List[Product] = []

PAGE_SIZE = 5

# Custom prompt style for prompt_toolkit
custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


def init(api_url: Optional[str] = None, storage_path: Optional[str] = None):
    global api, auth, cart, products, blogs, payments, taxes, users, checkouts, orders
    storage = LocalStorage(storage_path)
    api = ApiClient(base_url=api_url, storage=storage)
    taxes = TaxService(api)
    auth = AuthState(storage, AuthService(api))
    cart = CartState(storage, taxes)
    products = ProductService(api)
    blogs = BlogService(api)
    payments = PaymentService(api)
    users = UserService(api)
    checkouts = CheckoutService(api)
    orders = OrderService(api)


# ---------------------------
# Display helpers
# ---------------------------
def show_products(items: List[Product], title: str = "📦 Products Catalog"):
    if not items:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=6)
    table.add_column("Name", style="bold", width=30)
    table.add_column("Price", justify="right", width=12)
    table.add_column("Offer", justify="right", width=12)
    table.add_column("Stock", justify="right", width=8)
    table.add_column("Category", width=15)

    for p in items:
        stock_style = "green" if p.stock_quantity > 0 else "red"
        table.add_row(
            str(p.id),
            p.name,
            format_currency(p.price),
            format_currency(p.discount_price) if p.discount_price else "-",
            f"[{stock_style}]{p.stock_quantity}[/{stock_style}]",
            p.category_name or "N/A",
        )
    console.print(table)


def show_pager(pager: Paginator):
    parts = []
    for n in pager.window():
        parts.append(f"[bold reverse] {n} [/bold reverse]" if n == pager.page else str(n))
    console.print(
        f"Showing {pager.start_index}-{pager.end_index} of {pager.total_items}   " + "  ".join(parts)
    )


def show_product_detail(product: Product, sales=None, seller=None):
    lines = [
        f"[bold]{product.name}[/bold]  [dim]SKU {product.sku or '-'}[/dim]",
        f"Price: [green]{format_currency(product.discount_price or product.price)}[/green]"
        + (f"  [strike dim]{format_currency(product.price)}[/strike dim]" if product.discount_price else ""),
        f"Stock: {product.stock_quantity}   Category: {product.category_name or 'N/A'}",
        f"Main image: {primary_image(product)}",
        "Gallery: " + ", ".join(gallery_images(product)),
    ]
    if product.description:
        lines.append("")
        lines.append(product.description)
    if sales is not None:
        lines.append("")
        lines.append(
            f"Sales: {sales.total_sales} units ({format_currency(sales.total_revenue)}), "
            f"last month {sales.last_month_sales} ({format_currency(sales.last_month_revenue)})"
        )
    if seller is not None:
        lines.append(f"Seller: {seller.name}  {seller.email or ''}  {seller.phone or ''}")
    console.print(Panel("\n".join(lines), title=f"🛍️ Product #{product.id}", border_style="cyan"))


def show_cart():
    title = Text()
    title.append("🛒 Shopping Cart - ", style="bold")
    title.append(f"{cart.item_count} items", style="bold cyan")
    title.append(f" - Total: {format_currency(cart.total_price)}", style="bold green")

    if not cart.items:
        console.print(Panel("Your cart is empty 🛍️", title=title, style="blue"))
        return

    table = Table(box=box.ROUNDED, header_style="bold blue", show_lines=True)
    table.add_column("ID", style="dim", width=6)
    table.add_column("Product", style="bold", width=30)
    table.add_column("Qty", justify="right", width=6)
    table.add_column("Price", justify="right", width=12)
    table.add_column("Tax/unit", justify="right", width=12)
    table.add_column("Subtotal", justify="right", width=14)

    for it in cart.items:
        table.add_row(
            str(it.id),
            it.name,
            str(it.quantity),
            format_currency(it.price),
            format_currency(it.tax_amount) if it.tax_amount is not None else "-",
            format_currency(it.line_total),
        )

    totals = Table.grid(padding=(0, 2))
    totals.add_column(justify="right")
    totals.add_column(justify="right")
    totals.add_row("Subtotal", format_currency(cart.subtotal))
    totals.add_row("CGST / SGST / IGST", " / ".join(
        format_currency(v) for v in (cart.cgst_amount, cart.sgst_amount, cart.igst_amount)
    ))
    totals.add_row("Tax", format_currency(cart.tax_amount))
    totals.add_row("Shipping", format_currency(cart.shipping_amount + cart.shipping_tax_amount))
    totals.add_row("[bold]Total[/bold]", f"[bold]{format_currency(cart.total_price)}[/bold]")

    console.print(Panel(table, title=title, border_style="blue"))
    console.print(totals)
    if cart.tax_error:
        console.print(f"[red]{cart.tax_error}[/red]")


def show_blogs(items: List[Blog], title: str = "📰 Blog"):
    if not items:
        console.print("[italic yellow]No blog posts found[/italic yellow]")
        return
    table = Table(title=title, box=box.ROUNDED, header_style="bold yellow", show_lines=True)
    table.add_column("ID", style="dim", width=6)
    table.add_column("Title", style="bold", width=36)
    table.add_column("Slug", width=30)
    table.add_column("Status", width=10)
    table.add_column("Published", width=14)
    for b in items:
        table.add_row(str(b.id), b.title, b.slug, b.status, format_date(b.published_date))
    console.print(table)


def show_payments(items: List[Payment]):
    if not items:
        console.print("[italic yellow]No payments found[/italic yellow]")
        return

    table = Table(
        title="💳 Payments",
        box=box.ROUNDED,
        header_style="bold yellow",
        title_style="bold yellow",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=6)
    table.add_column("Reference", width=16)
    table.add_column("Description", width=28)
    table.add_column("Status", width=12)
    table.add_column("Amount", justify="right", width=14)
    table.add_column("Refunded", justify="right", width=12)
    table.add_column("Due", width=14)

    for p in items:
        status_style = "green" if p.status == "paid" else "yellow"
        table.add_row(
            str(p.id),
            p.payment_reference,
            p.description or "-",
            f"[{status_style}]{p.status}[/{status_style}]",
            format_currency(p.amount, p.currency),
            format_currency(p.refunded_amount, p.currency) if p.refunded_amount else "-",
            format_date(p.due_date),
        )
    console.print(table)


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# API wrapper with error panels
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    Returns the result, or None after showing the error panel.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except (ApiError, ValueError, OSError) as e:
        status_message = f"Error: {e}"
        console.print(show_status(f"Error: {e}", False))
        return None


def require_login(role_check: bool = False) -> bool:
    if not auth.is_authenticated:
        console.print(show_status("Please log in first (option 8)", False))
        return False
    if role_check and auth.role not in ("admin", "company", "seller"):
        console.print(show_status("This action needs a seller or admin account", False))
        return False
    return True


# ---------------------------
# Autocompletion helpers
# ---------------------------
def get_product_completer():
    global product_cache
    if not product_cache:
        page = try_api(products.list_products, ProductFilters(size=100))
        product_cache = page.items if page else []
    return WordCompleter([str(p.id) for p in product_cache] + [p.name for p in product_cache], ignore_case=True)


def resolve_product_id(raw: str) -> Optional[int]:
    raw = raw.strip()
    if raw.isdigit():
        return int(raw)
    match = next((p for p in product_cache if p.name.lower() == raw.lower()), None)
    if match is None:
        console.print(show_status(f"Unknown product '{raw}'", False))
        return None
    return match.id


# ---------------------------
# Layout and Header
# ---------------------------
def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    who = auth.user.display_name if auth.user else "guest"
    header.add_row(
        f"🛍️ Azlok ({who})",
        "[bold blue]Storefront & Back-office[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Input helpers with autocomplete
# ---------------------------
def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_float(message: str, default: float = 10.0) -> float:
    while True:
        raw = Prompt.ask(message, default=str(default))
        try:
            return float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")


def ask_optional(message: str, default: str = "") -> Optional[str]:
    value = Prompt.ask(message, default=default).strip()
    return value or None


# ---------------------------
# Menu actions
# ---------------------------
def browse_products():
    page = IntPrompt.ask("Page", default=1)
    result = try_api(products.list_products, ProductFilters(page=page, size=PAGE_SIZE),
                     success_msg="Products loaded successfully")
    if result is None:
        return
    show_products(result.items)
    show_pager(Paginator(result.total, PAGE_SIZE, result.page))


def product_detail():
    pid = resolve_product_id(prompt_with_autocomplete("Enter product ID", completer=get_product_completer()))
    if pid is None:
        return
    if auth.role in ("admin", "company"):
        overview = try_api(asyncio.run, load_product_overview(api, pid), success_msg=f"Product {pid} details loaded")
        if overview:
            show_product_detail(overview.product, overview.sales, overview.seller)
    else:
        product = try_api(products.get_product, pid, success_msg=f"Product {pid} details loaded")
        if product:
            show_product_detail(product)
    tax = try_api(taxes.calculate_product_tax, pid)
    if tax:
        console.print(
            f"GST {format_tax_percentage(tax.tax_percentage)}: {format_currency(tax.tax_amount)} "
            f"(price with tax {format_currency(tax.price_with_tax)}, HSN {tax.hsn_code or '-'})"
        )


def search_products():
    term = prompt_with_autocomplete("Enter search term")
    found = try_api(products.search, term, success_msg=f"Search for '{term}' completed")
    if found is not None:
        show_products(found, title=f"🔍 Results for '{term}'")


def add_to_cart():
    pid = resolve_product_id(prompt_with_autocomplete("Enter product ID", completer=get_product_completer()))
    if pid is None:
        return
    product = try_api(products.get_product, pid)
    if product is None:
        return
    qty = IntPrompt.ask("Enter quantity", default=1)
    cart.add_item(CartItem.from_product(product, qty))
    console.print(show_status(f"Added {qty} x {product.name} to cart"))
    show_cart()


def view_cart():
    if cart.items and Confirm.ask("Recalculate taxes?", default=True):
        cart.buyer_state = ask_optional("Your state (blank for same as seller)", cart.buyer_state) or ""
        cart.set_shipping_amount(ask_float("Shipping amount", default=cart.shipping_amount))
        try_api(cart.calculate_taxes)
    show_cart()


def update_cart():
    if not cart.items:
        console.print("[italic yellow]Cart is empty[/italic yellow]")
        return
    completer = WordCompleter([str(i.id) for i in cart.items])
    raw = prompt_with_autocomplete("Product ID in cart", completer=completer).strip()
    if not raw.isdigit():
        console.print(show_status("Enter a numeric product ID", False))
        return
    if Confirm.ask("Remove entire item from cart?"):
        cart.remove_item(int(raw))
    else:
        cart.update_quantity(int(raw), IntPrompt.ask("New quantity (0 removes)", default=1))
    show_cart()


def read_blogs():
    page = IntPrompt.ask("Page", default=1)
    result = blogs.list_blogs(page=page, size=PAGE_SIZE)
    show_blogs(result.blogs)
    if not result.blogs:
        return
    slug = prompt_with_autocomplete("Slug to read (blank to skip)",
                                    completer=WordCompleter([b.slug for b in result.blogs]))
    if slug.strip():
        blog = blogs.get_by_slug(slug.strip())
        if blog is None:
            console.print(show_status(f"Blog '{slug}' not found", False))
            return
        author = blog.author.full_name if blog.author else "Azlok"
        console.print(Panel(blog.content, title=f"{blog.title} - {author}", border_style="yellow"))


def login_logout():
    if auth.is_authenticated:
        if Confirm.ask(f"Log out {auth.user.display_name if auth.user else ''}?"):
            auth.logout()
            console.print(show_status("Logged out"))
        return
    email = prompt_with_autocomplete("Email")
    password = Prompt.ask("Password", password=True)
    user = try_api(auth.login_with_password, email, password, success_msg="Logged in successfully")
    if user:
        console.print(f"Welcome [bold]{user.display_name}[/bold] ({user.role})")


def create_product():
    if not require_login(role_check=True):
        return
    data = {
        "name": prompt_with_autocomplete("Product name"),
        "sku": prompt_with_autocomplete("SKU"),
        "description": prompt_with_autocomplete("Description"),
        "price": ask_float("💰 Price", default=100.0),
        "stock_quantity": IntPrompt.ask("📦 Stock", default=10),
        "category_id": IntPrompt.ask("🏷️ Category ID", default=1),
        "image_url": ask_optional("Image URL"),
    }
    created = try_api(products.create_product, data, success_msg=f"Product '{data['name']}' created")
    if created:
        product_cache.clear()
        show_product_detail(created)


def edit_product():
    if not require_login(role_check=True):
        return
    pid = resolve_product_id(prompt_with_autocomplete("Product ID to edit", completer=get_product_completer()))
    if pid is None:
        return
    current = try_api(products.get_product, pid)
    if current is None:
        return
    changes = {
        "name": Prompt.ask("Name", default=current.name),
        "price": ask_float("Price", default=current.price),
        "stock_quantity": IntPrompt.ask("Stock", default=current.stock_quantity),
    }
    updated = try_api(products.update_product, pid, changes, success_msg=f"Product {pid} updated")
    if updated:
        product_cache.clear()
        show_product_detail(updated)


def delete_product():
    if not require_login(role_check=True):
        return
    pid = resolve_product_id(prompt_with_autocomplete("Product ID to delete", completer=get_product_completer()))
    if pid is not None and Confirm.ask(f"[red]Delete product {pid}?[/red]"):
        if try_api(products.delete_product, pid, success_msg=f"Product {pid} deleted"):
            product_cache.clear()


def manage_blogs():
    if not require_login():
        return
    result = blogs.admin_blogs(size=20)
    show_blogs(result.blogs, title="📰 All posts")
    action = Prompt.ask("[c]reate, [d]elete or [b]ack", choices=["c", "d", "b"], default="b")
    if action == "c":
        status = Prompt.ask("Status", choices=["draft", "published"], default="draft")
        data = {
            "title": prompt_with_autocomplete("Title"),
            "content": prompt_with_autocomplete("Content"),
            "excerpt": ask_optional("Excerpt"),
            "tags": [t for t in Prompt.ask("Tags (comma separated)", default="").split(",") if t.strip()],
            "status": status,
            "published_date": datetime.now().isoformat(timespec="seconds") if status == "published" else None,
        }
        blog = try_api(blogs.create_blog, data)
        if blog:
            console.print(show_status(f"Blog '{blog.title}' created at /blog/{blog.slug}"))
        else:
            console.print(show_status("Failed to create blog", False))
    elif action == "d":
        blog_id = IntPrompt.ask("Blog ID")
        if Confirm.ask(f"[red]Delete blog {blog_id}?[/red]"):
            ok = blogs.delete_blog(blog_id)
            console.print(show_status(f"Blog {blog_id} deleted" if ok else "Failed to delete blog", ok))


def view_payments():
    if not require_login():
        return
    summary = payments.summary()
    console.print(Panel.fit(
        f"Payments: {summary.total_payments}   Total {format_currency(summary.total_amount)}   "
        f"Paid {format_currency(summary.paid_amount)}   Pending {format_currency(summary.pending_amount)}   "
        f"Refunded {format_currency(summary.refunded_amount)}",
        title="💰 Summary", border_style="green",
    ))
    page = payments.list_payments({"page": 1, "size": 20})
    show_payments(page.payments)

    txns = payments.transactions()
    if txns:
        table = Table(title="🧾 Transactions", box=box.ROUNDED, header_style="bold blue")
        table.add_column("Reference")
        table.add_column("Type")
        table.add_column("Status")
        table.add_column("Amount", justify="right")
        table.add_column("Date")
        for t in txns:
            table.add_row(t.transaction_reference, t.transaction_type, t.status,
                          format_currency(t.amount, t.currency), format_date(t.transaction_date))
        console.print(table)

    if page.payments and Confirm.ask("Refund a payment?", default=False):
        pid = IntPrompt.ask("Payment ID")
        amount = ask_float("Refund amount", default=0.0)
        refunded = try_api(payments.refund, pid, amount, ask_optional("Reason"), success_msg="Refund recorded")
        if refunded:
            show_payments([refunded])


def installments():
    total = ask_float("Order total", default=1000.0)
    count = IntPrompt.ask("Number of installments", default=3)
    frequency = Prompt.ask("Frequency", choices=[f.value for f in InstallmentFrequency], default="monthly")
    rate = ask_float("Interest rate %", default=0.0)
    fee = ask_float("Processing fee", default=0.0)

    lines = try_api(preview_installments, total, count, frequency, rate, fee, date.today())
    if not lines:
        return
    table = Table(title="📅 Installment preview", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Due date")
    table.add_column("Amount", justify="right")
    for line in lines:
        table.add_row(str(line.number), format_date(line.due_date), format_currency(line.amount))
    table.add_row("", "[bold]Total[/bold]", f"[bold]{format_currency(sum(l.amount for l in lines))}[/bold]")
    console.print(table)

    if auth.is_authenticated and Confirm.ask("Create this plan?", default=False):
        plan = try_api(payments.create_installment_plan, {
            "order_id": IntPrompt.ask("Order ID", default=1),
            "total_amount": total,
            "number_of_installments": count,
            "installment_frequency": frequency,
            "interest_rate": rate,
            "processing_fee": fee,
            "start_date": date.today().isoformat(),
        }, success_msg="Installment plan created")
        if plan:
            console.print(f"Plan #{plan.id} runs until {format_date(plan.end_date)}")


def list_users():
    if not require_login():
        return
    search = ask_optional("Search (blank for all)")
    page = users.list_users({"page": 1, "size": 20, "search": search})
    if not page.items:
        console.print("[italic yellow]No users found[/italic yellow]")
        return
    table = Table(title=f"👥 Users ({page.total})", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Role")
    table.add_column("Status")
    for u in page.items:
        table.add_row(str(u.id), u.display_name, u.email or "-", u.role, u.status or "-")
    console.print(table)


def checkout():
    if not require_login():
        return
    if not cart.items:
        console.print("[italic yellow]Cart is empty[/italic yellow]")
        return

    addresses = checkouts.shipping_addresses()
    if addresses.error:
        console.print(show_status(addresses.error, False))
        return
    if addresses.data:
        for a in addresses.data:
            console.print(f"[bold]{a.id}[/bold]  {a.full_name}, {a.address_line1}, {a.city}, {a.state} {a.zip_code}")
        address_id = IntPrompt.ask("Ship to address ID", default=addresses.data[-1].id)
    else:
        added = checkouts.add_shipping_address({
            "full_name": Prompt.ask("Full name", default=auth.user.display_name if auth.user else ""),
            "address_line1": Prompt.ask("Address"),
            "city": Prompt.ask("City"),
            "state": Prompt.ask("State"),
            "zip_code": Prompt.ask("PIN code"),
            "phone_number": Prompt.ask("Phone"),
        })
        if added.error:
            console.print(show_status(added.error, False))
            return
        address_id = added.data.id

    methods = checkouts.shipping_methods()
    if methods.error:
        console.print(show_status(methods.error, False))
        return
    for m in methods.data:
        console.print(f"[bold]{m.id}[/bold]  {m.name}  {format_currency(m.price)}  ({m.estimated_days} days)")
    shipping_method_id = IntPrompt.ask("Shipping method", default=methods.data[0].id)

    pay_options = checkouts.payment_methods().data
    for p in pay_options:
        console.print(f"[bold]{p.id}[/bold]  {p.provider} ({p.method_type})")
    payment_method_id = IntPrompt.ask("Pay with", default=pay_options[0].id)

    # The server-side cart is rebuilt from the local one before pricing
    try_api(api.delete, "/api/cart")
    for item in cart.items:
        try_api(api.post, "/api/cart/items", {"product_id": item.id, "quantity": item.quantity})

    summary = checkouts.checkout_summary(shipping_method_id)
    if summary.error:
        console.print(show_status(summary.error, False))
        return
    console.print(Panel.fit(
        f"Subtotal {format_currency(summary.data.subtotal)}   Tax {format_currency(summary.data.tax_amount)}   "
        f"Shipping {format_currency(summary.data.shipping_amount + summary.data.shipping_tax_amount)}   "
        f"[bold]Total {format_currency(summary.data.total)}[/bold]",
        title="🧾 Order summary", border_style="green",
    ))
    if not Confirm.ask("Place order?", default=True):
        return

    placed = checkouts.place_order({
        "shipping_address_id": address_id,
        "shipping_method_id": shipping_method_id,
        "payment_method_id": payment_method_id,
    })
    if placed.error:
        console.print(show_status(placed.error, False))
        return
    cart.clear()
    console.print(show_status(f"Order #{placed.order_id} placed"))
    if placed.redirect_url:
        console.print(f"Complete payment at {settings.SITE_URL.rstrip('/')}{placed.redirect_url}")


def my_orders():
    if auth.is_authenticated:
        found = orders.list_orders()
        if found:
            table = Table(title="📦 Orders", box=box.ROUNDED, header_style="bold cyan")
            table.add_column("ID", style="dim")
            table.add_column("Number")
            table.add_column("Status")
            table.add_column("Payment")
            table.add_column("Total", justify="right")
            table.add_column("Placed")
            for o in found:
                table.add_row(str(o.id), o.order_number, o.status, o.payment_status or "-",
                              format_currency(o.total_amount), format_date(o.created_at))
            console.print(table)
        else:
            console.print("[italic yellow]No orders yet[/italic yellow]")

    identifier = ask_optional("Order or tracking number to look up (blank to skip)")
    if not identifier:
        return
    tracked = orders.track_order(identifier)
    if not tracked.success:
        console.print(show_status(tracked.error, False))
        return
    order = tracked.order
    lines = [
        f"Status: {order.status}   Payment: {order.payment_status or '-'}",
        f"Tracking: {order.tracking_number or '-'}   Estimated delivery: {order.estimated_delivery or '-'}",
    ]
    lines += [f"{i.quantity} x {i.product_name}  {format_currency(i.total_price)}" for i in order.items]
    console.print(Panel("\n".join(lines), title=f"Order {order.order_number}", border_style="cyan"))

    if auth.is_authenticated and order.status in ("pending", "processing") and Confirm.ask("Cancel this order?", default=False):
        ok = orders.cancel_order(order.id)
        console.print(show_status("Order cancelled" if ok else "Could not cancel order", ok))


def reset_backend():
    global product_cache
    if Confirm.ask("[red]This will reset the demo backend and reseed it. Continue?[/red]"):
        resp = try_api(api.post, "/reset", params={"seed": True}, success_msg="Store reset successfully")
        console.print(resp)
        product_cache = []
        cart.clear()
        auth.logout()


ACTIONS = {
    "1": browse_products,
    "2": product_detail,
    "3": search_products,
    "4": add_to_cart,
    "5": view_cart,
    "6": update_cart,
    "7": read_blogs,
    "8": login_logout,
    "9": create_product,
    "10": edit_product,
    "11": delete_product,
    "12": manage_blogs,
    "13": view_payments,
    "14": installments,
    "15": list_users,
    "16": reset_backend,
    "17": checkout,
    "18": my_orders,
}


# ---------------------------
# Main menu
# ---------------------------
def menu():
    console.clear()
    console.print(create_header())

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        login_label = "🚪 Log out" if auth.is_authenticated else "🔑 Log in"
        options = [
            ("1", "📦 Browse products", "9", "➕ Create product"),
            ("2", "ℹ️ Product details", "10", "✏️ Edit product"),
            ("3", "🔍 Search products", "11", "🗑️ Delete product"),
            ("4", "🛒 Add to cart", "12", "📰 Manage blogs"),
            ("5", "🧾 View cart & taxes", "13", "💳 Payments"),
            ("6", "➖ Update cart", "14", "📅 Installments"),
            ("7", "📰 Read blog", "15", "👥 Users"),
            ("8", login_label, "16", "🔄 Reset demo data"),
            ("17", "✅ Checkout", "18", "📦 Orders & tracking"),
            ("", "", "q", "👋 Quit")
        ]

        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter(list(ACTIONS) + ["q", "quit", "exit"])
        ).strip()

        if choice in ACTIONS:
            ACTIONS[choice]()
        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Thank you for shopping with Azlok! 👋[/bold green]",
                                        title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


def main(argv: Optional[List[Any]] = None):
    parser = argparse.ArgumentParser(description="Azlok storefront and back-office")
    parser.add_argument("--api-url", default=None, help=f"Backend URL (default {settings.API_URL})")
    parser.add_argument("--storage", default=None, help=f"Local storage file (default {settings.STORAGE_PATH})")
    parser.add_argument("--log-level", default=None, help="Logging level")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    init(args.api_url, args.storage)
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
