import asyncio

from azlok.client import ApiClient, ApiError
from azlok.dashboard import load_product_overview
from azlok.formatting import format_currency

API_URL = "http://127.0.0.1:8085"


async def show_overview(client, product_id):
    try:
        overview = await load_product_overview(client, product_id)
    except ApiError as e:
        print(f"❌ product {product_id}: {e}")
        return

    seller = overview.seller.name if overview.seller else "no seller"
    print(f"✅ #{product_id} {overview.product.name}: {overview.sales.total_sales} sold "
          f"({format_currency(overview.sales.total_revenue)}), seller {seller}")


async def main():
    c = ApiClient(base_url=API_URL)
    c.post("/reset", params={"seed": True})

    # Product 99 does not exist; the rest fan out their sales and seller lookups
    print("\n⚡ Loading product overviews concurrently...")
    await asyncio.gather(*(show_overview(c, pid) for pid in (1, 2, 3, 4, 5, 99)))


if __name__ == "__main__":
    asyncio.run(main())
