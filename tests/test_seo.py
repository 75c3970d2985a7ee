# tests/test_seo.py
import json
from datetime import date

from azlok import seo

SITE = "https://shop.example.com"

ZEERA = {
    "id": 1,
    "name": "Azlok Zeera",
    "slug": "azlok-zeera",
    "description": "Whole cumin.",
    "price": 120.0,
    "discount_price": 99.0,
    "stock_quantity": 250,
    "sku": "AZ-ZEERA",
    "category_name": "Spices",
    "image_url": "/products/azlok-zeera.jpg",
    "image_urls": '["/products/azlok-zeera.jpg", "https://cdn.azlok.com/zeera-2.jpg"]',
    "seller": {"id": 1, "business_name": "Azlok Enterprises"},
}


def test_product_schema():
    schema = seo.product_schema(ZEERA, site_url=SITE, today=date(2026, 10, 17))
    assert schema["@id"] == f"{SITE}/products/azlok-zeera#product"
    assert schema["image"] == [f"{SITE}/products/azlok-zeera.jpg", "https://cdn.azlok.com/zeera-2.jpg"]
    assert schema["sku"] == "AZ-ZEERA"
    assert schema["category"] == "Spices"

    offer = schema["offers"]
    assert offer["price"] == 99.0
    assert offer["availability"] == "https://schema.org/InStock"
    assert offer["priceValidUntil"] == "2027-10-17"
    assert offer["seller"] == {"@type": "Organization", "name": "Azlok Enterprises"}


def test_out_of_stock_product_without_optional_fields():
    schema = seo.product_schema({"id": 7, "name": "Garam Masala", "price": 160, "stock_quantity": 0},
                                site_url=SITE, currency="USD")
    assert schema["url"] == f"{SITE}/products/7"
    assert schema["offers"]["availability"] == "https://schema.org/OutOfStock"
    assert schema["offers"]["priceCurrency"] == "USD"
    assert schema["image"] == [f"{SITE}/logo.png"]
    assert "sku" not in schema and "seller" not in schema["offers"]


def test_list_and_breadcrumbs():
    listing = seo.product_list_schema([ZEERA, {"id": 2, "name": "Haldi", "price": 45}], site_url=SITE)
    assert listing["numberOfItems"] == 2
    assert [e["position"] for e in listing["itemListElement"]] == [1, 2]
    assert listing["itemListElement"][1]["item"]["image"] == f"{SITE}/globe.svg"

    crumbs = seo.breadcrumb_schema([{"name": "Home", "url": "/"}, {"name": "Spices", "url": "/categories/spices"}],
                                   site_url=SITE)
    assert [c["item"] for c in crumbs["itemListElement"]] == [f"{SITE}/", f"{SITE}/categories/spices"]


def test_faq():
    assert seo.faq_schema([]) is None
    faq = seo.faq_schema([{"question": "COD?", "answer": "Yes."}], url=f"{SITE}/faq")
    assert faq["@id"] == f"{SITE}/faq#faq"
    assert faq["mainEntity"][0]["acceptedAnswer"]["text"] == "Yes."


def test_blog_posting():
    blog = {
        "slug": "cooking-with-whole-zeera",
        "title": "Cooking With Whole Zeera",
        "excerpt": "Dry roast first.",
        "author": {"full_name": "Azlok Admin"},
        "published_date": "2026-10-14T09:00:00",
        "tags": ["spices", "cooking"],
    }
    schema = seo.blog_posting_schema(blog, site_url=SITE)
    assert schema["url"] == f"{SITE}/blog/cooking-with-whole-zeera"
    assert schema["author"]["name"] == "Azlok Admin"
    assert schema["keywords"] == "spices, cooking"
    assert schema["datePublished"] == schema["dateModified"] == "2026-10-14T09:00:00"
    assert "@context" not in schema["publisher"]


def test_render_escapes_closing_tags():
    assert seo.render_json_ld(None) == ""
    tag = seo.render_json_ld({"name": "</script><b>"})
    assert tag.startswith('<script type="application/ld+json">')
    assert "</script><b>" not in tag
    body = tag[len('<script type="application/ld+json">'):-len("</script>")]
    assert json.loads(body) == {"name": "</script><b>"}


def test_combine_skips_empty():
    out = seo.combine([seo.organization_schema(SITE), None, seo.website_schema(SITE)])
    assert out.count("<script") == 2
    assert "search_term_string" in out
