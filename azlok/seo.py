# azlok/seo.py
"""
schema.org JSON-LD builders for product, listing, blog, FAQ and breadcrumb
pages. Builders return plain dicts; render_json_ld wraps one in a script tag.
"""
import json
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence

from .config import settings
from .images import absolute_url, gallery_images, primary_image

SCHEMA_CONTEXT = "https://schema.org"
ORGANIZATION_NAME = "Azlok"


def _schema_url(value: str) -> str:
    return value if value.startswith("http") else f"{SCHEMA_CONTEXT}/{value}"


def _get(obj: Any, name: str, default=None):
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def product_url(product: Any, site_url: Optional[str] = None) -> str:
    slug = _get(product, "slug") or _get(product, "id")
    return absolute_url(f"/products/{slug}", site_url or settings.SITE_URL)


def product_schema(product: Any, site_url: Optional[str] = None, currency: Optional[str] = None,
                   today: Optional[date] = None) -> Dict[str, Any]:
    site_url = site_url or settings.SITE_URL
    url = product_url(product, site_url)
    in_stock = (_get(product, "stock_quantity") or 0) > 0
    valid_until = ((today or date.today()) + timedelta(days=365)).isoformat()

    schema: Dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "Product",
        "@id": f"{url}#product",
        "name": _get(product, "name"),
        "description": _get(product, "description") or "",
        "image": [absolute_url(i, site_url) for i in gallery_images(product)],
        "url": url,
        "brand": {"@type": "Brand", "name": _get(product, "brand") or ORGANIZATION_NAME},
        "offers": {
            "@type": "Offer",
            "url": url,
            "price": _get(product, "discount_price") or _get(product, "price"),
            "priceCurrency": currency or settings.DEFAULT_CURRENCY,
            "availability": _schema_url("InStock" if in_stock else "OutOfStock"),
            "priceValidUntil": valid_until,
        },
    }
    if _get(product, "sku"):
        schema["sku"] = _get(product, "sku")
    if _get(product, "category_name"):
        schema["category"] = _get(product, "category_name")

    seller = _get(product, "seller")
    if seller is not None:
        name = _get(seller, "business_name") or _get(seller, "full_name")
        if name:
            schema["offers"]["seller"] = {"@type": "Organization", "name": name}
    return schema


def product_list_schema(products: Sequence[Any], name: str = "Products",
                        site_url: Optional[str] = None) -> Dict[str, Any]:
    site_url = site_url or settings.SITE_URL
    elements = []
    for position, product in enumerate(products, start=1):
        elements.append({
            "@type": "ListItem",
            "position": position,
            "item": {
                "@type": "Product",
                "name": _get(product, "name"),
                "url": product_url(product, site_url),
                "image": absolute_url(primary_image(product), site_url),
                "offers": {
                    "@type": "Offer",
                    "price": _get(product, "price"),
                    "priceCurrency": settings.DEFAULT_CURRENCY,
                    "availability": _schema_url(
                        "InStock" if (_get(product, "stock_quantity") or 0) > 0 else "OutOfStock"
                    ),
                },
            },
        })
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "ItemList",
        "name": name,
        "numberOfItems": len(elements),
        "itemListElement": elements,
    }


def breadcrumb_schema(crumbs: Sequence[Dict[str, str]], site_url: Optional[str] = None) -> Dict[str, Any]:
    """`crumbs` is an ordered list of {"name": ..., "url": ...}"""
    site_url = site_url or settings.SITE_URL
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "BreadcrumbList",
        "itemListElement": [
            {
                "@type": "ListItem",
                "position": position,
                "name": crumb["name"],
                "item": absolute_url(crumb["url"], site_url),
            }
            for position, crumb in enumerate(crumbs, start=1)
        ],
    }


def faq_schema(faqs: Sequence[Dict[str, str]], url: str = "") -> Optional[Dict[str, Any]]:
    if not faqs:
        return None
    schema: Dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "FAQPage",
        "mainEntity": [
            {
                "@type": "Question",
                "name": faq["question"],
                "acceptedAnswer": {"@type": "Answer", "text": faq["answer"]},
            }
            for faq in faqs
        ],
    }
    if url:
        schema["@id"] = f"{url}#faq"
    return schema


def blog_posting_schema(blog: Any, site_url: Optional[str] = None) -> Dict[str, Any]:
    site_url = site_url or settings.SITE_URL
    url = absolute_url(f"/blog/{_get(blog, 'slug')}", site_url)
    author = _get(blog, "author")
    published = _get(blog, "published_date") or _get(blog, "created_at")
    modified = _get(blog, "updated_at") or published

    schema: Dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "BlogPosting",
        "@id": f"{url}#article",
        "mainEntityOfPage": {"@type": "WebPage", "@id": url},
        "headline": _get(blog, "meta_title") or _get(blog, "title"),
        "description": _get(blog, "meta_description") or _get(blog, "excerpt") or "",
        "url": url,
        "author": {
            "@type": "Person",
            "name": (_get(author, "full_name") or _get(author, "username")) if author else ORGANIZATION_NAME,
        },
        "publisher": organization_schema(site_url, with_context=False),
        "keywords": ", ".join(_get(blog, "tags") or []),
    }
    if _get(blog, "featured_image"):
        schema["image"] = absolute_url(_get(blog, "featured_image"), site_url)
    if published:
        schema["datePublished"] = published.isoformat() if hasattr(published, "isoformat") else str(published)
    if modified:
        schema["dateModified"] = modified.isoformat() if hasattr(modified, "isoformat") else str(modified)
    return schema


def organization_schema(site_url: Optional[str] = None, with_context: bool = True) -> Dict[str, Any]:
    site_url = site_url or settings.SITE_URL
    schema = {
        "@type": "Organization",
        "name": ORGANIZATION_NAME,
        "url": site_url,
        "logo": {"@type": "ImageObject", "url": absolute_url("/logo.png", site_url)},
    }
    if with_context:
        schema = {"@context": SCHEMA_CONTEXT, **schema}
    return schema


def website_schema(site_url: Optional[str] = None) -> Dict[str, Any]:
    site_url = site_url or settings.SITE_URL
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "WebSite",
        "name": ORGANIZATION_NAME,
        "url": site_url,
        "potentialAction": {
            "@type": "SearchAction",
            "target": f"{site_url.rstrip('/')}/search?query={{search_term_string}}",
            "query-input": "required name=search_term_string",
        },
    }


def render_json_ld(schema: Optional[Dict[str, Any]]) -> str:
    """Script tag for embedding; empty string when there is nothing to embed"""
    if not schema:
        return ""
    # "</" would close the script element early
    body = json.dumps(schema, ensure_ascii=False, default=str).replace("</", "<\\/")
    return f'<script type="application/ld+json">{body}</script>'


def combine(schemas: List[Optional[Dict[str, Any]]]) -> str:
    return "\n".join(render_json_ld(s) for s in schemas if s)
