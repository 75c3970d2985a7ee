from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

CART_SUMMARY_FIELDS = (
    "subtotal",
    "shipping_amount",
    "tax_amount",
    "total",
    "cgst_amount",
    "sgst_amount",
    "igst_amount",
    "shipping_tax_amount",
)

EMPTY_CART_SUMMARY = {field: 0 for field in CART_SUMMARY_FIELDS}

DISALLOWED_PATHS = ("/admin/", "/login/", "/register/", "/cart/", "/checkout/", "/api/", "/private/")

# (path, changefreq, priority)
STATIC_PAGES: List[Tuple[str, str, str]] = [
    ("", "daily", "1.0"),
    ("/categories", "weekly", "0.8"),
    ("/products", "daily", "0.8"),
    ("/sellers", "weekly", "0.7"),
    ("/blog", "weekly", "0.7"),
    ("/about", "monthly", "0.7"),
    ("/contact", "monthly", "0.7"),
    ("/faq", "monthly", "0.6"),
    ("/terms", "monthly", "0.5"),
    ("/privacy", "monthly", "0.5"),
    ("/shipping", "monthly", "0.5"),
    ("/returns", "monthly", "0.5"),
]


def normalize_cart_summary(data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Keep the known totals, defaulting anything missing or null to 0"""
    data = data or {}
    return {field: data.get(field) or 0 for field in CART_SUMMARY_FIELDS}


def search_page(data: Dict[str, Any], query: str, page: int, size: int) -> Dict[str, Any]:
    """Reshape the backend's {results, limit, ...} search payload into a product page"""
    return {
        "items": data.get("results") or [],
        "total": data.get("total") or 0,
        "page": data.get("page") or page,
        "size": data.get("limit") or size,
        "pages": data.get("pages") or 1,
        "query": query,
    }


def robots_txt(site_url: str, generated_at: Optional[datetime] = None) -> str:
    site_url = site_url.rstrip("/")
    stamp = (generated_at or datetime.now()).isoformat(timespec="seconds")
    lines = [
        "# robots.txt for Azlok",
        f"# Generated on {stamp}",
        "",
        "User-agent: *",
        "Allow: /",
    ]
    lines += [f"Disallow: {path}" for path in DISALLOWED_PATHS]
    lines += [
        "",
        "# Parameter patterns that create duplicate content",
        "Disallow: /*?*sort=",
        "Disallow: /*?*filter=",
        "Disallow: /*?*sessionid=",
        "",
        f"Sitemap: {site_url}/sitemap.xml",
        "",
    ]
    return "\n".join(lines)


def sitemap_xml(site_url: str, today: Optional[date] = None,
                extra_pages: Optional[List[Tuple[str, str, str]]] = None) -> str:
    site_url = site_url.rstrip("/")
    lastmod = (today or date.today()).isoformat()
    out = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
    ]
    for path, changefreq, priority in STATIC_PAGES + (extra_pages or []):
        out += [
            "  <url>",
            f"    <loc>{site_url}{path}</loc>",
            f"    <lastmod>{lastmod}</lastmod>",
            f"    <changefreq>{changefreq}</changefreq>",
            f"    <priority>{priority}</priority>",
            "  </url>",
        ]
    out.append("</urlset>")
    return "\n".join(out) + "\n"
