# azlok/images.py
import json
import logging
from typing import Any, List, Optional

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "/globe.svg"
GALLERY_PLACEHOLDER = "/logo.png"


def parse_image_urls(value: Any) -> List[str]:
    """
    Normalise a product's `image_urls` into a list of URLs.

    The API returns a list, a JSON-encoded list, a JSON-encoded string, or a
    bare URL. A string that is not valid JSON is taken as a single literal
    URL. Never raises.
    """
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v]
    if not isinstance(value, str):
        return []

    try:
        decoded = json.loads(value)
    except ValueError:
        logger.debug(f"Using image_urls directly as string: {value}")
        return [value]

    if isinstance(decoded, list):
        return [str(v) for v in decoded if v]
    if isinstance(decoded, str) and decoded:
        return [decoded]
    return [value]


def _field(product: Any, name: str) -> Any:
    if isinstance(product, dict):
        return product.get(name)
    return getattr(product, name, None)


def primary_image(product: Any, placeholder: str = PLACEHOLDER_IMAGE) -> str:
    urls = parse_image_urls(_field(product, "image_urls"))
    if urls:
        return urls[0]
    return _field(product, "image_url") or placeholder


def gallery_images(product: Any, placeholder: str = GALLERY_PLACEHOLDER) -> List[str]:
    urls = parse_image_urls(_field(product, "image_urls"))
    main = _field(product, "image_url")
    if main and main not in urls:
        urls.insert(0, main)
    return urls or [placeholder]


def absolute_url(path: Optional[str], site_url: str) -> str:
    if not path:
        return site_url.rstrip("/")
    if path.startswith("http"):
        return path
    if not path.startswith("/"):
        path = "/" + path
    return f"{site_url.rstrip('/')}{path}"
