# azlok/blogs.py
import logging
import re
import unicodedata
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from .client import ApiClient, ApiError, ValidationFailed
from .models import Blog, BlogCreate, BlogPage, BlogUpdate
from .pagination import skip_for
from .validation import validate_blog_form

logger = logging.getLogger(__name__)


def slugify(title: str) -> str:
    """'Cold-Pressed Oils: A Guide' -> 'cold-pressed-oils-a-guide'"""
    text = unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode("ascii")
    text = re.sub(r"[^a-zA-Z0-9\s-]", "", text).strip().lower()
    return re.sub(r"[\s-]+", "-", text)


class BlogService:
    """
    Blog reads and writes. Every operation swallows API errors: lists fall
    back to an empty page, single reads and writes to None, delete to False.
    """

    def __init__(self, client: ApiClient):
        self.client = client

    def _list(self, endpoint: str, page: int, size: int, search: Optional[str], status: Optional[str],
              sort_by: Optional[str], sort_order: Optional[str]) -> BlogPage:
        params = {
            "skip": skip_for(page, size),
            "limit": size,
            "search": search or None,
            "status": status or None,
            "sort_by": sort_by or None,
            "sort_order": sort_order or None,
        }
        try:
            data = self.client.get(endpoint, params=params)
            return BlogPage.model_validate(data or {"page": page, "size": size})
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching blogs from {endpoint}: {e}")
            return BlogPage(page=page, size=size)

    def list_blogs(self, page: int = 1, size: int = 10, search: Optional[str] = None, status: Optional[str] = None,
                   sort_by: Optional[str] = None, sort_order: Optional[str] = None) -> BlogPage:
        return self._list("/api/blogs/", page, size, search, status, sort_by, sort_order)

    def admin_blogs(self, page: int = 1, size: int = 10, search: Optional[str] = None, status: Optional[str] = None,
                    sort_by: Optional[str] = None, sort_order: Optional[str] = None) -> BlogPage:
        return self._list("/api/blogs/admin", page, size, search, status, sort_by, sort_order)

    def get_by_slug(self, slug: str) -> Optional[Blog]:
        try:
            return Blog.model_validate(self.client.get(f"/api/blogs/{slug}"))
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching blog with slug {slug}: {e}")
            return None

    def admin_get(self, blog_id: int) -> Optional[Blog]:
        try:
            return Blog.model_validate(self.client.get(f"/api/blogs/{blog_id}/admin"))
        except (ApiError, ValidationError) as e:
            logger.error(f"Error fetching admin blog with ID {blog_id}: {e}")
            return None

    def create_blog(self, data: Union[BlogCreate, Dict[str, Any]]) -> Optional[Blog]:
        raw = data.payload() if isinstance(data, BlogCreate) else dict(data)
        errors = validate_blog_form(raw)
        if errors:
            raise ValidationFailed(errors)
        blog = BlogCreate.model_validate(raw)
        if not blog.slug:
            blog = blog.model_copy(update={"slug": slugify(blog.title)})
        if blog.tags:
            blog = blog.model_copy(update={"tags": [t.strip() for t in blog.tags if t.strip()]})
        try:
            return Blog.model_validate(self.client.post("/api/blogs", json=blog.payload()))
        except (ApiError, ValidationError) as e:
            logger.error(f"Error creating blog: {e}")
            return None

    def update_blog(self, blog_id: int, data: Union[BlogUpdate, Dict[str, Any]]) -> Optional[Blog]:
        update = data if isinstance(data, BlogUpdate) else BlogUpdate.model_validate(data)
        try:
            return Blog.model_validate(self.client.put(f"/api/blogs/{blog_id}", json=update.payload()))
        except (ApiError, ValidationError) as e:
            logger.error(f"Error updating blog with ID {blog_id}: {e}")
            return None

    def delete_blog(self, blog_id: int) -> bool:
        try:
            self.client.delete(f"/api/blogs/{blog_id}")
            return True
        except (ApiError, ValidationError) as e:
            logger.error(f"Error deleting blog with ID {blog_id}: {e}")
            return False
