# tests/test_blogs.py
import pytest

from azlok.blogs import BlogService, slugify
from azlok.client import ValidationFailed


def test_slugify():
    assert slugify("Cold-Pressed Oils: A Guide") == "cold-pressed-oils-a-guide"
    assert slugify("  Haldi   &  Zeera  ") == "haldi-zeera"
    assert slugify("Café Masala") == "cafe-masala"


def test_public_list_shows_published_only(api):
    page = BlogService(api).list_blogs()
    assert page.total == 1
    assert page.blogs[0].slug == "cooking-with-whole-zeera"
    assert page.blogs[0].author.full_name == "Azlok Admin"


def test_admin_list_falls_back_when_unauthorised(api):
    page = BlogService(api).admin_blogs(page=3, size=5)
    assert page.blogs == []
    assert (page.total, page.page, page.size, page.pages) == (0, 3, 5, 0)


def test_admin_list_and_status_filter(admin_api):
    s = BlogService(admin_api)
    assert s.admin_blogs().total == 2
    drafts = s.admin_blogs(status="draft")
    assert [b.slug for b in drafts.blogs] == ["storing-borax-safely"]


def test_skip_limit_paging(admin_api):
    s = BlogService(admin_api)
    first = s.admin_blogs(page=1, size=1, sort_by="title", sort_order="asc")
    second = s.admin_blogs(page=2, size=1, sort_by="title", sort_order="asc")
    assert first.pages == 2
    assert [first.blogs[0].title, second.blogs[0].title] == ["Cooking With Whole Zeera", "Storing Borax Safely"]


def test_get_by_slug(api):
    s = BlogService(api)
    assert s.get_by_slug("storing-borax-safely") is None
    assert s.get_by_slug("cooking-with-whole-zeera").views_count == 13
    assert s.admin_get(2) is None


def test_create_generates_slug_and_cleans_tags(admin_api):
    s = BlogService(admin_api)
    blog = s.create_blog({"title": "Spice Storage 101", "content": "<p>Cool and dark.</p>", "tags": [" tips ", ""]})
    assert blog.slug == "spice-storage-101"
    assert blog.tags == ["tips"]
    assert blog.status == "draft"
    assert s.admin_get(blog.id).title == "Spice Storage 101"

    # same slug again is rejected by the server and swallowed
    assert s.create_blog({"title": "Spice Storage 101", "content": "again"}) is None


def test_create_validates_locally(down_api):
    with pytest.raises(ValidationFailed) as exc:
        BlogService(down_api).create_blog({"title": "Draft", "content": "", "status": "published"})
    assert set(exc.value.errors) == {"content", "published_date"}


def test_update_and_delete(admin_api):
    s = BlogService(admin_api)
    assert s.update_blog(2, {"status": "published", "published_date": "2026-10-01T09:00:00"}).status == "published"
    assert s.get_by_slug("storing-borax-safely") is not None
    assert s.update_blog(99, {"title": "x"}) is None

    assert s.delete_blog(2) is True
    assert s.delete_blog(2) is False


def test_create_without_title_fails_before_any_request(down_api):
    with pytest.raises(ValidationFailed) as exc:
        BlogService(down_api).create_blog({"content": "body only"})
    assert exc.value.errors == {"title": "Title is required"}


def test_wrong_shape_responses_are_swallowed(canned_api):
    s = BlogService(canned_api([{"id": 1}]))
    page = s.list_blogs(page=3, size=5)
    assert page.blogs == []
    assert (page.page, page.size) == (3, 5)
    assert s.get_by_slug("anything") is None
    assert s.update_blog(1, {"title": "x"}) is None
