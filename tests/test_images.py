# tests/test_images.py
from azlok.images import absolute_url, gallery_images, parse_image_urls, primary_image


def test_parse_image_urls_shapes():
    assert parse_image_urls(None) == []
    assert parse_image_urls("") == []
    assert parse_image_urls(["/a.jpg", "", "/b.jpg"]) == ["/a.jpg", "/b.jpg"]
    assert parse_image_urls('["/a.jpg", "/b.jpg"]') == ["/a.jpg", "/b.jpg"]
    assert parse_image_urls('"/only.jpg"') == ["/only.jpg"]
    assert parse_image_urls("[]") == []
    assert parse_image_urls(42) == []


def test_malformed_json_is_a_literal_url():
    assert parse_image_urls("https://cdn.azlok.com/x.jpg") == ["https://cdn.azlok.com/x.jpg"]
    assert parse_image_urls('["/a.jpg",') == ['["/a.jpg",']


def test_primary_image():
    assert primary_image({"image_urls": '["/first.jpg", "/second.jpg"]', "image_url": "/main.jpg"}) == "/first.jpg"
    assert primary_image({"image_url": "/main.jpg"}) == "/main.jpg"
    assert primary_image({}) == "/globe.svg"


def test_gallery_puts_main_image_first():
    product = {"image_url": "/main.jpg", "image_urls": '["/b.jpg", "/main.jpg"]'}
    assert gallery_images(product) == ["/b.jpg", "/main.jpg"]
    assert gallery_images({"image_url": "/main.jpg", "image_urls": ["/b.jpg"]}) == ["/main.jpg", "/b.jpg"]
    assert gallery_images({}) == ["/logo.png"]


def test_absolute_url():
    assert absolute_url("/p/x.jpg", "https://www.azlok.com/") == "https://www.azlok.com/p/x.jpg"
    assert absolute_url("p/x.jpg", "https://www.azlok.com") == "https://www.azlok.com/p/x.jpg"
    assert absolute_url("https://cdn.azlok.com/x.jpg", "https://www.azlok.com") == "https://cdn.azlok.com/x.jpg"
    assert absolute_url(None, "https://www.azlok.com/") == "https://www.azlok.com"
