"""Storage Paths — tests for object naming and Firebase Storage URL parsing."""

from diaspora_connect.core.storage_paths import image_path, storage_path_from_url, upload_path


def test_download_url_path_is_decoded():
    url = (
        "https://firebasestorage.googleapis.com/v0/b/dc.appspot.com/o/"
        "products%2Fp1%2Fshirt.png?alt=media&token=abc"
    )
    assert storage_path_from_url(url) == "products/p1/shirt.png"


def test_public_url_path():
    url = "https://storage.googleapis.com/dc.appspot.com/products/p1/my%20shirt.png"
    assert storage_path_from_url(url) == "products/p1/my shirt.png"


def test_unrecognized_url_returns_none():
    assert storage_path_from_url("https://example.com/images/shirt.png") is None
    assert storage_path_from_url("https://storage.googleapis.com/bucket-only") is None
    assert storage_path_from_url("") is None


def test_image_path_sanitizes_filename():
    assert image_path("products", "p1", "my shirt (1).png") == "products/p1/my-shirt-1-.png"
    assert image_path("leaders", "l1", "???") == "leaders/l1/image"


def test_upload_path_prefixes_timestamp():
    assert upload_path("banners", "hero image.jpg", 1767225600000) == "banners/1767225600000-hero-image.jpg"
