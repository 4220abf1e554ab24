import asyncio
import io

import cloudinary.exceptions
import cloudinary.uploader
import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from app.core.exceptions import DependencyError, ValidationError
from app.utils.file_storage import CloudinaryMediaStorage, LocalMediaStorage, image_kind


def _upload(name, content_type, data=b"\xff\xd8\xff\xe0fake-jpeg"):
    return UploadFile(
        file=io.BytesIO(data),
        filename=name,
        headers=Headers({"content-type": content_type}),
    )


@pytest.mark.parametrize(
    "name, content_type, expected",
    [
        ("a.jpg", "image/jpeg", ("image/jpeg", ".jpg")),
        ("a.png", "image/png", ("image/png", ".png")),
        # mobile clients send octet-stream; fall back to the extension
        ("a.jpeg", "application/octet-stream", ("image/jpeg", ".jpg")),
        ("a.PNG", "application/octet-stream", ("image/png", ".png")),
    ],
)
def test_accepted_image_kinds(name, content_type, expected):
    assert image_kind(_upload(name, content_type)) == expected


@pytest.mark.parametrize(
    "name, content_type",
    [("a.webp", "image/webp"), ("a.gif", "image/gif"), ("notes.txt", "application/octet-stream")],
)
def test_rejected_image_kinds(name, content_type):
    with pytest.raises(ValidationError):
        image_kind(_upload(name, content_type))


def test_local_storage_writes_file(tmp_path):
    storage = LocalMediaStorage(str(tmp_path), "http://cdn.test/")
    url = asyncio.run(storage.upload(_upload("a.png", "image/png", b"\x89PNG data"), "banner_images"))

    assert url.startswith("http://cdn.test/media/banner_images/")
    [stored] = list((tmp_path / "banner_images").iterdir())
    assert stored.read_bytes() == b"\x89PNG data"


def test_cloudinary_upload_returns_secure_url(monkeypatch):
    calls = []

    def fake_upload(file, **options):
        calls.append((file, options))
        return {"secure_url": "https://res.cloudinary.com/demo/image/upload/v1/projects/x.jpg"}

    monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)

    storage = CloudinaryMediaStorage("demo", "key", "secret")
    url = asyncio.run(storage.upload(_upload("a.jpg", "image/jpeg"), "project_images"))

    assert url == "https://res.cloudinary.com/demo/image/upload/v1/projects/x.jpg"
    [(contents, options)] = calls
    assert contents == b"\xff\xd8\xff\xe0fake-jpeg"
    assert options["folder"] == "project_images"


def test_cloudinary_failure_is_dependency_error(monkeypatch):
    def fake_upload(file, **options):
        raise cloudinary.exceptions.Error("Invalid Signature")

    monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)

    storage = CloudinaryMediaStorage("demo", "key", "secret")
    with pytest.raises(DependencyError):
        asyncio.run(storage.upload(_upload("a.jpg", "image/jpeg"), "project_images"))


def test_cloudinary_rejects_non_image_before_upload(monkeypatch):
    monkeypatch.setattr(cloudinary.uploader, "upload", lambda *a, **k: pytest.fail("uploaded"))

    storage = CloudinaryMediaStorage("demo", "key", "secret")
    with pytest.raises(ValidationError):
        asyncio.run(storage.upload(_upload("a.gif", "image/gif"), "project_images"))
