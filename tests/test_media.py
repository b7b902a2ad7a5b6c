import httpx
import pytest

from app.modules.media.service import CloudinaryService, MediaUploadError, extract_google_avatar


def make_service(handler, cloud_name="acetrack"):
    service = CloudinaryService(http_client=httpx.Client(transport=httpx.MockTransport(handler)))
    service.cloud_name = cloud_name
    service.upload_preset = "ml_default"
    return service


def test_upload_returns_secure_url():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"secure_url": "https://res.cloudinary.com/acetrack/image/upload/v1/a.jpg"})

    url = make_service(handler).upload_image(b"jpeg-bytes", filename="a.jpg")

    assert url == "https://res.cloudinary.com/acetrack/image/upload/v1/a.jpg"
    assert str(requests[0].url) == "https://api.cloudinary.com/v1_1/acetrack/image/upload"
    body = requests[0].content
    assert b'name="upload_preset"' in body
    assert b"ml_default" in body
    assert b"jpeg-bytes" in body


def test_upload_without_secure_url_fails():
    service = make_service(lambda request: httpx.Response(200, json={"public_id": "a"}))
    with pytest.raises(MediaUploadError):
        service.upload_image(b"x")


def test_upload_transport_error_fails():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(MediaUploadError):
        make_service(handler).upload_image(b"x")


def test_upload_requires_cloud_name():
    service = make_service(lambda request: httpx.Response(200, json={}), cloud_name=None)
    assert not service.is_configured
    with pytest.raises(MediaUploadError):
        service.upload_image(b"x")


def test_mirror_remote_image():
    def handler(request):
        if request.method == "GET":
            return httpx.Response(200, content=b"remote-bytes")
        assert b"remote-bytes" in request.content
        return httpx.Response(200, json={"secure_url": "https://res.cloudinary.com/x.jpg"})

    assert make_service(handler).upload_image_from_url("https://example.org/p.jpg") == "https://res.cloudinary.com/x.jpg"


def test_mirror_fails_when_source_is_missing():
    service = make_service(lambda request: httpx.Response(404))
    with pytest.raises(MediaUploadError):
        service.upload_image_from_url("https://example.org/gone.jpg")


@pytest.mark.parametrize("metadata, expected", [
    ({"picture": "https://lh3.googleusercontent.com/a/abc=s96-c"}, "https://lh3.googleusercontent.com/a/abc=s400-c"),
    ({"avatar_url": "https://example.org/me.png"}, "https://example.org/me.png"),
    ({"google": {"picture": "https://example.org/nested.png"}}, "https://example.org/nested.png"),
    ({"picture": "   ", "image": "https://example.org/img.png"}, "https://example.org/img.png"),
    ({"full_name": "Ana Reyes"}, None),
    (None, None),
])
def test_extract_google_avatar(metadata, expected):
    assert extract_google_avatar(metadata) == expected
