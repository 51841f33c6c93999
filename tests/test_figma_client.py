import pytest
import requests

from iconsync.core.errors import ConfigError, RemoteError
from iconsync.providers.figma import FigmaClient, extract_ids_from_link
from iconsync.providers.figma import figma_client as figma_client_module


class _FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, content: bytes = b""):
        self.status_code = status_code
        self._payload = payload
        self.content = content
        self.text = content.decode("utf-8", errors="replace") if content else ""

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class _Recorder:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[tuple[str, dict]] = []

    def __call__(self, url, headers=None, timeout=None):
        self.calls.append((url, dict(headers or {})))
        res = self.responses.pop(0)
        if isinstance(res, Exception):
            raise res
        return res


@pytest.mark.parametrize(
    ("link", "expected"),
    [
        ("https://www.figma.com/file/AbC123/Icons?node-id=12-34", ("AbC123", "12-34")),
        ("https://www.figma.com/file/AbC123/Icons?node-id=12%3A34", ("AbC123", "12-34")),
        ("https://www.figma.com/design/Xy9/My-Icons?type=design&node-id=1-2&mode=dev", ("Xy9", "1-2")),
    ],
)
def test_extract_ids_from_link(link, expected):
    assert extract_ids_from_link(link) == expected


@pytest.mark.parametrize("link", ["", "https://www.figma.com/file/AbC123/Icons", "https://example.com/?node-id=1-2"])
def test_extract_ids_rejects_links_without_frame(link):
    with pytest.raises(ConfigError):
        extract_ids_from_link(link)


def test_client_requires_token():
    with pytest.raises(ConfigError):
        FigmaClient("")


def test_get_frame_children_sends_token_and_reads_document(monkeypatch):
    children = [{"id": "1:1", "type": "COMPONENT", "name": "a"}]
    fake = _Recorder(_FakeResponse(payload={"nodes": {"12:34": {"document": {"children": children}}}}))
    monkeypatch.setattr(figma_client_module.requests, "get", fake)

    out = FigmaClient("tok").get_frame_children("AbC", "12-34")

    assert out == children
    url, headers = fake.calls[0]
    assert url == "https://api.figma.com/v1/files/AbC/nodes?ids=12-34&geometry=paths"
    assert headers == {"X-Figma-Token": "tok"}


def test_missing_frame_is_an_error(monkeypatch):
    monkeypatch.setattr(figma_client_module.requests, "get", _Recorder(_FakeResponse(payload={"nodes": {}})))

    with pytest.raises(RemoteError, match="frame_not_found"):
        FigmaClient("tok").get_frame_children("AbC", "1-2")


def test_http_error_status_is_an_error(monkeypatch):
    monkeypatch.setattr(figma_client_module.requests, "get", _Recorder(_FakeResponse(403, content=b"Invalid token")))

    with pytest.raises(RemoteError) as exc:
        FigmaClient("tok").get_frame_children("AbC", "1-2")

    assert str(exc.value).startswith("request_failed_status_403")
    assert exc.value.details["status_code"] == 403


def test_figma_error_payload_is_an_error(monkeypatch):
    monkeypatch.setattr(
        figma_client_module.requests, "get", _Recorder(_FakeResponse(payload={"status": 404, "err": "Not found"}))
    )

    with pytest.raises(RemoteError, match="figma_error"):
        FigmaClient("tok").get_frame_children("AbC", "1-2")


def test_transport_failure_is_an_error(monkeypatch):
    monkeypatch.setattr(figma_client_module.requests, "get", _Recorder(requests.ConnectionError("down")))

    with pytest.raises(RemoteError, match="request_failed"):
        FigmaClient("tok").download("https://cdn.example/x.svg")


def test_get_image_urls_requires_every_id(monkeypatch):
    payload = {"images": {"1:1": "https://cdn.example/1.svg", "1:2": None}}
    monkeypatch.setattr(figma_client_module.requests, "get", _Recorder(_FakeResponse(payload=payload)))

    with pytest.raises(RemoteError, match="image_url_missing"):
        FigmaClient("tok").get_image_urls("AbC", ["1:1", "1:2"])


def test_get_image_urls(monkeypatch):
    payload = {"images": {"1:1": "https://cdn.example/1.svg"}}
    fake = _Recorder(_FakeResponse(payload=payload))
    monkeypatch.setattr(figma_client_module.requests, "get", fake)

    assert FigmaClient("tok").get_image_urls("AbC", ["1:1"]) == {"1:1": "https://cdn.example/1.svg"}
    assert fake.calls[0][0] == "https://api.figma.com/v1/images/AbC?ids=1%3A1&format=svg"


def test_download_is_not_authenticated(monkeypatch):
    fake = _Recorder(_FakeResponse(content=b"<svg/>"))
    monkeypatch.setattr(figma_client_module.requests, "get", fake)

    assert FigmaClient("tok").download("https://cdn.example/x.svg") == b"<svg/>"
    assert fake.calls[0][1] == {}
