from __future__ import annotations

import io
from email.message import Message
from urllib.error import HTTPError, URLError

import pytest

from sfax.client import http as http_mod
from sfax.client.http import HttpResponse, SfaxHttpClient


class _FakeUrlResponse:
    def __init__(self, status: int, body: bytes, headers=None):
        self.status = status
        self._body = body
        self.headers = headers or {"Content-Type": "application/json"}

    def read(self) -> bytes:
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


@pytest.fixture
def captured(monkeypatch):
    """Replace urlopen; returns the list of (request, kwargs) it saw."""

    seen = []

    def fake_urlopen(req, **kwargs):
        seen.append((req, kwargs))
        return _FakeUrlResponse(200, b'{"isSuccess": true}')

    monkeypatch.setattr(http_mod, "urlopen", fake_urlopen)
    return seen


def test_get_sends_plain_request(captured):
    r = SfaxHttpClient().request("GET", "https://x.test/api/ReceiveInboundFax?token=t&ApiKey=k")

    assert r.status == 200
    assert r.json() == {"isSuccess": True}
    req, kwargs = captured[0]
    assert req.get_method() == "GET"
    assert req.data is None
    assert req.full_url.endswith("ReceiveInboundFax?token=t&ApiKey=k")
    assert "timeout" not in kwargs


def test_post_without_file_sends_empty_body(captured):
    SfaxHttpClient(timeout_sec=7.5).request("POST", "https://x.test/api/SendFaxFromURL?token=t")

    req, kwargs = captured[0]
    assert req.get_method() == "POST"
    assert req.data == b""
    assert kwargs["timeout"] == 7.5


def test_post_multipart_uploads_file_part(captured, tmp_path):
    pdf = tmp_path / "testfax.pdf"
    pdf.write_bytes(b"%PDF-1.4 content")

    SfaxHttpClient().request(
        "POST", "https://x.test/api/SendFax?token=t", file_field=("file", "testfax.pdf"), file_path=str(pdf)
    )

    req, _ = captured[0]
    assert req.get_method() == "POST"
    assert req.get_header("Content-type").startswith("multipart/form-data; boundary=----sfax-")
    assert b'name="file"; filename="testfax.pdf"' in req.data
    assert b"Content-Type: application/pdf" in req.data
    assert b"%PDF-1.4 content" in req.data
    assert req.get_header("Content-length") == str(len(req.data))


def test_upload_cap_enforced_before_request(captured, tmp_path):
    big = tmp_path / "big.tif"
    big.write_bytes(b"x" * 64)

    with pytest.raises(ValueError):
        SfaxHttpClient(max_upload_bytes=16).request(
            "POST", "https://x.test/api/SendFax", file_field=("file", "big.tif"), file_path=str(big)
        )
    assert captured == []


def test_http_error_status_returned_as_response(monkeypatch):
    def fake_urlopen(req, **kwargs):
        raise HTTPError(req.full_url, 400, "Bad Request", Message(), io.BytesIO(b"abc123"))

    monkeypatch.setattr(http_mod, "urlopen", fake_urlopen)

    r = SfaxHttpClient().request("GET", "https://x.test/api/DownloadInboundFaxAsPdf")

    assert isinstance(r, HttpResponse)
    assert r.status == 400
    assert r.body_bytes == b"abc123"


def test_network_error_propagates(monkeypatch):
    def fake_urlopen(req, **kwargs):
        raise URLError("connection refused")

    monkeypatch.setattr(http_mod, "urlopen", fake_urlopen)

    with pytest.raises(URLError):
        SfaxHttpClient().request("GET", "https://x.test/api/ReceiveInboundFax")


def test_missing_upload_file_raises_before_request(captured, tmp_path):
    with pytest.raises(FileNotFoundError):
        SfaxHttpClient().request(
            "POST", "https://x.test/api/SendFax", file_field=("file", "gone.pdf"), file_path=str(tmp_path / "gone.pdf")
        )
    assert captured == []
