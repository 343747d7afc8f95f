"""HTTP transport for the Sfax API.

Security notes:
- Request URIs carry the token and API key; never log them verbatim.
- Treat response bodies as untrusted input.
"""
from __future__ import annotations

import json
import mimetypes
import ssl
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple
from urllib.error import HTTPError
from urllib.request import Request, urlopen

from sfax.core.config import DEFAULT_MAX_UPLOAD_BYTES

USER_AGENT = "sfax-python/0.1"
_CRLF = b"\r\n"


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Status, headers and raw body of one API reply."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body_bytes: bytes = b""

    def json(self) -> Any:
        return json.loads(self.body_bytes.decode("utf-8", errors="strict"))


class SfaxHttpClient:
    """Stdlib-only transport: one request per call.

    Non-2xx statuses come back as `HttpResponse` so the caller can decide
    what is usable. Network failures (`URLError`, `OSError`, timeouts) are
    not caught here.

    Security notes:
    - Fax documents are read fully into memory, so uploads are capped.
    - TLS verification stays on.

    """

    def __init__(
        self,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        timeout_sec: Optional[float] = None,
    ):
        self.max_upload_bytes = int(max_upload_bytes)
        self.timeout_sec = timeout_sec

    def request(
        self,
        method: str,
        url: str,
        *,
        file_field: Optional[Tuple[str, str]] = None,
        file_path: Optional[str] = None,
    ) -> HttpResponse:
        """Send `method url`, optionally with one multipart file part.

        `file_field` is (form field name, file name sent to the server).
        A POST without a file goes out with an empty body; the API reads
        everything from the query string.
        """

        method = method.upper()
        if file_field and file_path:
            field_name, filename = file_field
            document = _load_fax_document(file_path, self.max_upload_bytes)
            body, boundary = _multipart_body(field_name, filename, document)
            req = Request(url=url, data=body, method=method)
            req.add_header("Content-Type", f"multipart/form-data; boundary={boundary}")
            req.add_header("Content-Length", str(len(body)))
        elif method == "POST":
            req = Request(url=url, data=b"", method=method)
        else:
            req = Request(url=url, method=method)

        req.add_header("User-Agent", USER_AGENT)
        return _send(req, timeout=self.timeout_sec)


def _load_fax_document(path: str, max_bytes: int) -> bytes:
    """Read the document to upload; raises ValueError past the cap, OSError if unreadable."""

    doc = Path(path)
    size = doc.stat().st_size
    if size > max_bytes:
        raise ValueError(f"fax document {doc.name} is {size} bytes, upload cap is {max_bytes}")
    data = doc.read_bytes()
    if len(data) > max_bytes:
        raise ValueError(f"fax document {doc.name} grew past the upload cap while reading")
    return data


def _multipart_body(field_name: str, filename: str, data: bytes) -> Tuple[bytes, str]:
    """Build a single-part multipart/form-data body and its boundary."""

    boundary = "----sfax-" + uuid.uuid4().hex
    content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    head = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{field_name}"; filename="{filename}"\r\n'
        f"Content-Type: {content_type}\r\n\r\n"
    ).encode("utf-8")
    tail = _CRLF + f"--{boundary}--".encode("utf-8") + _CRLF
    return head + data + tail, boundary


def _send(req: Request, *, timeout: Optional[float] = None) -> HttpResponse:
    ctx = ssl.create_default_context()
    kwargs: dict = {"context": ctx}
    if timeout is not None:
        kwargs["timeout"] = timeout
    try:
        with urlopen(req, **kwargs) as resp:
            return HttpResponse(
                status=int(resp.status),
                headers=dict(resp.headers.items()),
                body_bytes=resp.read(),
            )
    except HTTPError as e:
        # Error statuses are answers, not transport failures.
        return HttpResponse(
            status=int(e.code or 0),
            headers=dict(e.headers.items()) if e.headers else {},
            body_bytes=e.read() or b"",
        )
