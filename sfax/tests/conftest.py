from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, List, Optional, Tuple

import pytest

from sfax.client.api import SfaxClient
from sfax.client.http import HttpResponse
from sfax.core.config import SfaxCredentials

TOKEN_DATE = datetime(2016, 1, 1, 12, 0, 0, tzinfo=UTC)

# Ciphertext for the credentials below at TOKEN_DATE.
EXPECTED_TOKEN = "".join(
    [
        "NbbeCkf3RIdSfOgRvuFUxr1ge8f23EYdj644ri",
        "LVpPbX9ILo6fCU0XrzmUdUonLBmAe3DLk5ICsI",
        "3B8jsRt8xG3LRl+uUp9ZieGvyBXUjOz/DAYmSl",
        "SamEUsSVo+zjO72nXBgvsMnzpxpKNY2Cxjrg==",
    ]
)


@dataclass
class RecordedRequest:
    method: str
    url: str
    file_field: Optional[Tuple[str, str]] = None
    file_path: Optional[str] = None


@dataclass
class FakeHttpClient:
    """Records requests and replays queued responses."""

    responses: List[HttpResponse] = field(default_factory=list)
    requests: List[RecordedRequest] = field(default_factory=list)

    def queue(self, status: int = 200, body: Any = b"") -> None:
        if not isinstance(body, bytes):
            body = json.dumps(body).encode("utf-8")
        self.responses.append(HttpResponse(status=status, headers={}, body_bytes=body))

    def request(
        self,
        method: str,
        url: str,
        *,
        file_field: Optional[Tuple[str, str]] = None,
        file_path: Optional[str] = None,
    ) -> HttpResponse:
        self.requests.append(RecordedRequest(method, url, file_field, file_path))
        return self.responses.pop(0)


@pytest.fixture
def credentials() -> SfaxCredentials:
    return SfaxCredentials(
        uri="https://www.example.com/api",
        username="sfaxapiuser",
        api_key="7333CD865265DCD4005D09B4E4E85CD7",
        encryption_key="NO^MbtIFtW*UIp4M(dpi+G/AB4hQiAmY",
        iv="3Eug*ZQbkOqIJzu2",
    )


@pytest.fixture
def expected_token() -> str:
    return EXPECTED_TOKEN


@pytest.fixture
def fixed_clock():
    return lambda: TOKEN_DATE


@pytest.fixture
def fake_http() -> FakeHttpClient:
    return FakeHttpClient()


@pytest.fixture
def client(credentials, fake_http, fixed_clock) -> SfaxClient:
    return SfaxClient(credentials, http_client=fake_http, clock=fixed_clock)
