from __future__ import annotations

import json
from typing import Any, Optional, Protocol, Union

from .errors import InvalidResponseError

HTTP_OK = 200


class ResponseLike(Protocol):
    status: int
    body_bytes: bytes


def _decode_json(body: bytes) -> Optional[Any]:
    """Decode a JSON body, returning None when it is not usable JSON."""

    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        # JSONDecodeError and UnicodeDecodeError are both ValueError.
        return None


def get_json_response(response: ResponseLike) -> Any:
    """Return the decoded JSON body of a 200 response.

    Raises:
      InvalidResponseError: non-200 status, undecodable body or JSON `null`.
    """

    if response.status == HTTP_OK:
        decoded = _decode_json(response.body_bytes)
        if decoded is not None:
            return decoded
    raise InvalidResponseError(status=response.status)


def get_download_response(response: ResponseLike) -> Union[Any, bytes]:
    """Return a document download result.

    A 200 body that decodes to JSON (the API reports errors this way) is
    returned decoded; any other 200 body is the document itself and is
    returned as raw bytes.

    Raises:
      InvalidResponseError: on any non-200 status.
    """

    if response.status != HTTP_OK:
        raise InvalidResponseError(status=response.status)

    decoded = _decode_json(response.body_bytes)
    if decoded is not None:
        return decoded
    return response.body_bytes
