from __future__ import annotations

import re
from datetime import UTC, date, datetime, time
from typing import Any, List, Mapping, Optional, Union
from urllib.parse import quote_plus

from .token import format_token_date

DateLike = Union[str, date, datetime]

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def render_value(value: Any) -> str:
    """Render a scalar parameter value as query-string text."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)


def to_int(value: Any) -> int:
    """Lenient integer conversion for numeric query parameters.

    None, empty or non-numeric text gives 0; text with a leading integer
    (`"10 items"`) gives that integer; floats are truncated.
    """

    if value is None or isinstance(value, bool):
        return int(bool(value))
    if isinstance(value, (int, float)):
        return int(value)
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def _encode(value: Any) -> str:
    # Form encoding: space -> "+", reserved characters percent-encoded.
    return quote_plus(render_value(value), safe="")


def api_param_string(params: Optional[Mapping[str, Any]] = None, delimiter: str = ";") -> str:
    """Flatten a mapping into the vendor `k1=v1;k2=v2` list encoding.

    Used for `BarcodeOption` and `OptionalParams`. Order follows the mapping.
    """

    return delimiter.join(f"{key}={render_value(val)}" for key, val in (params or {}).items())


def build_request_uri(
    base_uri: str,
    operation: str,
    *,
    token: str,
    api_key: str,
    params: Optional[Mapping[str, Any]] = None,
) -> str:
    """Build `<base>/<operation>?token=..&ApiKey=..&<params...>`.

    `token` and `ApiKey` always come first; the remaining parameters keep
    their insertion order. Every value is URL-encoded.
    """

    args: List[str] = [
        "token=" + _encode(token),
        "ApiKey=" + _encode(api_key),
    ]
    for key, val in (params or {}).items():
        args.append(f"{key}=" + _encode(val))
    return f"{base_uri.rstrip('/')}/{operation}?" + "&".join(args)


def parse_api_date(value: DateLike) -> datetime:
    """Parse a date argument into an aware UTC datetime.

    Accepts datetime/date objects or ISO-8601 strings (a trailing `Z` is
    fine). Naive values are taken as UTC.

    Raises:
      ValueError: when a string cannot be parsed.
    """

    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime.combine(value, time.min)
    else:
        text = str(value).strip()
        if not text:
            raise ValueError("empty date value")
        moment = datetime.fromisoformat(text)

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def format_api_date(value: DateLike) -> str:
    """Format a date argument as `YYYY-MM-DDTHH:MM:SSZ` in UTC."""

    return format_token_date(parse_api_date(value))
