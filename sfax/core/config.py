from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from .errors import ConfigurationError

DEFAULT_ENCRYPTION_METHOD = "aes-256-cbc"
DEFAULT_MAX_UPLOAD_BYTES = 25 * 1024 * 1024

# env var -> credential field
_REQUIRED_ENV: Dict[str, str] = {
    "SFAX_URI": "uri",
    "SFAX_USERNAME": "username",
    "SFAX_API_KEY": "api_key",
    "SFAX_ENCRYPTION_KEY": "encryption_key",
    "SFAX_IV": "iv",
}
_OPTIONAL_ENV: Dict[str, str] = {
    "SFAX_SECURITY_CONTEXT": "security_context",
    "SFAX_TOKEN_CLIENT": "token_client",
    "SFAX_ENCRYPTION_METHOD": "encryption_method",
}


@dataclass(frozen=True, slots=True)
class SfaxCredentials:
    """Account credentials for the Sfax API.

    Security notes:
    - `api_key`, `encryption_key` and `iv` are secrets; do not log them.
    - `security_context` and `token_client` are usually empty strings.

    """

    uri: str
    username: str
    api_key: str
    encryption_key: str
    iv: str
    security_context: str = ""
    token_client: str = ""
    encryption_method: str = DEFAULT_ENCRYPTION_METHOD

    def __post_init__(self) -> None:
        # Operation names are appended as "<uri>/<name>".
        object.__setattr__(self, "uri", self.uri.rstrip("/"))

    def __repr__(self) -> str:
        return (
            f"SfaxCredentials(uri={self.uri!r}, username={self.username!r}, "
            f"encryption_method={self.encryption_method!r})"
        )

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides: Optional[str]
    ) -> "SfaxCredentials":
        """Load credentials from SFAX_* environment variables.

        Keyword overrides that are not None win over the environment.

        Raises:
          ConfigurationError: when a required value is missing.
        """

        env = os.environ if environ is None else environ
        values: Dict[str, str] = {}
        for name, field_name in {**_REQUIRED_ENV, **_OPTIONAL_ENV}.items():
            raw = env.get(name, "")
            if raw:
                values[field_name] = raw

        for field_name, value in overrides.items():
            if value is not None:
                values[field_name] = value

        missing = [name for name, field_name in _REQUIRED_ENV.items() if not values.get(field_name)]
        if missing:
            raise ConfigurationError(f"missing Sfax credentials: {', '.join(missing)}")
        return cls(**values)


@dataclass(frozen=True, slots=True)
class TransportSettings:
    """HTTP transport settings.

    `timeout_sec=None` means the request blocks until the server answers.
    """

    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    timeout_sec: Optional[float] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TransportSettings":
        env = os.environ if environ is None else environ
        return cls(
            max_upload_bytes=_env_int(env, "SFAX_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES),
            timeout_sec=_env_float(env, "SFAX_TIMEOUT_SEC", None),
        )


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    """Read an integer environment variable, falling back to `default`."""

    raw = env.get(name, "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError:
        return int(default)


def _env_float(env: Mapping[str, str], name: str, default: Optional[float]) -> Optional[float]:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default
