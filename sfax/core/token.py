from __future__ import annotations

import base64
from datetime import UTC, datetime
from typing import Callable, Dict, Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .config import SfaxCredentials
from .errors import ConfigurationError

TOKEN_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# cipher method -> key size in bytes
_AES_CBC_KEY_SIZES: Dict[str, int] = {
    "aes-128-cbc": 16,
    "aes-192-cbc": 24,
    "aes-256-cbc": 32,
}
_IV_SIZE = 16

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def format_token_date(moment: datetime) -> str:
    """Format a moment as the UTC `YYYY-MM-DDTHH:MM:SSZ` stamp used by the API.

    Naive datetimes are taken to already be UTC.
    """

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).strftime(TOKEN_DATE_FORMAT)


def _fit(raw: bytes, size: int) -> bytes:
    """NUL-pad or truncate to exactly `size` bytes (OpenSSL key/IV handling)."""

    return raw[:size].ljust(size, b"\0")


class TokenGenerator:
    """Derives the short-lived `token` query parameter.

    The token is the base64 AES-CBC ciphertext (PKCS#7 padded) of
    `Context=<ctx>&Username=<user>&ApiKey=<key>&GenDT=<utc timestamp>`.
    It is time-bound, so a fresh one is built for every request.

    Security notes:
    - The plaintext embeds the API key; never log it or the token.

    """

    def __init__(self, credentials: SfaxCredentials, *, clock: Optional[Clock] = None):
        method = credentials.encryption_method.strip().lower()
        key_size = _AES_CBC_KEY_SIZES.get(method)
        if key_size is None:
            raise ConfigurationError(
                f"unsupported encryption method: {credentials.encryption_method!r}"
            )
        self._credentials = credentials
        self._key = _fit(credentials.encryption_key.encode("utf-8"), key_size)
        self._iv = _fit(credentials.iv.encode("utf-8"), _IV_SIZE)
        self._clock = clock or utc_now

    def token_date(self) -> str:
        """Current token timestamp."""

        return format_token_date(self._clock())

    def plaintext(self, token_date: Optional[str] = None) -> str:
        c = self._credentials
        return "&".join(
            [
                f"Context={c.security_context}",
                f"Username={c.username}",
                f"ApiKey={c.api_key}",
                f"GenDT={token_date or self.token_date()}",
            ]
        )

    def generate(self) -> str:
        """Build a fresh token for one request."""

        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        data = padder.update(self.plaintext().encode("utf-8")) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(self._iv)).encryptor()
        ciphertext = encryptor.update(data) + encryptor.finalize()
        return base64.b64encode(ciphertext).decode("ascii")
