from __future__ import annotations

import base64
import re
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from sfax.core.errors import ConfigurationError
from sfax.core.token import TokenGenerator, format_token_date


def test_token_matches_known_ciphertext(credentials, fixed_clock, expected_token):
    gen = TokenGenerator(credentials, clock=fixed_clock)

    assert gen.generate() == expected_token


def test_token_plaintext_layout(credentials, fixed_clock):
    gen = TokenGenerator(replace(credentials, security_context="ctx"), clock=fixed_clock)

    assert gen.plaintext() == (
        "Context=ctx&Username=sfaxapiuser"
        "&ApiKey=7333CD865265DCD4005D09B4E4E85CD7&GenDT=2016-01-01T12:00:00Z"
    )


def test_token_recomputed_from_clock_each_call(credentials):
    moments = iter(
        [
            datetime(2016, 1, 1, 12, 0, 0, tzinfo=timezone.utc),
            datetime(2016, 1, 1, 12, 0, 1, tzinfo=timezone.utc),
        ]
    )
    gen = TokenGenerator(credentials, clock=lambda: next(moments))

    assert gen.generate() != gen.generate()


def test_token_date_default_clock_format(credentials):
    gen = TokenGenerator(credentials)

    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z", gen.token_date())


def test_format_token_date_converts_to_utc():
    plus_two = timezone(timedelta(hours=2))

    assert format_token_date(datetime(2016, 1, 1, 14, 0, 0, tzinfo=plus_two)) == "2016-01-01T12:00:00Z"
    assert format_token_date(datetime(2016, 1, 1, 12, 0, 0)) == "2016-01-01T12:00:00Z"


def test_token_is_block_aligned_base64(credentials, fixed_clock):
    raw = base64.b64decode(TokenGenerator(credentials, clock=fixed_clock).generate())

    assert len(raw) % 16 == 0


def test_short_key_is_nul_padded(credentials, fixed_clock):
    short = replace(credentials, encryption_key="abc")
    padded = replace(credentials, encryption_key="abc" + "\0" * 29)

    assert (
        TokenGenerator(short, clock=fixed_clock).generate()
        == TokenGenerator(padded, clock=fixed_clock).generate()
    )


def test_aes_128_method_supported(credentials, fixed_clock):
    gen = TokenGenerator(replace(credentials, encryption_method="AES-128-CBC"), clock=fixed_clock)

    assert gen.generate() != TokenGenerator(credentials, clock=fixed_clock).generate()


def test_unsupported_method_rejected(credentials):
    with pytest.raises(ConfigurationError):
        TokenGenerator(replace(credentials, encryption_method="des-ede3-cbc"))
