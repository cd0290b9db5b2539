from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from core.errors import TokenDecodeError
from core.models import Token
from core.tokens import decode_token, encode_token


def test_absent_token_encodes_as_empty_string() -> None:
    assert encode_token(None) == ""


def test_empty_optional_fields_are_omitted() -> None:
    payload = json.loads(encode_token(Token(access_token="abc")))
    assert payload == {"access_token": "abc"}


def test_token_roundtrip_with_expiry() -> None:
    token = Token(
        access_token="abc",
        token_type="Bearer",
        expiry=datetime(2030, 1, 1, 12, 30, tzinfo=timezone.utc),
    )
    data = encode_token(token)
    assert json.loads(data)["expiry"] == "2030-01-01T12:30:00Z"
    assert decode_token(data) == token


def test_non_utc_expiry_keeps_the_same_instant() -> None:
    offset = timezone(timedelta(hours=2))
    token = Token(access_token="abc", expiry=datetime(2030, 1, 1, 14, 0, tzinfo=offset))
    decoded = decode_token(encode_token(token))
    assert decoded.expiry == datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_zero_expiry_decodes_as_none() -> None:
    data = '{"access_token": "abc", "expiry": "0001-01-01T00:00:00Z"}'
    assert decode_token(data).expiry is None


def test_nanosecond_expiry_is_accepted() -> None:
    data = '{"access_token": "abc", "expiry": "2030-01-01T00:00:00.123456789Z"}'
    expiry = decode_token(data).expiry
    assert expiry is not None
    assert expiry.microsecond == 123456


@pytest.mark.parametrize(
    "data",
    [
        "{not json",
        "[1, 2]",
        '"just a string"',
        '{"access_token": 5}',
        '{"access_token": "abc", "expiry": "tomorrow"}',
        '{"access_token": "abc", "expiry": 12}',
    ],
)
def test_malformed_token_raises_decode_error(data: str) -> None:
    with pytest.raises(TokenDecodeError):
        decode_token(data)
