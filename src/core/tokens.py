"""Token serialization.

Tokens are stored as a JSON object using the OAuth2 field names
(access_token, token_type, refresh_token, expiry). An absent token is an
empty string, never NULL.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Optional

from core.errors import TokenDecodeError
from core.models import Token

# Go's zero time, written by clients that serialize an unset expiry.
_ZERO_EXPIRY = "0001-01-01T00:00:00Z"
_STRING_FIELDS = ("access_token", "token_type", "refresh_token")


def encode_token(token: Optional[Token]) -> str:
    """Serialize a token for the users.token column."""

    if token is None:
        return ""

    payload: dict[str, str] = {"access_token": token.access_token}
    if token.token_type:
        payload["token_type"] = token.token_type
    if token.refresh_token:
        payload["refresh_token"] = token.refresh_token
    if token.expiry is not None:
        expiry = token.expiry
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        payload["expiry"] = expiry.isoformat().replace("+00:00", "Z")
    return json.dumps(payload)


def _parse_expiry(raw: object) -> Optional[datetime]:
    if raw is None or raw == "" or raw == _ZERO_EXPIRY:
        return None
    if not isinstance(raw, str):
        raise TokenDecodeError(f"token expiry must be a string, got {type(raw).__name__}")
    try:
        return datetime.fromisoformat(raw)
    except ValueError as exc:
        raise TokenDecodeError(f"invalid token expiry: {raw!r}") from exc


def decode_token(data: str) -> Token:
    """Parse a non-empty token blob.

    Callers handle the empty blob themselves: it means "no token", while
    anything else that fails to parse is a TokenDecodeError.
    """

    try:
        payload = json.loads(data)
    except json.JSONDecodeError as exc:
        raise TokenDecodeError(f"malformed token data: {exc}") from exc

    if not isinstance(payload, dict):
        raise TokenDecodeError("token data is not a JSON object")

    fields: dict[str, str] = {}
    for name in _STRING_FIELDS:
        value = payload.get(name, "")
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise TokenDecodeError(f"token field {name} must be a string")
        fields[name] = value

    return Token(
        access_token=fields["access_token"],
        token_type=fields["token_type"],
        refresh_token=fields["refresh_token"],
        expiry=_parse_expiry(payload.get("expiry")),
    )
