"""
Admin bearer tokens.

Tokens carry the admin username, the issue time and an expiry 24 hours
later (``ADMIN_TOKEN_LIFETIME_HOURS``).  They are JWTs signed with the
project ``SIGNING_KEY`` so a client cannot mint or extend one by editing
the payload.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Optional

from django.conf import settings
from django.utils import timezone
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import Token


def token_lifetime() -> timedelta:
    return timedelta(hours=getattr(settings, 'ADMIN_TOKEN_LIFETIME_HOURS', 24))


class AdminToken(Token):
    token_type = 'admin'
    lifetime = timedelta(hours=24)


@dataclass(frozen=True)
class TokenClaims:
    username: str
    issued_at: datetime
    expires_at: datetime


def issue_token(username: str, *, now: Optional[datetime] = None) -> str:
    now = now or timezone.now()
    token = AdminToken()
    token['username'] = username
    token.set_iat(at_time=now)
    token.set_exp(from_time=now, lifetime=token_lifetime())
    return str(token)


def verify_token(raw: str) -> Optional[TokenClaims]:
    """Claims of a valid, unexpired token; None otherwise."""
    if not raw:
        return None
    try:
        token = AdminToken(raw)
    except TokenError:
        return None
    username = token.get('username')
    if not username:
        return None
    return TokenClaims(
        username=username,
        issued_at=datetime.fromtimestamp(token['iat'], tz=dt_timezone.utc),
        expires_at=datetime.fromtimestamp(token['exp'], tz=dt_timezone.utc),
    )
