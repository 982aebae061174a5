"""
Session and identity model.

A request is served for at most one identity, of one of three kinds:

* :class:`AdminIdentity` - holder of a signed admin token, kept in the
  session storage under ``admin_token`` / ``admin_username`` or sent as
  ``Authorization: Bearer <token>``;
* :class:`StaffIdentity` - a staff account, kept under ``staff_user``
  (JSON) / ``staff_role`` with no expiry until logout;
* :class:`PatientIdentity` - an end user authenticated by Django's own
  auth (DRF token); only its presence matters here.

:class:`SessionContext` wraps the identity and is handed to views as
``request.auth``; admin and staff identities also stand in for
``request.user``.  The storage functions work on any mutable mapping, in
practice ``request.session``.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import MutableMapping, Optional, Union

from clinic import domain
from clinic.services import tokens

ADMIN_TOKEN_KEY = 'admin_token'
ADMIN_USERNAME_KEY = 'admin_username'
STAFF_USER_KEY = 'staff_user'
STAFF_ROLE_KEY = 'staff_role'

LOGIN_ENTRY_POINT = '/login'


@dataclass(frozen=True)
class AdminIdentity:
    username: str
    token: str
    expires_at: Optional[datetime] = None
    role = domain.ROLE_ADMIN
    is_authenticated = True

    @property
    def pk(self) -> str:
        return f"admin:{self.username}"

    @property
    def display_name(self) -> str:
        return self.username


@dataclass(frozen=True)
class StaffIdentity:
    user: dict
    role: str
    is_authenticated = True

    @property
    def pk(self) -> str:
        return f"staff:{self.user.get('id') or self.username}"

    @property
    def username(self) -> str:
        return self.user.get('username', '')

    @property
    def display_name(self) -> str:
        return self.user.get('name') or self.username

    @property
    def doctor_id(self) -> Optional[str]:
        return self.user.get('doctor_id')


@dataclass(frozen=True)
class PatientIdentity:
    user_id: int
    username: str
    name: str = ''
    role = 'patient'

    @property
    def display_name(self) -> str:
        return self.name or self.username


Identity = Union[AdminIdentity, StaffIdentity, PatientIdentity]


@dataclass(frozen=True)
class SessionContext:
    identity: Optional[Identity] = None
    from_storage: bool = field(default=False, compare=False)

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def role(self) -> Optional[str]:
        return self.identity.role if self.identity else None

    @property
    def actor(self) -> str:
        """Name recorded in audit rows."""
        if self.identity is None:
            return ''
        return f"{self.role}:{self.identity.username}"

    def has_role(self, *roles: str) -> bool:
        return self.role is not None and self.role in roles

    def as_dict(self) -> dict:
        if self.identity is None:
            return {'authenticated': False, 'role': None}
        data = {
            'authenticated': True,
            'role': self.role,
            'username': self.identity.username,
            'name': self.identity.display_name,
        }
        if isinstance(self.identity, StaffIdentity):
            data['staffUser'] = self.identity.user
        if isinstance(self.identity, AdminIdentity) and self.identity.expires_at:
            data['expiresAt'] = self.identity.expires_at.isoformat()
        return data


ANONYMOUS = SessionContext()


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------
def clear_admin(storage: MutableMapping) -> None:
    storage.pop(ADMIN_TOKEN_KEY, None)
    storage.pop(ADMIN_USERNAME_KEY, None)


def clear_staff(storage: MutableMapping) -> None:
    storage.pop(STAFF_USER_KEY, None)
    storage.pop(STAFF_ROLE_KEY, None)


def clear(storage: MutableMapping) -> None:
    clear_admin(storage)
    clear_staff(storage)


def store_admin(storage: MutableMapping, token: str, username: str) -> None:
    clear_staff(storage)
    storage[ADMIN_TOKEN_KEY] = token
    storage[ADMIN_USERNAME_KEY] = username


def store_staff(storage: MutableMapping, user: dict, role: str) -> None:
    clear_admin(storage)
    storage[STAFF_USER_KEY] = json.dumps(user)
    storage[STAFF_ROLE_KEY] = role


def admin_from_token(raw: str) -> Optional[AdminIdentity]:
    claims = tokens.verify_token(raw)
    if claims is None:
        return None
    return AdminIdentity(username=claims.username, token=raw, expires_at=claims.expires_at)


def load(storage: MutableMapping) -> SessionContext:
    """Rebuild the context from storage.

    An admin token that no longer verifies is removed from storage.  A
    staff record that cannot be decoded is removed as well.
    """
    raw = storage.get(ADMIN_TOKEN_KEY)
    if raw:
        admin = admin_from_token(raw)
        if admin is not None:
            return SessionContext(admin, from_storage=True)
        clear_admin(storage)

    role = storage.get(STAFF_ROLE_KEY)
    user_json = storage.get(STAFF_USER_KEY)
    if role and user_json:
        try:
            user = json.loads(user_json)
        except (TypeError, ValueError):
            user = None
        if isinstance(user, dict) and role in domain.STAFF_ROLES:
            return SessionContext(StaffIdentity(user=user, role=role), from_storage=True)
        clear_staff(storage)
    return ANONYMOUS


def for_patient(user) -> SessionContext:
    return SessionContext(PatientIdentity(
        user_id=user.pk,
        username=user.get_username(),
        name=user.get_full_name() if hasattr(user, 'get_full_name') else '',
    ))


def context_for(request) -> SessionContext:
    """The session context the authentication layer attached to ``request``."""
    auth = getattr(request, 'auth', None)
    if isinstance(auth, SessionContext):
        return auth
    user = getattr(request, 'user', None)
    if user is not None and getattr(user, 'is_authenticated', False):
        return for_patient(user)
    return ANONYMOUS
