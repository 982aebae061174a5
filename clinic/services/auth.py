"""
Admin and staff sign-in.

Both account kinds store Django password hashes and are checked with
``check_password``.  Failures raise :class:`AuthorizationFailed` with the
message shown to the user; callers decide the HTTP status.
"""
from __future__ import annotations

import logging
from typing import MutableMapping

from django.contrib.auth.hashers import check_password, make_password

from clinic import domain, session
from clinic.exceptions import AuthorizationFailed
from clinic.models import AdminUser, StaffUser
from clinic.services import tokens
from clinic.services.audit import log_action
from clinic.services.repository import staff_users

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = 'Invalid credentials'
STAFF_NOT_ACTIVE = 'Invalid credentials or account not active'
INVALID_PASSWORD = 'Invalid password'


def admin_login(username: str, password: str) -> dict:
    """Check admin credentials and issue a token.

    Returns ``{'token', 'username'}``.
    """
    admin = AdminUser.objects.filter(username=username).first()
    if admin is None or not check_password(password, admin.password_hash):
        logger.info("admin login rejected for %s", username)
        log_action(actor=username, action='admin_login', detail={'result': 'fail'})
        raise AuthorizationFailed(INVALID_CREDENTIALS)
    token = tokens.issue_token(admin.username)
    log_action(actor=admin.username, action='admin_login', object_type='admin_user',
               object_id=admin.id, detail={'result': 'ok'})
    return {'token': token, 'username': admin.username}


def ensure_admin(username: str, password: str) -> AdminUser:
    admin, created = AdminUser.objects.get_or_create(
        username=username, defaults={'password_hash': make_password(password)},
    )
    if not created:
        admin.password_hash = make_password(password)
        admin.save(update_fields=['password_hash'])
    return admin


def staff_login(storage: MutableMapping, role: str, username: str, password: str) -> session.SessionContext:
    """Sign a staff member in and remember them in ``storage``.

    Nothing is written to ``storage`` unless the login succeeds.
    """
    if role not in domain.STAFF_ROLES:
        raise AuthorizationFailed(f"Unknown staff role: {role}")
    staff = StaffUser.objects.filter(username=username, role=role, is_active=True).first()
    if staff is None:
        log_action(actor=username, action='staff_login', detail={'result': 'fail', 'role': role})
        raise AuthorizationFailed(STAFF_NOT_ACTIVE)
    if not check_password(password, staff.password_hash):
        log_action(actor=username, action='staff_login', detail={'result': 'bad_password', 'role': role})
        raise AuthorizationFailed(INVALID_PASSWORD)

    record = staff_users.serialize(staff)
    session.store_staff(storage, record, role)
    log_action(actor=username, action='staff_login', object_type='staff_user',
               object_id=staff.id, detail={'result': 'ok', 'role': role})
    return session.SessionContext(session.StaffIdentity(user=record, role=role))


def admin_session_login(storage: MutableMapping, username: str, password: str) -> session.SessionContext:
    issued = admin_login(username, password)
    session.store_admin(storage, issued['token'], issued['username'])
    return session.SessionContext(session.admin_from_token(issued['token']))


def logout(storage: MutableMapping) -> None:
    session.clear(storage)
