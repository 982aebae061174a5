"""
Authentication classes for the clinic API.

``ClinicSessionAuthentication`` resolves the admin or staff identity of a
request, either from an ``Authorization: Bearer <admin token>`` header or
from the keys kept in the Django session.  It returns the identity as
``request.user`` and the :class:`~clinic.session.SessionContext` as
``request.auth``.  Patients use DRF tokens (``Authorization: Token ...``)
through :class:`PatientTokenAuthentication`.
"""
from __future__ import annotations

from rest_framework import authentication, exceptions

from clinic import session


class ClinicSessionAuthentication(authentication.SessionAuthentication):
    keyword = 'Bearer'

    def authenticate(self, request):
        header = authentication.get_authorization_header(request).split()
        if header and header[0].lower() == self.keyword.lower().encode():
            if len(header) != 2:
                raise exceptions.AuthenticationFailed('Invalid token header.')
            admin = session.admin_from_token(header[1].decode(errors='replace'))
            if admin is None:
                raise exceptions.AuthenticationFailed('Invalid or expired token')
            return admin, session.SessionContext(admin)

        storage = getattr(request._request, 'session', None)
        if storage is None:
            return None
        context = session.load(storage)
        if not context.is_authenticated:
            return None
        self.enforce_csrf(request)
        return context.identity, context

    def authenticate_header(self, request):
        return self.keyword


class PatientTokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication for patient portal accounts."""

    keyword = 'Token'
