"""
Role based access control for the clinic panels.

Views declare the roles allowed to use them with :func:`RequireRole`.
A request without a matching identity is refused with 403 and the login
entry point in ``redirect`` so the front-end can send the user there.
"""
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import BasePermission

from clinic import domain, session


class LoginRequired(PermissionDenied):
    default_detail = 'You do not have access to this panel'
    redirect = session.LOGIN_ENTRY_POINT


class _RoleGate(BasePermission):
    roles: tuple[str, ...] = ()

    def has_permission(self, request, view) -> bool:
        context = session.context_for(request)
        if context.has_role(*self.roles):
            return True
        raise LoginRequired()


def RequireRole(*roles: str) -> type[BasePermission]:
    """Permission class admitting only sessions whose role is in ``roles``."""
    return type(f"RequireRole[{','.join(roles)}]", (_RoleGate,), {'roles': tuple(roles)})


AdminOnly = RequireRole(domain.ROLE_ADMIN)
AnyStaff = RequireRole(domain.ROLE_ADMIN, *domain.STAFF_ROLES)


class IsPatientSession(BasePermission):
    """A signed-in patient portal account."""

    def has_permission(self, request, view) -> bool:
        context = session.context_for(request)
        return isinstance(context.identity, session.PatientIdentity)
