"""
Generic record endpoints.

``/api/<resource>`` lists (``?search=``) and creates records and
``/api/<resource>/<id>`` reads, updates and deletes one.  The views are
built per resource by :func:`record_views` with the roles allowed to use
that resource.  Updating or deleting a record that does not exist
succeeds with ``data: null``.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes

from clinic import domain, session
from clinic.permissions import RequireRole
from clinic.serializers.records import RECORD_SERIALIZERS
from clinic.serializers.workflow import SearchQuerySerializer
from clinic.services.repository import REGISTRY
from clinic.views.common import respond

ALL_STAFF = (domain.ROLE_ADMIN, *domain.STAFF_ROLES)

RESOURCE_ROLES = {
    'patients': ALL_STAFF,
    'doctors': (domain.ROLE_ADMIN, domain.ROLE_APPOINTMENTS, domain.ROLE_DOCTOR),
    'appointments': (domain.ROLE_ADMIN, domain.ROLE_APPOINTMENTS, domain.ROLE_DOCTOR),
    'bills': (domain.ROLE_ADMIN, domain.ROLE_BILLING),
    'lab-tests': (domain.ROLE_ADMIN, domain.ROLE_LAB, domain.ROLE_DOCTOR),
    'medicines': (domain.ROLE_ADMIN,),
    'staff-users': (domain.ROLE_ADMIN,),
    'consultations': (domain.ROLE_ADMIN, domain.ROLE_DOCTOR),
}

# Doctor accounts linked to a doctor record only see that doctor's rows.
DOCTOR_SCOPED = {'appointments', 'consultations'}


def _scope(resource, request) -> dict:
    context = session.context_for(request)
    if resource in DOCTOR_SCOPED and context.role == domain.ROLE_DOCTOR:
        doctor_id = getattr(context.identity, 'doctor_id', None)
        if doctor_id:
            return {'doctor_id': doctor_id}
    return {}


def record_views(resource: str):
    """(collection view, detail view) for one resource."""
    repo = REGISTRY[resource]
    serializer_class = RECORD_SERIALIZERS[resource]
    gate = RequireRole(*RESOURCE_ROLES[resource])

    @api_view(['GET', 'POST'])
    @permission_classes([gate])
    def collection(request):
        if request.method == 'GET':
            q = SearchQuerySerializer(data=request.query_params)
            q.is_valid(raise_exception=True)
            return respond(repo.get_all(q.validated_data.get('search') or None, **_scope(resource, request)))
        s = serializer_class(data=request.data)
        s.is_valid(raise_exception=True)
        return respond(repo.create(s.validated_data), ok_status=status.HTTP_201_CREATED)

    @api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
    @permission_classes([gate])
    def detail(request, pk):
        if request.method == 'GET':
            return respond(repo.get_by_id(pk), not_found='Not found')
        if request.method == 'DELETE':
            return respond(repo.delete(pk))
        s = serializer_class(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        return respond(repo.update(pk, s.validated_data))

    return collection, detail
