"""
URL mappings for the clinic API.

Trailing slashes are omitted, as the front-end calls the paths without
them.
"""
from django.urls import include, path

from .views import admin_tools, functions, health, portal, session_views, workflow
from .views.entities import RESOURCE_ROLES, record_views


def _record_routes():
    routes = []
    for resource in RESOURCE_ROLES:
        collection, detail = record_views(resource)
        routes += [
            path(f'api/{resource}', collection),
            path(f'api/{resource}/<str:pk>', detail),
        ]
    return routes


urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Function endpoints
    path('functions/v1/auth', functions.auth_function),
    path('functions/v1/hospital-settings', functions.hospital_settings_function),
    path('functions/v1/mongodb', functions.datastore_function),
    # Panel sessions
    path('api/session', session_views.current_session),
    path('api/session/admin/login', session_views.admin_login),
    path('api/session/staff/login', session_views.staff_login),
    path('api/session/logout', session_views.logout),
    # Admin
    path('api/dashboard', admin_tools.dashboard),
    path('api/notifications', admin_tools.notification_list),
    path('api/notifications/mark-all-read', admin_tools.notification_mark_all_read),
    path('api/maintenance/reset-data', admin_tools.reset_data),
    path('api/settings/logo', admin_tools.upload_logo),
    # Workflows
    path('api/appointments/<str:pk>/status', workflow.appointment_status),
    path('api/appointments/<str:pk>/reschedule', workflow.appointment_reschedule),
    path('api/doctors/<str:pk>/day', workflow.doctor_day),
    path('api/doctors/<str:pk>/toggle-status', workflow.doctor_toggle_status),
    path('api/doctor/day', workflow.my_day),
    path('api/patients/<str:pk>/toggle-status', workflow.patient_toggle_status),
    path('api/bills/<str:pk>/payments', workflow.bill_payment),
    path('api/lab-tests/<str:pk>/start', workflow.lab_test_start),
    path('api/lab-tests/<str:pk>/complete', workflow.lab_test_complete),
    path('api/medicines/<str:pk>/stock', workflow.medicine_stock),
    # Patient portal
    path('api/portal/register', portal.register),
    path('api/portal/login', portal.login),
    path('api/portal/doctors', portal.doctor_list),
    path('api/portal/appointments', portal.my_appointments),
] + _record_routes()
