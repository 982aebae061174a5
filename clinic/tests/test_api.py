"""
Integration tests for the HTTP API: function endpoints, panel sessions,
role gating, record endpoints, workflows and the patient portal.
"""
from datetime import timedelta

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone
from rest_framework.test import APIClient

from clinic.models import Bill, HospitalSettings, Patient
from clinic.services import hospital_settings, tokens
from clinic.services.repository import Result

from .conftest import ADMIN_PASSWORD

pytestmark = pytest.mark.django_db


# -- /functions/v1/auth ----------------------------------------------------------
def test_auth_function_login_and_verify(admin_user):
    client = APIClient()
    r = client.post('/functions/v1/auth', {'action': 'login', 'username': 'admin', 'password': ADMIN_PASSWORD},
                    format='json')
    assert r.status_code == 200
    assert r.data['success'] is True and r.data['username'] == 'admin'

    v = client.post('/functions/v1/auth', {'action': 'verify', 'token': r.data['token']}, format='json')
    assert v.data == {'success': True, 'username': 'admin'}


def test_auth_function_errors(admin_user):
    client = APIClient()
    missing = client.post('/functions/v1/auth', {'action': 'login', 'username': 'admin'}, format='json')
    assert missing.status_code == 400
    assert missing.data == {'success': False, 'error': 'Username and password required'}

    wrong = client.post('/functions/v1/auth', {'action': 'login', 'username': 'admin', 'password': 'x'},
                        format='json')
    assert wrong.status_code == 401
    assert wrong.data['error'] == 'Invalid credentials'

    assert client.post('/functions/v1/auth', {'action': 'verify'}, format='json').status_code == 400
    assert client.post('/functions/v1/auth', {'action': 'dance'}, format='json').status_code == 400


def test_auth_function_verify_expired_and_logout():
    client = APIClient()
    old = tokens.issue_token('admin', now=timezone.now() - timedelta(hours=25))
    r = client.post('/functions/v1/auth', {'action': 'verify', 'token': old}, format='json')
    assert r.status_code == 200
    assert r.data['success'] is False
    assert client.post('/functions/v1/auth', {'action': 'logout'}, format='json').data == {'success': True}


# -- /functions/v1/hospital-settings ---------------------------------------------
def test_settings_get_creates_default_row():
    client = APIClient()
    assert not HospitalSettings.objects.exists()
    r = client.post('/functions/v1/hospital-settings', {'action': 'get'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['hospital_name'] == 'Hospital Management System'
    client.post('/functions/v1/hospital-settings', {'action': 'get'}, format='json')
    assert HospitalSettings.objects.count() == 1


def test_settings_update(admin_client):
    missing = admin_client.post('/functions/v1/hospital-settings',
                                {'action': 'update', 'hospitalName': 'City Hospital'}, format='json')
    assert missing.status_code == 404
    assert missing.data == {'success': False, 'error': 'Settings not found'}

    admin_client.post('/functions/v1/hospital-settings', {'action': 'get'}, format='json')
    r = admin_client.post('/functions/v1/hospital-settings',
                          {'action': 'update', 'hospitalName': '', 'logoUrl': '/media/logo.png'}, format='json')
    assert r.data['data']['hospital_name'] == 'Hospital Management System'
    assert r.data['data']['logo_url'] == '/media/logo.png'
    r = admin_client.post('/functions/v1/hospital-settings',
                          {'action': 'update', 'hospitalName': 'City Hospital'}, format='json')
    assert r.data['data']['hospital_name'] == 'City Hospital'
    assert r.data['data']['logo_url'] == '/media/logo.png'


def test_settings_update_needs_admin():
    r = APIClient().post('/functions/v1/hospital-settings', {'action': 'update', 'hospitalName': 'X'},
                         format='json')
    assert r.status_code == 403
    assert r.data['redirect'] == '/login'


def test_logo_upload(admin_client, settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path
    logo = SimpleUploadedFile('logo.png', b'\x89PNG\r\n\x1a\nfake', content_type='image/png')
    r = admin_client.post('/api/settings/logo', {'file': logo}, format='multipart')
    assert r.status_code == 200
    assert r.data['data']['logo_url'].startswith('/media/hospital-logos/logo-')

    text = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')
    assert admin_client.post('/api/settings/logo', {'file': text}, format='multipart').status_code == 400


def test_logo_is_removed_when_settings_cannot_be_saved(admin_client, settings, tmp_path, monkeypatch):
    settings.MEDIA_ROOT = tmp_path
    monkeypatch.setattr(hospital_settings, 'update_settings', lambda **kwargs: Result.fail('database unavailable'))
    logo = SimpleUploadedFile('logo.png', b'\x89PNG\r\n\x1a\nfake', content_type='image/png')
    r = admin_client.post('/api/settings/logo', {'file': logo}, format='multipart')
    assert r.status_code == 500
    assert not list(tmp_path.rglob('logo-*'))


# -- /functions/v1/mongodb ------------------------------------------------------
def test_datastore_function_acknowledges_without_persisting():
    client = APIClient()
    r = client.post('/functions/v1/mongodb',
                    {'action': 'insertOne', 'collection': 'patients', 'data': {'name': 'Ghost'}}, format='json')
    assert r.status_code == 200
    assert r.data['success'] is True
    assert r.data['action'] == 'insertOne' and r.data['collection'] == 'patients'
    assert not Patient.objects.exists()

    assert client.post('/functions/v1/mongodb', {'action': 'drop', 'collection': 'x'},
                       format='json').status_code == 400
    assert client.post('/functions/v1/mongodb', {'action': 'find'}, format='json').status_code == 400


# -- sessions and gating ---------------------------------------------------------
def test_session_endpoint_reports_identity(admin_client):
    r = admin_client.get('/api/session')
    assert r.data['data']['role'] == 'admin'
    admin_client.post('/api/session/logout')
    assert admin_client.get('/api/session').data['data'] == {'authenticated': False, 'role': None}


def test_bearer_token_authenticates_admin(admin_user):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {tokens.issue_token("admin")}')
    assert client.get('/api/patients').status_code == 200
    client.credentials(HTTP_AUTHORIZATION='Bearer garbage')
    assert client.get('/api/patients').status_code == 401


def test_staff_login_failure_is_401(make_staff):
    make_staff('lab_staff', username='lab1', is_active=False)
    r = APIClient().post('/api/session/staff/login',
                         {'role': 'lab_staff', 'username': 'lab1', 'password': 'St4ffPass!'}, format='json')
    assert r.status_code == 401
    assert r.data['error'] == 'Invalid credentials or account not active'


def test_anonymous_and_wrong_role_are_sent_to_login(staff_client):
    anon = APIClient().get('/api/bills')
    assert anon.status_code == 403
    assert anon.data['redirect'] == '/login'

    lab = staff_client('lab_staff')
    assert lab.get('/api/lab-tests').status_code == 200
    denied = lab.get('/api/bills')
    assert denied.status_code == 403
    assert denied.data == {'success': False, 'error': 'You do not have access to this panel', 'redirect': '/login'}


# -- records -----------------------------------------------------------------------
def test_patient_crud(admin_client):
    r = admin_client.post('/api/patients', {
        'name': 'Sarah Johnson', 'age': 32, 'gender': 'Female', 'phone': '+1-234-567-8902',
    }, format='json')
    assert r.status_code == 201
    pk = r.data['data']['id']
    assert admin_client.get(f'/api/patients/{pk}').data['data']['name'] == 'Sarah Johnson'
    assert admin_client.get('/api/patients?search=sarah').data['data'][0]['id'] == pk

    r = admin_client.patch(f'/api/patients/{pk}', {'address': '456 Oak Ave'}, format='json')
    assert r.data['data']['address'] == '456 Oak Ave'

    assert admin_client.delete(f'/api/patients/{pk}').data['data']['id'] == pk
    assert admin_client.get(f'/api/patients/{pk}').status_code == 404
    assert admin_client.delete(f'/api/patients/{pk}').data == {'success': True, 'data': None}


def test_invalid_input_is_rejected_before_saving(admin_client):
    r = admin_client.post('/api/patients', {'name': 'X', 'age': -3, 'gender': 'Robot'}, format='json')
    assert r.status_code == 400
    assert r.data['success'] is False
    assert not Patient.objects.exists()


def test_billing_desk_creates_bill_and_takes_payment(staff_client, patient):
    desk = staff_client('billing_staff')
    r = desk.post('/api/bills', {
        'patientId': patient['id'], 'patientName': patient['name'],
        'items': [{'description': 'Consultation Fee', 'quantity': 1, 'unitPrice': 200}],
    }, format='json')
    assert r.status_code == 201
    bill = r.data['data']
    assert (bill['totalAmount'], bill['status']) == (200.0, 'Pending')

    pay = desk.post(f"/api/bills/{bill['id']}/payments", {'amount': 50}, format='json')
    assert pay.data['data']['status'] == 'Partial'
    over = desk.post(f"/api/bills/{bill['id']}/payments", {'amount': 500}, format='json')
    assert over.status_code == 400
    assert Bill.objects.get(pk=bill['id']).paid_amount == 50


def test_appointment_workflow_endpoints(staff_client, appointment):
    desk = staff_client('appointment_staff')
    moved = desk.post(f"/api/appointments/{appointment['id']}/reschedule",
                      {'date': '2025-12-02', 'time': '11:15'}, format='json')
    assert moved.data['data']['time'] == '11:15'
    done = desk.post(f"/api/appointments/{appointment['id']}/status", {'status': 'Completed'}, format='json')
    assert done.data['data']['status'] == 'Completed'
    again = desk.post(f"/api/appointments/{appointment['id']}/status", {'status': 'Cancelled'}, format='json')
    assert again.status_code == 400
    missing = desk.post('/api/appointments/00000000-0000-0000-0000-000000000000/status',
                        {'status': 'Completed'}, format='json')
    assert missing.status_code == 404


def test_doctor_day_of_malformed_id_is_not_found(admin_client):
    assert admin_client.get('/api/doctors/not-a-uuid/day').status_code == 404


def test_bill_edit_cannot_overpay(admin_client, bill):
    r = admin_client.patch(f"/api/bills/{bill['id']}", {'paidAmount': '10000'}, format='json')
    assert r.status_code == 400
    assert Bill.objects.get(pk=bill['id']).paid_amount == 0


def test_lab_test_edit_to_completed_dates_the_report(staff_client, lab_test):
    lab = staff_client('lab_staff')
    r = lab.patch(f"/api/lab-tests/{lab_test['id']}", {'status': 'Completed', 'result': 'Normal'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['reportDate'] == timezone.localdate().isoformat()


def test_doctor_sees_own_schedule(staff_client, appointment, doctor):
    other = APIClient()
    doc = staff_client('doctor', doctor_id=doctor['id'])
    r = doc.get('/api/doctor/day?date=2025-11-18')
    assert r.status_code == 200
    assert [a['id'] for a in r.data['data']['appointments']] == [appointment['id']]
    assert [a['id'] for a in doc.get('/api/appointments').data['data']] == [appointment['id']]
    assert other.get('/api/doctor/day').status_code == 403


def test_lab_and_stock_endpoints(staff_client, admin_client, lab_test, medicine):
    lab = staff_client('lab_staff')
    assert lab.post(f"/api/lab-tests/{lab_test['id']}/start").data['data']['status'] == 'In-Progress'
    done = lab.post(f"/api/lab-tests/{lab_test['id']}/complete", {'result': 'Normal'}, format='json')
    assert done.data['data']['status'] == 'Completed'
    assert lab.post(f"/api/medicines/{medicine['id']}/stock", {'quantity': 5}, format='json').status_code == 403

    r = admin_client.post(f"/api/medicines/{medicine['id']}/stock", {'delta': -100}, format='json')
    assert r.data['data']['status'] == 'Low-Stock'
    both = admin_client.post(f"/api/medicines/{medicine['id']}/stock", {'delta': 1, 'quantity': 1}, format='json')
    assert both.status_code == 400


def test_dashboard_notifications_and_reset(admin_client, appointment, bill):
    stats = admin_client.get('/api/dashboard').data['data']
    assert stats['totalPatients'] == 1 and stats['pendingBills'] == 1

    feed = admin_client.get('/api/notifications').data['data']
    assert feed['unread'] == 1
    assert admin_client.post('/api/notifications/mark-all-read').data['data'] == {'updated': 1}
    assert admin_client.get('/api/notifications').data['data']['unread'] == 0

    reset = admin_client.post('/api/maintenance/reset-data')
    assert reset.data['data'] == {'appointments': 1, 'bills': 1, 'patients': 1}


def test_healthz():
    r = APIClient().get('/healthz')
    assert r.status_code == 200
    assert r.json() == {'ok': True, 'db': True}


# -- patient portal ----------------------------------------------------------------
def test_portal_register_book_and_list(doctor):
    client = APIClient()
    r = client.post('/api/portal/register', {
        'username': 'jane', 'password': 'secret123', 'name': 'Jane Doe', 'email': 'jane@example.com',
    }, format='json')
    assert r.status_code == 201
    client.credentials(HTTP_AUTHORIZATION=f"Token {r.data['token']}")
    user_id = r.data['user']['id']

    doctors = client.get('/api/portal/doctors').data['data']
    assert [d['id'] for d in doctors] == [doctor['id']]

    booked = client.post('/api/portal/appointments', {
        'doctorId': doctor['id'], 'date': '2025-11-21', 'time': '10:00', 'type': 'Routine',
    }, format='json')
    assert booked.status_code == 201
    assert booked.data['data']['patientId'] == user_id
    assert booked.data['data']['doctorName'] == 'Dr. A. John'
    assert booked.data['data']['patientName'] == 'Jane Doe'

    mine = client.get('/api/portal/appointments').data['data']
    assert [a['id'] for a in mine] == [booked.data['data']['id']]

    assert client.get('/api/patients').status_code == 403


def test_portal_login():
    client = APIClient()
    client.post('/api/portal/register', {'username': 'jane', 'password': 'secret123', 'name': 'Jane'},
                format='json')
    ok = APIClient().post('/api/portal/login', {'username': 'jane', 'password': 'secret123'}, format='json')
    assert ok.status_code == 200 and ok.data['token']
    bad = APIClient().post('/api/portal/login', {'username': 'jane', 'password': 'nope'}, format='json')
    assert bad.status_code == 401
    assert APIClient().get('/api/portal/appointments').status_code == 401
