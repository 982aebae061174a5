import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from clinic.services import repository as repo
from clinic.services.auth import ensure_admin

ADMIN_PASSWORD = 'Adm1nPass!'
STAFF_PASSWORD = 'St4ffPass!'


@pytest.fixture(autouse=True)
def _clear_throttles():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def admin_user(db):
    return ensure_admin('admin', ADMIN_PASSWORD)


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    r = client.post('/api/session/admin/login', {'username': 'admin', 'password': ADMIN_PASSWORD}, format='json')
    assert r.status_code == 200, r.data
    return client


@pytest.fixture
def make_staff(db):
    def _make(role, username=None, **extra):
        data = {
            'name': extra.pop('name', f'{role} user'),
            'role': role,
            'username': username or f'{role}_1',
            'password': STAFF_PASSWORD,
            **extra,
        }
        result = repo.staff_users.create(data)
        assert result.success, result.error
        return result.data
    return _make


@pytest.fixture
def staff_client(make_staff):
    """APIClient signed in as a new staff account of ``role``."""
    def _client(role, **extra):
        user = make_staff(role, **extra)
        client = APIClient()
        r = client.post('/api/session/staff/login',
                        {'role': role, 'username': user['username'], 'password': STAFF_PASSWORD},
                        format='json')
        assert r.status_code == 200, r.data
        return client
    return _client


@pytest.fixture
def patient(db):
    result = repo.patients.create({
        'name': 'John Smith', 'age': 45, 'gender': 'Male', 'phone': '+1-234-567-8901',
        'email': 'john@email.com', 'bloodGroup': 'A+',
    })
    assert result.success, result.error
    return result.data


@pytest.fixture
def doctor(db):
    result = repo.doctors.create({
        'name': 'Dr. A. John', 'specialization': 'Cardiology', 'availability': ['Mon', 'Wed'],
        'consultationFee': 800,
    })
    assert result.success, result.error
    return result.data


@pytest.fixture
def appointment(patient, doctor):
    result = repo.appointments.create({
        'patientId': patient['id'], 'patientName': patient['name'],
        'doctorId': doctor['id'], 'doctorName': doctor['name'],
        'date': '2025-11-18', 'time': '09:00', 'type': 'Consultation',
    })
    assert result.success, result.error
    return result.data


@pytest.fixture
def bill(patient):
    result = repo.bills.create({
        'patientId': patient['id'], 'patientName': patient['name'],
        'items': [{'description': 'Consultation Fee', 'quantity': 1, 'unitPrice': 200}],
    })
    assert result.success, result.error
    return result.data


@pytest.fixture
def lab_test(patient):
    result = repo.lab_tests.create({
        'patientId': patient['id'], 'patientName': patient['name'],
        'testName': 'Lipid Panel', 'testType': 'Biochemistry', 'requestedBy': 'Dr. A. John',
    })
    assert result.success, result.error
    return result.data


@pytest.fixture
def medicine(db):
    result = repo.medicines.create({
        'name': 'Paracetamol 500mg', 'category': 'Analgesic', 'quantity': 150, 'unitPrice': 0.5,
    })
    assert result.success, result.error
    return result.data
