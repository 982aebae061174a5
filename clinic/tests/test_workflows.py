import datetime

import pytest
from django.db import DatabaseError
from django.utils import timezone

from clinic.models import Appointment, AuditEvent, Bill, Medicine, Notification, Patient
from clinic.services import (
    appointments,
    billing,
    dashboard,
    lab,
    maintenance,
    pharmacy,
    records,
)
from clinic.services import repository as repo
from clinic.services.repository import KIND_VALIDATION

pytestmark = pytest.mark.django_db


# -- billing -------------------------------------------------------------------
def test_full_payment_marks_bill_paid(bill):
    result = billing.record_payment(bill['id'], 200, actor='billing_staff:b1')
    assert result.success
    assert result.data['paidAmount'] == 200.0
    assert result.data['status'] == 'Paid'
    assert Bill.objects.get(pk=bill['id']).status == 'Paid'
    assert AuditEvent.objects.filter(action='record_payment', object_id=bill['id']).exists()


def test_partial_payment_then_rest(bill):
    first = billing.record_payment(bill['id'], 50)
    assert first.data['status'] == 'Partial'
    second = billing.record_payment(bill['id'], 150)
    assert second.data['status'] == 'Paid'


def test_payment_notification_uses_rupees(patient):
    big = billing.create_bill({
        'patientName': patient['name'],
        'items': [{'description': 'Surgery', 'quantity': 1, 'unitPrice': 250000}],
    }).data
    billing.record_payment(big['id'], 150000)
    note = Notification.objects.get(type='payment', related_id=big['id'])
    assert note.message == 'Payment of ₹1,50,000 received for John Smith'


@pytest.mark.parametrize('amount', [0, -5, 'abc', 201])
def test_invalid_payments_are_rejected(bill, amount):
    result = billing.record_payment(bill['id'], amount)
    assert not result.success
    assert result.kind == KIND_VALIDATION
    assert Bill.objects.get(pk=bill['id']).paid_amount == 0


def test_payment_on_missing_bill():
    result = billing.record_payment('00000000-0000-0000-0000-000000000000', 10)
    assert result.success and result.data is None


# -- appointments --------------------------------------------------------------
def test_complete_appointment_notifies(appointment):
    result = appointments.set_status(appointment['id'], 'Completed', actor_name='Dr. A. John')
    assert result.data['status'] == 'Completed'
    messages = list(Notification.objects.filter(related_id=appointment['id']).values_list('message', flat=True))
    assert 'Appointment for John Smith completed by Dr. A. John' in messages


def test_terminal_appointments_cannot_change(appointment):
    appointments.set_status(appointment['id'], 'Cancelled')
    again = appointments.set_status(appointment['id'], 'Completed')
    assert not again.success
    assert again.kind == KIND_VALIDATION
    assert Appointment.objects.get(pk=appointment['id']).status == 'Cancelled'


def test_reschedule_keeps_identity_and_status(appointment):
    result = appointments.reschedule(appointment['id'], datetime.date(2025, 12, 1), datetime.time(16, 0))
    assert result.data['id'] == appointment['id']
    assert (result.data['date'], result.data['time']) == ('2025-12-01', '16:00')
    assert result.data['status'] == 'Scheduled'


def test_reschedule_needs_date_and_time_and_a_scheduled_visit(appointment):
    assert not appointments.reschedule(appointment['id'], None, '10:00').success
    appointments.set_status(appointment['id'], 'No-show')
    moved = appointments.reschedule(appointment['id'], '2025-12-01', '10:00')
    assert not moved.success


def test_doctor_day_lists_by_time_and_counts_earnings(doctor, patient):
    day = datetime.date(2025, 11, 18)
    base = {'patientId': patient['id'], 'patientName': patient['name'],
            'doctorId': doctor['id'], 'doctorName': doctor['name'], 'date': day}
    late = repo.appointments.create({**base, 'time': '15:00'}).data
    early = repo.appointments.create({**base, 'time': '09:30'}).data
    repo.appointments.create({**base, 'date': day + datetime.timedelta(days=1), 'time': '08:00'})
    appointments.set_status(late['id'], 'Completed')
    appointments.set_status(early['id'], 'Completed')

    result = appointments.doctor_day(doctor['id'], day)
    assert [a['time'] for a in result.data['appointments']] == ['09:30', '15:00']
    assert result.data['completed'] == 2
    assert result.data['earnings'] == 1600.0


def test_doctor_day_of_unknown_or_malformed_doctor_is_empty():
    assert appointments.doctor_day('not-a-uuid').data is None
    assert appointments.doctor_day('00000000-0000-0000-0000-000000000000').data is None


# -- lab -----------------------------------------------------------------------
def test_lab_test_lifecycle(lab_test):
    started = lab.start_test(lab_test['id'])
    assert started.data['status'] == 'In-Progress'
    done = lab.complete_test(lab_test['id'], '  LDL 120 mg/dL  ')
    assert done.data['status'] == 'Completed'
    assert done.data['result'] == 'LDL 120 mg/dL'
    assert done.data['reportDate'] == timezone.localdate().isoformat()
    assert Notification.objects.filter(type='lab_test', related_id=lab_test['id']).exists()


def test_lab_test_never_moves_back(lab_test):
    lab.complete_test(lab_test['id'], 'Normal')
    back = lab.start_test(lab_test['id'])
    assert not back.success and back.kind == KIND_VALIDATION


def test_result_only_on_completed_tests(lab_test):
    result = repo.lab_tests.update(lab_test['id'], {'result': 'Early guess'})
    assert not result.success
    assert not lab.complete_test(lab_test['id'], '   ').success


# -- pharmacy ------------------------------------------------------------------
def test_stock_updates_recompute_status(medicine):
    assert pharmacy.update_stock(medicine['id'], quantity=40).data['status'] == 'Low-Stock'
    assert pharmacy.update_stock(medicine['id'], delta=-40).data['status'] == 'Out-of-Stock'
    assert pharmacy.update_stock(medicine['id'], delta=100).data['status'] == 'In-Stock'
    assert Medicine.objects.get(pk=medicine['id']).status == 'In-Stock'


def test_stock_cannot_go_negative(medicine):
    result = pharmacy.update_stock(medicine['id'], delta=-151)
    assert not result.success
    assert Medicine.objects.get(pk=medicine['id']).quantity == 150
    assert not pharmacy.update_stock(medicine['id']).success


# -- toggles -------------------------------------------------------------------
def test_toggle_doctor_status(doctor):
    assert records.toggle_doctor_status(doctor['id']).data['status'] == 'Off-duty'
    assert records.toggle_doctor_status(doctor['id']).data['status'] == 'Available'
    repo.doctors.update(doctor['id'], {'status': 'Busy'})
    assert records.toggle_doctor_status(doctor['id']).data['status'] == 'Available'


def test_toggle_patient_status(patient):
    assert records.toggle_patient_status(patient['id']).data['status'] == 'Inactive'
    assert records.toggle_patient_status(patient['id']).data['status'] == 'Active'


# -- dashboard -----------------------------------------------------------------
def test_dashboard_counts(patient, doctor, bill, lab_test, medicine):
    today = timezone.localdate()
    repo.appointments.create({'patientName': patient['name'], 'doctorId': doctor['id'],
                              'date': today, 'time': '10:00'})
    repo.medicines.create({'name': 'Metformin', 'quantity': 0, 'unitPrice': 1})
    stats = dashboard.dashboard_stats(today)
    assert stats == {
        'totalPatients': 1,
        'todayAppointments': 1,
        'pendingBills': 1,
        'availableDoctors': 1,
        'pendingLabTests': 1,
        'lowStockMedicines': 1,
    }


# -- maintenance ---------------------------------------------------------------
def test_reset_clears_patients_appointments_and_bills(appointment, bill, doctor):
    result = maintenance.reset_all_data(actor='admin:admin')
    assert result.data == {'appointments': 1, 'bills': 1, 'patients': 1}
    assert not Patient.objects.exists()
    assert repo.doctors.get_by_id(doctor['id']).data is not None
    assert AuditEvent.objects.filter(action='reset_data').exists()


def test_reset_is_all_or_nothing(monkeypatch, appointment, bill):
    class BrokenPatients:
        class objects:
            @staticmethod
            def all():
                raise DatabaseError('patients table locked')

    monkeypatch.setattr(maintenance, 'Patient', BrokenPatients)
    result = maintenance.reset_all_data()
    assert not result.success
    assert Appointment.objects.count() == 1
    assert Bill.objects.count() == 1
