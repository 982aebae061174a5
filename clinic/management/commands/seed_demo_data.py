"""
Management command to populate the database with demo records.
"""
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from clinic import domain
from clinic.models import Patient
from clinic.services import repository as repo

PATIENTS = [
    {'name': 'John Smith', 'age': 45, 'gender': 'Male', 'phone': '+1-234-567-8901', 'email': 'john@email.com',
     'address': '123 Main St', 'bloodGroup': 'A+', 'registrationDate': '2024-01-15', 'status': 'Active'},
    {'name': 'Sarah Johnson', 'age': 32, 'gender': 'Female', 'phone': '+1-234-567-8902', 'email': 'sarah@email.com',
     'address': '456 Oak Ave', 'bloodGroup': 'B+', 'registrationDate': '2024-02-20', 'status': 'Active'},
    {'name': 'Michael Brown', 'age': 58, 'gender': 'Male', 'phone': '+1-234-567-8903', 'email': 'michael@email.com',
     'address': '789 Pine Rd', 'bloodGroup': 'O-', 'registrationDate': '2024-03-10', 'status': 'Active'},
    {'name': 'Emily Davis', 'age': 28, 'gender': 'Female', 'phone': '+1-234-567-8904', 'email': 'emily@email.com',
     'address': '321 Elm St', 'bloodGroup': 'AB+', 'registrationDate': '2024-04-05', 'status': 'Inactive'},
    {'name': 'Robert Wilson', 'age': 67, 'gender': 'Male', 'phone': '+1-234-567-8905', 'email': 'robert@email.com',
     'address': '654 Maple Dr', 'bloodGroup': 'A-', 'registrationDate': '2024-05-12', 'status': 'Active'},
]

DOCTORS = [
    {'name': 'Dr. A. John', 'specialization': 'Cardiology', 'phone': '+1-234-567-8001',
     'email': 'dr.john@hospital.com', 'availability': ['Mon', 'Tue', 'Wed', 'Thu', 'Fri'], 'status': 'Available'},
    {'name': 'Dr. B. Sarah', 'specialization': 'Neurology', 'phone': '+1-234-567-8002',
     'email': 'dr.sarah@hospital.com', 'availability': ['Mon', 'Wed', 'Fri'], 'status': 'Available'},
    {'name': 'Dr. C. Mike', 'specialization': 'Orthopedics', 'phone': '+1-234-567-8003',
     'email': 'dr.mike@hospital.com', 'availability': ['Tue', 'Thu', 'Sat'], 'status': 'Busy'},
    {'name': 'Dr. D. Emma', 'specialization': 'Pediatrics', 'phone': '+1-234-567-8004',
     'email': 'dr.emma@hospital.com', 'availability': ['Mon', 'Tue', 'Wed', 'Thu', 'Fri'], 'status': 'Available'},
]

# (patient, doctor, time, duration, type)
APPOINTMENTS = [
    (0, 0, '09:00', 30, 'Consultation'),
    (1, 1, '10:30', 45, 'Follow-up'),
    (2, 0, '11:00', 30, 'Routine'),
    (3, 2, '14:00', 60, 'Consultation'),
]

# (patient, items, paid)
BILLS = [
    (0, [('Consultation Fee', 1, 150), ('Blood Test', 1, 75)], 225),
    (1, [('Consultation Fee', 1, 150)], 100),
    (2, [('X-Ray', 1, 200), ('Consultation Fee', 1, 150)], 0),
]

# (patient, doctor, test name, type, final status, result)
LAB_TESTS = [
    (0, 0, 'Complete Blood Count', 'Hematology', domain.LAB_COMPLETED, 'Normal'),
    (1, 1, 'Lipid Panel', 'Biochemistry', domain.LAB_IN_PROGRESS, None),
    (2, 2, 'MRI Scan', 'Radiology', domain.LAB_PENDING, None),
]

MEDICINES = [
    {'name': 'Paracetamol 500mg', 'category': 'Analgesic', 'quantity': 500, 'unitPrice': 0.5,
     'expiryDate': '2026-06-15', 'manufacturer': 'PharmaCo'},
    {'name': 'Amoxicillin 250mg', 'category': 'Antibiotic', 'quantity': 200, 'unitPrice': 1.25,
     'expiryDate': '2025-12-20', 'manufacturer': 'MediLabs'},
    {'name': 'Omeprazole 20mg', 'category': 'Antacid', 'quantity': 50, 'unitPrice': 0.75,
     'expiryDate': '2025-09-10', 'manufacturer': 'HealthGen'},
    {'name': 'Metformin 500mg', 'category': 'Antidiabetic', 'quantity': 0, 'unitPrice': 0.60,
     'expiryDate': '2026-03-25', 'manufacturer': 'DiabCare'},
]


class Command(BaseCommand):
    help = 'Populate the database with demo patients, doctors, appointments, bills, lab tests and medicines'

    def add_arguments(self, parser):
        parser.add_argument('--force', action='store_true', help='seed even if patients already exist')

    def _create(self, repository, data):
        result = repository.create(data)
        if not result.success:
            raise CommandError(f"{repository.resource}: {result.error}")
        return result.data

    def handle(self, *args, **options):
        if Patient.objects.exists() and not options['force']:
            self.stdout.write(self.style.WARNING('Patients already exist, nothing done (use --force).'))
            return

        patients = [self._create(repo.patients, p) for p in PATIENTS]
        doctors = [self._create(repo.doctors, d) for d in DOCTORS]
        today = timezone.localdate()

        for p, d, time, duration, kind in APPOINTMENTS:
            self._create(repo.appointments, {
                'patientId': patients[p]['id'], 'patientName': patients[p]['name'],
                'doctorId': doctors[d]['id'], 'doctorName': doctors[d]['name'],
                'date': today, 'time': time, 'duration': duration, 'type': kind,
            })

        for p, items, paid in BILLS:
            bill = self._create(repo.bills, {
                'patientId': patients[p]['id'], 'patientName': patients[p]['name'],
                'items': [{'description': desc, 'quantity': q, 'unitPrice': price} for desc, q, price in items],
                'date': today,
            })
            if paid:
                repo.bills.update(bill['id'], {'paidAmount': paid})

        for p, d, name, kind, status, result in LAB_TESTS:
            test = self._create(repo.lab_tests, {
                'patientId': patients[p]['id'], 'patientName': patients[p]['name'],
                'testName': name, 'testType': kind, 'requestedBy': doctors[d]['name'], 'date': today,
            })
            if status != domain.LAB_PENDING:
                changes = {'status': status}
                if result:
                    changes.update(result=result, reportDate=today)
                repo.lab_tests.update(test['id'], changes)

        for m in MEDICINES:
            self._create(repo.medicines, m)

        self.stdout.write(self.style.SUCCESS(
            f"Seeded {len(patients)} patients, {len(doctors)} doctors, {len(APPOINTMENTS)} appointments, "
            f"{len(BILLS)} bills, {len(LAB_TESTS)} lab tests, {len(MEDICINES)} medicines."
        ))
