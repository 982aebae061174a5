from django.utils import timezone

from clinic import domain
from clinic.models import Appointment, Bill, Doctor, LabTest, Medicine, Patient


def dashboard_stats(today=None) -> dict:
    """Headline counters for the admin dashboard."""
    today = today or timezone.localdate()
    return {
        'totalPatients': Patient.objects.count(),
        'todayAppointments': Appointment.objects.filter(date=today).count(),
        'pendingBills': Bill.objects.exclude(status=domain.BILL_PAID).count(),
        'availableDoctors': Doctor.objects.filter(status=domain.DOCTOR_AVAILABLE).count(),
        'pendingLabTests': LabTest.objects.filter(status=domain.LAB_PENDING).count(),
        'lowStockMedicines': Medicine.objects.exclude(status=domain.STOCK_IN).count(),
    }
