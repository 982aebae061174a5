"""
Domain vocabulary and derived-state rules.

Everything in this module is pure: no database access and no side
effects.  Models and services import the status constants from here so
the same strings are used on the wire, in the database and in tests.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Mapping

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------
GENDERS = ('Male', 'Female', 'Other')

PATIENT_ACTIVE = 'Active'
PATIENT_INACTIVE = 'Inactive'
PATIENT_STATUSES = (PATIENT_ACTIVE, PATIENT_INACTIVE)

DOCTOR_AVAILABLE = 'Available'
DOCTOR_BUSY = 'Busy'
DOCTOR_OFF_DUTY = 'Off-duty'
DOCTOR_STATUSES = (DOCTOR_AVAILABLE, DOCTOR_BUSY, DOCTOR_OFF_DUTY)
WEEKDAYS = ('Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun')
DEFAULT_CONSULTATION_FEE = Decimal('500')
SPECIALIZATIONS = (
    'Cardiology', 'Neurology', 'Orthopedics', 'Pediatrics', 'Dermatology',
    'General Medicine', 'Gynecology', 'ENT', 'Ophthalmology', 'Psychiatry',
)

APPOINTMENT_SCHEDULED = 'Scheduled'
APPOINTMENT_COMPLETED = 'Completed'
APPOINTMENT_CANCELLED = 'Cancelled'
APPOINTMENT_NO_SHOW = 'No-show'
APPOINTMENT_STATUSES = (
    APPOINTMENT_SCHEDULED, APPOINTMENT_COMPLETED, APPOINTMENT_CANCELLED, APPOINTMENT_NO_SHOW,
)
APPOINTMENT_TYPES = ('Consultation', 'Follow-up', 'Emergency', 'Routine')
DEFAULT_APPOINTMENT_DURATION = 30

# Scheduled is the only state with outgoing edges; everything else is terminal.
APPOINTMENT_TRANSITIONS = {
    APPOINTMENT_SCHEDULED: {APPOINTMENT_COMPLETED, APPOINTMENT_CANCELLED, APPOINTMENT_NO_SHOW},
    APPOINTMENT_COMPLETED: set(),
    APPOINTMENT_CANCELLED: set(),
    APPOINTMENT_NO_SHOW: set(),
}

BILL_PENDING = 'Pending'
BILL_PARTIAL = 'Partial'
BILL_PAID = 'Paid'
BILL_STATUSES = (BILL_PENDING, BILL_PARTIAL, BILL_PAID)

LAB_PENDING = 'Pending'
LAB_IN_PROGRESS = 'In-Progress'
LAB_COMPLETED = 'Completed'
LAB_STATUSES = (LAB_PENDING, LAB_IN_PROGRESS, LAB_COMPLETED)
LAB_TEST_TYPES = (
    'Hematology', 'Biochemistry', 'Radiology', 'Microbiology', 'Pathology', 'Immunology',
)

STOCK_IN = 'In-Stock'
STOCK_LOW = 'Low-Stock'
STOCK_OUT = 'Out-of-Stock'
STOCK_STATUSES = (STOCK_IN, STOCK_LOW, STOCK_OUT)
LOW_STOCK_THRESHOLD = 100

ROLE_ADMIN = 'admin'
ROLE_DOCTOR = 'doctor'
ROLE_LAB = 'lab_staff'
ROLE_BILLING = 'billing_staff'
ROLE_APPOINTMENTS = 'appointment_staff'
STAFF_ROLES = (ROLE_DOCTOR, ROLE_LAB, ROLE_BILLING, ROLE_APPOINTMENTS)

NOTIFY_APPOINTMENT = 'appointment'
NOTIFY_PAYMENT = 'payment'
NOTIFY_LAB_TEST = 'lab_test'
NOTIFY_OTHER = 'other'
NOTIFICATION_TYPES = (NOTIFY_APPOINTMENT, NOTIFY_PAYMENT, NOTIFY_LAB_TEST, NOTIFY_OTHER)


def choices(values: Iterable[str]) -> list[tuple[str, str]]:
    """Django ``choices`` where the stored value is also the label."""
    return [(v, v) for v in values]


# ---------------------------------------------------------------------------
# Derived state
# ---------------------------------------------------------------------------
def medicine_status(quantity: int) -> str:
    """Stock status for a quantity on hand."""
    if quantity < 0:
        raise ValueError('quantity cannot be negative')
    if quantity == 0:
        return STOCK_OUT
    if quantity < LOW_STOCK_THRESHOLD:
        return STOCK_LOW
    return STOCK_IN


def bill_status(total_amount, paid_amount) -> str:
    """Payment status of a bill.

    Nothing paid is always ``Pending`` (a zero-total bill included);
    otherwise a bill is ``Paid`` once the paid amount reaches the total.
    """
    total = Decimal(str(total_amount))
    paid = Decimal(str(paid_amount))
    if paid < 0:
        raise ValueError('paid amount cannot be negative')
    if paid == 0:
        return BILL_PENDING
    if paid >= total:
        return BILL_PAID
    return BILL_PARTIAL


def line_amount(quantity, unit_price) -> Decimal:
    return (Decimal(str(quantity)) * Decimal(str(unit_price))).quantize(Decimal('0.01'), ROUND_HALF_UP)


def bill_total(items: Iterable[Mapping]) -> Decimal:
    """Sum of the line amounts of ``items``."""
    total = Decimal('0')
    for item in items:
        total += Decimal(str(item['amount']))
    return total.quantize(Decimal('0.01'), ROUND_HALF_UP)


def can_transition_appointment(current: str, target: str) -> bool:
    return target in APPOINTMENT_TRANSITIONS.get(current, set())


def can_advance_lab_test(current: str, target: str) -> bool:
    """Lab tests only move forward; skipping straight to Completed is allowed."""
    if current not in LAB_STATUSES or target not in LAB_STATUSES:
        return False
    return LAB_STATUSES.index(target) > LAB_STATUSES.index(current)


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------
CURRENCY_SYMBOL = '₹'


def format_currency(amount) -> str:
    """Format an amount in rupees with Indian digit grouping.

    ``format_currency(150000)`` -> ``'₹1,50,000'``; fractions are kept up
    to two places and dropped when zero.
    """
    value = Decimal(str(amount)).quantize(Decimal('0.01'), ROUND_HALF_UP)
    sign = '-' if value < 0 else ''
    whole, _, frac = f'{abs(value):.2f}'.partition('.')
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ','.join(groups + [tail])
    frac = frac.rstrip('0')
    return f"{sign}{CURRENCY_SYMBOL}{whole}{'.' + frac if frac else ''}"
