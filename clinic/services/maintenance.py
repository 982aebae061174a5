"""Destructive maintenance operations."""
import logging

from django.db import DatabaseError, transaction

from clinic.models import Appointment, Bill, Patient
from clinic.services.audit import log_action
from clinic.services.repository import Result

logger = logging.getLogger(__name__)


def reset_all_data(actor: str = '') -> Result:
    """Delete every patient, appointment and bill.

    All three tables are cleared in one transaction: either every row goes
    or none does.
    """
    try:
        with transaction.atomic():
            counts = {
                'appointments': Appointment.objects.all().delete()[0],
                'bills': Bill.objects.all().delete()[0],
                'patients': Patient.objects.all().delete()[0],
            }
    except DatabaseError as exc:
        logger.error("reset failed, nothing deleted: %s", exc)
        return Result.fail(str(exc))
    logger.warning("all patient data reset by %s: %s", actor or 'unknown', counts)
    log_action(actor=actor, action='reset_data', detail=counts)
    return Result.ok(counts)
