"""Bills and payments."""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from clinic import domain
from clinic.services.audit import log_action
from clinic.services.notifications import create_notification
from clinic.services.repository import KIND_VALIDATION, Result, bills

logger = logging.getLogger(__name__)


def create_bill(data: dict) -> Result:
    """Create a bill; line amounts and the total are computed here."""
    return bills.create(data)


def record_payment(bill_id, amount, *, actor: str = '') -> Result:
    """Add ``amount`` to the paid total of a bill.

    The payment must be positive and may not exceed what is still owed.
    The bill status follows the new paid amount.
    """
    try:
        amount = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        return Result.fail('Please enter a valid amount', KIND_VALIDATION)
    if not amount.is_finite() or amount <= 0:
        return Result.fail('Please enter a valid amount', KIND_VALIDATION)

    current = bills.get_by_id(bill_id)
    if not current.success or current.data is None:
        return current
    bill = current.data
    paid = Decimal(str(bill['paidAmount'] or 0))
    outstanding = Decimal(str(bill['totalAmount'] or 0)) - paid
    if amount > outstanding:
        return Result.fail(
            f"Payment exceeds the outstanding balance of {domain.format_currency(outstanding)}",
            KIND_VALIDATION,
        )

    result = bills.update(bill_id, {'paidAmount': paid + amount})
    if not result.success:
        return result
    log_action(actor=actor, action='record_payment', object_type='bill', object_id=bill['id'],
               detail={'amount': str(amount), 'status': result.data['status']})
    note = create_notification(
        domain.NOTIFY_PAYMENT,
        f"Payment of {domain.format_currency(amount)} received for {bill['patientName']}",
        related_id=bill['id'],
    )
    if not note.success:
        logger.warning("payment on %s not announced: %s", bill_id, note.error)
    return result
