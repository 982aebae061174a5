"""Lab test workflow: Pending -> In-Progress -> Completed."""
from __future__ import annotations

import logging

import bleach
from django.utils import timezone

from clinic import domain
from clinic.services.notifications import create_notification
from clinic.services.repository import KIND_VALIDATION, Result, lab_tests

logger = logging.getLogger(__name__)


def start_test(test_id) -> Result:
    return lab_tests.update(test_id, {'status': domain.LAB_IN_PROGRESS})


def complete_test(test_id, result_text: str) -> Result:
    """Record the result, mark the test completed and date the report."""
    result_text = bleach.clean((result_text or '').strip(), strip=True)
    if not result_text:
        return Result.fail('Please enter a result', KIND_VALIDATION)
    result = lab_tests.update(test_id, {
        'result': result_text,
        'status': domain.LAB_COMPLETED,
        'reportDate': timezone.localdate(),
    })
    if not result.success or result.data is None:
        return result
    test = result.data
    note = create_notification(
        domain.NOTIFY_LAB_TEST,
        f'Lab test "{test["testName"]}" completed for {test["patientName"]}',
        related_id=test['id'],
    )
    if not note.success:
        logger.warning("lab result %s not announced: %s", test_id, note.error)
    return result
