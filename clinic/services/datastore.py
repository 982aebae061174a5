"""
Generic document-store endpoint.

Requests are validated and logged, then acknowledged without touching any
store.  Typed record access goes through the repositories instead.
"""
import logging

from clinic.exceptions import DomainError

logger = logging.getLogger(__name__)

ACTIONS = ('find', 'findOne', 'insertOne', 'updateOne', 'deleteOne', 'aggregate')


def acknowledge(action: str, collection: str, *, filter=None, data=None, update=None, pipeline=None) -> dict:
    if action not in ACTIONS:
        raise DomainError(f"Unknown action: {action}")
    if not collection:
        raise DomainError('Collection required')
    logger.info("datastore %s on %s filter=%s data=%s update=%s pipeline=%s",
                action, collection, filter, data, update, pipeline)
    return {
        'success': True,
        'action': action,
        'collection': collection,
        'message': f"{action} operation logged. No document store is configured.",
    }
