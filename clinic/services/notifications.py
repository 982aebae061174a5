"""
Notification feed.

Notifications are append-only event rows.  New rows are pushed to every
connected admin through the ``notifications`` channel-layer group; each
connection keeps a :class:`NotificationFeed` holding the most recent
rows, newest first, with an unread counter.
"""
from __future__ import annotations

import logging
from typing import Optional

import bleach
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.db import DatabaseError

from clinic import domain
from clinic.models import Notification
from clinic.services.repository import Result, notifications

logger = logging.getLogger(__name__)

GROUP = 'notifications'


def feed_window() -> int:
    return getattr(settings, 'NOTIFICATION_FEED_WINDOW', 50)


def publish(record: dict) -> None:
    """Push a freshly inserted notification to subscribed feeds."""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    async_to_sync(channel_layer.group_send)(GROUP, {'type': 'notification.created', 'payload': record})


def create_notification(kind: str, message: str, related_id: Optional[str] = None) -> Result:
    if kind not in domain.NOTIFICATION_TYPES:
        kind = domain.NOTIFY_OTHER
    message = bleach.clean((message or '').strip(), strip=True)
    result = notifications.create({
        'type': kind,
        'message': message,
        'read': False,
        'related_id': str(related_id) if related_id else None,
    })
    if result.success:
        try:
            publish(result.data)
        except Exception as exc:  # the row is stored; push delivery is best effort
            logger.warning("notification %s not pushed: %s", result.data['id'], exc)
    return result


def recent(limit: Optional[int] = None) -> Result:
    """The ``limit`` newest notifications, newest first."""
    limit = limit or feed_window()
    try:
        rows = Notification.objects.order_by('-created_at')[:limit]
        return Result.ok([notifications.serialize(n) for n in rows])
    except DatabaseError as exc:
        logger.error("loading notifications failed: %s", exc)
        return Result.fail(str(exc))


def mark_all_read() -> Result:
    """Flag every unread notification as read in a single UPDATE."""
    try:
        count = Notification.objects.filter(read=False).update(read=True)
        return Result.ok({'updated': count})
    except DatabaseError as exc:
        logger.error("mark all read failed: %s", exc)
        return Result.fail(str(exc))


class NotificationFeed:
    """In-memory view of the notification stream for one subscriber.

    ``load`` fills the feed with the newest window of rows; ``receive``
    prepends rows pushed afterwards, so the list grows past the window
    while the subscription lives.  ``mark_all_read`` clears the counter
    before the database write completes and does not restore it if the
    write fails.
    """

    def __init__(self, window: Optional[int] = None):
        self.window = window or feed_window()
        self.items: list[dict] = []
        self.unread = 0

    def load(self) -> Result:
        result = recent(self.window)
        if result.success:
            self.items = list(result.data)
            self.unread = sum(1 for item in self.items if not item['read'])
        return result

    def receive(self, item: dict) -> bool:
        """Prepend a pushed row; returns False for a row already present."""
        if any(existing['id'] == item['id'] for existing in self.items):
            return False
        self.items.insert(0, item)
        if not item.get('read'):
            self.unread += 1
        return True

    def mark_all_read(self) -> Result:
        self.unread = 0
        for item in self.items:
            item['read'] = True
        return mark_all_read()

    def snapshot(self) -> dict:
        return {'items': self.items, 'unread': self.unread}
