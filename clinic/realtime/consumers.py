import json
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from clinic import domain, session
from clinic.services.notifications import GROUP, NotificationFeed


class NotificationsConsumer(AsyncWebsocketConsumer):
    """Live notification feed for the admin panel.

    Admins authenticate with ``?token=<admin token>`` or their session.
    On connect the current window is sent as a ``snapshot``; rows created
    afterwards arrive as ``notification`` messages.  Clients may send
    ``{"type": "mark_all_read"}``.
    """

    def _context(self) -> session.SessionContext:
        query = parse_qs(self.scope.get('query_string', b'').decode())
        token = (query.get('token') or [''])[0]
        if token:
            admin = session.admin_from_token(token)
            return session.SessionContext(admin) if admin else session.ANONYMOUS
        storage = self.scope.get('session')
        if storage is None:
            return session.ANONYMOUS
        context = session.load(storage)
        if getattr(storage, "modified", False):
            storage.save()
        return context

    async def connect(self):
        context = await database_sync_to_async(self._context)()
        if not context.has_role(domain.ROLE_ADMIN):
            await self.close(code=4403)
            return
        self.feed = NotificationFeed()
        # join first; rows pushed while the window loads are deduplicated by the feed
        await self.channel_layer.group_add(GROUP, self.channel_name)
        await database_sync_to_async(self.feed.load)()
        await self.accept()
        await self.send(json.dumps({'type': 'snapshot', **self.feed.snapshot()}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(GROUP, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        try:
            message = json.loads(text_data or '{}')
        except ValueError:
            await self.send(json.dumps({'type': 'error', 'error': 'invalid message'}))
            return
        if message.get('type') == 'mark_all_read':
            result = await database_sync_to_async(self.feed.mark_all_read)()
            await self.send(json.dumps({'type': 'marked_read', 'unread': self.feed.unread, **result.to_dict()}))

    async def notification_created(self, event):
        # event: {"type": "notification.created", "payload": {...}}
        if self.feed.receive(event['payload']):
            await self.send(json.dumps({'type': 'notification', 'item': event['payload'], 'unread': self.feed.unread}))
