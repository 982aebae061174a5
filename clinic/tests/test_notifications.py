import json

import pytest
from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from channels.testing import WebsocketCommunicator

from clinic.models import Notification
from clinic.realtime.consumers import NotificationsConsumer
from clinic.services import notifications, tokens
from clinic.services.notifications import NotificationFeed, create_notification

pytestmark = pytest.mark.django_db


def test_message_is_cleaned_and_unknown_types_become_other():
    result = create_notification('gossip', '<img src=x>Stock delivered')
    assert result.data['type'] == 'other'
    assert result.data['message'] == 'Stock delivered'
    assert result.data['read'] is False


def test_feed_loads_newest_window_first():
    for i in range(5):
        create_notification('other', f'message {i}')
    feed = NotificationFeed(window=3)
    assert feed.load().success
    assert [n['message'] for n in feed.items] == ['message 4', 'message 3', 'message 2']
    assert feed.unread == 3


def test_pushed_items_are_prepended_once():
    create_notification('other', 'old')
    feed = NotificationFeed()
    feed.load()
    item = create_notification('payment', 'new').data
    assert feed.receive(item) is True
    assert feed.receive(dict(item)) is False
    assert feed.items[0]['id'] == item['id']
    assert feed.unread == 2
    assert feed.receive({**item, 'id': 'read-one', 'read': True}) is True
    assert feed.unread == 2


def test_mark_all_read_clears_counter_and_rows():
    for i in range(3):
        create_notification('other', f'm{i}')
    feed = NotificationFeed()
    feed.load()
    result = feed.mark_all_read()
    assert result.data == {'updated': 3}
    assert feed.unread == 0
    assert all(item['read'] for item in feed.items)
    assert not Notification.objects.filter(read=False).exists()


def test_mark_all_read_counter_stays_cleared_when_write_fails(monkeypatch):
    create_notification('other', 'm')
    feed = NotificationFeed()
    feed.load()
    monkeypatch.setattr(notifications, 'mark_all_read', lambda: notifications.Result.fail('db down'))
    result = feed.mark_all_read()
    assert not result.success
    assert feed.unread == 0


def test_rows_are_published_to_the_group(monkeypatch):
    sent = []
    monkeypatch.setattr(notifications, 'publish', sent.append)
    item = create_notification('lab_test', 'done', related_id='abc').data
    assert sent == [item]
    assert item['related_id'] == 'abc'


@pytest.mark.django_db(transaction=True)
def test_socket_sends_snapshot_then_live_rows():
    create_notification('other', 'before connect')
    token = tokens.issue_token('admin')

    async def scenario():
        communicator = WebsocketCommunicator(NotificationsConsumer.as_asgi(), f'/ws/notifications/?token={token}')
        connected, _ = await communicator.connect()
        assert connected
        snapshot = json.loads(await communicator.receive_from())
        assert snapshot['type'] == 'snapshot'
        assert snapshot['unread'] == 1
        assert [i['message'] for i in snapshot['items']] == ['before connect']

        await database_sync_to_async(create_notification)('appointment', 'after connect')
        pushed = json.loads(await communicator.receive_from())
        assert pushed['type'] == 'notification'
        assert pushed['item']['message'] == 'after connect'
        assert pushed['unread'] == 2

        await communicator.send_to(text_data=json.dumps({'type': 'mark_all_read'}))
        marked = json.loads(await communicator.receive_from())
        assert marked['type'] == 'marked_read'
        assert marked['unread'] == 0
        assert marked['data'] == {'updated': 2}
        await communicator.disconnect()

    async_to_sync(scenario)()


@pytest.mark.django_db(transaction=True)
def test_socket_forwards_rows_created_while_the_window_loads(monkeypatch):
    load = NotificationFeed.load

    def load_during_inserts(feed):
        create_notification('other', 'inside window')
        result = load(feed)
        create_notification('other', 'after window')
        return result

    monkeypatch.setattr(NotificationFeed, 'load', load_during_inserts)
    token = tokens.issue_token('admin')

    async def scenario():
        communicator = WebsocketCommunicator(NotificationsConsumer.as_asgi(), f'/ws/notifications/?token={token}')
        connected, _ = await communicator.connect()
        assert connected
        snapshot = json.loads(await communicator.receive_from())
        assert [i['message'] for i in snapshot['items']] == ['inside window']
        pushed = json.loads(await communicator.receive_from())
        assert pushed['item']['message'] == 'after window'
        assert pushed['unread'] == 2
        assert await communicator.receive_nothing()
        await communicator.disconnect()

    async_to_sync(scenario)()


@pytest.mark.django_db(transaction=True)
def test_socket_rejects_anonymous_connections():
    async def scenario():
        communicator = WebsocketCommunicator(NotificationsConsumer.as_asgi(), '/ws/notifications/')
        connected, _ = await communicator.connect()
        assert not connected

    async_to_sync(scenario)()
