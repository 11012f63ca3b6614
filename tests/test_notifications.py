import asyncio
from datetime import timedelta

import pytest

from tableside.core.errors import NotFoundError
from tableside.domain.models import Notification, utcnow


@pytest.fixture
def five_orders(carts, checkout, menu):
    orders = []
    for n in range(5):
        guest = f"guest_{n}"
        carts.add_item(guest, menu["pizza"].id, table_number=n + 1)
        orders.append(asyncio.run(checkout.create_order(guest, {})))
    return orders


def test_mark_all_read_does_not_touch_orders(notifications, console, five_orders):
    assert len(notifications.list_notifications(is_read=False)) == 5

    assert notifications.mark_all_read() == 5

    assert notifications.list_notifications(is_read=False) == []
    assert all(n.is_read for n in notifications.list_notifications())
    assert len(console.list_orders(status="pending")) == 5


def test_mark_read_single(notifications, five_orders):
    target = notifications.list_notifications()[0]

    updated = notifications.mark_read(target.id)

    assert updated.is_read is True
    assert updated.read_at is not None
    assert len(notifications.list_notifications(is_read=False)) == 4


def test_mark_read_unknown(notifications):
    with pytest.raises(NotFoundError):
        notifications.mark_read(999)


def test_notifications_are_newest_first(notifications, five_orders):
    order_ids = [n.order_id for n in notifications.list_notifications()]
    assert order_ids == [o.id for o in reversed(five_orders)]


def test_cleanup_only_removes_old_read_notifications(notifications, session_factory, five_orders):
    old = utcnow() - timedelta(days=4)
    session = session_factory()
    try:
        rows = session.query(Notification).order_by(Notification.id).all()
        rows[0].created_at = old  # old + read -> deleted
        rows[0].is_read = True
        rows[1].created_at = old  # old + unread -> kept
        rows[2].is_read = True  # recent + read -> kept
        session.commit()
    finally:
        session.close()

    assert notifications.cleanup() == 1
    assert len(notifications.list_notifications()) == 4
