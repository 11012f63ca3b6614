import asyncio

from tableside.infrastructure.event_relay import ADMIN_TOPIC, EventRelay, guest_topic


class FakeSocket:
    def __init__(self, relay=None, fail=False):
        self.relay = relay
        self.fail = fail
        self.sent = []
        self.listeners_at_accept = None

    async def accept(self):
        if self.relay is not None:
            self.listeners_at_accept = self.relay.listener_count(ADMIN_TOPIC)

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(message)


def test_listener_is_registered_only_after_the_handshake():
    relay = EventRelay()
    socket = FakeSocket(relay)

    asyncio.run(relay.connect(socket))

    assert socket.listeners_at_accept == 0
    assert relay.listener_count(ADMIN_TOPIC) == 1


def test_broadcast_reaches_only_the_named_topic():
    relay = EventRelay()
    admin, guest_a, guest_b = FakeSocket(), FakeSocket(), FakeSocket()

    async def scenario():
        await relay.connect(admin)
        await relay.connect(guest_a, guest_topic("a"))
        await relay.connect(guest_b, guest_topic("b"))
        return await relay.broadcast("order_status_updated", {"id": 1}, topic=guest_topic("a"))

    assert asyncio.run(scenario()) == 1
    assert guest_a.sent == [{"event": "order_status_updated", "payload": {"id": 1}}]
    assert guest_b.sent == []
    assert admin.sent == []


def test_failed_listener_is_dropped():
    relay = EventRelay()
    healthy, broken = FakeSocket(), FakeSocket(fail=True)

    async def scenario():
        await relay.connect(healthy)
        await relay.connect(broken)
        return await relay.broadcast("new_order", {"orderId": 3})

    assert asyncio.run(scenario()) == 1
    assert relay.listener_count(ADMIN_TOPIC) == 1
    assert healthy.sent[0]["payload"] == {"orderId": 3}


def test_broadcast_without_listeners_is_a_no_op():
    assert asyncio.run(EventRelay().broadcast("new_order", {}, topic=guest_topic("nobody"))) == 0
