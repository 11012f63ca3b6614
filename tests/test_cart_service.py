import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from tableside.application.cart_service import CartService
from tableside.core.errors import NotFoundError, TransientError, ValidationError
from tableside.infrastructure.state_manager import StateManager

GUEST = "guest_1"


def test_same_item_and_size_merges_into_one_line(carts, menu):
    coffee = menu["coffee"]
    carts.add_item(GUEST, coffee.id, size_code="M", qty=1)
    line, created = carts.add_item(GUEST, coffee.id, size_code="M", qty=2)

    cart = carts.get_cart(GUEST)
    assert created is False
    assert len(cart) == 1
    assert cart[0].quantity == 3
    assert line.id == cart[0].id


@pytest.mark.parametrize("quantities", [[1], [2, 3], [1, 1, 1, 1], [5, 2, 7]])
def test_repeated_adds_sum_quantities(carts, menu, quantities):
    for qty in quantities:
        carts.add_item(GUEST, menu["pizza"].id, qty=qty)

    cart = carts.get_cart(GUEST)
    assert len(cart) == 1
    assert cart[0].quantity == sum(quantities)


def test_different_sizes_are_different_lines(carts, menu):
    coffee = menu["coffee"]
    carts.add_item(GUEST, coffee.id, size_code="M")
    carts.add_item(GUEST, coffee.id, size_code="L")

    cart = carts.get_cart(GUEST)
    assert sorted(line.unique_key for line in cart) == [f"{coffee.id}:L", f"{coffee.id}:M"]
    assert len({line.unique_key for line in cart}) == len(cart)


def test_line_is_priced_from_the_menu(carts, menu):
    line, created = carts.add_item(GUEST, menu["coffee"].id, size_code="L")

    assert created is True
    assert line.unit_price == 4.99
    assert line.display_name == "Coffee (Large)"
    assert line.selected_size.code == "L"
    assert line.unique_key == f"{menu['coffee'].id}:L"


def test_unsized_item_uses_none_in_key(carts, menu):
    line, _ = carts.add_item(GUEST, menu["pizza"].id)
    assert line.unique_key == f"{menu['pizza'].id}:none"
    assert line.selected_size is None


def test_sized_item_requires_a_size(carts, menu):
    with pytest.raises(ValidationError):
        carts.add_item(GUEST, menu["coffee"].id)
    with pytest.raises(ValidationError):
        carts.add_item(GUEST, menu["coffee"].id, size_code="XL")
    assert carts.get_cart(GUEST) == []


def test_unsized_item_rejects_a_size(carts, menu):
    with pytest.raises(ValidationError):
        carts.add_item(GUEST, menu["pizza"].id, size_code="M")


def test_unavailable_and_unknown_items_are_rejected(carts, menu):
    with pytest.raises(ValidationError):
        carts.add_item(GUEST, menu["soup"].id)
    with pytest.raises(NotFoundError):
        carts.add_item(GUEST, 9999)


def test_quantity_must_be_positive(carts, menu):
    with pytest.raises(ValidationError):
        carts.add_item(GUEST, menu["pizza"].id, qty=0)


@pytest.mark.parametrize("start, delta, expected", [(3, 2, 5), (3, -1, 2), (1, 0, 1)])
def test_update_quantity_applies_delta_exactly(carts, menu, start, delta, expected):
    line, _ = carts.add_item(GUEST, menu["pizza"].id, qty=start)

    updated = carts.update_quantity(GUEST, line.id, delta)

    assert updated.quantity == expected
    assert carts.get_cart(GUEST)[0].quantity == expected


@pytest.mark.parametrize("start, delta", [(2, -2), (2, -5), (1, -1)])
def test_update_quantity_to_zero_or_less_removes_line(carts, menu, start, delta):
    line, _ = carts.add_item(GUEST, menu["pizza"].id, qty=start)

    assert carts.update_quantity(GUEST, line.id, delta) is None
    assert carts.get_cart(GUEST) == []


def test_set_quantity_is_absolute(carts, menu):
    line, _ = carts.add_item(GUEST, menu["pizza"].id, qty=2)
    assert carts.set_quantity(GUEST, line.id, 7).quantity == 7
    assert carts.set_quantity(GUEST, line.id, 0) is None
    assert carts.get_cart(GUEST) == []


def test_unknown_line_leaves_cart_unchanged(carts, menu):
    carts.add_item(GUEST, menu["pizza"].id, qty=2)
    before = carts.get_cart(GUEST)

    with pytest.raises(NotFoundError):
        carts.update_quantity(GUEST, "missing", 1)
    with pytest.raises(NotFoundError):
        carts.remove_item(GUEST, "missing")

    assert carts.get_cart(GUEST) == before


def test_remove_and_clear(carts, menu):
    pizza, _ = carts.add_item(GUEST, menu["pizza"].id)
    carts.add_item(GUEST, menu["coffee"].id, size_code="S")

    carts.remove_item(GUEST, pizza.id)
    assert [line.name for line in carts.get_cart(GUEST)] == ["Coffee"]

    carts.clear(GUEST)
    carts.clear(GUEST)  # idempotent
    assert carts.get_cart(GUEST) == []


def test_carts_are_isolated_per_guest(carts, menu):
    carts.add_item("guest_a", menu["pizza"].id, qty=2)
    carts.add_item("guest_b", menu["pizza"].id, qty=1)

    assert carts.get_cart("guest_a")[0].quantity == 2
    assert carts.get_cart("guest_b")[0].quantity == 1


def test_table_binding(carts, menu):
    assert carts.get_table(GUEST) is None
    line, _ = carts.add_item(GUEST, menu["pizza"].id, table_number=5)

    assert carts.get_table(GUEST) == 5
    assert line.table_number == 5

    carts.unbind_table(GUEST)
    assert carts.get_table(GUEST) is None

    with pytest.raises(ValidationError):
        carts.bind_table(GUEST, 0)


class FailingWritesRedis:
    """Reads work, every write raises like a dropped connection."""

    def __init__(self, data=None):
        self.data = dict(data or {})

    def get(self, key):
        return self.data.get(key)

    def setex(self, key, ttl, value):
        raise RedisConnectionError("connection reset")

    def delete(self, key):
        raise RedisConnectionError("connection reset")


def test_failed_write_rejects_mutation_and_keeps_snapshot(menu_repo, menu):
    healthy = StateManager(redis_url=None)
    seeded = CartService(healthy, menu_repo)
    seeded.add_item(GUEST, menu["pizza"].id, qty=2)
    snapshot = dict(healthy._memory_store)

    broken = CartService(StateManager(client=FailingWritesRedis(snapshot)), menu_repo)

    with pytest.raises(TransientError):
        broken.add_item(GUEST, menu["pizza"].id, qty=1)

    cart = broken.get_cart(GUEST)
    assert len(cart) == 1
    assert cart[0].quantity == 2


class FailingTableStore:
    """Wraps the RAM store; binding a table always fails."""

    def __init__(self, inner):
        self.inner = inner

    def __getattr__(self, name):
        return getattr(self.inner, name)

    def set_table(self, guest_id, table_number):
        raise TransientError("Session storage is temporarily unavailable")


def test_failed_table_binding_rejects_the_whole_add(store, menu_repo, menu):
    carts = CartService(FailingTableStore(store), menu_repo)

    with pytest.raises(TransientError):
        carts.add_item(GUEST, menu["pizza"].id, qty=2, table_number=4)

    assert carts.get_cart(GUEST) == []
    assert carts.get_table(GUEST) is None


def test_failed_table_binding_keeps_the_previous_cart(store, menu_repo, menu):
    CartService(store, menu_repo).add_item(GUEST, menu["pizza"].id, qty=1)
    carts = CartService(FailingTableStore(store), menu_repo)

    with pytest.raises(TransientError):
        carts.add_item(GUEST, menu["pizza"].id, qty=2, table_number=4)

    cart = carts.get_cart(GUEST)
    assert [(line.unique_key, line.quantity) for line in cart] == [(f"{menu['pizza'].id}:none", 1)]
