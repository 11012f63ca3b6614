import pytest
from fastapi.testclient import TestClient

from tableside.application.admin_console import AdminConsole
from tableside.application.cart_service import CartService
from tableside.application.checkout_service import CheckoutService
from tableside.application.notification_service import NotificationService
from tableside.core.config import Settings
from tableside.domain.models import MenuItem
from tableside.infrastructure.event_relay import EventRelay
from tableside.infrastructure.database import connect_database, make_engine, make_session_factory
from tableside.infrastructure.repositories.menu_repository import SqlMenuRepository
from tableside.infrastructure.repositories.notification_repository import SqlNotificationRepository
from tableside.infrastructure.repositories.order_repository import SqlOrderRepository
from tableside.infrastructure.state_manager import StateManager
from tableside.main import create_app

ADMIN_TOKEN = "test-admin-token"


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        REDIS_URL=None,
        ADMIN_API_TOKEN=ADMIN_TOKEN,
        TIMEZONE="UTC",
        DB_CONNECT_RETRIES=1,
        DB_CONNECT_WAIT_SECONDS=0,
        READ_RETRY_BASE_DELAY=0,
        RECLEAR_BASE_DELAY=0,
    )


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    assert connect_database(engine, retries=1, wait_seconds=0)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def store():
    return StateManager(redis_url=None)


@pytest.fixture
def menu_repo(session_factory):
    return SqlMenuRepository(session_factory, read_base_delay=0)


@pytest.fixture
def order_repo(session_factory):
    return SqlOrderRepository(session_factory, read_base_delay=0)


@pytest.fixture
def notification_repo(session_factory):
    return SqlNotificationRepository(session_factory, read_base_delay=0)


@pytest.fixture
def menu(menu_repo):
    """Pizza (no sizes, 10.00) and Coffee (S/M/L)."""
    pizza = menu_repo.add_item(MenuItem(name="Pizza", category="Mains", price=10.00, has_sizes=False, sizes=[]))
    coffee = menu_repo.add_item(
        MenuItem(
            name="Coffee",
            category="Drinks",
            price=3.50,
            has_sizes=True,
            sizes=[
                {"name": "Small", "code": "S", "price": 3.50, "available": True},
                {"name": "Medium", "code": "M", "price": 4.25, "available": True},
                {"name": "Large", "code": "L", "price": 4.99, "available": True},
            ],
        )
    )
    soup = menu_repo.add_item(MenuItem(name="Soup", category="Starters", price=6.00, available=False))
    return {"pizza": pizza, "coffee": coffee, "soup": soup}


@pytest.fixture
def carts(store, menu_repo):
    return CartService(store, menu_repo)


@pytest.fixture
def relay():
    return EventRelay()


@pytest.fixture
def checkout(carts, order_repo, relay):
    return CheckoutService(carts, order_repo, relay, timezone="UTC", reclear_attempts=2, reclear_base_delay=0)


@pytest.fixture
def console(order_repo, relay):
    return AdminConsole(order_repo, relay)


@pytest.fixture
def notifications(notification_repo):
    return NotificationService(notification_repo, retention_days=3)


@pytest.fixture
def client(settings, engine, store, menu):
    app = create_app(settings=settings, engine=engine, session_store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def admin_token():
    return ADMIN_TOKEN
