import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api.deps import get_dispatcher, get_event_publisher, get_settings
from storefront.config import Settings
from storefront.database import Base, get_db
from storefront.main import app
from storefront.models import Category, Product, ProductImage
from storefront.services.fulfillment import FulfillmentDispatcher

ADMIN_TOKEN = "test-admin-token"


class FakeMailer:
    def __init__(self):
        self.sent = []
        self.error = None

    def send(self, subject, html, text, to=None, reply_to=None):
        if self.error:
            raise self.error
        self.sent.append({"subject": subject, "html": html, "text": text, "to": to, "reply_to": reply_to})
        return f"<msg-{len(self.sent)}@test>"


class FakeWhatsApp:
    def __init__(self):
        self.sent = []
        self.error = None

    async def send_template(self, to_e164, content_sid, variables):
        if self.error:
            raise self.error
        self.sent.append({"to": to_e164, "content_sid": content_sid, "variables": variables})
        return f"SM{len(self.sent):032d}"


class FakePublisher:
    def __init__(self, enabled=False):
        self.enabled = enabled
        self.published = []

    def publish_order_created(self, data):
        self.published.append(("OrderCreated", data))
        return True

    def publish_order_status_changed(self, data):
        self.published.append(("OrderStatusChanged", data))
        return True


@pytest.fixture
def test_settings():
    return Settings(
        DATABASE_URL="sqlite://",
        ADMIN_API_TOKEN=ADMIN_TOKEN,
        FREE_SHIP_THRESHOLD_IN_FILS=15000,
        BASE_SHIPPING_IN_FILS=2000,
        DEFAULT_CURRENCY="KWD",
        DEFAULT_COUNTRY_CODE="965",
        STOCK_POLICY="reserve",
        ORDER_RECEIVER_EMAIL="orders@store.test",
        TWILIO_ACCOUNT_SID="AC123",
        TWILIO_AUTH_TOKEN="auth-token",
        TWILIO_MESSAGING_SERVICE_SID="MG123",
        WHATSAPP_ORDER_TEMPLATE_SID="HX123",
        EVENTS_ENABLED=False,
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def whatsapp():
    return FakeWhatsApp()


@pytest.fixture
def publisher():
    return FakePublisher()


@pytest.fixture
def dispatcher(session_factory, mailer, whatsapp, publisher, test_settings):
    return FulfillmentDispatcher(
        session_factory=session_factory,
        mailer=mailer,
        whatsapp=whatsapp,
        settings=test_settings,
        event_publisher=publisher,
    )


@pytest.fixture
def client(session_factory, dispatcher, publisher, test_settings):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Token": ADMIN_TOKEN}


@pytest.fixture
def make_category(db):
    def _make(name="Perfumes", slug="perfumes"):
        category = Category(name=name, slug=slug)
        db.add(category)
        db.commit()
        db.refresh(category)
        return category
    return _make


@pytest.fixture
def make_product(db):
    counter = {"n": 0}

    def _make(title="Oud Oil", price=2500, stock=5, status="active", currency="KWD",
              images=(), category=None, description=None, rating=0.0, slug=None):
        counter["n"] += 1
        product = Product(
            title=title,
            slug=slug or f"product-{counter['n']}",
            description=description,
            price_in_fils=price,
            currency=currency,
            stock=stock,
            status=status,
            rating_rate=rating,
            category=category,
        )
        product.images = [
            ProductImage(url=url, is_primary=primary, position=i)
            for i, (url, primary) in enumerate(images)
        ]
        db.add(product)
        db.commit()
        db.refresh(product)
        return product
    return _make


def order_payload(items, phone="51234567", email="buyer@example.com"):
    return {
        "customer": {"name": "  Wahab  ", "phone": phone, "email": email},
        "shippingAddress": {
            "area": "Salmiya",
            "block": "5",
            "street": " 10 ",
            "avenue": None,
            "houseNo": "8",
            "notes": "Ring twice",
        },
        "items": items,
    }


@pytest.fixture
def build_order():
    return order_payload
