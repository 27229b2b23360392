import asyncio
import logging

import pika
import pytest
from fastapi import BackgroundTasks

from storefront.publishers.event_publisher import EventPublisher
from storefront.repositories.product_repository import ProductRepository
from storefront.schemas.order import OrderResponse
from storefront.services.fulfillment import FulfillmentDispatcher, build_dispatcher

from conftest import FakePublisher


@pytest.fixture
def order_for(make_product):
    def _order(qty=2, stock=5, email="buyer@example.com"):
        product = make_product(price=2500, stock=stock)
        order = OrderResponse(
            id=1,
            invoice_no="INV-2025-123456",
            customer={"name": "Wahab", "phone": "51234567", "email": email},
            shipping_address={"area": "Salmiya", "block": "5", "street": "10", "house_no": "8"},
            items=[{"product_id": product.id, "title": product.title, "price_in_fils": 2500,
                    "currency": "KWD", "qty": qty}],
            subtotal_in_fils=2500 * qty,
            shipping_in_fils=2000,
            total_in_fils=2500 * qty + 2000,
            status="pending",
            created_at="2025-05-03T10:30:00Z",
            updated_at="2025-05-03T10:30:00Z",
        )
        return order, product
    return _order


def task_names(tasks):
    return [task.func.__name__ for task in tasks.tasks]


def test_reserve_policy_schedules_notifications_only(dispatcher, order_for):
    order, _ = order_for()
    tasks = BackgroundTasks()

    dispatcher.dispatch(tasks, order)

    assert task_names(tasks) == ["send_invoice_email", "send_order_message"]


def test_deferred_policy_schedules_stock_update_first(dispatcher, order_for, test_settings):
    test_settings.STOCK_POLICY = "deferred"
    dispatcher.event_publisher = FakePublisher(enabled=True)
    order, _ = order_for()
    tasks = BackgroundTasks()

    dispatcher.dispatch(tasks, order)

    assert task_names(tasks) == [
        "decrement_stock", "send_invoice_email", "send_order_message", "publish_order_created"
    ]


def test_decrement_stock(dispatcher, db, order_for):
    order, product = order_for(qty=2, stock=5)

    dispatcher.decrement_stock(order)

    assert ProductRepository(db).get_stock(product.id) == 3


def test_oversold_line_is_logged_and_stock_kept(dispatcher, db, order_for, caplog):
    order, product = order_for(qty=4, stock=3)

    with caplog.at_level(logging.WARNING, logger="storefront.services.fulfillment"):
        dispatcher.decrement_stock(order)

    assert ProductRepository(db).get_stock(product.id) == 3
    assert "Oversold" in caplog.text
    assert "INV-2025-123456" in caplog.text
    assert "(stock 3)" in caplog.text


def test_disabled_channels_send_nothing(dispatcher, mailer, whatsapp, order_for, test_settings):
    test_settings.MAIL_ENABLED = False
    test_settings.WHATSAPP_ENABLED = False
    order, _ = order_for()

    dispatcher.send_invoice_email(order)
    asyncio.run(dispatcher.send_order_message(order))

    assert mailer.sent == []
    assert whatsapp.sent == []


def test_whatsapp_failure_is_logged(dispatcher, whatsapp, order_for, caplog):
    whatsapp.error = RuntimeError("boom")
    order, _ = order_for()

    with caplog.at_level(logging.ERROR, logger="storefront.services.fulfillment"):
        asyncio.run(dispatcher.send_order_message(order))

    assert "WhatsApp send error for order INV-2025-123456: boom" in caplog.text


def test_order_created_event_payload(dispatcher, order_for):
    publisher = FakePublisher(enabled=True)
    dispatcher.event_publisher = publisher
    order, product = order_for()

    dispatcher.publish_order_created(order)

    event, data = publisher.published[0]
    assert event == "OrderCreated"
    assert data["invoice_no"] == "INV-2025-123456"
    assert data["total_in_fils"] == 7000
    assert data["items"] == [{"product_id": product.id, "qty": 2, "price_in_fils": 2500}]


def test_build_dispatcher_from_settings(test_settings, session_factory):
    dispatcher = build_dispatcher(test_settings, session_factory)

    assert dispatcher.mailer.bcc == "orders@store.test"
    assert dispatcher.whatsapp.messaging_service_sid == "MG123"
    assert dispatcher.event_publisher.enabled is False


def test_event_publisher_disabled(test_settings):
    assert EventPublisher(test_settings).publish_order_created({"order_id": 1}) is False


def test_event_publisher_swallows_broker_errors(test_settings, monkeypatch):
    test_settings.EVENTS_ENABLED = True

    def refuse(parameters):
        raise pika.exceptions.AMQPConnectionError("refused")

    monkeypatch.setattr(pika, "BlockingConnection", refuse)

    assert EventPublisher(test_settings).publish_order_status_changed({"order_id": 1}) is False


def test_event_publisher_publishes_envelope(test_settings, monkeypatch):
    test_settings.EVENTS_ENABLED = True
    published = []

    class FakeChannel:
        def exchange_declare(self, **kwargs):
            pass

        def confirm_delivery(self):
            pass

        def basic_publish(self, **kwargs):
            published.append(kwargs)

    class FakeConnection:
        def __init__(self, parameters):
            pass

        def channel(self):
            return FakeChannel()

        def close(self):
            pass

    monkeypatch.setattr(pika, "BlockingConnection", FakeConnection)

    assert EventPublisher(test_settings).publish_order_created({"order_id": 1}) is True
    assert published[0]["exchange"] == "orders_exchange"
    assert published[0]["routing_key"] == "order.created"
    assert published[0]["mandatory"] is True
    assert '"event_type": "OrderCreated"' in published[0]["body"]
