"""
RabbitMQ Event Publisher
"""
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict

import pika

logger = logging.getLogger(__name__)

ORDER_STATUS_CHANGED_ROUTING_KEY = "order.status.changed"


class EventPublisher:
    """Publisher for sending order events to RabbitMQ"""

    def __init__(self, settings):
        self.enabled = settings.EVENTS_ENABLED
        self.rabbitmq_url = settings.RABBITMQ_URL
        self.exchange = settings.RABBITMQ_EXCHANGE
        self.routing_key = settings.RABBITMQ_ROUTING_KEY
        self.source = settings.SERVICE_NAME

    def build_event(self, event_type: str, data: Dict) -> Dict:
        return {
            "event_type": event_type,
            "event_id": str(uuid.uuid4()),
            "event_version": "1.0",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "source": self.source,
            "data": data
        }

    def publish(self, event_type: str, routing_key: str, data: Dict, mandatory: bool = False) -> bool:
        """
        Publish an event to the orders exchange

        Args:
            event_type: Event name, e.g. OrderCreated
            routing_key: Topic routing key
            data: Event payload
            mandatory: Fail when no queue is bound for the routing key

        Returns:
            True if published successfully, False otherwise
        """
        if not self.enabled:
            logger.debug("Event publishing disabled, skipping %s", event_type)
            return False

        event = self.build_event(event_type, data)
        try:
            connection = pika.BlockingConnection(
                pika.URLParameters(self.rabbitmq_url)
            )
            try:
                channel = connection.channel()
                channel.exchange_declare(
                    exchange=self.exchange,
                    exchange_type='topic',
                    durable=True
                )

                # Enable publisher confirms
                channel.confirm_delivery()

                channel.basic_publish(
                    exchange=self.exchange,
                    routing_key=routing_key,
                    body=json.dumps(event, default=str),
                    properties=pika.BasicProperties(
                        delivery_mode=2,  # Persistent message
                        content_type='application/json',
                        correlation_id=event["event_id"]
                    ),
                    mandatory=mandatory
                )
            finally:
                connection.close()

            logger.info("Event published: %s (ID: %s)", event_type, event["event_id"])
            return True

        except pika.exceptions.UnroutableError:
            logger.warning("Event %s could not be routed to any queue", event_type)
            return False
        except Exception as e:
            logger.error("Error publishing %s event: %s", event_type, e)
            return False

    def publish_order_created(self, order_data: Dict) -> bool:
        """Publish OrderCreated event"""
        return self.publish("OrderCreated", self.routing_key, order_data, mandatory=True)

    def publish_order_status_changed(self, order_data: Dict) -> bool:
        """Publish OrderStatusChanged event"""
        return self.publish("OrderStatusChanged", ORDER_STATUS_CHANGED_ROUTING_KEY, order_data)
