"""
RabbitMQ publisher for RSVP change notifications.

Messages go to the ``rsvphub.events`` topic exchange with routing keys such
as ``rsvp.family_set`` and ``rsvp.public_created``. Delivery (emails,
reminders) is another service's job; a broker outage never fails a write.
"""
import json
from typing import Optional
from aio_pika import connect_robust, Message, ExchangeType, DeliveryMode
from aio_pika.abc import AbstractRobustConnection, AbstractExchange
from rsvphub.core.config import settings
from rsvphub.core.logging import logger

EXCHANGE_NAME = "rsvphub.events"

_connection: Optional[AbstractRobustConnection] = None
_exchange: Optional[AbstractExchange] = None


async def get_exchange() -> AbstractExchange:
    global _connection, _exchange
    if _connection is None or _connection.is_closed:
        _connection = await connect_robust(settings.RABBITMQ_URL)
        _exchange = None
    if _exchange is None:
        channel = await _connection.channel()
        _exchange = await channel.declare_exchange(EXCHANGE_NAME, ExchangeType.TOPIC, durable=True)
    return _exchange


async def publish_event(routing_key: str, payload: dict):
    exchange = await get_exchange()
    message = Message(
        json.dumps(payload, default=str).encode(),
        content_type="application/json",
        delivery_mode=DeliveryMode.PERSISTENT,
    )
    await exchange.publish(message, routing_key=routing_key)


async def publish_safely(routing_key: str, payload: dict) -> bool:
    """Publish unless ``EVENTS_ENABLED`` is off; broker errors are logged, not raised."""
    if not settings.EVENTS_ENABLED:
        return False
    try:
        await publish_event(routing_key, {"type": routing_key, **payload})
    except Exception as e:
        logger.warning(f"Could not publish {routing_key}: {e}")
        return False
    logger.debug(f"Published {routing_key}")
    return True


async def close_connection():
    global _connection, _exchange
    if _connection is not None and not _connection.is_closed:
        await _connection.close()
    _connection = None
    _exchange = None
