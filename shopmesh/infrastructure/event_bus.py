"""RabbitMQ Event Bus - topic-exchange publish/subscribe over aio-pika.

Invariants:
    - Messages are persistent JSON with the trace id as correlation_id and x-trace-id header
    - publish() is bounded by publish_timeout_seconds; failures raise InternalError
    - A consumed message is acked only after its handler returns
    - A failed handler sleeps retry_delay_seconds, then the message is requeued
      (at-least-once; undecodable bodies keep retrying until dead-lettered by policy)
    - Consumer queues are durable and dead-letter to "<exchange>.dlx"

Design Decisions:
    - connect_robust: aio-pika reconnects and re-declares after broker restarts
    - Publishes on the shared channel are serialized with an asyncio.Lock
    - The handler receives raw bytes: decoding errors count as handler failures
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable

import aio_pika
from aio_pika.abc import (
    AbstractChannel, AbstractExchange, AbstractIncomingMessage, AbstractRobustConnection,
)

from shopmesh.core.errors import InternalError
from shopmesh.core.trace import TRACE_ID_METADATA_KEY, get_trace_id, trace_context

logger = logging.getLogger(__name__)

MessageHandler = Callable[[bytes], Awaitable[None]]


def _header_trace_id(message: AbstractIncomingMessage) -> str | None:
    value = (message.headers or {}).get(TRACE_ID_METADATA_KEY) or message.correlation_id
    if isinstance(value, bytes):
        return value.decode()
    return value


class EventBus:
    """Owns one broker connection; publishes to a single topic exchange."""

    def __init__(
        self,
        url: str,
        exchange_name: str,
        publish_timeout_seconds: float = 5.0,
        retry_delay_seconds: float = 1.0,
        prefetch_count: int = 10,
    ):
        self.url = url
        self.exchange_name = exchange_name
        self.publish_timeout_seconds = publish_timeout_seconds
        self.retry_delay_seconds = retry_delay_seconds
        self.prefetch_count = prefetch_count
        self._connection: AbstractRobustConnection | None = None
        self._channel: AbstractChannel | None = None
        self._exchange: AbstractExchange | None = None
        self._publish_lock = asyncio.Lock()

    async def connect(self, timeout_seconds: float = 5.0) -> None:
        self._connection = await aio_pika.connect_robust(self.url, timeout=timeout_seconds)
        self._channel = await self._connection.channel()
        await self._channel.set_qos(prefetch_count=self.prefetch_count)
        self._exchange = await self._channel.declare_exchange(
            self.exchange_name, aio_pika.ExchangeType.TOPIC, durable=True,
        )
        logger.info(
            "connected to RabbitMQ", extra={"exchange": self.exchange_name},
        )

    async def publish(self, routing_key: str, payload: dict) -> None:
        if self._exchange is None:
            raise InternalError("event bus is not connected")
        trace_id = get_trace_id()
        message = aio_pika.Message(
            body=json.dumps(payload, default=str).encode(),
            content_type="application/json",
            delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
            timestamp=datetime.now(timezone.utc),
            correlation_id=trace_id or None,
            headers={TRACE_ID_METADATA_KEY: trace_id},
        )
        try:
            async with self._publish_lock:
                async with asyncio.timeout(self.publish_timeout_seconds):
                    await self._exchange.publish(message, routing_key=routing_key)
        except TimeoutError as e:
            raise InternalError("event publish timed out", cause=e) from e
        except Exception as e:
            raise InternalError("failed to publish message", cause=e) from e
        logger.debug(
            "message published",
            extra={"exchange": self.exchange_name, "routing_key": routing_key},
        )

    async def subscribe(
        self,
        queue_name: str,
        source_exchange: str,
        routing_keys: list[str],
        handler: MessageHandler,
    ) -> None:
        """Declare and bind a durable queue, then consume it with handler."""
        if self._channel is None:
            raise InternalError("event bus is not connected")
        exchange = await self._channel.declare_exchange(
            source_exchange, aio_pika.ExchangeType.TOPIC, durable=True,
        )
        queue = await self._channel.declare_queue(
            queue_name,
            durable=True,
            arguments={"x-dead-letter-exchange": f"{source_exchange}.dlx"},
        )
        for key in routing_keys:
            await queue.bind(exchange, routing_key=key)

        async def on_message(message: AbstractIncomingMessage) -> None:
            await self._dispatch(queue_name, message, handler)

        await queue.consume(on_message)
        logger.info(
            f"consumer started for {routing_keys}", extra={"queue": queue_name},
        )

    async def _dispatch(
        self, queue_name: str, message: AbstractIncomingMessage, handler: MessageHandler,
    ) -> None:
        with trace_context(_header_trace_id(message)):
            logger.debug(
                "message received",
                extra={"queue": queue_name, "routing_key": message.routing_key},
            )
            try:
                await handler(message.body)
            except Exception as e:
                logger.error(
                    f"failed to handle message: {e}",
                    extra={"queue": queue_name, "routing_key": message.routing_key},
                    exc_info=True,
                )
                await asyncio.sleep(self.retry_delay_seconds)
                await message.nack(requeue=True)
            else:
                await message.ack()

    async def close(self) -> None:
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            self._channel = None
            self._exchange = None
