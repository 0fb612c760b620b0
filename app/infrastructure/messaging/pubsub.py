"""Pub/Sub транспорт для realtime-каналов документов.

Движок только публикует; подписки (WebSocket-соединения) управляются
транспортом. ``InMemoryPubSub`` работает в пределах одного процесса,
``RedisPubSub`` нужен при нескольких инстансах приложения.
"""
import asyncio
import json
import logging
from typing import Any, AsyncIterator, Dict, Optional, Protocol, Set

import redis.asyncio as redis

from app.core.config import settings

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "document"


def document_channel(document_id: int) -> str:
    """Ключ канала документа"""
    return f"{CHANNEL_PREFIX}.{document_id}"


class Subscription(Protocol):
    def __aiter__(self) -> AsyncIterator[Dict[str, Any]]: ...

    async def close(self) -> None: ...


class PubSubTransport(Protocol):
    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def publish(self, channel: str, message: Dict[str, Any]) -> bool: ...

    async def subscribe(self, channel: str) -> Subscription: ...


class InMemorySubscription:
    """Подписка на канал внутри процесса: очередь сообщений"""

    def __init__(self, transport: "InMemoryPubSub", channel: str):
        self.transport = transport
        self.channel = channel
        self.queue: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()

    async def get(self) -> Dict[str, Any]:
        return await self.queue.get()

    async def __aiter__(self) -> AsyncIterator[Dict[str, Any]]:
        while True:
            yield await self.queue.get()

    async def close(self) -> None:
        self.transport._remove(self)


class InMemoryPubSub:
    """Pub/Sub в памяти процесса"""

    def __init__(self):
        # Подписки по каналам: {channel: {subscription}}
        self._subscriptions: Dict[str, Set[InMemorySubscription]] = {}

    async def connect(self) -> None:
        logger.info("In-memory pub/sub ready")

    async def disconnect(self) -> None:
        self._subscriptions.clear()

    async def publish(self, channel: str, message: Dict[str, Any]) -> bool:
        """Рассылка сообщения всем подписчикам канала"""
        subscribers = list(self._subscriptions.get(channel, ()))
        for subscription in subscribers:
            subscription.queue.put_nowait(message)
        logger.debug(f"Published {message.get('type')} to {channel} ({len(subscribers)} subscribers)")
        return True

    async def subscribe(self, channel: str) -> InMemorySubscription:
        subscription = InMemorySubscription(self, channel)
        self._subscriptions.setdefault(channel, set()).add(subscription)
        return subscription

    def subscriber_count(self, channel: str) -> int:
        return len(self._subscriptions.get(channel, ()))

    def _remove(self, subscription: InMemorySubscription) -> None:
        subscribers = self._subscriptions.get(subscription.channel)
        if subscribers is None:
            return
        subscribers.discard(subscription)
        # Если нет больше подписчиков, очищаем канал
        if not subscribers:
            del self._subscriptions[subscription.channel]


class RedisSubscription:
    """Подписка на канал Redis; каждая со своим PubSub-объектом"""

    def __init__(self, pubsub: "redis.client.PubSub", channel: str):
        self.pubsub = pubsub
        self.channel = channel

    async def __aiter__(self) -> AsyncIterator[Dict[str, Any]]:
        async for message in self.pubsub.listen():
            if message["type"] != "message":
                continue
            try:
                yield json.loads(message["data"])
            except (json.JSONDecodeError, TypeError):
                logger.exception(f"Failed to decode message from {self.channel}")

    async def close(self) -> None:
        await self.pubsub.unsubscribe(self.channel)
        await self.pubsub.aclose()


class RedisPubSub:
    """Pub/Sub поверх Redis для нескольких инстансов"""

    def __init__(self, redis_client: Optional[redis.Redis] = None, url: Optional[str] = None):
        self.redis = redis_client
        self.url = url or settings.redis_url

    async def connect(self) -> None:
        """Подключение к Redis при старте приложения"""
        if self.redis is None:
            self.redis = redis.from_url(self.url, decode_responses=True, socket_connect_timeout=5)
        await self.redis.ping()
        logger.info("Redis pub/sub connected")

    async def disconnect(self) -> None:
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            logger.info("Redis pub/sub disconnected")

    async def publish(self, channel: str, message: Dict[str, Any]) -> bool:
        if self.redis is None:
            logger.warning("Redis not connected, dropping broadcast")
            return False
        try:
            await self.redis.publish(channel, json.dumps(message))
        except (redis.ConnectionError, redis.TimeoutError):
            logger.exception(f"Failed to publish to {channel}")
            return False
        logger.debug(f"Published {message.get('type')} to {channel}")
        return True

    async def subscribe(self, channel: str) -> RedisSubscription:
        if self.redis is None:
            raise RuntimeError("Redis pub/sub is not connected")
        pubsub = self.redis.pubsub()
        await pubsub.subscribe(channel)
        return RedisSubscription(pubsub, channel)


_pubsub: Optional[PubSubTransport] = None


def get_pubsub() -> PubSubTransport:
    """Транспорт, выбранный настройкой pubsub_backend"""
    global _pubsub
    if _pubsub is None:
        _pubsub = RedisPubSub() if settings.pubsub_backend == "redis" else InMemoryPubSub()
    return _pubsub


def set_pubsub(transport: Optional[PubSubTransport]) -> None:
    """Подмена транспорта (тесты)"""
    global _pubsub
    _pubsub = transport
