"""
In-process fan-out of chat events to server-sent event streams.

Subscribers are grouped by channel and each owns an ``asyncio.Queue`` of
ready-to-send SSE frames. Delivery is at-most-once: a client that is not
connected when an event is published misses it and re-lists messages.
The registry lives in one process; several instances do not share it.
"""

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from typing import Any

from fastapi import Request

from bmvt.core.errors import ValidationError
from bmvt.db.models import ChatChannel

logger = logging.getLogger(__name__)

CHANNELS = [c.value for c in ChatChannel]
WILDCARD = "*"
CHANNEL_PARAM_MESSAGE = "Paramètre 'channel' invalide."


def format_event(data: Any, event: str | None = None) -> str:
    """Serialize one SSE frame."""
    payload = json.dumps(data, ensure_ascii=False, default=str)
    prefix = f"event: {event}\n" if event else ""
    return f"{prefix}data: {payload}\n\n"


class Subscriber:
    """One open event stream."""

    def __init__(self, channel: str):
        self.channel = channel
        self.queue: asyncio.Queue[str] = asyncio.Queue()

    def push(self, frame: str) -> None:
        self.queue.put_nowait(frame)


class ChatBroadcaster:
    """Registry of open streams keyed by channel."""

    def __init__(self):
        self._subscribers: dict[str, set[Subscriber]] = {channel: set() for channel in CHANNELS}
        self._heartbeat_task: asyncio.Task | None = None

    @staticmethod
    def validate_channel(channel: str | None, message: str = CHANNEL_PARAM_MESSAGE) -> str:
        value = str(channel or "").strip()
        if value not in CHANNELS:
            raise ValidationError(message)
        return value

    def subscribe(self, channel: str | None) -> Subscriber:
        """Register a stream and queue its ``ready`` frame."""
        name = self.validate_channel(channel)
        subscriber = Subscriber(name)
        self._subscribers[name].add(subscriber)
        subscriber.push(format_event({"ok": True}, event="ready"))
        logger.info(f"Chat subscriber joined '{name}' ({self.count(name)} open)")
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.get(subscriber.channel, set()).discard(subscriber)
        logger.info(
            f"Chat subscriber left '{subscriber.channel}' ({self.count(subscriber.channel)} open)"
        )

    def count(self, channel: str | None = None) -> int:
        if channel is None or channel == WILDCARD:
            return sum(len(subs) for subs in self._subscribers.values())
        return len(self._subscribers.get(channel, ()))

    def _targets(self, channel: str) -> list[Subscriber]:
        if channel == WILDCARD:
            return [s for subs in self._subscribers.values() for s in subs]
        return list(self._subscribers.get(channel, ()))

    def _send(self, channel: str, frame: str) -> int:
        delivered = 0
        for subscriber in self._targets(channel):
            try:
                subscriber.push(frame)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping chat event for one subscriber: {e}")
        return delivered

    def publish(self, channel: str, event: dict[str, Any]) -> int:
        """
        Send ``event`` to every stream on ``channel`` (or all, for ``*``).

        Returns the number of streams the frame was queued for.
        """
        return self._send(channel, format_event(event))

    def ping(self) -> int:
        return self._send(WILDCARD, format_event({}, event="ping"))

    async def _heartbeat(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self.ping()

    def start_heartbeat(self, interval: float) -> None:
        if self._heartbeat_task is None or self._heartbeat_task.done():
            self._heartbeat_task = asyncio.create_task(self._heartbeat(interval))

    async def stop_heartbeat(self) -> None:
        task, self._heartbeat_task = self._heartbeat_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def stream(self, channel: str, request: Request) -> AsyncIterator[str]:
        """
        Subscribe to ``channel`` and yield queued frames until the client goes away.

        The subscription only exists while the response body is being sent.
        """
        subscriber = self.subscribe(channel)
        try:
            while True:
                if await request.is_disconnected():
                    break
                try:
                    frame = await asyncio.wait_for(subscriber.queue.get(), timeout=1.0)
                except asyncio.TimeoutError:
                    continue
                yield frame
        finally:
            self.unsubscribe(subscriber)


broadcaster = ChatBroadcaster()
