"""
Live registration counter for a single event.

The count is never incremented locally: every change on event_registrations for
the event triggers a full exact-count query, so the snapshot always matches
the table.
"""
import asyncio
import logging
import uuid
from enum import Enum
from typing import Awaitable, Callable, Optional, Set

from pydantic import BaseModel
from supabase import AsyncClient, Client

from app.config import settings

logger = logging.getLogger(__name__)


class CapacityState(str, Enum):
    UNLIMITED = "unlimited"
    OPEN = "open"
    ALMOST_FULL = "almost_full"
    FULL = "full"


def derive_capacity_state(
    count: int,
    max_participants: Optional[int],
    almost_full_ratio: Optional[float] = None,
) -> CapacityState:
    """full at count >= max, almost_full from the ratio upwards, open below it"""
    if max_participants is None:
        return CapacityState.UNLIMITED
    ratio = settings.almost_full_ratio if almost_full_ratio is None else almost_full_ratio
    if count >= max_participants:
        return CapacityState.FULL
    if count / max_participants >= ratio:
        return CapacityState.ALMOST_FULL
    return CapacityState.OPEN


class CapacitySnapshot(BaseModel):
    event_id: str
    count: int
    max_participants: Optional[int] = None
    remaining_spots: Optional[int] = None
    percentage: Optional[float] = None
    state: CapacityState

    @classmethod
    def build(cls, event_id: str, count: int, max_participants: Optional[int]) -> "CapacitySnapshot":
        if max_participants is None:
            return cls(event_id=event_id, count=count, state=CapacityState.UNLIMITED)
        return cls(
            event_id=event_id,
            count=count,
            max_participants=max_participants,
            remaining_spots=max(max_participants - count, 0),
            percentage=min(count / max_participants * 100, 100.0),
            state=derive_capacity_state(count, max_participants),
        )


def count_registrations(supabase: Client, event_id: str) -> int:
    result = supabase.table("event_registrations")\
        .select("*", count="exact", head=True)\
        .eq("event_id", event_id)\
        .execute()
    return result.count or 0


SnapshotCallback = Callable[[CapacitySnapshot], Awaitable[None]]


class RegistrationCounter:
    """Holds the current snapshot for one event and keeps it in sync through realtime."""

    def __init__(
        self,
        client: AsyncClient,
        event_id: str,
        max_participants: Optional[int],
        on_change: Optional[SnapshotCallback] = None,
        auto_close: Optional[bool] = None,
    ):
        self.client = client
        self.event_id = event_id
        self.max_participants = max_participants
        self.on_change = on_change
        self.auto_close = settings.auto_close_when_full if auto_close is None else auto_close
        self.snapshot: Optional[CapacitySnapshot] = None
        self._channel = None
        self._tasks: Set[asyncio.Task] = set()

    async def refresh(self) -> CapacitySnapshot:
        result = await self.client.table("event_registrations")\
            .select("*", count="exact", head=True)\
            .eq("event_id", self.event_id)\
            .execute()
        snapshot = CapacitySnapshot.build(self.event_id, result.count or 0, self.max_participants)
        self.snapshot = snapshot

        if snapshot.state == CapacityState.FULL and self.auto_close:
            await self._close_registrations()
        if self.on_change:
            await self.on_change(snapshot)
        return snapshot

    async def _close_registrations(self):
        try:
            await self.client.table("events")\
                .update({"registration_status": "closed"})\
                .eq("id", self.event_id)\
                .neq("registration_status", "closed")\
                .execute()
        except Exception as e:
            logger.warning(f"Could not close registrations for full event {self.event_id}: {e}")

    async def _refresh_logged(self):
        try:
            await self.refresh()
        except Exception as e:
            logger.error(f"Registration count refresh failed for event {self.event_id}: {e}")

    def _handle_change(self, payload):
        task = asyncio.ensure_future(self._refresh_logged())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def start(self, subscribe: Optional[bool] = None) -> CapacitySnapshot:
        """Initial count, then a realtime subscription filtered on this event"""
        snapshot = await self.refresh()
        if subscribe is None:
            subscribe = settings.realtime_enabled
        if subscribe:
            # one topic per counter; the realtime client keys its channels by topic
            self._channel = self.client.channel(f"event-registrations-{self.event_id}-{uuid.uuid4().hex}")
            self._channel.on_postgres_changes(
                event="*",
                schema="public",
                table="event_registrations",
                filter=f"event_id=eq.{self.event_id}",
                callback=self._handle_change,
            )
            await self._channel.subscribe()
            logger.debug(f"Subscribed to registrations of event {self.event_id}")
        return snapshot

    async def stop(self):
        if self._channel is not None:
            await self.client.remove_channel(self._channel)
            self._channel = None
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
