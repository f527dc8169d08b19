"""
Tests for the registration counter: state derivation, per-event counts and
the realtime refresh cycle.
"""

import asyncio

import pytest

from app.modules.registrations.capacity import (
    CapacitySnapshot, CapacityState, RegistrationCounter, count_registrations, derive_capacity_state
)


async def settle():
    """Let tasks scheduled by realtime callbacks run to completion."""
    for _ in range(3):
        await asyncio.sleep(0)


@pytest.mark.parametrize("count, max_participants, expected", [
    (0, 10, CapacityState.OPEN),
    (7, 10, CapacityState.OPEN),
    (8, 10, CapacityState.ALMOST_FULL),
    (9, 10, CapacityState.ALMOST_FULL),
    (10, 10, CapacityState.FULL),
    (12, 10, CapacityState.FULL),
    (5, None, CapacityState.UNLIMITED),
    (0, 0, CapacityState.FULL),
])
def test_derive_capacity_state(count, max_participants, expected):
    assert derive_capacity_state(count, max_participants, almost_full_ratio=0.8) == expected


def test_snapshot_for_unlimited_event_has_no_remaining_spots():
    snapshot = CapacitySnapshot.build("evt", 42, None)
    assert snapshot.state == CapacityState.UNLIMITED
    assert snapshot.remaining_spots is None
    assert snapshot.percentage is None


def test_snapshot_clamps_overfull_event():
    snapshot = CapacitySnapshot.build("evt", 11, 10)
    assert snapshot.remaining_spots == 0
    assert snapshot.percentage == 100.0
    assert snapshot.state == CapacityState.FULL


def test_count_registrations_is_per_event(db):
    event_a = db.add_event(title="A")
    event_b = db.add_event(title="B")
    db.add_registration(event_a["id"], "r1")
    db.add_registration(event_a["id"], "r2")
    db.add_registration(event_b["id"], "r3")

    assert count_registrations(db, event_a["id"]) == 2
    assert count_registrations(db, event_b["id"]) == 1


@pytest.mark.asyncio
async def test_counter_start_counts_and_subscribes(db, async_db):
    event = db.add_event(max_participants=10)
    db.add_registration(event["id"], "u1")

    counter = RegistrationCounter(async_db, event["id"], 10, auto_close=False)
    snapshot = await counter.start(subscribe=True)

    assert snapshot.count == 1
    assert snapshot.state == CapacityState.OPEN
    channel = async_db.channels[0]
    assert channel.subscribed
    assert channel.bindings[0]["table"] == "event_registrations"
    assert channel.bindings[0]["filter"] == f"event_id=eq.{event['id']}"

    await counter.stop()
    assert async_db.channels == []


@pytest.mark.asyncio
async def test_counter_refreshes_on_change(db, async_db):
    event = db.add_event(max_participants=2)
    pushed = []

    async def on_change(snapshot):
        pushed.append(snapshot)

    counter = RegistrationCounter(async_db, event["id"], 2, on_change=on_change, auto_close=False)
    await counter.start(subscribe=True)
    assert pushed[-1].count == 0

    db.add_registration(event["id"], "u1")
    async_db.channels[0].emit({"eventType": "INSERT"})
    await settle()

    assert pushed[-1].count == 1
    assert pushed[-1].remaining_spots == 1
    await counter.stop()


@pytest.mark.asyncio
async def test_counter_closes_registrations_when_full(db, async_db):
    event = db.add_event(max_participants=1)
    db.add_registration(event["id"], "u1")

    counter = RegistrationCounter(async_db, event["id"], 1, auto_close=True)
    snapshot = await counter.refresh()

    assert snapshot.state == CapacityState.FULL
    assert db.rows("events")[0]["registration_status"] == "closed"


@pytest.mark.asyncio
async def test_counter_never_closes_unlimited_event(db, async_db):
    event = db.add_event(max_participants=None)
    db.add_registration(event["id"], "u1")

    counter = RegistrationCounter(async_db, event["id"], None, auto_close=True)
    snapshot = await counter.refresh()

    assert snapshot.state == CapacityState.UNLIMITED
    assert db.rows("events")[0]["registration_status"] == "open"


@pytest.mark.asyncio
async def test_auto_close_failure_does_not_break_refresh(db, async_db):
    event = db.add_event(max_participants=1)
    db.add_registration(event["id"], "u1")
    db.failures.add(("events", "update"))

    counter = RegistrationCounter(async_db, event["id"], 1, auto_close=True)
    snapshot = await counter.refresh()

    assert snapshot.state == CapacityState.FULL


def test_zero_capacity_is_not_unlimited():
    snapshot = CapacitySnapshot.build("evt", 0, 0)
    assert snapshot.state == CapacityState.FULL
    assert snapshot.remaining_spots == 0


@pytest.mark.asyncio
async def test_two_counters_on_one_event_keep_their_own_channels(db, async_db):
    event = db.add_event(max_participants=10)
    first_pushed, second_pushed = [], []

    async def on_first(snapshot):
        first_pushed.append(snapshot)

    async def on_second(snapshot):
        second_pushed.append(snapshot)

    first = RegistrationCounter(async_db, event["id"], 10, on_change=on_first, auto_close=False)
    second = RegistrationCounter(async_db, event["id"], 10, on_change=on_second, auto_close=False)
    await first.start(subscribe=True)
    await second.start(subscribe=True)

    assert len(async_db.channels) == 2
    assert first._channel.topic != second._channel.topic

    await first.stop()
    assert async_db.channels == [second._channel]

    db.add_registration(event["id"], "u1")
    second._channel.emit({"eventType": "INSERT"})
    await settle()

    assert second_pushed[-1].count == 1
    assert first_pushed[-1].count == 0
    await second.stop()
    assert async_db.channels == []
