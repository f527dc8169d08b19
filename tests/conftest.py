# tests/conftest.py

import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from starlette.testclient import TestClient

from app.main import app
from app.functions.main import app as functions_app
from app.database.supabase_client import get_supabase, get_service_supabase, get_async_supabase
from app.modules.auth.service import clear_auth_cache


# --- In-memory Supabase double ---
# Implements the slice of the supabase-py query builder the services use:
# select/insert/update/upsert/delete, eq/neq/in_ filters, order/limit/offset,
# single/maybe_single, exact counts, rpc, storage buckets and auth.get_user.

TABLE_DEFAULTS = {
    "events": {"status": "upcoming", "registration_status": "open", "featured": False, "max_participants": None},
    "event_registrations": {"attended": False, "status": "confirmed", "additional_info": None},
    "notifications": {"read": False, "type": "info", "event_id": None},
    "site_settings": {"setting_type": "text"},
    "team_members": {"display_order": 0},
    "event_gallery": {"display_order": 0, "caption": None},
}

_BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


class FakeResult:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.on_conflict = None
        self.columns = "*"
        self.count = None
        self.head = False
        self.filters = []
        self.order_by = []
        self._limit = None
        self._offset = 0
        self._single = False
        self._maybe_single = False

    # operations
    def select(self, columns="*", count=None, head=False):
        self.columns = columns
        self.count = count
        self.head = head
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.op = "update"
        self.payload = payload
        return self

    def upsert(self, payload, on_conflict=None):
        self.op = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        return self

    def delete(self):
        self.op = "delete"
        return self

    # filters and modifiers
    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.order_by.append((column, desc))
        return self

    def limit(self, size):
        self._limit = size
        return self

    def offset(self, size):
        self._offset = size
        return self

    def single(self):
        self._single = True
        return self

    def maybe_single(self):
        self._maybe_single = True
        return self

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def _project(self, row):
        if self.columns.strip() == "*":
            return dict(row)
        keys = [c.strip() for c in self.columns.split(",")]
        return {k: row.get(k) for k in keys}

    def execute(self):
        self.db.calls.append((self.table, self.op))
        if (self.table, self.op) in self.db.failures:
            raise Exception(f"simulated failure on {self.op} {self.table}")
        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            return FakeResult([dict(self.db.insert_row(self.table, item)) for item in payload])

        if self.op == "upsert":
            keys = [k.strip() for k in (self.on_conflict or "id").split(",")]
            existing = [r for r in rows if all(r.get(k) == self.payload.get(k) for k in keys)]
            if existing:
                existing[0].update(self.payload)
                return FakeResult([dict(existing[0])])
            return FakeResult([dict(self.db.insert_row(self.table, self.payload))])

        matched = [r for r in rows if self._matches(r)]

        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResult([dict(r) for r in matched])

        if self.op == "delete":
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
            return FakeResult([dict(r) for r in matched])

        for column, desc in reversed(self.order_by):
            matched = sorted(
                matched,
                key=lambda r: (r.get(column) is None, r.get(column) if r.get(column) is not None else 0),
                reverse=desc
            )
        total = len(matched)
        matched = matched[self._offset:]
        if self._limit is not None:
            matched = matched[:self._limit]
        data = [self._project(r) for r in matched]
        count = total if self.count else None

        if self.head:
            return FakeResult([], count)
        if self._maybe_single:
            if not data:
                return None
            return FakeResult(data[0], count)
        if self._single:
            if len(data) != 1:
                raise Exception("JSON object requested, multiple (or no) rows returned")
            return FakeResult(data[0], count)
        return FakeResult(data, count)


class FakeRpc:
    def __init__(self, db, name, params):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        self.db.calls.append((self.name, "rpc"))
        return FakeResult(self.db.rpc_handlers[self.name](self.db, self.params))


class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def upload(self, path, file, file_options=None):
        self.storage.objects[(self.name, path)] = (file, file_options or {})
        return SimpleNamespace(path=path)

    def get_public_url(self, path):
        return f"https://storage.test/{self.name}/{path}"

    def remove(self, paths):
        for path in paths:
            self.storage.objects.pop((self.name, path), None)
        return []


class FakeStorage:
    def __init__(self):
        self.objects = {}

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeAuth:
    def __init__(self):
        self.tokens = {}

    def get_user(self, jwt=None):
        user = self.tokens.get(jwt)
        if user is None:
            raise Exception("invalid JWT")
        return SimpleNamespace(user=user)


def register_for_event_rpc(db, params):
    """Python rendition of the register_for_event database function"""
    events = [e for e in db.tables.get("events", []) if e["id"] == params["p_event_id"]]
    if not events:
        return {"status": "not_found"}
    event = events[0]
    if event.get("status") != "upcoming" or (event.get("registration_status") or "open") != "open":
        return {"status": "closed"}
    registrations = [r for r in db.tables.get("event_registrations", []) if r["event_id"] == event["id"]]
    if any(r.get("user_id") == params["p_user_id"] for r in registrations):
        return {"status": "duplicate"}
    if event.get("max_participants") is not None and len(registrations) >= event["max_participants"]:
        return {"status": "full", "count": len(registrations)}
    row = db.insert_row("event_registrations", {
        "event_id": params["p_event_id"],
        "user_id": params["p_user_id"],
        "player_name": params["p_player_name"],
        "player_email": params["p_player_email"],
        "minecraft_username": params["p_minecraft_username"],
        "additional_info": params.get("p_additional_info"),
    })
    return {"status": "registered", "registration": dict(row)}


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.calls = []
        self.failures = set()
        self.rpc_handlers = {"register_for_event": register_for_event_rpc}
        self.storage = FakeStorage()
        self.auth = FakeAuth()
        self._clock = 0

    def insert_row(self, table, values):
        self._clock += 1
        row = dict(TABLE_DEFAULTS.get(table, {}))
        row["id"] = str(uuid.uuid4())
        row["created_at"] = (_BASE_TIME + timedelta(seconds=self._clock)).isoformat()
        row.update(values)
        self.tables.setdefault(table, []).append(row)
        return row

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params=None):
        return FakeRpc(self, name, params or {})

    def rows(self, table):
        return self.tables.get(table, [])

    # seeding helpers
    def add_user(self, email, role="user", token=None):
        user_id = str(uuid.uuid4())
        self.insert_row("profiles", {"id": user_id, "email": email})
        self.insert_row("user_roles", {"user_id": user_id, "role": role})
        if token:
            self.auth.tokens[token] = SimpleNamespace(
                id=user_id, email=email, user_metadata={}, app_metadata={},
                created_at=None, updated_at=None
            )
        return user_id

    def add_event(self, **values):
        values.setdefault("title", "Survival Games")
        return self.insert_row("events", values)

    def add_registration(self, event_id, user_id=None, **values):
        values.setdefault("player_name", "Steve")
        values.setdefault("player_email", "steve@example.com")
        values.setdefault("minecraft_username", "steve_mc")
        return self.insert_row("event_registrations", {"event_id": event_id, "user_id": user_id, **values})


class AsyncFakeQuery(FakeQuery):
    async def execute(self):
        return FakeQuery.execute(self)


class FakeChannel:
    def __init__(self, topic):
        self.topic = topic
        self.bindings = []
        self.subscribed = False
        self.loop = None

    def on_postgres_changes(self, event, callback, table="*", schema="public", filter=None):
        self.bindings.append({"event": event, "table": table, "schema": schema, "filter": filter, "callback": callback})
        return self

    async def subscribe(self, callback=None):
        self.subscribed = True
        self.loop = asyncio.get_running_loop()
        return self

    def _on_own_loop(self):
        try:
            return asyncio.get_running_loop() is self.loop
        except RuntimeError:
            return False

    def emit(self, payload=None):
        """Deliver a change to every binding, on the loop that subscribed the channel"""
        for binding in self.bindings:
            if self.loop is None or self._on_own_loop():
                binding["callback"](payload or {})
            else:
                self.loop.call_soon_threadsafe(binding["callback"], payload or {})


class FakeAsyncSupabase:
    """Async facade over the same in-memory tables, with realtime channels keyed by topic"""

    def __init__(self, db):
        self.db = db
        self.registry = {}

    @property
    def channels(self):
        return list(self.registry.values())

    def table(self, name):
        return AsyncFakeQuery(self.db, name)

    def channel(self, topic, params=None):
        channel = FakeChannel(topic)
        self.registry[topic] = channel
        return channel

    async def remove_channel(self, channel):
        self.registry.pop(channel.topic, None)


# --- Fixtures ---

@pytest.fixture(autouse=True)
def _reset_auth_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def async_db(db):
    return FakeAsyncSupabase(db)


@pytest.fixture
def admin_headers(db):
    db.add_user("admin@example.com", role="admin", token="admin-token")
    return {"Authorization": "Bearer admin-token"}


@pytest.fixture
def user_headers(db):
    db.add_user("player@example.com", role="user", token="user-token")
    return {"Authorization": "Bearer user-token"}


@pytest.fixture
def test_client(db, async_db):
    """
    TestClient for the main API with every Supabase client replaced by the in-memory double.
    Startup hooks do not run, so no realtime subscription is opened.
    """
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_service_supabase] = lambda: db
    app.dependency_overrides[get_async_supabase] = lambda: async_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def functions_client(db):
    functions_app.dependency_overrides[get_supabase] = lambda: db
    functions_app.dependency_overrides[get_service_supabase] = lambda: db
    yield TestClient(functions_app)
    functions_app.dependency_overrides.clear()
