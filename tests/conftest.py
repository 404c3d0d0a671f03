"""
Shared test fixtures for profile-portal tests.

Provides an in-memory stand-in for the Supabase async client (auth surface
plus the handful of query-builder calls the portal makes) and a TestClient
wired to it.
"""

import asyncio
import copy
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from profile_portal.core.rate_limit import reset_limiter
from profile_portal.database.supabase_client import SupabaseClient
from profile_portal.modules.auth.provider import AuthProvider

ADA = SimpleNamespace(id="user-ada", email="ada@example.com")
GRACE = SimpleNamespace(id="user-grace", email="grace@example.com")
ALAN = SimpleNamespace(id="user-alan", email="alan@example.com")
PASSWORD = "correct horse"

ADA_ROW = {
    "id": ADA.id,
    "name": "Ada King",
    "profession": "Mathematician",
    "phone": "+44 20 7946 0000",
    "image_url": "https://example.com/ada.png",
    "social_links": {
        "linkedin": "https://linkedin.com/in/ada",
        "twitter": "",
        "github": "https://github.com/ada",
    },
    "updated_at": "2026-10-01T09:00:00Z",
}


class FakeAuthError(Exception):
    pass


def session_for(user) -> SimpleNamespace:
    return SimpleNamespace(user=user, access_token=f"token-{user.id}")


class FakeBackend:
    """State shared by every fake client, like the real remote project"""

    def __init__(self):
        self.accounts: Dict[str, tuple] = {}
        self.tables: Dict[str, List[Dict[str, Any]]] = {"profiles": [], "user_roles": []}
        self.failures: Dict[tuple, str] = {}
        self.role_gates: Dict[str, asyncio.Event] = {}
        self.upserts: List[Dict[str, Any]] = []
        self.clients: List["FakeSupabase"] = []
        self.session_error: Optional[str] = None
        self.sign_out_error: Optional[str] = None

    def add_user(self, user, role: Optional[str] = None, password: str = PASSWORD):
        self.accounts[user.email] = (password, user)
        if role is not None:
            self.tables["user_roles"].append({"user_id": user.id, "role": role})


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, backend: FakeBackend, table: str):
        self.backend = backend
        self.table = table
        self.op = None
        self.columns = "*"
        self.filters: List[tuple] = []
        self.payload = None
        self.is_single = False
        self.row_limit = None

    def select(self, columns: str = "*"):
        self.op = "select"
        self.columns = columns
        return self

    def upsert(self, payload: Dict[str, Any]):
        self.op = "upsert"
        self.payload = copy.deepcopy(payload)
        return self

    def eq(self, column: str, value: Any):
        self.filters.append((column, value))
        return self

    def single(self):
        self.is_single = True
        return self

    def limit(self, count: int):
        self.row_limit = count
        return self

    async def execute(self) -> FakeResponse:
        failure = self.backend.failures.get((self.table, self.op))
        if failure:
            raise APIError({"message": failure, "code": "42501", "hint": None, "details": None})
        if self.op == "upsert":
            return self._upsert()
        return await self._select()

    async def _select(self) -> FakeResponse:
        if self.table == "user_roles":
            for column, value in self.filters:
                gate = self.backend.role_gates.get(value)
                if column == "user_id" and gate is not None:
                    await gate.wait()
        rows = [
            row for row in self.backend.tables.get(self.table, [])
            if all(row.get(column) == value for column, value in self.filters)
        ]
        if self.columns != "*":
            wanted = [c.strip() for c in self.columns.split(",")]
            rows = [{c: row.get(c) for c in wanted} for row in rows]
        rows = copy.deepcopy(rows)
        if self.row_limit is not None:
            rows = rows[:self.row_limit]
        if self.is_single:
            if len(rows) != 1:
                raise APIError({
                    "message": "JSON object requested, multiple (or no) rows returned",
                    "code": "PGRST116",
                    "hint": None,
                    "details": f"The result contains {len(rows)} rows",
                })
            return FakeResponse(rows[0])
        return FakeResponse(rows)

    def _upsert(self) -> FakeResponse:
        self.backend.upserts.append(self.payload)
        rows = self.backend.tables.setdefault(self.table, [])
        rows[:] = [row for row in rows if row.get("id") != self.payload["id"]]
        rows.append(copy.deepcopy(self.payload))
        return FakeResponse([copy.deepcopy(self.payload)])


class FakeSubscription:
    def __init__(self, auth: "FakeAuth", key: int):
        self.auth = auth
        self.key = key
        self.unsubscribe_calls = 0

    def unsubscribe(self):
        self.unsubscribe_calls += 1
        self.auth.subscribers.pop(self.key, None)


class FakeAuth:
    def __init__(self, backend: FakeBackend):
        self.backend = backend
        self.session = None
        self.subscribers: Dict[int, Any] = {}
        self.subscriptions: List[FakeSubscription] = []

    def on_auth_state_change(self, callback):
        key = len(self.subscriptions)
        self.subscribers[key] = callback
        subscription = FakeSubscription(self, key)
        self.subscriptions.append(subscription)
        return subscription

    def emit(self, event: str, session):
        for callback in list(self.subscribers.values()):
            callback(event, session)

    async def get_session(self):
        if self.backend.session_error:
            raise FakeAuthError(self.backend.session_error)
        return self.session

    async def sign_in_with_password(self, credentials: Dict[str, str]):
        account = self.backend.accounts.get(credentials["email"])
        if account is None or account[0] != credentials["password"]:
            raise FakeAuthError("Invalid login credentials")
        user = account[1]
        self.session = session_for(user)
        self.emit("SIGNED_IN", self.session)
        return SimpleNamespace(user=user, session=self.session)

    async def sign_out(self):
        if self.backend.sign_out_error:
            raise FakeAuthError(self.backend.sign_out_error)
        self.session = None
        self.emit("SIGNED_OUT", None)


class FakeSupabase:
    def __init__(self, backend: FakeBackend):
        self.backend = backend
        self.auth = FakeAuth(backend)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self.backend, name)


@pytest.fixture
def backend() -> FakeBackend:
    fake = FakeBackend()
    fake.add_user(ADA, role="member")
    fake.add_user(GRACE, role="admin")
    fake.add_user(ALAN)
    fake.tables["profiles"].append(copy.deepcopy(ADA_ROW))
    return fake


@pytest.fixture
def supabase(backend) -> FakeSupabase:
    return FakeSupabase(backend)


@pytest.fixture(autouse=True)
def clean_limiter():
    reset_limiter()
    yield
    reset_limiter()


@pytest.fixture
def client(backend, monkeypatch):
    async def create_session_client():
        fake = FakeSupabase(backend)
        backend.clients.append(fake)
        return fake

    monkeypatch.setattr(SupabaseClient, "create_session_client", create_session_client)

    from profile_portal.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
async def async_client(backend):
    """Client driven on the test's own event loop, so a request can be left pending"""
    from profile_portal.main import app

    async def factory():
        fake = FakeSupabase(backend)
        backend.clients.append(fake)
        return fake

    app.state.auth_provider = AuthProvider(factory)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http
    await app.state.auth_provider.close()
    app.state.auth_provider = None


def sign_in(client: TestClient, user, password: str = PASSWORD):
    return client.post(
        "/login",
        data={"email": user.email, "password": password},
        follow_redirects=False,
    )
