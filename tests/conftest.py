"""
Shared fixtures.

The Supabase dependencies are replaced with an in-memory fake implementing
the slice of the client API the portal uses: table queries (select / insert /
update / delete with eq, in_, order, limit), rpc, auth (+ admin) and storage.
User-scoped clients enforce the complaints department policy the way the
real RLS policy does.

Run with: pytest -v
"""

import os

os.environ.setdefault("SUPABASE_URL", "https://fake.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")
os.environ["RATE_LIMIT_ENABLED"] = "false"

import copy
import itertools
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from portal.main import app
from portal.database.schema import SchemaBootstrap
from portal.database.supabase_client import (
    get_supabase, get_anon_client_factory, get_user_client_factory
)

_clock = itertools.count()


def _timestamp() -> str:
    # Strictly increasing so "newest first" is deterministic
    moment = datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=next(_clock))
    return moment.isoformat()


TABLE_DEFAULTS = {
    "roles": {},
    "users": {"role_id": None, "is_active": True, "preferences": {}},
    "complaints": {
        "role_id": None,
        "priority": "Medium",
        "attachments_urls": [],
        "is_anonymous": False,
        "status": "open",
        "assigned_to": None,
    },
}

UNIQUE_KEYS = {
    "roles": [("role_name", "department_name")],
    "users": [("email",)],
}


class FakeAPIError(Exception):
    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        self.code = code


class FakeAuthApiError(Exception):
    """Shape of the auth client's API error: message plus HTTP status."""

    def __init__(self, message, status, code=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeDatabase:
    def __init__(self):
        self.tables = {"roles": [], "users": [], "complaints": []}
        self.rpc_calls = []
        self.failures = {}

    def fail(self, table, op, error=None):
        self.failures[(table, op)] = error or FakeAPIError(f"{op} on {table} failed")

    def rows(self, table, **match):
        return [r for r in self.tables[table] if all(r.get(k) == v for k, v in match.items())]


class FakeQuery:
    def __init__(self, db, table, scoped=False, acting_user=None):
        self.db = db
        self.table = table
        self.scoped = scoped
        self.acting_user = acting_user
        self._op = "select"
        self._columns = "*"
        self._payload = None
        self._filters = []
        self._order = None
        self._limit = None

    def select(self, columns="*"):
        self._columns = columns
        return self

    def insert(self, payload):
        self._op = "insert"
        self._payload = payload
        return self

    def update(self, payload):
        self._op = "update"
        self._payload = payload
        return self

    def delete(self):
        self._op = "delete"
        return self

    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self._filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, size):
        self._limit = size
        return self

    def execute(self):
        failure = self.db.failures.get((self.table, self._op))
        if failure:
            raise failure
        rows = self.db.tables.setdefault(self.table, [])
        if self._op == "insert":
            return FakeResponse(self._insert(rows))

        matched = [r for r in rows if all(f(r) for f in self._filters)]
        if self._op == "update":
            for row in matched:
                row.update(copy.deepcopy(self._payload))
            return FakeResponse([copy.deepcopy(r) for r in matched])
        if self._op == "delete":
            for row in matched:
                rows.remove(row)
            return FakeResponse([copy.deepcopy(r) for r in matched])

        if self._order:
            column, desc = self._order
            matched = sorted(matched, key=lambda r: str(r.get(column) or ""), reverse=desc)
        if self._limit is not None:
            matched = matched[:self._limit]
        return FakeResponse([self._project(r) for r in matched])

    def _insert(self, rows):
        items = self._payload if isinstance(self._payload, list) else [self._payload]
        created = []
        for item in items:
            now = _timestamp()
            row = {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
            row.update(copy.deepcopy(TABLE_DEFAULTS.get(self.table, {})))
            row.update(copy.deepcopy(item))
            self._check_unique(rows, row)
            if self.scoped:
                self._check_insert_policy(row)
            created.append(row)
        rows.extend(created)
        return [copy.deepcopy(r) for r in created]

    def _check_unique(self, rows, row):
        for columns in UNIQUE_KEYS.get(self.table, []):
            if any(all(r.get(c) == row.get(c) for c in columns) for r in rows):
                raise FakeAPIError(
                    f'duplicate key value violates unique constraint on {self.table} {columns}', "23505"
                )

    def _check_insert_policy(self, row):
        if self.table != "complaints":
            return
        profile = next((u for u in self.db.tables["users"] if u["auth_user_id"] == self.acting_user), None)
        role = None
        if profile is not None:
            role = next((r for r in self.db.tables["roles"] if r["id"] == profile["role_id"]), None)
        allowed = (
            profile is not None
            and role is not None
            and profile["id"] == row.get("user_id")
            and role["department_name"] == row.get("department_name")
        )
        if not allowed:
            raise FakeAPIError('new row violates row-level security policy for table "complaints"', "42501")

    def _project(self, row):
        result = copy.deepcopy(row)
        if "roles(" in self._columns:
            role = next((r for r in self.db.tables["roles"] if r["id"] == row.get("role_id")), None)
            result["roles"] = (
                {k: role[k] for k in ("id", "role_name", "department_name")} if role else None
            )
        return result


class FakeRPC:
    def __init__(self, db, fn, params):
        self.db = db
        self.fn = fn
        self.params = params

    def execute(self):
        failure = self.db.failures.get(("rpc", self.fn))
        if failure:
            raise failure
        self.db.rpc_calls.append((self.fn, self.params))
        return FakeResponse(None)


class FakeAuthAdmin:
    def __init__(self, auth):
        self.auth = auth

    def create_user(self, attributes):
        if self.auth.fail_create:
            raise self.auth.fail_create
        email = attributes["email"].lower()
        if any(u.email == email for u in self.auth.users.values()):
            raise Exception("A user with this email address has already been registered")
        user = SimpleNamespace(
            id=str(uuid.uuid4()),
            email=email,
            user_metadata=attributes.get("user_metadata", {}),
            email_confirmed=attributes.get("email_confirm", False),
        )
        self.auth.users[user.id] = user
        self.auth.passwords[user.id] = attributes["password"]
        return SimpleNamespace(user=user)

    def delete_user(self, id, should_soft_delete=False):
        if self.auth.fail_delete:
            raise self.auth.fail_delete
        self.auth.users.pop(id, None)
        self.auth.passwords.pop(id, None)
        self.auth.deleted.append(id)
        # users.auth_user_id ON DELETE CASCADE
        self.auth.db.tables["users"] = [
            u for u in self.auth.db.tables["users"] if u.get("auth_user_id") != id
        ]

    def update_user_by_id(self, uid, attributes):
        if uid not in self.auth.users:
            raise Exception("User not found")
        if "password" in attributes:
            self.auth.passwords[uid] = attributes["password"]
        return SimpleNamespace(user=self.auth.users[uid])

    def sign_out(self, jwt, scope="global"):
        self.auth.tokens.pop(jwt, None)


class FakeAuth:
    def __init__(self, db):
        self.db = db
        self.users = {}
        self.passwords = {}
        self.tokens = {}
        self.deleted = []
        self.fail_create = None
        self.fail_delete = None
        self.fail_get_user = None
        self.fail_sign_in = None
        self.admin = FakeAuthAdmin(self)

    def sign_in_with_password(self, credentials):
        if self.fail_sign_in:
            raise self.fail_sign_in
        email = credentials["email"].lower()
        user = next((u for u in self.users.values() if u.email == email), None)
        if user is None or self.passwords[user.id] != credentials["password"]:
            raise Exception("Invalid login credentials")
        token = f"token-{uuid.uuid4().hex}"
        self.tokens[token] = user.id
        return SimpleNamespace(user=user, session=SimpleNamespace(access_token=token))

    def get_user(self, jwt=None):
        if self.fail_get_user:
            raise self.fail_get_user
        if jwt not in self.tokens:
            raise FakeAuthApiError("invalid JWT: unable to parse or verify signature", 403, "bad_jwt")
        return SimpleNamespace(user=self.users[self.tokens[jwt]])


class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def upload(self, path, file, file_options=None):
        if self.storage.fail_upload:
            raise self.storage.fail_upload
        if (self.name, path) in self.storage.objects:
            raise Exception("The resource already exists")
        self.storage.objects[(self.name, path)] = {"content": file, "options": file_options}

    def get_public_url(self, path, options=None):
        return f"https://fake.supabase.co/storage/v1/object/public/{self.name}/{path}"

    def remove(self, paths):
        for path in paths:
            self.storage.objects.pop((self.name, path), None)
        return [{"name": p} for p in paths]


class FakeStorage:
    def __init__(self):
        self.buckets = {}
        self.objects = {}
        self.fail_upload = None

    def list_buckets(self):
        return [SimpleNamespace(id=name, name=name) for name in self.buckets]

    def create_bucket(self, id, name=None, options=None):
        self.buckets[id] = options or {}

    def from_(self, id):
        return FakeBucket(self, id)


class FakeSupabase:
    def __init__(self, db, auth, storage, scoped=False, acting_user=None):
        self.db = db
        self.auth = auth
        self.storage = storage
        self.scoped = scoped
        self.acting_user = acting_user

    def table(self, name):
        return FakeQuery(self.db, name, scoped=self.scoped, acting_user=self.acting_user)

    def rpc(self, fn, params=None):
        return FakeRPC(self.db, fn, params)


class FakeBackend:
    """One fake Supabase project: database, auth and storage shared by every client."""

    def __init__(self):
        self.db = FakeDatabase()
        self.auth = FakeAuth(self.db)
        self.storage = FakeStorage()
        self.admin = FakeSupabase(self.db, self.auth, self.storage)
        self.user_clients = []

    def anon_client(self):
        return FakeSupabase(self.db, self.auth, self.storage)

    def user_client(self, token):
        client = FakeSupabase(
            self.db, self.auth, self.storage, scoped=True, acting_user=self.auth.tokens.get(token)
        )
        self.user_clients.append(client)
        return client


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def client(backend):
    SchemaBootstrap.reset()
    app.dependency_overrides[get_supabase] = lambda: backend.admin
    app.dependency_overrides[get_anon_client_factory] = lambda: backend.anon_client
    app.dependency_overrides[get_user_client_factory] = lambda: backend.user_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    SchemaBootstrap.reset()


@pytest.fixture
def signup(client):
    """Sign a user up through the API; returns (access_token, user dict)."""

    def _signup(email="a@x.com", password="secret1", name="A", role="agent", department="BPO"):
        response = client.post("/api/auth/signup", json={
            "email": email,
            "password": password,
            "name": name,
            "roleName": role,
            "departmentName": department,
        })
        assert response.status_code == 201, response.text
        body = response.json()
        return body["access_token"], body["user"]

    return _signup


@pytest.fixture
def bearer():
    def _bearer(token):
        return {"Authorization": f"Bearer {token}"}

    return _bearer


@pytest.fixture
def auth_api_error():
    """Builds errors shaped like the auth client's API errors."""
    return FakeAuthApiError
