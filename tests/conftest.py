"""Test configuration and fixtures."""
import itertools
import time

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from foresty.db.supabase import SupabaseError, get_supabase
from foresty.main import app

TABLES = (
    "profiles", "jobs", "feedback", "experience", "education",
    "skills", "profile_skills", "social_links",
)


def make_token(user_id, email, expires_in=3600, metadata=None):
    claims = {
        "sub": user_id,
        "email": email,
        "aud": "authenticated",
        "exp": int(time.time()) + expires_in,
        "user_metadata": metadata or {},
    }
    return jwt.encode(claims, "test-secret", algorithm="HS256")


class FakeBackend:
    """In-memory backend with the same surface as SupabaseClient."""

    def __init__(self):
        self.tables = {name: [] for name in TABLES}
        self.users = {}
        self.calls = []
        self.fail = set()
        self.token_ttl = 3600
        self._ids = itertools.count(1)

    # ---- helpers -------------------------------------------------

    def _check(self, op):
        if op in self.fail:
            raise SupabaseError(500, f"{op} failed")

    def _next_id(self, prefix):
        return f"{prefix}-{next(self._ids)}"

    def add_user(self, email, password="password123", user_type=None, confirmed=True, **profile):
        user_id = self._next_id("user")
        self.users[email] = {"id": user_id, "password": password, "confirmed": confirmed}
        self.tables["profiles"].append({
            "id": user_id,
            "email": email,
            "user_type": user_type,
            "first_name": profile.pop("first_name", "Test"),
            "last_name": profile.pop("last_name", "User"),
            "created_at": profile.pop("created_at", "2024-01-10T10:00:00+00:00"),
            **profile,
        })
        return user_id

    def add_row(self, table, **row):
        row.setdefault("id", self._next_id(table))
        self.tables[table].append(row)
        return row

    def calls_to(self, name):
        return [c for c in self.calls if c[0] == name]

    def _session(self, email):
        user = self.users[email]
        return {
            "access_token": make_token(user["id"], email, self.token_ttl),
            "refresh_token": f"refresh:{email}",
            "expires_in": self.token_ttl,
            "token_type": "bearer",
            "user": {"id": user["id"], "email": email},
        }

    @staticmethod
    def _matches(row, filters):
        return all(str(row.get(k)) == str(v) for k, v in (filters or {}).items())

    # ---- client surface ------------------------------------------

    def with_token(self, access_token):
        return self

    async def sign_in_with_password(self, email, password):
        self.calls.append(("sign_in", email, password))
        self._check("sign_in")
        user = self.users.get(email)
        if not user or user["password"] != password:
            raise SupabaseError(400, "Invalid login credentials")
        if not user["confirmed"]:
            raise SupabaseError(400, "Email not confirmed")
        return self._session(email)

    async def sign_up(self, email, password, metadata):
        self.calls.append(("sign_up", email, password, metadata))
        self._check("sign_up")
        if email in self.users:
            raise SupabaseError(422, "User already registered")
        self.users[email] = {"id": self._next_id("user"), "password": password, "confirmed": False}
        return {"id": self.users[email]["id"], "email": email}

    async def refresh_session(self, refresh_token):
        self.calls.append(("refresh", refresh_token))
        self._check("refresh")
        self.token_ttl = 3600
        return self._session(refresh_token.split(":", 1)[1])

    async def sign_out(self, access_token):
        self.calls.append(("sign_out", access_token))
        self._check("sign_out")

    async def select(self, table, columns="*", *, filters=None, order=None, desc=False, single=False):
        self.calls.append(("select", table, filters))
        self._check(f"select:{table}")
        rows = [dict(r) for r in self.tables[table] if self._matches(r, filters)]

        if "skills(name)" in columns:
            skills = {s["id"]: s for s in self.tables["skills"]}
            rows = [{"skills": {"name": skills[r["skill_id"]]["name"]}} for r in rows]
        if "profiles(" in columns:
            profiles = {p["id"]: p for p in self.tables["profiles"]}
            for r in rows:
                r["profiles"] = profiles.get(r.get("user_id"))

        if order:
            rows.sort(key=lambda r: str(r.get(order) or ""), reverse=desc)
        if single:
            return rows[0] if rows else None
        return rows

    async def insert(self, table, rows):
        self.calls.append(("insert", table, rows))
        self._check(f"insert:{table}")
        many = rows if isinstance(rows, list) else [rows]
        stored = []
        for row in many:
            row = dict(row)
            row.setdefault("id", self._next_id(table))
            row.setdefault("created_at", "2024-01-15T10:00:00+00:00")
            self.tables[table].append(row)
            stored.append(dict(row))
        return stored

    async def update(self, table, values, *, filters):
        self.calls.append(("update", table, values, filters))
        self._check(f"update:{table}")
        updated = []
        for row in self.tables[table]:
            if self._matches(row, filters):
                row.update(values)
                updated.append(dict(row))
        return updated

    async def delete(self, table, *, filters):
        self.calls.append(("delete", table, filters))
        self._check(f"delete:{table}")
        self.tables[table] = [r for r in self.tables[table] if not self._matches(r, filters)]

    async def rpc(self, function, params=None):
        self.calls.append(("rpc", function, params))
        self._check("rpc")

    async def close(self):
        pass


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def client(backend):
    """Create test client with the backend dependency overridden."""
    app.dependency_overrides[get_supabase] = lambda: backend

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def login(client, backend):
    """Sign a user in through the real sign-in form; returns the user id."""
    def _login(email, user_type=None, password="password123", **profile):
        user_id = backend.add_user(email, password, user_type=user_type, **profile)
        response = client.post(
            "/signin", data={"email": email, "password": password}, follow_redirects=False
        )
        assert response.status_code == 303
        return user_id
    return _login


@pytest.fixture
def sample_jobs(backend):
    jobs = [
        dict(title="Ingénieur forestier", company="Forêts du Nord", location="Jendouba",
             type="full-time", status="active", description="Gestion durable des forêts de chêne-liège",
             views=10, applications=3, created_at="2024-01-12T09:00:00+00:00"),
        dict(title="Stagiaire en conservation", company="Parc Ichkeul", location="Bizerte",
             type="internship", status="active", description="Suivi de la biodiversité",
             views=4, applications=1, created_at="2024-01-11T09:00:00+00:00"),
        dict(title="Technicien pépinière", company="Green Tunisia", location="Tunis",
             type="contract", status="inactive", description="Production de plants forestiers",
             views=0, applications=0, created_at="2024-01-10T09:00:00+00:00"),
        dict(title="Stage cartographie SIG", company="Forêts du Nord", location="Béja",
             type="internship", status="inactive", description="Cartographie des massifs",
             views=2, applications=0, created_at="2024-01-09T09:00:00+00:00"),
    ]
    return [backend.add_row("jobs", **job) for job in jobs]
