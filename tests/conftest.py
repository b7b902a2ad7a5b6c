"""
In-memory stand-in for the Supabase client.

Only the calls the app makes are modelled: the auth methods used by
AuthContext/AuthService and a PostgREST-style query builder over plain
dict rows. Joined selects are not resolved; seed nested rows instead.
"""

from types import SimpleNamespace
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

from app.core.rate_limit import limiter
from app.database.supabase_client import get_session_supabase, get_supabase
from app.main import app
from app.modules.auth.context import SUPABASE_STORAGE_KEY
from app.modules.auth.service import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE


class FakeAPIError(Exception):
    def __init__(self, message, code=None):
        super().__init__(message)
        self.code = code


class FakeAuthError(Exception):
    pass


class FakeResponse:
    def __init__(self, data=None, count=None):
        self.data = data
        self.count = count


class FakeDatabase:
    def __init__(self):
        self.tables = {}
        self.failures = {}
        self.calls = []
        self._next_id = 1000

    def seed(self, table, *rows):
        self.tables.setdefault(table, []).extend(dict(row) for row in rows)

    def next_id(self):
        self._next_id += 1
        return self._next_id

    def writes(self, table):
        return [call for call in self.calls if call[0] == table and call[1] in ("insert", "update")]


class FakeQuery:
    def __init__(self, db: FakeDatabase, table: str):
        self.db = db
        self.table = table
        self.mode = "select"
        self.payload = None
        self.filters = []
        self.ordering = None
        self.row_limit = None
        self.single_mode = None
        self.count = None
        self.head = False

    def select(self, *columns, count=None, head=None):
        self.count = count
        self.head = bool(head)
        return self

    def insert(self, payload):
        self.mode = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.mode = "update"
        self.payload = payload
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) >= value)
        return self

    def order(self, column, desc=False):
        self.ordering = (column, desc)
        return self

    def limit(self, size):
        self.row_limit = size
        return self

    def single(self):
        self.single_mode = "single"
        return self

    def maybe_single(self):
        self.single_mode = "maybe"
        return self

    def _matching(self, rows):
        return [row for row in rows if all(f(row) for f in self.filters)]

    def execute(self):
        self.db.calls.append((self.table, self.mode, self.payload))
        if self.table in self.db.failures:
            raise FakeAPIError(self.db.failures[self.table], code="XX000")
        rows = self.db.tables.setdefault(self.table, [])

        if self.mode == "insert":
            payloads = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for payload in payloads:
                row = dict(payload)
                if "id" in row and any(existing.get("id") == row["id"] for existing in rows):
                    raise FakeAPIError(
                        'duplicate key value violates unique constraint "%s_pkey"' % self.table,
                        code="23505",
                    )
                row.setdefault("id", self.db.next_id())
                rows.append(row)
                inserted.append(dict(row))
            return FakeResponse(inserted)

        if self.mode == "update":
            updated = []
            for row in self._matching(rows):
                row.update(self.payload)
                updated.append(dict(row))
            return FakeResponse(updated)

        matching = [dict(row) for row in self._matching(rows)]
        if self.ordering:
            column, desc = self.ordering
            present = [row for row in matching if row.get(column) is not None]
            missing = [row for row in matching if row.get(column) is None]
            present = sorted(present, key=lambda row: row[column], reverse=desc)
            # Postgres default: NULLS FIRST for DESC, NULLS LAST for ASC
            matching = missing + present if desc else present + missing
        if self.row_limit is not None:
            matching = matching[:self.row_limit]
        if self.head:
            return FakeResponse(None, count=len(matching))
        if self.single_mode == "single":
            if len(matching) != 1:
                raise FakeAPIError("JSON object requested, multiple (or no) rows returned", code="PGRST116")
            return FakeResponse(matching[0])
        if self.single_mode == "maybe":
            return FakeResponse(matching[0]) if matching else None
        return FakeResponse(matching, count=len(matching) if self.count else None)


class FakeAuthDirectory:
    """Users, sessions and OAuth codes shared by every client of one backend"""

    def __init__(self):
        self.users_by_email = {}
        self.sessions = {}
        self.codes = {}
        self.auto_confirm = True
        self.sign_out_calls = 0
        self.oauth_requests = []
        self.exchange_params = []
        self.reset_requests = []
        self.expired = set()
        self._issued = 0

    def add_user(self, user_id, email, password="secret", metadata=None):
        user = SimpleNamespace(id=user_id, email=email, user_metadata=metadata or {}, app_metadata={})
        self.users_by_email[email] = (password, user)
        return self.issue_session(user)

    def issue_session(self, user):
        self._issued += 1
        session = SimpleNamespace(
            access_token=f"access-{user.id}-{self._issued}",
            refresh_token=f"refresh-{user.id}-{self._issued}",
            user=user,
        )
        self.sessions[session.access_token] = session
        return session

    def expire(self, session):
        """The access token is past its expiry; restoring it refreshes and rotates both tokens"""
        self.expired.add(session.access_token)

    def add_code(self, code, session):
        self.codes[code] = session


class FakeSubscription:
    def __init__(self, auth, callback):
        self.auth = auth
        self.callback = callback

    def unsubscribe(self):
        if self.callback in self.auth.subscribers:
            self.auth.subscribers.remove(self.callback)


class FakeAuth:
    def __init__(self, directory: FakeAuthDirectory, storage):
        self.directory = directory
        self.storage = storage
        self.current = None
        self.subscribers = []

    def notify(self, event, session):
        for callback in list(self.subscribers):
            callback(event, session)

    def on_auth_state_change(self, callback):
        self.subscribers.append(callback)
        return FakeSubscription(self, callback)

    def get_session(self):
        return self.current

    def set_session(self, access_token, refresh_token):
        session = self.directory.sessions.get(access_token)
        if session is None or session.refresh_token != refresh_token:
            raise FakeAuthError("Invalid Refresh Token: Refresh Token Not Found")
        if access_token in self.directory.expired:
            del self.directory.sessions[access_token]
            session = self.directory.issue_session(session.user)
        self.current = session
        self.notify("TOKEN_REFRESHED", session)
        return SimpleNamespace(session=session, user=session.user)

    def sign_out(self):
        self.directory.sign_out_calls += 1
        self.current = None
        self.notify("SIGNED_OUT", None)

    def sign_in_with_password(self, credentials):
        entry = self.directory.users_by_email.get(credentials["email"])
        if entry is None or entry[0] != credentials["password"]:
            raise FakeAuthError("Invalid login credentials")
        session = self.directory.issue_session(entry[1])
        self.current = session
        self.notify("SIGNED_IN", session)
        return SimpleNamespace(user=session.user, session=session)

    def sign_up(self, credentials):
        email = credentials["email"]
        if email in self.directory.users_by_email:
            raise FakeAuthError("User already registered")
        metadata = credentials.get("options", {}).get("data", {})
        user_id = f"user-{len(self.directory.users_by_email) + 1}"
        session = self.directory.add_user(user_id, email, credentials["password"], metadata)
        if not self.directory.auto_confirm:
            return SimpleNamespace(user=session.user, session=None)
        self.current = session
        self.notify("SIGNED_IN", session)
        return SimpleNamespace(user=session.user, session=session)

    def sign_in_with_oauth(self, credentials):
        self.directory.oauth_requests.append(credentials)
        self.storage.set_item(f"{SUPABASE_STORAGE_KEY}-code-verifier", "verifier-123")
        redirect_to = credentials["options"]["redirect_to"]
        return SimpleNamespace(
            provider=credentials["provider"],
            url="https://accounts.google.test/o/oauth2/auth?redirect_to=" + quote(redirect_to, safe=""),
        )

    def exchange_code_for_session(self, params):
        self.directory.exchange_params.append(params)
        session = self.directory.codes.get(params["auth_code"])
        if session is None:
            raise FakeAuthError("invalid flow state, no valid flow state found")
        self.current = session
        return SimpleNamespace(session=session, user=session.user)

    def refresh_session(self):
        if self.current is None:
            raise FakeAuthError("Auth session missing!")
        session = self.directory.issue_session(self.current.user)
        self.current = session
        self.notify("TOKEN_REFRESHED", session)
        return SimpleNamespace(session=session, user=session.user)

    def reset_password_for_email(self, email, options):
        self.directory.reset_requests.append((email, options))


class FakeStorage:
    def __init__(self):
        self.items = {}

    def get_item(self, key):
        return self.items.get(key)

    def set_item(self, key, value):
        self.items[key] = value


class FakeSupabase:
    def __init__(self, db: FakeDatabase, directory: FakeAuthDirectory):
        self.db = db
        self.options = SimpleNamespace(storage=FakeStorage())
        self.auth = FakeAuth(directory, self.options.storage)

    def table(self, name):
        return FakeQuery(self.db, name)


class FakeBackend:
    def __init__(self):
        self.db = FakeDatabase()
        self.directory = FakeAuthDirectory()
        self.shared = FakeSupabase(self.db, self.directory)

    def client(self) -> FakeSupabase:
        """A fresh client: shared data, no session, no subscribers"""
        return FakeSupabase(self.db, self.directory)

    def add_student(self, user_id="user-1", email="ana@school.edu", with_profile=True, **metadata):
        session = self.directory.add_user(user_id, email, metadata=metadata)
        if with_profile:
            self.db.seed("user_profiles", {
                "id": user_id,
                "first_name": "Ana",
                "last_name": "Reyes",
                "student_id": "2021-0001",
                "course_id": 1,
                "year_level": 3,
                "role_id": 1,
                "course": {"course_name": "BS Information Technology"},
            })
        return session


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def client(backend):
    app.dependency_overrides[get_supabase] = lambda: backend.shared
    app.dependency_overrides[get_session_supabase] = backend.client
    limiter.enabled = False
    with TestClient(app) as test_client:
        yield test_client
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture
def sign_in(client):
    """Put a session in the test client's cookie jar"""
    def _sign_in(session):
        client.cookies.set(ACCESS_TOKEN_COOKIE, session.access_token)
        client.cookies.set(REFRESH_TOKEN_COOKIE, session.refresh_token)
    return _sign_in
