import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("AUTO_CREATE_SCHEMA", "false")

import httpx
import pytest

from academy.db.session import get_db
from academy.main import app


class FakeSession:
    """Stands in for AsyncSession: tracks writes staged by fake repositories.

    ``pending`` is what the current transaction wrote, ``committed`` what
    survived. Rollback throws pending writes away, like the database would.
    """

    def __init__(self):
        self.pending = []
        self.committed = []
        self.commits = 0
        self.rollbacks = 0

    def stage(self, kind, **values):
        self.pending.append((kind, values))

    def rows(self, kind):
        return [values for k, values in self.committed if k == kind]

    async def commit(self):
        self.commits += 1
        self.committed.extend(self.pending)
        self.pending.clear()

    async def rollback(self):
        self.rollbacks += 1
        self.pending.clear()

    async def close(self):
        pass


@pytest.fixture
def fake_db():
    return FakeSession()


@pytest.fixture
async def client(fake_db):
    async def override_get_db():
        yield fake_db

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
