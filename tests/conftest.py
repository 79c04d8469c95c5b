import os
import sys
from pathlib import Path

import pytest
import pytest_asyncio

# 1. Force the root directory into sys.path
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# 2. Test environment (must be set before the app is imported)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["DB_CREATE_ALL"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("STORAGE_URL", None)
os.environ.pop("STORAGE_SERVICE_KEY", None)

# 3. Now imports will work across all test files
from httpx import ASGITransport, AsyncClient  # noqa: E402

from voucher_api.core import rate_limit  # noqa: E402
from voucher_api.db.mixins import Base  # noqa: E402
from voucher_api.db.models import Agency, User, UserRole  # noqa: E402
from voucher_api.db.session import engine  # noqa: E402
from voucher_api.main import app  # noqa: E402
from tests.helpers import make_agency, make_user  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.create_all(bind=engine)
    rate_limit.rate_limiter.reset()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest_asyncio.fixture
async def client():
    # raise_app_exceptions=False so the 500 handler's response reaches the test
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def agency_a() -> Agency:
    return make_agency()


@pytest.fixture
def admin_a(agency_a) -> User:
    return make_user(email="admin@a.test", agency=agency_a)


@pytest.fixture
def superadmin() -> User:
    return make_user(email="root@platform.test", role=UserRole.SUPERADMIN, name="Root")
