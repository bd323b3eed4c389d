"""
Pytest configuration and shared fixtures for authgate tests.

The environment is configured before anything from ``authgate`` is imported,
because settings, the engine and the vault are built at import time.
"""
import base64
import os
import tempfile
from pathlib import Path

_DB_DIR = Path(tempfile.mkdtemp(prefix="authgate-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'authgate.db'}"
os.environ["JWT_SECRET"] = "test-jwt-secret-key-for-testing-only-0123456789"
os.environ["TOTP_ENCRYPTION_KEY"] = base64.b64encode(os.urandom(32)).decode()
os.environ["TOTP_ISSUER"] = "TestIssuer"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["TOTP_MAX_ATTEMPTS"] = "5"
os.environ["PENDING_ENROLLMENT_TTL_SECONDS"] = "600"

import pyotp
import pytest
from fastapi.testclient import TestClient

from authgate.database import Base, engine
from authgate.main import app
from authgate.models import totp as _totp  # noqa: F401
from authgate.models import user as _user  # noqa: F401
from authgate.services.enrollment import EnrollmentService
from authgate.services.login import LoginService
from authgate.services.pending import InMemoryPendingStore, pending_store
from authgate.services.throttle import AttemptLimiter, attempt_limiter
from authgate.services.tokens import create_access_token
from authgate.services.totp_store import TotpStore
from authgate.services.users import user_store
from authgate.services.vault import vault
from helpers import PASSWORD



# ============================================
# State
# ============================================

@pytest.fixture(autouse=True)
def clean_state():
    """Fresh tables and empty in-process stores for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    pending_store.clear()
    attempt_limiter.clear()
    yield
    pending_store.clear()
    attempt_limiter.clear()


# ============================================
# Accounts
# ============================================

@pytest.fixture
def account():
    return user_store.create_user("alice", PASSWORD, email="alice@example.com")


@pytest.fixture
def other_account():
    return user_store.create_user("bob", PASSWORD)


@pytest.fixture
def auth_headers(account):
    credential = create_access_token(account.id, account.username)
    return {"Authorization": f"Bearer {credential.access_token}"}


# ============================================
# Services wired to fresh collaborators
# ============================================

@pytest.fixture
def store():
    return TotpStore()


@pytest.fixture
def pending():
    return InMemoryPendingStore(ttl_seconds=600)


@pytest.fixture
def limiter():
    return AttemptLimiter(max_attempts=5, window_seconds=900)


@pytest.fixture
def enrollment(store, pending, limiter):
    return EnrollmentService(user_store, store, pending, vault, limiter)


@pytest.fixture
def login(store, limiter):
    return LoginService(user_store, store, vault, limiter)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def enabled_totp(account, enrollment):
    """Enable TOTP for ``account``; returns the plaintext secret and backup codes."""
    setup = enrollment.begin(account.id)
    enrollment.enable(account.id, pyotp.TOTP(setup.secret).now())
    return setup.secret, setup.backup_codes
