# conftest.py
import os

# must be in place before cafe.config builds its Settings
os.environ.setdefault("APP_SECRET", "test-secret")
os.environ.setdefault("APP_ENV", "dev")
os.environ["DB_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from cafe.db import Base, SessionLocal, engine
from cafe.main import app

BASE = "http://testserver"

@pytest.fixture(scope="session")
def base_url():
    return BASE

@pytest.fixture(scope="session")
def client():
    Base.metadata.create_all(bind=engine)
    with TestClient(app) as c:
        yield c

@pytest.fixture()
def db(client):
    s = SessionLocal()
    try:
        yield s
    finally:
        s.rollback()
        s.close()

@pytest.fixture(scope="session")
def auth_headers(client, base_url):
    # ensure server is up
    r = client.get(f"{base_url}/healthz")
    assert r.status_code == 200, f"/healthz failed: {r.text}"

    # seed dev data
    r = client.post(f"{base_url}/admin/dev-bootstrap")
    assert r.status_code == 200, f"/admin/dev-bootstrap failed: {r.text}"
    boot = r.json()

    r = client.post(f"{base_url}/auth/login", json={"email": boot["admin_email"], "password": boot["admin_password"]})
    assert r.status_code == 200, f"/auth/login failed: {r.text}"
    tok = r.json()["access_token"]
    return {"Authorization": f"Bearer {tok}"}

@pytest.fixture(scope="session")
def menu_ids(client, base_url, auth_headers):
    return client.post(f"{base_url}/admin/dev-bootstrap").json()["menu"]

@pytest.fixture()
def tax_settings(client, base_url, auth_headers):
    """Set billing settings for one test and put the defaults back afterwards."""
    def _set(**body):
        r = client.put(f"{base_url}/billing/settings", headers=auth_headers, json=body)
        assert r.status_code == 200, r.text
        return r.json()["settings"]
    yield _set
    _set(cgst_rate=2.5, sgst_rate=2.5, tax_calculation_method="onSubtotal")

@pytest.fixture(scope="session")
def rng_suffix():
    import random, string
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
