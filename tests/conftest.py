from __future__ import annotations

import sys
import time
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
_SRC = _REPO_ROOT / "src"
if _SRC.exists():
    sys.path.insert(0, str(_SRC))

from fastapi.testclient import TestClient  # noqa: E402

from presley_site.api.main import create_app  # noqa: E402
from presley_site.config import Settings  # noqa: E402

SITE_ROOT = _REPO_ROOT / "site"


def future_ms(seconds: int = 3600) -> int:
    return int(time.time() * 1000) + seconds * 1000


@pytest.fixture
def settings() -> Settings:
    return Settings(site_root=SITE_ROOT)


@pytest.fixture
def client(settings: Settings, monkeypatch) -> TestClient:
    monkeypatch.delenv("SITE_HTTP_LOG", raising=False)
    return TestClient(create_app(settings))


@pytest.fixture
def logged_in(client: TestClient) -> TestClient:
    client.cookies.set("userCredentials", f"ana tajna {future_ms()}")
    return client
