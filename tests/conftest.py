# Shared pytest fixtures
from __future__ import annotations

import asyncio
import os
import tempfile
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path

import pytest

from contact_import.models.contact import StoredContact

FIXED_NOW = datetime(2025, 1, 15, 9, 30, 0, tzinfo=UTC)


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("PGDSN", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """default_method: csv
contacts_table: zero_contacts
error_log_dir: ./logs
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def sample_csv() -> str:
    return (
        "name,phone,email,role,organization\n"
        "ESIC Regional Office Mumbai,9876543210,esic.mumbai@gov.in,payer_contact,ESIC\n"
        "CGHS Delhi Office,9876543211,cghs.delhi@nic.in,payer_contact,CGHS\n"
        "Hospital Claims Department,9876543212,claims@hospital.com,hospital_contact,Main Hospital\n"
    )


@pytest.fixture()
def mock_db_mode(monkeypatch):
    # CLI を in-memory store で動かす
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")


class FakeCreator:
    """Awaitable create() double recording call order and concurrency."""

    def __init__(self, reject: set[str] | None = None, raise_for: dict[str, Exception] | None = None):
        self.reject = reject or set()
        self.raise_for = raise_for or {}
        self.calls: list[dict[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, fields: Mapping[str, str]) -> StoredContact | None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            self.calls.append(dict(fields))
            name = fields["name"]
            if name in self.raise_for:
                raise self.raise_for[name]
            if name in self.reject:
                return None
            return StoredContact(
                id=str(len(self.calls)),
                name=name,
                phone=fields["phone"],
                email=fields["email"],
                role=fields["role"],
                organization=fields["organization"],
                notes=fields["notes"],
                created_at=FIXED_NOW,
            )
        finally:
            self.in_flight -= 1


@pytest.fixture()
def fake_creator() -> FakeCreator:
    return FakeCreator()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # 開発者の .env / 環境変数がテストに混入しないようにする
    for key in ("DISABLE_DB_CONNECT",):
        if key in os.environ:
            monkeypatch.delenv(key)
    yield


@pytest.fixture()
def make_creator():
    return FakeCreator
