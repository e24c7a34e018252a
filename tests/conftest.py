import os
import tempfile
from pathlib import Path

import pytest
from sqlalchemy import create_engine, delete, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.engine import make_url
from sqlmodel import Session

DEFAULT_TEST_DB_URL = f"sqlite:///{Path(tempfile.gettempdir()) / 'hintstore-test.db'}"
TEST_DB_URL = os.getenv("TEST_DB_URL", DEFAULT_TEST_DB_URL)
os.environ["DATABASE_URL"] = TEST_DB_URL

from hintstore.core import clock
from hintstore.core.config import settings
from hintstore.db.init_db import init_db
from hintstore.db.session import engine
from hintstore.models.notification_hint import NotificationHint

settings.DATABASE_URL = TEST_DB_URL


def _ensure_mysql_database(url: str) -> None:
    parsed_url = make_url(url)
    if not parsed_url.drivername.startswith("mysql"):
        return
    database = parsed_url.database
    if not database:
        raise RuntimeError("TEST_DB_URL must include a database name.")
    test_engine = create_engine(parsed_url, pool_pre_ping=True)
    try:
        with test_engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            return
    except OperationalError as exc:
        if "Unknown database" not in str(exc):
            raise
    finally:
        test_engine.dispose()

    admin_url = os.getenv("TEST_DB_ADMIN_URL")
    if admin_url:
        admin_engine = create_engine(admin_url, pool_pre_ping=True)
    else:
        root_password = os.getenv("MYSQL_ROOT_PASSWORD", "")
        server_url = parsed_url.set(
            username="root" if root_password else parsed_url.username,
            password=root_password or parsed_url.password,
            database="mysql",
        )
        admin_engine = create_engine(server_url, pool_pre_ping=True)
    with admin_engine.connect() as connection:
        connection.execute(
            text(
                f"CREATE DATABASE IF NOT EXISTS `{database}` "
                "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
            )
        )
    admin_engine.dispose()


class FrozenClock:
    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis


@pytest.fixture(autouse=True, scope="session")
def _configure_test_database():
    _ensure_mysql_database(TEST_DB_URL)
    init_db(drop_all=True)
    yield


@pytest.fixture(autouse=True)
def _clean_hints():
    with Session(engine) as session:
        session.exec(delete(NotificationHint))
        session.commit()
    yield


@pytest.fixture
def session():
    with Session(engine) as session:
        yield session


@pytest.fixture
def frozen_clock(monkeypatch):
    frozen = FrozenClock()
    monkeypatch.setattr(clock, "get_millis", frozen)
    return frozen


@pytest.fixture
def add_hint():
    def _add(block_id: str, notify_at: int, workspace_id: str = "ws-1", block_type: str = "card") -> None:
        with Session(engine) as session:
            session.add(
                NotificationHint(
                    block_type=block_type,
                    block_id=block_id,
                    workspace_id=workspace_id,
                    create_at=0,
                    notify_at=notify_at,
                )
            )
            session.commit()

    return _add
