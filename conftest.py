import os
import tempfile

# Логи тестов не должны попадать в каталог пакета
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "swimlane-test-logs"))

import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from swimlane.db import SQLAlchemyQueryProxy, init_db


@pytest_asyncio.fixture
async def proxy():
    """Query proxy over an in-memory SQLite database with all tables created"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    db = SQLAlchemyQueryProxy(engine)
    await init_db(db)
    yield db
    await db.close()
