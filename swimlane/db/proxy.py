"""
Query proxies: the only way services talk to the persistence backend.

Services build SQLAlchemy Core statements; a proxy runs them and hands back
rows as plain dictionaries. ``RemoteQueryProxy`` compiles each statement with
named bind parameters and ships query text and parameters separately to the
remote SQL service, ``SQLAlchemyQueryProxy`` executes them on an AsyncEngine.
"""
from datetime import date, datetime
import enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

import aiohttp
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from swimlane.core.exceptions import PersistenceError
from swimlane.logs import api_logger, debug_logger

Row = Dict[str, Any]

DIALECTS = {
    "mysql": mysql.dialect,
    "postgresql": postgresql.dialect,
    "sqlite": sqlite.dialect,
}


class QueryProxy:
    """Base class for persistence backends"""

    async def fetch_all(self, statement) -> List[Row]:
        return await self._run(statement)

    async def fetch_one(self, statement) -> Optional[Row]:
        rows = await self._run(statement)
        return rows[0] if rows else None

    async def scalar(self, statement) -> Any:
        row = await self.fetch_one(statement)
        if not row:
            return None
        return next(iter(row.values()))

    async def execute(self, statement) -> None:
        await self._run(statement)

    async def execute_batch(self, statements: Iterable) -> None:
        """Run statements one after another, no atomicity across them"""
        for statement in statements:
            await self._run(statement)

    async def close(self) -> None:
        pass

    async def _run(self, statement) -> List[Row]:
        raise NotImplementedError


def _jsonable(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return value


class RemoteQueryProxy(QueryProxy):
    """Forwards statements to the remote SQL-over-HTTP service"""

    def __init__(
        self,
        url: str,
        api_key: str,
        dialect: str = "mysql",
        session: Optional[aiohttp.ClientSession] = None,
    ):
        if dialect not in DIALECTS:
            raise ValueError(f"Unsupported SQL dialect: {dialect}")
        self.url = url
        self.api_key = api_key
        self.dialect = DIALECTS[dialect](paramstyle="named")
        self.session = session
        self._owns_session = session is None

    def compile(self, statement) -> Tuple[str, Dict[str, Any]]:
        """Render a statement as query text plus named parameters"""
        compiled = statement.compile(dialect=self.dialect)
        params = {key: _jsonable(value) for key, value in compiled.params.items()}
        return str(compiled), params

    def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                headers={
                    "Content-Type": "application/json",
                    "X-Gibson-API-Key": self.api_key,
                }
            )
            self._owns_session = True
        return self.session

    async def _run(self, statement) -> List[Row]:
        query, params = self.compile(statement)
        debug_logger.debug(f"SQL: {query} | params: {params}")

        session = self._get_session()
        try:
            async with session.post(self.url, json={"query": query, "params": params}) as response:
                if response.status >= 400:
                    raise PersistenceError(await self._error_detail(response))
                data = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            api_logger.error(f"Database error: {str(e)}")
            raise PersistenceError(f"Database query failed: {str(e)}") from e

        if isinstance(data, list):
            return [dict(row) for row in data]
        return []

    @staticmethod
    async def _error_detail(response) -> str:
        try:
            payload = await response.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError):
            payload = None
        detail = payload.get("detail") if isinstance(payload, dict) else None
        api_logger.error(f"Database error: HTTP {response.status} {payload}")
        return detail or "Database query failed"

    async def close(self) -> None:
        if self.session is not None and self._owns_session and not self.session.closed:
            await self.session.close()


class SQLAlchemyQueryProxy(QueryProxy):
    """Runs statements on a local AsyncEngine"""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def _run(self, statement) -> List[Row]:
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(statement)
                if not result.returns_rows:
                    return []
                return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as e:
            api_logger.error(f"Database error: {str(e)}")
            raise PersistenceError(str(e)) from e

    async def execute_batch(self, statements: Iterable) -> None:
        """Run all statements inside a single transaction"""
        try:
            async with self.engine.begin() as conn:
                for statement in statements:
                    await conn.execute(statement)
        except SQLAlchemyError as e:
            api_logger.error(f"Database error: {str(e)}")
            raise PersistenceError(str(e)) from e

    async def close(self) -> None:
        await self.engine.dispose()
