import pytest
import aiohttp
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy import select, text, update

from swimlane.core.exceptions import PersistenceError
from swimlane.db.proxy import RemoteQueryProxy
from swimlane.models import board_table, card_table


def make_session(status=200, payload=None, exc=None):
    """Мок aiohttp.ClientSession, у которого post() работает как async context manager"""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=payload)

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    if exc is not None:
        session.post = MagicMock(side_effect=exc)
    else:
        session.post = MagicMock(return_value=context)
    return session


class TestRemoteQueryProxy:
    """Тесты для прокси удаленного SQL-сервиса"""

    def test_compile_uses_bound_parameters(self):
        proxy = RemoteQueryProxy("http://db", "key")
        hostile = "x'; DROP TABLE kanban_board; --"

        query, params = proxy.compile(select(board_table).where(board_table.c.uuid == hostile))

        assert hostile not in query
        assert ":uuid_1" in query
        assert params == {"uuid_1": hostile}

    def test_compile_serializes_datetimes(self):
        from datetime import datetime

        proxy = RemoteQueryProxy("http://db", "key")
        stamp = datetime(2024, 5, 1, 12, 30)

        _, params = proxy.compile(
            update(card_table).where(card_table.c.id == 3).values(position=1, date_updated=stamp)
        )

        assert params["date_updated"] == "2024-05-01 12:30:00"
        assert params["position"] == 1

    def test_unknown_dialect(self):
        with pytest.raises(ValueError):
            RemoteQueryProxy("http://db", "key", dialect="oracle-ish")

    @pytest.mark.asyncio
    async def test_fetch_all_posts_query_and_params(self):
        session = make_session(payload=[{"id": 1, "uuid": "abc"}])
        proxy = RemoteQueryProxy("http://db/query", "key", session=session)

        rows = await proxy.fetch_all(select(board_table).where(board_table.c.uuid == "abc"))

        assert rows == [{"id": 1, "uuid": "abc"}]
        args, kwargs = session.post.call_args
        assert args == ("http://db/query",)
        assert kwargs["json"]["params"] == {"uuid_1": "abc"}
        assert "kanban_board" in kwargs["json"]["query"]

    @pytest.mark.asyncio
    async def test_non_list_payload_means_no_rows(self):
        session = make_session(payload={"affected_rows": 1})
        proxy = RemoteQueryProxy("http://db", "key", session=session)

        assert await proxy.fetch_one(select(board_table)) is None

    @pytest.mark.asyncio
    async def test_error_detail_is_passed_through(self):
        session = make_session(status=400, payload={"detail": "Unknown column 'foo'"})
        proxy = RemoteQueryProxy("http://db", "key", session=session)

        with pytest.raises(PersistenceError) as exc_info:
            await proxy.execute(select(board_table))

        assert exc_info.value.message == "Unknown column 'foo'"

    @pytest.mark.asyncio
    async def test_error_without_detail(self):
        session = make_session(status=502, payload=None)
        proxy = RemoteQueryProxy("http://db", "key", session=session)

        with pytest.raises(PersistenceError) as exc_info:
            await proxy.execute(select(board_table))

        assert exc_info.value.message == "Database query failed"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        session = make_session(exc=aiohttp.ClientConnectionError("refused"))
        proxy = RemoteQueryProxy("http://db", "key", session=session)

        with pytest.raises(PersistenceError) as exc_info:
            await proxy.execute(select(board_table))

        assert "refused" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_batch_runs_statements_in_order(self):
        session = make_session(payload=[])
        proxy = RemoteQueryProxy("http://db", "key", session=session)

        await proxy.execute_batch([
            update(card_table).where(card_table.c.id == 1).values(position=0),
            update(card_table).where(card_table.c.id == 2).values(position=1),
        ])

        sent = [call.kwargs["json"]["params"] for call in session.post.call_args_list]
        assert [p["position"] for p in sent] == [0, 1]

    @pytest.mark.asyncio
    async def test_injected_session_is_not_closed(self):
        session = make_session(payload=[])
        proxy = RemoteQueryProxy("http://db", "key", session=session)

        await proxy.close()

        session.close.assert_not_called()


class TestSQLAlchemyQueryProxy:
    """Тесты для прокси локального движка SQLAlchemy"""

    @pytest.mark.asyncio
    async def test_errors_become_persistence_errors(self, proxy):
        with pytest.raises(PersistenceError):
            await proxy.fetch_all(text("SELECT * FROM missing_table"))

    @pytest.mark.asyncio
    async def test_failed_batch_is_rolled_back(self, proxy):
        from swimlane.services.board_service import BoardService

        board = await BoardService.create(proxy, name="Keep me")

        with pytest.raises(PersistenceError):
            await proxy.execute_batch([
                update(board_table).where(board_table.c.id == board["id"]).values(name="Changed"),
                text("UPDATE missing_table SET x = 1"),
            ])

        assert (await BoardService.get_by_uuid(proxy, board["uuid"]))["name"] == "Keep me"
