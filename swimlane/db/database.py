from fastapi import Request
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from swimlane.core import Settings, get_settings
from swimlane.db.proxy import QueryProxy, RemoteQueryProxy, SQLAlchemyQueryProxy


def create_query_proxy(settings: Settings = None) -> QueryProxy:
    """Build the persistence backend selected by DB_BACKEND"""
    settings = settings or get_settings()

    if settings.DB_BACKEND == "remote":
        return RemoteQueryProxy(
            url=settings.GIBSON_API_URL,
            api_key=settings.GIBSON_API_KEY,
            dialect=settings.REMOTE_SQL_DIALECT,
        )

    engine = create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        future=True,
        poolclass=NullPool,
    )
    return SQLAlchemyQueryProxy(engine)


# Dependency for FastAPI
async def get_query_proxy(request: Request) -> QueryProxy:
    return request.app.state.proxy


async def init_db(proxy: QueryProxy) -> None:
    """Create tables when running on a local engine; the remote schema is managed elsewhere"""
    if not isinstance(proxy, SQLAlchemyQueryProxy):
        return

    # Import here so all models are registered on Base.metadata
    from swimlane.db.models import Base

    async with proxy.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
