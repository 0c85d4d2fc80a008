from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from swimlane.core import get_settings
from swimlane.core.exceptions import (
    PersistenceError,
    validation_exception_handler,
    persistence_exception_handler,
)
from swimlane.core.middleware import RequestLoggingMiddleware
from swimlane.db import create_query_proxy, init_db
from swimlane.api.v1 import api_router
from swimlane.services.board_service import BoardService
from swimlane.logs import api_logger, debug_logger

# Get application settings
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    proxy = create_query_proxy(settings)
    app.state.proxy = proxy

    await init_db(proxy)
    api_logger.info(f"Persistence backend ready: {settings.DB_BACKEND}")

    if settings.SEED_DEFAULT_BOARD:
        # Отсутствие доски по умолчанию не мешает запуску сервера
        try:
            board = await BoardService.seed_default_board(proxy)
            if board:
                api_logger.info("Default board and swim lanes created successfully")
        except PersistenceError as e:
            debug_logger.error(f"Ошибка при создании доски по умолчанию: {e.message}")

    yield

    await proxy.close()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="API for a Kanban board with swim lanes and cards",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=3600,
)

app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(PersistenceError, persistence_exception_handler)

app.include_router(api_router)


@app.get("/")
async def root(request: Request):
    """Health check endpoint"""
    api_logger.info(f"Received health check request: {request.method} {request.url}")
    return {"message": f"{settings.PROJECT_NAME} is running"}


if __name__ == "__main__":
    import uvicorn

    api_logger.info(f"Сервер запускается на http://0.0.0.0:{settings.PORT}")

    uvicorn.run(
        "swimlane.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
