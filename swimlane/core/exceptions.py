from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from swimlane.logs import api_logger, debug_logger


class PersistenceError(Exception):
    """Raised when the persistence backend fails to run a query"""

    def __init__(self, message: str = "Database query failed"):
        self.message = message
        super().__init__(message)


def format_validation_errors(exc: RequestValidationError) -> list[dict]:
    """
    Flatten pydantic errors into field-level messages

    Args:
        exc: Validation error raised by FastAPI

    Returns:
        List of {"field", "msg", "location"} dictionaries
    """
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        location = loc[0] if loc else "body"
        field = ".".join(loc[1:]) if len(loc) > 1 else location
        errors.append({
            "field": field,
            "msg": error.get("msg", "Invalid value"),
            "location": location,
        })
    return errors


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = format_validation_errors(exc)
    debug_logger.warning(f"Ошибка валидации {request.method} {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"errors": errors},
    )


async def persistence_exception_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    api_logger.error(f"Persistence error on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": exc.message},
    )
