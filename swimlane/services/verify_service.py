from datetime import datetime
import uuid as uuid_lib

from sqlalchemy import select, insert, delete, func, literal

from swimlane.core.exceptions import PersistenceError
from swimlane.db.proxy import QueryProxy
from swimlane.models import board_table
from swimlane.logs import api_logger, debug_logger


class VerifyService:
    """Health check of the persistence backend"""

    @staticmethod
    async def verify(db: QueryProxy) -> dict:
        """
        Check connection, read and write access

        The write check inserts a throwaway board and deletes it again.

        Returns:
            Dict shaped like VerifyResponse; status is "success" only when all checks pass
        """
        tests = {"connection": False, "read": False, "write": False}
        try:
            await db.fetch_one(select(literal(1).label("test")))
            tests["connection"] = True

            await db.scalar(select(func.count().label("count")).select_from(board_table))
            tests["read"] = True

            test_uuid = str(uuid_lib.uuid4())
            now = datetime.utcnow().replace(tzinfo=None)
            await db.execute(
                insert(board_table).values(
                    uuid=test_uuid,
                    name="Test Board",
                    description="Test Description",
                    date_created=now,
                    date_updated=now,
                )
            )
            written = await db.fetch_one(
                select(board_table.c.id).where(board_table.c.uuid == test_uuid)
            )
            if not written:
                raise PersistenceError("Test board was not written")
            await db.execute(delete(board_table).where(board_table.c.id == written["id"]))
            tests["write"] = True
        except PersistenceError as e:
            api_logger.error(f"API verification failed: {e.message}")
            return {
                "status": "error",
                "message": "API verification failed",
                "error": e.message,
                "tests": tests,
            }

        debug_logger.info("Проверка API прошла успешно")
        return {
            "status": "success",
            "message": "API verification successful",
            "tests": tests,
        }
