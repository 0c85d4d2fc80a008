from typing import List, Optional
from datetime import datetime
import uuid as uuid_lib

from sqlalchemy import select, insert, update, delete, func

from swimlane.db.proxy import QueryProxy, Row
from swimlane.models import board_table, lane_table, card_table
from swimlane.services.lane_service import LaneService
from swimlane.logs import debug_logger, log_function

DEFAULT_BOARD_NAME = "Default Board"
DEFAULT_BOARD_DESCRIPTION = "Your first Kanban board"
DEFAULT_LANES = ("To Do", "In Progress", "Done")


class BoardService:
    """CRUD operations service for boards"""

    @staticmethod
    async def get_all(db: QueryProxy) -> List[Row]:
        """Get all boards, newest first"""
        query = select(board_table).order_by(
            board_table.c.date_created.desc(),
            board_table.c.id.desc(),
        )
        return await db.fetch_all(query)

    @staticmethod
    async def get_by_uuid(db: QueryProxy, board_uuid: str) -> Optional[Row]:
        query = select(board_table).where(board_table.c.uuid == board_uuid)
        return await db.fetch_one(query)

    @staticmethod
    async def count(db: QueryProxy) -> int:
        query = select(func.count().label("count")).select_from(board_table)
        return int(await db.scalar(query) or 0)

    @staticmethod
    @log_function()
    async def create(
        db: QueryProxy,
        name: str,
        description: Optional[str] = None
    ) -> Row:
        """Create a new board"""
        board_uuid = str(uuid_lib.uuid4())
        now = datetime.utcnow().replace(tzinfo=None)

        stmt = insert(board_table).values(
            uuid=board_uuid,
            name=name,
            description=description or "",
            date_created=now,
            date_updated=now,
        )
        await db.execute(stmt)

        board = await BoardService.get_by_uuid(db, board_uuid)
        debug_logger.info(f"Создана новая доска: {board_uuid}")
        return board

    @staticmethod
    async def update(
        db: QueryProxy,
        board_uuid: str,
        name: Optional[str] = None,
        description: Optional[str] = None
    ) -> Optional[Row]:
        """Update a board's details"""
        board = await BoardService.get_by_uuid(db, board_uuid)
        if not board:
            debug_logger.warning(f"Доска {board_uuid} не найдена при попытке обновления")
            return None

        update_data = {"date_updated": datetime.utcnow().replace(tzinfo=None)}
        if name:
            update_data["name"] = name
        if description is not None:
            update_data["description"] = description

        stmt = update(board_table).where(board_table.c.id == board["id"]).values(**update_data)
        await db.execute(stmt)

        return await BoardService.get_by_uuid(db, board_uuid)

    @staticmethod
    @log_function()
    async def delete(db: QueryProxy, board_uuid: str) -> bool:
        """Delete a board together with its lanes and their cards"""
        board = await BoardService.get_by_uuid(db, board_uuid)
        if not board:
            debug_logger.warning(f"Доска {board_uuid} не найдена при попытке удаления")
            return False

        board_id = board["id"]
        lane_ids = select(lane_table.c.id).where(lane_table.c.board_id == board_id)

        await db.execute_batch([
            delete(card_table).where(card_table.c.lane_id.in_(lane_ids.scalar_subquery())),
            delete(lane_table).where(lane_table.c.board_id == board_id),
            delete(board_table).where(board_table.c.id == board_id),
        ])

        debug_logger.info(f"Доска {board_uuid} удалена вместе с колонками и карточками")
        return True

    @staticmethod
    async def seed_default_board(db: QueryProxy) -> Optional[Row]:
        """Create the default board with three lanes when there are no boards yet"""
        if await BoardService.count(db) > 0:
            return None

        debug_logger.info("Создание доски по умолчанию")
        board = await BoardService.create(db, DEFAULT_BOARD_NAME, DEFAULT_BOARD_DESCRIPTION)
        for position, name in enumerate(DEFAULT_LANES):
            await LaneService.create(db, board_id=board["id"], name=name, position=position)
        return board
