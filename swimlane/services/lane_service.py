from typing import List, Optional
from datetime import datetime
import uuid as uuid_lib

from sqlalchemy import select, insert, update, delete, func

from swimlane.db.proxy import QueryProxy, Row
from swimlane.models import board_table, lane_table, card_table
from swimlane.ordering import clamp_index, is_dense, reinsert
from swimlane.services.positions import renumber_statements
from swimlane.logs import debug_logger, log_function


def _lane_select():
    return select(
        lane_table,
        board_table.c.uuid.label("board_uuid"),
    ).join(board_table, lane_table.c.board_id == board_table.c.id)


class LaneService:
    """CRUD operations service for swim lanes"""

    @staticmethod
    async def get_by_board_id(db: QueryProxy, board_id: int) -> List[Row]:
        """Get all lanes of a board ordered by position"""
        query = _lane_select().where(lane_table.c.board_id == board_id).order_by(
            lane_table.c.position,
            lane_table.c.id,
        )
        lanes = await db.fetch_all(query)
        if not is_dense([lane["position"] for lane in lanes]):
            debug_logger.warning(f"Позиции колонок доски {board_id} не плотные")
        return lanes

    @staticmethod
    async def get_by_uuid(db: QueryProxy, lane_uuid: str) -> Optional[Row]:
        query = _lane_select().where(lane_table.c.uuid == lane_uuid)
        return await db.fetch_one(query)

    @staticmethod
    async def count_in_board(db: QueryProxy, board_id: int) -> int:
        query = select(func.count().label("count")).select_from(lane_table).where(
            lane_table.c.board_id == board_id
        )
        return int(await db.scalar(query) or 0)

    @staticmethod
    @log_function()
    async def create(
        db: QueryProxy,
        board_id: int,
        name: str,
        position: Optional[int] = None
    ) -> Row:
        """Create a lane; without a position it is appended, otherwise following lanes shift down"""
        lane_count = await LaneService.count_in_board(db, board_id)
        now = datetime.utcnow().replace(tzinfo=None)
        lane_uuid = str(uuid_lib.uuid4())

        statements = []
        if position is None:
            position = lane_count
        else:
            position = clamp_index(position, lane_count)
            statements.append(
                update(lane_table).where(
                    lane_table.c.board_id == board_id,
                    lane_table.c.position >= position,
                ).values(position=lane_table.c.position + 1, date_updated=now)
            )

        statements.append(
            insert(lane_table).values(
                uuid=lane_uuid,
                board_id=board_id,
                name=name,
                position=position,
                date_created=now,
                date_updated=now,
            )
        )
        await db.execute_batch(statements)

        lane = await LaneService.get_by_uuid(db, lane_uuid)
        debug_logger.info(f"Создана колонка {lane_uuid} на доске {board_id}, позиция {position}")
        return lane

    @staticmethod
    async def update(
        db: QueryProxy,
        lane_uuid: str,
        name: Optional[str] = None,
        position: Optional[int] = None
    ) -> Optional[Row]:
        """Update a lane's details; a new position reorders the board's lanes"""
        lane = await LaneService.get_by_uuid(db, lane_uuid)
        if not lane:
            debug_logger.warning(f"Колонка {lane_uuid} не найдена при попытке обновления")
            return None

        now = datetime.utcnow().replace(tzinfo=None)
        update_data = {"date_updated": now}
        if name:
            update_data["name"] = name

        statements = [update(lane_table).where(lane_table.c.id == lane["id"]).values(**update_data)]
        if position is not None:
            lanes = await LaneService.get_by_board_id(db, lane["board_id"])
            from_index = next(i for i, row in enumerate(lanes) if row["id"] == lane["id"])
            statements += renumber_statements(lane_table, reinsert(lanes, from_index, position), now)

        await db.execute_batch(statements)
        debug_logger.info(f"Колонка {lane_uuid} обновлена")

        return await LaneService.get_by_uuid(db, lane_uuid)

    @staticmethod
    @log_function()
    async def delete(db: QueryProxy, lane_uuid: str) -> bool:
        """Delete a lane and its cards, then close the gap in the board"""
        lane = await LaneService.get_by_uuid(db, lane_uuid)
        if not lane:
            debug_logger.warning(f"Колонка {lane_uuid} не найдена при попытке удаления")
            return False

        remaining = [
            row for row in await LaneService.get_by_board_id(db, lane["board_id"])
            if row["id"] != lane["id"]
        ]
        now = datetime.utcnow().replace(tzinfo=None)

        await db.execute_batch([
            delete(card_table).where(card_table.c.lane_id == lane["id"]),
            delete(lane_table).where(lane_table.c.id == lane["id"]),
            *renumber_statements(lane_table, remaining, now),
        ])

        debug_logger.info(f"Колонка {lane_uuid} удалена вместе с карточками")
        return True
