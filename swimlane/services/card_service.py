from typing import List, Optional
from datetime import datetime
import uuid as uuid_lib

from sqlalchemy import select, insert, update, delete, func

from swimlane.db.proxy import QueryProxy, Row
from swimlane.models import lane_table, card_table, CardPriority
from swimlane.ordering import clamp_index, is_dense, reinsert, transfer
from swimlane.services.positions import renumber_statements
from swimlane.logs import debug_logger, log_function, api_logger


def _card_select():
    return select(
        card_table,
        lane_table.c.uuid.label("lane_uuid"),
    ).join(lane_table, card_table.c.lane_id == lane_table.c.id)


class CardService:
    """CRUD operations service for cards"""

    @staticmethod
    async def get_by_lane_id(db: QueryProxy, lane_id: int) -> List[Row]:
        """Get all cards of a lane ordered by position"""
        query = _card_select().where(card_table.c.lane_id == lane_id).order_by(
            card_table.c.position,
            card_table.c.id,
        )
        cards = await db.fetch_all(query)
        # Пакет на удаленном бэкенде не атомарен
        if not is_dense([card["position"] for card in cards]):
            debug_logger.warning(f"Позиции карточек колонки {lane_id} не плотные")
        return cards

    @staticmethod
    async def get_by_uuid(db: QueryProxy, card_uuid: str) -> Optional[Row]:
        query = _card_select().where(card_table.c.uuid == card_uuid)
        return await db.fetch_one(query)

    @staticmethod
    async def count_in_lane(db: QueryProxy, lane_id: int) -> int:
        query = select(func.count().label("count")).select_from(card_table).where(
            card_table.c.lane_id == lane_id
        )
        return int(await db.scalar(query) or 0)

    @staticmethod
    @log_function()
    async def create(
        db: QueryProxy,
        lane_id: int,
        title: str,
        description: Optional[str] = None,
        priority: CardPriority = CardPriority.MEDIUM,
        position: Optional[int] = None
    ) -> Row:
        """Create a card; without a position it goes to the end of the lane"""
        card_count = await CardService.count_in_lane(db, lane_id)
        now = datetime.utcnow().replace(tzinfo=None)
        card_uuid = str(uuid_lib.uuid4())

        statements = []
        if position is None:
            position = card_count
        else:
            position = clamp_index(position, card_count)
            # Сдвигаем карточки ниже точки вставки
            statements.append(
                update(card_table).where(
                    card_table.c.lane_id == lane_id,
                    card_table.c.position >= position,
                ).values(position=card_table.c.position + 1, date_updated=now)
            )

        statements.append(
            insert(card_table).values(
                uuid=card_uuid,
                lane_id=lane_id,
                title=title,
                description=description or "",
                priority=CardPriority(priority).value,
                position=position,
                date_created=now,
                date_updated=now,
            )
        )
        await db.execute_batch(statements)

        card = await CardService.get_by_uuid(db, card_uuid)
        debug_logger.info(f"Создана новая карточка {card_uuid} в колонке {lane_id}, позиция {position}")
        return card

    @staticmethod
    @log_function()
    async def update(
        db: QueryProxy,
        card_uuid: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        priority: Optional[CardPriority] = None,
        position: Optional[int] = None,
        lane_id: Optional[int] = None
    ) -> Optional[Row]:
        """
        Update a card's details, fields left as None are not touched

        A new position or lane is applied as a move, so both affected lanes
        stay numbered 0..n-1. A new lane without a position appends the card.
        """
        card = await CardService.get_by_uuid(db, card_uuid)
        if not card:
            debug_logger.warning(f"Карточка {card_uuid} не найдена при попытке обновления")
            return None

        update_data = {"date_updated": datetime.utcnow().replace(tzinfo=None)}
        if title:
            update_data["title"] = title
        if description is not None:
            update_data["description"] = description
        if priority:
            update_data["priority"] = CardPriority(priority).value

        debug_logger.debug(f"Обновляемые поля карточки {card_uuid}: {update_data}")
        stmt = update(card_table).where(card_table.c.id == card["id"]).values(**update_data)
        await db.execute(stmt)

        changes_lane = lane_id is not None and lane_id != card["lane_id"]
        if position is not None or changes_lane:
            target_lane_id = lane_id if lane_id is not None else card["lane_id"]
            target_lane = await db.fetch_one(select(lane_table).where(lane_table.c.id == target_lane_id))
            if not target_lane:
                debug_logger.warning(f"Колонка {target_lane_id} не найдена при обновлении карточки {card_uuid}")
                return None
            if position is None:
                position = await CardService.count_in_lane(db, target_lane_id)
            return await CardService.move_card(db, card, target_lane, position)

        return await CardService.get_by_uuid(db, card_uuid)

    @staticmethod
    @log_function()
    async def delete(db: QueryProxy, card_uuid: str) -> bool:
        """Delete a card and close the gap it leaves in its lane"""
        card = await CardService.get_by_uuid(db, card_uuid)
        if not card:
            debug_logger.warning(f"Карточка {card_uuid} не найдена при попытке удаления")
            return False

        remaining = [
            row for row in await CardService.get_by_lane_id(db, card["lane_id"])
            if row["id"] != card["id"]
        ]
        now = datetime.utcnow().replace(tzinfo=None)

        await db.execute_batch([
            delete(card_table).where(card_table.c.id == card["id"]),
            *renumber_statements(card_table, remaining, now),
        ])

        debug_logger.info(f"Карточка {card_uuid} удалена")
        return True

    @staticmethod
    @log_function()
    async def move_card(
        db: QueryProxy,
        card: Row,
        target_lane: Row,
        position: int
    ) -> Row:
        """
        Move a card to a lane at the given index and renumber both lanes

        The card is taken out of its lane's ordered list and inserted into the
        target lane's list at the clamped index; every card whose lane or
        position changes is written in one batch.

        Args:
            db: Query proxy
            card: Card row (as returned by get_by_uuid)
            target_lane: Target lane row
            position: Desired index in the target lane

        Returns:
            The moved card row
        """
        source_lane_id = card["lane_id"]
        target_lane_id = target_lane["id"]
        now = datetime.utcnow().replace(tzinfo=None)

        source_cards = await CardService.get_by_lane_id(db, source_lane_id)
        from_index = next(i for i, row in enumerate(source_cards) if row["id"] == card["id"])

        if source_lane_id == target_lane_id:
            ordered = reinsert(source_cards, from_index, position)
            statements = renumber_statements(
                card_table, ordered, now, extra_values={card["id"]: {}}
            )
        else:
            target_cards = await CardService.get_by_lane_id(db, target_lane_id)
            new_source, new_target = transfer(source_cards, target_cards, from_index, position)
            statements = renumber_statements(card_table, new_source, now)
            statements += renumber_statements(
                card_table, new_target, now, extra_values={card["id"]: {"lane_id": target_lane_id}}
            )

        try:
            await db.execute_batch(statements)
        except Exception as e:
            api_logger.error(f"Failed to move card {card['uuid']} to lane {target_lane['uuid']}: {str(e)}")
            raise

        debug_logger.info(
            f"Карточка {card['uuid']} перемещена из колонки {source_lane_id} в колонку {target_lane_id}"
        )
        return await CardService.get_by_uuid(db, card["uuid"])
