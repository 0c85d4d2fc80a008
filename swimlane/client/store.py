"""
Client-side board state.

``BoardStore`` holds the current board, its lanes and cards, and mediates
every change through the API client. Card moves are applied to local state
first and persisted afterwards; a failed move is undone by refetching the
cards of every lane.
"""
from dataclasses import dataclass
import enum
from typing import Any, Dict, List, Optional

from swimlane.client.api_client import KanbanApiClient
from swimlane.client.exceptions import KanbanApiError, KanbanNotFoundError
from swimlane.client.reorder import DraggableLocation, DropResult, apply_move, plan_move
from swimlane.schemas.board import BoardResponse
from swimlane.schemas.lane import LaneResponse
from swimlane.schemas.card import CardResponse
from swimlane.logs import debug_logger

DEFAULT_BOARD = {"name": "Default Board", "description": "Your first Kanban board"}
DEFAULT_LANES = ("To Do", "In Progress", "Done")


class MutationState(str, enum.Enum):
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class Mutation:
    """One optimistic change and its outcome"""
    action: str
    target: str
    state: MutationState = MutationState.PENDING
    error: Optional[str] = None

    def commit(self) -> None:
        self._transition(MutationState.COMMITTED)

    def roll_back(self, error: str) -> None:
        self._transition(MutationState.ROLLED_BACK)
        self.error = error

    def _transition(self, state: MutationState) -> None:
        if self.state is not MutationState.PENDING:
            raise RuntimeError(f"Mutation already {self.state.value}")
        self.state = state


class BoardStore:
    """Application state shared by the UI: board, lanes, cards, loading and error"""

    def __init__(self, api: KanbanApiClient):
        self.api = api
        self.board: Optional[BoardResponse] = None
        self.lanes: List[LaneResponse] = []
        self.cards: List[CardResponse] = []
        self.loading = False
        self.error: Optional[str] = None
        self.mutations: List[Mutation] = []

    # === ВЫБОРКИ ===

    def get_lane(self, lane_uuid: str) -> Optional[LaneResponse]:
        return next((lane for lane in self.lanes if lane.uuid == lane_uuid), None)

    def get_card(self, card_uuid: str) -> Optional[CardResponse]:
        return next((card for card in self.cards if card.uuid == card_uuid), None)

    def cards_in_lane(self, lane_uuid: str) -> List[CardResponse]:
        """Cards of a lane ordered by position"""
        return sorted(
            (card for card in self.cards if card.lane_uuid == lane_uuid),
            key=lambda card: card.position,
        )

    def cards_by_lane(self) -> Dict[str, List[CardResponse]]:
        return {lane.uuid: self.cards_in_lane(lane.uuid) for lane in self.lanes}

    # === ЗАГРУЗКА ===

    async def load(self) -> bool:
        """Verify the API, then load the board, its lanes and all cards"""
        verification = await self.api.verify_api()
        if verification.status != "success":
            self.error = f"API verification failed: {verification.error or verification.message}"
            return False

        await self.fetch_board()
        if self.error or not self.board:
            return False
        await self.fetch_lanes(self.board.uuid)
        if self.error:
            return False
        await self.fetch_all_cards()
        return self.error is None

    async def fetch_board(self) -> None:
        """Load the first board, creating the default board with its lanes when there is none"""
        self.loading = True
        self.error = None
        try:
            boards = await self.api.get_boards()
            if boards:
                self.board = boards[0]
            else:
                self.board = await self.api.create_board(DEFAULT_BOARD)
                for position, name in enumerate(DEFAULT_LANES):
                    await self.api.create_lane(self.board.uuid, {"name": name, "position": position})
        except KanbanApiError as e:
            self.error = f"Failed to load board: {e.message}"
            debug_logger.error(f"Ошибка загрузки доски: {e.message}")
        finally:
            self.loading = False

    async def fetch_lanes(self, board_uuid: str) -> None:
        self.loading = True
        self.error = None
        try:
            self.lanes = await self.api.get_lanes(board_uuid)
        except KanbanApiError as e:
            self.error = f"Failed to load lanes: {e.message}"
            debug_logger.error(f"Ошибка загрузки колонок: {e.message}")
        finally:
            self.loading = False

    async def fetch_cards(self, lane_uuid: str) -> None:
        self.loading = True
        self.error = None
        try:
            await self._load_lane_cards(lane_uuid)
        except KanbanApiError as e:
            self.error = f"Failed to load cards: {e.message}"
            debug_logger.error(f"Ошибка загрузки карточек: {e.message}")
        finally:
            self.loading = False

    async def fetch_all_cards(self) -> None:
        """Load the cards of every lane; the first failure stays in error"""
        self.loading = True
        self.error = None
        try:
            for lane in list(self.lanes):
                try:
                    await self._load_lane_cards(lane.uuid)
                except KanbanApiError as e:
                    debug_logger.error(f"Ошибка загрузки карточек колонки {lane.uuid}: {e.message}")
                    if self.error is None:
                        self.error = f"Failed to load cards: {e.message}"
        finally:
            self.loading = False

    async def _load_lane_cards(self, lane_uuid: str) -> None:
        fetched = await self.api.get_cards(lane_uuid)
        fetched_uuids = {card.uuid for card in fetched}
        # Карточка могла быть локально перенесена в другую колонку
        self.cards = [
            card for card in self.cards
            if card.lane_uuid != lane_uuid and card.uuid not in fetched_uuids
        ] + fetched

    async def _refetch_all_cards(self) -> None:
        """Replace local cards with the server's; keeps the current error message"""
        for lane in list(self.lanes):
            try:
                await self._load_lane_cards(lane.uuid)
            except KanbanApiError as e:
                debug_logger.error(f"Ошибка повторной загрузки карточек колонки {lane.uuid}: {e.message}")

    # === КАРТОЧКИ ===

    async def create_card(self, lane_uuid: str, card_data: Dict[str, Any]) -> CardResponse:
        """Create a card at the end of a lane"""
        self.loading = True
        self.error = None
        try:
            if not self.get_lane(lane_uuid):
                raise KanbanNotFoundError("Lane not found", 404)

            position = len(self.cards_in_lane(lane_uuid))
            new_card = await self.api.create_card(lane_uuid, {**card_data, "position": position})
            self.cards.append(new_card)
            return new_card
        except KanbanApiError as e:
            self.error = f"Failed to create card: {e.message}"
            debug_logger.error(f"Ошибка создания карточки: {e.message}")
            raise
        finally:
            self.loading = False

    async def update_card(self, card_uuid: str, card_data: Dict[str, Any]) -> CardResponse:
        self.loading = True
        self.error = None
        try:
            updated = await self.api.update_card(card_uuid, card_data)
            self.cards = [updated if card.uuid == card_uuid else card for card in self.cards]
            return updated
        except KanbanApiError as e:
            self.error = f"Failed to update card: {e.message}"
            debug_logger.error(f"Ошибка обновления карточки: {e.message}")
            raise
        finally:
            self.loading = False

    async def delete_card(self, card_uuid: str) -> None:
        self.loading = True
        self.error = None
        try:
            await self.api.delete_card(card_uuid)
            card = self.get_card(card_uuid)
            self.cards = [c for c in self.cards if c.uuid != card_uuid]
            if card:
                for position, remaining in enumerate(self.cards_in_lane(card.lane_uuid)):
                    remaining.position = position
        except KanbanApiError as e:
            self.error = f"Failed to delete card: {e.message}"
            debug_logger.error(f"Ошибка удаления карточки: {e.message}")
            raise
        finally:
            self.loading = False

    async def move_card(self, card_uuid: str, lane_uuid: str, position: int) -> Optional[Mutation]:
        """Move a card to a lane at a position, as if it had been dragged there"""
        card = self.get_card(card_uuid)
        if not card:
            return None
        source_cards = self.cards_in_lane(card.lane_uuid)
        source_index = next(i for i, c in enumerate(source_cards) if c.uuid == card_uuid)
        return await self.handle_drag_end(DropResult(
            draggable_id=card_uuid,
            source=DraggableLocation(card.lane_uuid, source_index),
            destination=DraggableLocation(lane_uuid, position),
        ))

    async def handle_drag_end(self, result: DropResult) -> Optional[Mutation]:
        """
        Apply a drop to local state and persist it

        Returns:
            The mutation tracking the move, or None when the drop is a no-op.
            Failures do not raise: the error is recorded and cards are refetched.
        """
        plan = plan_move(self.cards_by_lane(), result)
        if plan is None:
            return None

        self.error = None
        apply_move(plan)
        mutation = Mutation(action="move_card", target=plan.card.uuid)
        self.mutations.append(mutation)

        try:
            await self.api.move_card(plan.card.uuid, plan.destination_lane_uuid, plan.index)
        except KanbanApiError as e:
            self.error = f"Failed to move card: {e.message}"
            debug_logger.error(f"Ошибка перемещения карточки {plan.card.uuid}: {e.message}")
            if self.board:
                await self._refetch_all_cards()
            mutation.roll_back(self.error)
            return mutation

        mutation.commit()
        return mutation

    # === КОЛОНКИ ===

    async def create_lane(self, board_uuid: str, lane_data: Dict[str, Any]) -> LaneResponse:
        self.loading = True
        self.error = None
        try:
            new_lane = await self.api.create_lane(board_uuid, lane_data)
            self.lanes.append(new_lane)
            return new_lane
        except KanbanApiError as e:
            self.error = f"Failed to create lane: {e.message}"
            debug_logger.error(f"Ошибка создания колонки: {e.message}")
            raise
        finally:
            self.loading = False

    async def update_lane(self, lane_uuid: str, lane_data: Dict[str, Any]) -> LaneResponse:
        self.loading = True
        self.error = None
        try:
            updated = await self.api.update_lane(lane_uuid, lane_data)
            self.lanes = [updated if lane.uuid == lane_uuid else lane for lane in self.lanes]
            return updated
        except KanbanApiError as e:
            self.error = f"Failed to update lane: {e.message}"
            debug_logger.error(f"Ошибка обновления колонки: {e.message}")
            raise
        finally:
            self.loading = False

    async def delete_lane(self, lane_uuid: str) -> None:
        """Delete a lane; its cards disappear from local state too"""
        self.loading = True
        self.error = None
        try:
            await self.api.delete_lane(lane_uuid)
            self.cards = [card for card in self.cards if card.lane_uuid != lane_uuid]
            self.lanes = [lane for lane in self.lanes if lane.uuid != lane_uuid]
            for position, lane in enumerate(sorted(self.lanes, key=lambda l: l.position)):
                lane.position = position
        except KanbanApiError as e:
            self.error = f"Failed to delete lane: {e.message}"
            debug_logger.error(f"Ошибка удаления колонки: {e.message}")
            raise
        finally:
            self.loading = False
