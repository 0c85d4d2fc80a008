import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi import HTTPException, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from swimlane.db.proxy import QueryProxy
from swimlane.core.exceptions import (
    PersistenceError,
    validation_exception_handler,
    persistence_exception_handler,
)
from swimlane.api.v1.boards import get_board_or_404, create_board, delete_board, update_board
from swimlane.api.v1.lanes import get_lanes, create_lane, delete_lane
from swimlane.api.v1.cards import create_card, get_cards, move_card, update_card, delete_card
from swimlane.api.v1.verify import verify_api
from swimlane.models.card import CardPriority
from swimlane.schemas.board import BoardCreate, BoardUpdate
from swimlane.schemas.lane import LaneCreate
from swimlane.schemas.card import CardCreate, CardUpdate, CardMove


@pytest.fixture
def mock_db():
    return AsyncMock(spec=QueryProxy)


@pytest.fixture
def board_row():
    return {"id": 1, "uuid": "board-uuid", "name": "Board", "description": ""}


@pytest.fixture
def lane_row():
    return {"id": 7, "uuid": "lane-uuid", "board_id": 1, "board_uuid": "board-uuid", "name": "To Do", "position": 0}


@pytest.fixture
def card_row():
    return {
        "id": 11, "uuid": "card-uuid", "lane_id": 7, "lane_uuid": "lane-uuid",
        "title": "Fix bug", "description": "", "priority": "High", "position": 0,
    }


def make_request(method="POST", path="/api/test"):
    request = MagicMock()
    request.method = method
    request.url.path = path
    return request


class TestSchemas:
    """Тесты валидации входных данных"""

    def test_card_without_title_is_rejected(self):
        with pytest.raises(ValidationError):
            CardCreate(description="no title")

    def test_card_with_blank_title_is_rejected(self):
        with pytest.raises(ValidationError):
            CardCreate(title="   ")

    def test_card_with_title_and_priority(self):
        card = CardCreate(title="Fix bug", priority="High")
        assert card.priority == CardPriority.HIGH
        assert card.position is None

    def test_card_with_unknown_priority_is_rejected(self):
        with pytest.raises(ValidationError):
            CardCreate(title="Fix bug", priority="Urgent")

    def test_position_must_be_integer(self):
        with pytest.raises(ValidationError):
            CardUpdate(position="abc")
        with pytest.raises(ValidationError):
            CardMove(lane_uuid="lane", position=1.5)

    def test_move_position_must_be_non_negative(self):
        with pytest.raises(ValidationError):
            CardMove(lane_uuid="lane", position=-1)

    def test_board_and_lane_require_name(self):
        with pytest.raises(ValidationError):
            BoardCreate(name="")
        with pytest.raises(ValidationError):
            LaneCreate(position=0)


class TestBoardEndpoints:
    """Тесты для эндпоинтов досок"""

    @pytest.mark.asyncio
    async def test_get_board_not_found(self, mock_db):
        with patch('swimlane.api.v1.boards.BoardService.get_by_uuid', return_value=None):
            with pytest.raises(HTTPException) as exc_info:
                await get_board_or_404("missing", mock_db)

            assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND
            assert "Board not found" in str(exc_info.value.detail)

    @pytest.mark.asyncio
    async def test_create_board(self, mock_db, board_row):
        with patch('swimlane.api.v1.boards.BoardService.create', return_value=board_row) as mock_create:
            result = await create_board(BoardCreate(name="Board"), mock_db)

            mock_create.assert_called_once_with(db=mock_db, name="Board", description="")
            assert result == board_row

    @pytest.mark.asyncio
    async def test_update_missing_board(self, mock_db):
        with patch('swimlane.api.v1.boards.BoardService.update', return_value=None):
            with pytest.raises(HTTPException) as exc_info:
                await update_board("missing", BoardUpdate(name="x"), mock_db)

            assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_delete_board(self, mock_db):
        with patch('swimlane.api.v1.boards.BoardService.delete', return_value=True) as mock_delete:
            result = await delete_board("board-uuid", mock_db)

            mock_delete.assert_called_once_with(db=mock_db, board_uuid="board-uuid")
            assert result == {"message": "Board deleted successfully"}

    @pytest.mark.asyncio
    async def test_delete_missing_board(self, mock_db):
        with patch('swimlane.api.v1.boards.BoardService.delete', return_value=False):
            with pytest.raises(HTTPException) as exc_info:
                await delete_board("missing", mock_db)

            assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND


class TestLaneEndpoints:
    """Тесты для эндпоинтов колонок"""

    @pytest.mark.asyncio
    async def test_get_lanes_uses_internal_board_id(self, mock_db, board_row, lane_row):
        with patch('swimlane.api.v1.lanes.get_board_or_404', return_value=board_row), \
             patch('swimlane.api.v1.lanes.LaneService.get_by_board_id', return_value=[lane_row]) as mock_get:
            result = await get_lanes("board-uuid", mock_db)

            mock_get.assert_called_once_with(db=mock_db, board_id=1)
            assert result == [lane_row]

    @pytest.mark.asyncio
    async def test_create_lane_in_missing_board(self, mock_db):
        with patch('swimlane.api.v1.lanes.get_board_or_404',
                   side_effect=HTTPException(status_code=404, detail="Board not found")), \
             patch('swimlane.api.v1.lanes.LaneService.create') as mock_create:
            with pytest.raises(HTTPException) as exc_info:
                await create_lane("missing", LaneCreate(name="To Do"), mock_db)

            assert exc_info.value.status_code == 404
            mock_create.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_lane(self, mock_db, board_row, lane_row):
        with patch('swimlane.api.v1.lanes.get_board_or_404', return_value=board_row), \
             patch('swimlane.api.v1.lanes.LaneService.create', return_value=lane_row) as mock_create:
            result = await create_lane("board-uuid", LaneCreate(name="To Do", position=0), mock_db)

            mock_create.assert_called_once_with(db=mock_db, board_id=1, name="To Do", position=0)
            assert result == lane_row

    @pytest.mark.asyncio
    async def test_delete_missing_lane(self, mock_db):
        with patch('swimlane.api.v1.lanes.LaneService.delete', return_value=False):
            with pytest.raises(HTTPException) as exc_info:
                await delete_lane("missing", mock_db)

            assert exc_info.value.status_code == 404
            assert exc_info.value.detail == "Swim lane not found"


class TestCardEndpoints:
    """Тесты для эндпоинтов карточек"""

    @pytest.mark.asyncio
    async def test_get_cards(self, mock_db, lane_row, card_row):
        with patch('swimlane.api.v1.cards.get_lane_or_404', return_value=lane_row), \
             patch('swimlane.api.v1.cards.CardService.get_by_lane_id', return_value=[card_row]) as mock_get:
            result = await get_cards("lane-uuid", mock_db)

            mock_get.assert_called_once_with(db=mock_db, lane_id=7)
            assert result == [card_row]

    @pytest.mark.asyncio
    async def test_create_card(self, mock_db, lane_row, card_row):
        with patch('swimlane.api.v1.cards.get_lane_or_404', return_value=lane_row), \
             patch('swimlane.api.v1.cards.CardService.create', return_value=card_row) as mock_create:
            result = await create_card("lane-uuid", CardCreate(title="Fix bug", priority="High"), mock_db)

            mock_create.assert_called_once_with(
                db=mock_db,
                lane_id=7,
                title="Fix bug",
                description="",
                priority=CardPriority.HIGH,
                position=None
            )
            assert result == card_row

    @pytest.mark.asyncio
    async def test_update_card_resolves_lane_uuid(self, mock_db, lane_row, card_row):
        with patch('swimlane.api.v1.cards.get_lane_or_404', return_value=lane_row) as mock_lane, \
             patch('swimlane.api.v1.cards.CardService.update', return_value=card_row) as mock_update:
            await update_card("card-uuid", CardUpdate(lane_uuid="lane-uuid", position=2), mock_db)

            mock_lane.assert_called_once_with("lane-uuid", mock_db)
            mock_update.assert_called_once_with(
                db=mock_db,
                card_uuid="card-uuid",
                title=None,
                description=None,
                priority=None,
                position=2,
                lane_id=7
            )

    @pytest.mark.asyncio
    async def test_update_missing_card(self, mock_db):
        with patch('swimlane.api.v1.cards.CardService.update', return_value=None):
            with pytest.raises(HTTPException) as exc_info:
                await update_card("missing", CardUpdate(title="x"), mock_db)

            assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_move_card(self, mock_db, lane_row, card_row):
        with patch('swimlane.api.v1.cards.CardService.get_by_uuid', return_value=card_row), \
             patch('swimlane.api.v1.cards.get_lane_or_404', return_value=lane_row), \
             patch('swimlane.api.v1.cards.CardService.move_card', return_value=card_row) as mock_move:
            result = await move_card("card-uuid", CardMove(lane_uuid="lane-uuid", position=3), mock_db)

            mock_move.assert_called_once_with(db=mock_db, card=card_row, target_lane=lane_row, position=3)
            assert result == card_row

    @pytest.mark.asyncio
    async def test_move_missing_card(self, mock_db):
        with patch('swimlane.api.v1.cards.CardService.get_by_uuid', return_value=None), \
             patch('swimlane.api.v1.cards.CardService.move_card') as mock_move:
            with pytest.raises(HTTPException) as exc_info:
                await move_card("missing", CardMove(lane_uuid="lane-uuid", position=0), mock_db)

            assert exc_info.value.status_code == 404
            assert exc_info.value.detail == "Card not found"
            mock_move.assert_not_called()

    @pytest.mark.asyncio
    async def test_move_to_missing_lane(self, mock_db, card_row):
        with patch('swimlane.api.v1.cards.CardService.get_by_uuid', return_value=card_row), \
             patch('swimlane.api.v1.lanes.LaneService.get_by_uuid', return_value=None), \
             patch('swimlane.api.v1.cards.CardService.move_card') as mock_move:
            with pytest.raises(HTTPException) as exc_info:
                await move_card("card-uuid", CardMove(lane_uuid="missing", position=0), mock_db)

            assert exc_info.value.status_code == 404
            assert exc_info.value.detail == "Target swim lane not found"
            mock_move.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_card(self, mock_db):
        with patch('swimlane.api.v1.cards.CardService.delete', return_value=True):
            result = await delete_card("card-uuid", mock_db)
            assert result == {"message": "Card deleted successfully"}


class TestVerifyEndpoint:
    """Тесты для эндпоинта проверки API"""

    @pytest.mark.asyncio
    async def test_verify_success(self, mock_db):
        payload = {
            "status": "success",
            "message": "API verification successful",
            "tests": {"connection": True, "read": True, "write": True},
        }
        with patch('swimlane.api.v1.verify.VerifyService.verify', return_value=payload):
            assert await verify_api(mock_db) == payload

    @pytest.mark.asyncio
    async def test_verify_failure_returns_500(self, mock_db):
        payload = {
            "status": "error",
            "message": "API verification failed",
            "error": "connection refused",
            "tests": {"connection": False, "read": False, "write": False},
        }
        with patch('swimlane.api.v1.verify.VerifyService.verify', return_value=payload):
            response = await verify_api(mock_db)

            assert response.status_code == 500
            body = json.loads(response.body)
            assert body["tests"] == {"connection": False, "read": False, "write": False}
            assert body["error"] == "connection refused"

    @pytest.mark.asyncio
    async def test_verify_service_reports_failed_step(self):
        from swimlane.services.verify_service import VerifyService

        db = AsyncMock(spec=QueryProxy)
        db.fetch_one.return_value = {"test": 1}
        db.scalar.side_effect = PersistenceError("no such table")

        result = await VerifyService.verify(db)

        assert result["status"] == "error"
        assert result["error"] == "no such table"
        assert result["tests"] == {"connection": True, "read": False, "write": False}


class TestExceptionHandlers:
    """Тесты обработчиков ошибок"""

    @pytest.mark.asyncio
    async def test_validation_errors_become_400(self):
        exc = RequestValidationError([
            {"loc": ("body", "title"), "msg": "Field required", "type": "missing"},
        ])
        response = await validation_exception_handler(make_request(), exc)

        assert response.status_code == 400
        assert json.loads(response.body) == {
            "errors": [{"field": "title", "msg": "Field required", "location": "body"}]
        }

    @pytest.mark.asyncio
    async def test_persistence_errors_become_500(self):
        response = await persistence_exception_handler(make_request(), PersistenceError("Table missing"))

        assert response.status_code == 500
        assert json.loads(response.body) == {"error": "Table missing"}
