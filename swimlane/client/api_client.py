"""
Асинхронный клиент HTTP API канбан-доски.

Пример использования:
```python
async with KanbanApiClient("http://localhost:5001") as client:
    boards = await client.get_boards()
    lanes = await client.get_lanes(boards[0].uuid)
    card = await client.create_card(lanes[0].uuid, {"title": "Fix bug", "priority": "High"})
```
"""
from typing import Any, Dict, List, Optional

import aiohttp

from swimlane.core.config import get_settings
from swimlane.client.exceptions import KanbanApiError, KanbanNotFoundError, KanbanValidationError
from swimlane.schemas.board import BoardResponse
from swimlane.schemas.lane import LaneResponse
from swimlane.schemas.card import CardResponse
from swimlane.schemas.verify import VerifyResponse
from swimlane.logs import debug_logger


class KanbanApiClient:
    """Thin wrapper over the /api endpoints; every failure raises, nothing is retried"""

    def __init__(self, base_url: Optional[str] = None, session: Optional[aiohttp.ClientSession] = None):
        self.base_url = (base_url or get_settings().API_URL).rstrip("/")
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        if self.session is None:
            self.session = aiohttp.ClientSession(headers={"Content-Type": "application/json"})
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        if self.session is not None and self._owns_session:
            await self.session.close()
            self.session = None

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        if self.session is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        url = f"{self.base_url}{path}"
        try:
            async with self.session.request(method, url, json=json) as response:
                try:
                    data = await response.json(content_type=None)
                except ValueError:
                    data = None

                if response.status >= 400:
                    raise self._error_from(response.status, data)
                return data
        except aiohttp.ClientError as e:
            debug_logger.error(f"Ошибка запроса {method} {url}: {e}")
            raise KanbanApiError(f"HTTP client error: {e}") from e

    async def _request_list(self, method: str, path: str) -> List[Dict[str, Any]]:
        data = await self._request(method, path)
        if not isinstance(data, list):
            raise KanbanApiError(f"Invalid response from {path}: expected a list", payload=data)
        return data

    async def _request_object(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        data = await self._request(method, path, json=json)
        if not isinstance(data, dict):
            raise KanbanApiError(f"Invalid response from {path}: expected an object", payload=data)
        return data

    @staticmethod
    def _error_from(status: int, data: Any) -> KanbanApiError:
        payload = data if isinstance(data, dict) else {}
        if status == 400 and "errors" in payload:
            errors = payload["errors"]
            messages = ", ".join(f"{e.get('field')}: {e.get('msg')}" for e in errors)
            return KanbanValidationError(f"Validation error: {messages}", errors=errors)

        message = payload.get("detail") or payload.get("error") or f"API error {status}"
        if status == 404:
            return KanbanNotFoundError(message, status, payload)
        return KanbanApiError(message, status, payload)

    # === ДОСКИ ===

    async def get_boards(self) -> List[BoardResponse]:
        data = await self._request_list("GET", "/api/boards")
        return [BoardResponse.model_validate(item) for item in data]

    async def get_board(self, board_uuid: str) -> BoardResponse:
        return BoardResponse.model_validate(await self._request_object("GET", f"/api/boards/{board_uuid}"))

    async def create_board(self, board_data: Dict[str, Any]) -> BoardResponse:
        return BoardResponse.model_validate(await self._request_object("POST", "/api/boards", json=board_data))

    async def update_board(self, board_uuid: str, board_data: Dict[str, Any]) -> BoardResponse:
        data = await self._request_object("PUT", f"/api/boards/{board_uuid}", json=board_data)
        return BoardResponse.model_validate(data)

    async def delete_board(self, board_uuid: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/api/boards/{board_uuid}")

    # === КОЛОНКИ ===

    async def get_lanes(self, board_uuid: str) -> List[LaneResponse]:
        data = await self._request_list("GET", f"/api/boards/{board_uuid}/lanes")
        return [LaneResponse.model_validate(item) for item in data]

    async def create_lane(self, board_uuid: str, lane_data: Dict[str, Any]) -> LaneResponse:
        data = await self._request_object("POST", f"/api/boards/{board_uuid}/lanes", json=lane_data)
        return LaneResponse.model_validate(data)

    async def update_lane(self, lane_uuid: str, lane_data: Dict[str, Any]) -> LaneResponse:
        data = await self._request_object("PUT", f"/api/lanes/{lane_uuid}", json=lane_data)
        return LaneResponse.model_validate(data)

    async def delete_lane(self, lane_uuid: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/api/lanes/{lane_uuid}")

    # === КАРТОЧКИ ===

    async def get_cards(self, lane_uuid: str) -> List[CardResponse]:
        data = await self._request_list("GET", f"/api/lanes/{lane_uuid}/cards")
        return [CardResponse.model_validate(item) for item in data]

    async def create_card(self, lane_uuid: str, card_data: Dict[str, Any]) -> CardResponse:
        data = await self._request_object("POST", f"/api/lanes/{lane_uuid}/cards", json=card_data)
        return CardResponse.model_validate(data)

    async def update_card(self, card_uuid: str, card_data: Dict[str, Any]) -> CardResponse:
        data = await self._request_object("PUT", f"/api/cards/{card_uuid}", json=card_data)
        return CardResponse.model_validate(data)

    async def delete_card(self, card_uuid: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/api/cards/{card_uuid}")

    async def move_card(self, card_uuid: str, lane_uuid: str, position: int) -> CardResponse:
        data = await self._request_object(
            "PUT",
            f"/api/cards/{card_uuid}/move",
            json={"lane_uuid": lane_uuid, "position": position},
        )
        return CardResponse.model_validate(data)

    # === ПРОВЕРКА API ===

    async def verify_api(self) -> VerifyResponse:
        """Health check; a failed check (HTTP 500) still returns the per-test flags"""
        try:
            data = await self._request_object("GET", "/api/verify")
        except KanbanApiError as e:
            if isinstance(e.payload, dict) and "tests" in e.payload:
                return VerifyResponse.model_validate(e.payload)
            return VerifyResponse(
                status="error",
                message="API verification failed",
                error=e.message,
                tests={"connection": False, "read": False, "write": False},
            )
        return VerifyResponse.model_validate(data)
