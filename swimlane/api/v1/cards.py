from typing import List
from fastapi import APIRouter, Depends, HTTPException, status

from swimlane.db import QueryProxy, get_query_proxy
from swimlane.api.v1.lanes import get_lane_or_404
from swimlane.services.card_service import CardService
from swimlane.schemas.card import CardCreate, CardUpdate, CardMove, CardResponse
from swimlane.schemas.board import MessageResponse
from swimlane.logs import api_logger, debug_logger

# Cards listed and created through their lane
lane_cards_router = APIRouter(
    prefix="/lanes/{lane_uuid}/cards",
    tags=["cards"],
)

router = APIRouter(
    prefix="/cards",
    tags=["cards"],
)


async def get_card_or_404(card_uuid: str, db: QueryProxy) -> dict:
    """Resolve a card uuid or raise 404"""
    card = await CardService.get_by_uuid(db=db, card_uuid=card_uuid)
    if not card:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Card not found"
        )
    return card


@lane_cards_router.get("", response_model=List[CardResponse])
async def get_cards(lane_uuid: str, db: QueryProxy = Depends(get_query_proxy)):
    """Get the cards of a lane ordered by position"""
    lane = await get_lane_or_404(lane_uuid, db)
    return await CardService.get_by_lane_id(db=db, lane_id=lane["id"])


@lane_cards_router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def create_card(
    lane_uuid: str,
    card_create: CardCreate,
    db: QueryProxy = Depends(get_query_proxy),
):
    """Create a card in a lane"""
    lane = await get_lane_or_404(lane_uuid, db)
    card = await CardService.create(
        db=db,
        lane_id=lane["id"],
        title=card_create.title,
        description=card_create.description,
        priority=card_create.priority,
        position=card_create.position
    )
    api_logger.info(f"Card created: {card['uuid']} in lane {lane_uuid}")
    return card


@router.put("/{card_uuid}", response_model=CardResponse)
async def update_card(
    card_uuid: str,
    card_update: CardUpdate,
    db: QueryProxy = Depends(get_query_proxy),
):
    """Update a card, only supplied fields change"""
    lane_id = None
    if card_update.lane_uuid is not None:
        lane = await get_lane_or_404(card_update.lane_uuid, db)
        lane_id = lane["id"]

    card = await CardService.update(
        db=db,
        card_uuid=card_uuid,
        title=card_update.title,
        description=card_update.description,
        priority=card_update.priority,
        position=card_update.position,
        lane_id=lane_id
    )
    if not card:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Card not found"
        )
    return card


@router.put("/{card_uuid}/move", response_model=CardResponse)
async def move_card(
    card_uuid: str,
    card_move: CardMove,
    db: QueryProxy = Depends(get_query_proxy),
):
    """Move a card to a lane at a position; both lanes are renumbered"""
    card = await get_card_or_404(card_uuid, db)
    target_lane = await get_lane_or_404(card_move.lane_uuid, db, detail="Target swim lane not found")

    debug_logger.debug(
        f"Перемещение карточки {card_uuid} в колонку {card_move.lane_uuid} на позицию {card_move.position}"
    )
    return await CardService.move_card(
        db=db,
        card=card,
        target_lane=target_lane,
        position=card_move.position
    )


@router.delete("/{card_uuid}", response_model=MessageResponse)
async def delete_card(card_uuid: str, db: QueryProxy = Depends(get_query_proxy)):
    """Delete a card"""
    success = await CardService.delete(db=db, card_uuid=card_uuid)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Card not found"
        )
    api_logger.info(f"Card deleted: {card_uuid}")
    return {"message": "Card deleted successfully"}
