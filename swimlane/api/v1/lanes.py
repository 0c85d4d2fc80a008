from typing import List
from fastapi import APIRouter, Depends, HTTPException, status

from swimlane.db import QueryProxy, get_query_proxy
from swimlane.api.v1.boards import get_board_or_404
from swimlane.services.lane_service import LaneService
from swimlane.schemas.lane import LaneCreate, LaneUpdate, LaneResponse
from swimlane.schemas.board import MessageResponse
from swimlane.logs import api_logger

# Lanes listed and created through their board
board_lanes_router = APIRouter(
    prefix="/boards/{board_uuid}/lanes",
    tags=["lanes"],
)

router = APIRouter(
    prefix="/lanes",
    tags=["lanes"],
)


async def get_lane_or_404(lane_uuid: str, db: QueryProxy, detail: str = "Swim lane not found") -> dict:
    """Resolve a lane uuid or raise 404"""
    lane = await LaneService.get_by_uuid(db=db, lane_uuid=lane_uuid)
    if not lane:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail
        )
    return lane


@board_lanes_router.get("", response_model=List[LaneResponse])
async def get_lanes(board_uuid: str, db: QueryProxy = Depends(get_query_proxy)):
    """Get the lanes of a board ordered by position"""
    board = await get_board_or_404(board_uuid, db)
    return await LaneService.get_by_board_id(db=db, board_id=board["id"])


@board_lanes_router.post("", response_model=LaneResponse, status_code=status.HTTP_201_CREATED)
async def create_lane(
    board_uuid: str,
    lane_create: LaneCreate,
    db: QueryProxy = Depends(get_query_proxy),
):
    """Create a lane in a board"""
    board = await get_board_or_404(board_uuid, db)
    lane = await LaneService.create(
        db=db,
        board_id=board["id"],
        name=lane_create.name,
        position=lane_create.position
    )
    api_logger.info(f"Swim lane created: {lane['uuid']} on board {board_uuid}")
    return lane


@router.put("/{lane_uuid}", response_model=LaneResponse)
async def update_lane(
    lane_uuid: str,
    lane_update: LaneUpdate,
    db: QueryProxy = Depends(get_query_proxy),
):
    """Update a lane, only supplied fields change"""
    lane = await LaneService.update(
        db=db,
        lane_uuid=lane_uuid,
        name=lane_update.name,
        position=lane_update.position
    )
    if not lane:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Swim lane not found"
        )
    return lane


@router.delete("/{lane_uuid}", response_model=MessageResponse)
async def delete_lane(lane_uuid: str, db: QueryProxy = Depends(get_query_proxy)):
    """Delete a lane with its cards"""
    success = await LaneService.delete(db=db, lane_uuid=lane_uuid)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Swim lane not found"
        )
    api_logger.info(f"Swim lane deleted: {lane_uuid}")
    return {"message": "Swim lane deleted successfully"}
