from typing import List
from fastapi import APIRouter, Depends, HTTPException, status

from swimlane.db import QueryProxy, get_query_proxy
from swimlane.services.board_service import BoardService
from swimlane.schemas.board import (
    BoardCreate,
    BoardUpdate,
    BoardResponse,
    MessageResponse,
)
from swimlane.logs import api_logger

router = APIRouter(
    prefix="/boards",
    tags=["boards"],
)


async def get_board_or_404(board_uuid: str, db: QueryProxy) -> dict:
    """Resolve a board uuid or raise 404"""
    board = await BoardService.get_by_uuid(db=db, board_uuid=board_uuid)
    if not board:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Board not found"
        )
    return board


@router.get("", response_model=List[BoardResponse])
async def get_boards(db: QueryProxy = Depends(get_query_proxy)):
    """Get all boards, newest first"""
    return await BoardService.get_all(db=db)


@router.post("", response_model=BoardResponse, status_code=status.HTTP_201_CREATED)
async def create_board(
    board_create: BoardCreate,
    db: QueryProxy = Depends(get_query_proxy),
):
    """Create a new board"""
    board = await BoardService.create(
        db=db,
        name=board_create.name,
        description=board_create.description
    )
    api_logger.info(f"Board created: {board['uuid']}")
    return board


@router.get("/{board_uuid}", response_model=BoardResponse)
async def get_board(board_uuid: str, db: QueryProxy = Depends(get_query_proxy)):
    """Get a board by uuid"""
    return await get_board_or_404(board_uuid, db)


@router.put("/{board_uuid}", response_model=BoardResponse)
async def update_board(
    board_uuid: str,
    board_update: BoardUpdate,
    db: QueryProxy = Depends(get_query_proxy),
):
    """Update a board, only supplied fields change"""
    board = await BoardService.update(
        db=db,
        board_uuid=board_uuid,
        name=board_update.name,
        description=board_update.description
    )
    if not board:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Board not found"
        )
    return board


@router.delete("/{board_uuid}", response_model=MessageResponse)
async def delete_board(board_uuid: str, db: QueryProxy = Depends(get_query_proxy)):
    """Delete a board with all its lanes and cards"""
    success = await BoardService.delete(db=db, board_uuid=board_uuid)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Board not found"
        )
    api_logger.info(f"Board deleted: {board_uuid}")
    return {"message": "Board deleted successfully"}
