from fastapi import APIRouter
from swimlane.api.v1.verify import router as verify_router
from swimlane.api.v1.boards import router as boards_router
from swimlane.api.v1.lanes import router as lanes_router, board_lanes_router
from swimlane.api.v1.cards import router as cards_router, lane_cards_router

# Create main API router
api_router = APIRouter(prefix="/api")

# Include routers
api_router.include_router(verify_router)
api_router.include_router(boards_router)
api_router.include_router(board_lanes_router)
api_router.include_router(lanes_router)
api_router.include_router(lane_cards_router)
api_router.include_router(cards_router)
