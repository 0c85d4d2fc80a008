# Import all models here so they are registered on Base.metadata
from swimlane.db.base import Base
from swimlane.models.board import Board
from swimlane.models.lane import Lane
from swimlane.models.card import Card
