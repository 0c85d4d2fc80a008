from swimlane.models.board import Board
from swimlane.models.lane import Lane
from swimlane.models.card import Card, CardPriority

board_table = Board.__table__
lane_table = Lane.__table__
card_table = Card.__table__
