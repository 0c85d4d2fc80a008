"""Drag-end handling: which card goes where, and the positions that follow.

Lanes are identified by their uuid (the droppable id) and cards by theirs
(the draggable id), the same way a drag-and-drop UI reports them.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from swimlane.ordering import clamp_index, reinsert, transfer
from swimlane.schemas.card import CardResponse


@dataclass
class DraggableLocation:
    droppable_id: str
    index: int


@dataclass
class DropResult:
    draggable_id: str
    source: DraggableLocation
    destination: Optional[DraggableLocation] = None


@dataclass
class MovePlan:
    card: CardResponse
    source_lane_uuid: str
    destination_lane_uuid: str
    index: int
    source_cards: List[CardResponse]
    destination_cards: List[CardResponse]

    @property
    def same_lane(self) -> bool:
        return self.source_lane_uuid == self.destination_lane_uuid


def plan_move(lane_cards: Dict[str, List[CardResponse]], result: DropResult) -> Optional[MovePlan]:
    """
    Compute the new order of the affected lanes for a drop

    Args:
        lane_cards: Cards of every lane, keyed by lane uuid, ordered by position
        result: The drop reported by the UI

    Returns:
        The plan, or None when the drop changes nothing or refers to unknown lanes/cards
    """
    source, destination = result.source, result.destination
    if destination is None:
        return None
    if destination.droppable_id == source.droppable_id and destination.index == source.index:
        return None

    source_cards = lane_cards.get(source.droppable_id)
    destination_cards = lane_cards.get(destination.droppable_id)
    if source_cards is None or destination_cards is None:
        return None

    from_index = next(
        (i for i, card in enumerate(source_cards) if card.uuid == result.draggable_id),
        None,
    )
    if from_index is None:
        return None
    card = source_cards[from_index]

    if source.droppable_id == destination.droppable_id:
        ordered = reinsert(source_cards, from_index, destination.index)
        return MovePlan(
            card=card,
            source_lane_uuid=source.droppable_id,
            destination_lane_uuid=destination.droppable_id,
            index=clamp_index(destination.index, len(source_cards) - 1),
            source_cards=ordered,
            destination_cards=ordered,
        )

    new_source, new_destination = transfer(source_cards, destination_cards, from_index, destination.index)
    return MovePlan(
        card=card,
        source_lane_uuid=source.droppable_id,
        destination_lane_uuid=destination.droppable_id,
        index=clamp_index(destination.index, len(destination_cards)),
        source_cards=new_source,
        destination_cards=new_destination,
    )


def apply_move(plan: MovePlan) -> None:
    """Write the planned lane and 0..n-1 positions onto the card objects"""
    plan.card.lane_uuid = plan.destination_lane_uuid
    for position, card in enumerate(plan.source_cards):
        card.position = position
    if not plan.same_lane:
        for position, card in enumerate(plan.destination_cards):
            card.position = position
