from swimlane.client.api_client import KanbanApiClient
from swimlane.client.exceptions import KanbanApiError, KanbanNotFoundError, KanbanValidationError
from swimlane.client.reorder import DraggableLocation, DropResult, MovePlan, plan_move, apply_move
from swimlane.client.store import BoardStore, Mutation, MutationState
