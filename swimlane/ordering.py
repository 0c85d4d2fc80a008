"""List bookkeeping shared by the server move endpoint and the client reorder logic.

All helpers return new lists and leave their inputs untouched; positions are
the indexes of the returned lists.
"""
from typing import List, Sequence, Tuple, TypeVar

T = TypeVar("T")


def clamp_index(index: int, length: int) -> int:
    """Clamp an insertion index to [0, length]"""
    return max(0, min(index, length))


def reinsert(items: Sequence[T], from_index: int, to_index: int) -> List[T]:
    """Move the item at from_index to to_index within the same list"""
    result = list(items)
    moved = result.pop(from_index)
    result.insert(clamp_index(to_index, len(result)), moved)
    return result


def transfer(
    source: Sequence[T],
    destination: Sequence[T],
    from_index: int,
    to_index: int,
) -> Tuple[List[T], List[T]]:
    """Move the item at from_index of source into destination at to_index"""
    new_source = list(source)
    moved = new_source.pop(from_index)
    new_destination = list(destination)
    new_destination.insert(clamp_index(to_index, len(new_destination)), moved)
    return new_source, new_destination


def is_dense(positions: Sequence[int]) -> bool:
    """True when positions are exactly 0..n-1 in order"""
    return list(positions) == list(range(len(positions)))
