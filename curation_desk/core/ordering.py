"""List helpers used to reorder newsletter items."""

from typing import List, Sequence, TypeVar

from curation_desk.core.exceptions import IndexOutOfRange

T = TypeVar("T")


def reorder(items: Sequence[T], from_index: int, to_index: int) -> List[T]:
    """Move the element at ``from_index`` so it ends up at ``to_index``.

    ``to_index`` is measured against the list with the element already removed.
    The input is never mutated.
    """
    size = len(items)
    for name, index in (("from_index", from_index), ("to_index", to_index)):
        if not 0 <= index < size:
            raise IndexOutOfRange(f"{name} {index} outside [0, {size})")

    result = list(items)
    moved = result.pop(from_index)
    result.insert(to_index, moved)
    return result


def insert_at(items: Sequence[T], item: T, index: int) -> List[T]:
    """Return a copy of ``items`` with ``item`` inserted at the clamped ``index``."""
    result = list(items)
    result.insert(clamp_index(index, len(result)), item)
    return result


def clamp_index(index: int, size: int) -> int:
    return max(0, min(index, size))
