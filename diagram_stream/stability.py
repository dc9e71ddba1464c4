"""
Stability filtering for recovered stream elements.
"""

from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


def exclude_incomplete_last_item(items: Optional[Sequence[T]]) -> List[T]:
    """
    Drop the last recovered element, which may still be rewritten.

    An element only counts as finished once a following element has started,
    so a single recovered element is withheld as well.

    Args:
        items: Recovered elements, or None

    Returns:
        A new list with every element except the last one
    """
    if not items or len(items) <= 1:
        return []
    return list(items[:-1])
