from typing import Callable, Iterable, TypeVar

from debrid.core.errors import NoSelectableFileError

T = TypeVar("T")


def select_largest(items: Iterable[T], size: Callable[[T], int]) -> T:
    """
    Returns the item with the largest size. On ties the first one wins.
    Items with size 0 are never selected.
    """
    largest = None
    largest_size = 0
    for item in items:
        item_size = size(item)
        if item_size > largest_size:
            largest = item
            largest_size = item_size

    if largest is None:
        raise NoSelectableFileError("couldn't find a file with a size greater than 0")
    return largest
