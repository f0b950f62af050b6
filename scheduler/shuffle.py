"""Uniform random permutation used for tie-breaking and candidate sampling."""

import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


def shuffle(items: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Return a shuffled copy of items (Fisher-Yates); the input is untouched."""
    rng = rng or random.Random()
    arr = list(items)
    for i in range(len(arr) - 1, 0, -1):
        j = rng.randint(0, i)
        arr[i], arr[j] = arr[j], arr[i]
    return arr
