from __future__ import annotations

import operator
from typing import Callable, Generic, List, Optional, TypeVar

from .errors import EmptyQueueError, QueueWindowError

T = TypeVar("T")


def _identity(item) -> int:
    return item


class BucketQueue(Generic[T]):
    """Circular bucket priority queue.

    Pushes and pops run in O(1) amortized time, with one strict requirement:
    when the last popped item had cost ``c``, every item pushed before the
    next pop must have a cost in ``[c, c + bucket_count - 1]``. Out-of-window
    pushes are not detected unless ``check_window`` is set; they silently
    break the pop order.

    Items sharing a bucket pop most-recently-pushed first.
    """

    def __init__(
        self,
        bits: int = 8,
        cost: Optional[Callable[[T], int]] = None,
        equals: Optional[Callable[[T, T], bool]] = None,
        check_window: bool = False,
    ):
        if bits <= 0:
            raise ValueError(f"bits must be positive, got {bits}")
        self.bucket_count = 1 << bits
        self.mask = self.bucket_count - 1
        self.size = 0
        self.loc = 0
        self._cost = cost if cost is not None else _identity
        self._equals = equals if equals is not None else operator.eq
        self._buckets: List[List[T]] = [[] for _ in range(self.bucket_count)]
        self._check_window = check_window
        self._floor = 0

    def __len__(self) -> int:
        return self.size

    def is_empty(self) -> bool:
        return self.size == 0

    def bucket_of(self, item: T) -> int:
        return int(self._cost(item)) & self.mask

    def push(self, item: T) -> None:
        if self._check_window:
            cost = int(self._cost(item))
            if not self._floor <= cost < self._floor + self.bucket_count:
                raise QueueWindowError(
                    f"Cost {cost} outside window [{self._floor}, "
                    f"{self._floor + self.bucket_count - 1}]"
                )
        self._buckets[self.bucket_of(item)].append(item)
        self.size += 1

    def pop(self) -> T:
        if self.size == 0:
            raise EmptyQueueError("Cannot pop, bucket queue is empty.")

        buckets = self._buckets
        while not buckets[self.loc]:
            self.loc = (self.loc + 1) & self.mask

        item = buckets[self.loc].pop()
        self.size -= 1
        if self._check_window:
            self._floor = int(self._cost(item))
        return item

    def remove(self, item: T) -> bool:
        """Remove ``item`` using its current cost to find the bucket.

        Returns False when the item is not queued under that cost.
        """
        bucket = self._buckets[self.bucket_of(item)]
        for i in range(len(bucket) - 1, -1, -1):
            if self._equals(bucket[i], item):
                del bucket[i]
                self.size -= 1
                return True
        return False


__all__ = ["BucketQueue"]
