"""Change set batching.

Splits a change set into bounded groups so each commit payload stays small.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

from gitbatch.exceptions import InvalidBatchSizeError
from gitbatch.models.config import DEFAULT_FILES_PER_COMMIT

T = TypeVar("T")


def partition(
    changes: Sequence[T],
    group_size: int = DEFAULT_FILES_PER_COMMIT,
) -> list[list[T]]:
    """Split ``changes`` into consecutive groups of at most ``group_size``.

    Order is preserved; only the last group may be smaller. An empty
    input yields no groups.

    Raises:
        InvalidBatchSizeError: If ``group_size`` is not a positive integer.
    """
    if isinstance(group_size, bool) or not isinstance(group_size, int) or group_size < 1:
        raise InvalidBatchSizeError(group_size)
    items = list(changes)
    return [items[i:i + group_size] for i in range(0, len(items), group_size)]
