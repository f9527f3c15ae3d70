from typing import Iterator, Sequence, TypeVar

from app.core.config import PROGRESS_BATCH_SIZE

T = TypeVar("T")


def chunked(values: Sequence[T], size: int | None = None) -> Iterator[list[T]]:
    """Split ids into IN (...) sized batches. Sorted so queries are repeatable."""
    size = size or PROGRESS_BATCH_SIZE
    ordered = sorted(set(values))
    for start in range(0, len(ordered), size):
        yield ordered[start : start + size]
