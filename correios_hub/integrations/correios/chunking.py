"""
Batch chunking for the price/deadline endpoints (at most 5 items per request).
Chunks are sent one at a time; the first failing chunk aborts the whole call,
so a merged result is only ever built from every chunk.
"""
from __future__ import annotations
import logging
from typing import Callable, Iterable, Iterator, List, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 5


def chunked(items: Sequence[T], size: int = DEFAULT_CHUNK_SIZE) -> Iterator[List[T]]:
    """Split items into consecutive lists of at most `size`, order preserved; the last may be shorter."""
    if size < 1:
        raise ValueError(f"chunk size must be >= 1, got {size}")
    buf: List[T] = []
    for it in items:
        buf.append(it)
        if len(buf) >= size:
            yield buf
            buf = []
    if buf:
        yield buf


def merge_in_order(responses: Iterable[List[R]]) -> List[R]:
    """Concatenate partial results in submission order."""
    merged: List[R] = []
    for part in responses:
        merged.extend(part)
    return merged


def fetch_in_chunks(
    items: Sequence[T],
    fetch_one: Callable[[List[T]], List[R]],
    size: int = DEFAULT_CHUNK_SIZE,
) -> List[R]:
    """
    Call fetch_one(chunk) sequentially and merge the results.
    Exceptions propagate on the first failure; later chunks are not attempted.
    """
    responses: List[List[R]] = []
    for idx, chunk in enumerate(chunked(items, size), start=1):
        logger.debug("Correios chunk %d: %d item(s)", idx, len(chunk))
        responses.append(fetch_one(chunk))
    return merge_in_order(responses)
