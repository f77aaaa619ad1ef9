"""
Element producers for lazy chains.

A producer is an iterator that hands out one element per pull and raises
StopIteration once it has nothing left. Adapters wrap an upstream producer
and do their work only when pulled, so building a pipeline costs nothing
until it is consumed.
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Generic, Iterable, Iterator, List, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


class LazyChainError(Exception):
    """Base class for errors raised by the chain library."""
    pass


class InvalidSourceError(LazyChainError, TypeError):
    """Raised when a chain is built from something that cannot produce elements."""
    pass


class ChainConsumedError(LazyChainError, RuntimeError):
    """Raised when a chain is used after its producer was handed off."""
    pass


class Producer(ABC, Generic[T]):
    """
    Pull-based element source.

    ``next(producer)`` pulls one element. Exhaustion is sticky: after the
    first StopIteration every further pull raises StopIteration again and
    upstream is never touched. Errors raised while producing are not caught.
    """

    def __init__(self):
        self._exhausted = False

    def __iter__(self) -> "Producer[T]":
        return self

    def __next__(self) -> T:
        if self._exhausted:
            raise StopIteration
        try:
            return self._advance()
        except StopIteration:
            self._exhausted = True
            raise

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @abstractmethod
    def _advance(self) -> T:
        """Produce the next element or raise StopIteration."""
        ...


class SourceProducer(Producer[T]):
    """Wraps a raw collection or any caller-supplied iterator."""

    def __init__(self, source: Iterable[T]):
        super().__init__()
        try:
            self._iterator = iter(source)
        except TypeError as e:
            logger.debug("Rejected source of type %s", type(source).__name__)
            raise InvalidSourceError(
                f"Invalid source for Chain: {type(source).__name__} is not iterable"
            ) from e

    def _advance(self) -> T:
        return next(self._iterator)


# --------- element-wise adapters ----------

def _call(callback, *args):
    # StopIteration escaping user code is an error, not exhaustion (PEP 479)
    try:
        return callback(*args)
    except StopIteration as e:
        name = getattr(callback, "__name__", "callback")
        raise RuntimeError(f"{name} raised StopIteration") from e


class MapProducer(Producer[U]):
    def __init__(self, upstream, transform: Callable[[T], U]):
        super().__init__()
        self._upstream = upstream
        self._transform = transform

    def _advance(self):
        item = next(self._upstream)
        return _call(self._transform, item)


class FilterProducer(Producer[T]):
    """Pulls from upstream until an element passes the predicate."""

    def __init__(self, upstream, predicate: Callable[[T], bool]):
        super().__init__()
        self._upstream = upstream
        self._predicate = predicate

    def _advance(self):
        while True:
            item = next(self._upstream)
            if _call(self._predicate, item):
                return item


# --------- counting adapters ----------

class SkipProducer(Producer[T]):
    """Discards the first ``n`` elements on the first pull."""

    def __init__(self, upstream, n):
        super().__init__()
        self._upstream = upstream
        self._remaining = max(0, int(n))

    def _advance(self):
        while self._remaining > 0:
            next(self._upstream)
            self._remaining -= 1
        return next(self._upstream)


class TakeProducer(Producer[T]):
    """Yields at most ``n`` elements. Upstream is not pulled past the n-th."""

    def __init__(self, upstream: Iterator[T], n: int):
        super().__init__()
        self._upstream = upstream
        self._remaining = max(0, int(n))

    def _advance(self) -> T:
        if self._remaining <= 0:
            raise StopIteration
        item = next(self._upstream)
        self._remaining -= 1
        return item


class BatchProducer(Producer[Tuple[T, ...]]):
    """Groups consecutive elements into tuples; the last one may be short."""

    def __init__(self, upstream: Iterator[T], size: int):
        super().__init__()
        size = int(size)
        if size < 1:
            raise ValueError("Batch size must be >= 1")
        self._upstream = upstream
        self._size = size

    def _advance(self) -> Tuple[T, ...]:
        bucket: List[T] = []
        while len(bucket) < self._size:
            try:
                bucket.append(next(self._upstream))
            except StopIteration:
                break
        if not bucket:
            raise StopIteration
        return tuple(bucket)


# --------- sequencing adapters ----------

class AppendProducer(Producer[T]):
    """Drains each upstream in order, moving on only once the current one is done."""

    def __init__(self, *upstreams: Iterator[T]):
        super().__init__()
        self._upstreams = deque(upstreams)

    def _advance(self) -> T:
        while self._upstreams:
            try:
                return next(self._upstreams[0])
            except StopIteration:
                self._upstreams.popleft()
                logger.debug("Append segment exhausted, %d remaining", len(self._upstreams))
        raise StopIteration


class CycleProducer(Producer[T]):
    """
    Repeats upstream endlessly.

    The first pass yields upstream elements while buffering them. Once
    upstream is exhausted the buffer is replayed forever and upstream is
    dropped. An empty upstream makes the cycle itself empty.
    """

    def __init__(self, upstream: Iterator[T]):
        super().__init__()
        self._upstream = upstream
        self._buffer: List[T] = []
        self._cursor = 0

    def _advance(self) -> T:
        if self._upstream is not None:
            try:
                item = next(self._upstream)
            except StopIteration:
                self._upstream = None
                logger.debug("Cycle source exhausted after %d elements", len(self._buffer))
                if not self._buffer:
                    raise
            else:
                self._buffer.append(item)
                return item

        item = self._buffer[self._cursor]
        self._cursor = (self._cursor + 1) % len(self._buffer)
        return item
