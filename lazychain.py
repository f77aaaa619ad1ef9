"""
Chain: a lazy iterator wrapper with a functional interface.

Adapters (map, filter, skip, take, chain, cycle, batch) return a new Chain
and compute nothing. Terminal operations (collect, count, fold, all, any,
...) pull elements and return a plain value.

Each Chain owns its producer exactly once. Calling an adapter or a terminal
hands the producer off, after which the Chain is spent:

    >>> evens = Chain.from_collection([1, 2, 3, 4]).filter(lambda x: x % 2 == 0)
    >>> evens.map(lambda x: x * 10).collect()
    [20, 40]
    >>> evens.collect()
    Traceback (most recent call last):
    ...
    producers.ChainConsumedError: Chain has already been consumed
"""

import logging
import operator
from collections.abc import Iterator as IteratorABC
from typing import Any, Callable, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar, Union

from producers import (
    AppendProducer,
    BatchProducer,
    ChainConsumedError,
    CycleProducer,
    FilterProducer,
    InvalidSourceError,
    LazyChainError,
    MapProducer,
    Producer,
    SkipProducer,
    SourceProducer,
    TakeProducer,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")
Acc = TypeVar("Acc")

__all__ = ["Chain", "ChainConsumedError", "InvalidSourceError", "LazyChainError"]


def _is_true(value: Any) -> bool:
    return value is True


class Chain(Generic[T]):
    """Lazy, composable view over a single element producer."""

    def __init__(self, producer: Iterator[T]):
        if not isinstance(producer, IteratorABC):
            logger.debug("Rejected producer of type %s", type(producer).__name__)
            raise InvalidSourceError(
                f"Invalid source for Chain: {type(producer).__name__} is not an iterator"
            )
        if not isinstance(producer, Producer):
            producer = SourceProducer(producer)
        self._producer: Optional[Producer[T]] = producer

    @classmethod
    def from_collection(cls, items: Iterable[T]) -> "Chain[T]":
        """Build a chain over an in-memory collection (list, tuple, range...)."""
        return cls(SourceProducer(items))

    @classmethod
    def from_producer(cls, producer: Iterator[T]) -> "Chain[T]":
        """Build a chain over a caller-supplied iterator such as a generator or file."""
        return cls(producer)

    @property
    def consumed(self) -> bool:
        return self._producer is None

    # --------- chainable operators (lazy) ----------
    def map(self, transform: Callable[[T], U]) -> "Chain[U]":
        """Apply ``transform`` to every element as it is pulled."""
        return Chain(MapProducer(self._release(), transform))

    def filter(self, predicate: Callable[[T], bool]) -> "Chain[T]":
        """Keep only the elements for which ``predicate`` is truthy."""
        return Chain(FilterProducer(self._release(), predicate))

    def skip(self, n: int) -> "Chain[T]":
        """Drop the first ``n`` elements. Negative counts skip nothing."""
        return Chain(SkipProducer(self._release(), n))

    def take(self, n: int) -> "Chain[T]":
        """
        Yield the first ``n`` elements.

        If fewer than ``n`` are available, take limits itself to what the
        upstream has. Negative counts yield nothing.
        """
        return Chain(TakeProducer(self._release(), n))

    def chain(self, other: Union["Chain[T]", Iterable[T]]) -> "Chain[T]":
        """
        Attach ``other`` after this chain.

        ``other`` may be another Chain (which is consumed), an iterator or a
        collection. Its elements are pulled only once this chain runs dry.
        """
        if isinstance(other, Chain):
            tail = other._release()
        else:
            tail = SourceProducer(other)
        return Chain(AppendProducer(self._release(), tail))

    def cycle(self) -> "Chain[T]":
        """
        Repeat the elements endlessly.

        The result never runs dry unless the source is empty, so follow it
        with take() or a short-circuiting terminal. Calling collect(),
        count() or fold() on it will hang forever.
        """
        return Chain(CycleProducer(self._release()))

    def batch(self, size: int) -> "Chain[Tuple[T, ...]]":
        """Group elements into tuples of ``size``; the last may be shorter."""
        return Chain(BatchProducer(self._release(), size))

    def chunk(self, size):
        """Alias for batch()."""
        return self.batch(size)

    def page(self, page_number: int, page_size: int) -> "Chain[T]":
        """Select a 1-indexed page of ``page_size`` elements."""
        if page_number < 1:
            raise ValueError("Page number must be >= 1")
        offset = (page_number - 1) * page_size
        return self.skip(offset).take(page_size)

    # --------- terminal operations (force evaluation) ----------
    def all(self, predicate: Optional[Callable[[T], bool]] = None) -> bool:
        """
        Test whether every element matches ``predicate``.

        Stops at the first failure. An empty chain returns True. Predicate
        results are judged by truthiness, so a predicate returning None
        counts as a failure. Without a predicate, elements must be exactly
        ``True``.
        """
        if predicate is None:
            predicate = _is_true
        return all(predicate(x) for x in self._release())

    def any(self, predicate: Optional[Callable[[T], bool]] = None) -> bool:
        """
        Test whether some element matches ``predicate``.

        Stops at the first match. An empty chain returns False. Predicate
        results are judged by truthiness, so any truthy result matches and
        None does not. Without a predicate, an element must be exactly
        ``True`` to match.
        """
        if predicate is None:
            predicate = _is_true
        return any(predicate(x) for x in self._release())

    def collect(self) -> List[T]:
        """Pull every element into a list."""
        return list(self._release())

    def count(self) -> int:
        """
        Consume the chain and return how many elements it produced.

        No guarding against infinite chains: calling this after cycle()
        hangs forever.
        """
        count = 0
        for _ in self._release():
            count += 1
        return count

    def fold(self, initial: Acc, combine: Callable[[Acc, T], Acc]) -> Acc:
        """
        Reduce the chain to a single value, left to right.

        ``combine(acc, item)`` returns the accumulator for the next element;
        ``initial`` is the accumulator for the first. Does not terminate on
        infinite chains.
        """
        accumulator = initial
        for item in self._release():
            accumulator = combine(accumulator, item)
        return accumulator

    def sum(self, start=0):
        """Return the sum of all elements, added to ``start``."""
        return self.fold(start, operator.add)

    def first(self, default: Optional[T] = None) -> Optional[T]:
        """Return the first element, or ``default`` if the chain is empty."""
        return next(self._release(), default)

    def paginate(self, page_size: int) -> Iterator[List[T]]:
        """Lazily yield lists of up to ``page_size`` elements."""
        return (list(page) for page in self.batch(page_size))

    # --------- iterator protocol ----------
    def __iter__(self) -> Iterator[T]:
        producer = self._release()
        return (item for item in producer)

    def __repr__(self):
        state = "consumed" if self.consumed else type(self._producer).__name__
        return f"Chain({state})"

    # --------- helpers ----------
    def _release(self) -> Producer[T]:
        """Hand off the producer; the chain cannot be used afterwards."""
        producer = self._producer
        if producer is None:
            raise ChainConsumedError("Chain has already been consumed")
        self._producer = None
        return producer
