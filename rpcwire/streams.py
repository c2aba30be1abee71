"""Request options, streaming requests and single-item stream helpers."""

from __future__ import annotations

import queue
from dataclasses import dataclass, field
from typing import Generic, Iterable, Iterator, TypeVar

from .errors import OtherError
from .metadata import Metadata

T = TypeVar("T")

_END = object()


def stream_single(iterable: Iterable[T]) -> T:
    """Return the only item of ``iterable``.

    Raises :class:`ValueError` if it yields no item or more than one.
    """
    iterator = iter(iterable)
    try:
        item = next(iterator)
    except StopIteration:
        raise ValueError("expecting one element, found none") from None
    for _ in iterator:
        raise ValueError("more than one element")
    return item


@dataclass
class RequestOptions:
    """Per-call options: initial metadata and a cachability hint."""

    metadata: Metadata = field(default_factory=Metadata)
    cachable: bool = False


class StreamingRequest(Generic[T]):
    """A one-shot stream of request messages, excluding initial metadata."""

    def __init__(self, items: Iterable[T]) -> None:
        self._iterator = iter(items)

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        return next(self._iterator)

    @classmethod
    def once(cls, item: T) -> StreamingRequest[T]:
        """A stream of exactly one item."""
        return cls((item,))

    @classmethod
    def single(cls, item: T) -> StreamingRequest[T]:
        """A stream of exactly one item."""
        return cls((item,))

    @classmethod
    def iter(cls, items: Iterable[T]) -> StreamingRequest[T]:
        """A stream of the items of ``items``."""
        return cls(items)

    @classmethod
    def empty(cls) -> StreamingRequest[T]:
        """A stream with no items."""
        return cls(())

    @classmethod
    def err(cls, error: BaseException) -> StreamingRequest[T]:
        """A stream that raises ``error`` when read."""

        def failing() -> Iterator[T]:
            raise error
            yield  # pragma: no cover

        return cls(failing())

    @classmethod
    def channel(cls) -> tuple[StreamingRequestSender[T], StreamingRequest[T]]:
        """A sender and the stream that receives what it sends."""
        items: queue.Queue = queue.Queue()
        return StreamingRequestSender(items), cls(iter(items.get, _END))


class StreamingRequestSender(Generic[T]):
    """Feeding end of a channel-backed :class:`StreamingRequest`."""

    def __init__(self, items: queue.Queue) -> None:
        self._queue: queue.Queue | None = items

    @property
    def closed(self) -> bool:
        """Whether the sender has been closed."""
        return self._queue is None

    def send(self, item: T) -> None:
        """Deliver ``item`` to the receiving stream."""
        if self._queue is None:
            raise OtherError("sender closed")
        self._queue.put(item)

    def close(self) -> None:
        """Stop sending; the receiving stream ends after the items already sent."""
        if self._queue is not None:
            self._queue.put(_END)
            self._queue = None

    def __enter__(self) -> StreamingRequestSender[T]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()