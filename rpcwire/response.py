"""Decoding of a gRPC response received as HTTP headers, data and trailers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Sequence

from .errors import GrpcMessageError, OtherError
from .frame import GrpcFrameDecoder
from .headers import HEADER_GRPC_MESSAGE, HEADER_GRPC_STATUS, header_value
from .metadata import Metadata
from .status import GrpcStatus

HeaderList = Sequence[tuple[str, "bytes | str"]]

_INT_RE = re.compile(r"[+-]?[0-9]+")
_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


@dataclass(frozen=True)
class DataPart:
    """A chunk of the HTTP response body."""

    data: bytes


@dataclass(frozen=True)
class TrailersPart:
    """The HTTP trailers that end a response."""

    headers: HeaderList = field(default_factory=list)


@dataclass(frozen=True)
class TrailingMetadata:
    """Metadata carried by successful trailers."""

    metadata: Metadata


def _header_int(headers: HeaderList, name: str) -> int | None:
    """Parse a header as a 32-bit signed integer; absent or malformed gives ``None``."""
    value = header_value(headers, name)
    if value is None or not _INT_RE.fullmatch(value):
        return None
    number = int(value)
    if not _I32_MIN <= number <= _I32_MAX:
        return None
    return number


def init_headers_to_metadata(headers: HeaderList) -> Metadata:
    """Validate initial response headers and return the metadata they carry."""
    if header_value(headers, ":status") != "200":
        raise OtherError("not 200")
    grpc_status = _header_int(headers, HEADER_GRPC_STATUS)
    if grpc_status is not None and grpc_status != GrpcStatus.OK:
        message = header_value(headers, HEADER_GRPC_MESSAGE)
        raise GrpcMessageError(
            grpc_status, message if message is not None else "unknown error"
        )
    return Metadata.from_headers(headers)


def _trailers_error(headers: HeaderList, grpc_status: int | None) -> Exception:
    message = header_value(headers, HEADER_GRPC_MESSAGE)
    if message is None:
        return OtherError("not xxx")
    status = grpc_status if grpc_status is not None else int(GrpcStatus.UNKNOWN)
    return GrpcMessageError(status, message)


def decode_response_parts(
    parts: Iterable[DataPart | TrailersPart],
) -> Iterator[bytes | TrailingMetadata]:
    """Yield message payloads and trailing metadata from response body parts.

    Non-OK trailers raise :class:`GrpcMessageError` (or :class:`OtherError`
    when no message is given); a body that ends inside a frame raises
    ``OtherError("partial frame")``.
    """
    decoder = GrpcFrameDecoder()
    for part in parts:
        if isinstance(part, DataPart):
            yield from decoder.feed(part.data)
        elif isinstance(part, TrailersPart):
            if decoder.pending:
                raise OtherError("partial frame")
            grpc_status = _header_int(part.headers, HEADER_GRPC_STATUS)
            if grpc_status != GrpcStatus.OK:
                raise _trailers_error(part.headers, grpc_status)
            yield TrailingMetadata(Metadata.from_headers(part.headers))
        else:
            raise TypeError(f"unexpected response part: {part!r}")
    decoder.close()