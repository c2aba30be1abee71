"""HTTP header sets used by gRPC responses and trailers."""

from __future__ import annotations

from typing import Iterable

from .metadata import Header, Metadata
from .status import GrpcStatus

HEADER_GRPC_STATUS = "grpc-status"
HEADER_GRPC_MESSAGE = "grpc-message"


def _status_value(grpc_status: GrpcStatus | int) -> bytes:
    return str(int(grpc_status)).encode("ascii")


def headers_500(grpc_status: GrpcStatus | int, message: str) -> list[Header]:
    """Response headers for a failed call answered with HTTP 500."""
    return [
        (":status", b"500"),
        (HEADER_GRPC_STATUS, _status_value(grpc_status)),
        (HEADER_GRPC_MESSAGE, message.encode("utf-8")),
    ]


def headers_200(metadata: Metadata) -> list[Header]:
    """Successful response headers followed by the initial metadata."""
    return [
        (":status", b"200"),
        ("content-type", b"application/grpc"),
        (HEADER_GRPC_STATUS, b"0"),
        *metadata.to_headers(),
    ]


def grpc_error_message(message: str) -> tuple[list[Header], bytes]:
    """A complete HTTP response (headers and empty body) reporting an internal error."""
    headers = [
        (":status", b"200"),
        (HEADER_GRPC_STATUS, _status_value(GrpcStatus.INTERNAL)),
        (HEADER_GRPC_MESSAGE, message.encode("utf-8")),
    ]
    return headers, b""


def trailers(
    grpc_status: GrpcStatus | int,
    message: str | None,
    metadata: Metadata,
) -> list[Header]:
    """Trailers: status, optional message, then trailing metadata."""
    headers = [(HEADER_GRPC_STATUS, _status_value(grpc_status))]
    if message is not None:
        headers.append((HEADER_GRPC_MESSAGE, message.encode("utf-8")))
    headers.extend(metadata.to_headers())
    return headers


def header_value(headers: Iterable[tuple[str, bytes | str]], name: str) -> str | None:
    """Value of the first header called ``name`` as text, or ``None``."""
    for header_name, value in headers:
        if header_name == name:
            if isinstance(value, str):
                return value
            return bytes(value).decode("utf-8")
    return None