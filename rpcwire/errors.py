"""Errors raised by the gRPC layer."""

from __future__ import annotations

from typing import Any


class GrpcError(Exception):
    """Base class of every gRPC-level error."""


class GrpcMessageError(GrpcError):
    """The peer answered with a non-OK ``grpc-status`` and a message."""

    def __init__(self, grpc_status: int, grpc_message: str) -> None:
        super().__init__(grpc_status, grpc_message)
        self.grpc_status = grpc_status
        self.grpc_message = grpc_message

    def __str__(self) -> str:
        return f"grpc message error: {self.grpc_message}"


class MetadataDecodeError(GrpcError):
    """A binary metadata value could not be decoded."""

    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__(cause)
        self.cause = cause

    def __str__(self) -> str:
        return "metadata decode error"


class CanceledError(GrpcError):
    """The operation was canceled before it completed."""

    def __str__(self) -> str:
        return "canceled"


class PanicError(GrpcError):
    """A handler failed unexpectedly."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"panic: {self.message}"


class MarshallerError(GrpcError):
    """A message could not be serialized or parsed."""

    def __init__(self, cause: Any) -> None:
        super().__init__(cause)
        self.cause = cause

    def __str__(self) -> str:
        return f"marshaller error: {self.cause}"


class OtherError(GrpcError):
    """Any other protocol error, described by a short message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"other error: {self.message}"


def any_to_string(value: Any) -> str:
    """Return ``value`` if it is a string, otherwise ``"unknown any"``."""
    if isinstance(value, str):
        return value
    return "unknown any"