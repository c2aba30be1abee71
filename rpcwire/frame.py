"""Length-prefixed gRPC message framing."""

from __future__ import annotations

from typing import Any, Iterable, Iterator

from .errors import OtherError

GRPC_HEADER_LEN = 5
_MAX_FRAME_LEN = 0xFFFFFFFF


def parse_grpc_frame_length(data: bytes) -> int | None:
    """Return the payload length of the first frame, or ``None`` if incomplete."""
    if len(data) < GRPC_HEADER_LEN:
        return None
    flag = data[0]
    if flag not in (0, 1):
        raise OtherError("unknown compression flag")
    if flag == 1:
        raise OtherError("compression is not implemented")
    length = int.from_bytes(bytes(data[1:GRPC_HEADER_LEN]), "big")
    if length + GRPC_HEADER_LEN > len(data):
        return None
    return length


def parse_grpc_frame(data: bytes) -> tuple[bytes, int] | None:
    """Return the first frame's payload and the number of bytes it occupies."""
    length = parse_grpc_frame_length(data)
    if length is None:
        return None
    end = GRPC_HEADER_LEN + length
    return bytes(data[GRPC_HEADER_LEN:end]), end


def parse_grpc_frames_from_buffer(buffer: bytearray) -> list[bytes]:
    """Remove every complete frame from the front of ``buffer`` and return the payloads."""
    frames = []
    while (parsed := parse_grpc_frame(buffer)) is not None:
        payload, consumed = parsed
        frames.append(payload)
        del buffer[:consumed]
    return frames


def parse_grpc_frames_completely(data: bytes) -> list[bytes]:
    """Parse ``data`` that must consist of whole frames only."""
    frames = []
    view = memoryview(data)
    while view:
        parsed = parse_grpc_frame(view)
        if parsed is None:
            raise OtherError("not complete frames")
        payload, consumed = parsed
        frames.append(payload)
        view = view[consumed:]
    return frames


def parse_grpc_frame_completely(data: bytes) -> bytes:
    """Parse ``data`` that must hold exactly one whole frame."""
    frames = parse_grpc_frames_completely(data)
    if len(frames) != 1:
        raise OtherError("expecting exactly one frame")
    return frames[0]


def write_grpc_frame(frame: bytes) -> bytes:
    """Encode ``frame`` with the uncompressed-flag and length prefix."""
    if len(frame) > _MAX_FRAME_LEN:
        raise ValueError("frame is too large")
    return b"\x00" + len(frame).to_bytes(4, "big") + bytes(frame)


class GrpcFrameDecoder:
    """Incremental decoder turning arbitrary byte chunks into frame payloads."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet forming a whole frame."""
        return len(self._buffer)

    def feed(self, data: bytes) -> list[bytes]:
        """Add ``data`` and return the payloads of all frames now complete."""
        self._buffer += data
        return parse_grpc_frames_from_buffer(self._buffer)

    def close(self) -> None:
        """Signal end of input; a leftover partial frame is an error."""
        if self._buffer:
            raise OtherError("partial frame")


def _part_data(part: Any) -> bytes | None:
    if isinstance(part, (bytes, bytearray, memoryview)):
        return bytes(part)
    data = getattr(part, "data", None)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    return None


def decode_request_frames(parts: Iterable[Any]) -> Iterator[bytes]:
    """Yield frame payloads from a request body given as HTTP parts.

    Data parts are bytes-like objects or objects with a bytes ``data``
    attribute; any other part is taken as trailers and ignored.
    """
    decoder = GrpcFrameDecoder()
    for part in parts:
        data = _part_data(part)
        if data is None:
            continue
        yield from decoder.feed(data)
    decoder.close()