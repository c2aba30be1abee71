import pytest

from rpcwire.errors import OtherError
from rpcwire.frame import (
    GrpcFrameDecoder,
    decode_request_frames,
    parse_grpc_frame,
    parse_grpc_frame_completely,
    parse_grpc_frame_length,
    parse_grpc_frames_completely,
    parse_grpc_frames_from_buffer,
    write_grpc_frame,
)


def test_parse_grpc_frame():
    assert parse_grpc_frame(b"") is None
    assert parse_grpc_frame(b"1") is None
    assert parse_grpc_frame(b"14sc") is None
    assert parse_grpc_frame(b"\x00\x00\x00\x00\x07\x0a\x05wo") is None
    assert parse_grpc_frame(b"\x00\x00\x00\x00\x07\x0a\x05world") == (
        b"\x0a\x05world",
        12,
    )


@pytest.mark.parametrize(
    "expected, data, trail",
    [
        ([], b"", b""),
        ([], b"", b"1"),
        ([], b"", b"14sc"),
        ([b"\x0a\x05world"], b"\x00\x00\x00\x00\x07\x0a\x05world", b""),
        ([b"ab", b"cde"], b"\0\x00\x00\x00\x02ab\0\x00\x00\x00\x03cde", b"\x00"),
    ],
)
def test_parse_grpc_frames_from_buffer(expected, data, trail):
    buffer = bytearray(data + trail)
    assert parse_grpc_frames_from_buffer(buffer) == expected
    assert bytes(buffer) == trail


def test_frame_length():
    assert parse_grpc_frame_length(b"\x00\x00\x00\x00\x07\x0a\x05world") == 7


def test_compression_flags_rejected():
    with pytest.raises(OtherError, match="compression is not implemented"):
        parse_grpc_frame(b"\x01\x00\x00\x00\x00")
    with pytest.raises(OtherError, match="unknown compression flag"):
        parse_grpc_frame(b"\x02\x00\x00\x00\x00")


@pytest.mark.parametrize("payload", [b"", b"x", b"\x0a\x05world", bytes(range(256))])
def test_write_round_trip(payload):
    encoded = write_grpc_frame(payload)
    assert len(encoded) == len(payload) + 5
    assert encoded[0] == 0
    assert parse_grpc_frame(encoded) == (payload, len(encoded))
    assert parse_grpc_frame_completely(encoded) == payload


def test_write_known_bytes():
    assert write_grpc_frame(b"ab") == b"\0\x00\x00\x00\x02ab"


def test_parse_completely():
    data = write_grpc_frame(b"ab") + write_grpc_frame(b"cde")
    assert parse_grpc_frames_completely(data) == [b"ab", b"cde"]
    assert parse_grpc_frames_completely(b"") == []
    with pytest.raises(OtherError, match="not complete frames"):
        parse_grpc_frames_completely(data + b"\x00")
    with pytest.raises(OtherError, match="expecting exactly one frame"):
        parse_grpc_frame_completely(data)


def test_decoder_chunks():
    data = write_grpc_frame(b"ab") + write_grpc_frame(b"cde")
    decoder = GrpcFrameDecoder()
    frames = []
    for byte in data:
        frames.extend(decoder.feed(bytes([byte])))
    assert frames == [b"ab", b"cde"]
    assert decoder.pending == 0
    decoder.close()


def test_decoder_partial_on_close():
    decoder = GrpcFrameDecoder()
    assert decoder.feed(b"\x00\x00") == []
    with pytest.raises(OtherError, match="partial frame"):
        decoder.close()


def test_decode_request_frames_ignores_trailers():
    data = write_grpc_frame(b"ab") + write_grpc_frame(b"cde")
    parts = [data[:3], [("grpc-status", b"0")], data[3:]]
    assert list(decode_request_frames(parts)) == [b"ab", b"cde"]


def test_decode_request_frames_partial():
    with pytest.raises(OtherError, match="partial frame"):
        list(decode_request_frames([b"\x00\x00\x00\x00\x07ab"]))