# rpcwire

Pure-Python building blocks for the gRPC wire protocol. The package has no
runtime dependencies.

## Modules

- `rpcwire.frame` handles length-prefixed gRPC message frames.
  - `write_grpc_frame` adds the 5-byte prefix: an uncompressed flag and a
    big-endian length.
  - `parse_grpc_frame` returns the first payload and the number of bytes it
    took, or `None` if the frame is incomplete.
  - `parse_grpc_frames_completely` and `parse_grpc_frame_completely` require
    that the input holds only whole frames.
  - `parse_grpc_frames_from_buffer` takes complete frames off the front of a
    `bytearray`.
  - `GrpcFrameDecoder` (`feed`, `close`, `pending`) rebuilds frames that arrive
    split across chunks.
  - `decode_request_frames` yields the payloads of a request body. Trailers
    parts are ignored.
  - A compressed frame or an unknown flag raises `OtherError`.
- `rpcwire.status` holds the `GrpcStatus` integer enumeration. It has `code()`,
  `GrpcStatus.from_code()` (returns `None` if the code is unknown) and
  `GrpcStatus.from_code_or_unknown()`.
- `rpcwire.metadata` holds `MetadataKey`, `MetadataEntry` and `Metadata`.
  - Keys that end in `-bin` carry values that are base64-encoded in headers.
  - `Metadata.from_headers` skips pseudo-headers and `grpc-` headers.
  - A bad base64 value raises `MetadataDecodeError`.
- `rpcwire.headers` builds the header lists for gRPC responses:
  `headers_200`, `headers_500`, `trailers` and `grpc_error_message`. It also
  has `header_value`, which looks up a header.
- `rpcwire.response` decodes responses.
  - `init_headers_to_metadata` checks the initial response headers.
  - `decode_response_parts` turns a sequence of `DataPart` and `TrailersPart`
    into message payloads followed by `TrailingMetadata`.
  - Non-OK trailers raise `GrpcMessageError`, or `OtherError` when they carry
    no message.
- `rpcwire.streams` holds `RequestOptions`, `StreamingRequest` (`once`,
  `single`, `iter`, `empty`, `err`, `channel`), `StreamingRequestSender`
  (`send`, `close`, usable as a context manager) and `stream_single`.
  `stream_single` returns the only item of an iterable and raises
  `ValueError` otherwise.
- `rpcwire.errors` holds the exceptions, all rooted at `GrpcError`:
  `GrpcMessageError`, `MetadataDecodeError`, `CanceledError`, `PanicError`,
  `MarshallerError` and `OtherError`. It also has `any_to_string`.
- `rpcwire.route_guide` is an in-memory route guide service.
  - The data classes are `Point`, `Rectangle`, `Feature`, `RouteNote` and
    `RouteSummary`.
  - The helpers are `in_range`, `calc_distance` (great-circle metres) and
    `serialize`.
  - `load_features` reads features from a JSON array file.
  - The `RouteGuide` class has `get_feature`, `list_features`, `record_route`
    and `route_chat`.
- `rpcwire.codegen` generates service stub source text.
  - Services are described with `FileSpec`, `ServiceSpec` and `MethodSpec`.
  - `gen_file` and `generate` return `GeneratedFile` objects named
    `<module>_grpc.rs`.
  - It also has `snake_name`, `GrpcStreaming` and a small `CodeWriter`.

## Example

```python
from rpcwire.frame import write_grpc_frame, parse_grpc_frame
from rpcwire.status import GrpcStatus

frame = write_grpc_frame(b"\x0a\x05world")
message, consumed = parse_grpc_frame(frame)
assert message == b"\x0a\x05world" and consumed == 12

assert GrpcStatus.from_code_or_unknown(99) is GrpcStatus.UNKNOWN
```

## What it does not do

- There is no network transport. The package does not open HTTP/2
  connections and has no gRPC client or server to run.
- There are no commands. The route guide service answers plain method calls
  only.
- There is no message serialization. Payloads stay as raw bytes.
- Code generation reads `FileSpec` objects that you build yourself. It does
  not read compiled descriptor sets or plugin requests.

## Running the tests

```
pip install -e ".[test]"
pytest
```