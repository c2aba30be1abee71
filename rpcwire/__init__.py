"""gRPC wire-format building blocks: frames, status codes, metadata, headers, response decoding and stub generation."""

__version__ = "0.1.0"

__all__ = [
    "codegen",
    "errors",
    "frame",
    "headers",
    "metadata",
    "response",
    "route_guide",
    "status",
    "streams",
]