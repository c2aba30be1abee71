"""Generator of client and server service code from service descriptions."""

from __future__ import annotations

import re
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Iterable, Iterator, Sequence

_INDENT = "    "

_GENERATED_HEADER = (
    "// This file is generated. Do not edit",
    "// @generated",
    "",
    "#![allow(unknown_lints)]",
    "#![allow(clippy::all)]",
    "",
    "#![cfg_attr(rustfmt, rustfmt_skip)]",
    "",
    "#![allow(box_pointers)]",
    "#![allow(dead_code)]",
    "#![allow(missing_docs)]",
    "#![allow(non_camel_case_types)]",
    "#![allow(non_snake_case)]",
    "#![allow(non_upper_case_globals)]",
    "#![allow(trivial_casts)]",
    "#![allow(unsafe_code)]",
    "#![allow(unused_imports)]",
    "#![allow(unused_results)]",
)

_MARSHALLER = "::grpc::rt::ArcOrStatic::Static(&::grpc_protobuf::MarshallerProtobuf)"


def snake_name(name: str) -> str:
    """Convert a method name such as ``CreateIDForReq`` to ``create_id_for_req``."""
    out: list[str] = []
    chars = iter(name)
    last = "."
    for c in chars:
        if not c.isupper():
            last = c
            out.append(c)
            continue
        can_append_underscore = False
        if out and last != "_":
            out.append("_")
        last = c
        for c in chars:
            if not c.isupper():
                if can_append_underscore and c != "_":
                    out.append("_")
                out.append(last.lower())
                out.append(c)
                last = c
                break
            out.append(last.lower())
            last = c
            can_append_underscore = True
        else:
            out.append(last.lower())
    return "".join(out)


class GrpcStreaming(Enum):
    """The four call shapes, by which side streams messages."""

    UNARY = "Unary"
    CLIENT_STREAMING = "ClientStreaming"
    SERVER_STREAMING = "ServerStreaming"
    BIDI = "Bidi"

    @classmethod
    def from_flags(cls, client_streaming: bool, server_streaming: bool) -> GrpcStreaming:
        """The call shape for the given streaming flags."""
        if client_streaming:
            return cls.BIDI if server_streaming else cls.CLIENT_STREAMING
        return cls.SERVER_STREAMING if server_streaming else cls.UNARY

    @property
    def upper(self) -> str:
        """Capitalized name used in type names."""
        return self.value

    @property
    def lower(self) -> str:
        """Snake-case name used in function names."""
        return snake_name(self.value)


@dataclass(frozen=True)
class MethodSpec:
    """One service method: its name, message types and streaming flags."""

    name: str
    input_type: str
    output_type: str
    client_streaming: bool = False
    server_streaming: bool = False

    @property
    def streaming(self) -> GrpcStreaming:
        return GrpcStreaming.from_flags(self.client_streaming, self.server_streaming)


@dataclass(frozen=True)
class ServiceSpec:
    """A service and its methods."""

    name: str
    methods: Sequence[MethodSpec] = ()


@dataclass(frozen=True)
class FileSpec:
    """A proto file: its path, package, services and (possibly nested, dotted) message names."""

    name: str
    package: str = ""
    services: Sequence[ServiceSpec] = ()
    messages: Sequence[str] = ()


@dataclass(frozen=True)
class GeneratedFile:
    """Name and text of one generated output file."""

    name: str
    content: str


class CodeWriter:
    """Accumulates indented lines of generated code."""

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._level = 0

    def write_line(self, line: str) -> None:
        """Write one line at the current indentation; empty lines stay empty."""
        self._lines.append(f"{_INDENT * self._level}{line}" if line else "")

    def comment(self, text: str) -> None:
        """Write a line comment."""
        self.write_line(f"// {text}")

    @contextmanager
    def block(self, first_line: str, last_line: str) -> Iterator[CodeWriter]:
        """Write ``first_line``, indent the body, then write ``last_line``."""
        self.write_line(first_line)
        self._level += 1
        try:
            yield self
        finally:
            self._level -= 1
        self.write_line(last_line)

    def getvalue(self) -> str:
        """All text written so far."""
        return "".join(f"{line}\n" for line in self._lines)


def _proto_path_to_mod(path: str) -> str:
    stem = PurePosixPath(path).name
    if stem.endswith(".proto"):
        stem = stem[: -len(".proto")]
    name = re.sub(r"\W", "_", stem, flags=re.ASCII)
    if name[:1].isdigit():
        name = "_" + name[1:]
    return name


class _RootScope:
    """Resolves fully qualified proto message names across files."""

    def __init__(self, files: Iterable[FileSpec]) -> None:
        self._files = list(files)

    def message_path(self, type_name: str) -> str:
        name = type_name[1:] if type_name.startswith(".") else type_name
        for file in self._files:
            prefix = f"{file.package}." if file.package else ""
            if not name.startswith(prefix):
                continue
            relative = name[len(prefix):]
            if relative in file.messages:
                return f"{_proto_path_to_mod(file.name)}::{relative.replace('.', '_')}"
        raise KeyError(f"message not found: {type_name}")


@dataclass
class _MethodGen:
    spec: MethodSpec
    service_path: str
    scope: _RootScope

    @property
    def snake_name(self) -> str:
        return snake_name(self.spec.name)

    @property
    def input_message(self) -> str:
        return f"super::{self.scope.message_path(self.spec.input_type)}"

    @property
    def output_message(self) -> str:
        return f"super::{self.scope.message_path(self.spec.output_type)}"

    def client_resp_type(self) -> str:
        kind = "StreamingResponse" if self.spec.server_streaming else "SingleResponse"
        return f"::grpc::{kind}<{self.output_message}>"

    def client_sig(self) -> str:
        resp_type = self.client_resp_type()
        if self.spec.client_streaming:
            req_param = ""
            return_type = (
                "impl ::futures::future::Future<Item=(::grpc::ClientRequestSink<"
                f"{self.input_message}>, {resp_type}), Error=::grpc::Error>"
            )
        else:
            req_param = f", req: {self.input_message}"
            return_type = resp_type
        return f"{self.snake_name}(&self, o: ::grpc::RequestOptions{req_param}) -> {return_type}"

    def server_req_type(self) -> str:
        kind = "ServerRequest" if self.spec.client_streaming else "ServerRequestSingle"
        return f"::grpc::{kind}<{self.input_message}>"

    def server_resp_type(self) -> str:
        kind = "ServerResponseSink" if self.spec.server_streaming else "ServerResponseUnarySink"
        return f"::grpc::{kind}<{self.output_message}>"

    def server_sig(self) -> str:
        return (
            f"{self.snake_name}(&self, o: ::grpc::ServerHandlerContext, "
            f"req: {self.server_req_type()}, resp: {self.server_resp_type()}) "
            "-> ::grpc::Result<()>"
        )

    def write_server_intf(self, w: CodeWriter) -> None:
        w.write_line(f"fn {self.server_sig()};")

    def write_client(self, w: CodeWriter) -> None:
        with w.block(f"pub fn {self.client_sig()} {{", "}"):
            self.write_descriptor(w, "let descriptor = ::grpc::rt::ArcOrStatic::Static(&", ");")
            req = "" if self.spec.client_streaming else ", req"
            w.write_line(
                f"self.grpc_client.call_{self.spec.streaming.lower}(o{req}, descriptor)"
            )

    def write_descriptor(self, w: CodeWriter, before: str, after: str) -> None:
        with w.block(f"{before}::grpc::rt::MethodDescriptor {{", f"}}{after}"):
            w.write_line(
                f'name: ::grpc::rt::StringOrStatic::Static("{self.service_path}/{self.spec.name}"),'
            )
            w.write_line(f"streaming: ::grpc::rt::GrpcStreaming::{self.spec.streaming.upper},")
            w.write_line(f"req_marshaller: {_MARSHALLER},")
            w.write_line(f"resp_marshaller: {_MARSHALLER},")


class _ServiceGen:
    def __init__(self, spec: ServiceSpec, file: FileSpec, scope: _RootScope) -> None:
        self.spec = spec
        if file.package:
            self.service_path = f"/{file.package}.{spec.name}"
        else:
            self.service_path = f"/{spec.name}"
        self.methods = [_MethodGen(m, self.service_path, scope) for m in spec.methods]

    @property
    def server_intf_name(self) -> str:
        return self.spec.name

    @property
    def client_name(self) -> str:
        return f"{self.spec.name}Client"

    @property
    def server_name(self) -> str:
        return f"{self.spec.name}Server"

    def _write_separated(self, w: CodeWriter, write) -> None:
        for i, method in enumerate(self.methods):
            if i:
                w.write_line("")
            write(method, w)

    def write_server_intf(self, w: CodeWriter) -> None:
        with w.block(f"pub trait {self.server_intf_name} {{", "}"):
            self._write_separated(w, _MethodGen.write_server_intf)

    def write_client(self, w: CodeWriter) -> None:
        with w.block(f"pub struct {self.client_name} {{", "}"):
            w.write_line("grpc_client: ::std::sync::Arc<::grpc::Client>,")
        w.write_line("")
        with w.block(f"impl ::grpc::ClientStub for {self.client_name} {{", "}"):
            sig = "with_client(grpc_client: ::std::sync::Arc<::grpc::Client>) -> Self"
            with w.block(f"fn {sig} {{", "}"):
                with w.block(f"{self.client_name} {{", "}"):
                    w.write_line("grpc_client: grpc_client,")
        w.write_line("")
        with w.block(f"impl {self.client_name} {{", "}"):
            self._write_separated(w, _MethodGen.write_client)

    def write_service_definition(self, before: str, after: str, handler: str, w: CodeWriter) -> None:
        first = f'{before}::grpc::rt::ServerServiceDefinition::new("{self.service_path}",'
        with w.block(first, f"){after}"):
            with w.block("vec![", "],"):
                for method in self.methods:
                    with w.block("::grpc::rt::ServerMethod::new(", "),"):
                        method.write_descriptor(w, "::grpc::rt::ArcOrStatic::Static(&", "),")
                        with w.block("{", "},"):
                            w.write_line(f"let handler_copy = {handler}.clone();")
                            w.write_line(
                                f"::grpc::rt::MethodHandler{method.spec.streaming.upper}"
                                "::new(move |ctx, req, resp| "
                                f"(*handler_copy).{method.snake_name}(ctx, req, resp))"
                            )

    def write_server(self, w: CodeWriter) -> None:
        w.write_line(f"pub struct {self.server_name};")
        w.write_line("")
        w.write_line("")
        with w.block(f"impl {self.server_name} {{", "}"):
            sig = (
                f"new_service_def<H : {self.server_intf_name} + 'static + Sync + Send + 'static>"
                "(handler: H) -> ::grpc::rt::ServerServiceDefinition"
            )
            with w.block(f"pub fn {sig} {{", "}"):
                w.write_line("let handler_arc = ::std::sync::Arc::new(handler);")
                self.write_service_definition("", "", "handler_arc", w)

    def write(self, w: CodeWriter) -> None:
        w.comment("server interface")
        w.write_line("")
        self.write_server_intf(w)
        w.write_line("")
        w.comment("client")
        w.write_line("")
        self.write_client(w)
        w.write_line("")
        w.comment("server")
        w.write_line("")
        self.write_server(w)


def _gen_file(file: FileSpec, scope: _RootScope) -> GeneratedFile | None:
    if not file.services:
        return None
    w = CodeWriter()
    for line in _GENERATED_HEADER:
        w.write_line(line)
    w.write_line("")
    for service in file.services:
        w.write_line("")
        _ServiceGen(service, file, scope).write(w)
    return GeneratedFile(f"{_proto_path_to_mod(file.name)}_grpc.rs", w.getvalue())


def gen_file(file: FileSpec) -> GeneratedFile | None:
    """Generate service code for one file whose messages are all its own.

    Returns ``None`` when the file declares no services.
    """
    return _gen_file(file, _RootScope([file]))


def generate(
    file_descriptors: Iterable[FileSpec], files_to_generate: Iterable[str]
) -> list[GeneratedFile]:
    """Generate service code for each requested file that declares services.

    Message types are resolved across all of ``file_descriptors``; a requested
    file that is not among them raises :class:`KeyError`.
    """
    files = list(file_descriptors)
    by_name = {f.name: f for f in files}
    scope = _RootScope(files)
    results = []
    for file_name in files_to_generate:
        file = by_name[file_name]
        generated = _gen_file(file, scope)
        if generated is not None:
            results.append(generated)
    return results