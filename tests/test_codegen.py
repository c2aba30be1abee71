import pytest

from rpcwire.codegen import (
    CodeWriter,
    FileSpec,
    GrpcStreaming,
    MethodSpec,
    ServiceSpec,
    gen_file,
    generate,
    snake_name,
)


@pytest.mark.parametrize(
    "origin, expected",
    [
        ("AsyncRequest", "async_request"),
        ("asyncRequest", "async_request"),
        ("async_request", "async_request"),
        ("createID", "create_id"),
        ("CreateIDForReq", "create_id_for_req"),
        ("Create_ID_For_Req", "create_id_for_req"),
        ("ID", "id"),
        ("id", "id"),
    ],
)
def test_snake_name(origin, expected):
    assert snake_name(origin) == expected


@pytest.mark.parametrize(
    "client, server, expected, lower",
    [
        (False, False, GrpcStreaming.UNARY, "unary"),
        (False, True, GrpcStreaming.SERVER_STREAMING, "server_streaming"),
        (True, False, GrpcStreaming.CLIENT_STREAMING, "client_streaming"),
        (True, True, GrpcStreaming.BIDI, "bidi"),
    ],
)
def test_streaming_from_flags(client, server, expected, lower):
    streaming = GrpcStreaming.from_flags(client, server)
    assert streaming is expected
    assert streaming.lower == lower


def test_code_writer_block_indents():
    w = CodeWriter()
    w.comment("top")
    with w.block("a {", "}"):
        w.write_line("x;")
        w.write_line("")
        with w.block("b {", "},"):
            w.write_line("y;")
    assert w.getvalue() == "// top\na {\n    x;\n\n    b {\n        y;\n    },\n}\n"


def _greeter_file(package="helloworld"):
    return FileSpec(
        name="protos/helloworld.proto",
        package=package,
        services=[
            ServiceSpec(
                "Greeter",
                [MethodSpec("SayHello", ".helloworld.HelloRequest", ".helloworld.HelloReply")],
            )
        ],
        messages=["HelloRequest", "HelloReply"],
    )


def test_gen_file_without_services_returns_none():
    assert gen_file(FileSpec(name="empty.proto", messages=["A"])) is None


def test_gen_file_unary_output():
    result = gen_file(_greeter_file())
    assert result.name == "helloworld_grpc.rs"
    lines = result.content.splitlines()
    assert lines[0] == "// This file is generated. Do not edit"
    i = lines.index("pub trait Greeter {")
    assert lines[i + 1] == (
        "    fn say_hello(&self, o: ::grpc::ServerHandlerContext, "
        "req: ::grpc::ServerRequestSingle<super::helloworld::HelloRequest>, "
        "resp: ::grpc::ServerResponseUnarySink<super::helloworld::HelloReply>) "
        "-> ::grpc::Result<()>;"
    )
    assert lines[i + 2] == "}"
    assert (
        "    pub fn say_hello(&self, o: ::grpc::RequestOptions, "
        "req: super::helloworld::HelloRequest) "
        "-> ::grpc::SingleResponse<super::helloworld::HelloReply> {"
    ) in lines
    assert "        self.grpc_client.call_unary(o, req, descriptor)" in lines
    assert (
        '            name: ::grpc::rt::StringOrStatic::Static("/helloworld.Greeter/SayHello"),'
        in lines
    )
    assert "pub struct GreeterServer;" in lines
    assert (
        '        ::grpc::rt::ServerServiceDefinition::new("/helloworld.Greeter",' in lines
    )


def test_gen_file_empty_package_uses_bare_service_path():
    file = FileSpec(
        name="hello.proto",
        services=[ServiceSpec("Greeter", [MethodSpec("SayHello", "Req", "Resp")])],
        messages=["Req", "Resp"],
    )
    content = gen_file(file).content
    assert '::grpc::rt::StringOrStatic::Static("/Greeter/SayHello")' in content
    assert "super::hello::Req" in content


def test_gen_file_streaming_signatures():
    file = FileSpec(
        name="route_guide.proto",
        package="routeguide",
        services=[
            ServiceSpec(
                "RouteGuide",
                [
                    MethodSpec("RouteChat", ".routeguide.RouteNote", ".routeguide.RouteNote", True, True),
                    MethodSpec("ListFeatures", ".routeguide.Rectangle", ".routeguide.Feature", False, True),
                ],
            )
        ],
        messages=["RouteNote", "Rectangle", "Feature"],
    )
    lines = gen_file(file).content.splitlines()
    assert (
        "    pub fn route_chat(&self, o: ::grpc::RequestOptions) -> "
        "impl ::futures::future::Future<Item=(::grpc::ClientRequestSink<"
        "super::route_guide::RouteNote>, ::grpc::StreamingResponse<"
        "super::route_guide::RouteNote>), Error=::grpc::Error> {"
    ) in lines
    assert "        self.grpc_client.call_bidi(o, descriptor)" in lines
    assert "        self.grpc_client.call_server_streaming(o, req, descriptor)" in lines
    assert any("::grpc::rt::MethodHandlerBidi::new" in line for line in lines)
    assert any("(*handler_copy).list_features(ctx, req, resp)" in line for line in lines)
    i = lines.index("pub trait RouteGuide {")
    assert lines[i + 2] == ""


def test_generate_resolves_across_files_and_skips_serviceless():
    messages = FileSpec(name="common.proto", package="common", messages=["Empty", "Outer.Inner"])
    service = FileSpec(
        name="svc.proto",
        package="svc",
        services=[ServiceSpec("Svc", [MethodSpec("Ping", ".common.Empty", ".common.Outer.Inner")])],
    )
    results = generate([messages, service], ["common.proto", "svc.proto"])
    assert [r.name for r in results] == ["svc_grpc.rs"]
    assert "super::common::Outer_Inner" in results[0].content
    assert "super::common::Empty" in results[0].content


def test_generate_unknown_file_raises():
    with pytest.raises(KeyError):
        generate([_greeter_file()], ["missing.proto"])


def test_unknown_message_raises():
    file = FileSpec(
        name="x.proto",
        services=[ServiceSpec("S", [MethodSpec("M", "Nope", "Nope")])],
    )
    with pytest.raises(KeyError):
        gen_file(file)