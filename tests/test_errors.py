import pytest

from rpcwire.errors import (
    CanceledError,
    GrpcError,
    GrpcMessageError,
    MarshallerError,
    MetadataDecodeError,
    OtherError,
    PanicError,
    any_to_string,
)


def test_grpc_message_error_fields_and_text():
    err = GrpcMessageError(5, "missing")
    assert err.grpc_status == 5
    assert err.grpc_message == "missing"
    assert str(err).startswith("grpc message error: ")
    assert str(err).endswith("missing")


def test_fixed_texts():
    assert str(CanceledError()) == "canceled"
    assert str(MetadataDecodeError()) == "metadata decode error"


def test_messages_are_included():
    assert str(PanicError("boom")).endswith("boom")
    assert str(OtherError("sender closed")).startswith("other error: ")
    assert str(MarshallerError(ValueError("bad"))).endswith("bad")


@pytest.mark.parametrize(
    ("exc", "text"),
    [
        (GrpcMessageError(1, "x"), "x"),
        (MetadataDecodeError(), "metadata decode error"),
        (CanceledError(), "canceled"),
        (PanicError("p"), "p"),
        (MarshallerError("m"), "m"),
        (OtherError("o"), "o"),
    ],
)
def test_all_are_grpc_errors(exc, text):
    with pytest.raises(GrpcError) as info:
        raise exc
    assert info.value is exc
    assert str(info.value).endswith(text)


def test_any_to_string():
    assert any_to_string("hello") == "hello"
    assert any_to_string(42) == "unknown any"
    assert any_to_string(None) == "unknown any"