"""
Echo schema descriptors

Builds the descriptors declared in ``echo.proto`` into a private descriptor
pool and exposes the resulting message classes, so no protoc step is needed.
Keep this module in sync with ``echo.proto``.
"""

from typing import Dict, Tuple, Type

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import Message

PROTO_FILE = "echo.proto"
PACKAGE = "api"

_FieldProto = descriptor_pb2.FieldDescriptorProto


def _build_file_proto() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name=PROTO_FILE,
        package=PACKAGE,
        syntax="proto3",
    )

    for message_name in ("EchoRequest", "EchoResponse"):
        message = file_proto.message_type.add(name=message_name)
        message.field.add(
            name="message",
            number=1,
            label=_FieldProto.LABEL_OPTIONAL,
            type=_FieldProto.TYPE_STRING,
            json_name="message",
        )

    service = file_proto.service.add(name="EchoService")
    service.method.add(
        name="Echo",
        input_type=f".{PACKAGE}.EchoRequest",
        output_type=f".{PACKAGE}.EchoResponse",
    )
    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file_proto().SerializeToString())

DESCRIPTOR = _pool.FindFileByName(PROTO_FILE)
SERVICE_DESCRIPTOR = _pool.FindServiceByName(f"{PACKAGE}.EchoService")
SERVICE_NAME = SERVICE_DESCRIPTOR.full_name

EchoRequest = message_factory.GetMessageClass(DESCRIPTOR.message_types_by_name["EchoRequest"])
EchoResponse = message_factory.GetMessageClass(DESCRIPTOR.message_types_by_name["EchoResponse"])

_MESSAGE_CLASSES: Dict[str, Type[Message]] = {
    EchoRequest.DESCRIPTOR.full_name: EchoRequest,
    EchoResponse.DESCRIPTOR.full_name: EchoResponse,
}


def method_path(method: str) -> str:
    """Fully-qualified gRPC path of a service method, e.g. ``/api.EchoService/Echo``"""
    return f"/{SERVICE_NAME}/{SERVICE_DESCRIPTOR.methods_by_name[method].name}"


def method_types(method: str) -> Tuple[Type[Message], Type[Message]]:
    """Request and response message classes of a service method

    Raises:
        KeyError: The service declares no such method
    """
    method_descriptor = SERVICE_DESCRIPTOR.methods_by_name[method]
    return (
        _MESSAGE_CLASSES[method_descriptor.input_type.full_name],
        _MESSAGE_CLASSES[method_descriptor.output_type.full_name],
    )
