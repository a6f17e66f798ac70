"""Declarative protobuf contract builder.

A contract is written once in Python as message/service specs, checked
against the tag discipline, compiled into a `FileDescriptorProto` and
registered in the protobuf default descriptor pool. The message classes it
yields are ordinary protobuf classes: they serialize, parse and compare
exactly like `protoc`-generated ones.

Tag discipline enforced at build time:
- tags are positive, unique per message and outside 19000-19999
- field names are unique per message
- a field may never use a reserved tag or a reserved name
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Tuple, Type

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import Message
# Importing these registers the well-known types in the default pool
from google.protobuf import timestamp_pb2, wrappers_pb2  # noqa: F401

from core.logging_config import get_logger


logger = get_logger(__name__)

FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto

MAX_TAG = 536_870_911
_INTERNAL_TAGS = range(19000, 20000)

SCALAR_TYPES: Mapping[str, int] = {
    "string": FieldDescriptorProto.TYPE_STRING,
    "bytes": FieldDescriptorProto.TYPE_BYTES,
    "bool": FieldDescriptorProto.TYPE_BOOL,
    "int32": FieldDescriptorProto.TYPE_INT32,
    "int64": FieldDescriptorProto.TYPE_INT64,
    "uint32": FieldDescriptorProto.TYPE_UINT32,
    "uint64": FieldDescriptorProto.TYPE_UINT64,
}

TIMESTAMP = ".google.protobuf.Timestamp"
STRING_VALUE = ".google.protobuf.StringValue"
INT64_VALUE = ".google.protobuf.Int64Value"
BOOL_VALUE = ".google.protobuf.BoolValue"

_WELL_KNOWN_FILES: Mapping[str, str] = {
    TIMESTAMP: "google/protobuf/timestamp.proto",
    STRING_VALUE: "google/protobuf/wrappers.proto",
    INT64_VALUE: "google/protobuf/wrappers.proto",
    BOOL_VALUE: "google/protobuf/wrappers.proto",
}


class SchemaError(ValueError):
    """The contract violates the tag discipline or references unknown types."""


@dataclass(frozen=True)
class FieldSpec:
    number: int
    name: str
    type: str
    repeated: bool = False


@dataclass(frozen=True)
class Reserved:
    """A retired field: its tag and its name can never be issued again."""

    number: int
    name: str


@dataclass(frozen=True)
class MessageSpec:
    name: str
    fields: Tuple[FieldSpec, ...]
    reserved: Tuple[Reserved, ...] = ()


@dataclass(frozen=True)
class MethodSpec:
    name: str
    input_type: str
    output_type: str


@dataclass(frozen=True)
class ServiceSpec:
    name: str
    methods: Tuple[MethodSpec, ...]


@dataclass(frozen=True)
class ContractSpec:
    package: str
    file_name: str
    messages: Tuple[MessageSpec, ...]
    services: Tuple[ServiceSpec, ...] = ()


@dataclass
class Contract:
    """A registered contract: descriptors plus concrete message classes."""

    spec: ContractSpec
    file_proto: descriptor_pb2.FileDescriptorProto
    messages: Dict[str, Type[Message]] = field(default_factory=dict)

    @property
    def package(self) -> str:
        return self.spec.package

    def service_name(self, service: str) -> str:
        return f"{self.spec.package}.{service}"

    def method_path(self, service: str, method: str) -> str:
        return f"/{self.service_name(service)}/{method}"


def _check_message(msg: MessageSpec) -> None:
    reserved_numbers = [r.number for r in msg.reserved]
    reserved_names = [r.name for r in msg.reserved]
    if len(set(reserved_numbers)) != len(reserved_numbers):
        raise SchemaError(f"{msg.name}: duplicate reserved tag")
    if len(set(reserved_names)) != len(reserved_names):
        raise SchemaError(f"{msg.name}: duplicate reserved name")

    seen_numbers: Dict[int, str] = {}
    seen_names: set = set()
    for f in msg.fields:
        if not 1 <= f.number <= MAX_TAG:
            raise SchemaError(f"{msg.name}.{f.name}: tag {f.number} out of range")
        if f.number in _INTERNAL_TAGS:
            raise SchemaError(f"{msg.name}.{f.name}: tag {f.number} is reserved by protobuf")
        if f.number in seen_numbers:
            raise SchemaError(
                f"{msg.name}: tag {f.number} used by both {seen_numbers[f.number]} and {f.name}"
            )
        if f.name in seen_names:
            raise SchemaError(f"{msg.name}: duplicate field name {f.name}")
        if f.number in reserved_numbers:
            raise SchemaError(f"{msg.name}.{f.name}: tag {f.number} is reserved")
        if f.name in reserved_names:
            raise SchemaError(f"{msg.name}.{f.name}: name is reserved")
        seen_numbers[f.number] = f.name
        seen_names.add(f.name)


def _resolve_type(type_name: str, package: str, local: Iterable[str]) -> str:
    if type_name.startswith("."):
        if type_name not in _WELL_KNOWN_FILES:
            raise SchemaError(f"unknown external type {type_name}")
        return type_name
    if type_name not in local:
        raise SchemaError(f"unknown message type {type_name}")
    return f".{package}.{type_name}"


def to_file_proto(spec: ContractSpec) -> descriptor_pb2.FileDescriptorProto:
    """Compile a contract spec into a FileDescriptorProto, enforcing the tag rules."""
    local = [m.name for m in spec.messages]
    if len(set(local)) != len(local):
        raise SchemaError(f"{spec.package}: duplicate message name")

    fp = descriptor_pb2.FileDescriptorProto(
        name=spec.file_name, package=spec.package, syntax="proto3"
    )
    dependencies: list = []

    for msg in spec.messages:
        _check_message(msg)
        mp = fp.message_type.add(name=msg.name)
        for f in msg.fields:
            fdp = mp.field.add(
                name=f.name,
                number=f.number,
                label=(
                    FieldDescriptorProto.LABEL_REPEATED
                    if f.repeated
                    else FieldDescriptorProto.LABEL_OPTIONAL
                ),
            )
            if f.type in SCALAR_TYPES:
                fdp.type = SCALAR_TYPES[f.type]
            else:
                fdp.type = FieldDescriptorProto.TYPE_MESSAGE
                fdp.type_name = _resolve_type(f.type, spec.package, local)
                dep = _WELL_KNOWN_FILES.get(fdp.type_name)
                if dep and dep not in dependencies:
                    dependencies.append(dep)
        for r in sorted(msg.reserved, key=lambda r: r.number):
            mp.reserved_range.add(start=r.number, end=r.number + 1)
            mp.reserved_name.append(r.name)

    for svc in spec.services:
        sp = fp.service.add(name=svc.name)
        for m in svc.methods:
            sp.method.add(
                name=m.name,
                input_type=_resolve_type(m.input_type, spec.package, local),
                output_type=_resolve_type(m.output_type, spec.package, local),
            )

    fp.dependency.extend(sorted(dependencies))
    return fp


def load_contract(spec: ContractSpec) -> Contract:
    """Build, register in the default pool and return the message classes."""
    fp = to_file_proto(spec)
    pool = descriptor_pool.Default()
    pool.AddSerializedFile(fp.SerializeToString())
    file_descriptor = pool.FindFileByName(spec.file_name)

    contract = Contract(spec=spec, file_proto=fp)
    for name, descriptor in file_descriptor.message_types_by_name.items():
        contract.messages[name] = message_factory.GetMessageClass(descriptor)
    logger.debug("contract_loaded", package=spec.package, messages=len(contract.messages))
    return contract
