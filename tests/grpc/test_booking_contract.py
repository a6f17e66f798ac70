import re
from dataclasses import replace
from importlib import resources
from pathlib import Path

import pytest
from google.protobuf import descriptor_pb2, text_format
from grpc_tools import protoc

from grpc_app.schema import booking_v1
from grpc_app.schema.builder import (
    SCALAR_TYPES,
    ContractSpec,
    FieldSpec,
    MessageSpec,
    MethodSpec,
    Reserved,
    SchemaError,
    ServiceSpec,
    to_file_proto,
)
from grpc_app.schema.evolution import find_breaking_changes


PROTO_DIR = Path(__file__).resolve().parents[2] / "grpc_app" / "protos" / "booking" / "v1"


def _published() -> descriptor_pb2.FileDescriptorProto:
    text = (PROTO_DIR / "booking.snapshot.textproto").read_text(encoding="utf-8")
    return text_format.Parse(text, descriptor_pb2.FileDescriptorProto())


def _with_message(spec: ContractSpec, name: str, **changes) -> ContractSpec:
    messages = tuple(replace(m, **changes) if m.name == name else m for m in spec.messages)
    return replace(spec, messages=messages)


def _booking_message() -> MessageSpec:
    return next(m for m in booking_v1.SPEC.messages if m.name == "Booking")


def test_live_contract_matches_published_snapshot():
    assert find_breaking_changes(_published(), booking_v1.CONTRACT.file_proto) == []


def test_snapshot_records_reserved_status_slot():
    booking = next(m for m in _published().message_type if m.name == "Booking")
    assert [(r.start, r.end) for r in booking.reserved_range] == [(6, 7)]
    assert list(booking.reserved_name) == ["status"]


def test_message_classes_are_registered():
    assert booking_v1.Booking.DESCRIPTOR.full_name == "booking.v1.Booking"
    assert booking_v1.SERVICE_NAME == "booking.v1.BookingService"
    fields = {f.name: f.number for f in booking_v1.Booking.DESCRIPTOR.fields}
    assert fields == {"booking_id": 1, "passenger": 2, "segments": 3, "fare": 4, "created_utc": 5}


_PROTO_SCALARS = {v: k for k, v in SCALAR_TYPES.items()}


def _declared_type(field: descriptor_pb2.FieldDescriptorProto, package: str) -> str:
    """Spell a built field type the way booking.proto writes it."""
    if field.type in _PROTO_SCALARS:
        return _PROTO_SCALARS[field.type]
    name = field.type_name.lstrip(".")
    return name[len(package) + 1:] if name.startswith(package + ".") else name


def test_proto_file_agrees_with_contract():
    text = (PROTO_DIR / "booking.proto").read_text(encoding="utf-8")
    declared = {}
    for name, body in re.findall(r"message (\w+) \{(.*?)\n\}", text, re.S):
        fields = {
            fname: (int(num), ftype, bool(repeated))
            for repeated, ftype, fname, num in re.findall(
                r"^\s*(repeated\s+)?([\w.]+)\s+(\w+)\s*=\s*(\d+);", body, re.M
            )
        }
        reserved = [int(n) for n in re.findall(r"^\s*reserved (\d+);", body, re.M)]
        reserved_names = re.findall(r'^\s*reserved "(\w+)";', body, re.M)
        declared[name] = (fields, reserved, reserved_names)

    package = booking_v1.CONTRACT.package
    built = {}
    for m in booking_v1.CONTRACT.file_proto.message_type:
        built[m.name] = (
            {
                f.name: (
                    f.number,
                    _declared_type(f, package),
                    f.label == descriptor_pb2.FieldDescriptorProto.LABEL_REPEATED,
                )
                for f in m.field
            },
            [r.start for r in m.reserved_range],
            list(m.reserved_name),
        )
    assert declared == built
    rpcs = re.findall(r"rpc (\w+)\((\w+)\) returns \((\w+)\);", text)
    assert rpcs == [(m.name, m.input_type.rsplit(".", 1)[1], m.output_type.rsplit(".", 1)[1])
                    for m in booking_v1.CONTRACT.file_proto.service[0].method]


def test_protoc_compiled_proto_matches_contract(tmp_path):
    out = tmp_path / "booking.pb"
    well_known = resources.files("grpc_tools") / "_proto"
    status = protoc.main([
        "grpc_tools.protoc",
        f"-I{PROTO_DIR.parents[1]}",
        f"-I{well_known}",
        f"--descriptor_set_out={out}",
        "booking/v1/booking.proto",
    ])
    assert status == 0
    compiled = descriptor_pb2.FileDescriptorSet.FromString(out.read_bytes()).file[0]
    built = booking_v1.CONTRACT.file_proto
    assert compiled.name == built.name
    assert find_breaking_changes(compiled, built) == []
    assert find_breaking_changes(built, compiled) == []


def test_adding_field_on_fresh_tag_is_compatible():
    booking = _booking_message()
    spec = _with_message(booking_v1.SPEC, "Booking", fields=booking.fields + (FieldSpec(7, "notes", "string"),))
    assert find_breaking_changes(_published(), to_file_proto(spec)) == []


def test_adding_rpc_and_message_is_compatible():
    spec = replace(
        booking_v1.SPEC,
        messages=booking_v1.SPEC.messages + (MessageSpec("PingReply", (FieldSpec(1, "ok", "bool"),)),),
        services=(replace(
            booking_v1.SPEC.services[0],
            methods=booking_v1.SPEC.services[0].methods + (MethodSpec("Ping", "RetrieveBookingRequest", "PingReply"),),
        ),),
    )
    assert find_breaking_changes(_published(), to_file_proto(spec)) == []


def test_builder_refuses_reserved_tag_reuse():
    booking = _booking_message()
    spec = _with_message(booking_v1.SPEC, "Booking", fields=booking.fields + (FieldSpec(6, "state", "string"),))
    with pytest.raises(SchemaError, match="tag 6 is reserved"):
        to_file_proto(spec)


def test_builder_refuses_reserved_name_reuse():
    booking = _booking_message()
    spec = _with_message(booking_v1.SPEC, "Booking", fields=booking.fields + (FieldSpec(8, "status", "string"),))
    with pytest.raises(SchemaError, match="name is reserved"):
        to_file_proto(spec)


@pytest.mark.parametrize("fields, message", [
    ((FieldSpec(1, "a", "string"), FieldSpec(1, "b", "string")), "tag 1 used by both"),
    ((FieldSpec(1, "a", "string"), FieldSpec(2, "a", "string")), "duplicate field name"),
    ((FieldSpec(0, "a", "string"),), "out of range"),
    ((FieldSpec(19001, "a", "string"),), "reserved by protobuf"),
    ((FieldSpec(1, "a", "Nope"),), "unknown message type"),
])
def test_builder_tag_discipline(fields, message):
    spec = ContractSpec(package="t.v1", file_name="t/v1/t.proto", messages=(MessageSpec("M", fields),))
    with pytest.raises(SchemaError, match=message):
        to_file_proto(spec)


def test_removing_field_requires_reservation():
    booking = _booking_message()
    without_fare = tuple(f for f in booking.fields if f.name != "fare")

    dropped = _with_message(booking_v1.SPEC, "Booking", fields=without_fare)
    problems = find_breaking_changes(_published(), to_file_proto(dropped))
    assert problems == ["Booking.fare: tag 4 removed without reserving its tag and name"]

    reserved = _with_message(
        booking_v1.SPEC, "Booking", fields=without_fare,
        reserved=booking.reserved + (Reserved(4, "fare"),),
    )
    assert find_breaking_changes(_published(), to_file_proto(reserved)) == []


def test_renumbering_and_type_change_are_breaking():
    swapped = (
        FieldSpec(1, "last_name", "string"),
        FieldSpec(2, "first_name", "string"),
        FieldSpec(3, "email", "bytes"),
    )
    spec = _with_message(booking_v1.SPEC, "Passenger", fields=swapped)
    problems = find_breaking_changes(_published(), to_file_proto(spec))
    assert "Passenger: tag 1 renamed first_name -> last_name" in problems
    assert "Passenger: tag 2 renamed last_name -> first_name" in problems
    assert "Passenger.email: tag 3 changed type" in problems


def test_dropping_reservation_and_reusing_tag_is_breaking():
    booking = _booking_message()
    spec = _with_message(
        booking_v1.SPEC, "Booking",
        fields=booking.fields + (FieldSpec(6, "state", "string"),),
        reserved=(),
    )
    problems = find_breaking_changes(_published(), to_file_proto(spec))
    assert "Booking: reservation of tags [6, 7) dropped" in problems
    assert "Booking: reservation of name 'status' dropped" in problems
    assert "Booking.state: reuses reserved tag 6" in problems


def test_cardinality_and_rpc_changes_are_breaking():
    quote = next(m for m in booking_v1.SPEC.messages if m.name == "QuoteRequest")
    fields = tuple(replace(f, repeated=False) if f.name == "segments" else f for f in quote.fields)
    spec = _with_message(booking_v1.SPEC, "QuoteRequest", fields=fields)
    spec = replace(spec, services=(ServiceSpec("BookingService", (
        MethodSpec("Quote", "QuoteRequest", "QuoteReply"),
        MethodSpec("CreateBooking", "CreateBookingRequest", "QuoteReply"),
    )),))
    problems = find_breaking_changes(_published(), to_file_proto(spec))
    assert "QuoteRequest.segments: tag 2 changed cardinality" in problems
    assert "rpc BookingService.CreateBooking changed request or reply type" in problems
    assert "rpc BookingService.RetrieveBooking removed" in problems


def test_new_version_namespace_is_reported_as_package_change():
    v2 = replace(booking_v1.SPEC, package="booking.v2", file_name="booking/v2/booking.proto")
    problems = find_breaking_changes(_published(), to_file_proto(v2))
    assert problems[0] == "package changed booking.v1 -> booking.v2"
