"""Wire compatibility check between a published contract and a candidate.

Only widening is allowed inside one package: new messages, new fields on
fresh tags, new RPCs. Everything else is reported, and belongs in a new
version package served alongside the old one.
"""
from __future__ import annotations

from typing import Iterable, List, Tuple

from google.protobuf import descriptor_pb2


FileDescriptorProto = descriptor_pb2.FileDescriptorProto
DescriptorProto = descriptor_pb2.DescriptorProto


def _merged(ranges: Iterable) -> List[Tuple[int, int]]:
    merged: List[Tuple[int, int]] = []
    for start, end in sorted((r.start, r.end) for r in ranges):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def _is_reserved(number: int, ranges: Iterable) -> bool:
    # reserved_range.end is exclusive
    return any(r.start <= number < r.end for r in ranges)


def _covered(start: int, end: int, ranges: Iterable) -> bool:
    return any(s <= start and end <= e for s, e in _merged(ranges))


def _compare_message(old: DescriptorProto, new: DescriptorProto) -> List[str]:
    problems: List[str] = []
    name = old.name
    new_by_number = {f.number: f for f in new.field}
    new_reserved_names = set(new.reserved_name)

    for of in old.field:
        nf = new_by_number.get(of.number)
        if nf is None:
            if not (_is_reserved(of.number, new.reserved_range) and of.name in new_reserved_names):
                problems.append(
                    f"{name}.{of.name}: tag {of.number} removed without reserving its tag and name"
                )
            continue
        if nf.name != of.name:
            problems.append(f"{name}: tag {of.number} renamed {of.name} -> {nf.name}")
        if nf.type != of.type or nf.type_name != of.type_name:
            problems.append(f"{name}.{of.name}: tag {of.number} changed type")
        if nf.label != of.label:
            problems.append(f"{name}.{of.name}: tag {of.number} changed cardinality")

    for r in old.reserved_range:
        if not _covered(r.start, r.end, new.reserved_range):
            problems.append(f"{name}: reservation of tags [{r.start}, {r.end}) dropped")
    for reserved_name in old.reserved_name:
        if reserved_name not in new_reserved_names:
            problems.append(f"{name}: reservation of name {reserved_name!r} dropped")

    old_numbers = {f.number for f in old.field}
    for nf in new.field:
        if nf.number in old_numbers:
            continue
        if _is_reserved(nf.number, old.reserved_range):
            problems.append(f"{name}.{nf.name}: reuses reserved tag {nf.number}")
        if nf.name in old.reserved_name:
            problems.append(f"{name}.{nf.name}: reuses reserved name")
    return problems


def find_breaking_changes(
    published: FileDescriptorProto, candidate: FileDescriptorProto
) -> List[str]:
    """Return a human-readable list of wire-breaking differences (empty if compatible)."""
    problems: List[str] = []
    if published.package != candidate.package:
        problems.append(f"package changed {published.package} -> {candidate.package}")

    new_messages = {m.name: m for m in candidate.message_type}
    for old in published.message_type:
        new = new_messages.get(old.name)
        if new is None:
            problems.append(f"message {old.name} removed")
            continue
        problems.extend(_compare_message(old, new))

    new_services = {s.name: s for s in candidate.service}
    for old_svc in published.service:
        new_svc = new_services.get(old_svc.name)
        if new_svc is None:
            problems.append(f"service {old_svc.name} removed")
            continue
        new_methods = {m.name: m for m in new_svc.method}
        for om in old_svc.method:
            nm = new_methods.get(om.name)
            if nm is None:
                problems.append(f"rpc {old_svc.name}.{om.name} removed")
                continue
            if nm.input_type != om.input_type or nm.output_type != om.output_type:
                problems.append(f"rpc {old_svc.name}.{om.name} changed request or reply type")
            if (nm.client_streaming, nm.server_streaming) != (om.client_streaming, om.server_streaming):
                problems.append(f"rpc {old_svc.name}.{om.name} changed streaming mode")
    return problems
