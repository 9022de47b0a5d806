"""
Deterministic JSON rendering of the record store.

Device identifiers are ordered by their embedded model number (`iPhone9,1`
before `iPhone10,1`) and whole numbers print without a decimal point (`62`,
not `62.0`), so output stays byte-identical with earlier generators. The
document is built as an explicitly ordered tree and rendered by hand.

Two modes:
- full: two-space indented, includes `pending` and `problematic`
- minified: single line, omits `pending` and `problematic`
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Iterable, Iterator, List, Mapping, Tuple, Union

from bezelgen.domain.models import DeviceRecord, PendingEntry, RecordStore

NUMERIC_KEY_PATTERN = re.compile(r"[0-9]+(?:,[0-9]+)?")
INDENT = "  "


class OrderedObject:
    """A JSON object whose key order is exactly the insertion order."""

    def __init__(self, pairs: Iterable[Tuple[str, "JsonValue"]] = ()) -> None:
        self._pairs: List[Tuple[str, JsonValue]] = list(pairs)

    def append(self, key: str, value: "JsonValue") -> None:
        self._pairs.append((key, value))

    def __iter__(self) -> Iterator[Tuple[str, "JsonValue"]]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def keys(self) -> List[str]:
        return [key for key, _ in self._pairs]


JsonValue = Union[str, float, int, OrderedObject]


def device_sort_key(identifier: str) -> float:
    """
    Numeric sort key of a device identifier.

    The first run of digits, optionally followed by a comma and more digits,
    read as a decimal number: "iPhone14,1" -> 14.1. No digits -> +inf.
    """
    match = NUMERIC_KEY_PATTERN.search(identifier)
    if match is None:
        return math.inf
    return float(match.group(0).replace(",", "."))


def sort_identifiers(identifiers: Iterable[str]) -> List[str]:
    """Sort by `device_sort_key`, ties broken lexicographically."""
    return sorted(identifiers, key=lambda ident: (device_sort_key(ident), ident))


def format_number(value: float) -> str:
    """
    Render a number the way JavaScript's JSON.stringify does.

    Uses the shortest round-tripping digits of the float, then places the
    decimal point with JavaScript's rules: plain notation for magnitudes in
    [1e-6, 1e21), exponent notation otherwise.

        62.0  -> "62"       21.5  -> "21.5"
        1e-07 -> "1e-7"     1e21  -> "1e+21"
    """
    if isinstance(value, bool) or not math.isfinite(value):
        raise ValueError(f"Cannot serialize non-finite or boolean number: {value!r}")
    if value == 0:
        return "0"

    sign, digit_tuple, exponent = Decimal(repr(float(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    count = len(digits)
    point = exponent + count
    prefix = "-" if sign else ""

    if count <= point <= 21:
        return prefix + digits + "0" * (point - count)
    if 0 < point <= 21:
        return prefix + digits[:point] + "." + digits[point:]
    if -6 < point <= 0:
        return prefix + "0." + "0" * -point + digits

    power = point - 1
    mantissa = digits if count == 1 else digits[0] + "." + digits[1:]
    return f"{prefix}{mantissa}e{'+' if power >= 0 else '-'}{abs(power)}"


def escape_string(text: str) -> str:
    out = ['"']
    for char in text:
        if char == '"':
            out.append('\\"')
        elif char == "\\":
            out.append("\\\\")
        elif char == "\n":
            out.append("\\n")
        elif char == "\r":
            out.append("\\r")
        elif char == "\t":
            out.append("\\t")
        elif ord(char) < 0x20:
            out.append(f"\\u{ord(char):04x}")
        else:
            out.append(char)
    out.append('"')
    return "".join(out)


def serialize(value: JsonValue, pretty: bool, indent: int = 0) -> str:
    if isinstance(value, OrderedObject):
        return _serialize_object(value, pretty, indent)
    if isinstance(value, str):
        return escape_string(value)
    if isinstance(value, (int, float)):
        return format_number(value)
    raise TypeError(f"Unsupported JSON value: {type(value).__name__}")


def _serialize_object(obj: OrderedObject, pretty: bool, indent: int) -> str:
    if not len(obj):
        return "{}"
    if not pretty:
        body = ",".join(f"{escape_string(key)}:{serialize(value, False)}" for key, value in obj)
        return "{" + body + "}"

    inner = INDENT * (indent + 1)
    lines = [
        f"{inner}{escape_string(key)}: {serialize(value, True, indent + 1)}" for key, value in obj
    ]
    return "{\n" + ",\n".join(lines) + "\n" + INDENT * indent + "}"


def _device_section(records: Mapping[str, DeviceRecord]) -> OrderedObject:
    section = OrderedObject()
    for identifier in sort_identifiers(records):
        record = records[identifier]
        section.append(
            identifier,
            OrderedObject([("bezel", record.metric), ("name", record.display_name)]),
        )
    return section


def _pending_section(entries: Mapping[str, PendingEntry]) -> OrderedObject:
    section = OrderedObject()
    for identifier in sort_identifiers(entries):
        section.append(identifier, OrderedObject([("name", entries[identifier].display_name)]))
    return section


def build_document(store: RecordStore, minify: bool = False) -> OrderedObject:
    """Build the ordered document tree for one output mode."""
    root = OrderedObject()
    root.append(
        "_metadata",
        OrderedObject(
            [
                ("Author", store.metadata.author),
                ("Project", store.metadata.project),
                ("Website", store.metadata.website),
            ]
        ),
    )

    devices = OrderedObject()
    for category, records in store.devices.items():
        devices.append(category, _device_section(records))
    root.append("devices", devices)

    if not minify:
        root.append("pending", _pending_section(store.pending))
        root.append("problematic", _pending_section(store.problematic))
    return root


def render(store: RecordStore, minify: bool = False) -> str:
    """Render the store as full (pretty) or minified JSON text."""
    return serialize(build_document(store, minify=minify), pretty=not minify)


__all__ = [
    "JsonValue",
    "OrderedObject",
    "build_document",
    "device_sort_key",
    "escape_string",
    "format_number",
    "render",
    "serialize",
    "sort_identifiers",
]
