"""Reading records of a table and rendering its structure and contents."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator, Mapping

from fixedtable.header import Header, TableError, header_end, read_header

_DELETED = b"*"
_NUMERIC_TYPES = ("int", "float")


def _split_fields(raw: bytes) -> list[str]:
    text = raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")
    if not text:
        return []
    fields = text.split(",")
    if fields[-1] == "":
        fields.pop()
    return fields


def _require_fields(header: Header) -> None:
    if not header.field_names:
        raise TableError("Binary file not found")


def _record_width(header: Header) -> int:
    size = header.record_size()
    if size <= 0:
        raise TableError("Binary file header is corrupt")
    return size


def _read_table(bin_path: str) -> bytes:
    try:
        with open(bin_path, "rb") as handle:
            return handle.read()
    except OSError:
        raise TableError("Binary file not found") from None


def iter_records(bin_path: str | os.PathLike, header: Header) -> Iterator[list[str]]:
    """Yield the fields of each live record, skipping deleted ones, up to the header's count."""
    bin_path = os.fspath(bin_path)
    size = _record_width(header)
    start = header_end(bin_path)
    data = _read_table(bin_path)
    remaining = header.record_count
    for pos in range(start, len(data) - size + 1, size):
        if remaining <= 0:
            break
        chunk = data[pos:pos + size]
        if chunk[:1] == _DELETED:
            continue
        remaining -= 1
        yield _split_fields(chunk)


def read_record_at(bin_path: str | os.PathLike, header: Header, offset: int) -> list[str]:
    """The fields of the record stored at the given byte offset."""
    size = _record_width(header)
    try:
        with open(os.fspath(bin_path), "rb") as handle:
            handle.seek(offset)
            chunk = handle.read(size)
    except OSError:
        raise TableError("Binary file not found") from None
    if not chunk:
        raise TableError("not found")
    return _split_fields(chunk)


def record_to_dict(header: Header, record: Iterable[str]) -> dict[str, str]:
    """Pair the fields of a record with the names of the header's fields."""
    return dict(zip(header.field_names, record))


def describe(bin_path: str | os.PathLike) -> dict:
    """The structure of a table: its fields, keys and number of records."""
    header = read_header(bin_path)
    _require_fields(header)
    return {
        "fields": [
            {"name": name, "type": kind, "length": size}
            for name, kind, size in zip(header.field_names, header.field_types, header.field_sizes)
        ],
        "primary-key": header.primary_key,
        "secondary-key": list(header.secondary_keys),
        "records": header.record_count,
    }


def format_describe(header: Header) -> str:
    """The structure of a table laid out as a JSON object."""
    _require_fields(header)
    lines = ["{", '  "fields": [']
    described = list(zip(header.field_names, header.field_types, header.field_sizes))
    for position, (name, kind, size) in enumerate(described):
        separator = "," if position < len(described) - 1 else ""
        lines.append(f'    {{"name": "{name}", "type": "{kind}", "length": {size}}}{separator}')
    lines.append("  ],")
    lines.append(f'  "primary-key": "{header.primary_key}",')
    keys = ",".join(f'"{key}"' for key in header.secondary_keys)
    lines.append(f'  "secondary-key": [{keys}],')
    lines.append(f'  "records": {header.record_count}')
    lines.append("}")
    return "\n".join(lines)


def list_records(bin_path: str | os.PathLike) -> list[dict[str, str]]:
    """Every live record of a table as a mapping of field name to value."""
    header = read_header(bin_path)
    _require_fields(header)
    return [record_to_dict(header, record) for record in iter_records(bin_path, header)]


def _render(kind: str, value: str) -> str:
    return value if kind in _NUMERIC_TYPES else f'"{value}"'


def format_records(header: Header, records: Iterable[Mapping[str, str]]) -> str:
    """Records laid out as a JSON array, numbers unquoted and text quoted."""
    kinds = dict(zip(header.field_names, header.field_types))
    records = list(records)
    lines = ["["]
    for number, record in enumerate(records):
        lines.append(" {")
        items = list(record.items())
        for position, (name, value) in enumerate(items):
            separator = "," if position < len(items) - 1 else ""
            lines.append(f'   "{name}": {_render(kinds.get(name, "char"), value)}{separator}')
        lines.append(" }," if number < len(records) - 1 else " }")
    lines.append("]")
    return "\n".join(lines)