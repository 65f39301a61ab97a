"""Adding and deleting records of a table, keeping its indexes in step."""

from __future__ import annotations

import os
import re

from fixedtable.header import Header, TableError, read_header, write_header
from fixedtable.indexes import (
    append_index_entry,
    append_secondary_entry,
    find_entry,
    index_path,
    is_number,
    is_unique,
    read_index,
    read_secondary_index,
    secondary_path,
    sort_entries,
    write_index,
    write_secondary_index,
)

_NUMERIC_TYPES = ("int", "float")
_FREE_MARKER = re.compile(r"\*\s*([+-]?[0-9]+)")
_MISMATCH = "Field type does not match"


def _split(text: str) -> list[str]:
    if not text:
        return []
    parts = text.split(",")
    if parts[-1] == "":
        parts.pop()
    return parts


def _fixed_record(text: str, size: int) -> bytes:
    return text.encode("utf-8")[:size].ljust(size, b"\0")


def _secondaries(header: Header) -> list[tuple[str, int, int]]:
    return [
        (name, header.field_position(name), header.field_size(name))
        for name in header.secondary_keys
    ]


def _file_size(bin_path: str) -> int:
    try:
        return os.path.getsize(bin_path)
    except OSError:
        raise TableError("Binary file not found") from None


def _write_at(bin_path: str, offset: int, payload: bytes) -> None:
    try:
        with open(bin_path, "r+b") as handle:
            handle.seek(offset)
            handle.write(payload)
    except FileNotFoundError:
        raise TableError("Binary file not found") from None


def _read_at(bin_path: str, offset: int, size: int) -> bytes:
    try:
        with open(bin_path, "rb") as handle:
            handle.seek(offset)
            return handle.read(size)
    except OSError:
        raise TableError("Binary file not found") from None


def _next_free(chunk: bytes) -> int:
    text = chunk.split(b"\0", 1)[0].decode("utf-8", errors="replace")
    match = _FREE_MARKER.match(text)
    if match is None:
        raise TableError("Avail list is corrupt")
    return int(match.group(1))


def _index_record(bin_path: str, header: Header, values: list[str], primary_key: str, offset: int) -> None:
    key_size = header.primary_key_size()
    append_index_entry(index_path(bin_path), primary_key, offset, key_size)
    for name, position, value_size in _secondaries(header):
        if position < len(values):
            append_secondary_entry(
                secondary_path(bin_path, name), primary_key, values[position], key_size, value_size
            )


def parse_data(header: Header, data: str) -> list[str]:
    """Validate "name:value,..." data against the header and return the values in field order."""
    pk_position = header.field_position(header.primary_key)
    secondary_positions = {position for _, position, _ in _secondaries(header)}
    values: list[str] = []
    for position, item in enumerate(_split(data)):
        if position >= len(header.field_names):
            raise TableError(_MISMATCH)
        name, separator, value = item.partition(":")
        if not separator:
            value = item
        if name != header.field_names[position]:
            raise TableError(_MISMATCH)
        if position == pk_position and value == "":
            raise TableError("Primary key cannot be empty")
        if position in secondary_positions and value == "":
            raise TableError("Secondary key cannot be empty")
        if header.field_types[position] in _NUMERIC_TYPES:
            if not is_number(value):
                raise TableError(_MISMATCH)
        elif len(value.encode("utf-8")) > header.field_sizes[position]:
            raise TableError(_MISMATCH)
        values.append(value)
    if len(values) != len(header.field_names):
        raise TableError(_MISMATCH)
    return values


def append_record(bin_path: str | os.PathLike, header: Header, values: list[str], primary_key: str) -> int:
    """Write a record at the end of the table, index it and return its offset."""
    bin_path = os.fspath(bin_path)
    size = header.record_size()
    offset = _file_size(bin_path)
    _index_record(bin_path, header, values, primary_key, offset)
    with open(bin_path, "ab") as handle:
        handle.write(_fixed_record(",".join(values), size))
    return offset


def add_record(bin_path: str | os.PathLike, data: str) -> int:
    """Insert a record given as "name:value,..." data, reusing a freed slot if any; return its offset."""
    bin_path = os.fspath(bin_path)
    header = read_header(bin_path)
    values = parse_data(header, data)
    key = values[header.field_position(header.primary_key)]
    existing = read_index(index_path(bin_path), header.record_count, header.primary_key_size())
    if not is_unique((entry.key for entry in existing), key):
        raise TableError("Primary key already exists")

    size = header.record_size()
    if header.avail_list != -1:
        chain: list[int] = []
        offset = header.avail_list
        while True:
            if offset in chain:
                raise TableError("Avail list is corrupt")
            chain.append(offset)
            following = _next_free(_read_at(bin_path, offset, size))
            if following == -1:
                break
            offset = following
        target = chain[-1]
        _write_at(bin_path, target, _fixed_record(",".join(values), size))
        _index_record(bin_path, header, values, key, target)
        if len(chain) > 1:
            _write_at(bin_path, chain[-2], _fixed_record("*-1", size))
        else:
            header.avail_list = -1
    else:
        target = append_record(bin_path, header, values, key)

    header.record_count += 1
    write_header(bin_path, header)
    return target


def delete_record(bin_path: str | os.PathLike, key: str, numeric: bool) -> int:
    """Mark the record with the given primary key as free, unindex it and return its offset."""
    bin_path = os.fspath(bin_path)
    header = read_header(bin_path)
    if not header.field_names:
        raise TableError("File is empty")
    idx = index_path(bin_path)
    key_size = header.primary_key_size()
    entries = read_index(idx, header.record_count, key_size)
    entry = find_entry(entries, key, numeric)
    if entry is None:
        raise TableError("not found")

    size = header.record_size()
    _write_at(bin_path, entry.offset, _fixed_record(f"*{header.avail_list}", size))
    header.avail_list = entry.offset
    header.record_count -= 1
    write_header(bin_path, header)

    remaining = [other for other in sort_entries(entries, numeric) if other is not entry]
    write_index(idx, remaining, key_size)

    for name, _, value_size in _secondaries(header):
        sdx = secondary_path(bin_path, name)
        kept = [
            item
            for item in read_secondary_index(sdx, len(entries), key_size, value_size)
            if item.primary_key != entry.key
        ]
        write_secondary_index(sdx, kept, key_size, value_size)
    return entry.offset