"""Changing an existing record of a table, its primary index and its secondary indexes."""

from __future__ import annotations

import os

from fixedtable.header import Header, TableError, base_path, read_header
from fixedtable.indexes import (
    IndexEntry,
    SecondaryEntry,
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
_INVALID = "Error, Invalid Data record for this file"


def _split(text: str) -> list[str]:
    if not text:
        return []
    parts = text.split(",")
    if parts[-1] == "":
        parts.pop()
    return parts


def _fixed_record(text: str, size: int) -> bytes:
    return text.encode("utf-8")[:size].ljust(size, b"\0")


def parse_modification(header: Header, data: str, numeric: bool) -> tuple[list[str], str]:
    """Validate "name:value,..." data for a modification; return the values and the new primary key."""
    if not header.field_names:
        raise TableError("Binary is empty")
    pk_position = header.field_position(header.primary_key)
    pk_size = header.field_sizes[pk_position]
    secondary_positions = {header.field_position(name) for name in header.secondary_keys}

    values: list[str] = []
    new_key: str | None = None
    for position, item in enumerate(_split(data)):
        if position >= len(header.field_names):
            raise TableError("Field type does not match")
        name, separator, value = item.partition(":")
        if name != header.field_names[position] or not separator:
            raise TableError(_INVALID)
        values.append(value)
        if header.field_types[position] in _NUMERIC_TYPES and " " in value:
            raise TableError(f"{_INVALID}, Number with space?")
        if position == pk_position:
            if value == "":
                raise TableError("Error, Primary Key can't be empty")
            if numeric and not is_number(value):
                raise TableError("Error, Primary Key is not a number")
            if len(value.encode("utf-8")) > pk_size:
                raise TableError("Error, Primary Key is too long")
            new_key = value
        if position in secondary_positions:
            if value == "":
                raise TableError("Error, Secondary Key can't be empty")
            if len(value.encode("utf-8")) > header.field_sizes[position]:
                raise TableError("Error, Secondary Key is too long")
    if new_key is None:
        raise TableError("Error, Primary Key can't be empty")
    return values, new_key


def update_secondary_index(
    sdx_path: str | os.PathLike, new_key: str, value_size: int, old_key: str, new_value: str
) -> None:
    """Point the secondary index entries of old_key at new_key with new_value."""
    sdx_path = os.fspath(sdx_path)
    dash = sdx_path.rfind("-")
    bin_path = (sdx_path[:dash] if dash != -1 else base_path(sdx_path)) + ".bin"
    header = read_header(bin_path)
    key_size = header.primary_key_size()
    width = key_size + value_size
    try:
        total = os.path.getsize(sdx_path)
    except OSError:
        raise TableError("Secondary index file not found") from None
    count = total // width if width > 0 else 0
    entries = read_secondary_index(sdx_path, count, key_size, value_size)
    updated = [
        SecondaryEntry(new_key, new_value) if entry.primary_key == old_key else entry
        for entry in entries
    ]
    write_secondary_index(sdx_path, updated, key_size, value_size)


def update_record(
    bin_path: str | os.PathLike, key: str, numeric: bool, fields: list[str], new_key: str
) -> int:
    """Overwrite the record with primary key key by fields, re-keyed as new_key; return its offset."""
    bin_path = os.fspath(bin_path)
    header = read_header(bin_path)
    if not header.field_names:
        raise TableError("Binary file not found")
    idx = index_path(bin_path)
    key_size = header.primary_key_size()
    entries = read_index(idx, header.record_count, key_size)
    entry = find_entry(entries, key, numeric)
    if entry is None:
        raise TableError("not found")
    others = [other.key for other in entries if other is not entry]
    if not is_unique(others, new_key):
        raise TableError("Error, Primary Key is not unique")

    try:
        with open(bin_path, "r+b") as handle:
            handle.seek(entry.offset)
            handle.write(_fixed_record(",".join(fields), header.record_size()))
    except FileNotFoundError:
        raise TableError("Binary file not found") from None

    for name in header.secondary_keys:
        position = header.field_position(name)
        value = fields[position] if position < len(fields) else ""
        update_secondary_index(
            secondary_path(bin_path, name), new_key, header.field_sizes[position], key, value
        )

    ordered = sort_entries(entries, numeric)
    write_index(
        idx,
        [IndexEntry(new_key if item.key == key else item.key, item.offset) for item in ordered],
        key_size,
    )
    return entry.offset


def modify_record(bin_path: str | os.PathLike, key: str, numeric: bool, data: str) -> int:
    """Replace the record with primary key key by "name:value,..." data; return its offset."""
    header = read_header(bin_path)
    fields, new_key = parse_modification(header, data, numeric)
    return update_record(bin_path, key, numeric, fields, new_key)