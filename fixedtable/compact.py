"""Rewriting a table without its deleted records and rebuilding its indexes."""

from __future__ import annotations

import os

from fixedtable.header import TableError, header_end, read_header, write_header
from fixedtable.indexes import (
    IndexEntry,
    SecondaryEntry,
    index_path,
    secondary_path,
    write_index,
    write_secondary_index,
)

_DELETED = b"*"


def _split_fields(record: bytes) -> list[str]:
    text = record.split(b"\0", 1)[0].decode("utf-8", errors="replace")
    if not text:
        return []
    fields = text.split(",")
    if fields[-1] == "":
        fields.pop()
    return fields


def compact(bin_path: str | os.PathLike) -> int:
    """Drop deleted records from a table, rebuild its indexes and return how many were reclaimed."""
    bin_path = os.fspath(bin_path)
    header = read_header(bin_path)
    if header.avail_list == -1:
        return 0

    size = header.record_size()
    if size <= 0:
        raise TableError("Binary file header is corrupt")
    start = header_end(bin_path)
    with open(bin_path, "rb") as handle:
        body = handle.read()[start:]

    key_pos = header.field_position(header.primary_key)
    key_size = header.field_sizes[key_pos]
    secondary = [
        (name, header.field_position(name), header.field_size(name)) for name in header.secondary_keys
    ]

    kept: list[bytes] = []
    index_entries: list[IndexEntry] = []
    secondary_entries: dict[str, list[SecondaryEntry]] = {name: [] for name, _, _ in secondary}
    reclaimed = 0
    last_marker = b""
    for pos in range(0, len(body) - size + 1, size):
        chunk = body[pos:pos + size]
        if chunk[:1] == _DELETED:
            marker = chunk.split(b"\0", 1)[0]
            if marker != last_marker:
                last_marker = marker
                reclaimed += 1
            continue
        offset = start + len(kept) * size
        kept.append(chunk)
        fields = _split_fields(chunk)
        key = fields[key_pos] if key_pos < len(fields) else ""
        if key_pos < len(fields):
            index_entries.append(IndexEntry(key, offset))
        for name, position, _ in secondary:
            if position < len(fields):
                secondary_entries[name].append(SecondaryEntry(key, fields[position]))

    header.avail_list = -1
    with open(bin_path, "wb"):
        pass
    write_header(bin_path, header)
    with open(bin_path, "ab") as handle:
        handle.write(b"".join(kept))

    write_index(index_path(bin_path), index_entries, key_size)
    for name, _, value_size in secondary:
        write_secondary_index(secondary_path(bin_path, name), secondary_entries[name], key_size, value_size)
    return reclaimed