"""Looking records up through the primary and secondary indexes."""

from __future__ import annotations

import os

from fixedtable.header import TableError, read_header
from fixedtable.indexes import (
    find_entry,
    index_path,
    is_number,
    read_index,
    read_secondary_index,
    secondary_path,
)
from fixedtable.query import read_record_at, record_to_dict


def search_pk(bin_path: str | os.PathLike, key: str, numeric: bool) -> dict[str, str]:
    """The record whose primary key is key; raises TableError when there is none."""
    bin_path = os.fspath(bin_path)
    header = read_header(bin_path)
    if not header.field_names:
        raise TableError("Binary file not found")
    entries = read_index(index_path(bin_path), header.record_count, header.primary_key_size())
    entry = find_entry(entries, key, numeric)
    if entry is None:
        raise TableError("not found")
    return record_to_dict(header, read_record_at(bin_path, header, entry.offset))


def search_secondary(bin_path: str | os.PathLike, field: str, value: str) -> list[dict[str, str]]:
    """Every record whose secondary key field holds value, in index order."""
    bin_path = os.fspath(bin_path)
    if not os.path.isfile(bin_path):
        raise TableError("Binary file not found")
    sdx = secondary_path(bin_path, field)
    if not os.path.isfile(sdx):
        raise TableError("Secondary index file not found")
    header = read_header(bin_path)
    if header.primary_key not in header.field_names or field not in header.field_names:
        return []
    key_size = header.primary_key_size()
    value_size = header.field_size(field)
    entries = read_secondary_index(sdx, header.record_count, key_size, value_size)

    matches = []
    for entry in entries:
        if value_size == 1:
            hit = entry.value[:1] == value[:1]
        else:
            hit = entry.value == value
        if not hit:
            continue
        try:
            matches.append(search_pk(bin_path, entry.primary_key, is_number(entry.primary_key)))
        except TableError:
            continue
    return matches