"""Bulk loading of CSV rows into a table."""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass

from fixedtable.header import Header, TableError, base_path, read_header, write_header
from fixedtable.query import iter_records
from fixedtable.records import add_record, append_record

_INTEGER = re.compile(r"[0-9]+")
_FLOAT = re.compile(r"[0-9]+\.[0-9]+")


@dataclass
class LoadResult:
    """How many CSV rows were stored and how many were skipped."""

    records: int
    skipped: int

    def to_json(self) -> str:
        """The result as a JSON object."""
        if self.skipped:
            return json.dumps({"result": "WARNING", "records": self.records, "skipped": self.skipped})
        return json.dumps({"result": "OK", "records": self.records})


def _split(line: str) -> list[str]:
    if not line:
        return []
    parts = line.split(",")
    if parts[-1] == "":
        parts.pop()
    return parts


def stored_primary_keys(bin_path: str | os.PathLike, header: Header) -> list[str]:
    """Primary keys of the live records already stored in the table."""
    if header.record_count <= 0:
        return []
    position = header.field_position(header.primary_key)
    return [record[position] for record in iter_records(bin_path, header) if position < len(record)]


def _row_values(header: Header, fields: list[str]) -> list[str] | None:
    if len(fields) > len(header.field_names):
        return None
    padded = fields + [""] * (len(header.field_names) - len(fields))
    secondary = set(header.secondary_keys)
    values: list[str] = []
    for name, kind, size, value in zip(header.field_names, header.field_types, header.field_sizes, padded):
        is_key = name == header.primary_key or name in secondary
        if value == "" and is_key:
            return None
        if kind == "char":
            values.append(value.encode("utf-8")[:size].decode("utf-8", errors="ignore"))
            continue
        pattern = _INTEGER if kind == "int" else _FLOAT
        if pattern.fullmatch(value):
            values.append(value)
        elif is_key:
            return None
        else:
            values.append("0")
    return values


def load_csv(bin_path: str | os.PathLike, csv_path: str | os.PathLike) -> LoadResult:
    """Store the rows of a CSV file whose first line names the table's fields."""
    bin_path = os.fspath(bin_path)
    header = read_header(bin_path)
    if not header.field_names:
        raise TableError("Binary file not found")
    seen = set(stored_primary_keys(bin_path, header))

    try:
        with open(base_path(csv_path) + ".csv", encoding="utf-8", newline="") as handle:
            lines = handle.read().splitlines()
    except OSError:
        raise TableError("csv file not found") from None
    if not lines:
        return LoadResult(0, 0)

    for position, name in enumerate(_split(lines[0])):
        if position >= len(header.field_names) or name != header.field_names[position]:
            raise TableError("CSV fields do not match file structure")

    pk_position = header.field_position(header.primary_key)
    added = skipped = 0
    for line in lines[1:]:
        if not line.strip():
            continue
        values = _row_values(header, _split(line))
        if values is None:
            skipped += 1
            continue
        key = values[pk_position]
        if key in seen:
            skipped += 1
            continue
        if header.avail_list != -1:
            data = ",".join(f"{name}:{value}" for name, value in zip(header.field_names, values))
            try:
                add_record(bin_path, data)
            except TableError:
                skipped += 1
                continue
            header = read_header(bin_path)
        else:
            append_record(bin_path, header, values, key)
            header.record_count += 1
        seen.add(key)
        added += 1

    write_header(bin_path, header)
    return LoadResult(added, skipped)