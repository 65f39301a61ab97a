"""Creating a table, its index and its secondary indexes from a JSON schema."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field

from fixedtable.header import Header, TableError, base_path, write_header

_TYPES = ("char", "int", "float")


@dataclass
class CreateResult:
    """The files a table creation produced."""

    fields_count: int
    file: str
    index: str
    secondary: list[str] = field(default_factory=list)

    def to_json(self) -> str:
        """The result as a JSON object."""
        return json.dumps(
            {
                "result": "OK",
                "fields-count": self.fields_count,
                "file": self.file,
                "index": self.index,
                "secondary": list(self.secondary),
            }
        )


def _is_empty(value) -> bool:
    return value is None or (isinstance(value, (list, dict)) and not value)


def _valid_name(value) -> bool:
    return isinstance(value, str) and value != "" and " " not in value


def _load_schema(json_path: str) -> dict:
    try:
        with open(json_path, encoding="utf-8") as handle:
            text = handle.read()
    except OSError:
        raise TableError("json file not found") from None
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise TableError(f"Format not recognized: {exc}") from None
    if not isinstance(data, dict):
        raise TableError("Format not recognized")
    return data


def _build_header(data: dict) -> Header:
    fields = data.get("fields")
    if _is_empty(fields) or not isinstance(fields, list):
        raise TableError("fields has space or it's in an incorrect form")
    if _is_empty(data.get("primary-key")):
        raise TableError("primary index field does not exist")
    if _is_empty(data.get("secondary-key")):
        raise TableError("secondary index field does not exist")
    if not all(isinstance(element, dict) for element in fields):
        raise TableError("fields has space or it's in an incorrect form")

    header = Header()
    for element in fields:
        name = element.get("name")
        if _is_empty(name) or not isinstance(name, str):
            raise TableError("name is empty or is an invalid format")
        if not _valid_name(name):
            raise TableError("field contains space or is empty")
        header.field_names.append(name)
    for element in fields:
        kind = element.get("type")
        if _is_empty(kind) or not isinstance(kind, str):
            raise TableError("type is empty or is an invalid format")
        if kind not in _TYPES:
            raise TableError("type is not valid")
        header.field_types.append(kind)
    for element in fields:
        length = element.get("length")
        if _is_empty(length):
            raise TableError("length is empty or is an invalid format")
        if isinstance(length, bool) or not isinstance(length, (int, float)):
            raise TableError("length is not valid")
        header.field_sizes.append(int(length))

    primary = data["primary-key"]
    if not _valid_name(primary):
        raise TableError("primary key contains space, or is empty")
    header.primary_key = primary
    return header


def create_file(json_path: str | os.PathLike) -> CreateResult:
    """Create the table, index and secondary index files described by a JSON schema."""
    json_path = os.fspath(json_path)
    data = _load_schema(json_path)
    header = _build_header(data)
    base = base_path(json_path)
    short = base.rsplit("/", 1)[-1]

    secondary_files = []
    secondary = data["secondary-key"]
    if not isinstance(secondary, list):
        secondary = [secondary]
    for key in secondary:
        if not _valid_name(key):
            raise TableError("secondary key contains space or is empty")
        header.secondary_keys.append(key)
        try:
            with open(f"{base}-{key}.sdx", "wb"):
                pass
        except OSError:
            raise TableError("secondary index file could not be created") from None
        secondary_files.append(f"{short}-{key}.sdx")

    try:
        with open(base + ".bin", "wb"):
            pass
    except OSError:
        raise TableError("binary file could not be created") from None
    header.avail_list = -1
    header.record_count = 0
    write_header(base + ".bin", header)
    try:
        with open(base + ".idx", "wb"):
            pass
    except OSError:
        raise TableError("binary or index file could not be created") from None

    return CreateResult(
        fields_count=len(data["fields"]),
        file=short + ".bin",
        index=short + ".idx",
        secondary=secondary_files,
    )