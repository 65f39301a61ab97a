"""Command line entry point for creating, loading, querying and editing tables."""

from __future__ import annotations

import json
import re
import sys
from collections.abc import Callable, Sequence

from fixedtable.compact import compact
from fixedtable.header import Header, TableError, read_header
from fixedtable.indexes import is_number
from fixedtable.loader import load_csv
from fixedtable.modify import modify_record
from fixedtable.query import format_describe, format_records, list_records
from fixedtable.records import add_record, delete_record
from fixedtable.schema import create_file
from fixedtable.search import search_pk, search_secondary

_JSON = re.compile(r".+\.json")
_BIN = re.compile(r".+\.bin")
_CSV = re.compile(r".+\.csv")
_PK = re.compile(r"-pk=.+")
_SK = re.compile(r"-sk=.+")
_VALUE = re.compile(r"-value=.+")
_DATA = re.compile(r"-data=.+")

_INVALID = "invalid arguments"
_BAD_DATA = "-data= structure is invalid"


def _after_equals(text: str) -> str:
    return text.partition("=")[2]


def _payload(text: str) -> str:
    if not _DATA.fullmatch(text):
        raise TableError(_BAD_DATA)
    data = _after_equals(text)
    if not (data.startswith("{") and data.endswith("}")):
        raise TableError(_BAD_DATA)
    return data[1:-1]


def parse_arguments(argv: Sequence[str]) -> tuple[str, dict]:
    """Turn command line arguments into an action name and its parameters."""
    args = list(argv)
    count = len(args)
    if count == 2:
        if args[0] == "-create" and _JSON.fullmatch(args[1]):
            return "create", {"json_path": args[1]}
        raise TableError(f"{_INVALID}, try -create [json file]")
    if count < 3 or args[0] != "-file":
        raise TableError(f"{_INVALID}, try -file [bin file] followed by an action")
    path, action = args[1], args[2]
    if not _BIN.fullmatch(path):
        raise TableError(f"{_INVALID}, expected a .bin file after -file")

    if count == 3:
        simple = {"-GET": "list", "-describe": "describe", "-compact": "compact"}
        if action in simple:
            return simple[action], {"bin_path": path}
        raise TableError(f"{_INVALID}, try -GET, -describe or -compact")

    if action == "-load":
        if count == 4 and _CSV.fullmatch(args[3]):
            return "load", {"bin_path": path, "csv_path": args[3]}
        raise TableError(f"{_INVALID}, try -file [bin file] -load [csv file]")

    if action == "-DELETE":
        if count == 4 and _PK.fullmatch(args[3]):
            key = _after_equals(args[3])
            return "delete", {"bin_path": path, "key": key, "numeric": is_number(key)}
        raise TableError(f"{_INVALID}, try -file [bin file] -DELETE -pk=[key]")

    if action == "-GET" and count >= 5:
        if count == 5 and args[3] == "-pk" and _VALUE.fullmatch(args[4]):
            key = _after_equals(args[4])
            return "search_pk", {"bin_path": path, "key": key, "numeric": is_number(key)}
        if _SK.fullmatch(args[3]) and _VALUE.fullmatch(args[4]):
            value = _after_equals(" ".join(args[4:]))
            return "search_secondary", {
                "bin_path": path,
                "field": _after_equals(args[3]),
                "value": value,
            }
        raise TableError(f"{_INVALID}, try -GET -pk -value=[key] or -GET -sk=[field] -value=[value]")

    if action == "-PUT":
        if count >= 5 and _PK.fullmatch(args[3]):
            key = _after_equals(args[3])
            return "modify", {
                "bin_path": path,
                "key": key,
                "numeric": is_number(key),
                "data": _payload("".join(args[4:])),
            }
        raise TableError(f"{_INVALID}, try -file [bin file] -PUT -pk=[key] -data={{...}}")

    if action == "-POST":
        return "add", {"bin_path": path, "data": _payload("".join(args[3:]))}

    raise TableError(_INVALID)


def _ok(extra: dict | None = None) -> str:
    return json.dumps({"result": "OK", **(extra or {})})


def _single_record(header: Header, record: dict) -> str:
    return "\n".join(format_records(header, [record]).splitlines()[1:-1])


def _run_create(json_path: str) -> str:
    return create_file(json_path).to_json()


def _run_list(bin_path: str) -> str:
    header = read_header(bin_path)
    return format_records(header, list_records(bin_path))


def _run_describe(bin_path: str) -> str:
    return format_describe(read_header(bin_path))


def _run_compact(bin_path: str) -> str:
    return _ok({"records-reclaimed": compact(bin_path)})


def _run_load(bin_path: str, csv_path: str) -> str:
    return load_csv(bin_path, csv_path).to_json()


def _run_delete(bin_path: str, key: str, numeric: bool) -> str:
    delete_record(bin_path, key, numeric)
    return _ok()


def _run_search_pk(bin_path: str, key: str, numeric: bool) -> str:
    record = search_pk(bin_path, key, numeric)
    return _single_record(read_header(bin_path), record)


def _run_search_secondary(bin_path: str, field: str, value: str) -> str:
    matches = search_secondary(bin_path, field, value)
    return format_records(read_header(bin_path), matches)


def _run_modify(bin_path: str, key: str, numeric: bool, data: str) -> str:
    modify_record(bin_path, key, numeric, data)
    return _ok()


def _run_add(bin_path: str, data: str) -> str:
    add_record(bin_path, data)
    return _ok()


_HANDLERS: dict[str, Callable[..., str]] = {
    "create": _run_create,
    "list": _run_list,
    "describe": _run_describe,
    "compact": _run_compact,
    "load": _run_load,
    "delete": _run_delete,
    "search_pk": _run_search_pk,
    "search_secondary": _run_search_secondary,
    "modify": _run_modify,
    "add": _run_add,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Run one table command; print its result, or the error on stderr."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        action, params = parse_arguments(argv)
        output = _HANDLERS[action](**params)
    except TableError as exc:
        print(json.dumps({"result": "ERROR", "error": str(exc)}), file=sys.stderr)
        return 1
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())