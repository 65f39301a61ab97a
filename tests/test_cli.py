import json

import pytest

from fixedtable.cli import main, parse_arguments
from fixedtable.header import TableError


@pytest.fixture
def table(tmp_path, capsys):
    schema = {
        "fields": [
            {"name": "id", "type": "int", "length": 5},
            {"name": "name", "type": "char", "length": 10},
            {"name": "city", "type": "char", "length": 10},
        ],
        "primary-key": "id",
        "secondary-key": ["city"],
    }
    json_path = tmp_path / "people.json"
    json_path.write_text(json.dumps(schema), encoding="utf-8")
    assert main(["-create", str(json_path)]) == 0
    capsys.readouterr()
    return tmp_path / "people.bin"


def _post(bin_path, data):
    return main(["-file", str(bin_path), "-POST", f"-data={{{data}}}"])


def test_parse_create():
    assert parse_arguments(["-create", "s.json"]) == ("create", {"json_path": "s.json"})


def test_parse_create_rejects_other_extension():
    with pytest.raises(TableError):
        parse_arguments(["-create", "s.txt"])


def test_parse_simple_actions():
    assert parse_arguments(["-file", "t.bin", "-GET"]) == ("list", {"bin_path": "t.bin"})
    assert parse_arguments(["-file", "t.bin", "-describe"])[0] == "describe"
    assert parse_arguments(["-file", "t.bin", "-compact"])[0] == "compact"


def test_parse_requires_bin_file():
    with pytest.raises(TableError):
        parse_arguments(["-file", "t.dat", "-GET"])


def test_parse_delete_detects_numeric_key():
    action, params = parse_arguments(["-file", "t.bin", "-DELETE", "-pk=12"])
    assert action == "delete"
    assert params["key"] == "12"
    assert params["numeric"] is True
    _, params = parse_arguments(["-file", "t.bin", "-DELETE", "-pk=abc"])
    assert params["numeric"] is False


def test_parse_search_pk():
    action, params = parse_arguments(["-file", "t.bin", "-GET", "-pk", "-value=7"])
    assert action == "search_pk"
    assert params == {"bin_path": "t.bin", "key": "7", "numeric": True}


def test_parse_secondary_value_joins_words():
    action, params = parse_arguments(["-file", "t.bin", "-GET", "-sk=city", "-value=New", "York"])
    assert action == "search_secondary"
    assert params["field"] == "city"
    assert params["value"] == "New York"


def test_parse_put_concatenates_data():
    action, params = parse_arguments(["-file", "t.bin", "-PUT", "-pk=1", "-data={id:1,", "name:A}"])
    assert action == "modify"
    assert params["data"] == "id:1,name:A"
    assert params["numeric"] is True


def test_parse_post_requires_braces():
    with pytest.raises(TableError):
        parse_arguments(["-file", "t.bin", "-POST", "-data=id:1"])
    action, params = parse_arguments(["-file", "t.bin", "-POST", "-data={id:1}"])
    assert (action, params["data"]) == ("add", "id:1")


def test_parse_load_requires_csv():
    with pytest.raises(TableError):
        parse_arguments(["-file", "t.bin", "-load", "rows.txt"])
    assert parse_arguments(["-file", "t.bin", "-load", "rows.csv"])[0] == "load"


def test_main_without_arguments_reports_error(capsys):
    assert main([]) == 1
    error = json.loads(capsys.readouterr().err)
    assert error["result"] == "ERROR"


def test_create_reports_files(tmp_path, capsys):
    json_path = tmp_path / "items.json"
    json_path.write_text(
        json.dumps(
            {
                "fields": [{"name": "code", "type": "int", "length": 4}],
                "primary-key": "code",
                "secondary-key": ["code"],
            }
        ),
        encoding="utf-8",
    )
    assert main(["-create", str(json_path)]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["file"] == "items.bin"
    assert result["index"] == "items.idx"
    assert (tmp_path / "items.bin").exists()


def test_post_then_list(table, capsys):
    assert _post(table, "id:1,name:Ana,city:Paris") == 0
    assert json.loads(capsys.readouterr().out)["result"] == "OK"
    assert main(["-file", str(table), "-GET"]) == 0
    out = capsys.readouterr().out
    assert '"id": 1' in out
    assert '"name": "Ana"' in out


def test_search_by_primary_key(table, capsys):
    _post(table, "id:1,name:Ana,city:Paris")
    _post(table, "id:2,name:Luis,city:Lima")
    capsys.readouterr()
    assert main(["-file", str(table), "-GET", "-pk", "-value=2"]) == 0
    out = capsys.readouterr().out
    assert "Luis" in out
    assert "Ana" not in out


def test_search_missing_key_fails(table, capsys):
    _post(table, "id:1,name:Ana,city:Paris")
    capsys.readouterr()
    assert main(["-file", str(table), "-GET", "-pk", "-value=9"]) == 1
    assert json.loads(capsys.readouterr().err)["result"] == "ERROR"


def test_search_by_secondary_key(table, capsys):
    _post(table, "id:1,name:Ana,city:Paris")
    _post(table, "id:2,name:Luis,city:Lima")
    capsys.readouterr()
    assert main(["-file", str(table), "-GET", "-sk=city", "-value=Paris"]) == 0
    out = capsys.readouterr().out
    assert "Ana" in out
    assert "Luis" not in out


def test_delete_then_describe_and_compact(table, capsys):
    _post(table, "id:1,name:Ana,city:Paris")
    capsys.readouterr()
    assert main(["-file", str(table), "-DELETE", "-pk=1"]) == 0
    capsys.readouterr()
    assert main(["-file", str(table), "-describe"]) == 0
    assert '"records": 0' in capsys.readouterr().out
    assert main(["-file", str(table), "-compact"]) == 0
    assert json.loads(capsys.readouterr().out)["records-reclaimed"] == 1


def test_put_modifies_record(table, capsys):
    _post(table, "id:1,name:Ana,city:Paris")
    capsys.readouterr()
    assert main(["-file", str(table), "-PUT", "-pk=1", "-data={id:1,name:Bea,city:Rome}"]) == 0
    capsys.readouterr()
    main(["-file", str(table), "-GET", "-pk", "-value=1"])
    out = capsys.readouterr().out
    assert "Bea" in out
    assert "Ana" not in out


def test_load_csv(table, tmp_path, capsys):
    csv_path = tmp_path / "rows.csv"
    csv_path.write_text("id,name,city\n1,Ana,Paris\n2,Luis,Lima\n", encoding="utf-8")
    assert main(["-file", str(table), "-load", str(csv_path)]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["records"] == 2
    main(["-file", str(table), "-GET"])
    out = capsys.readouterr().out
    assert "Ana" in out and "Luis" in out