import json

import pytest

from fixedtable.header import TableError, header_end, read_header
from fixedtable.schema import CreateResult, create_file


def _schema(**overrides):
    data = {
        "fields": [
            {"name": "id", "type": "int", "length": 5},
            {"name": "name", "type": "char", "length": 20},
            {"name": "score", "type": "float", "length": 6},
        ],
        "primary-key": "id",
        "secondary-key": ["name", "score"],
    }
    data.update(overrides)
    return data


def _write(tmp_path, data, name="people.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return path


def test_creates_all_files(tmp_path):
    result = create_file(_write(tmp_path, _schema()))
    assert result == CreateResult(
        fields_count=3,
        file="people.bin",
        index="people.idx",
        secondary=["people-name.sdx", "people-score.sdx"],
    )
    for name in ["people.bin", "people.idx", "people-name.sdx", "people-score.sdx"]:
        assert (tmp_path / name).exists()
    assert (tmp_path / "people.idx").read_bytes() == b""


def test_header_matches_schema(tmp_path):
    create_file(_write(tmp_path, _schema()))
    header = read_header(tmp_path / "people.bin")
    assert header.field_names == ["id", "name", "score"]
    assert header.field_types == ["int", "char", "float"]
    assert header.field_sizes == [5, 20, 6]
    assert header.secondary_keys == ["name", "score"]
    assert header.primary_key == "id"
    assert header.avail_list == -1
    assert header.record_count == 0
    assert header_end(tmp_path / "people.bin") == (tmp_path / "people.bin").stat().st_size


def test_to_json(tmp_path):
    result = create_file(_write(tmp_path, _schema()))
    assert json.loads(result.to_json()) == {
        "result": "OK",
        "fields-count": 3,
        "file": "people.bin",
        "index": "people.idx",
        "secondary": ["people-name.sdx", "people-score.sdx"],
    }


def test_missing_file(tmp_path):
    with pytest.raises(TableError, match="json file not found"):
        create_file(tmp_path / "nothing.json")


def test_bad_json(tmp_path):
    with pytest.raises(TableError, match="Format not recognized"):
        create_file(_write(tmp_path, "{not json"))


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"fields": []}, "fields has space"),
        ({"primary-key": None}, "primary index field does not exist"),
        ({"secondary-key": []}, "secondary index field does not exist"),
        ({"primary-key": "my id"}, "primary key contains space"),
        ({"primary-key": ""}, "primary key contains space"),
        ({"secondary-key": ["na me"]}, "secondary key contains space"),
    ],
)
def test_invalid_keys(tmp_path, overrides, message):
    with pytest.raises(TableError, match=message):
        create_file(_write(tmp_path, _schema(**overrides)))


@pytest.mark.parametrize(
    "field, message",
    [
        ({"type": "int", "length": 5}, "name is empty"),
        ({"name": "my id", "type": "int", "length": 5}, "field contains space"),
        ({"name": "", "type": "int", "length": 5}, "field contains space"),
        ({"name": "id", "length": 5}, "type is empty"),
        ({"name": "id", "type": "double", "length": 5}, "type is not valid"),
        ({"name": "id", "type": "int"}, "length is empty"),
        ({"name": "id", "type": "int", "length": "5"}, "length is not valid"),
    ],
)
def test_invalid_fields(tmp_path, field, message):
    with pytest.raises(TableError, match=message):
        create_file(_write(tmp_path, _schema(fields=[field])))


def test_no_binary_on_failure(tmp_path):
    with pytest.raises(TableError):
        create_file(_write(tmp_path, _schema(fields=[{"name": "id", "type": "bad", "length": 1}])))
    assert not (tmp_path / "people.bin").exists()