# fixedtable

`fixedtable` keeps a table of fixed-length records in a binary file,
alongside a primary-key index and one secondary index per secondary-key field.
It is driven from the `fixedtable` command, and its modules can be used
directly from Python.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Describing a table

A table starts from a JSON schema:

```json
{
  "fields": [
    {"name": "id", "type": "int", "length": 6},
    {"name": "name", "type": "char", "length": 20},
    {"name": "city", "type": "char", "length": 15},
    {"name": "score", "type": "float", "length": 8}
  ],
  "primary-key": "id",
  "secondary-key": ["city"]
}
```

Field types are `char`, `int` and `float`; `length` is the number of bytes the
field takes in every record. Field names and key names may not be empty or
contain spaces, and both `primary-key` and `secondary-key` must be given.

```
fixedtable -create people.json
```

This creates, next to the schema and with the same base name:

- `people.bin` – the header followed by the records,
- `people.idx` – the primary index (key and byte offset for each record),
- `people-city.sdx` – one secondary index per secondary key (primary key and field value).

and prints a summary such as

```
{"result": "OK", "fields-count": 4, "file": "people.bin", "index": "people.idx", "secondary": ["people-city.sdx"]}
```

## Commands

| What | Command |
|------|---------|
| Show the table structure | `fixedtable -file people.bin -describe` |
| List all live records | `fixedtable -file people.bin -GET` |
| Load records from a CSV file | `fixedtable -file people.bin -load people.csv` |
| Find a record by primary key | `fixedtable -file people.bin -GET -pk -value=42` |
| Find records by a secondary key | `fixedtable -file people.bin -GET -sk=city -value=Lima` |
| Add a record | `fixedtable -file people.bin -POST -data={id:43,name:Ana,city:Lima,score:9.5}` |
| Change a record | `fixedtable -file people.bin -PUT -pk=43 -data={id:43,name:Ana,city:Quito,score:9.5}` |
| Delete a record | `fixedtable -file people.bin -DELETE -pk=43` |
| Reclaim deleted space | `fixedtable -file people.bin -compact` |

A primary key made only of digits (optionally with a decimal part) is looked
up numerically; any other key is looked up as text.

Secondary-key values with spaces may be passed as several words after
`-value=`; they are joined with single spaces. For a secondary-key field of
length 1 only the first character is compared.

The words of a `-data=` argument are joined without spaces, so the braces and
pairs may be split across several arguments.

### Loading CSV

The first line of the CSV file must name the table's fields in order. Blank
lines are ignored. Rows with an empty or duplicate primary key, or an empty or
malformed key field, are skipped and counted; `char` values longer than their
field are cut to fit, and malformed numbers in other fields are stored as `0`.
When the table has freed slots, loaded rows fill them first. The command
reports `{"result": "OK", "records": n}`, or
`{"result": "WARNING", "records": n, "skipped": m}` when rows were skipped.

### Record data

`-data=` takes `{field:value,...}` with the fields in table order.

When adding (`-POST`), every field must be given, the primary key and
secondary keys may not be empty, numeric fields must be whole or decimal
numbers, `char` values may not be longer than their field, and the primary key
must not already be in use.

When changing (`-PUT`), the record is found by `-pk=`; the data must name the
fields in table order and include the primary key, which may be changed but
must not clash with another record's. Numeric fields may not contain spaces,
the primary key must be a number when the `-pk=` value is one, and neither the
primary key nor secondary keys may be empty or longer than their field. The
primary and secondary indexes are updated to match.

### Deleting and compacting

A deleted record is overwritten in place with a `*` marker that links it into
the file's list of free slots, and its index entries are removed. New records
reuse those slots before the file grows. `-compact` rewrites the file without
the deleted slots and rebuilds all indexes, printing
`{"result": "OK", "records-reclaimed": n}`.

## Output

Results are printed to standard output as plain JSON-style text: `-describe`
prints the structure as a JSON object, and `-GET` listings and secondary-key
searches print an array of records with numbers unquoted and text quoted. A
primary-key search prints the single record's fields. Commands that change the
table print `{"result": "OK"}`.

Errors are written to standard error as
`{"result": "ERROR", "error": "..."}` and the command exits with status 1.

## Using it from Python

The modules behind the command are usable directly:

- `fixedtable.schema.create_file` builds a table from a JSON schema and returns a `CreateResult`,
- `fixedtable.header.read_header` and `fixedtable.header.write_header` read and write a table's `Header`,
- `fixedtable.query.describe` and `fixedtable.query.list_records` return a table's structure and records;
  `fixedtable.query.format_describe` and `fixedtable.query.format_records` render them as text,
- `fixedtable.loader.load_csv` loads a CSV file and returns a `LoadResult`,
- `fixedtable.search.search_pk` and `fixedtable.search.search_secondary` look records up,
- `fixedtable.records.add_record` and `fixedtable.records.delete_record` add and remove records,
- `fixedtable.modify.modify_record` changes a record,
- `fixedtable.compact.compact` reclaims deleted space and returns the number of records reclaimed,
- `fixedtable.indexes` reads and writes the `.idx` and `.sdx` index files.

Failures are raised as `fixedtable.header.TableError`.

## Limitations

`fixedtable` works on one table file at a time from a single process: there is
no locking for concurrent writers, no query language beyond exact primary- and
secondary-key lookups, and no server.