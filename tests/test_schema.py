# fieldler/tests/test_schema.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Dict

import pytest

from fieldler.generator.creator import create_field_data_and_comparator
from fieldler.generator.data import ATTRIBUTE, ITEM, METHOD, FieldData
from fieldler.schemaloader import SchemaLoader
from utility import examples_dir, write_yaml


# Minimal valid schema, tweaked per test.
def _schema(**overrides: Any) -> Dict[str, Any]:
    schema: Dict[str, Any] = {
        "schema_version": "0.1",
        "types": {
            "Person": {
                "fields": {
                    "age": {},
                    "last_name": "lastName",
                    "alive": {"access": "is_alive", "kind": "method", "required": True},
                }
            }
        },
    }
    schema.update(overrides)
    return schema


# The example schema loads and declares the Person and Address types.
def test_example_schema_loads():
    schema = SchemaLoader(str(examples_dir() / "person.yml")).load()
    assert set(schema) == {"Person", "Address"}
    person = schema["Person"]
    assert person["canonical_name"] == "examples.people.Person"
    assert list(person["fields"]) == ["age", "name", "alive", "last_name", "requires_oxygen"]
    assert person["fields"]["age"]["required"] is True
    assert person["fields"]["last_name"] == {"access": "lastName", "kind": ITEM, "required": False}


# Field shorthands are normalized to {access, kind, required}.
def test_field_definitions_are_normalized(tmp_path: Path):
    path = write_yaml(tmp_path, "types.yml", _schema(defaults={"kind": "attribute", "module": "app.models"}))
    fields = SchemaLoader(str(path)).load()["Person"]["fields"]

    assert fields["age"] == {"access": "age", "kind": ATTRIBUTE, "required": False}
    assert fields["last_name"] == {"access": "lastName", "kind": ATTRIBUTE, "required": False}
    assert fields["alive"] == {"access": "is_alive", "kind": METHOD, "required": True}


# class_data() turns declared types into ClassData usable by the generator.
def test_class_data_drives_the_comparator(tmp_path: Path):
    path = write_yaml(tmp_path, "types.yml", _schema())
    class_data = SchemaLoader(str(path)).class_data()["Person"]

    assert class_data.class_name == "Person"
    assert class_data.fields_data[1] == FieldData("last_name", "lastName", ITEM)

    field_type, comparator = create_field_data_and_comparator(class_data)
    comparison = comparator.compare({"age": 3, "lastName": "A"}, {"age": 3, "lastName": "B"})
    assert comparison.is_equal(field_type.AGE)
    assert comparison.is_different(field_type.LAST_NAME)


# Fatal schema problems raise ValueError.
@pytest.mark.parametrize(
    "overrides",
    [
        {"schema_version": "9.9"},
        {"schema_version": None},
        {"types": {}},
        {"types": {"Person": "not-a-map"}},
        {"types": {"Person": {"fields": {}}}},
        {"types": {"Person": {"fields": {"age": 12}}}},
        {"types": {"Person": {"fields": {"age": {"kind": "column"}}}}},
        {"types": {"Person": {"fields": {"age": {"access": ""}}}}},
        {"defaults": {"kind": "column"}},
    ],
    ids=lambda o: ",".join(o),
)
def test_invalid_schema_raises(tmp_path: Path, overrides: Dict[str, Any]):
    path = write_yaml(tmp_path, "types.yml", _schema(**overrides))
    with pytest.raises(ValueError):
        SchemaLoader(str(path)).load()


# Unknown field keys are fatal in strict mode and only warned about otherwise.
def test_unknown_field_keys_strict_vs_lenient(tmp_path: Path, caplog):
    schema = _schema(types={"Person": {"fields": {"age": {"acess": "age"}}}})
    path = write_yaml(tmp_path, "types.yml", schema)

    with pytest.raises(ValueError):
        SchemaLoader(str(path)).load()

    with caplog.at_level(logging.WARNING, logger="fieldler"):
        loaded = SchemaLoader(str(path), strict=False).load()
    assert "unknown keys" in caplog.text
    assert loaded["Person"]["fields"]["age"]["access"] == "age"
