import json

import pytest

from mmdbimport.datasources.json_input import parse_input, read_input
from mmdbimport.errors import InputParseError


def test_envelope(write_json, valid_payload):
    valid_payload["metadata"]["languages"] = ["en"]
    valid_payload["metadata"]["build_epoch"] = 1_600_000_000
    doc = read_input(write_json(valid_payload))

    assert not doc.legacy
    assert doc.metadata.database_type == "Test"
    assert doc.metadata.description == {"en": "d"}
    assert doc.metadata.languages == ["en"]
    assert doc.metadata.build_epoch == 1_600_000_000
    assert len(doc.records) == 1
    assert doc.records[0].network == "192.168.0.0/24"
    assert doc.records[0].data == {"city": "X"}


def test_legacy_array(write_json):
    doc = read_input(write_json([{"network": "10.0.0.0/8", "data": {"a": 1}}]))

    assert doc.legacy
    assert doc.metadata.database_type == ""
    assert doc.metadata.description == {}
    assert doc.records[0].data == {"a": 1}


def test_missing_fields_default_for_validation():
    doc = parse_input(json.dumps({"records": [{}]}))
    assert doc.records[0].network == ""
    assert doc.records[0].data is None
    assert doc.metadata.build_epoch is None


def test_unknown_keys_ignored():
    doc = parse_input(json.dumps({"metadata": {"database_type": "T", "extra": 1}, "records": [], "x": 2}))
    assert doc.metadata.database_type == "T"
    assert doc.records == []


def test_null_values_inside_data_survive_parsing():
    doc = parse_input('[{"network": "10.0.0.0/8", "data": {"a": null}}]')
    assert doc.records[0].data == {"a": None}


@pytest.mark.parametrize("text", [
    "{not json",
    '"just a string"',
    '{"metadata": {"database_type": 5}}',
    '{"metadata": {"build_epoch": "soon"}}',
    '{"metadata": {"build_epoch": true}}',
    '[{"network": 10, "data": {}}]',
    '[{"network": "10.0.0.0/8", "data": "flat"}]',
    "[1, 2]",
])
def test_unparseable_shapes(text):
    with pytest.raises(InputParseError) as exc:
        parse_input(text)
    assert str(exc.value).startswith("parsing JSON")


def test_envelope_failure_reports_legacy_error():
    with pytest.raises(InputParseError) as exc:
        parse_input('{"records": "nope"}')
    assert "document: expected list, got dict" in str(exc.value)


def test_missing_file(tmp_path):
    with pytest.raises(InputParseError) as exc:
        read_input(tmp_path / "missing.json")
    assert str(exc.value).startswith("reading file")


def test_null_metadata_strings_read_as_empty():
    doc = parse_input(
        '{"metadata": {"database_type": "T", "description": {"en": null}, "languages": ["en", null]},'
        ' "records": []}'
    )
    assert not doc.legacy
    assert doc.metadata.description == {"en": ""}
    assert doc.metadata.languages == ["en", ""]
