"""
Structural validation: fail-fast and collect-all modes for metadata,
records and nested data.
"""

import pytest

from mmdbimport.errors import ValidationError
from mmdbimport.models import InputDocument, Metadata, Record, ValidationErrors
from mmdbimport.processing.validate import (
    parse_cidr,
    validate_data_structure,
    validate_data_structure_collect,
    validate_document,
    validate_document_strict,
    validate_metadata,
    validate_metadata_collect,
    validate_record,
    validate_record_collect,
)

NOW = 1_700_000_000


def collect_metadata(m):
    sink = ValidationErrors()
    validate_metadata_collect(m, sink, now=NOW)
    return [(e.field, e.message) for e in sink]


def collect_record(r, index=0):
    sink = ValidationErrors()
    validate_record_collect(r, index, sink)
    return [(e.field, e.message) for e in sink]


class TestMetadata:

    def test_valid_metadata(self, valid_metadata):
        validate_metadata(valid_metadata, now=NOW)
        assert collect_metadata(valid_metadata) == []

    def test_empty_database_type_both_modes(self):
        m = Metadata(database_type="", description={"en": "d"})
        with pytest.raises(ValidationError) as exc:
            validate_metadata(m, now=NOW)
        assert exc.value.field == "metadata.database_type"
        assert collect_metadata(m) == [("metadata.database_type", "database_type is required")]

    def test_missing_description(self):
        m = Metadata(database_type="Test")
        with pytest.raises(ValidationError) as exc:
            validate_metadata(m, now=NOW)
        assert exc.value.field == "metadata.description"
        assert exc.value.message == "at least one description is required"

    def test_empty_language_code_and_text(self):
        m = Metadata(database_type="Test", description={"": "x", "de": ""})
        assert collect_metadata(m) == [
            ("metadata.description", "language code cannot be empty"),
            ("metadata.description.de", "description cannot be empty"),
        ]

    def test_description_language_not_in_languages(self):
        m = Metadata(database_type="Test", description={"en": "d", "fr": "f"}, languages=["en"])
        with pytest.raises(ValidationError) as exc:
            validate_metadata(m, now=NOW)
        assert exc.value.field == "metadata.languages"
        assert "'fr'" in exc.value.message
        assert collect_metadata(m) == [
            ("metadata.languages", "description language 'fr' not found in languages list"),
        ]

    def test_languages_may_be_superset_of_description(self):
        m = Metadata(database_type="Test", description={"en": "d"}, languages=["en", "de"])
        validate_metadata(m, now=NOW)

    def test_duplicate_and_empty_languages(self):
        m = Metadata(database_type="Test", description={"en": "d"}, languages=["en", "", "en"])
        with pytest.raises(ValidationError) as exc:
            validate_metadata(m, now=NOW)
        assert exc.value.message == "language code cannot be empty"
        assert collect_metadata(m) == [
            ("metadata.languages", "language code cannot be empty"),
            ("metadata.languages", "duplicate language code: en"),
        ]

    def test_future_build_epoch(self):
        m = Metadata(database_type="Test", description={"en": "d"}, build_epoch=NOW + 1)
        with pytest.raises(ValidationError) as exc:
            validate_metadata(m, now=NOW)
        assert exc.value.field == "metadata.build_epoch"
        validate_metadata(Metadata(database_type="T", description={"en": "d"}, build_epoch=NOW), now=NOW)

    def test_collect_runs_every_check(self):
        m = Metadata(database_type="", description={}, languages=["x", "x"], build_epoch=NOW + 10)
        fields = [f for f, _ in collect_metadata(m)]
        assert fields == [
            "metadata.database_type",
            "metadata.description",
            "metadata.languages",
            "metadata.build_epoch",
        ]


class TestRecord:

    def test_valid_record(self, record):
        validate_record(record())
        assert collect_record(record()) == []

    def test_missing_network_stops(self):
        r = Record(network="", data=None)
        with pytest.raises(ValidationError) as exc:
            validate_record(r)
        assert (exc.value.field, exc.value.message) == ("network", "network is required")
        assert collect_record(r, 3) == [("records[3].network", "network is required")]

    def test_bad_cidr_continues_into_data(self):
        r = Record(network="10.0.0.0/33", data={"a": None})
        with pytest.raises(ValidationError) as exc:
            validate_record(r)
        assert exc.value.field == "network"
        assert exc.value.message.startswith("invalid CIDR format")
        errors = collect_record(r)
        assert [f for f, _ in errors] == ["records[0].network", "records[0].data.a"]

    def test_missing_data_stops(self):
        r = Record(network="bogus", data=None)
        assert collect_record(r) == [
            ("records[0].network", "invalid CIDR format: invalid CIDR address: bogus"),
            ("records[0].data", "data is required"),
        ]

    def test_empty_data_reports_once(self):
        r = Record(network="10.0.0.0/8", data={})
        with pytest.raises(ValidationError) as exc:
            validate_record(r)
        assert exc.value.message == "data cannot be empty"
        assert collect_record(r) == [("records[0].data", "data cannot be empty")]

    @pytest.mark.parametrize("network", [
        "10.0.0.0/8",
        "10.1.2.3/8",
        "0.0.0.0/0",
        "2001:db8::/32",
        "::ffff:10.0.0.0/104",
    ])
    def test_accepted_networks(self, network):
        parse_cidr(network)

    @pytest.mark.parametrize("network", [
        "10.0.0.0",
        "10.0.0.0/",
        "10.0.0.0/33",
        "10.0.0.0/255.0.0.0",
        "2001:db8::/129",
        "not-a-network/8",
    ])
    def test_rejected_networks(self, network):
        with pytest.raises(ValueError):
            parse_cidr(network)


class TestDataStructure:

    @pytest.mark.parametrize("data, path", [
        ({"a": None}, "data.a"),
        ({"a": {"b": {"c": None}}}, "data.a.b.c"),
        ({"a": [1, None]}, "data.a[1]"),
        ({"a": [{"b": [None]}]}, "data.a[0].b[0]"),
    ])
    def test_null_at_any_depth(self, data, path):
        with pytest.raises(ValidationError) as exc:
            validate_data_structure(data, "data")
        assert exc.value.field == path
        assert exc.value.message == "value cannot be nil"

    @pytest.mark.parametrize("data, path, message", [
        ({"a": {}}, "data.a", "map cannot be empty"),
        ({"a": []}, "data.a", "array cannot be empty"),
        ({"a": [{"b": {}}]}, "data.a[0].b", "map cannot be empty"),
        ({"a": {"": 1}}, "data.a", "map key cannot be empty"),
    ])
    def test_empty_containers_and_keys(self, data, path, message):
        with pytest.raises(ValidationError) as exc:
            validate_data_structure(data, "data")
        assert (exc.value.field, exc.value.message) == (path, message)

    def test_finite_nesting_of_scalars_is_valid(self):
        data = {
            "city": "X",
            "geo": {"lat": 1.5, "lon": -2, "exact": False},
            "tags": ["a", ["b", {"c": b"\x00"}]],
        }
        validate_data_structure(data, "data")
        sink = ValidationErrors()
        validate_data_structure_collect(data, "data", sink)
        assert not sink.has_errors()

    def test_collect_continues_past_failures(self):
        data = {"": None, "b": [], "c": {"d": None}, "e": "ok"}
        sink = ValidationErrors()
        validate_data_structure_collect(data, "data", sink)
        assert [(e.field, e.message) for e in sink] == [
            ("data", "map key cannot be empty"),
            ("data.", "value cannot be nil"),
            ("data.b", "array cannot be empty"),
            ("data.c.d", "value cannot be nil"),
        ]


class TestDocument:

    def _doc(self):
        return InputDocument(
            metadata=Metadata(database_type="", description={"en": "d"}),
            records=[
                Record(network="10.0.0.0/8", data={"a": {}}),
                Record(network="", data=None),
                Record(network="10.0.0.0/8", data={"ok": 1}),
            ],
        )

    def test_collect_is_idempotent(self):
        doc = self._doc()
        first = [(e.field, e.message) for e in validate_document(doc, now=NOW)]
        second = [(e.field, e.message) for e in validate_document(doc, now=NOW)]
        assert first == second
        assert first == [
            ("metadata.database_type", "database_type is required"),
            ("records[0].data.a", "map cannot be empty"),
            ("records[1].network", "network is required"),
        ]

    def test_strict_reports_record_index(self):
        doc = self._doc()
        doc.metadata.database_type = "Test"
        with pytest.raises(ValidationError) as exc:
            validate_document_strict(doc, now=NOW)
        assert exc.value.field == "records[0].data.a"
        assert str(exc.value) == "validation error for records[0].data.a: map cannot be empty"
