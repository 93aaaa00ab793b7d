import json

import pytest

from mmdbimport.models import Metadata, Record


@pytest.fixture
def valid_metadata():
    return Metadata(database_type="Test", description={"en": "d"})


@pytest.fixture
def valid_payload():
    return {
        "metadata": {
            "database_type": "Test",
            "description": {"en": "d"},
        },
        "records": [
            {"network": "192.168.0.0/24", "data": {"city": "X"}},
        ],
    }


@pytest.fixture
def write_json(tmp_path):
    """Write a JSON-serializable payload (or raw text) to a file and return its path."""

    def _write(payload, name="input.json"):
        path = tmp_path / name
        if isinstance(payload, str):
            path.write_text(payload)
        else:
            path.write_text(json.dumps(payload))
        return path

    return _write


@pytest.fixture
def record():
    def _record(network="10.0.0.0/8", data=None):
        return Record(network=network, data={"k": "v"} if data is None else data)

    return _record
