# mmdbimport/processing/validate.py

from __future__ import annotations

import ipaddress
import time
from collections.abc import Mapping
from typing import Any, Optional

from mmdbimport.errors import ValidationError
from mmdbimport.models import InputDocument, Metadata, Record, ValidationErrors
from mmdbimport.utils.logging import get_logger

log = get_logger(__name__)


def parse_cidr(network: str):
    """
    Parse a CIDR string ("10.0.0.0/8", "2001:db8::/32").

    Host bits are allowed, the way net.ParseCIDR accepts "10.1.2.3/8".
    Raises ValueError with a readable reason otherwise.
    """
    address, sep, prefix = network.partition("/")
    if not sep or not prefix.isdigit():
        raise ValueError(f"invalid CIDR address: {network}")
    return ipaddress.ip_network(f"{address}/{int(prefix)}", strict=False)


def _now(now: Optional[int]) -> int:
    return int(time.time()) if now is None else now


def _is_map(value: Any) -> bool:
    return isinstance(value, Mapping)


def _is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


# ---------------------------------------------------------------------------
# metadata
# ---------------------------------------------------------------------------

def validate_metadata(m: Metadata, now: Optional[int] = None) -> None:
    """
    Fail-fast metadata check: raise ValidationError for the first violation.

    Order: database_type, description presence, description entries,
    languages (empty/duplicate codes), description languages listed,
    build_epoch not in the future.
    """
    if not m.database_type:
        raise ValidationError("metadata.database_type", "database_type is required")

    if not m.description:
        raise ValidationError("metadata.description", "at least one description is required")

    for lang, desc in m.description.items():
        if lang == "":
            raise ValidationError("metadata.description", "language code cannot be empty")
        if desc == "":
            raise ValidationError(f"metadata.description.{lang}", "description cannot be empty")

    if m.languages:
        seen = set()
        for lang in m.languages:
            if lang == "":
                raise ValidationError("metadata.languages", "language code cannot be empty")
            if lang in seen:
                raise ValidationError("metadata.languages", f"duplicate language code: {lang}")
            seen.add(lang)

        for lang in m.description:
            if lang not in seen:
                raise ValidationError(
                    "metadata.languages",
                    f"description language '{lang}' not found in languages list",
                )

    if m.build_epoch is not None and m.build_epoch > _now(now):
        raise ValidationError("metadata.build_epoch", "build timestamp cannot be in the future")


def validate_metadata_collect(
        m: Metadata,
        sink: ValidationErrors,
        now: Optional[int] = None,
) -> None:
    """Same checks as validate_metadata, but every violation goes to `sink`."""
    if not m.database_type:
        sink.add("metadata.database_type", "database_type is required")

    if not m.description:
        sink.add("metadata.description", "at least one description is required")

    for lang, desc in (m.description or {}).items():
        if lang == "":
            sink.add("metadata.description", "language code cannot be empty")
        if desc == "":
            sink.add(f"metadata.description.{lang}", "description cannot be empty")

    if m.languages:
        seen = set()
        for lang in m.languages:
            if lang == "":
                sink.add("metadata.languages", "language code cannot be empty")
            if lang in seen:
                sink.add("metadata.languages", f"duplicate language code: {lang}")
            seen.add(lang)

        for lang in m.description or {}:
            if lang not in seen:
                sink.add(
                    "metadata.languages",
                    f"description language '{lang}' not found in languages list",
                )

    if m.build_epoch is not None and m.build_epoch > _now(now):
        sink.add("metadata.build_epoch", "build timestamp cannot be in the future")


# ---------------------------------------------------------------------------
# records
# ---------------------------------------------------------------------------

def validate_record(record: Record) -> None:
    """Fail-fast record check. Field paths are relative to the record."""
    if not record.network:
        raise ValidationError("network", "network is required")

    try:
        parse_cidr(record.network)
    except ValueError as e:
        raise ValidationError("network", f"invalid CIDR format: {e}") from e

    if record.data is None:
        raise ValidationError("data", "data is required")

    if (_is_map(record.data) or _is_list(record.data)) and len(record.data) == 0:
        raise ValidationError("data", "data cannot be empty")

    validate_data_structure(record.data, "data")


def validate_record_collect(record: Record, index: int, sink: ValidationErrors) -> None:
    """
    Collect-all record check, rooted at records[index].

    An empty network or missing data stops the record; a malformed CIDR does
    not, so data problems are still reported alongside it.
    """
    prefix = f"records[{index}]"

    if not record.network:
        sink.add(f"{prefix}.network", "network is required")
        return

    try:
        parse_cidr(record.network)
    except ValueError as e:
        sink.add(f"{prefix}.network", f"invalid CIDR format: {e}")

    if record.data is None:
        sink.add(f"{prefix}.data", "data is required")
        return

    if (_is_map(record.data) or _is_list(record.data)) and len(record.data) == 0:
        sink.add(f"{prefix}.data", "data cannot be empty")
        return

    validate_data_structure_collect(record.data, f"{prefix}.data", sink)


# ---------------------------------------------------------------------------
# nested data
# ---------------------------------------------------------------------------

def validate_data_structure(value: Any, path: str) -> None:
    """Walk nested maps/lists; raise on the first nil, empty container or empty key."""
    if value is None:
        raise ValidationError(path, "value cannot be nil")

    if _is_map(value):
        if len(value) == 0:
            raise ValidationError(path, "map cannot be empty")
        for key, item in value.items():
            if key == "":
                raise ValidationError(path, "map key cannot be empty")
            validate_data_structure(item, f"{path}.{key}")

    elif _is_list(value):
        if len(value) == 0:
            raise ValidationError(path, "array cannot be empty")
        for i, item in enumerate(value):
            validate_data_structure(item, f"{path}[{i}]")


def validate_data_structure_collect(value: Any, path: str, sink: ValidationErrors) -> None:
    if value is None:
        sink.add(path, "value cannot be nil")
        return

    if _is_map(value):
        if len(value) == 0:
            sink.add(path, "map cannot be empty")
            return
        for key, item in value.items():
            if key == "":
                sink.add(path, "map key cannot be empty")
            validate_data_structure_collect(item, f"{path}.{key}", sink)

    elif _is_list(value):
        if len(value) == 0:
            sink.add(path, "array cannot be empty")
            return
        for i, item in enumerate(value):
            validate_data_structure_collect(item, f"{path}[{i}]", sink)


# ---------------------------------------------------------------------------
# whole documents
# ---------------------------------------------------------------------------

def validate_document(doc: InputDocument, now: Optional[int] = None) -> ValidationErrors:
    """Collect-all over metadata and then every record, in input order."""
    sink = ValidationErrors()
    validate_metadata_collect(doc.metadata, sink, now=now)
    for i, record in enumerate(doc.records):
        validate_record_collect(record, i, sink)
    log.debug("Validated %d records, %d errors", len(doc.records), len(sink))
    return sink


def validate_document_strict(doc: InputDocument, now: Optional[int] = None) -> None:
    """
    Fail-fast over a whole document, as the build path does it.

    Record errors are re-raised with their index so the caller can report
    "Invalid record at index N".
    """
    validate_metadata(doc.metadata, now=now)
    for i, record in enumerate(doc.records):
        try:
            validate_record(record)
        except ValidationError as e:
            raise ValidationError(f"records[{i}].{e.field}", e.message) from e
