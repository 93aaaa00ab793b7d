# mmdbimport/datasources/json_input.py

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

from mmdbimport.errors import InputParseError
from mmdbimport.models import InputDocument, Metadata, Record
from mmdbimport.utils.logging import get_logger

log = get_logger(__name__)

PathLike = Union[str, Path]


class _ShapeError(ValueError):
    """JSON parsed, but a field has the wrong type for the expected shape."""


def _expect(value: Any, kind, what: str) -> Any:
    # bool is an int subclass; never accept it where a number is expected
    if isinstance(value, bool) and kind is not bool:
        raise _ShapeError(f"{what}: expected {kind.__name__}, got bool")
    if not isinstance(value, kind):
        raise _ShapeError(f"{what}: expected {kind.__name__}, got {type(value).__name__}")
    return value


def _parse_metadata(raw: Any) -> Metadata:
    if raw is None:
        return Metadata()
    _expect(raw, dict, "metadata")

    database_type = raw.get("database_type")
    database_type = "" if database_type is None else _expect(database_type, str, "metadata.database_type")

    description: dict[str, str] = {}
    raw_description = raw.get("description")
    if raw_description is not None:
        _expect(raw_description, dict, "metadata.description")
        for lang, text in raw_description.items():
            description[lang] = "" if text is None else _expect(text, str, f"metadata.description.{lang}")

    languages: list[str] = []
    raw_languages = raw.get("languages")
    if raw_languages is not None:
        _expect(raw_languages, list, "metadata.languages")
        for i, lang in enumerate(raw_languages):
            languages.append("" if lang is None else _expect(lang, str, f"metadata.languages[{i}]"))

    build_epoch = raw.get("build_epoch")
    if build_epoch is not None:
        build_epoch = _expect(build_epoch, int, "metadata.build_epoch")

    return Metadata(
        database_type=database_type,
        description=description,
        languages=languages,
        build_epoch=build_epoch,
    )


def _parse_record(raw: Any, index: int) -> Record:
    _expect(raw, dict, f"records[{index}]")

    network = raw.get("network")
    network = "" if network is None else _expect(network, str, f"records[{index}].network")

    data = raw.get("data")
    if data is not None:
        _expect(data, dict, f"records[{index}].data")

    return Record(network=network, data=data)


def _parse_records(raw: Any, what: str = "records") -> list[Record]:
    if raw is None:
        return []
    _expect(raw, list, what)
    return [_parse_record(item, i) for i, item in enumerate(raw)]


def _parse_envelope(payload: Any) -> InputDocument:
    _expect(payload, dict, "document")
    return InputDocument(
        metadata=_parse_metadata(payload.get("metadata")),
        records=_parse_records(payload.get("records")),
    )


def _parse_legacy(payload: Any) -> InputDocument:
    return InputDocument(records=_parse_records(payload, "document"), legacy=True)


def parse_input(text: Union[str, bytes]) -> InputDocument:
    """
    Parse an input document.

    The {"metadata": ..., "records": [...]} envelope is tried first, then a
    bare array of records (legacy shape, empty metadata). When both fail the
    legacy-shape error is the one reported.
    """
    try:
        payload = json.loads(text)
    except ValueError as e:
        raise InputParseError(f"parsing JSON: {e}") from e

    try:
        return _parse_envelope(payload)
    except _ShapeError as envelope_err:
        log.debug("Not an envelope document (%s); trying legacy record list", envelope_err)

    try:
        doc = _parse_legacy(payload)
    except _ShapeError as e:
        raise InputParseError(f"parsing JSON: {e}") from e

    log.info("Read legacy record list (%d records, no metadata)", len(doc.records))
    return doc


def read_input(path: PathLike) -> InputDocument:
    path = Path(path).expanduser()
    log.info("Input: %s", path)
    try:
        text = path.read_bytes()
    except OSError as e:
        raise InputParseError(f"reading file: {e}") from e

    doc = parse_input(text)
    log.info("Loaded %d records from %s", len(doc.records), path)
    return doc
