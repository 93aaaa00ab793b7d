# mmdbimport/build/pipeline.py

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from mmdbimport.build.writer import new_builder
from mmdbimport.errors import BuildError, ConversionError
from mmdbimport.models import InputDocument
from mmdbimport.processing.convert import convert
from mmdbimport.processing.ipversion import detect_ip_version
from mmdbimport.processing.validate import validate_document_strict
from mmdbimport.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class BuildSummary:
    output: Path
    ip_version: int
    record_size: int
    inserted: int
    skipped: int


def build_database(
        doc: InputDocument,
        output: Union[str, Path],
        record_size: int,
        now: Optional[int] = None,
) -> BuildSummary:
    """
    Validate `doc`, then build and write the database.

    Validation errors (ValidationError) abort before anything is built.
    Records that fail conversion or insertion are logged and skipped; the
    file is still written with the rest.
    """
    now = int(time.time()) if now is None else now

    validate_document_strict(doc, now=now)

    ip_version = detect_ip_version(doc.records)
    log.info("Detected IP version: %d", ip_version)

    metadata = doc.metadata.with_defaults(now)
    builder = new_builder(metadata, ip_version=ip_version, record_size=record_size)

    inserted = 0
    skipped = 0
    for i, record in enumerate(doc.records):
        try:
            value = convert(record.data)
        except ConversionError as e:
            log.warning("Error processing record %d: converting data: %s", i, e)
            skipped += 1
            continue
        try:
            builder.insert(record.network, value)
        except BuildError as e:
            log.warning("Error processing record %d: %s", i, e)
            skipped += 1
            continue
        inserted += 1

    out_path = Path(output).expanduser().resolve()
    builder.write(out_path)
    log.info("Successfully created MMDB file: %s (%d records, %d skipped)", out_path, inserted, skipped)

    return BuildSummary(
        output=out_path,
        ip_version=ip_version,
        record_size=record_size,
        inserted=inserted,
        skipped=skipped,
    )
