# mmdbimport/report/check.py

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from mmdbimport.datasources.json_input import read_input
from mmdbimport.errors import InputParseError
from mmdbimport.models import InputDocument, ValidationErrors
from mmdbimport.processing.ipversion import detect_ip_version
from mmdbimport.processing.validate import (
    validate_metadata_collect,
    validate_record_collect,
)
from mmdbimport.report.console import Reporter
from mmdbimport.utils.logging import get_logger
from mmdbimport.utils.timefmt import format_epoch

log = get_logger(__name__)


def _print_summary(doc: InputDocument, reporter: Reporter) -> None:
    r = reporter
    ip_version = detect_ip_version(doc.records)
    ip_version_str = str(ip_version)
    if ip_version == 6:
        ip_version_str += " (supports both IPv4 and IPv6)"

    r.echo()
    r.echo(r.info("Database Information:"))
    r.echo(f"  IP Version: {r.success(ip_version_str)}")
    r.echo(f"  Total Records: {r.success(len(doc.records))}")

    m = doc.metadata
    r.echo()
    r.echo(r.info("Metadata:"))
    r.echo(f"  Database Type: {r.success(m.database_type)}")
    r.echo("  Description:")
    for lang, desc in m.description.items():
        r.echo(f"    {r.success(lang)}: {desc}")
    if m.languages:
        r.echo(f"  Languages: {r.success(', '.join(m.languages))}")
    if m.build_epoch is not None:
        r.echo(f"  Build Timestamp: {r.success(format_epoch(m.build_epoch))}")


def check_document(
        doc: InputDocument,
        reporter: Reporter,
        now: Optional[int] = None,
) -> ValidationErrors:
    """
    Collect-all validation with a human-readable report.

    The database summary is only printed when the metadata is valid; record
    errors are listed together at the end.
    """
    sink = ValidationErrors()
    validate_metadata_collect(doc.metadata, sink, now=now)

    if not sink.has_errors():
        _print_summary(doc, reporter)

    for i, record in enumerate(doc.records):
        validate_record_collect(record, i, sink)

    if sink.has_errors():
        r = reporter
        r.echo()
        r.echo(f"{r.error('Validation failed')}: Found {len(sink)} validation errors:")
        for err in sink:
            r.echo(f"  {r.warn(err.field)}: {err.message}")

    return sink


def check_file(
        path: Union[str, Path],
        reporter: Reporter,
        now: Optional[int] = None,
) -> bool:
    """Validate a JSON input file without building. True when it is valid."""
    try:
        doc = read_input(path)
    except InputParseError as e:
        log.error("Error reading JSON file: %s", e)
        reporter.fail(f"Error: Error reading JSON file: {e}")
        return False

    reporter.echo(f"{reporter.info('Input file:')} {path}")
    errors = check_document(doc, reporter, now=now)
    return not errors.has_errors()
