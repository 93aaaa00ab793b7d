# mmdbimport/report/verify.py

from __future__ import annotations

import base64
import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Union

import maxminddb
import pandas as pd

from mmdbimport.errors import VerifyError
from mmdbimport.report.console import Reporter
from mmdbimport.utils.logging import get_logger
from mmdbimport.utils.timefmt import epoch_age, format_epoch

log = get_logger(__name__)

PathLike = Union[str, Path]

NETWORK_COLUMNS = ["network", "version", "prefix_len"]


@dataclass
class NetworkEntry:
    position: int
    network: str
    data: Any


@dataclass
class VerifyReport:
    filepath: str
    binary_format: str
    ip_version: int
    record_size: int
    node_count: int
    database_type: str
    description: dict[str, str]
    languages: List[str]
    build_time: str
    build_time_age: int
    total_networks: int
    ipv4_networks: int = 0
    ipv6_networks: int = 0
    networks: Optional[List[NetworkEntry]] = field(default=None)


def networks_to_dataframe(networks: List) -> pd.DataFrame:
    """One row per stored prefix: its text form, IP family and prefix length."""
    if not networks:
        return pd.DataFrame(columns=NETWORK_COLUMNS)
    return pd.DataFrame(
        [(str(n), n.version, n.prefixlen) for n in networks],
        columns=NETWORK_COLUMNS,
    )


def verify_database(path: PathLike, verbose: bool = False, now: Optional[float] = None) -> VerifyReport:
    """
    Open an MMDB file, decode every stored network and summarize it.

    Each record is decoded while counting, so a corrupt data section fails
    here rather than at lookup time.
    """
    path = Path(path).expanduser().resolve()
    log.info("Verifying %s", path)

    try:
        reader = maxminddb.open_database(str(path))
    except (OSError, ValueError, maxminddb.InvalidDatabaseError) as e:
        raise VerifyError(f"opening MMDB file: {e}") from e

    with reader:
        meta = reader.metadata()
        networks = []
        entries: List[NetworkEntry] = []
        try:
            for position, (network, record) in enumerate(reader):
                networks.append(network)
                if verbose:
                    entries.append(NetworkEntry(position=position, network=str(network), data=record))
        except (maxminddb.InvalidDatabaseError, ValueError) as e:
            raise VerifyError(f"decoding networks: {e}") from e

    df = networks_to_dataframe(networks)
    by_version = df["version"].value_counts()
    log.debug("Decoded %d networks from %s", len(df), path)

    return VerifyReport(
        filepath=str(path),
        binary_format=f"{meta.binary_format_major_version}.{meta.binary_format_minor_version}",
        ip_version=int(meta.ip_version),
        record_size=int(meta.record_size),
        node_count=int(meta.node_count),
        database_type=meta.database_type,
        description=dict(meta.description),
        languages=list(meta.languages),
        build_time=format_epoch(meta.build_epoch),
        build_time_age=epoch_age(meta.build_epoch, now=now),
        total_networks=len(df),
        ipv4_networks=int(by_version.get(4, 0)),
        ipv6_networks=int(by_version.get(6, 0)),
        networks=entries if verbose else None,
    )


def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


def render_json(report: VerifyReport) -> str:
    payload = asdict(report)
    if report.networks is None:
        payload.pop("networks")
    return json.dumps(_jsonable(payload), indent=2, ensure_ascii=False)


def render_text(report: VerifyReport, reporter: Reporter) -> str:
    r = reporter
    lines = [
        f"{r.info('MMDB file:')} {report.filepath}",
        f"  Build Timestamp: {r.success(report.build_time)}",
        "",
        r.info("Database Information:"),
        f"  Binary Format: {r.success(report.binary_format)}",
        f"  IP Version: {r.success(report.ip_version)}",
        f"  Record Size: {r.success(report.record_size)} bits",
        f"  Node Count: {r.success(report.node_count)}",
        "",
        r.info("Metadata:"),
        f"  Database Type: {r.success(report.database_type)}",
        "  Description:",
    ]
    for lang, desc in report.description.items():
        lines.append(f"    {r.success(lang)}: {desc}")
    if report.languages:
        lines.append(f"  Languages: {r.success(', '.join(report.languages))}")

    lines += [
        "",
        r.info("Statistics:"),
        f"  Total Networks: {r.success(report.total_networks)}",
        f"  IPv4 Networks: {r.success(report.ipv4_networks)}",
        f"  IPv6 Networks: {r.success(report.ipv6_networks)}",
    ]

    if report.networks is not None:
        lines += ["", r.info("Networks:")]
        for entry in report.networks:
            lines.append(f"[{entry.position}]  {r.success(entry.network)}: {entry.data}")

    return "\n".join(lines)
