# mmdbimport/build/writer.py

from __future__ import annotations

import ipaddress
from pathlib import Path
from typing import Any, Union

from mmdb_writer import MMDBWriter, TreeWriter
from netaddr import AddrFormatError, IPSet

from mmdbimport.config import RECORD_SIZES
from mmdbimport.errors import BuildError
from mmdbimport.models import Metadata
from mmdbimport.processing.validate import parse_cidr
from mmdbimport.utils.logging import get_logger

log = get_logger(__name__)

PathLike = Union[str, Path]


class FixedRecordSizeTreeWriter(TreeWriter):
    """TreeWriter that keeps the caller's record size instead of the smallest one that fits."""

    def __init__(self, tree, meta, record_size: int, int_type="auto", float_type="f64"):
        super().__init__(tree, meta, int_type, float_type)
        self.requested_record_size = record_size

    def _adjust_record_size(self) -> None:
        super()._adjust_record_size()
        if self.record_size > self.requested_record_size:
            raise BuildError(
                f"database needs {self.record_size}-bit records, "
                f"--record-size {self.requested_record_size} is too small"
            )
        self.record_size = self.requested_record_size
        self.data_offset = self.record_size * 2 / 8 * self._node_counter


class _Writer(MMDBWriter):
    def __init__(self, *, languages, record_size: int, build_epoch: int, **kwargs):
        # MMDBWriter insists on a description per language; ours only
        # requires the reverse, so languages are attached after the check.
        super().__init__(languages=None, **kwargs)
        self.languages = list(languages)
        self.record_size = record_size
        self.build_epoch = build_epoch

    def _build_meta(self) -> dict[str, Any]:
        meta = super()._build_meta()
        meta["build_epoch"] = self.build_epoch
        return meta

    def to_db_file(self, filename: str) -> None:
        FixedRecordSizeTreeWriter(
            self.tree,
            self._build_meta(),
            self.record_size,
            self.int_type,
            self.float_type,
        ).write(filename)


class DatabaseBuilder:
    """
    Accumulates (network, typed value) pairs and serializes them to an MMDB file.

    IPv6 databases also accept IPv4 networks; they are stored under ::/96,
    which is where readers look IPv4 addresses up.
    """

    def __init__(self, metadata: Metadata, ip_version: int, record_size: int):
        if record_size not in RECORD_SIZES:
            raise BuildError(f"record size must be one of {RECORD_SIZES}, got {record_size}")
        if metadata.build_epoch is None:
            raise BuildError("build_epoch must be set before building")

        self.ip_version = ip_version
        self.record_size = record_size
        try:
            self._writer = _Writer(
                ip_version=ip_version,
                database_type=metadata.database_type,
                languages=metadata.languages,
                description=dict(metadata.description),
                ipv4_compatible=(ip_version == 6),
                record_size=record_size,
                build_epoch=metadata.build_epoch,
            )
        except ValueError as e:
            raise BuildError(f"creating MMDB writer: {e}") from e

    def _networks(self, network: str) -> list[str]:
        try:
            parsed = parse_cidr(network)
        except ValueError as e:
            raise BuildError(f"parsing network {network}: {e}") from e

        if self.ip_version == 4 and parsed.version == 6:
            mapped = parsed.network_address.ipv4_mapped
            if mapped is not None and parsed.prefixlen >= 96:
                parsed = ipaddress.ip_network(f"{mapped}/{parsed.prefixlen - 96}")
        if parsed.prefixlen == 0 and not (parsed.version == 4 and self.ip_version == 6):
            # the writer cannot place a leaf at the root; store both halves
            return [str(half) for half in parsed.subnets(prefixlen_diff=1)]
        return [str(parsed)]

    def insert(self, network: str, value: Any) -> None:
        cidrs = self._networks(network)
        try:
            # one set per half, IPSet would merge them back into the /0
            for cidr in cidrs:
                self._writer.insert_network(IPSet([cidr]), value)
        except (AddrFormatError, IndexError, ValueError, TypeError) as e:
            raise BuildError(f"inserting record: {e}") from e

    def write(self, path: PathLike) -> None:
        out_path = Path(path).expanduser()
        log.info("Writing MMDB (ip_version=%d, record_size=%d) to %s",
                 self.ip_version, self.record_size, out_path)
        try:
            self._writer.to_db_file(str(out_path))
        except OSError as e:
            raise BuildError(f"creating output file: {e}") from e
        except (ValueError, TypeError) as e:
            raise BuildError(f"encoding database: {e}") from e


def new_builder(metadata: Metadata, ip_version: int, record_size: int) -> DatabaseBuilder:
    return DatabaseBuilder(metadata, ip_version=ip_version, record_size=record_size)
