# mmdbimport/processing/ipversion.py

from __future__ import annotations

from typing import Iterable

from mmdbimport.config import DEFAULT_IP_VERSION
from mmdbimport.models import Record
from mmdbimport.processing.validate import parse_cidr
from mmdbimport.utils.logging import get_logger

log = get_logger(__name__)


def is_ipv4_network(network) -> bool:
    """True for IPv4 networks and IPv4-mapped IPv6 ones (::ffff:a.b.c.d/96+)."""
    if network.version == 4:
        return True
    return network.prefixlen >= 96 and network.network_address.ipv4_mapped is not None


def detect_ip_version(records: Iterable[Record]) -> int:
    """
    Pick the database IP version from the records' networks.

    Unparseable networks are skipped; validation reports them separately.
    Any IPv6 network (or nothing parseable at all) means 6, which can also
    hold IPv4. Only IPv4 means 4.
    """
    has_v4 = False
    has_v6 = False

    for record in records:
        try:
            network = parse_cidr(record.network)
        except ValueError:
            continue

        if is_ipv4_network(network):
            has_v4 = True
        else:
            has_v6 = True

        if has_v4 and has_v6:
            break

    if has_v6:
        version = 6
    elif has_v4:
        version = 4
    else:
        version = DEFAULT_IP_VERSION

    log.debug("IP families seen: v4=%s v6=%s -> version %d", has_v4, has_v6, version)
    return version
