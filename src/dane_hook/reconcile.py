"""Build the TLSA change set for a zone from a digest bundle."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from .certificate import DigestBundle
from .records import RECORD_KIND, TLSA_TYPE, ChangeSet, ExistingRecord

LOGGER = logging.getLogger(__name__)

DEFAULT_PORT = 443
DEFAULT_PROTOCOL = "tcp"
DEFAULT_TTL = 300


def owner_hostname(name: str) -> str:
    """Strip the ``_port._proto`` labels from a TLSA owner name.

    Args:
        name (str): Owner name such as ``_443._tcp.example.com.``.

    Returns:
        str: Remaining host name, e.g. ``example.com.``.

    Raises:
        ValueError: If the name has fewer than three dot-separated segments.
    """
    parts = name.split(".", 2)
    if len(parts) < 3:
        raise ValueError(f"TLSA owner name '{name}' is not of the form _port._proto.host")
    return parts[2]


def group_by_owner(records: Iterable[ExistingRecord]) -> Dict[str, List[ExistingRecord]]:
    """Group TLSA records by owner host name, keeping input order.

    Args:
        records (Iterable[ExistingRecord]): Records listed from the zone.

    Returns:
        Dict[str, List[ExistingRecord]]: TLSA records keyed by host name.

    Raises:
        ValueError: If a TLSA record has a malformed owner name.
    """
    grouped: Dict[str, List[ExistingRecord]] = {}
    for record in records:
        if record.type != TLSA_TYPE:
            continue
        grouped.setdefault(owner_hostname(record.name), []).append(record)
    return grouped


def tlsa_owner_name(host: str, port: int = DEFAULT_PORT, protocol: str = DEFAULT_PROTOCOL) -> str:
    """Return the TLSA owner name for a host.

    Args:
        host (str): Dot-terminated host name.
        port (int): Service port.
        protocol (str): Transport protocol label without underscore.

    Returns:
        str: Owner name such as ``_443._tcp.example.com.``.
    """
    return f"_{port}._{protocol}.{host}"


def reconcile(
    existing: Iterable[ExistingRecord],
    bundle: DigestBundle,
    *,
    port: int = DEFAULT_PORT,
    protocol: str = DEFAULT_PROTOCOL,
    ttl: int = DEFAULT_TTL,
) -> ChangeSet:
    """Compute deletions and additions that publish ``bundle`` in the zone.

    Every existing TLSA record owned by a certificate name is replaced one for
    one. Names without a record get a new one at ``_port._protocol.name``.

    Args:
        existing (Iterable[ExistingRecord]): Records currently in the zone.
        bundle (DigestBundle): Digests and names of the renewed certificate.
        port (int): Port for newly created owner names.
        protocol (str): Protocol for newly created owner names.
        ttl (int): TTL for newly created records.

    Returns:
        ChangeSet: Changes in record order, then name order.

    Raises:
        ValueError: If a TLSA record has a malformed owner name.
    """
    grouped = group_by_owner(existing)
    rrdatas = tuple(bundle.make_rrdata())
    deletions: List[ExistingRecord] = []
    additions: List[ExistingRecord] = []

    for name in bundle.dns_names:
        owned = grouped.get(name)
        if owned:
            for record in owned:
                LOGGER.debug("Replacing TLSA record %s", record.name)
                deletions.append(record)
                additions.append(
                    ExistingRecord(
                        kind=record.kind,
                        name=record.name,
                        ttl=record.ttl,
                        type=record.type,
                        rrdatas=rrdatas,
                    )
                )
            continue
        owner = tlsa_owner_name(name, port, protocol)
        LOGGER.debug("Adding TLSA record %s", owner)
        additions.append(
            ExistingRecord(
                kind=RECORD_KIND,
                name=owner,
                ttl=ttl,
                type=TLSA_TYPE,
                rrdatas=rrdatas,
            )
        )

    return ChangeSet(deletions=tuple(deletions), additions=tuple(additions))


__all__ = [
    "DEFAULT_PORT",
    "DEFAULT_PROTOCOL",
    "DEFAULT_TTL",
    "group_by_owner",
    "owner_hostname",
    "reconcile",
    "tlsa_owner_name",
]
