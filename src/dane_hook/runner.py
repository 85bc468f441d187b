"""Run one certificate renewal hook invocation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

from .certificate import DigestBundle, extract, read_chain
from .config import HookConfig, ServiceAccountKey, load_service_account_key
from .errors import DaneHookError
from .reconcile import reconcile
from .records import ChangeSet, ExistingRecord
from .zone_client import CloudDnsClient

LOGGER = logging.getLogger(__name__)

STATUS_DRY_RUN = "dry-run"
STATUS_UNCHANGED = "unchanged"


class ZoneClient(Protocol):
    """Interface the runner needs from a DNS provider client."""

    def list_records(self, zone: str) -> Sequence[ExistingRecord]:
        """List all record sets of a zone."""
        ...

    def apply_change(self, zone: str, change: ChangeSet) -> dict:
        """Apply a change set and return the provider's change resource."""
        ...


@dataclass(frozen=True)
class HookResult:
    """Outcome of a hook invocation.

    Attributes:
        bundle (DigestBundle): Digests and names read from the chain.
        change (ChangeSet): Change set computed for the zone.
        status (str): Provider change status, ``dry-run`` or ``unchanged``.
        change_id (Optional[str]): Provider change identifier when applied.
    """

    bundle: DigestBundle
    change: ChangeSet
    status: str
    change_id: Optional[str] = None


def _warn_on_domain_mismatch(bundle: DigestBundle, domains: Sequence[str]) -> None:
    """Log a warning when certificate names and renewed domains differ.

    Args:
        bundle (DigestBundle): Extracted bundle.
        domains (Sequence[str]): Domains reported by certbot.
    """
    if not domains:
        return
    expected = {name if name.endswith(".") else name + "." for name in domains}
    found = set(bundle.dns_names)
    if expected != found:
        LOGGER.warning(
            "Certificate names %s differ from renewed domains %s",
            sorted(found),
            sorted(expected),
        )


def run_hook(
    config: HookConfig,
    *,
    client: Optional[ZoneClient] = None,
    key_loader: Callable[..., ServiceAccountKey] = load_service_account_key,
    client_factory: Callable[[ServiceAccountKey], ZoneClient] = (
        CloudDnsClient.from_service_account
    ),
) -> HookResult:
    """Publish TLSA records for the renewed certificate of ``config.lineage``.

    Args:
        config (HookConfig): Invocation settings.
        client (Optional[ZoneClient]): Zone client; built from the key file when omitted.
        key_loader (Callable[..., ServiceAccountKey]): Key file loader.
        client_factory (Callable[[ServiceAccountKey], ZoneClient]): Client builder.

    Returns:
        HookResult: Bundle, change set and status.

    Raises:
        DaneHookError: On any read, parse, digest, config or transport failure.
    """
    bundle = extract(read_chain(config.lineage, config.chain_filenames))
    LOGGER.info(
        "Certificate names: %s",
        ", ".join(bundle.dns_names) if bundle.dns_names else "(none)",
    )
    LOGGER.debug("DANE-EE %s DANE-TA %s", bundle.end_entity, bundle.trust_anchor)
    _warn_on_domain_mismatch(bundle, config.domains)

    if client is None:
        client = client_factory(key_loader(config.key_file))

    records = client.list_records(config.zone)
    try:
        change = reconcile(
            records,
            bundle,
            port=config.port,
            protocol=config.protocol,
            ttl=config.ttl,
        )
    except ValueError as err:
        raise DaneHookError(f"Zone {config.zone} holds a malformed TLSA record: {err}") from err

    if config.dry_run:
        LOGGER.info("Dry run, not applying change to zone %s", config.zone)
        return HookResult(bundle=bundle, change=change, status=STATUS_DRY_RUN)
    if change.is_empty:
        LOGGER.warning("Nothing to change in zone %s", config.zone)
        return HookResult(bundle=bundle, change=change, status=STATUS_UNCHANGED)

    response = client.apply_change(config.zone, change)
    status = str(response.get("status", ""))
    LOGGER.info("Change %s is %s", response.get("id"), status)
    return HookResult(
        bundle=bundle,
        change=change,
        status=status,
        change_id=response.get("id"),
    )


__all__ = ["HookResult", "STATUS_DRY_RUN", "STATUS_UNCHANGED", "ZoneClient", "run_hook"]
