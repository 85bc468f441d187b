"""Stable public API for programmatic usage."""

from __future__ import annotations

from .certificate import DigestBundle, certificate_to_dane, extract, load_pem_chain, read_chain
from .config import HookConfig, ServiceAccountKey, build_config, load_service_account_key
from .errors import (
    ConfigError,
    DaneHookError,
    DigestError,
    ExitCodes,
    FileReadError,
    ParseError,
    TransportError,
)
from .reconcile import reconcile
from .records import ChangeSet, ExistingRecord
from .runner import HookResult, run_hook
from .zone_client import CloudDnsClient

__all__ = [
    "ChangeSet",
    "CloudDnsClient",
    "ConfigError",
    "DaneHookError",
    "DigestBundle",
    "DigestError",
    "ExistingRecord",
    "ExitCodes",
    "FileReadError",
    "HookConfig",
    "HookResult",
    "ParseError",
    "ServiceAccountKey",
    "TransportError",
    "build_config",
    "certificate_to_dane",
    "extract",
    "load_pem_chain",
    "load_service_account_key",
    "read_chain",
    "reconcile",
    "run_hook",
]
