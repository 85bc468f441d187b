"""Argument parser helpers for the CLI."""

from __future__ import annotations

import argparse
import functools
import logging
import time

from .. import __version__
from .parsing import _parse_port, _parse_positive_int


def _setup_logging(verbosity: int) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbosity (int): Verbosity count from CLI flags.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.Formatter.converter = time.gmtime  # UTC timestamps
    logging.basicConfig(
        level=level,
        format="%(asctime)sZ [%(levelname)s] %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    parser = argparse.ArgumentParser(
        prog="dane-hook",
        description=(
            "Publish DANE TLSA records for a renewed certificate to Google Cloud DNS. "
            "Meant to run as a certbot deploy hook, which sets RENEWED_LINEAGE and "
            "RENEWED_DOMAINS."
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    zone_group = parser.add_argument_group("Zone")
    certificate_group = parser.add_argument_group("Certificate")
    record_group = parser.add_argument_group("New records")
    output_group = parser.add_argument_group("Output")
    logging_group = parser.add_argument_group("Logging")
    misc_group = parser.add_argument_group("Misc")

    zone_group.add_argument(
        "-k",
        "--key-file",
        dest="key_file",
        default=None,
        help="Path to the service account JSON key file (env DANE_HOOK_KEY_FILE)",
    )
    zone_group.add_argument(
        "-z",
        "--zone",
        default=None,
        help="Name of the Cloud DNS managed zone (env DANE_HOOK_ZONE)",
    )
    zone_group.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Compute the change without applying it",
    )
    certificate_group.add_argument(
        "--lineage",
        default=None,
        help="Certificate lineage directory (env RENEWED_LINEAGE)",
    )
    certificate_group.add_argument(
        "--domain",
        dest="domains",
        action="append",
        default=None,
        help="Renewed domain (repeatable; env RENEWED_DOMAINS)",
    )
    record_group.add_argument(
        "--port",
        type=_parse_port,
        default=None,
        help="Port label for new TLSA records (default 443)",
    )
    record_group.add_argument(
        "--ttl",
        type=functools.partial(_parse_positive_int, label="TTL"),
        default=None,
        help="TTL for new TLSA records (default 300)",
    )
    misc_group.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="YAML config file (default: first config.yaml in the config directories)",
    )
    misc_group.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show version and exit",
    )
    output_group.add_argument(
        "--output",
        choices=["text", "json"],
        default="text",
        help="Output format",
    )
    logging_group.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (use -vv for debug)",
    )
    return parser
