"""Parsing helpers for CLI inputs."""

from __future__ import annotations

import argparse


def _parse_port(value: str) -> int:
    """Parse a TCP/UDP port number from CLI input.

    Args:
        value (str): String value to parse.

    Returns:
        int: Port between 1 and 65535.

    Raises:
        argparse.ArgumentTypeError: If the value is invalid or out of range.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("Port must be an integer between 1 and 65535") from exc
    if parsed < 1 or parsed > 65535:
        raise argparse.ArgumentTypeError("Port must be between 1 and 65535")
    return parsed


def _parse_positive_int(value: str, *, label: str) -> int:
    """Parse a positive integer from CLI input.

    Args:
        value (str): String value to parse.
        label (str): Name used in error messages.

    Returns:
        int: Parsed value greater than zero.

    Raises:
        argparse.ArgumentTypeError: If the value is not a positive integer.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{label} must be a positive integer") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"{label} must be a positive integer")
    return parsed
