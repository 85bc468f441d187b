"""Error types raised by the hook and their exit codes."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class DaneHookError(RuntimeError):
    """Base class for all hook failures."""


class ConfigError(DaneHookError):
    """Raised when configuration or the credential file is unusable."""


class FileReadError(DaneHookError):
    """Raised when the certificate chain file cannot be read."""

    def __init__(self, path: Path | str, error: Optional[Exception] = None) -> None:
        """Initialize a chain file read error.

        Args:
            path (Path | str): Path that could not be read.
            error (Optional[Exception]): Underlying exception, if any.
        """
        message = f"Cannot read certificate chain {path}"
        if error is not None:
            message = f"{message}: {error}"
        super().__init__(message)
        self.path = Path(path)
        self.error = error


class ParseError(DaneHookError):
    """Raised when PEM or DER certificate data is malformed."""


class DigestError(DaneHookError):
    """Raised when a certificate cannot be turned into a DANE digest."""


class TransportError(DaneHookError):
    """Raised when a Cloud DNS API call fails."""

    def __init__(self, operation: str, zone: str, error: object) -> None:
        """Initialize a transport error.

        Args:
            operation (str): API operation that failed (``list`` or ``apply``).
            zone (str): Managed zone name.
            error (object): Underlying exception or error description.
        """
        super().__init__(f"{operation} failed for zone {zone}: {error}")
        self.operation = operation
        self.zone = zone
        self.error = error


@dataclass(frozen=True)
class ExitCodes:
    """Process exit codes per failure kind.

    Attributes:
        OK (int): Change applied, skipped, or dry run completed.
        CONFIG (int): Configuration or credential problems.
        FILE_READ (int): Certificate chain could not be read.
        PARSE (int): Certificate chain could not be parsed.
        DIGEST (int): A certificate could not be digested.
        TRANSPORT (int): Cloud DNS API failure.
    """

    OK: int = 0
    CONFIG: int = 2
    FILE_READ: int = 3
    PARSE: int = 4
    DIGEST: int = 5
    TRANSPORT: int = 6


def exit_code_for_error(error: BaseException) -> int:
    """Map an exception to a process exit code.

    Args:
        error (BaseException): Exception raised while running the hook.

    Returns:
        int: Non-zero exit code for the error kind.
    """
    if isinstance(error, ConfigError):
        return ExitCodes.CONFIG
    if isinstance(error, FileReadError):
        return ExitCodes.FILE_READ
    if isinstance(error, ParseError):
        return ExitCodes.PARSE
    if isinstance(error, DigestError):
        return ExitCodes.DIGEST
    if isinstance(error, TransportError):
        return ExitCodes.TRANSPORT
    return 1


__all__ = [
    "ConfigError",
    "DaneHookError",
    "DigestError",
    "ExitCodes",
    "FileReadError",
    "ParseError",
    "TransportError",
    "exit_code_for_error",
]
