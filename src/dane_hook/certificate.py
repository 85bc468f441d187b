"""Certificate chain loading and DANE digest extraction."""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Sequence

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from .errors import DigestError, FileReadError, ParseError

LOGGER = logging.getLogger(__name__)

DEFAULT_CHAIN_FILENAMES = ("fullchain.pem", "cert.pem")

SELECTOR_FULL_CERTIFICATE = 0
SELECTOR_PUBLIC_KEY = 1

MATCHING_EXACT = 0
MATCHING_SHA256 = 1
MATCHING_SHA512 = 2

USAGE_DANE_TA = 2
USAGE_DANE_EE = 3

_PEM_CERTIFICATE_RE = re.compile(
    b"-----BEGIN CERTIFICATE-----.+?-----END CERTIFICATE-----",
    re.DOTALL,
)


def normalize_dns_name(name: str) -> str:
    """Return ``name`` as a fully-qualified DNS name with one trailing dot.

    Args:
        name (str): DNS name with or without a trailing dot.

    Returns:
        str: DNS name ending with exactly the dot it already had, or one added.
    """
    if name.endswith("."):
        return name
    return name + "."


def _selector_bytes(certificate: x509.Certificate, selector: int) -> bytes:
    """Build the bytes a TLSA selector refers to.

    Args:
        certificate (x509.Certificate): Parsed certificate.
        selector (int): TLSA selector value.

    Returns:
        bytes: Full DER certificate or DER SubjectPublicKeyInfo.

    Raises:
        DigestError: If the selector is unsupported or the key cannot be serialized.
    """
    if selector == SELECTOR_FULL_CERTIFICATE:
        return certificate.public_bytes(Encoding.DER)
    if selector == SELECTOR_PUBLIC_KEY:
        try:
            return certificate.public_key().public_bytes(
                encoding=Encoding.DER,
                format=PublicFormat.SubjectPublicKeyInfo,
            )
        except (UnsupportedAlgorithm, ValueError) as err:
            raise DigestError(f"Cannot extract public key from certificate: {err}") from err
    raise DigestError(f"Unsupported TLSA selector {selector}")


def certificate_to_dane(
    certificate: x509.Certificate,
    selector: int = SELECTOR_PUBLIC_KEY,
    matching_type: int = MATCHING_SHA256,
) -> str:
    """Compute the certificate association data for a TLSA record.

    Args:
        certificate (x509.Certificate): Parsed certificate.
        selector (int): TLSA selector (0 full certificate, 1 public key).
        matching_type (int): TLSA matching type (0 exact, 1 SHA-256, 2 SHA-512).

    Returns:
        str: Lowercase hex association data.

    Raises:
        DigestError: If the selector or matching type is unsupported, or the
            public key cannot be serialized.
    """
    selected = _selector_bytes(certificate, selector)
    if matching_type == MATCHING_EXACT:
        return selected.hex()
    if matching_type == MATCHING_SHA256:
        return hashlib.sha256(selected).hexdigest()
    if matching_type == MATCHING_SHA512:
        return hashlib.sha512(selected).hexdigest()
    raise DigestError(f"Unsupported TLSA matching_type {matching_type}")


def is_certificate_authority(certificate: x509.Certificate) -> bool:
    """Return the basic constraints CA flag of a certificate.

    Args:
        certificate (x509.Certificate): Parsed certificate.

    Returns:
        bool: True when the certificate asserts ``CA:TRUE``.
    """
    try:
        constraints = certificate.extensions.get_extension_for_class(x509.BasicConstraints)
    except x509.ExtensionNotFound:
        return False
    return bool(constraints.value.ca)


def subject_dns_names(certificate: x509.Certificate) -> List[str]:
    """Return subject alternative DNS names in certificate order.

    Args:
        certificate (x509.Certificate): Parsed certificate.

    Returns:
        List[str]: DNS names, empty when the extension is absent.
    """
    try:
        san = certificate.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return []
    return list(san.value.get_values_for_type(x509.DNSName))


def _render_rrdata(end_entity: str, trust_anchor: str) -> List[str]:
    """Render DANE-EE and DANE-TA rdata lines for two digests.

    Args:
        end_entity (str): Leaf certificate digest.
        trust_anchor (str): CA certificate digest.

    Returns:
        List[str]: ``3 1 1`` line followed by the ``2 1 1`` line.
    """
    return [
        f"{USAGE_DANE_EE} {SELECTOR_PUBLIC_KEY} {MATCHING_SHA256} {end_entity}",
        f"{USAGE_DANE_TA} {SELECTOR_PUBLIC_KEY} {MATCHING_SHA256} {trust_anchor}",
    ]


@dataclass
class DigestBundle:
    """DANE data derived from one certificate chain.

    Attributes:
        trust_anchor (str): Digest of the CA certificate, empty if none was seen.
        end_entity (str): Digest of the leaf certificate, empty if none was seen.
        dns_names (List[str]): Dot-terminated SAN DNS names of the leaf.
    """

    trust_anchor: str = ""
    end_entity: str = ""
    dns_names: List[str] = field(default_factory=list)

    def read_certificate(self, certificate: x509.Certificate) -> None:
        """Classify one certificate and record its digest.

        A CA certificate replaces ``trust_anchor``. Any other certificate
        replaces ``end_entity`` and appends its SAN DNS names.

        Args:
            certificate (x509.Certificate): Parsed certificate.

        Raises:
            DigestError: If the digest cannot be computed.
        """
        dane = certificate_to_dane(certificate)
        if is_certificate_authority(certificate):
            LOGGER.debug("Trust anchor %s: %s", certificate.subject.rfc4514_string(), dane)
            self.trust_anchor = dane
            return
        LOGGER.debug("End entity %s: %s", certificate.subject.rfc4514_string(), dane)
        self.end_entity = dane
        self.dns_names.extend(normalize_dns_name(name) for name in subject_dns_names(certificate))

    def make_rrdata(self) -> List[str]:
        """Render the TLSA rdata for this bundle.

        Returns:
            List[str]: DANE-EE line followed by the DANE-TA line.
        """
        return _render_rrdata(self.end_entity, self.trust_anchor)


def extract(chain: Iterable[x509.Certificate]) -> DigestBundle:
    """Build a digest bundle from certificates in file order.

    Args:
        chain (Iterable[x509.Certificate]): Parsed certificates.

    Returns:
        DigestBundle: Populated bundle.

    Raises:
        DigestError: If any certificate cannot be digested.
    """
    bundle = DigestBundle()
    for certificate in chain:
        bundle.read_certificate(certificate)
    return bundle


def load_pem_chain(data: bytes) -> List[x509.Certificate]:
    """Decode every PEM certificate block in ``data``.

    Args:
        data (bytes): PEM file contents.

    Returns:
        List[x509.Certificate]: Certificates in the order they appear.

    Raises:
        ParseError: If no certificate is present or a block is malformed.
    """
    blocks = _PEM_CERTIFICATE_RE.findall(data)
    if not blocks:
        raise ParseError("No PEM certificates found")
    certificates: List[x509.Certificate] = []
    for index, block in enumerate(blocks):
        try:
            certificate = x509.load_pem_x509_certificate(block)
            # Extensions are decoded lazily; force it so bad DER fails here.
            certificate.extensions
        except (ValueError, x509.DuplicateExtension) as err:
            raise ParseError(f"Malformed certificate #{index + 1}: {err}") from err
        certificates.append(certificate)
    return certificates


def _chain_path(lineage: Path, filenames: Sequence[str]) -> Path:
    """Pick the chain file inside a lineage directory.

    Args:
        lineage (Path): Lineage directory or chain file.
        filenames (Sequence[str]): Candidate file names in preference order.

    Returns:
        Path: First candidate that exists, else the first candidate.
    """
    if lineage.is_file():
        return lineage
    for filename in filenames:
        candidate = lineage / filename
        if candidate.is_file():
            return candidate
    return lineage / filenames[0]


def read_chain(
    lineage: Path | str,
    filenames: Sequence[str] = DEFAULT_CHAIN_FILENAMES,
) -> List[x509.Certificate]:
    """Read and parse the certificate chain of a lineage.

    Args:
        lineage (Path | str): Lineage directory (or a chain file path).
        filenames (Sequence[str]): Candidate chain file names.

    Returns:
        List[x509.Certificate]: Parsed certificates.

    Raises:
        FileReadError: If the chain file is missing or unreadable.
        ParseError: If the file does not hold valid certificates.
    """
    path = _chain_path(Path(lineage).expanduser(), filenames)
    LOGGER.info("Reading certificate chain %s", path)
    try:
        data = path.read_bytes()
    except OSError as err:
        raise FileReadError(path, err) from err
    return load_pem_chain(data)


__all__ = [
    "DEFAULT_CHAIN_FILENAMES",
    "DigestBundle",
    "certificate_to_dane",
    "extract",
    "is_certificate_authority",
    "load_pem_chain",
    "normalize_dns_name",
    "read_chain",
    "subject_dns_names",
]
