"""Shared helpers for hook tests."""

from __future__ import annotations

import datetime
import hashlib
import json

import requests
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from cryptography.x509.oid import NameOID

from dane_hook.records import ExistingRecord


def make_certificate(
    *,
    common_name: str = "example.com",
    dns_names: list[str] | None = None,
    ca: bool | None = False,
    key: ec.EllipticCurvePrivateKey | None = None,
    extensions: list[x509.ExtensionType] | None = None,
) -> x509.Certificate:
    """Build a self-signed test certificate.

    Args:
        common_name (str): Subject common name.
        dns_names (list[str] | None): SAN DNS names; no SAN extension when None.
        ca (bool | None): Basic constraints CA flag; no extension when None.
        key (ec.EllipticCurvePrivateKey | None): Signing key, generated when omitted.
        extensions (list[x509.ExtensionType] | None): Extra non-critical extensions.

    Returns:
        x509.Certificate: Signed certificate.
    """
    key = key or ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    builder = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=90))
    )
    if ca is not None:
        builder = builder.add_extension(
            x509.BasicConstraints(ca=ca, path_length=None), critical=True
        )
    if dns_names is not None:
        builder = builder.add_extension(
            x509.SubjectAlternativeName([x509.DNSName(item) for item in dns_names]),
            critical=False,
        )
    for extension in extensions or []:
        builder = builder.add_extension(extension, critical=False)
    return builder.sign(key, hashes.SHA256())


def to_pem(*certificates: x509.Certificate) -> bytes:
    """Concatenate certificates into one PEM blob."""
    return b"".join(certificate.public_bytes(Encoding.PEM) for certificate in certificates)


def spki_sha256(certificate: x509.Certificate) -> str:
    """Return the SHA-256 hex digest of a certificate's SubjectPublicKeyInfo."""
    spki = certificate.public_key().public_bytes(Encoding.DER, PublicFormat.SubjectPublicKeyInfo)
    return hashlib.sha256(spki).hexdigest()


def tlsa_record(name: str, ttl: int = 3600, rrdatas: tuple[str, ...] = ("3 1 1 old",)):
    """Build an existing TLSA record."""
    return ExistingRecord(name=name, type="TLSA", ttl=ttl, rrdatas=rrdatas)


class FakeZoneClient:
    """In-memory zone client recording applied changes."""

    def __init__(self, records=None, status: str = "pending", error: Exception | None = None):
        self.records = list(records or [])
        self.status = status
        self.error = error
        self.applied = []
        self.listed = []

    def list_records(self, zone):
        self.listed.append(zone)
        if self.error is not None:
            raise self.error
        return list(self.records)

    def apply_change(self, zone, change):
        self.applied.append((zone, change))
        return {"id": "7", "status": self.status}


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, payload=None, status_code: int = 200, text: str | None = None):
        self._payload = payload
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(payload)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Session that replays queued responses and records requests."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response
