"""Cloud DNS resource record sets and change sets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Tuple

RECORD_KIND = "dns#resourceRecordSet"
CHANGE_KIND = "dns#change"
TLSA_TYPE = "TLSA"

_RECORD_FIELDS = frozenset({"kind", "name", "type", "ttl", "rrdatas"})


@dataclass(frozen=True)
class ExistingRecord:
    """A resource record set as returned by the provider.

    Attributes:
        name (str): Owner name, e.g. ``_443._tcp.example.com.``.
        type (str): Record type.
        ttl (int): Time to live in seconds.
        rrdatas (Tuple[str, ...]): Record data strings.
        kind (str): Provider resource kind.
        extra (Mapping[str, object]): Other provider fields (``signatureRrdatas``,
            ``routingPolicy``, ...) echoed back unchanged by ``to_api``.
    """

    name: str
    type: str
    ttl: int
    rrdatas: Tuple[str, ...] = ()
    kind: str = RECORD_KIND
    extra: Mapping[str, object] = field(default_factory=dict, hash=False, repr=False)

    @classmethod
    def from_api(cls, payload: Mapping[str, object]) -> "ExistingRecord":
        """Build a record from a ``ResourceRecordSet`` JSON object.

        Args:
            payload (Mapping[str, object]): Decoded API object.

        Returns:
            ExistingRecord: Parsed record.
        """
        return cls(
            name=str(payload.get("name", "")),
            type=str(payload.get("type", "")),
            ttl=int(payload.get("ttl", 0)),
            rrdatas=tuple(str(item) for item in payload.get("rrdatas", []) or []),
            kind=str(payload.get("kind", RECORD_KIND)),
            extra={key: value for key, value in payload.items() if key not in _RECORD_FIELDS},
        )

    def to_api(self) -> dict:
        """Render the record as a ``ResourceRecordSet`` JSON object.

        Returns:
            dict: API payload.
        """
        payload = dict(self.extra)
        payload.update(
            {
                "kind": self.kind,
                "name": self.name,
                "type": self.type,
                "ttl": self.ttl,
                "rrdatas": list(self.rrdatas),
            }
        )
        return payload


@dataclass(frozen=True)
class ChangeSet:
    """Deletions and additions to apply to a zone.

    Attributes:
        deletions (Tuple[ExistingRecord, ...]): Records being replaced.
        additions (Tuple[ExistingRecord, ...]): New or replacement records.
    """

    deletions: Tuple[ExistingRecord, ...] = field(default_factory=tuple)
    additions: Tuple[ExistingRecord, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        """Return whether the change set holds no operations."""
        return not self.deletions and not self.additions

    def to_api(self) -> dict:
        """Render the change set as a Cloud DNS ``Change`` body.

        Returns:
            dict: API payload.
        """
        return {
            "kind": CHANGE_KIND,
            "additions": [record.to_api() for record in self.additions],
            "deletions": [record.to_api() for record in self.deletions],
        }


def records_from_api(payloads: List[Mapping[str, object]]) -> List[ExistingRecord]:
    """Parse a list of ``ResourceRecordSet`` objects.

    Args:
        payloads (List[Mapping[str, object]]): Decoded API objects.

    Returns:
        List[ExistingRecord]: Parsed records in input order.
    """
    return [ExistingRecord.from_api(payload) for payload in payloads]


__all__ = [
    "CHANGE_KIND",
    "ChangeSet",
    "ExistingRecord",
    "RECORD_KIND",
    "TLSA_TYPE",
    "records_from_api",
]
