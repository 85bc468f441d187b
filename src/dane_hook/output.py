"""Render hook results for the terminal."""

from __future__ import annotations

import json
from typing import List

from .records import ExistingRecord
from .runner import HookResult


def _record_lines(prefix: str, record: ExistingRecord) -> List[str]:
    """Render one record set as zone-file style lines.

    Args:
        prefix (str): ``-`` for deletions, ``+`` for additions.
        record (ExistingRecord): Record to render.

    Returns:
        List[str]: One line per rdata entry.
    """
    rrdatas = record.rrdatas or ("",)
    return [f"{prefix} {record.name} {record.ttl} IN {record.type} {rdata}" for rdata in rrdatas]


def build_json_payload(result: HookResult) -> dict:
    """Build the JSON payload for a hook result.

    Args:
        result (HookResult): Hook outcome.

    Returns:
        dict: Serializable payload.
    """
    return {
        "status": result.status,
        "change_id": result.change_id,
        "certificate": {
            "end_entity": result.bundle.end_entity,
            "trust_anchor": result.bundle.trust_anchor,
            "dns_names": list(result.bundle.dns_names),
        },
        "change": result.change.to_api(),
    }


def to_json(result: HookResult) -> str:
    """Render a hook result as indented JSON."""
    return json.dumps(build_json_payload(result), indent=2)


def to_text(result: HookResult, *, show_changes: bool = False) -> str:
    """Render a hook result as plain text.

    The last line is always the change status.

    Args:
        result (HookResult): Hook outcome.
        show_changes (bool): Prefix the status with the change set.

    Returns:
        str: Text output.
    """
    lines: List[str] = []
    if show_changes:
        for record in result.change.deletions:
            lines.extend(_record_lines("-", record))
        for record in result.change.additions:
            lines.extend(_record_lines("+", record))
    lines.append(result.status)
    return "\n".join(lines)


__all__ = ["build_json_payload", "to_json", "to_text"]
