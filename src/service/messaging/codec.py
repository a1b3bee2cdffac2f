"""
Wire codec for proposal events.

Wire format (JSON object):
    {
        "id": "<uuid>",
        "type": "STEP_APPROVED",
        "proposalId": 42,
        "payload": {"role": "PEER_REVIEW", "approver": "alice", "nextStep": 1},
        "at": "2024-05-01T10:00:00+00:00"
    }

Typed payload variants exist only inside the process. This module is the
single place where they are converted to and from the untyped payload map.
Unknown payload keys survive a decode/encode cycle through `extra`.
"""

import json
from dataclasses import fields
from datetime import datetime, timezone
from typing import Any, Dict

from src.domain.entities import (
    PAYLOAD_TYPES,
    EventPayload,
    ProposalEvent,
    ProposalEventType,
)
from src.domain.exceptions import EventDecodeException

# Python attribute -> wire key, where they differ
_WIRE_NAMES = {"next_step": "nextStep"}
_ATTR_NAMES = {wire: attr for attr, wire in _WIRE_NAMES.items()}


def payload_to_dict(payload: EventPayload) -> Dict[str, Any]:
    """Flatten a payload variant into its wire map."""
    data: Dict[str, Any] = dict(payload.extra)
    for f in fields(payload):
        if f.name == "extra":
            continue
        data[_WIRE_NAMES.get(f.name, f.name)] = getattr(payload, f.name)
    return data


def payload_from_dict(event_type: ProposalEventType, data: Dict[str, Any]) -> EventPayload:
    """Build the payload variant for an event type from its wire map."""
    cls = PAYLOAD_TYPES[event_type]
    known = {f.name for f in fields(cls) if f.name != "extra"}

    kwargs: Dict[str, Any] = {}
    extra: Dict[str, Any] = {}
    for key, value in data.items():
        attr = _ATTR_NAMES.get(key, key)
        if attr in known:
            kwargs[attr] = value
        else:
            extra[key] = value

    try:
        return cls(extra=extra, **kwargs)
    except TypeError as e:
        raise EventDecodeException(
            f"payload for {event_type.value} is missing fields: {e}"
        )


def event_to_dict(event: ProposalEvent) -> Dict[str, Any]:
    """Convert an event to its wire map."""
    return {
        "id": event.id,
        "type": event.type.value,
        "proposalId": event.proposal_id,
        "payload": payload_to_dict(event.payload),
        "at": event.at.isoformat(),
    }


def encode_event(event: ProposalEvent) -> bytes:
    """Serialize an event to UTF-8 JSON bytes."""
    return json.dumps(event_to_dict(event), separators=(",", ":")).encode("utf-8")


def decode_event(raw: bytes) -> ProposalEvent:
    """
    Deserialize wire bytes into a ProposalEvent.

    Raises:
        EventDecodeException: If the bytes are not a well-formed event
    """
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise EventDecodeException(f"malformed event body: {e}")

    if not isinstance(data, dict):
        raise EventDecodeException("event body must be a JSON object")

    try:
        event_type = ProposalEventType(data["type"])
    except KeyError:
        raise EventDecodeException("event is missing 'type'")
    except ValueError:
        raise EventDecodeException(f"unknown event type: {data['type']!r}")

    proposal_id = data.get("proposalId")
    if isinstance(proposal_id, bool) or not isinstance(proposal_id, int):
        raise EventDecodeException(f"invalid proposalId: {proposal_id!r}")

    payload = data.get("payload") or {}
    if not isinstance(payload, dict):
        raise EventDecodeException("event payload must be a JSON object")

    at = _parse_timestamp(data.get("at"))

    return ProposalEvent(
        id=data.get("id"),
        type=event_type,
        proposal_id=proposal_id,
        payload=payload_from_dict(event_type, payload),
        at=at,
    )


def audit_line(event: ProposalEvent) -> str:
    """Human-readable line written to the audit-line topic."""
    payload = json.dumps(payload_to_dict(event.payload), sort_keys=True)
    return (
        f"[{event.at.isoformat()}] {event.type.value} "
        f"proposalId={event.proposal_id} payload={payload}"
    )


def _parse_timestamp(value) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if not isinstance(value, str):
        raise EventDecodeException(f"invalid event timestamp: {value!r}")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise EventDecodeException(f"invalid event timestamp: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
