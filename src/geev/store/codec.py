"""Snapshot codec for persisting store state as a string."""

from __future__ import annotations

import json
from typing import Any

import structlog

from geev.store.schemas import AppState

logger = structlog.get_logger()

# The logged-in user is session-derived and never written to the snapshot.
PERSISTED_FIELDS = frozenset(AppState.model_fields) - {"user"}


def serialize_state(state: AppState) -> str:
    """Serialize ``state`` to JSON, without ``user``; likes and burns become sorted arrays."""
    return state.model_dump_json(exclude={"user"})


def deserialize_state(raw: str) -> dict[str, Any] | None:
    """Decode a snapshot into a validated partial state.

    Only fields present in the snapshot are returned, plus ``likes`` and
    ``burns`` which default to empty sets. Returns None (and logs) if the
    snapshot is not valid JSON or does not match the state schema.
    """
    try:
        parsed = json.loads(raw)
        if not isinstance(parsed, dict):
            msg = f"snapshot must be a JSON object, got {type(parsed).__name__}"
            raise TypeError(msg)

        fields = {k: v for k, v in parsed.items() if k in PERSISTED_FIELDS}
        fields["likes"] = fields.get("likes") or []
        fields["burns"] = fields.get("burns") or []
        snapshot = AppState.model_validate(fields)
    except (ValueError, TypeError) as exc:
        logger.warning("state_deserialize_failed", error=str(exc))
        return None

    return {name: getattr(snapshot, name) for name in fields}
