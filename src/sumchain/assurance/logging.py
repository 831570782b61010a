from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable


def canonical_json(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"))


def compute_checksum(payload: dict[str, Any]) -> str:
    encoded = canonical_json(payload).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def _utc_now_iso_z() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class LogEvent:
    schema_version: str
    ts: str
    action: str
    outcome: str
    details: dict[str, Any]
    checksum: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "ts": self.ts,
            "action": self.action,
            "outcome": self.outcome,
            "details": self.details,
            "checksum": self.checksum,
        }


def build_log_event(
    schema_version: str,
    ts: str,
    action: str,
    outcome: str,
    details: dict[str, Any],
    checksum_fn: Callable[[dict[str, Any]], str] | None = None,
) -> LogEvent:
    payload = {
        "schema_version": schema_version,
        "ts": ts,
        "action": action,
        "outcome": outcome,
        "details": details,
    }
    checksum_function = checksum_fn or compute_checksum
    checksum = checksum_function(payload)
    return LogEvent(
        schema_version=schema_version,
        ts=ts,
        action=action,
        outcome=outcome,
        details=details,
        checksum=checksum,
    )


def log_path(cfg: Any) -> Path:
    return Path(cfg.home) / cfg.log_path


def append_jsonl_log_event(
    cfg: Any,
    action: str,
    outcome: str,
    details: dict[str, Any],
    ts: str | None = None,
) -> dict[str, Any]:
    event = build_log_event(
        schema_version=cfg.log_schema_version,
        ts=ts or _utc_now_iso_z(),
        action=action,
        outcome=outcome,
        details=details,
    ).to_dict()

    path = log_path(cfg)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as log_file:
        log_file.write(canonical_json(event) + "\n")

    return event


__all__ = [
    "LogEvent",
    "canonical_json",
    "compute_checksum",
    "build_log_event",
    "log_path",
    "append_jsonl_log_event",
]
