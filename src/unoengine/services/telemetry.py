from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Mapping


@dataclass
class TelemetryService:
    path: Path

    def log(self, event_type: str, payload: Mapping[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        rec = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "type": event_type,
            "payload": dict(payload),
        }
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")

    def listener(self, **context: object) -> Callable[[dict[str, object]], None]:
        """Adapt this sink to the engine's event-listener signature.

        Extra keyword arguments (e.g. ``match_id``) are merged into every payload.
        """

        def _on_event(event: dict[str, object]) -> None:
            payload = {k: v for k, v in event.items() if k != "type"}
            payload.update(context)
            self.log(str(event.get("type", "UNKNOWN")), payload)

        return _on_event
