from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any, Optional, Dict

from app.config import Settings
from app.services.repo.json_repo import _locked  # reuse existing cross-platform lock

log = logging.getLogger("app.metrics")


class MetricsLogger:
    """Append-only JSONL logger for latency metrics under data/.

    Writes one JSON object per line with fields:
      - ts: ISO timestamp (UTC)
      - kind: "latency"
      - name: short name (e.g., "resolve_recipe", "checkout")
      - duration_ms: float
      - extra: optional dict with contextual fields
    """

    def __init__(self, settings: Optional[Settings] = None, filename: str = "latency_log.jsonl") -> None:
        self.settings = settings or Settings()
        self.path = os.path.join(self.settings.data_dir, filename)

    def log_latency(
        self,
        name: str,
        duration_ms: float,
        extra: Optional[Dict[str, Any]] = None,
        store_id: Optional[str] = None,
    ) -> None:
        entry = {
            "ts": datetime.utcnow().isoformat(),
            "kind": "latency",
            "name": name,
            "duration_ms": float(duration_ms),
        }
        if store_id:
            entry["store"] = store_id
        if extra:
            entry["extra"] = extra
        line = (json.dumps(entry, ensure_ascii=False, separators=(",", ":")) + "\n").encode("utf-8")
        try:
            with _locked(self.path) as f:
                f.seek(0, os.SEEK_END)
                f.write(line)
                f.flush()
                os.fsync(f.fileno())
        except Exception as e:
            # Metrics should never impact user flows.
            log.debug("dropped latency metric %s: %s", name, e)
