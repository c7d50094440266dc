from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from querydeck.models.session import HistoryEntry


def results_to_json(results: Sequence[dict[str, Any]]) -> str:
    """Serialize result rows as indented JSON, preserving row and column order.

    Values JSON cannot represent (timestamps, decimals, bytes) are rendered with ``str``.
    """
    return json.dumps(list(results), indent=2, ensure_ascii=False, default=str)


def history_to_json(entries: Sequence[HistoryEntry]) -> str:
    payload = [
        {
            "query": entry.query,
            "timestamp": entry.timestamp.isoformat(),
            "results": entry.results,
        }
        for entry in entries
    ]
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str) + "\n"
