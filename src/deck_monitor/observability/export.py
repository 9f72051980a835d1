import json
from typing import Any

from deck_monitor.detection.session import MonitoringSession


def export_session_json(session: MonitoringSession) -> str:
    latest = session.store.latest()
    changes = session.change_log.entries()

    payload: dict[str, Any] = {
        "state": session.state.value,
        "snapshotCount": session.store.count(),
        "metrics": dict(session.metrics.counters),
        "latestSnapshot": latest.to_json_dict() if latest else None,
        "changes": [c.to_json_dict() for c in changes],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)
