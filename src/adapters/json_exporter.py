"""JSON export of a run result.

Why JSON:
- Lets cron wrappers and dashboards read the outcome without parsing logs.
- Keeps a record of what was deleted, since deletions cannot be undone.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import RunResult


def export_run_report(*, result: RunResult, output_path: Path) -> Path:
    """Write `RunResult` as UTF-8 JSON with a stable layout."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = result.model_dump(mode="json")
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
