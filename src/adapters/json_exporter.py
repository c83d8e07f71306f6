"""JSON export of flow results.

The CLI hands flow results to downstream tools (storage uploads, product
forms) as plain JSON files with the wire (camelCase) field names.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel


def export_result_json(*, result: BaseModel, output_path: Path) -> Path:
    """Export a flow result as UTF-8 JSON with a stable layout."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = result.model_dump(mode="json", by_alias=True)
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
