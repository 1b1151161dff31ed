"""Run artifact helpers for inspecting an extracted surface."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any


def write_library_snapshot(
    library: dict[str, Any],
    output_path: str,
    source: str | None = None,
) -> str:
    """Write the extracted Library (dict form) as JSON and return its path.

    List order is preserved so snapshots of the same input diff cleanly.
    """
    directory = os.path.dirname(os.path.abspath(output_path))
    os.makedirs(directory, exist_ok=True)
    payload = {
        "generated_utc": datetime.now(timezone.utc).isoformat(),
        "source": source,
        "library": library,
    }
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
        f.write("\n")
    return output_path
