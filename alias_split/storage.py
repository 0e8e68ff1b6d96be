"""JSON persistence helpers shared by the learned dictionary and the usage ledger."""

import json
import os
from pathlib import Path
from typing import Any


def write_json_atomic(path: Path, data: Any) -> None:
    """
    Write JSON to path via a sibling .tmp file and os.replace.

    Readers see either the old file or the complete new one.

    Raises:
        OSError: If the file cannot be written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + '.tmp')
    try:
        with open(tmp, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2, sort_keys=True)
            f.write('\n')
        os.replace(tmp, path)
    finally:
        if tmp.exists():
            tmp.unlink()
