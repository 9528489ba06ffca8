import json
from typing import Any


def canonical_json(obj: Any) -> bytes:
    # sorted keys, no whitespace: same logical content -> same bytes
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")
