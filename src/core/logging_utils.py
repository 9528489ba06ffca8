# logging_utils.py
from __future__ import annotations

import json
from typing import Any, Dict, TextIO, Optional


class JsonLinesLogger:
    """
    Ghi log dạng JSON Lines:
    - Mỗi event 1 dòng JSON.
    - Thời gian lấy từ clock của node (có thể inject trong test), không gọi time trực tiếp.
    - sort_keys=True để format deterministic.
    """

    def __init__(self, file: TextIO):
        self._file = file

    def log_event(
        self,
        *,
        time: float,
        source: str,
        event: str,
        height: Optional[int] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        record: Dict[str, Any] = {
            "time": round(time, 6),
            "source": source,
            "event": event,
        }
        if height is not None:
            record["height"] = height
        if extra:
            # method, params, snapshot id, error code,...
            record.update(extra)

        line = json.dumps(record, sort_keys=True, default=str)
        self._file.write(line + "\n")
        self._file.flush()
