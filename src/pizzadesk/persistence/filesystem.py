"""On-disk archive of closing exports under ``<data_root>/outputs``."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from ..config import settings

RUN_PREFIX = "closing"
RUN_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S%fZ"


class ArchiveStorage:
    """One directory per archived closing, named ``closing_<UTC timestamp>``."""

    def __init__(self, root: Path | None = None) -> None:
        self.output_root = (root or settings.data_root).resolve() / "outputs"

    def open_run(self, now: datetime | None = None) -> Path:
        stamp = (now or datetime.now(timezone.utc)).astimezone(timezone.utc).strftime(RUN_TIMESTAMP_FORMAT)
        run_dir = self.output_root / f"{RUN_PREFIX}_{stamp}"
        # exist_ok=False: two archives never share a directory
        run_dir.mkdir(parents=True, exist_ok=False)
        return run_dir

    def save(self, run_dir: Path, file_name: str, content: str | bytes | Mapping[str, Any]) -> Path:
        """Write one export file; mappings are stored as pretty-printed JSON."""
        target = run_dir / file_name
        if isinstance(content, bytes):
            target.write_bytes(content)
        elif isinstance(content, str):
            with target.open("w", encoding="utf-8", newline="") as handle:
                handle.write(content)
        else:
            target.write_text(json.dumps(content, ensure_ascii=False, indent=2), encoding="utf-8")
        return target

    def save_all(self, files: Mapping[str, str | bytes | Mapping[str, Any]], now: datetime | None = None) -> Path:
        run_dir = self.open_run(now)
        for file_name, content in files.items():
            self.save(run_dir, file_name, content)
        return run_dir
