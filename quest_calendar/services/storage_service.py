# File: quest_calendar/services/storage_service.py
"""
Persistence of the planner snapshot as a single JSON blob.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from quest_calendar.utils.logger import setup_logger
from quest_calendar.models import PlannerSnapshot, snapshot_from_dict

logger = setup_logger(__name__)


def snapshot_to_blob(snapshot: PlannerSnapshot) -> str:
    return json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False)


def snapshot_from_blob(blob: Optional[str]) -> PlannerSnapshot:
    """
    Parse a stored blob.

    Missing or corrupt data yields an empty snapshot with a logged warning,
    so a damaged file never prevents the planner from starting.
    """
    if not blob:
        logger.info("No stored planner data; starting empty")
        return PlannerSnapshot()

    try:
        data = json.loads(blob)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return snapshot_from_dict(data)
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        logger.warning(f"Stored planner data is corrupt, starting empty: {e}")
        return PlannerSnapshot()


class JsonFileStore:
    """BlobStore writing UTF-8 JSON to a file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            logger.debug(f"No data file at {self.path}")
            return None
        with open(self.path, 'r', encoding='utf-8') as f:
            return f.read()

    def save(self, blob: str) -> None:
        """Write atomically: temp file in the same directory, then replace."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(blob)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
        logger.debug(f"Saved planner data to {self.path}")
