import json
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Union

from loguru import logger


class LocalStore:
    """A string key/value store persisted as one JSON object on disk.

    Mirrors the browser localStorage API the logo cache was designed around:
    several independent users may share the file, so every operation reads the
    current content and only touches its own key.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                # Corrupt file: start over, the next write replaces it
                logger.error(f"Local store {self.path} is corrupt, ignoring it: {e}")
                return {}
        if not isinstance(data, dict):
            logger.error(f"Local store {self.path} does not hold a JSON object, ignoring it.")
            return {}
        return data

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Atomic write to avoid partial/corrupt files
        fd, tmp_path = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                json.dump(data, tmp_file, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def remove_items(self, keys: List[str]) -> None:
        data = self._load()
        removed = [k for k in keys if data.pop(k, None) is not None]
        if removed:
            self._save(data)

    def keys(self) -> List[str]:
        return list(self._load().keys())
