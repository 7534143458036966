"""File-based key-value storage adapter."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class FileKeyValueStore:
    """
    File-based key-value storage.

    Implements KeyValueStore protocol. Each key gets a JSON file.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path_for_key(self, key: str) -> Path:
        """Get the file path for a given key."""
        return self.data_dir / f"{key}.json"

    def get(self, key: str) -> str | None:
        """Read the value for a key. Returns None if not found."""
        path = self._path_for_key(key)
        if not path.exists():
            return None
        return path.read_text()

    def set(self, key: str, value: str) -> None:
        """Write/overwrite the value for a key."""
        path = self._path_for_key(key)
        # Write then rename so readers never see a half-written value
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(value)
        tmp.replace(path)
        logger.debug(f"Saved {key} ({len(value)} bytes)")
