# azlok/storage.py
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

from .config import settings

logger = logging.getLogger(__name__)

# Keys shared with the web storefront's browser storage
TOKEN_KEY = "azlok-token"
LEGACY_TOKEN_KEY = "token"
USER_KEY = "user"
CART_KEY = "azlok-cart"


class LocalStorage:
    """
    String key/value store persisted as a single JSON object on disk.

    Mirrors browser localStorage: values are strings, callers encode
    structured data themselves. A missing file is an empty store; a corrupt
    one is logged and treated as empty.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path or settings.STORAGE_PATH).expanduser()
        self._data: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read local storage at {self.path}: {e}")
            return {}
        if not isinstance(raw, dict):
            logger.warning(f"Ignoring local storage at {self.path}: expected a JSON object")
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh, indent=2)
            os.replace(tmp, self.path)
        except OSError:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = str(value)
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    def clear(self) -> None:
        self._data = {}
        self._flush()

    def keys(self):
        return list(self._data.keys())

    def auth_token(self) -> Optional[str]:
        return self.get_item(TOKEN_KEY) or self.get_item(LEGACY_TOKEN_KEY)
