"""
Persistence for the session token.

Only one value is stored: an opaque token under TOKEN_STORAGE_KEY. A missing
or unreadable store always reads as "no token".
"""

import json
import sys
from pathlib import Path
from typing import Dict, Optional

from oralvis.config import TOKEN_FILE, TOKEN_STORAGE_KEY


class FileTokenStore:
    """Keeps the token in a small JSON file so it survives restarts."""

    def __init__(self, path=TOKEN_FILE, key: str = TOKEN_STORAGE_KEY):
        self.path = Path(path)
        self.key = key

    def load(self) -> Optional[str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            print(f"[auth] Ignoring unreadable token store {self.path}: {e}", file=sys.stderr)
            return None
        token = data.get(self.key) if isinstance(data, dict) else None
        return token if isinstance(token, str) and token else None

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({self.key: token}), encoding="utf-8")

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


class MemoryTokenStore:
    """In-process store; nothing survives a restart."""

    def __init__(self, token: Optional[str] = None, key: str = TOKEN_STORAGE_KEY):
        self.key = key
        self._data: Dict[str, str] = {key: token} if token else {}

    def load(self) -> Optional[str]:
        token = self._data.get(self.key)
        return token if isinstance(token, str) and token else None

    def save(self, token: str) -> None:
        self._data[self.key] = token

    def clear(self) -> None:
        self._data.pop(self.key, None)
