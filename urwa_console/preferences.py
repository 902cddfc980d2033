"""
Persisted console preferences (selected network).
"""
import os
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import portalocker

logger = logging.getLogger(__name__)

SELECTED_NETWORK_KEY = "selectedNetwork"


class PreferenceStore:
    """Process-safe JSON key/value store"""

    def __init__(self, store_path: Optional[str] = None):
        # Use URWA_PREFERENCES_PATH env var or default to ~/.urwa-console/preferences.json
        if store_path:
            self.store_path = Path(store_path)
        else:
            self.store_path = Path(os.environ.get(
                "URWA_PREFERENCES_PATH",
                os.path.expanduser("~/.urwa-console/preferences.json")
            ))

    def _get_lock_path(self) -> str:
        return str(self.store_path) + '.lock'

    def read(self) -> Dict[str, Any]:
        """Read all preferences; a missing or corrupt file reads as empty"""
        if not self.store_path.parent.exists():
            return {}
        with portalocker.Lock(self._get_lock_path(), timeout=10):
            try:
                with open(self.store_path, 'r') as f:
                    data = json.load(f)
            except FileNotFoundError:
                return {}
            except json.JSONDecodeError:
                logger.warning(f"Ignoring unreadable preferences file {self.store_path}")
                return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self.read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        with portalocker.Lock(self._get_lock_path(), timeout=10):
            try:
                with open(self.store_path, 'r') as f:
                    data = json.load(f)
            except (FileNotFoundError, json.JSONDecodeError):
                data = {}
            data[key] = value
            with open(self.store_path, 'w') as f:
                json.dump(data, f, indent=2)

    def get_selected_network(self, default: Optional[str] = None) -> Optional[str]:
        return self.get(SELECTED_NETWORK_KEY, default)

    def set_selected_network(self, network: str) -> None:
        self.set(SELECTED_NETWORK_KEY, network)
