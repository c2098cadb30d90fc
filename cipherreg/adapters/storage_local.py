from __future__ import annotations
import json, os
from typing import Any, Dict


class StorageLocal:
    """Local filesystem storage for client settings (JSON)."""

    SETTINGS_FILE = "settings.json"

    def __init__(self, root_dir: str = ".") -> None:
        self.root = root_dir

    @property
    def settings_path(self) -> str:
        return os.path.join(self.root, self.SETTINGS_FILE)

    def save_settings(self, settings: Dict[str, Any]) -> None:
        os.makedirs(self.root, exist_ok=True)
        # api keys stay out of the file; they come from the environment
        payload = {k: v for k, v in settings.items() if k != "api_key"}
        with open(self.settings_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2, sort_keys=True)

    def load_settings(self) -> Dict[str, Any]:
        if not os.path.exists(self.settings_path):
            return {}
        with open(self.settings_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.settings_path} must contain a JSON object.")
        return data
